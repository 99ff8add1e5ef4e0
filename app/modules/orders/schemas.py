from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from app.core.schemas import StrId

class _OrderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    patient_id: int = Field(..., alias="patientId")
    doctor_id: str = Field(..., min_length=1, alias="doctorId")
    notes: str | None = None

class LabOrderCreate(_OrderCreate):
    tests: list[str] = Field(..., min_length=1)

class ImagingOrderCreate(_OrderCreate):
    study_type: str = Field(..., min_length=1, alias="studyType")
    body_area: str = Field(..., min_length=1, alias="bodyArea")

class OrderStatusChange(BaseModel):
    status: str = Field(..., pattern="^(PENDING|IN_PROGRESS|COMPLETED|CANCELLED)$")
    summary: str | None = None

class OrderOut(BaseModel):
    id: StrId
    kind: str
    clinicId: StrId
    patientId: StrId
    doctorId: str
    orderDate: datetime | None = None
    status: str
    notes: str | None = None
    tests: list[str] | None = None
    resultsSummary: str | None = None
    studyType: str | None = None
    bodyArea: str | None = None
    findings: str | None = None

    @classmethod
    def from_model(cls, kind: str, o) -> "OrderOut":
        return cls(
            id=o.id, kind=kind, clinicId=o.clinic_id, patientId=o.patient_id, doctorId=o.doctor_id,
            orderDate=o.order_date, status=o.status, notes=o.notes,
            tests=getattr(o, "tests", None), resultsSummary=getattr(o, "results_summary", None),
            studyType=getattr(o, "study_type", None), bodyArea=getattr(o, "body_area", None),
            findings=getattr(o, "findings", None),
        )
