from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from app.core.schemas import StrId

# ---- Portal ----

class AppointmentRequestCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str = Field(..., min_length=1)
    time: str = Field(..., min_length=1)
    doctor_id: str = Field(..., min_length=1, alias="doctorId")
    reason: str = Field(..., min_length=1)

class AppointmentRequestOut(BaseModel):
    id: StrId
    patientId: StrId
    clinicId: StrId
    requestedDate: datetime
    requestedTime: str
    requestedDoctorId: str
    reason: str
    status: str
    decidedBy: str | None = None
    decidedAt: datetime | None = None
    createdAt: datetime | None = None

    @classmethod
    def from_model(cls, obj) -> "AppointmentRequestOut":
        return cls(
            id=obj.id, patientId=obj.patient_id, clinicId=obj.clinic_id,
            requestedDate=obj.requested_date, requestedTime=obj.requested_time,
            requestedDoctorId=obj.requested_doctor_id, reason=obj.reason, status=obj.status,
            decidedBy=obj.decided_by, decidedAt=obj.decided_at, createdAt=obj.created_at,
        )

class AppointmentRequestSubmitted(BaseModel):
    success: bool = True
    message: str
    request: AppointmentRequestOut
