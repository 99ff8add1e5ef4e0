from datetime import date, datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from app.core.schemas import StrId

class PatientCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., min_length=1, max_length=100, alias="firstName")
    last_name: str = Field(..., min_length=1, max_length=100, alias="lastName")
    middle_name: str | None = Field(default=None, alias="middleName")
    curp: str | None = Field(default=None, pattern="^[A-Z0-9]{18}$")
    birth_date: date | None = Field(default=None, alias="birthDate")
    gender: str | None = Field(default=None, pattern="^(MALE|FEMALE|OTHER)$")
    email: EmailStr | None = None
    phone: str | None = None
    mobile: str | None = None

class PatientOut(BaseModel):
    id: StrId
    clinicId: StrId
    firstName: str
    lastName: str
    middleName: str | None = None
    curp: str | None = None
    birthDate: date | None = None
    gender: str | None = None
    email: str | None = None
    phone: str | None = None
    mobile: str | None = None
    isActive: bool
    userId: str | None = None
    deletedAt: datetime | None = None
    createdAt: datetime | None = None

    @classmethod
    def from_model(cls, p) -> "PatientOut":
        return cls(
            id=p.id, clinicId=p.clinic_id, firstName=p.first_name, lastName=p.last_name,
            middleName=p.middle_name, curp=p.curp, birthDate=p.birth_date, gender=p.gender,
            email=p.email, phone=p.phone, mobile=p.mobile, isActive=p.is_active,
            userId=p.user_id, deletedAt=p.deleted_at, createdAt=p.created_at,
        )
