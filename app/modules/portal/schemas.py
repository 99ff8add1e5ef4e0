from pydantic import BaseModel, EmailStr, Field

class PortalRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    confirmPassword: str
    firstName: str = Field(..., min_length=2)
    lastName: str = Field(..., min_length=2)
    phone: str | None = None
    curp: str | None = None

class PortalRegistered(BaseModel):
    success: bool = True
    message: str
    clinicName: str

class DoctorOut(BaseModel):
    id: str
    name: str
    specialty: str | None = None

class DoctorList(BaseModel):
    doctors: list[DoctorOut] = Field(default_factory=list)

class ContactMessage(BaseModel):
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)

class ContactSent(BaseModel):
    success: bool = True
    message: str
