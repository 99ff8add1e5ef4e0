from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from app.core.schemas import StrId

class InvitationCreate(BaseModel):
    email: EmailStr
    role: str = Field(..., pattern="^(DOCTOR|NURSE|RECEPTIONIST)$")

class InvitationAccept(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    password: str | None = Field(default=None, max_length=128)

class InvitationOut(BaseModel):
    id: StrId
    email: str
    role: str
    status: str
    token: str
    expiresAt: datetime
    acceptedAt: datetime | None = None
    createdAt: datetime | None = None

class InvitationCreated(BaseModel):
    success: bool = True
    invitation: InvitationOut

class InvitationList(BaseModel):
    invitations: list[InvitationOut]

class InvitationDetails(BaseModel):
    email: str
    role: str
    clinicName: str
    status: str
    expiresAt: datetime

class InvitationCheckOut(BaseModel):
    invitation: InvitationDetails
    existingUser: bool

class JoinedClinic(BaseModel):
    id: StrId
    name: str

class InvitationAcceptOut(BaseModel):
    success: bool = True
    message: str
    clinic: JoinedClinic
