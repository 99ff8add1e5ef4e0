from datetime import datetime
from pydantic import BaseModel, Field
from app.core.schemas import StrId, CamelOut

class ClinicMembershipOut(BaseModel):
    clinicId: StrId
    clinicName: str
    role: str

class MemberOut(CamelOut):
    id: StrId
    userId: str
    name: str
    email: str
    role: str
    specialty: str | None = None
    phone: str | None = None
    isActive: bool
    joinedAt: datetime

class MembersOut(BaseModel):
    members: list[MemberOut] = Field(default_factory=list)
