from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_db
from app.core.security import get_required_identity, get_clinic_context, Identity
from app.modules.clinics.schemas import ClinicMembershipOut, MemberOut, MembersOut
from app.modules.clinics.service import MembershipService, ClinicMembership

router = APIRouter()

def svc(session: AsyncSession = Depends(get_db)) -> MembershipService:
    return MembershipService(session)

@router.get("/clinics/me", response_model=ClinicMembershipOut)
async def my_clinic(ctx: ClinicMembership = Depends(get_clinic_context)):
    return ClinicMembershipOut(clinicId=ctx.clinic_id, clinicName=ctx.clinic_name, role=ctx.role)

@router.get("/clinics/{clinic_id}/members", response_model=MembersOut)
async def list_members(
    clinic_id: int,
    identity: Identity = Depends(get_required_identity),
    service: MembershipService = Depends(svc),
):
    rows = await service.list_members(identity.user_id, clinic_id)
    return MembersOut(members=[
        MemberOut(
            id=m.id, userId=u.id, name=u.name, email=u.email, role=m.role,
            specialty=u.specialty, phone=u.phone, isActive=u.is_active, joinedAt=m.joined_at,
        )
        for m, u in rows
    ])

@router.delete("/clinics/{clinic_id}/members/{member_id}")
async def remove_member(
    clinic_id: int,
    member_id: int,
    identity: Identity = Depends(get_required_identity),
    service: MembershipService = Depends(svc),
):
    await service.remove_member(identity.user_id, clinic_id, member_id)
    return {"success": True}
