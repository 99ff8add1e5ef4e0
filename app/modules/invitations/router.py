from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_db
from app.core.security import get_required_identity, require_roles, Identity
from app.modules.clinics.service import ClinicMembership
from app.modules.invitations.schemas import (
    InvitationCreate, InvitationAccept, InvitationOut, InvitationCreated, InvitationList,
    InvitationCheckOut, InvitationAcceptOut,
)
from app.modules.invitations.service import InvitationService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_db)) -> InvitationService:
    return InvitationService(session)

def _out(inv, status: str) -> InvitationOut:
    return InvitationOut(
        id=inv.id, email=inv.email, role=inv.role, status=status, token=inv.token,
        expiresAt=inv.expires_at, acceptedAt=inv.accepted_at, createdAt=inv.created_at,
    )

@router.get("/invitations", response_model=InvitationList)
async def list_invitations(
    ctx: ClinicMembership = Depends(require_roles("ADMIN")),
    service: InvitationService = Depends(svc),
):
    return InvitationList(invitations=[_out(inv, status) for inv, status in await service.list(ctx.clinic_id)])

@router.post("/invitations", response_model=InvitationCreated)
async def create_invitation(
    payload: InvitationCreate,
    identity: Identity = Depends(get_required_identity),
    ctx: ClinicMembership = Depends(require_roles("ADMIN")),
    service: InvitationService = Depends(svc),
):
    inv = await service.create(ctx, identity.name, payload)
    return InvitationCreated(invitation=_out(inv, inv.status))

@router.get("/invitations/{token}/check", response_model=InvitationCheckOut)
async def check_invitation(token: str, service: InvitationService = Depends(svc)):
    return await service.check(token)

@router.post("/invitations/{token}/accept", response_model=InvitationAcceptOut)
async def accept_invitation(
    token: str,
    payload: InvitationAccept,
    service: InvitationService = Depends(svc),
):
    return await service.accept(token, payload)
