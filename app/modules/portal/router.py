from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.db import get_db
from app.core.security import get_clinic_context, get_required_portal_identity, PortalIdentity
from app.modules.clinics.service import ClinicMembership
from app.modules.portal.schemas import (
    PortalRegister, PortalRegistered, DoctorOut, DoctorList, ContactMessage, ContactSent,
)
from app.modules.portal.service import PortalService

router = APIRouter(prefix="/portal")

def svc(session: AsyncSession = Depends(get_db)) -> PortalService:
    return PortalService(session)

@router.post("/auth/register", response_model=PortalRegistered)
async def register(payload: PortalRegister, service: PortalService = Depends(svc)):
    return await service.register(payload)

@router.get("/doctors", response_model=DoctorList)
async def doctors(
    identity: PortalIdentity = Depends(get_required_portal_identity),
    service: PortalService = Depends(svc),
):
    rows = await service.doctors(identity)
    return DoctorList(doctors=[DoctorOut(id=u.id, name=u.name, specialty=u.specialty) for u in rows])

@router.post("/contact", response_model=ContactSent)
async def contact(
    payload: ContactMessage,
    identity: PortalIdentity = Depends(get_required_portal_identity),
    service: PortalService = Depends(svc),
):
    await service.contact(identity, payload)
    return ContactSent(message="Message sent")

@router.post("/patients/{user_id}/approve")
async def approve_patient(
    user_id: str,
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: PortalService = Depends(svc),
):
    await service.approve(ctx, user_id)
    return RedirectResponse(settings.PORTAL_PATIENTS_REDIRECT, status_code=303)
