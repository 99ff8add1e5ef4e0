from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_db
from app.core.security import get_required_portal_identity, get_clinic_context, PortalIdentity
from app.modules.appointments.schemas import (
    AppointmentRequestCreate, AppointmentRequestOut, AppointmentRequestSubmitted,
)
from app.modules.appointments.service import AppointmentRequestService
from app.modules.clinics.service import ClinicMembership

router = APIRouter()

def svc(session: AsyncSession = Depends(get_db)) -> AppointmentRequestService:
    return AppointmentRequestService(session)

# ---- Portal ----

@router.post("/portal/appointments/request", response_model=AppointmentRequestSubmitted)
async def request_appointment(
    payload: AppointmentRequestCreate,
    identity: PortalIdentity = Depends(get_required_portal_identity),
    service: AppointmentRequestService = Depends(svc),
):
    obj = await service.submit(identity, payload)
    return AppointmentRequestSubmitted(message="Appointment requested", request=AppointmentRequestOut.from_model(obj))

@router.get("/portal/appointments/requests", response_model=list[AppointmentRequestOut])
async def my_requests(
    limit: int = Query(50, ge=1, le=200), offset: int = Query(0, ge=0),
    identity: PortalIdentity = Depends(get_required_portal_identity),
    service: AppointmentRequestService = Depends(svc),
):
    return [AppointmentRequestOut.from_model(o) for o in await service.list_for_patient(identity, limit, offset)]

# ---- Staff ----

@router.get("/appointment-requests", response_model=list[AppointmentRequestOut])
async def list_requests(
    status: str | None = Query(default=None, pattern="^(PENDING|APPROVED|REJECTED)$"),
    limit: int = Query(50, ge=1, le=200), offset: int = Query(0, ge=0),
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: AppointmentRequestService = Depends(svc),
):
    return [AppointmentRequestOut.from_model(o) for o in await service.list_for_clinic(ctx, status=status, limit=limit, offset=offset)]

@router.post("/appointment-requests/{request_id}/approve", response_model=AppointmentRequestOut)
async def approve_request(
    request_id: int,
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: AppointmentRequestService = Depends(svc),
):
    return AppointmentRequestOut.from_model(await service.approve(ctx, request_id))

@router.post("/appointment-requests/{request_id}/reject", response_model=AppointmentRequestOut)
async def reject_request(
    request_id: int,
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: AppointmentRequestService = Depends(svc),
):
    return AppointmentRequestOut.from_model(await service.reject(ctx, request_id))
