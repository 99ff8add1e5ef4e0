from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_db
from app.core.security import get_clinic_context, require_roles
from app.modules.clinics.service import ClinicMembership
from app.modules.patients.schemas import PatientCreate, PatientOut
from app.modules.patients.service import (
    PatientService, ALLOWED_ROLES_FOR_CREATE, ALLOWED_ROLES_FOR_DELETE, ALLOWED_ROLES_FOR_RESTORE,
)

router = APIRouter()

def svc(session: AsyncSession = Depends(get_db)) -> PatientService:
    return PatientService(session)

@router.post("", response_model=PatientOut)
async def create_patient(
    payload: PatientCreate,
    request: Request,
    ctx: ClinicMembership = Depends(require_roles(*ALLOWED_ROLES_FOR_CREATE)),
    service: PatientService = Depends(svc),
):
    return PatientOut.from_model(await service.create(ctx, payload, request))

@router.get("", response_model=list[PatientOut])
async def list_patients(
    search: str | None = None,
    limit: int = Query(50, ge=1, le=200), offset: int = Query(0, ge=0),
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: PatientService = Depends(svc),
):
    return [PatientOut.from_model(p) for p in await service.list(ctx, search, limit, offset)]

@router.get("/{patient_id}", response_model=PatientOut)
async def get_patient(
    patient_id: int,
    request: Request,
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: PatientService = Depends(svc),
):
    return PatientOut.from_model(await service.get(ctx, patient_id, request))

@router.delete("/{patient_id}", status_code=204)
async def delete_patient(
    patient_id: int,
    request: Request,
    ctx: ClinicMembership = Depends(require_roles(*ALLOWED_ROLES_FOR_DELETE)),
    service: PatientService = Depends(svc),
):
    await service.delete(ctx, patient_id, request)

@router.patch("/{patient_id}/restore", response_model=PatientOut)
async def restore_patient(
    patient_id: int,
    request: Request,
    ctx: ClinicMembership = Depends(require_roles(*ALLOWED_ROLES_FOR_RESTORE)),
    service: PatientService = Depends(svc),
):
    return PatientOut.from_model(await service.restore(ctx, patient_id, request))
