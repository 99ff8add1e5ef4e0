from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_db
from app.core.security import get_clinic_context, require_roles
from app.modules.clinics.service import ClinicMembership
from app.modules.orders.schemas import LabOrderCreate, ImagingOrderCreate, OrderStatusChange, OrderOut
from app.modules.orders.service import OrderService

router = APIRouter()

CLINICAL_ROLES = ("ADMIN", "DOCTOR", "NURSE")

def lab_svc(session: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(session, "lab")

def imaging_svc(session: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(session, "imaging")

STATUS_PATTERN = "^(PENDING|IN_PROGRESS|COMPLETED|CANCELLED)$"

# ---- Lab ----

@router.post("/lab-orders", response_model=OrderOut)
async def create_lab_order(
    payload: LabOrderCreate,
    ctx: ClinicMembership = Depends(require_roles(*CLINICAL_ROLES)),
    service: OrderService = Depends(lab_svc),
):
    return OrderOut.from_model("lab", await service.create(ctx, payload))

@router.get("/lab-orders", response_model=list[OrderOut])
async def list_lab_orders(
    status: str | None = Query(default=None, pattern=STATUS_PATTERN),
    patient_id: int | None = Query(default=None, alias="patientId"),
    limit: int = Query(50, ge=1, le=200), offset: int = Query(0, ge=0),
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: OrderService = Depends(lab_svc),
):
    rows = await service.list(ctx, status=status, patient_id=patient_id, limit=limit, offset=offset)
    return [OrderOut.from_model("lab", o) for o in rows]

@router.patch("/lab-orders/{order_id}/status", response_model=OrderOut)
async def change_lab_order_status(
    order_id: int,
    payload: OrderStatusChange,
    ctx: ClinicMembership = Depends(require_roles(*CLINICAL_ROLES)),
    service: OrderService = Depends(lab_svc),
):
    return OrderOut.from_model("lab", await service.change_status(ctx, order_id, payload))

# ---- Imaging ----

@router.post("/imaging-orders", response_model=OrderOut)
async def create_imaging_order(
    payload: ImagingOrderCreate,
    ctx: ClinicMembership = Depends(require_roles(*CLINICAL_ROLES)),
    service: OrderService = Depends(imaging_svc),
):
    return OrderOut.from_model("imaging", await service.create(ctx, payload))

@router.get("/imaging-orders", response_model=list[OrderOut])
async def list_imaging_orders(
    status: str | None = Query(default=None, pattern=STATUS_PATTERN),
    patient_id: int | None = Query(default=None, alias="patientId"),
    limit: int = Query(50, ge=1, le=200), offset: int = Query(0, ge=0),
    ctx: ClinicMembership = Depends(get_clinic_context),
    service: OrderService = Depends(imaging_svc),
):
    rows = await service.list(ctx, status=status, patient_id=patient_id, limit=limit, offset=offset)
    return [OrderOut.from_model("imaging", o) for o in rows]

@router.patch("/imaging-orders/{order_id}/status", response_model=OrderOut)
async def change_imaging_order_status(
    order_id: int,
    payload: OrderStatusChange,
    ctx: ClinicMembership = Depends(require_roles(*CLINICAL_ROLES)),
    service: OrderService = Depends(imaging_svc),
):
    return OrderOut.from_model("imaging", await service.change_status(ctx, order_id, payload))
