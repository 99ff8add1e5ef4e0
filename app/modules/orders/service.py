import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFound, ValidationFailed
from app.modules.audit.service import AuditService
from app.modules.clinics.repository import ClinicRepository
from app.modules.clinics.service import ClinicMembership
from app.modules.orders.repository import OrderRepository
from app.modules.orders.schemas import LabOrderCreate, ImagingOrderCreate, OrderStatusChange
from app.modules.patients.repository import PatientRepository

logger = logging.getLogger(__name__)

ENTITY_TYPES = {"lab": "LabOrder", "imaging": "ImagingOrder"}

class OrderService:
    def __init__(self, session: AsyncSession, kind: str):
        self.session = session
        self.kind = kind
        self.orders = OrderRepository(session, kind)
        self.patients = PatientRepository(session)
        self.clinics = ClinicRepository(session)

    async def create(self, ctx: ClinicMembership, payload: LabOrderCreate | ImagingOrderCreate):
        if not await self.patients.get(ctx.clinic_id, payload.patient_id):
            raise NotFound("Patient not found")
        if not await self.clinics.is_doctor_of(payload.doctor_id, ctx.clinic_id):
            raise ValidationFailed("Invalid data", {"doctorId": "Doctor not found in this clinic"})
        obj = await self.orders.create(ctx.clinic_id, **payload.model_dump(exclude_unset=True))
        await AuditService(self.session).log(ctx.clinic_id, ctx.user_id, "CREATE", ENTITY_TYPES[self.kind], str(obj.id))
        await self.session.commit()
        return obj

    async def list(self, ctx: ClinicMembership, **filters):
        return await self.orders.list(ctx.clinic_id, **filters)

    async def change_status(self, ctx: ClinicMembership, order_id: int, payload: OrderStatusChange):
        obj = await self.orders.get(ctx.clinic_id, order_id)
        if not obj:
            raise NotFound("Order not found")
        obj.status = payload.status
        if payload.summary is not None:
            if self.kind == "lab":
                obj.results_summary = payload.summary
            else:
                obj.findings = payload.summary
        await AuditService(self.session).log(ctx.clinic_id, ctx.user_id, "UPDATE", ENTITY_TYPES[self.kind], str(obj.id), payload.status)
        await self.session.commit()
        logger.info(f"{ENTITY_TYPES[self.kind]} {obj.id} -> {payload.status}")
        return obj
