import logging
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFound, Conflict
from app.modules.audit.service import AuditService
from app.modules.clinics.service import ClinicMembership
from app.modules.patients.repository import PatientRepository
from app.modules.patients.schemas import PatientCreate
from app.modules.patients.models import Patient

logger = logging.getLogger(__name__)

ALLOWED_ROLES_FOR_CREATE = ("ADMIN", "DOCTOR", "NURSE", "RECEPTIONIST")
ALLOWED_ROLES_FOR_DELETE = ("ADMIN",)
ALLOWED_ROLES_FOR_RESTORE = ("ADMIN",)

class PatientService:
    def __init__(self, session: AsyncSession):
        self.repo = PatientRepository(session)
        self.audit = AuditService(session)
        self.session = session

    async def create(self, ctx: ClinicMembership, payload: PatientCreate, request: Request | None = None) -> Patient:
        data = payload.model_dump(exclude_unset=True)
        if data.get("curp") and await self.repo.find_by_curp(ctx.clinic_id, data["curp"]):
            raise Conflict(f"CURP {data['curp']} is already registered")
        obj = await self.repo.create(ctx.clinic_id, **data)
        await self.audit.log(ctx.clinic_id, ctx.user_id, "CREATE", "Patient", str(obj.id), obj.full_name, request)
        await self.session.commit()
        return obj

    async def get(self, ctx: ClinicMembership, patient_id: int, request: Request | None = None) -> Patient:
        obj = await self.repo.get(ctx.clinic_id, patient_id)
        if not obj:
            raise NotFound("Patient not found")
        await self.audit.log(ctx.clinic_id, ctx.user_id, "READ", "Patient", str(obj.id), obj.full_name, request)
        await self.session.commit()
        return obj

    async def list(self, ctx: ClinicMembership, search: str | None = None, limit: int = 50, offset: int = 0):
        return await self.repo.list(ctx.clinic_id, search, limit, offset)

    async def delete(self, ctx: ClinicMembership, patient_id: int, request: Request | None = None) -> None:
        obj = await self.repo.get(ctx.clinic_id, patient_id)
        if not obj:
            raise NotFound("Patient not found")
        await self.repo.soft_delete(obj)
        await self.audit.log(ctx.clinic_id, ctx.user_id, "DELETE", "Patient", str(obj.id), obj.full_name, request)
        await self.session.commit()

    async def restore(self, ctx: ClinicMembership, patient_id: int, request: Request | None = None) -> Patient:
        obj = await self.repo.get_including_deleted(ctx.clinic_id, patient_id)
        if not obj or obj.deleted_at is None:
            raise NotFound("Patient not found or not deleted")
        await self.repo.restore(obj)
        await self.audit.log(ctx.clinic_id, ctx.user_id, "UPDATE", "Patient", str(obj.id), obj.full_name, request)
        await self.session.commit()
        logger.info(f"Patient {obj.id} restored by {ctx.user_id}")
        return obj
