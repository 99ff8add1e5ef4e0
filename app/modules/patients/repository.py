from typing import Sequence
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.base import utcnow
from app.modules.clinics.models import Clinic
from app.modules.patients.models import Patient

class PatientRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, clinic_id: int, **data) -> Patient:
        obj = Patient(clinic_id=clinic_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, clinic_id: int, patient_id: int) -> Patient | None:
        q = select(Patient).where(
            Patient.id == patient_id,
            Patient.clinic_id == clinic_id,
            Patient.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_including_deleted(self, clinic_id: int, patient_id: int) -> Patient | None:
        q = select(Patient).where(Patient.id == patient_id, Patient.clinic_id == clinic_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_by_user(self, clinic_id: int, user_id: str) -> Patient | None:
        q = select(Patient).where(Patient.user_id == user_id, Patient.clinic_id == clinic_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def find_by_curp(self, clinic_id: int, curp: str) -> Patient | None:
        q = select(Patient).where(Patient.clinic_id == clinic_id, Patient.curp == curp, Patient.deleted_at.is_(None))
        res = await self.session.execute(q)
        return res.scalars().first()

    async def find_for_portal(self, *, curp: str | None, phone: str | None) -> Patient | None:
        # CURP first, then phone/mobile; only patients of active clinics
        base = select(Patient).join(Clinic, Clinic.id == Patient.clinic_id).where(
            Clinic.is_active.is_(True), Patient.deleted_at.is_(None)
        )
        if curp:
            res = await self.session.execute(base.where(Patient.curp == curp).order_by(Patient.id))
            found = res.scalars().first()
            if found:
                return found
        if phone:
            res = await self.session.execute(
                base.where(or_(Patient.phone == phone, Patient.mobile == phone)).order_by(Patient.id)
            )
            return res.scalars().first()
        return None

    async def list(self, clinic_id: int, search: str | None = None, limit: int = 50, offset: int = 0) -> Sequence[Patient]:
        cond = [Patient.clinic_id == clinic_id, Patient.deleted_at.is_(None)]
        if search:
            like = f"%{search}%"
            cond.append(or_(Patient.first_name.ilike(like), Patient.last_name.ilike(like), Patient.curp.ilike(like)))
        q = select(Patient).where(*cond).order_by(Patient.created_at.desc(), Patient.id.desc()).limit(limit).offset(offset)
        res = await self.session.execute(q)
        return res.scalars().all()

    async def soft_delete(self, patient: Patient) -> Patient:
        patient.deleted_at = utcnow()
        await self.session.flush()
        return patient

    async def restore(self, patient: Patient) -> Patient:
        patient.deleted_at = None
        await self.session.flush()
        return patient
