from datetime import datetime
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_
from app.modules.appointments.models import AppointmentRequest

class AppointmentRequestRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, clinic_id: int, **data) -> AppointmentRequest:
        obj = AppointmentRequest(clinic_id=clinic_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, clinic_id: int, request_id: int) -> AppointmentRequest | None:
        q = select(AppointmentRequest).where(
            and_(AppointmentRequest.id == request_id,
                 AppointmentRequest.clinic_id == clinic_id)
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list(self, clinic_id: int, *, status: str | None = None, patient_id: int | None = None, limit: int = 50, offset: int = 0) -> Sequence[AppointmentRequest]:
        cond = [AppointmentRequest.clinic_id == clinic_id]
        if status:
            cond.append(AppointmentRequest.status == status)
        if patient_id:
            cond.append(AppointmentRequest.patient_id == patient_id)
        q = select(AppointmentRequest).where(and_(*cond)).order_by(
            AppointmentRequest.created_at.desc(), AppointmentRequest.id.desc()
        ).limit(limit).offset(offset)
        res = await self.session.execute(q)
        return res.scalars().all()

    async def transition(self, clinic_id: int, request_id: int, from_status: str, to_status: str, *, decided_by: str, decided_at: datetime) -> bool:
        q = (
            update(AppointmentRequest)
            .where(AppointmentRequest.id == request_id,
                   AppointmentRequest.clinic_id == clinic_id,
                   AppointmentRequest.status == from_status)
            .values(status=to_status, decided_by=decided_by, decided_at=decided_at)
            .returning(AppointmentRequest.id)
            .execution_options(synchronize_session=False)
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none() is not None
