from typing import Sequence, Type
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.orders.models import LabOrder, ImagingOrder

ORDER_MODELS: dict[str, Type[LabOrder] | Type[ImagingOrder]] = {"lab": LabOrder, "imaging": ImagingOrder}

class OrderRepository:
    def __init__(self, session: AsyncSession, kind: str):
        self.session = session
        self.kind = kind
        self.model = ORDER_MODELS[kind]

    async def create(self, clinic_id: int, **data):
        obj = self.model(clinic_id=clinic_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, clinic_id: int, order_id: int):
        q = select(self.model).where(self.model.id == order_id, self.model.clinic_id == clinic_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list(self, clinic_id: int, *, status: str | None = None, patient_id: int | None = None, limit: int = 50, offset: int = 0) -> Sequence:
        cond = [self.model.clinic_id == clinic_id]
        if status:
            cond.append(self.model.status == status)
        if patient_id:
            cond.append(self.model.patient_id == patient_id)
        q = select(self.model).where(and_(*cond)).order_by(self.model.order_date.desc(), self.model.id.desc()).limit(limit).offset(offset)
        res = await self.session.execute(q)
        return res.scalars().all()
