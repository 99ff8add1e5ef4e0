from typing import Sequence
from sqlalchemy import select, exists
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.orders.repository import ORDER_MODELS
from app.modules.results.models import ResultRelease

ORDER_COLUMNS = {"lab": ResultRelease.lab_order_id, "imaging": ResultRelease.imaging_order_id}

class ResultReleaseRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, kind: str, order_id: int, released_by: str) -> ResultRelease:
        obj = ResultRelease(released_by=released_by, **{ORDER_COLUMNS[kind].key: order_id})
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def is_released(self, kind: str, order_id: int) -> bool:
        q = select(exists().where(ORDER_COLUMNS[kind] == order_id))
        res = await self.session.execute(q)
        return bool(res.scalar())

    async def completed_orders(self, kind: str, *, clinic_id: int, released: bool, patient_id: int | None = None) -> Sequence:
        model = ORDER_MODELS[kind]
        marker = exists().where(ORDER_COLUMNS[kind] == model.id)
        cond = [model.clinic_id == clinic_id, model.status == "COMPLETED", marker if released else ~marker]
        if patient_id is not None:
            cond.append(model.patient_id == patient_id)
        q = select(model).where(*cond).order_by(model.order_date.desc(), model.id.desc())
        res = await self.session.execute(q)
        return res.scalars().all()
