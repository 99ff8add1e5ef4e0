from datetime import datetime
from typing import Sequence
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.invitations.models import ClinicInvitation

class InvitationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, clinic_id: int, **data) -> ClinicInvitation:
        obj = ClinicInvitation(clinic_id=clinic_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get_by_token(self, token: str) -> ClinicInvitation | None:
        res = await self.session.execute(select(ClinicInvitation).where(ClinicInvitation.token == token))
        return res.scalar_one_or_none()

    async def find_pending(self, clinic_id: int, email: str) -> ClinicInvitation | None:
        q = select(ClinicInvitation).where(
            ClinicInvitation.clinic_id == clinic_id,
            ClinicInvitation.email == email,
            ClinicInvitation.status == "PENDING",
        )
        res = await self.session.execute(q)
        return res.scalars().first()

    async def list(self, clinic_id: int) -> Sequence[ClinicInvitation]:
        q = select(ClinicInvitation).where(ClinicInvitation.clinic_id == clinic_id).order_by(
            ClinicInvitation.created_at.desc(), ClinicInvitation.id.desc()
        )
        res = await self.session.execute(q)
        return res.scalars().all()

    async def transition_from_pending(self, invitation_id: int, status: str, accepted_at: datetime | None = None) -> bool:
        # conditional write: only a PENDING row moves, so a token is claimed at most once
        values: dict = {"status": status}
        if accepted_at is not None:
            values["accepted_at"] = accepted_at
        q = (
            update(ClinicInvitation)
            .where(ClinicInvitation.id == invitation_id, ClinicInvitation.status == "PENDING")
            .values(**values)
            .returning(ClinicInvitation.id)
            .execution_options(synchronize_session=False)
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none() is not None
