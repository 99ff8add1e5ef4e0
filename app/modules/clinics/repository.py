from typing import Sequence
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.clinics.models import Clinic, User, Account, UserClinic

class ClinicRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_clinic(self, clinic_id: int) -> Clinic | None:
        return await self.session.get(Clinic, clinic_id)

    async def first_membership(self, user_id: str) -> tuple[UserClinic, Clinic] | None:
        q = (
            select(UserClinic, Clinic)
            .join(Clinic, Clinic.id == UserClinic.clinic_id)
            .where(UserClinic.user_id == user_id)
            .order_by(UserClinic.joined_at.asc(), UserClinic.id.asc())
            .limit(1)
        )
        res = await self.session.execute(q)
        row = res.first()
        return (row[0], row[1]) if row else None

    async def get_membership(self, user_id: str, clinic_id: int) -> UserClinic | None:
        q = select(UserClinic).where(UserClinic.user_id == user_id, UserClinic.clinic_id == clinic_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_member(self, clinic_id: int, member_id: int) -> UserClinic | None:
        q = select(UserClinic).where(UserClinic.id == member_id, UserClinic.clinic_id == clinic_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list_members(self, clinic_id: int) -> Sequence[tuple[UserClinic, User]]:
        q = (
            select(UserClinic, User)
            .join(User, User.id == UserClinic.user_id)
            .where(UserClinic.clinic_id == clinic_id)
            .order_by(UserClinic.joined_at.asc(), UserClinic.id.asc())
        )
        res = await self.session.execute(q)
        return [(m, u) for m, u in res.all()]

    async def list_doctors(self, clinic_id: int) -> Sequence[User]:
        q = (
            select(User)
            .join(UserClinic, UserClinic.user_id == User.id)
            .where(UserClinic.clinic_id == clinic_id, UserClinic.role == "DOCTOR", User.is_active.is_(True))
            .order_by(User.name.asc())
        )
        res = await self.session.execute(q)
        return res.scalars().all()

    async def is_doctor_of(self, user_id: str, clinic_id: int) -> bool:
        q = select(func.count()).select_from(UserClinic).where(
            UserClinic.user_id == user_id,
            UserClinic.clinic_id == clinic_id,
            UserClinic.role == "DOCTOR",
        )
        res = await self.session.execute(q)
        return (res.scalar_one() or 0) > 0

    async def add_membership(self, user_id: str, clinic_id: int, role: str) -> UserClinic:
        obj = UserClinic(user_id=user_id, clinic_id=clinic_id, role=role)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def remove_membership(self, member: UserClinic) -> None:
        await self.session.delete(member)
        await self.session.flush()


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        res = await self.session.execute(select(User).where(User.email == email.lower()))
        return res.scalar_one_or_none()

    async def create(self, *, user_id: str, email: str, name: str, password_hash: str, **data) -> User:
        user = User(id=user_id, email=email.lower(), name=name, **data)
        self.session.add(user)
        await self.session.flush()
        self.session.add(Account(user_id=user.id, provider_id="credential", password_hash=password_hash))
        await self.session.flush()
        return user
