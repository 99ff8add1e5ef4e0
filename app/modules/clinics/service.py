import uuid
import logging
from dataclasses import dataclass
from passlib.hash import pbkdf2_sha256
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFound, Forbidden, ValidationFailed
from app.modules.clinics.repository import ClinicRepository, UserRepository

logger = logging.getLogger(__name__)

def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4()}"

def hash_password(password: str) -> str:
    return pbkdf2_sha256.hash(password)

@dataclass(frozen=True)
class ClinicMembership:
    user_id: str
    clinic_id: int
    clinic_name: str
    role: str

class MembershipService:
    """Resolves which clinic a staff user acts for.

    A user may belong to several clinics; the active one is always the
    membership with the earliest ``joined_at``. Every clinic-scoped query
    takes its ``clinic_id`` from here.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = ClinicRepository(session)

    async def resolve_clinic(self, user_id: str) -> ClinicMembership | None:
        found = await self.repo.first_membership(user_id)
        if not found:
            return None
        membership, clinic = found
        return ClinicMembership(
            user_id=user_id,
            clinic_id=membership.clinic_id,
            clinic_name=clinic.name,
            role=membership.role,
        )

    async def list_members(self, user_id: str, clinic_id: int):
        # members are only visible to members of the same clinic
        if not await self.repo.get_membership(user_id, clinic_id):
            raise NotFound("Clinic not found")
        return await self.repo.list_members(clinic_id)

    async def remove_member(self, user_id: str, clinic_id: int, member_id: int) -> None:
        caller = await self.repo.get_membership(user_id, clinic_id)
        if not caller:
            raise NotFound("Clinic not found")
        if caller.role != "ADMIN":
            raise Forbidden("Only admins can remove members")
        member = await self.repo.get_member(clinic_id, member_id)
        if not member:
            raise NotFound("Member not found")
        if member.user_id == user_id:
            raise ValidationFailed("You cannot remove yourself", {"memberId": "Cannot remove yourself"})
        await self.repo.remove_membership(member)
        await self.session.commit()
        logger.info(f"Member {member_id} removed from clinic {clinic_id} by {user_id}")

    async def list_doctors(self, clinic_id: int):
        return await self.repo.list_doctors(clinic_id)
