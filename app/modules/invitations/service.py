"""
Clinic invitation lifecycle.

    PENDING --accept--> ACCEPTED   (terminal)
    PENDING --time----> EXPIRED    (terminal)

Expiry is derived at read time from ``expires_at``; the EXPIRED status is only
written when someone tries to accept an expired token. Acceptance claims the
row with a conditional update so a token is consumed at most once.
"""
import uuid
import logging
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.base import utcnow, as_utc
from app.core.config import settings
from app.core.errors import NotFound, Conflict, InvitationUnavailable, ValidationFailed
from app.modules.audit.service import AuditService
from app.modules.clinics.repository import ClinicRepository, UserRepository
from app.modules.clinics.service import ClinicMembership, generate_id, hash_password
from app.modules.invitations.models import ClinicInvitation
from app.modules.invitations.repository import InvitationRepository
from app.modules.invitations.schemas import InvitationCreate, InvitationAccept
from app.modules.notifications.service import NotificationsService

logger = logging.getLogger(__name__)

PENDING, ACCEPTED, EXPIRED = "PENDING", "ACCEPTED", "EXPIRED"

def effective_status(invitation: ClinicInvitation, now: datetime | None = None) -> str:
    if invitation.status == ACCEPTED:
        return ACCEPTED
    if invitation.status == EXPIRED:
        return EXPIRED
    if (now or utcnow()) > as_utc(invitation.expires_at):
        return EXPIRED
    return PENDING

def _raise_if_unavailable(status: str) -> None:
    if status == ACCEPTED:
        raise InvitationUnavailable("This invitation was already accepted")
    if status == EXPIRED:
        raise InvitationUnavailable("This invitation has expired")

class InvitationService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = InvitationRepository(session)
        self.clinics = ClinicRepository(session)
        self.users = UserRepository(session)

    async def create(self, ctx: ClinicMembership, invited_by_name: str, payload: InvitationCreate) -> ClinicInvitation:
        email = payload.email.lower()
        existing = await self.repo.find_pending(ctx.clinic_id, email)
        if existing and effective_status(existing) == PENDING:
            raise Conflict("A pending invitation already exists for this email")
        if existing:
            # lapsed but never accepted; close it so the email can be invited again
            await self.repo.transition_from_pending(existing.id, EXPIRED)
            logger.info(f"Invitation {existing.id} marked EXPIRED on re-invite")
        obj = await self.repo.create(
            ctx.clinic_id,
            token=str(uuid.uuid4()),
            email=email,
            role=payload.role,
            invited_by=ctx.user_id,
            status=PENDING,
            expires_at=utcnow() + timedelta(days=settings.INVITATION_TTL_DAYS),
        )
        await NotificationsService(self.session).send_invitation(
            ctx.clinic_id, to=email, token=obj.token, clinic_name=ctx.clinic_name,
            role=obj.role, invited_by=invited_by_name,
        )
        await AuditService(self.session).log(ctx.clinic_id, ctx.user_id, "CREATE", "ClinicInvitation", str(obj.id), email)
        await self.session.commit()
        logger.info(f"Invitation {obj.id} created for clinic {ctx.clinic_id} role={obj.role}")
        return obj

    async def list(self, clinic_id: int) -> list[tuple[ClinicInvitation, str]]:
        now = utcnow()
        return [(inv, effective_status(inv, now)) for inv in await self.repo.list(clinic_id)]

    async def check(self, token: str) -> dict:
        invitation = await self.repo.get_by_token(token)
        if not invitation:
            raise NotFound("Invitation not found")
        status = effective_status(invitation)
        _raise_if_unavailable(status)
        clinic = await self.clinics.get_clinic(invitation.clinic_id)
        existing = await self.users.get_by_email(invitation.email)
        return {
            "invitation": {
                "email": invitation.email,
                "role": invitation.role,
                "clinicName": clinic.name if clinic else "",
                "status": status,
                "expiresAt": invitation.expires_at,
            },
            "existingUser": existing is not None,
        }

    async def accept(self, token: str, payload: InvitationAccept) -> dict:
        invitation = await self.repo.get_by_token(token)
        if not invitation:
            raise NotFound("Invitation not found")

        status = effective_status(invitation)
        if status == EXPIRED and invitation.status == PENDING:
            await self.repo.transition_from_pending(invitation.id, EXPIRED)
            await self.session.commit()
            logger.info(f"Invitation {invitation.id} marked EXPIRED on accept attempt")
        _raise_if_unavailable(status)

        user = await self.users.get_by_email(invitation.email)
        if user is None and (not payload.name or not payload.password):
            fields = {}
            if not payload.name:
                fields["name"] = "Name is required for new users"
            if not payload.password:
                fields["password"] = "Password is required for new users"
            raise ValidationFailed("Name and password are required for new users", fields)
        if user is not None and await self.clinics.get_membership(user.id, invitation.clinic_id):
            raise Conflict("You are already a member of this clinic")

        if not await self.repo.transition_from_pending(invitation.id, ACCEPTED, accepted_at=utcnow()):
            await self.session.rollback()
            raise InvitationUnavailable("This invitation was already accepted")

        if user is None:
            user = await self.users.create(
                user_id=generate_id("user"),
                email=invitation.email,
                name=payload.name,
                password_hash=hash_password(payload.password),
                is_active=True,
                email_verified=True,
            )
        await self.clinics.add_membership(user.id, invitation.clinic_id, invitation.role)
        await AuditService(self.session).log(
            invitation.clinic_id, user.id, "UPDATE", "ClinicInvitation", str(invitation.id), invitation.email
        )
        await self.session.commit()
        await self.session.refresh(invitation)
        clinic = await self.clinics.get_clinic(invitation.clinic_id)
        logger.info(f"Invitation {invitation.id} accepted by {user.id}")
        return {
            "success": True,
            "message": "You have joined the clinic",
            "clinic": {"id": invitation.clinic_id, "name": clinic.name if clinic else ""},
        }
