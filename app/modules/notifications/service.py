import logging
from string import Template
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.modules.notifications.models import OutboundMessage
from app.platform.provider_registry import registry

logger = logging.getLogger(__name__)

ROLE_LABELS = {"DOCTOR": "Doctor", "NURSE": "Nurse", "RECEPTIONIST": "Receptionist", "ADMIN": "Administrator"}

INVITATION_SUBJECT = Template("Invitation to ${clinic_name}")
INVITATION_BODY = Template(
    "<p>${invited_by} invited you to join <strong>${clinic_name}</strong> as ${role_label}.</p>"
    "<p><a href=\"${invitation_url}\">Accept the invitation</a></p>"
    "<p>This link expires in ${ttl_days} days.</p>"
)

class NotificationsService:
    def __init__(self, s: AsyncSession): self.s = s

    async def send_email(self, clinic_id: int, *, to: str, subject: str, body: str, meta: dict | None = None) -> OutboundMessage:
        m = OutboundMessage(clinic_id=clinic_id, channel="email", to=to, subject=subject, body=body, meta=meta or {}, status="queued")
        self.s.add(m); await self.s.flush()
        try:
            m.provider_id = await registry.mailer().send(to, subject, body)
            m.status = "sent"
        except Exception as e:
            # delivery failures are recorded, the message can be re-sent later
            logger.error(f"Mail delivery to {to} failed: {e}", exc_info=True)
            m.status = "failed"
            m.last_error = str(e)
        await self.s.flush()
        return m

    async def send_invitation(self, clinic_id: int, *, to: str, token: str, clinic_name: str, role: str, invited_by: str) -> OutboundMessage:
        variables = {
            "clinic_name": clinic_name,
            "role_label": ROLE_LABELS.get(role, role),
            "invited_by": invited_by,
            "invitation_url": f"{settings.APP_URL}/invitations/{token}",
            "ttl_days": settings.INVITATION_TTL_DAYS,
        }
        return await self.send_email(
            clinic_id,
            to=to,
            subject=INVITATION_SUBJECT.safe_substitute(variables),
            body=INVITATION_BODY.safe_substitute(variables),
            meta={"kind": "invitation", "role": role},
        )
