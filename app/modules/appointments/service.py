import re
import logging
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.base import utcnow
from app.core.errors import NotFound, Conflict, ValidationFailed
from app.core.security import PortalIdentity
from app.modules.appointments.models import AppointmentRequest
from app.modules.appointments.repository import AppointmentRequestRepository
from app.modules.appointments.schemas import AppointmentRequestCreate
from app.modules.audit.service import AuditService
from app.modules.clinics.repository import ClinicRepository
from app.modules.clinics.service import ClinicMembership

logger = logging.getLogger(__name__)

VALID_NEXT = {
    "PENDING": {"APPROVED", "REJECTED"},
    "APPROVED": set(),
    "REJECTED": set(),
}

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")

def combine_date_time(date_str: str, time_str: str) -> datetime:
    """Overlay ``HH:MM`` on the given date; seconds and microseconds are zeroed."""
    errors: dict[str, str] = {}
    day = None
    try:
        day = datetime.fromisoformat(date_str.strip())
        if day.tzinfo is not None:
            day = day.astimezone().replace(tzinfo=None)
    except ValueError:
        errors["date"] = "Invalid date"
    m = _TIME_RE.match(time_str)
    if not m or int(m.group(1)) > 23 or int(m.group(2)) > 59:
        errors["time"] = "Invalid time"
    if errors:
        raise ValidationFailed("Invalid data", errors)
    return day.replace(hour=int(m.group(1)), minute=int(m.group(2)), second=0, microsecond=0)

class AppointmentRequestService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.requests = AppointmentRequestRepository(session)
        self.clinics = ClinicRepository(session)

    async def submit(self, identity: PortalIdentity, payload: AppointmentRequestCreate) -> AppointmentRequest:
        requested = combine_date_time(payload.date, payload.time)
        # the doctor must practice at the patient's own clinic
        if not await self.clinics.is_doctor_of(payload.doctor_id, identity.clinic_id):
            raise ValidationFailed("Invalid data", {"doctorId": "Doctor not found in your clinic"})
        obj = await self.requests.create(
            identity.clinic_id,
            patient_id=identity.patient_id,
            requested_date=requested,
            requested_time=requested.strftime("%H:%M"),
            requested_doctor_id=payload.doctor_id,
            reason=payload.reason,
            status="PENDING",
        )
        await self.session.commit()
        logger.info(f"Appointment request {obj.id} submitted by patient {identity.patient_id} for {requested.isoformat()}")
        return obj

    async def list_for_patient(self, identity: PortalIdentity, limit: int = 50, offset: int = 0):
        return await self.requests.list(identity.clinic_id, patient_id=identity.patient_id, limit=limit, offset=offset)

    async def list_for_clinic(self, ctx: ClinicMembership, *, status: str | None = None, limit: int = 50, offset: int = 0):
        return await self.requests.list(ctx.clinic_id, status=status, limit=limit, offset=offset)

    async def approve(self, ctx: ClinicMembership, request_id: int) -> AppointmentRequest:
        return await self._decide(ctx, request_id, "APPROVED")

    async def reject(self, ctx: ClinicMembership, request_id: int) -> AppointmentRequest:
        return await self._decide(ctx, request_id, "REJECTED")

    async def _decide(self, ctx: ClinicMembership, request_id: int, to_status: str) -> AppointmentRequest:
        obj = await self.requests.get(ctx.clinic_id, request_id)
        if not obj:
            raise NotFound("Appointment request not found")
        if to_status not in VALID_NEXT.get(obj.status, set()):
            raise Conflict(f"Request is already {obj.status.lower()}")
        ok = await self.requests.transition(
            ctx.clinic_id, request_id, obj.status, to_status, decided_by=ctx.user_id, decided_at=utcnow()
        )
        if not ok:
            await self.session.rollback()
            raise Conflict("Request was decided concurrently")
        await AuditService(self.session).log(ctx.clinic_id, ctx.user_id, "UPDATE", "AppointmentRequest", str(request_id), to_status)
        await self.session.commit()
        await self.session.refresh(obj)
        logger.info(f"Appointment request {request_id} {to_status} by {ctx.user_id}")
        return obj
