import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import NotFound, ValidationFailed, Conflict
from app.core.security import PortalIdentity
from app.modules.audit.service import AuditService
from app.modules.clinics.repository import ClinicRepository, UserRepository
from app.modules.clinics.service import ClinicMembership, generate_id, hash_password
from app.modules.patients.repository import PatientRepository
from app.modules.portal.schemas import PortalRegister, ContactMessage

logger = logging.getLogger(__name__)

class PortalService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.clinics = ClinicRepository(session)
        self.patients = PatientRepository(session)

    async def register(self, payload: PortalRegister) -> dict:
        """Create a portal login for a patient the clinic already registered.

        The patient is matched by CURP first, then by phone or mobile, among
        clinics that are still active.
        """
        if payload.password != payload.confirmPassword:
            raise ValidationFailed("Invalid data", {"confirmPassword": "Passwords do not match"})
        if await self.users.get_by_email(payload.email):
            raise Conflict("An account with this email already exists")

        patient = await self.patients.find_for_portal(curp=payload.curp, phone=payload.phone)
        if not patient:
            raise NotFound("No patient matches the given data. Please contact your clinic to register.")
        if patient.user_id:
            raise Conflict("A portal account already exists for this patient")

        user = await self.users.create(
            user_id=generate_id("patient"),
            email=payload.email,
            name=f"{payload.firstName} {payload.lastName}",
            password_hash=hash_password(payload.password),
            is_active=True,
            email_verified=False,
        )
        patient.user_id = user.id
        await AuditService(self.session).log(patient.clinic_id, user.id, "UPDATE", "Patient", str(patient.id), patient.full_name)
        await self.session.commit()
        clinic = await self.clinics.get_clinic(patient.clinic_id)
        logger.info(f"Portal account {user.id} linked to patient {patient.id}")
        return {"message": "Account created", "clinicName": clinic.name if clinic else ""}

    async def doctors(self, identity: PortalIdentity):
        return await self.clinics.list_doctors(identity.clinic_id)

    async def contact(self, identity: PortalIdentity, payload: ContactMessage) -> None:
        # not mailed anywhere yet; the clinic reads these from the log
        logger.info(
            f"Portal contact from patient {identity.patient_id} ({identity.email}) "
            f"clinic={identity.clinic_id} subject={payload.subject!r}: {payload.message}"
        )

    async def approve(self, ctx: ClinicMembership, user_id: str) -> None:
        patient = await self.patients.get_by_user(ctx.clinic_id, user_id)
        user = await self.users.get(user_id) if patient else None
        if not user:
            raise NotFound("Portal patient not found")
        user.is_active = True
        await AuditService(self.session).log(ctx.clinic_id, ctx.user_id, "UPDATE", "User", user.id, user.name)
        await self.session.commit()
        logger.info(f"Portal user {user_id} approved by {ctx.user_id}")
