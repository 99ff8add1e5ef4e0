"""
Shared fixtures.

Every test runs against a fresh in-memory SQLite database. Requests go
through the real FastAPI app with ``get_db`` and the onboarding store
overridden; sessions are plain HS256 tokens signed with the configured
secret.
"""
import os

os.environ["DATABASE_DSN"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENV"] = "test"
os.environ["EMAIL_PROVIDER"] = "noop"
os.environ["AUTH_JWT_SECRET"] = "test-secret"

from datetime import timedelta

import pytest
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.base import Base, utcnow
from app.core.config import settings
from app.core.db import get_db
from app.modules.clinics.models import Clinic, User, UserClinic
from app.modules.clinics.service import generate_id
from app.modules.invitations.models import ClinicInvitation
from app.modules.onboarding.store import OnboardingStore, get_onboarding_store
from app.modules.orders.models import LabOrder, ImagingOrder
from app.modules.patients.models import Patient
from app.platform.provider_registry import registry

API = settings.API_PREFIX


class RecordingMailer:
    def __init__(self):
        self.sent: list[dict] = []

    async def send(self, to: str, subject: str, html: str) -> str | None:
        self.sent.append({"to": to, "subject": subject, "html": html})
        return f"msg_{len(self.sent)}"


class MemoryJsonBackend:
    def __init__(self):
        self.data: dict[str, dict] = {}

    async def get_json(self, key: str) -> dict | None:
        return self.data.get(key)

    async def set_json(self, key: str, data: dict) -> None:
        self.data[key] = data


class Factory:
    """Inserts rows through short-lived sessions so API calls see committed data."""

    def __init__(self, session_factory):
        self.sf = session_factory

    async def _add(self, obj):
        async with self.sf() as s:
            s.add(obj)
            await s.commit()
        return obj

    async def clinic(self, name: str = "Clinica Centro", is_active: bool = True) -> Clinic:
        return await self._add(Clinic(name=name, is_active=is_active))

    async def user(self, email: str | None = None, name: str = "Test User", user_id: str | None = None, **kw) -> User:
        uid = user_id or generate_id("user")
        kw.setdefault("is_active", True)
        return await self._add(User(id=uid, email=(email or f"{uid}@example.com").lower(), name=name, **kw))

    async def member(self, user: User, clinic: Clinic, role: str = "ADMIN", joined_at=None) -> UserClinic:
        extra = {"joined_at": joined_at} if joined_at is not None else {}
        return await self._add(UserClinic(user_id=user.id, clinic_id=clinic.id, role=role, **extra))

    async def staff(self, clinic: Clinic, role: str = "ADMIN", **kw) -> User:
        user = await self.user(**kw)
        await self.member(user, clinic, role)
        return user

    async def patient(self, clinic: Clinic, first_name: str = "Ana", last_name: str = "Lopez", **kw) -> Patient:
        return await self._add(Patient(clinic_id=clinic.id, first_name=first_name, last_name=last_name, **kw))

    async def portal_patient(self, clinic: Clinic, **kw) -> tuple[User, Patient]:
        user = await self.user(user_id=generate_id("patient"), name="Ana Lopez")
        patient = await self.patient(clinic, user_id=user.id, **kw)
        return user, patient

    async def lab_order(self, clinic: Clinic, patient: Patient, doctor: User, status: str = "COMPLETED") -> LabOrder:
        return await self._add(LabOrder(
            clinic_id=clinic.id, patient_id=patient.id, doctor_id=doctor.id, status=status, tests=["CBC"],
        ))

    async def imaging_order(self, clinic: Clinic, patient: Patient, doctor: User, status: str = "COMPLETED") -> ImagingOrder:
        return await self._add(ImagingOrder(
            clinic_id=clinic.id, patient_id=patient.id, doctor_id=doctor.id, status=status,
            study_type="XRAY", body_area="Chest",
        ))

    async def invitation(self, clinic: Clinic, inviter: User, email: str, role: str = "DOCTOR",
                         expires_at=None, status: str = "PENDING", token: str | None = None) -> ClinicInvitation:
        return await self._add(ClinicInvitation(
            clinic_id=clinic.id, token=token or generate_id("inv"), email=email.lower(), role=role,
            invited_by=inviter.id, status=status,
            expires_at=expires_at or utcnow() + timedelta(days=7),
        ))


def make_token(user_id: str) -> str:
    return jwt.encode({"sub": user_id}, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALG)


def auth(user) -> dict:
    return {"Authorization": f"Bearer {make_token(user.id)}"}


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def factory(session_factory) -> Factory:
    return Factory(session_factory)


@pytest.fixture
def mailer():
    m = RecordingMailer()
    registry.override_mailer(m)
    yield m
    registry.override_mailer(None)


@pytest.fixture
def onboarding_backend() -> MemoryJsonBackend:
    return MemoryJsonBackend()


@pytest.fixture
async def client(session_factory, mailer, onboarding_backend):
    async def _get_db():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_onboarding_store] = lambda: OnboardingStore(onboarding_backend)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
