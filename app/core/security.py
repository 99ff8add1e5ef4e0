from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.db import get_db
from app.core.errors import Unauthorized, Forbidden
from app.modules.clinics.models import User, Clinic
from app.modules.clinics.service import MembershipService, ClinicMembership
from app.modules.patients.models import Patient

http_bearer = HTTPBearer(auto_error=False)

class Identity(BaseModel):
    user_id: str
    email: str
    name: str

class PortalIdentity(Identity):
    patient_id: int
    clinic_id: int
    clinic_name: str

def _decode_token(token: str) -> dict | None:
    try:
        options = {"verify_aud": settings.AUTH_AUDIENCE is not None}
        return jwt.decode(token, settings.AUTH_JWT_SECRET, algorithms=[settings.AUTH_JWT_ALG],
                          audience=settings.AUTH_AUDIENCE, options=options)
    except JWTError:
        return None

def _read_token(request: Request, creds: HTTPAuthorizationCredentials | None) -> str | None:
    if creds is not None:
        return creds.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)

async def _load_user(request: Request, creds: HTTPAuthorizationCredentials | None, db: AsyncSession) -> User | None:
    token = _read_token(request, creds)
    if not token:
        return None
    data = _decode_token(token)
    if not data:
        return None
    user_id = data.get("sub") or data.get("user_id")
    if not user_id:
        return None
    user = await db.get(User, str(user_id))
    if not user or not user.is_active:
        return None
    return user

async def get_session_identity(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    db: AsyncSession = Depends(get_db),
) -> Identity | None:
    user = await _load_user(request, creds, db)
    if not user:
        return None
    return Identity(user_id=user.id, email=user.email, name=user.name)

async def get_required_identity(identity: Identity | None = Depends(get_session_identity)) -> Identity:
    if identity is None:
        raise Unauthorized()
    return identity

async def get_portal_identity(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    db: AsyncSession = Depends(get_db),
) -> PortalIdentity | None:
    user = await _load_user(request, creds, db)
    if not user:
        return None
    q = (
        select(Patient, Clinic)
        .join(Clinic, Clinic.id == Patient.clinic_id)
        .where(Patient.user_id == user.id, Patient.deleted_at.is_(None))
    )
    row = (await db.execute(q)).first()
    if not row:
        return None
    patient, clinic = row
    return PortalIdentity(
        user_id=user.id, email=user.email, name=user.name,
        patient_id=patient.id, clinic_id=clinic.id, clinic_name=clinic.name,
    )

async def get_required_portal_identity(identity: PortalIdentity | None = Depends(get_portal_identity)) -> PortalIdentity:
    if identity is None:
        raise Unauthorized()
    return identity

async def get_clinic_context(
    identity: Identity = Depends(get_required_identity),
    db: AsyncSession = Depends(get_db),
) -> ClinicMembership:
    membership = await MembershipService(db).resolve_clinic(identity.user_id)
    if membership is None:
        raise Forbidden("No clinic assigned")
    return membership

def require_roles(*roles: str):
    def dep(ctx: ClinicMembership = Depends(get_clinic_context)) -> ClinicMembership:
        if ctx.role not in roles:
            raise Forbidden("Insufficient role")
        return ctx
    return dep
