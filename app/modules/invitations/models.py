from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, TIMESTAMP, ForeignKey
from app.core.base import Base, ClinicScopedMixin

class ClinicInvitation(Base, ClinicScopedMixin):
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(320), index=True)
    role: Mapped[str] = mapped_column(String(16))  # DOCTOR | NURSE | RECEPTIONIST
    invited_by: Mapped[str | None] = mapped_column(ForeignKey("user.id"), nullable=True)
    # only PENDING -> ACCEPTED and PENDING -> EXPIRED are ever written
    status: Mapped[str] = mapped_column(String(16), default="PENDING")
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    accepted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
