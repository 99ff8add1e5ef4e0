from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, TIMESTAMP, Boolean, ForeignKey, UniqueConstraint, text
from app.core.base import Base, TimestampedMixin, ClinicScopedMixin

ROLES = ("ADMIN", "DOCTOR", "NURSE", "RECEPTIONIST")

class Clinic(Base, TimestampedMixin):
    name: Mapped[str] = mapped_column(String(200))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

class User(Base):
    __tablename__ = "user"

    # ids are minted as "<prefix>_<uuid>" (user_…, patient_…)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    specialty: Mapped[str | None] = mapped_column(String(120), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP")
    )

class Account(Base, TimestampedMixin):
    user_id: Mapped[str] = mapped_column(ForeignKey("user.id"), index=True)
    provider_id: Mapped[str] = mapped_column(String(32), default="credential")
    password_hash: Mapped[str | None] = mapped_column(String(256), nullable=True)

class UserClinic(Base, ClinicScopedMixin):
    __table_args__ = (UniqueConstraint("user_id", "clinic_id", name="uq_userclinic_user_clinic"),)

    user_id: Mapped[str] = mapped_column(ForeignKey("user.id"), index=True)
    role: Mapped[str] = mapped_column(String(16))  # ADMIN | DOCTOR | NURSE | RECEPTIONIST
    joined_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP")
    )
