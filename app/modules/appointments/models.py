from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, TIMESTAMP, DateTime, ForeignKey
from app.core.base import Base, ClinicScopedMixin, BigIntPK

class AppointmentRequest(Base, ClinicScopedMixin):
    patient_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("patient.id"), index=True)

    # wall-clock date and time chosen by the patient (no timezone)
    requested_date: Mapped[datetime] = mapped_column(DateTime(timezone=False))
    requested_time: Mapped[str] = mapped_column(String(5))  # "HH:MM"
    requested_doctor_id: Mapped[str] = mapped_column(ForeignKey("user.id"))
    reason: Mapped[str] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String(16), default="PENDING")  # PENDING, APPROVED, REJECTED
    decided_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
