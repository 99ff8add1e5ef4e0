from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, TIMESTAMP, JSON, ForeignKey, text
from app.core.base import Base, ClinicScopedMixin, BigIntPK

ORDER_STATUSES = ("PENDING", "IN_PROGRESS", "COMPLETED", "CANCELLED")

class _OrderColumns(ClinicScopedMixin):
    patient_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("patient.id"), index=True)
    doctor_id: Mapped[str] = mapped_column(ForeignKey("user.id"))
    order_date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    status: Mapped[str] = mapped_column(String(16), default="PENDING")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

class LabOrder(Base, _OrderColumns):
    tests: Mapped[list] = mapped_column(JSON, default=list)  # ["CBC", "Lipid panel", ...]
    results_summary: Mapped[str | None] = mapped_column(Text, nullable=True)

class ImagingOrder(Base, _OrderColumns):
    study_type: Mapped[str] = mapped_column(String(64))  # XRAY | CT | MRI | ULTRASOUND | ...
    body_area: Mapped[str] = mapped_column(String(120))
    findings: Mapped[str | None] = mapped_column(Text, nullable=True)
