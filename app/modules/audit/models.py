from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, TIMESTAMP, text
from app.core.base import Base, ClinicScopedMixin

class AuditEvent(Base, ClinicScopedMixin):
    # who
    actor_user_id: Mapped[str] = mapped_column(String(64), index=True)
    # what happened
    action: Mapped[str] = mapped_column(String(16))  # READ | CREATE | UPDATE | DELETE
    entity_type: Mapped[str] = mapped_column(String(48))  # Patient | ClinicInvitation | AppointmentRequest | ResultRelease | ...
    entity_id: Mapped[str] = mapped_column(String(64))
    entity_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    client_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(256), nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
