from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON
from app.core.base import Base, ClinicScopedMixin

class OutboundMessage(Base, ClinicScopedMixin):
    channel: Mapped[str] = mapped_column(String(16), default="email")
    to: Mapped[str] = mapped_column(String(320))
    subject: Mapped[str | None] = mapped_column(String(200), nullable=True)
    body: Mapped[str] = mapped_column(Text)
    meta: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    provider_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="queued")  # queued | sent | failed
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
