from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, ForeignKey, CheckConstraint
from app.core.base import Base, TimestampedMixin, BigIntPK

class ResultRelease(Base, TimestampedMixin):
    """Append-only marker: a row existing means the result is visible in the portal."""
    __table_args__ = (
        CheckConstraint(
            "(lab_order_id IS NULL) <> (imaging_order_id IS NULL)",
            name="ck_resultrelease_one_order",
        ),
    )

    released_by: Mapped[str] = mapped_column(String(64))
    lab_order_id: Mapped[int | None] = mapped_column(BigIntPK, ForeignKey("laborder.id"), nullable=True, index=True)
    imaging_order_id: Mapped[int | None] = mapped_column(BigIntPK, ForeignKey("imagingorder.id"), nullable=True, index=True)
