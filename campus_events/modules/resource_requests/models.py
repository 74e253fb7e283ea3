"""Resource request models (organizer wish list, reviewed by admins)."""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_events.core.database.base import Base, BigIntPK


class ResourceRequestStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ResourceRequest(Base):
    """Resource an organizer asked for when submitting an event.

    Informational only: reviewing a request never allocates anything.
    """

    __tablename__ = "event_resource_requests"
    __table_args__ = (
        CheckConstraint("requested_quantity > 0", name="ck_event_resource_requests_quantity"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    resource_type_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("resource_types.id"), nullable=False, index=True
    )
    requested_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ResourceRequestStatus.PENDING.value, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    requested_by_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    reviewed_by_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    resource_type: Mapped["ResourceType"] = relationship("ResourceType")


from campus_events.modules.resources.models import ResourceType  # noqa: E402
