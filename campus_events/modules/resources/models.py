"""Resource inventory and per-event allocation models."""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_events.core.database.base import Base, BigIntPK


class ResourceType(Base):
    """Reusable physical asset (projector, chairs, ...) with a shared pool.

    available_quantity is the pool left after allocations; it is only moved by
    conditional UPDATEs so concurrent allocations cannot push it out of
    [0, total_quantity].
    """

    __tablename__ = "resource_types"
    __table_args__ = (
        CheckConstraint("total_quantity >= 0", name="ck_resource_types_total_quantity"),
        CheckConstraint(
            "available_quantity >= 0 AND available_quantity <= total_quantity",
            name="ck_resource_types_available_quantity",
        ),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    @property
    def allocated_quantity(self) -> int:
        return self.total_quantity - self.available_quantity


class EventResourceAllocation(Base):
    """Quantity of one resource type assigned to one event.

    One row per (event, resource type): allocating the same pair again replaces
    the quantity instead of adding to it.
    """

    __tablename__ = "event_resources"
    __table_args__ = (
        UniqueConstraint(
            "event_id", "resource_type_id", name="uq_event_resources_event_resource_type"
        ),
        CheckConstraint("quantity > 0", name="ck_event_resources_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    resource_type_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("resource_types.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    allocated_by_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    allocated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    resource_type: Mapped["ResourceType"] = relationship("ResourceType")
    event: Mapped["Event"] = relationship("Event")


from campus_events.modules.events.models import Event  # noqa: E402
