"""Event models."""

import datetime
from enum import StrEnum

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_events.core.database.base import BaseModel


class EventStatus(StrEnum):
    """Event status enumeration."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Statuses that hold a venue slot: pending events occupy it as well as approved ones
SLOT_HOLDING_STATUSES = (EventStatus.PENDING.value, EventStatus.APPROVED.value)
# Terminal statuses, no transition out of these
CLOSED_STATUSES = (EventStatus.REJECTED.value, EventStatus.CANCELLED.value)


class EventCategory(StrEnum):
    """Event category enumeration."""

    ACADEMIC = "academic"
    SOCIAL = "social"
    SPORTS = "sports"
    CULTURAL = "cultural"
    WORKSHOP = "workshop"
    SEMINAR = "seminar"


_ACTIVE_SLOT_WHERE = text(
    "status IN (" + ", ".join(f"'{s}'" for s in SLOT_HOLDING_STATUSES) + ")"
)


class Event(BaseModel):
    """Event submitted by an organizer and decided by an admin."""

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_events_capacity_positive"),
        CheckConstraint(
            "registered_count >= 0 AND registered_count <= capacity",
            name="ck_events_registered_count",
        ),
        CheckConstraint(
            "attended_count >= 0 AND attended_count <= registered_count",
            name="ck_events_attended_count",
        ),
        # One live event per (date, venue); closes the check-then-insert race
        Index(
            "uq_events_active_slot",
            "date",
            "venue",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_WHERE,
            sqlite_where=_ACTIVE_SLOT_WHERE,
        ),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    time: Mapped[datetime.time] = mapped_column(Time, nullable=False)
    venue: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    registered_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attended_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EventStatus.PENDING.value, index=True
    )
    organizer_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False, index=True
    )
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    organizer: Mapped["User"] = relationship("User")

    @property
    def spots_left(self) -> int:
        return max(self.capacity - self.registered_count, 0)

    @property
    def is_open_for_registration(self) -> bool:
        return self.status == EventStatus.APPROVED.value and self.spots_left > 0


from campus_events.core.auth.models import User  # noqa: E402
