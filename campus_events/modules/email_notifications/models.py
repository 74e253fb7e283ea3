"""Email notification settings, user preferences and the outgoing log."""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from campus_events.core.database.base import Base, BaseModel, BigIntPK


class EmailLogStatus(StrEnum):
    PENDING = "pending"  # Waiting for the delivery worker
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Disabled globally or by the recipient


class EmailNotificationSetting(BaseModel):
    """Global on/off switch per notification type."""

    __tablename__ = "email_notification_settings"

    notification_type: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class UserEmailPreference(BaseModel):
    """Per-user opt-out of a notification type. A missing row means enabled."""

    __tablename__ = "user_email_preferences"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "notification_type", name="uq_user_email_preferences_user_type"
        ),
    )

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    notification_type: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("email_notification_settings.notification_type"),
        nullable=False,
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class EmailNotificationLog(Base):
    """One outgoing email. Rows in status 'pending' are picked up for delivery."""

    __tablename__ = "email_notification_logs"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    notification_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    recipient_email: Mapped[str] = mapped_column(String(255), nullable=False)
    recipient_user_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    subject: Mapped[str] = mapped_column(String(300), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EmailLogStatus.PENDING.value, index=True
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("events.id", ondelete="SET NULL"), nullable=True
    )
    meeting_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("meetings.id", ondelete="SET NULL"), nullable=True
    )
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
