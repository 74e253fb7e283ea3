"""Service for email notification settings and the outgoing email log."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.models import User
from campus_events.core.audit.service import AuditAction, AuditService
from campus_events.core.config import settings
from campus_events.core.exceptions import NotFoundError
from campus_events.modules.email_notifications.models import (
    EmailLogStatus,
    EmailNotificationLog,
    EmailNotificationSetting,
    UserEmailPreference,
)

logger = logging.getLogger(__name__)


DEFAULT_NOTIFICATION_TYPES: dict[str, str] = {
    "event_created": "A new event was submitted",
    "event_updated": "Event details changed",
    "event_cancelled": "An event was cancelled",
    "event_approved": "Your event was approved",
    "event_rejected": "Your event was rejected",
    "event_registration": "Registration confirmation",
    "meeting_scheduled": "A meeting was scheduled for an event",
    "meeting_updated": "Meeting details changed",
    "meeting_cancelled": "A meeting was cancelled",
    "meeting_invitation": "You were invited to a meeting",
    "event_reminder": "Reminder before an event starts",
    "meeting_reminder": "Reminder before a meeting starts",
    "role_assigned": "Your role was changed",
}


class EmailNotificationService:
    """Global switches, per-user opt-outs and queueing of outgoing emails.

    Emails are not sent from the request path: queue_email writes a log row in
    status 'pending' (or 'skipped' when disabled) for a delivery worker.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def ensure_default_settings(self) -> list[EmailNotificationSetting]:
        """Insert settings rows for known notification types that are missing."""
        result = await self.db.execute(select(EmailNotificationSetting))
        existing = {s.notification_type: s for s in result.scalars().all()}

        created: list[EmailNotificationSetting] = []
        for notification_type, description in DEFAULT_NOTIFICATION_TYPES.items():
            if notification_type in existing:
                continue
            setting = EmailNotificationSetting(
                notification_type=notification_type,
                enabled=True,
                description=description,
            )
            self.db.add(setting)
            created.append(setting)

        if created:
            await self.db.flush()
            logger.info("Seeded %d email notification settings", len(created))
        return created

    async def list_settings(self) -> list[EmailNotificationSetting]:
        await self.ensure_default_settings()
        result = await self.db.execute(
            select(EmailNotificationSetting).order_by(EmailNotificationSetting.notification_type)
        )
        return list(result.scalars().all())

    async def get_setting(self, notification_type: str) -> EmailNotificationSetting:
        await self.ensure_default_settings()
        result = await self.db.execute(
            select(EmailNotificationSetting).where(
                EmailNotificationSetting.notification_type == notification_type
            )
        )
        setting = result.scalar_one_or_none()
        if not setting:
            raise NotFoundError("Email notification type", notification_type)
        return setting

    async def update_setting(
        self, notification_type: str, enabled: bool, updated_by_id: int
    ) -> EmailNotificationSetting:
        """Turn a notification type on or off for everyone."""
        setting = await self.get_setting(notification_type)
        old_enabled = setting.enabled
        setting.enabled = enabled
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.UPDATE,
            entity_type="EmailNotificationSetting",
            entity_id=setting.id,
            user_id=updated_by_id,
            entity_identifier=notification_type,
            old_values={"enabled": old_enabled},
            new_values={"enabled": enabled},
        )
        await self.db.commit()
        await self.db.refresh(setting)
        logger.info("Email notification %s set to enabled=%s", notification_type, enabled)
        return setting

    async def list_user_preferences(self, user_id: int) -> list[UserEmailPreference]:
        result = await self.db.execute(
            select(UserEmailPreference)
            .where(UserEmailPreference.user_id == user_id)
            .order_by(UserEmailPreference.notification_type)
        )
        return list(result.scalars().all())

    async def update_user_preference(
        self, user_id: int, notification_type: str, enabled: bool
    ) -> UserEmailPreference:
        """Upsert the user's preference for one notification type."""
        await self.get_setting(notification_type)

        result = await self.db.execute(
            select(UserEmailPreference).where(
                UserEmailPreference.user_id == user_id,
                UserEmailPreference.notification_type == notification_type,
            )
        )
        preference = result.scalar_one_or_none()
        if preference:
            preference.enabled = enabled
        else:
            preference = UserEmailPreference(
                user_id=user_id, notification_type=notification_type, enabled=enabled
            )
            self.db.add(preference)

        await self.db.commit()
        await self.db.refresh(preference)
        return preference

    async def is_enabled_for(self, user_id: int, notification_type: str) -> bool:
        """Global switch on and the user has not opted out."""
        result = await self.db.execute(
            select(EmailNotificationSetting.enabled).where(
                EmailNotificationSetting.notification_type == notification_type
            )
        )
        global_enabled = result.scalar_one_or_none()
        if global_enabled is None:
            if notification_type not in DEFAULT_NOTIFICATION_TYPES:
                return False
            await self.ensure_default_settings()
            global_enabled = True
        if not global_enabled:
            return False

        result = await self.db.execute(
            select(UserEmailPreference.enabled).where(
                UserEmailPreference.user_id == user_id,
                UserEmailPreference.notification_type == notification_type,
            )
        )
        user_enabled = result.scalar_one_or_none()
        return user_enabled is None or user_enabled

    async def queue_email(
        self,
        notification_type: str,
        recipient: User,
        subject: str,
        event_id: int | None = None,
        meeting_id: int | None = None,
    ) -> EmailNotificationLog:
        """Record an outgoing email. Does not commit."""
        enabled = await self.is_enabled_for(recipient.id, notification_type)
        log = EmailNotificationLog(
            notification_type=notification_type,
            recipient_email=recipient.email,
            recipient_user_id=recipient.id,
            subject=subject,
            status=EmailLogStatus.PENDING.value if enabled else EmailLogStatus.SKIPPED.value,
            event_id=event_id,
            meeting_id=meeting_id,
        )
        self.db.add(log)
        await self.db.flush()

        if enabled:
            logger.debug("Queued %s email to user %s", notification_type, recipient.id)
        else:
            logger.debug("Skipped %s email to user %s (disabled)", notification_type, recipient.id)
        return log

    async def list_logs(
        self, viewer: User, limit: int | None = None
    ) -> list[EmailNotificationLog]:
        """Admins see every log entry, everyone else only their own."""
        limit = limit or settings.notification_page_limit
        query = select(EmailNotificationLog).order_by(
            EmailNotificationLog.created_at.desc(), EmailNotificationLog.id.desc()
        )
        if not viewer.is_admin:
            query = query.where(EmailNotificationLog.recipient_user_id == viewer.id)
        result = await self.db.execute(query.limit(limit))
        return list(result.scalars().all())
