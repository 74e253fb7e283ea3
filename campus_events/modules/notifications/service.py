"""Service for in-app notifications."""

import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.models import User
from campus_events.core.config import settings
from campus_events.core.exceptions import NotFoundError
from campus_events.modules.email_notifications.service import EmailNotificationService
from campus_events.modules.notifications.models import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates in-app notifications and queues the matching email."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.emails = EmailNotificationService(db)

    async def notify(
        self,
        recipient: User,
        notification_type: str,
        title: str,
        message: str,
        event_id: int | None = None,
        meeting_id: int | None = None,
        send_email: bool = True,
    ) -> Notification:
        """Create a notification for one user. Does not commit."""
        notification = Notification(
            user_id=recipient.id,
            type=notification_type,
            title=title,
            message=message,
            event_id=event_id,
            read=False,
        )
        self.db.add(notification)
        await self.db.flush()

        if send_email:
            await self.emails.queue_email(
                notification_type=notification_type,
                recipient=recipient,
                subject=title,
                event_id=event_id,
                meeting_id=meeting_id,
            )
        return notification

    async def notify_many(
        self,
        recipients: list[User],
        notification_type: str,
        title: str,
        message: str,
        event_id: int | None = None,
        meeting_id: int | None = None,
    ) -> int:
        for recipient in recipients:
            await self.notify(
                recipient,
                notification_type,
                title,
                message,
                event_id=event_id,
                meeting_id=meeting_id,
            )
        if recipients:
            logger.info(
                "Sent %s notification to %d users (event_id=%s)",
                notification_type,
                len(recipients),
                event_id,
            )
        return len(recipients)

    async def list_for_user(
        self, user_id: int, unread_only: bool = False, limit: int | None = None
    ) -> list[Notification]:
        query = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit or settings.notification_page_limit)
        )
        if unread_only:
            query = query.where(Notification.read.is_(False))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def unread_count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id, Notification.read.is_(False)
            )
        )
        return result.scalar() or 0

    async def mark_read(self, notification_id: int, user_id: int) -> Notification:
        """Mark one of the user's notifications as read."""
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id, Notification.user_id == user_id
            )
        )
        notification = result.scalar_one_or_none()
        if not notification:
            # Other users' notifications are reported as missing
            raise NotFoundError("Notification", notification_id)

        notification.read = True
        await self.db.commit()
        await self.db.refresh(notification)
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
        )
        await self.db.commit()
        return result.rowcount or 0
