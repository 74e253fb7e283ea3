"""Service for Registrations module."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.auth.models import User
from campus_events.core.audit.service import AuditAction, AuditService
from campus_events.core.exceptions import (
    AuthorizationError,
    CapacityExceededError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from campus_events.modules.events.models import Event, EventStatus
from campus_events.modules.notifications.service import NotificationService
from campus_events.modules.registrations.models import Registration

logger = logging.getLogger(__name__)


class RegistrationService:
    """Registration and attendance for approved events.

    Event.registered_count and Event.attended_count are moved with conditional
    UPDATEs so they never leave [0, capacity] under concurrent registrations.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)
        self.notifications = NotificationService(db)

    async def _get_event(self, event_id: int) -> Event:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        event = result.scalar_one_or_none()
        if not event:
            raise NotFoundError("Event", event_id)
        return event

    async def get_registration(self, registration_id: int) -> Registration:
        result = await self.db.execute(
            select(Registration)
            .where(Registration.id == registration_id)
            .options(selectinload(Registration.user), selectinload(Registration.event))
        )
        registration = result.scalar_one_or_none()
        if not registration:
            raise NotFoundError("Registration", registration_id)
        return registration

    async def get_user_registration(self, event_id: int, user_id: int) -> Registration | None:
        result = await self.db.execute(
            select(Registration)
            .where(Registration.event_id == event_id, Registration.user_id == user_id)
            .options(selectinload(Registration.user), selectinload(Registration.event))
        )
        return result.scalar_one_or_none()

    async def register(self, event_id: int, user: User, commit: bool = True) -> Registration:
        """Register the user for an approved event with free places."""
        event = await self._get_event(event_id)
        if event.status != EventStatus.APPROVED.value:
            raise ValidationError("Registration is only open for approved events", "event_id")

        if await self.get_user_registration(event_id, user.id):
            raise DuplicateError("Registration", "event_id", event_id)

        result = await self.db.execute(
            update(Event)
            .where(Event.id == event_id, Event.registered_count < Event.capacity)
            .values(registered_count=Event.registered_count + 1)
        )
        if result.rowcount != 1:
            logger.info("Event %s is full, registration of user %s refused", event_id, user.id)
            raise CapacityExceededError(event_id, event.capacity)

        registration = Registration(event_id=event_id, user_id=user.id, attended=False)
        self.db.add(registration)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            raise DuplicateError("Registration", "event_id", event_id) from exc

        await self.db.refresh(event)
        await self.notifications.notify(
            user,
            "event_registration",
            "Registration confirmed",
            f'You are registered for "{event.title}" on {event.date} at {event.venue}.',
            event_id=event.id,
        )

        if commit:
            await self.db.commit()
        logger.info(
            "User %s registered for event %s (%d/%d)",
            user.id,
            event_id,
            event.registered_count,
            event.capacity,
        )
        return await self.get_registration(registration.id)

    async def cancel_registration(self, event_id: int, user: User, commit: bool = True) -> None:
        registration = await self.get_user_registration(event_id, user.id)
        if not registration:
            raise NotFoundError("Registration for event", event_id)

        event = registration.event
        values = {"registered_count": Event.registered_count - 1}
        if registration.attended:
            values["attended_count"] = Event.attended_count - 1
        await self.db.execute(
            update(Event)
            .where(Event.id == event_id, Event.registered_count > 0)
            .values(**values)
        )
        await self.db.delete(registration)
        await self.db.flush()
        await self.db.refresh(event)

        if commit:
            await self.db.commit()
        logger.info("User %s cancelled registration for event %s", user.id, event_id)

    async def mark_attendance(
        self, registration_id: int, attended: bool, marked_by: User, commit: bool = True
    ) -> Registration:
        """Set the attendance mark. attended_count only moves when the mark changes."""
        registration = await self.get_registration(registration_id)
        event = registration.event
        if not marked_by.is_admin and event.organizer_id != marked_by.id:
            raise AuthorizationError("Only the event organizer or an admin can mark attendance")

        if registration.attended == attended:
            return registration

        if attended:
            await self.db.execute(
                update(Event)
                .where(Event.id == event.id, Event.attended_count < Event.registered_count)
                .values(attended_count=Event.attended_count + 1)
            )
            registration.attended_at = datetime.now(timezone.utc)
        else:
            await self.db.execute(
                update(Event)
                .where(Event.id == event.id, Event.attended_count > 0)
                .values(attended_count=Event.attended_count - 1)
            )
            registration.attended_at = None
        registration.attended = attended
        await self.db.flush()
        await self.db.refresh(event)

        await self.audit.log(
            action=AuditAction.UPDATE,
            entity_type="Registration",
            entity_id=registration.id,
            user_id=marked_by.id,
            old_values={"attended": not attended},
            new_values={"attended": attended},
        )

        if commit:
            await self.db.commit()
        return registration

    async def list_user_registrations(self, user_id: int) -> list[Registration]:
        result = await self.db.execute(
            select(Registration)
            .where(Registration.user_id == user_id)
            .options(
                selectinload(Registration.user),
                selectinload(Registration.event).selectinload(Event.organizer),
            )
            .order_by(Registration.registered_at.desc(), Registration.id.desc())
        )
        return list(result.scalars().all())

    async def list_event_registrations(self, event_id: int, viewer: User) -> list[Registration]:
        """Attendee list, for the event organizer and admins."""
        event = await self._get_event(event_id)
        if not viewer.is_admin and event.organizer_id != viewer.id:
            raise AuthorizationError("Only the event organizer or an admin can see registrations")

        result = await self.db.execute(
            select(Registration)
            .where(Registration.event_id == event_id)
            .options(selectinload(Registration.user))
            .order_by(Registration.registered_at, Registration.id)
        )
        return list(result.scalars().all())
