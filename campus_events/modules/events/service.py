"""Service for Events module: scheduling, lifecycle and the approval gate."""

import datetime
import logging
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.auth.models import User, UserRole
from campus_events.core.audit.service import AuditAction, AuditService
from campus_events.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    PreconditionFailedError,
    SchedulingConflictError,
    ValidationError,
)
from campus_events.modules.email_notifications.models import EmailNotificationLog
from campus_events.modules.events.models import (
    CLOSED_STATUSES,
    SLOT_HOLDING_STATUSES,
    Event,
    EventCategory,
    EventStatus,
)
from campus_events.modules.events.schemas import ConflictCheckResult, EventCreate, EventUpdate
from campus_events.modules.meetings.models import Meeting, MeetingParticipant
from campus_events.modules.notifications.models import Notification
from campus_events.modules.notifications.service import NotificationService
from campus_events.modules.registrations.models import Registration
from campus_events.modules.resource_requests.models import ResourceRequest
from campus_events.modules.resource_requests.service import ResourceRequestService
from campus_events.modules.resources.service import ResourceService

logger = logging.getLogger(__name__)

APPROVAL_REQUIRES_RESOURCES_MESSAGE = (
    "Resources must be allocated before approving the event. "
    "Please allocate resources first."
)

# Fields whose change is announced to registered users
_SCHEDULE_FIELDS = ("date", "time", "venue")
_NULLABLE_FIELDS = ("description", "image_url")


def _audit_value(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return value


def _is_slot_conflict(exc: IntegrityError) -> bool:
    """True if the error comes from the one-live-event-per-slot index."""
    message = str(exc.orig).lower()
    return "uq_events_active_slot" in message or (
        "unique" in message and "events.date" in message and "events.venue" in message
    )


class EventService:
    """Service for creating, editing and deciding events."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)
        self.resources = ResourceService(db)
        self.notifications = NotificationService(db)

    # --- Scheduling ---

    async def _find_slot_holder(
        self,
        date: datetime.date,
        venue: str,
        exclude_event_id: int | None = None,
    ) -> Event | None:
        query = select(Event).where(
            Event.date == date,
            Event.venue == venue,
            Event.status.in_(SLOT_HOLDING_STATUSES),
        )
        if exclude_event_id is not None:
            query = query.where(Event.id != exclude_event_id)

        result = await self.db.execute(query.order_by(Event.id).limit(1))
        return result.scalar_one_or_none()

    async def check_scheduling_conflict(
        self,
        date: datetime.date,
        venue: str,
        exclude_event_id: int | None = None,
    ) -> ConflictCheckResult:
        """Look for a live (pending or approved) event at the same venue and date.

        Cancelled and rejected events never block a slot. When editing an
        event, pass its id as exclude_event_id so it does not conflict with
        itself.
        """
        holder = await self._find_slot_holder(date, venue, exclude_event_id)
        if holder is None:
            return ConflictCheckResult(has_conflict=False)
        return ConflictCheckResult(has_conflict=True, conflicting_event_title=holder.title)

    async def check_scheduling_conflict_for(
        self,
        viewer: User,
        date: datetime.date,
        venue: str,
        exclude_event_id: int | None = None,
    ) -> ConflictCheckResult:
        """Conflict check as seen by the viewer: titles of events hidden from them are not shown."""
        holder = await self._find_slot_holder(date, venue, exclude_event_id)
        if holder is None:
            return ConflictCheckResult(has_conflict=False)
        title = holder.title if self._can_view(holder, viewer) else None
        return ConflictCheckResult(has_conflict=True, conflicting_event_title=title)

    async def _ensure_slot_free(
        self, date: datetime.date, venue: str, exclude_event_id: int | None = None
    ) -> None:
        conflict = await self.check_scheduling_conflict(date, venue, exclude_event_id)
        if conflict.has_conflict:
            logger.warning(
                "Scheduling conflict at %s on %s with %r", venue, date, conflict.conflicting_event_title
            )
            raise SchedulingConflictError(conflict.conflicting_event_title, venue, date)

    async def _flush_event(self, event: Event) -> None:
        """Flush, turning a lost check-then-write race into a scheduling conflict."""
        try:
            await self.db.flush()
        except IntegrityError as exc:
            if not _is_slot_conflict(exc):
                raise
            logger.warning("Slot %s on %s taken concurrently", event.venue, event.date)
            raise SchedulingConflictError(None, event.venue, event.date) from exc

    # --- Queries ---

    async def get_event(self, event_id: int) -> Event:
        result = await self.db.execute(
            select(Event).where(Event.id == event_id).options(selectinload(Event.organizer))
        )
        event = result.scalar_one_or_none()
        if not event:
            raise NotFoundError("Event", event_id)
        return event

    async def get_visible_event(self, event_id: int, viewer: User) -> Event:
        """Get an event the viewer is allowed to see; hidden events look missing."""
        event = await self.get_event(event_id)
        if not self._can_view(event, viewer):
            raise NotFoundError("Event", event_id)
        return event

    async def _get_event_for_update(self, event_id: int) -> Event:
        result = await self.db.execute(
            select(Event).where(Event.id == event_id).with_for_update()
        )
        event = result.scalar_one_or_none()
        if not event:
            raise NotFoundError("Event", event_id)
        return event

    async def list_events(
        self,
        viewer: User,
        status: EventStatus | None = None,
        category: EventCategory | None = None,
        organizer_id: int | None = None,
        date_from: datetime.date | None = None,
        date_to: datetime.date | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 100,
    ) -> tuple[list[Event], int]:
        """List events visible to the viewer.

        Students only see approved events; organizers also see their own
        events in any status; admins see everything.
        """
        query = (
            select(Event)
            .options(selectinload(Event.organizer))
            .order_by(Event.date, Event.time, Event.id)
        )

        if viewer.has_role(UserRole.STUDENT):
            query = query.where(Event.status == EventStatus.APPROVED.value)
        elif viewer.has_role(UserRole.ORGANIZER):
            query = query.where(
                or_(Event.status == EventStatus.APPROVED.value, Event.organizer_id == viewer.id)
            )

        if status is not None:
            query = query.where(Event.status == status.value)
        if category is not None:
            query = query.where(Event.category == category.value)
        if organizer_id is not None:
            query = query.where(Event.organizer_id == organizer_id)
        if date_from is not None:
            query = query.where(Event.date >= date_from)
        if date_to is not None:
            query = query.where(Event.date <= date_to)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(Event.title.ilike(pattern), Event.venue.ilike(pattern)))

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        offset = (page - 1) * limit
        result = await self.db.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all()), total

    # --- Lifecycle ---

    async def create_event(
        self, data: EventCreate, organizer: User, commit: bool = True
    ) -> Event:
        """Submit an event in status 'pending' after the scheduling check."""
        await self._ensure_slot_free(data.date, data.venue)

        event = Event(
            title=data.title,
            description=data.description,
            date=data.date,
            time=data.time,
            venue=data.venue,
            category=data.category.value,
            capacity=data.capacity,
            registered_count=0,
            attended_count=0,
            status=EventStatus.PENDING.value,
            organizer_id=organizer.id,
            image_url=data.image_url,
        )
        self.db.add(event)
        await self._flush_event(event)

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Event",
            entity_id=event.id,
            user_id=organizer.id,
            entity_identifier=event.title,
            new_values={
                "date": event.date.isoformat(),
                "venue": event.venue,
                "capacity": event.capacity,
            },
        )

        if data.resource_requests:
            await ResourceRequestService(self.db).create_bulk_requests(
                event.id, data.resource_requests, requested_by=organizer, commit=False
            )

        admins = await self._active_users_with_role(UserRole.ADMIN)
        await self.notifications.notify_many(
            [a for a in admins if a.id != organizer.id],
            "event_created",
            "New event awaiting approval",
            f'"{event.title}" at {event.venue} on {event.date} was submitted by {organizer.full_name}.',
            event_id=event.id,
        )

        if commit:
            await self.db.commit()
        logger.info("Event %s (%s) created by user %s", event.id, event.title, organizer.id)
        return await self.get_event(event.id)

    async def update_event(
        self, event_id: int, data: EventUpdate, acting_user: User, commit: bool = True
    ) -> Event:
        """Edit an event. Date/venue changes re-run the scheduling check, excluding itself."""
        event = await self._get_event_for_update(event_id)
        self._ensure_can_manage(event, acting_user)
        if event.status in CLOSED_STATUSES:
            raise ValidationError(f"Cannot edit a {event.status} event", "status")

        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in _NULLABLE_FIELDS
        }
        if "category" in changes:
            changes["category"] = EventCategory(changes["category"]).value

        if "capacity" in changes and changes["capacity"] < event.registered_count:
            raise ValidationError(
                f"Capacity cannot be lower than the {event.registered_count} registered users",
                "capacity",
            )

        if "date" in changes or "venue" in changes:
            await self._ensure_slot_free(
                changes.get("date", event.date),
                changes.get("venue", event.venue),
                exclude_event_id=event.id,
            )

        old_values = {field: _audit_value(getattr(event, field)) for field in changes}
        for field, value in changes.items():
            setattr(event, field, value)
        await self._flush_event(event)

        await self.audit.log(
            action=AuditAction.UPDATE,
            entity_type="Event",
            entity_id=event.id,
            user_id=acting_user.id,
            entity_identifier=event.title,
            old_values=old_values,
            new_values={field: _audit_value(value) for field, value in changes.items()},
        )

        schedule_changed = any(
            field in changes and old_values[field] != _audit_value(changes[field])
            for field in _SCHEDULE_FIELDS
        )
        if schedule_changed:
            await self.notifications.notify_many(
                await self._registered_users(event.id),
                "event_updated",
                "Event updated",
                f'"{event.title}" now takes place at {event.venue} on {event.date} at '
                f"{event.time.strftime('%H:%M')}.",
                event_id=event.id,
            )

        if commit:
            await self.db.commit()
        return await self.get_event(event.id)

    async def set_event_status(
        self,
        event_id: int,
        status: EventStatus,
        decided_by: User,
        commit: bool = True,
    ) -> Event:
        """Approve or reject a pending event.

        Approval is gated: an event without any resource allocation cannot be
        approved and stays pending.
        """
        if status not in (EventStatus.APPROVED, EventStatus.REJECTED):
            raise ValidationError("Status must be approved or rejected", "status")

        event = await self._get_event_for_update(event_id)
        if event.status != EventStatus.PENDING.value:
            raise ValidationError(
                f"Only pending events can be approved or rejected (event is {event.status})",
                "status",
            )

        if status == EventStatus.APPROVED and not await self.resources.has_allocations(event.id):
            logger.warning("Approval of event %s blocked: no resources allocated", event.id)
            raise PreconditionFailedError(APPROVAL_REQUIRES_RESOURCES_MESSAGE)

        event.status = status.value
        await self._flush_event(event)

        await self.audit.log(
            action=AuditAction.APPROVE if status == EventStatus.APPROVED else AuditAction.REJECT,
            entity_type="Event",
            entity_id=event.id,
            user_id=decided_by.id,
            entity_identifier=event.title,
            old_values={"status": EventStatus.PENDING.value},
            new_values={"status": event.status},
        )

        organizer = await self.db.get(User, event.organizer_id)
        if organizer is not None:
            await self.notifications.notify(
                organizer,
                f"event_{status.value}",
                f"Event {status.value}",
                f'Your event "{event.title}" has been {status.value}.',
                event_id=event.id,
            )

        if commit:
            await self.db.commit()
        logger.info("Event %s %s by user %s", event.id, status.value, decided_by.id)
        return await self.get_event(event.id)

    async def cancel_event(
        self, event_id: int, acting_user: User, commit: bool = True
    ) -> Event:
        """Cancel an approved event and tell registered users.

        Allocations are kept for the record; delete the event to free them.
        """
        event = await self._get_event_for_update(event_id)
        self._ensure_can_manage(event, acting_user)
        if event.status != EventStatus.APPROVED.value:
            raise ValidationError(
                f"Only approved events can be cancelled (event is {event.status})", "status"
            )

        event.status = EventStatus.CANCELLED.value
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CANCEL,
            entity_type="Event",
            entity_id=event.id,
            user_id=acting_user.id,
            entity_identifier=event.title,
            old_values={"status": EventStatus.APPROVED.value},
            new_values={"status": event.status},
        )

        await self.notifications.notify_many(
            await self._registered_users(event.id),
            "event_cancelled",
            "Event cancelled",
            f'"{event.title}" on {event.date} has been cancelled.',
            event_id=event.id,
        )

        if commit:
            await self.db.commit()
        logger.info("Event %s cancelled by user %s", event.id, acting_user.id)
        return await self.get_event(event.id)

    async def delete_event(self, event_id: int, acting_user: User, commit: bool = True) -> None:
        """Delete an event and everything attached to it.

        Allocated resources go back to the pool first.
        """
        event = await self._get_event_for_update(event_id)
        self._ensure_can_manage(event, acting_user)
        title = event.title

        released = await self.resources.release_event_allocations(event.id, acting_user.id)

        meeting_ids = select(Meeting.id).where(Meeting.event_id == event.id)
        await self.db.execute(
            update(EmailNotificationLog)
            .where(
                or_(
                    EmailNotificationLog.event_id == event.id,
                    EmailNotificationLog.meeting_id.in_(meeting_ids),
                )
            )
            .values(event_id=None, meeting_id=None)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            update(Notification)
            .where(Notification.event_id == event.id)
            .values(event_id=None)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            delete(MeetingParticipant)
            .where(MeetingParticipant.meeting_id.in_(meeting_ids))
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            delete(Meeting)
            .where(Meeting.event_id == event.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            delete(Registration)
            .where(Registration.event_id == event.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            delete(ResourceRequest)
            .where(ResourceRequest.event_id == event.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.delete(event)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.DELETE,
            entity_type="Event",
            entity_id=event_id,
            user_id=acting_user.id,
            entity_identifier=title,
            comment=f"Released {released} resource allocations",
        )

        if commit:
            await self.db.commit()
        logger.info("Event %s deleted by user %s", event_id, acting_user.id)

    # --- Helpers ---

    @staticmethod
    def _can_view(event: Event, viewer: User) -> bool:
        if viewer.is_admin or event.status == EventStatus.APPROVED.value:
            return True
        return viewer.is_organizer and event.organizer_id == viewer.id

    @staticmethod
    def _ensure_can_manage(event: Event, user: User) -> None:
        if user.is_admin:
            return
        if user.is_organizer and event.organizer_id == user.id:
            return
        raise AuthorizationError("Only the event organizer or an admin can change this event")

    async def _registered_users(self, event_id: int) -> list[User]:
        result = await self.db.execute(
            select(User)
            .join(Registration, Registration.user_id == User.id)
            .where(Registration.event_id == event_id)
            .order_by(User.id)
        )
        return list(result.scalars().all())

    async def _active_users_with_role(self, role: UserRole) -> list[User]:
        result = await self.db.execute(
            select(User)
            .where(User.role == role.value, User.is_active.is_(True))
            .order_by(User.id)
        )
        return list(result.scalars().all())
