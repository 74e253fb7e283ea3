"""Service for Meetings module."""

import logging

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.auth.models import User
from campus_events.core.audit.service import AuditAction, AuditService
from campus_events.core.config import settings
from campus_events.core.exceptions import (
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from campus_events.modules.email_notifications.models import EmailNotificationLog
from campus_events.modules.events.models import Event
from campus_events.modules.meetings.models import Meeting, MeetingParticipant, ParticipantStatus
from campus_events.modules.meetings.schemas import MeetingCreate, MeetingUpdate
from campus_events.modules.notifications.service import NotificationService
from campus_events.modules.registrations.models import Registration

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("title", "meeting_link", "meeting_date", "meeting_time", "duration_minutes")


class MeetingService:
    """Meetings attached to events and their invited participants."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)
        self.notifications = NotificationService(db)

    async def get_meeting(self, meeting_id: int) -> Meeting:
        result = await self.db.execute(
            select(Meeting)
            .where(Meeting.id == meeting_id)
            .options(
                selectinload(Meeting.event),
                selectinload(Meeting.participants).selectinload(MeetingParticipant.user),
            )
            .execution_options(populate_existing=True)
        )
        meeting = result.scalar_one_or_none()
        if not meeting:
            raise NotFoundError("Meeting", meeting_id)
        return meeting

    async def _get_event(self, event_id: int) -> Event:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        event = result.scalar_one_or_none()
        if not event:
            raise NotFoundError("Event", event_id)
        return event

    async def _get_user(self, user_id: int) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("User", user_id)
        return user

    @staticmethod
    def _ensure_can_manage(event: Event, user: User) -> None:
        if user.is_admin or (user.is_organizer and event.organizer_id == user.id):
            return
        raise AuthorizationError("Only the event organizer or an admin can manage meetings")

    def _meeting_options(self):
        return (
            selectinload(Meeting.event),
            selectinload(Meeting.participants).selectinload(MeetingParticipant.user),
        )

    async def list_meetings(self, event_id: int | None = None) -> list[Meeting]:
        query = (
            select(Meeting)
            .options(*self._meeting_options())
            .order_by(Meeting.meeting_date, Meeting.meeting_time, Meeting.id)
        )
        if event_id is not None:
            query = query.where(Meeting.event_id == event_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_user_meetings(self, user_id: int) -> list[Meeting]:
        """Meetings the user is invited to plus meetings of events they registered for."""
        invited = select(MeetingParticipant.meeting_id).where(MeetingParticipant.user_id == user_id)
        registered_events = select(Registration.event_id).where(Registration.user_id == user_id)
        result = await self.db.execute(
            select(Meeting)
            .where(or_(Meeting.id.in_(invited), Meeting.event_id.in_(registered_events)))
            .options(*self._meeting_options())
            .order_by(Meeting.meeting_date, Meeting.meeting_time, Meeting.id)
        )
        return list(result.scalars().all())

    async def can_view_meeting(self, meeting: Meeting, user: User) -> bool:
        if user.is_admin or meeting.created_by_id == user.id:
            return True
        if meeting.event is not None and meeting.event.organizer_id == user.id:
            return True
        if any(p.user_id == user.id for p in meeting.participants):
            return True
        result = await self.db.execute(
            select(Registration.id).where(
                Registration.event_id == meeting.event_id, Registration.user_id == user.id
            )
        )
        return result.first() is not None

    async def get_visible_meeting(self, meeting_id: int, viewer: User) -> Meeting:
        meeting = await self.get_meeting(meeting_id)
        if not await self.can_view_meeting(meeting, viewer):
            raise NotFoundError("Meeting", meeting_id)
        return meeting

    async def create_meeting(self, data: MeetingCreate, created_by: User, commit: bool = True) -> Meeting:
        event = await self._get_event(data.event_id)
        self._ensure_can_manage(event, created_by)

        meeting = Meeting(
            event_id=event.id,
            title=data.title,
            description=data.description,
            meeting_link=data.meeting_link,
            meeting_date=data.meeting_date,
            meeting_time=data.meeting_time,
            duration_minutes=data.duration_minutes or settings.default_meeting_duration_minutes,
            agenda=data.agenda,
            created_by_id=created_by.id,
        )
        self.db.add(meeting)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Meeting",
            entity_id=meeting.id,
            user_id=created_by.id,
            entity_identifier=meeting.title,
            new_values={"event_id": event.id, "meeting_date": meeting.meeting_date.isoformat()},
        )

        invited_ids: set[int] = set()
        for user_id in dict.fromkeys(data.participant_ids):
            await self._invite(meeting, await self._get_user(user_id), event)
            invited_ids.add(user_id)

        result = await self.db.execute(
            select(User)
            .join(Registration, Registration.user_id == User.id)
            .where(Registration.event_id == event.id)
            .order_by(User.id)
        )
        registrants = [u for u in result.scalars().all() if u.id not in invited_ids]
        await self.notifications.notify_many(
            registrants,
            "meeting_scheduled",
            "Meeting scheduled",
            f'"{meeting.title}" for "{event.title}" is scheduled on {meeting.meeting_date} '
            f"at {meeting.meeting_time.strftime('%H:%M')}.",
            event_id=event.id,
            meeting_id=meeting.id,
        )

        if commit:
            await self.db.commit()
        logger.info("Meeting %s created for event %s", meeting.id, event.id)
        return await self.get_meeting(meeting.id)

    async def update_meeting(
        self, meeting_id: int, data: MeetingUpdate, acting_user: User, commit: bool = True
    ) -> Meeting:
        meeting = await self.get_meeting(meeting_id)
        self._ensure_can_manage(meeting.event, acting_user)

        changes = data.model_dump(exclude_unset=True)
        for field in _REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be empty", field)
        for field, value in changes.items():
            setattr(meeting, field, value)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.UPDATE,
            entity_type="Meeting",
            entity_id=meeting.id,
            user_id=acting_user.id,
            entity_identifier=meeting.title,
            new_values={k: v.isoformat() if hasattr(v, "isoformat") else v for k, v in changes.items()},
        )

        await self.notifications.notify_many(
            [p.user for p in meeting.participants],
            "meeting_updated",
            "Meeting updated",
            f'"{meeting.title}" was updated.',
            event_id=meeting.event_id,
            meeting_id=meeting.id,
        )

        if commit:
            await self.db.commit()
        return await self.get_meeting(meeting.id)

    async def delete_meeting(self, meeting_id: int, acting_user: User, commit: bool = True) -> None:
        meeting = await self.get_meeting(meeting_id)
        self._ensure_can_manage(meeting.event, acting_user)

        await self.notifications.notify_many(
            [p.user for p in meeting.participants],
            "meeting_cancelled",
            "Meeting cancelled",
            f'"{meeting.title}" on {meeting.meeting_date} has been cancelled.',
            event_id=meeting.event_id,
        )
        await self.db.execute(
            update(EmailNotificationLog)
            .where(EmailNotificationLog.meeting_id == meeting.id)
            .values(meeting_id=None)
            .execution_options(synchronize_session=False)
        )
        await self.db.delete(meeting)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.DELETE,
            entity_type="Meeting",
            entity_id=meeting_id,
            user_id=acting_user.id,
            entity_identifier=meeting.title,
        )

        if commit:
            await self.db.commit()
        logger.info("Meeting %s deleted by user %s", meeting_id, acting_user.id)

    async def list_participants(self, meeting_id: int) -> list[MeetingParticipant]:
        result = await self.db.execute(
            select(MeetingParticipant)
            .where(MeetingParticipant.meeting_id == meeting_id)
            .options(selectinload(MeetingParticipant.user))
            .order_by(MeetingParticipant.invited_at, MeetingParticipant.id)
        )
        return list(result.scalars().all())

    async def add_participant(
        self, meeting_id: int, user_id: int, acting_user: User, commit: bool = True
    ) -> MeetingParticipant:
        meeting = await self.get_meeting(meeting_id)
        self._ensure_can_manage(meeting.event, acting_user)
        user = await self._get_user(user_id)
        if any(p.user_id == user_id for p in meeting.participants):
            raise DuplicateError("Meeting participant", "user_id", user_id)

        participant = await self._invite(meeting, user, meeting.event)
        if commit:
            await self.db.commit()
        return participant

    async def _invite(self, meeting: Meeting, user: User, event: Event) -> MeetingParticipant:
        participant = MeetingParticipant(
            meeting_id=meeting.id,
            user_id=user.id,
            status=ParticipantStatus.INVITED.value,
            user=user,
        )
        self.db.add(participant)
        await self.db.flush()
        await self.notifications.notify(
            user,
            "meeting_invitation",
            "Meeting invitation",
            f'You are invited to "{meeting.title}" for "{event.title}" on {meeting.meeting_date}.',
            event_id=event.id,
            meeting_id=meeting.id,
        )
        return participant

    async def update_my_participant_status(
        self, meeting_id: int, user: User, status: ParticipantStatus, commit: bool = True
    ) -> MeetingParticipant:
        """Accept or decline an invitation."""
        result = await self.db.execute(
            select(MeetingParticipant)
            .where(MeetingParticipant.meeting_id == meeting_id, MeetingParticipant.user_id == user.id)
            .options(selectinload(MeetingParticipant.user))
        )
        participant = result.scalar_one_or_none()
        if not participant:
            raise NotFoundError("Meeting invitation", meeting_id)

        participant.status = status.value
        await self.db.flush()
        if commit:
            await self.db.commit()
        return participant
