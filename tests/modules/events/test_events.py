"""Tests for Events module (conflict checker, lifecycle, approval gate)."""

from datetime import date, time

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.models import User, UserRole
from campus_events.core.auth.service import AuthService
from campus_events.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    PreconditionFailedError,
    SchedulingConflictError,
    ValidationError,
)
from campus_events.modules.events.models import (
    SLOT_HOLDING_STATUSES,
    Event,
    EventCategory,
    EventStatus,
)
from campus_events.modules.events.schemas import ConflictCheckResult, EventCreate, EventUpdate
from campus_events.modules.events.service import (
    APPROVAL_REQUIRES_RESOURCES_MESSAGE,
    EventService,
)
from campus_events.modules.notifications.models import Notification
from campus_events.modules.registrations.service import RegistrationService
from campus_events.modules.resource_requests.models import ResourceRequest
from campus_events.modules.resource_requests.schemas import ResourceRequestItem
from campus_events.modules.resources.schemas import ResourceTypeCreate
from campus_events.modules.resources.service import ResourceService

EVENT_DAY = date(2030, 5, 20)


async def _create_user(db_session: AsyncSession, email: str, role: UserRole) -> User:
    return await AuthService(db_session).create_user(
        email=email,
        password="Password123",
        full_name=email.split("@")[0].title(),
        role=role,
    )


def _event_data(title: str = "Event A", venue: str = "Main Hall", day: date = EVENT_DAY, **kwargs) -> EventCreate:
    return EventCreate(
        title=title,
        date=day,
        time=time(18, 30),
        venue=venue,
        category=kwargs.pop("category", EventCategory.CULTURAL),
        capacity=kwargs.pop("capacity", 100),
        **kwargs,
    )


class TestSchedulingConflicts:
    """Tests for EventService.check_scheduling_conflict."""

    async def test_no_conflict_on_free_slot(self, db_session: AsyncSession):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        await service.create_event(_event_data(), organizer)

        result = await service.check_scheduling_conflict(EVENT_DAY, "Room 101")
        assert result.has_conflict is False
        assert result.conflicting_event_title is None

        result = await service.check_scheduling_conflict(date(2030, 5, 21), "Main Hall")
        assert result.has_conflict is False

    async def test_conflict_names_existing_event(self, db_session: AsyncSession):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        await service.create_event(_event_data(title="Event A"), organizer)

        result = await service.check_scheduling_conflict(EVENT_DAY, "Main Hall")

        assert result.has_conflict is True
        assert result.conflicting_event_title == "Event A"

    async def test_create_event_in_taken_slot(self, db_session: AsyncSession):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        await service.create_event(_event_data(title="Event A"), organizer)

        with pytest.raises(SchedulingConflictError) as exc_info:
            await service.create_event(_event_data(title="Event B"), organizer)

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == (
            f'Scheduling conflict: "Event A" is already booked at Main Hall on {EVENT_DAY}'
        )

    async def test_cancelled_and_rejected_events_free_the_slot(self, db_session: AsyncSession):
        admin = await _create_user(db_session, "admin@campus.edu", UserRole.ADMIN)
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        event = await service.create_event(_event_data(title="Event A"), organizer)

        await service.set_event_status(event.id, EventStatus.REJECTED, admin)

        result = await service.check_scheduling_conflict(EVENT_DAY, "Main Hall")
        assert result.has_conflict is False
        event_b = await service.create_event(_event_data(title="Event B"), organizer)
        assert event_b.status == EventStatus.PENDING.value

    async def test_cancelled_event_does_not_block(self, db_session: AsyncSession):
        admin = await _create_user(db_session, "admin@campus.edu", UserRole.ADMIN)
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        event = await service.create_event(_event_data(title="Event A"), organizer)
        projector = await ResourceService(db_session).create_resource_type(
            ResourceTypeCreate(name="Projector", total_quantity=2), created_by_id=admin.id
        )
        await ResourceService(db_session).allocate(event.id, projector.id, 1, allocated_by_id=admin.id)
        await service.set_event_status(event.id, EventStatus.APPROVED, admin)
        await service.cancel_event(event.id, organizer)

        result = await service.check_scheduling_conflict(EVENT_DAY, "Main Hall")
        assert result.has_conflict is False

    async def test_exclude_self_when_editing(self, db_session: AsyncSession):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        event = await service.create_event(_event_data(title="Event A"), organizer)

        result = await service.check_scheduling_conflict(
            EVENT_DAY, "Main Hall", exclude_event_id=event.id
        )
        assert result.has_conflict is False

        updated = await service.update_event(
            event.id, EventUpdate(date=EVENT_DAY, venue="Main Hall"), organizer
        )
        assert updated.venue == "Main Hall"

    async def test_update_into_taken_slot(self, db_session: AsyncSession):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        await service.create_event(_event_data(title="Event A"), organizer)
        event_b = await service.create_event(_event_data(title="Event B", venue="Room 101"), organizer)

        with pytest.raises(SchedulingConflictError) as exc_info:
            await service.update_event(event_b.id, EventUpdate(venue="Main Hall"), organizer)

        assert '"Event A"' in exc_info.value.message

    async def test_update_date_only_checks_effective_venue(self, db_session: AsyncSession):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        await service.create_event(_event_data(title="Event A", day=date(2030, 5, 21)), organizer)
        event_b = await service.create_event(_event_data(title="Event B"), organizer)

        with pytest.raises(SchedulingConflictError):
            await service.update_event(event_b.id, EventUpdate(date=date(2030, 5, 21)), organizer)

    async def test_create_event_loses_race_for_slot(self, db_session: AsyncSession, monkeypatch):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        await service.create_event(_event_data(title="Event A"), organizer)

        async def stale_check(*args, **kwargs):
            return ConflictCheckResult(has_conflict=False)

        monkeypatch.setattr(service, "check_scheduling_conflict", stale_check)

        with pytest.raises(SchedulingConflictError) as exc_info:
            await service.create_event(_event_data(title="Event B"), organizer)

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == (
            f"Scheduling conflict: Main Hall is already booked on {EVENT_DAY}"
        )
        assert exc_info.value.details["field"] == "venue"

    async def test_update_event_loses_race_for_slot(self, db_session: AsyncSession, monkeypatch):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        await service.create_event(_event_data(title="Event A"), organizer)
        event_b = await service.create_event(_event_data(title="Event B", venue="Room 101"), organizer)

        async def stale_check(*args, **kwargs):
            return ConflictCheckResult(has_conflict=False)

        monkeypatch.setattr(service, "check_scheduling_conflict", stale_check)

        with pytest.raises(SchedulingConflictError) as exc_info:
            await service.update_event(event_b.id, EventUpdate(venue="Main Hall"), organizer)

        assert exc_info.value.message == (
            f"Scheduling conflict: Main Hall is already booked on {EVENT_DAY}"
        )

    async def test_conflict_hides_title_of_events_the_viewer_cannot_see(
        self, db_session: AsyncSession
    ):
        admin = await _create_user(db_session, "admin@campus.edu", UserRole.ADMIN)
        owner = await _create_user(db_session, "owner@campus.edu", UserRole.ORGANIZER)
        other = await _create_user(db_session, "other@campus.edu", UserRole.ORGANIZER)
        service = EventService(db_session)
        await service.create_event(_event_data(title="Secret Gala"), owner)

        for viewer, title in ((owner, "Secret Gala"), (admin, "Secret Gala"), (other, None)):
            result = await service.check_scheduling_conflict_for(viewer, EVENT_DAY, "Main Hall")
            assert result.has_conflict is True
            assert result.conflicting_event_title == title

        result = await service.check_scheduling_conflict_for(other, EVENT_DAY, "Room 101")
        assert result.has_conflict is False

    async def test_slot_index_blocks_duplicate_live_events(self, db_session: AsyncSession):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        for title in ("Event A", "Event B"):
            db_session.add(
                Event(
                    title=title,
                    date=EVENT_DAY,
                    time=time(9, 0),
                    venue="Main Hall",
                    category=EventCategory.SOCIAL.value,
                    capacity=10,
                    status=EventStatus.PENDING.value,
                    organizer_id=organizer.id,
                )
            )

        with pytest.raises(IntegrityError):
            await db_session.flush()

    async def test_slot_index_ignores_closed_events(self, db_session: AsyncSession):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        for title, status in (("Old", EventStatus.CANCELLED), ("New", EventStatus.PENDING)):
            db_session.add(
                Event(
                    title=title,
                    date=EVENT_DAY,
                    time=time(9, 0),
                    venue="Main Hall",
                    category=EventCategory.SOCIAL.value,
                    capacity=10,
                    status=status.value,
                    organizer_id=organizer.id,
                )
            )
        await db_session.flush()

        result = await db_session.execute(select(Event).where(Event.venue == "Main Hall"))
        assert len(result.scalars().all()) == 2

    @pytest.mark.parametrize("status", list(EventStatus))
    async def test_slot_index_covers_exactly_slot_holding_statuses(
        self, db_session: AsyncSession, status: EventStatus
    ):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        for title, event_status in (("Existing", status), ("New", EventStatus.PENDING)):
            db_session.add(
                Event(
                    title=title,
                    date=EVENT_DAY,
                    time=time(9, 0),
                    venue="Main Hall",
                    category=EventCategory.SOCIAL.value,
                    capacity=10,
                    status=event_status.value,
                    organizer_id=organizer.id,
                )
            )

        if status.value in SLOT_HOLDING_STATUSES:
            with pytest.raises(IntegrityError):
                await db_session.flush()
        else:
            await db_session.flush()
            result = await EventService(db_session).check_scheduling_conflict(EVENT_DAY, "Main Hall")
            assert result.conflicting_event_title == "New"


class TestEventService:
    """Tests for EventService lifecycle and the approval gate."""

    async def _setup(self, db_session: AsyncSession) -> tuple[User, User, Event]:
        admin = await _create_user(db_session, "admin@campus.edu", UserRole.ADMIN)
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        event = await EventService(db_session).create_event(_event_data(), organizer)
        return admin, organizer, event

    async def _allocate_projector(self, db_session: AsyncSession, admin: User, event: Event):
        service = ResourceService(db_session)
        projector = await service.create_resource_type(
            ResourceTypeCreate(name="Projector", total_quantity=10), created_by_id=admin.id
        )
        await service.allocate(event.id, projector.id, 4, allocated_by_id=admin.id)
        return projector

    async def test_create_event_is_pending(self, db_session: AsyncSession):
        _, organizer, event = await self._setup(db_session)

        assert event.status == EventStatus.PENDING.value
        assert event.organizer_id == organizer.id
        assert event.organizer.full_name == "Organizer"
        assert event.registered_count == 0
        assert event.spots_left == 100

    async def test_create_event_notifies_admins(self, db_session: AsyncSession):
        admin, _, event = await self._setup(db_session)

        result = await db_session.execute(
            select(Notification).where(Notification.user_id == admin.id)
        )
        notifications = result.scalars().all()
        assert [n.type for n in notifications] == ["event_created"]
        assert notifications[0].event_id == event.id

    async def test_create_event_with_resource_requests(self, db_session: AsyncSession):
        admin = await _create_user(db_session, "admin@campus.edu", UserRole.ADMIN)
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        chairs = await ResourceService(db_session).create_resource_type(
            ResourceTypeCreate(name="Chairs", total_quantity=100), created_by_id=admin.id
        )

        event = await EventService(db_session).create_event(
            _event_data(
                resource_requests=[ResourceRequestItem(resource_type_id=chairs.id, requested_quantity=30)]
            ),
            organizer,
        )

        result = await db_session.execute(
            select(ResourceRequest).where(ResourceRequest.event_id == event.id)
        )
        requests = result.scalars().all()
        assert len(requests) == 1
        assert requests[0].requested_quantity == 30
        assert requests[0].status == "pending"
        # Requests never touch the pool
        await db_session.refresh(chairs)
        assert chairs.available_quantity == 100

    async def test_approval_blocked_without_allocations(self, db_session: AsyncSession):
        admin, _, event = await self._setup(db_session)
        service = EventService(db_session)

        with pytest.raises(PreconditionFailedError) as exc_info:
            await service.set_event_status(event.id, EventStatus.APPROVED, admin)

        assert exc_info.value.message == APPROVAL_REQUIRES_RESOURCES_MESSAGE
        assert exc_info.value.status_code == 412
        event = await service.get_event(event.id)
        assert event.status == EventStatus.PENDING.value

    async def test_approval_with_allocation(self, db_session: AsyncSession):
        admin, organizer, event = await self._setup(db_session)
        await self._allocate_projector(db_session, admin, event)

        approved = await EventService(db_session).set_event_status(
            event.id, EventStatus.APPROVED, admin
        )

        assert approved.status == EventStatus.APPROVED.value
        result = await db_session.execute(
            select(Notification).where(Notification.user_id == organizer.id)
        )
        assert [n.type for n in result.scalars().all()] == ["event_approved"]

    async def test_rejection_needs_no_allocation(self, db_session: AsyncSession):
        admin, _, event = await self._setup(db_session)

        rejected = await EventService(db_session).set_event_status(
            event.id, EventStatus.REJECTED, admin
        )

        assert rejected.status == EventStatus.REJECTED.value

    async def test_only_pending_events_can_be_decided(self, db_session: AsyncSession):
        admin, _, event = await self._setup(db_session)
        service = EventService(db_session)
        await service.set_event_status(event.id, EventStatus.REJECTED, admin)

        with pytest.raises(ValidationError):
            await service.set_event_status(event.id, EventStatus.APPROVED, admin)

    async def test_status_must_be_a_decision(self, db_session: AsyncSession):
        admin, _, event = await self._setup(db_session)

        with pytest.raises(ValidationError):
            await EventService(db_session).set_event_status(event.id, EventStatus.CANCELLED, admin)

    async def test_update_capacity_below_registrations(self, db_session: AsyncSession):
        admin, organizer, event = await self._setup(db_session)
        await self._allocate_projector(db_session, admin, event)
        service = EventService(db_session)
        await service.set_event_status(event.id, EventStatus.APPROVED, admin)
        student_one = await _create_user(db_session, "one@campus.edu", UserRole.STUDENT)
        student_two = await _create_user(db_session, "two@campus.edu", UserRole.STUDENT)
        await RegistrationService(db_session).register(event.id, student_one)
        await RegistrationService(db_session).register(event.id, student_two)

        with pytest.raises(ValidationError):
            await service.update_event(event.id, EventUpdate(capacity=1), organizer)

        updated = await service.update_event(event.id, EventUpdate(capacity=2), organizer)
        assert updated.capacity == 2

    async def test_update_notifies_registrants_on_schedule_change(self, db_session: AsyncSession):
        admin, organizer, event = await self._setup(db_session)
        await self._allocate_projector(db_session, admin, event)
        service = EventService(db_session)
        await service.set_event_status(event.id, EventStatus.APPROVED, admin)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)
        await RegistrationService(db_session).register(event.id, student)

        await service.update_event(event.id, EventUpdate(title="Renamed"), organizer)
        await service.update_event(event.id, EventUpdate(venue="Auditorium"), organizer)

        result = await db_session.execute(
            select(Notification.type).where(Notification.user_id == student.id)
        )
        assert sorted(result.scalars().all()) == ["event_registration", "event_updated"]

    async def test_cannot_edit_rejected_event(self, db_session: AsyncSession):
        admin, organizer, event = await self._setup(db_session)
        service = EventService(db_session)
        await service.set_event_status(event.id, EventStatus.REJECTED, admin)

        with pytest.raises(ValidationError):
            await service.update_event(event.id, EventUpdate(title="Again"), organizer)

    async def test_other_organizer_cannot_edit(self, db_session: AsyncSession):
        _, _, event = await self._setup(db_session)
        intruder = await _create_user(db_session, "other@campus.edu", UserRole.ORGANIZER)

        with pytest.raises(AuthorizationError):
            await EventService(db_session).update_event(event.id, EventUpdate(title="Mine"), intruder)

    async def test_cancel_requires_approved_event(self, db_session: AsyncSession):
        _, organizer, event = await self._setup(db_session)

        with pytest.raises(ValidationError):
            await EventService(db_session).cancel_event(event.id, organizer)

    async def test_cancel_notifies_registrants(self, db_session: AsyncSession):
        admin, organizer, event = await self._setup(db_session)
        await self._allocate_projector(db_session, admin, event)
        service = EventService(db_session)
        await service.set_event_status(event.id, EventStatus.APPROVED, admin)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)
        await RegistrationService(db_session).register(event.id, student)

        cancelled = await service.cancel_event(event.id, organizer)

        assert cancelled.status == EventStatus.CANCELLED.value
        result = await db_session.execute(
            select(Notification.type).where(
                Notification.user_id == student.id, Notification.type == "event_cancelled"
            )
        )
        assert result.scalar_one() == "event_cancelled"

    async def test_delete_event_releases_allocations(self, db_session: AsyncSession):
        admin, organizer, event = await self._setup(db_session)
        projector = await self._allocate_projector(db_session, admin, event)
        await db_session.refresh(projector)
        assert projector.available_quantity == 6

        await EventService(db_session).delete_event(event.id, organizer)

        await db_session.refresh(projector)
        assert projector.available_quantity == 10
        with pytest.raises(NotFoundError):
            await EventService(db_session).get_event(event.id)
        assert await ResourceService(db_session).list_event_allocations(event.id) == []

    async def test_students_only_see_approved_events(self, db_session: AsyncSession):
        admin, organizer, event = await self._setup(db_session)
        service = EventService(db_session)
        other = await service.create_event(_event_data(title="Event B", venue="Room 101"), organizer)
        await self._allocate_projector(db_session, admin, other)
        await service.set_event_status(other.id, EventStatus.APPROVED, admin)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)

        events, total = await service.list_events(viewer=student)
        assert total == 1
        assert [e.title for e in events] == ["Event B"]

        events, total = await service.list_events(viewer=admin)
        assert total == 2

        with pytest.raises(NotFoundError):
            await service.get_visible_event(event.id, student)

    async def test_list_events_filters(self, db_session: AsyncSession):
        admin, organizer, _ = await self._setup(db_session)
        service = EventService(db_session)
        await service.create_event(
            _event_data(title="Sports Day", venue="Stadium", category=EventCategory.SPORTS),
            organizer,
        )

        events, _ = await service.list_events(viewer=admin, category=EventCategory.SPORTS)
        assert [e.title for e in events] == ["Sports Day"]

        events, _ = await service.list_events(viewer=admin, search="stadium")
        assert [e.title for e in events] == ["Sports Day"]

        events, total = await service.list_events(
            viewer=admin, date_from=date(2030, 6, 1)
        )
        assert total == 0


class TestEventEndpoints:
    """Tests for event API endpoints."""

    async def _login(
        self, client: AsyncClient, db_session: AsyncSession, email: str, role: UserRole
    ) -> dict[str, str]:
        await _create_user(db_session, email, role)
        await db_session.commit()
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": "Password123"},
        )
        return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}

    def _payload(self, title: str = "Event A", venue: str = "Main Hall") -> dict:
        return {
            "title": title,
            "date": "2030-05-20",
            "time": "18:30",
            "venue": venue,
            "category": "cultural",
            "capacity": 100,
        }

    async def test_create_and_conflict(self, client: AsyncClient, db_session: AsyncSession):
        organizer = await self._login(client, db_session, "organizer@campus.edu", UserRole.ORGANIZER)

        response = await client.post("/api/v1/events", headers=organizer, json=self._payload())
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["organizer_name"] == "Organizer"

        response = await client.get(
            "/api/v1/events/conflicts",
            headers=organizer,
            params={"date": "2030-05-20", "venue": "Main Hall"},
        )
        assert response.json()["data"] == {
            "has_conflict": True,
            "conflicting_event_title": "Event A",
        }

        response = await client.post(
            "/api/v1/events", headers=organizer, json=self._payload(title="Event B")
        )
        assert response.status_code == 409
        assert '"Event A"' in response.json()["message"]
        assert response.json()["errors"][0]["field"] == "venue"

    async def test_other_organizer_cannot_see_hidden_event_details(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        admin = await self._login(client, db_session, "admin@campus.edu", UserRole.ADMIN)
        owner = await self._login(client, db_session, "owner@campus.edu", UserRole.ORGANIZER)
        other = await self._login(client, db_session, "other@campus.edu", UserRole.ORGANIZER)
        response = await client.post(
            "/api/v1/events", headers=owner, json=self._payload(title="Secret Gala")
        )
        event_id = response.json()["data"]["id"]

        params = {"date": "2030-05-20", "venue": "Main Hall"}
        response = await client.get("/api/v1/events/conflicts", headers=other, params=params)
        assert response.json()["data"] == {"has_conflict": True, "conflicting_event_title": None}
        response = await client.get("/api/v1/events/conflicts", headers=admin, params=params)
        assert response.json()["data"]["conflicting_event_title"] == "Secret Gala"

        response = await client.get(
            "/api/v1/resources/allocations", headers=other, params={"event_id": event_id}
        )
        assert response.status_code == 404
        response = await client.get(
            "/api/v1/resources/allocations", headers=owner, params={"event_id": event_id}
        )
        assert response.status_code == 200
        assert response.json()["data"] == []

    async def test_students_cannot_create_events(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        student = await self._login(client, db_session, "student@campus.edu", UserRole.STUDENT)

        response = await client.post("/api/v1/events", headers=student, json=self._payload())

        assert response.status_code == 403

    async def test_approval_gate_endpoint(self, client: AsyncClient, db_session: AsyncSession):
        admin = await self._login(client, db_session, "admin@campus.edu", UserRole.ADMIN)
        organizer = await self._login(client, db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        response = await client.post("/api/v1/events", headers=organizer, json=self._payload())
        event_id = response.json()["data"]["id"]

        response = await client.post(
            f"/api/v1/events/{event_id}/status", headers=admin, json={"status": "approved"}
        )
        assert response.status_code == 412
        assert response.json()["message"] == APPROVAL_REQUIRES_RESOURCES_MESSAGE

        response = await client.get(f"/api/v1/events/{event_id}", headers=admin)
        assert response.json()["data"]["status"] == "pending"

        response = await client.post(
            "/api/v1/resources/types", headers=admin, json={"name": "Microphone", "total_quantity": 3}
        )
        resource_type_id = response.json()["data"]["id"]
        await client.post(
            "/api/v1/resources/allocations",
            headers=admin,
            json={"event_id": event_id, "resource_type_id": resource_type_id, "quantity": 1},
        )

        response = await client.post(
            f"/api/v1/events/{event_id}/status", headers=admin, json={"status": "approved"}
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "approved"

    async def test_organizer_cannot_approve(self, client: AsyncClient, db_session: AsyncSession):
        organizer = await self._login(client, db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        response = await client.post("/api/v1/events", headers=organizer, json=self._payload())
        event_id = response.json()["data"]["id"]

        response = await client.post(
            f"/api/v1/events/{event_id}/status", headers=organizer, json={"status": "approved"}
        )

        assert response.status_code == 403

    async def test_invalid_payload(self, client: AsyncClient, db_session: AsyncSession):
        organizer = await self._login(client, db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        payload = self._payload()
        payload["capacity"] = 0

        response = await client.post("/api/v1/events", headers=organizer, json=payload)

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "capacity"
