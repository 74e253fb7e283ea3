"""Tests for Registrations module."""

from datetime import date, time

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.models import User, UserRole
from campus_events.core.auth.service import AuthService
from campus_events.core.exceptions import (
    AuthorizationError,
    CapacityExceededError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from campus_events.modules.events.models import Event, EventCategory, EventStatus
from campus_events.modules.events.schemas import EventCreate
from campus_events.modules.events.service import EventService
from campus_events.modules.registrations.service import RegistrationService
from campus_events.modules.resources.schemas import ResourceTypeCreate
from campus_events.modules.resources.service import ResourceService


async def _create_user(db_session: AsyncSession, email: str, role: UserRole) -> User:
    return await AuthService(db_session).create_user(
        email=email,
        password="Password123",
        full_name=email.split("@")[0].title(),
        role=role,
    )


async def _approved_event(
    db_session: AsyncSession, admin: User, organizer: User, capacity: int = 2
) -> Event:
    service = EventService(db_session)
    event = await service.create_event(
        EventCreate(
            title="Chess Tournament",
            date=date(2030, 2, 10),
            time=time(14, 0),
            venue="Library Hall",
            category=EventCategory.SPORTS,
            capacity=capacity,
        ),
        organizer,
    )
    resources = ResourceService(db_session)
    boards = await resources.create_resource_type(
        ResourceTypeCreate(name="Chess boards", total_quantity=10), created_by_id=admin.id
    )
    await resources.allocate(event.id, boards.id, 5, allocated_by_id=admin.id)
    return await service.set_event_status(event.id, EventStatus.APPROVED, admin)


class TestRegistrationService:
    """Tests for RegistrationService."""

    async def _setup(self, db_session: AsyncSession, capacity: int = 2):
        admin = await _create_user(db_session, "admin@campus.edu", UserRole.ADMIN)
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        event = await _approved_event(db_session, admin, organizer, capacity=capacity)
        return admin, organizer, event

    async def test_register(self, db_session: AsyncSession):
        _, _, event = await self._setup(db_session)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)

        registration = await RegistrationService(db_session).register(event.id, student)

        assert registration.user_id == student.id
        assert registration.attended is False
        event = await EventService(db_session).get_event(event.id)
        assert event.registered_count == 1
        assert event.spots_left == 1

    async def test_register_twice(self, db_session: AsyncSession):
        _, _, event = await self._setup(db_session)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)
        service = RegistrationService(db_session)
        await service.register(event.id, student)

        with pytest.raises(DuplicateError):
            await service.register(event.id, student)

        event = await EventService(db_session).get_event(event.id)
        assert event.registered_count == 1

    async def test_register_full_event(self, db_session: AsyncSession):
        _, _, event = await self._setup(db_session, capacity=1)
        first = await _create_user(db_session, "first@campus.edu", UserRole.STUDENT)
        second = await _create_user(db_session, "second@campus.edu", UserRole.STUDENT)
        service = RegistrationService(db_session)
        await service.register(event.id, first)

        with pytest.raises(CapacityExceededError) as exc_info:
            await service.register(event.id, second)

        assert exc_info.value.status_code == 409
        event = await EventService(db_session).get_event(event.id)
        assert event.registered_count == 1

    async def test_register_pending_event(self, db_session: AsyncSession):
        organizer = await _create_user(db_session, "organizer@campus.edu", UserRole.ORGANIZER)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)
        event = await EventService(db_session).create_event(
            EventCreate(
                title="Draft",
                date=date(2030, 2, 11),
                time=time(9, 0),
                venue="Room 7",
                category=EventCategory.SEMINAR,
                capacity=10,
            ),
            organizer,
        )

        with pytest.raises(ValidationError):
            await RegistrationService(db_session).register(event.id, student)

    async def test_cancel_registration(self, db_session: AsyncSession):
        _, _, event = await self._setup(db_session)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)
        service = RegistrationService(db_session)
        await service.register(event.id, student)

        await service.cancel_registration(event.id, student)

        assert await service.get_user_registration(event.id, student.id) is None
        event = await EventService(db_session).get_event(event.id)
        assert event.registered_count == 0

    async def test_cancel_missing_registration(self, db_session: AsyncSession):
        _, _, event = await self._setup(db_session)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)

        with pytest.raises(NotFoundError):
            await RegistrationService(db_session).cancel_registration(event.id, student)

    async def test_mark_attendance(self, db_session: AsyncSession):
        _, organizer, event = await self._setup(db_session)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)
        service = RegistrationService(db_session)
        registration = await service.register(event.id, student)

        marked = await service.mark_attendance(registration.id, True, marked_by=organizer)
        assert marked.attended is True
        assert marked.attended_at is not None

        # Same mark again is a no-op
        await service.mark_attendance(registration.id, True, marked_by=organizer)
        event = await EventService(db_session).get_event(event.id)
        assert event.attended_count == 1

        await service.mark_attendance(registration.id, False, marked_by=organizer)
        event = await EventService(db_session).get_event(event.id)
        assert event.attended_count == 0

    async def test_cancel_attended_registration(self, db_session: AsyncSession):
        admin, _, event = await self._setup(db_session)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)
        service = RegistrationService(db_session)
        registration = await service.register(event.id, student)
        await service.mark_attendance(registration.id, True, marked_by=admin)

        await service.cancel_registration(event.id, student)

        event = await EventService(db_session).get_event(event.id)
        assert event.registered_count == 0
        assert event.attended_count == 0

    async def test_student_cannot_mark_attendance(self, db_session: AsyncSession):
        _, _, event = await self._setup(db_session)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)
        service = RegistrationService(db_session)
        registration = await service.register(event.id, student)

        with pytest.raises(AuthorizationError):
            await service.mark_attendance(registration.id, True, marked_by=student)

    async def test_list_event_registrations(self, db_session: AsyncSession):
        _, organizer, event = await self._setup(db_session)
        student = await _create_user(db_session, "student@campus.edu", UserRole.STUDENT)
        service = RegistrationService(db_session)
        await service.register(event.id, student)

        registrations = await service.list_event_registrations(event.id, viewer=organizer)
        assert [r.user.email for r in registrations] == ["student@campus.edu"]

        with pytest.raises(AuthorizationError):
            await service.list_event_registrations(event.id, viewer=student)


class TestRegistrationEndpoints:
    """Tests for registration API endpoints."""

    async def _login(
        self, client: AsyncClient, db_session: AsyncSession, email: str, role: UserRole
    ) -> tuple[User, dict[str, str]]:
        user = await _create_user(db_session, email, role)
        await db_session.commit()
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": "Password123"},
        )
        return user, {"Authorization": f"Bearer {response.json()['data']['access_token']}"}

    async def test_register_flow(self, client: AsyncClient, db_session: AsyncSession):
        admin, _ = await self._login(client, db_session, "admin@campus.edu", UserRole.ADMIN)
        organizer, _ = await self._login(
            client, db_session, "organizer@campus.edu", UserRole.ORGANIZER
        )
        _, student = await self._login(client, db_session, "student@campus.edu", UserRole.STUDENT)
        event = await _approved_event(db_session, admin, organizer, capacity=1)

        response = await client.post(f"/api/v1/registrations/events/{event.id}", headers=student)
        assert response.status_code == 201
        assert response.json()["data"]["user_email"] == "student@campus.edu"

        response = await client.get("/api/v1/registrations/me", headers=student)
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["event"]["title"] == "Chess Tournament"
        assert data[0]["event"]["spots_left"] == 0

        response = await client.get(
            f"/api/v1/registrations/events/{event.id}/me", headers=student
        )
        assert response.json()["data"]["event_id"] == event.id

        response = await client.delete(f"/api/v1/registrations/events/{event.id}", headers=student)
        assert response.status_code == 200

        response = await client.get(
            f"/api/v1/registrations/events/{event.id}/me", headers=student
        )
        assert response.json()["data"] is None

    async def test_full_event_returns_conflict(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        admin, _ = await self._login(client, db_session, "admin@campus.edu", UserRole.ADMIN)
        organizer, _ = await self._login(
            client, db_session, "organizer@campus.edu", UserRole.ORGANIZER
        )
        _, first = await self._login(client, db_session, "first@campus.edu", UserRole.STUDENT)
        _, second = await self._login(client, db_session, "second@campus.edu", UserRole.STUDENT)
        event = await _approved_event(db_session, admin, organizer, capacity=1)

        await client.post(f"/api/v1/registrations/events/{event.id}", headers=first)
        response = await client.post(f"/api/v1/registrations/events/{event.id}", headers=second)

        assert response.status_code == 409
        assert response.json()["message"] == "Event is full: all 1 places are taken"
