#!/usr/bin/env python3
"""
Fill the database with a realistic demo campus.

Users, a resource catalogue, events in every status (with allocations,
registrations and resource requests) and one meeting. Everything goes through
the service layer, so pools, counters and statuses are consistent.

Usage:
    uv run python scripts/seed_demo_data.py --dry-run   # nothing is written
    uv run python scripts/seed_demo_data.py --confirm   # write to the database

Requires: migrations applied (alembic upgrade head), database reachable.
"""

import asyncio
import sys
from datetime import date, time, timedelta
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.models import User, UserRole
from campus_events.core.auth.service import AuthService
from campus_events.core.config import settings
from campus_events.core.database.session import async_session
from campus_events.modules.email_notifications.service import EmailNotificationService
from campus_events.modules.events.models import Event, EventCategory, EventStatus
from campus_events.modules.events.schemas import EventCreate
from campus_events.modules.events.service import EventService
from campus_events.modules.meetings.schemas import MeetingCreate
from campus_events.modules.meetings.service import MeetingService
from campus_events.modules.registrations.service import RegistrationService
from campus_events.modules.resource_requests.schemas import ResourceRequestItem
from campus_events.modules.resources.models import ResourceType
from campus_events.modules.resources.schemas import ResourceTypeCreate
from campus_events.modules.resources.service import ResourceService

DEMO_PASSWORD = "campus-demo"
ADMIN_EMAIL = "admin@campus.demo"

# email, full name, role, department
USERS_DATA = [
    (ADMIN_EMAIL, "Student Affairs Office", UserRole.ADMIN, "Student Affairs"),
    ("drama.club@campus.demo", "Amara Okafor", UserRole.ORGANIZER, "Drama Society"),
    ("cs.society@campus.demo", "Lukas Brandt", UserRole.ORGANIZER, "Computer Science"),
    ("priya.nair@campus.demo", "Priya Nair", UserRole.STUDENT, "Mathematics"),
    ("tom.walsh@campus.demo", "Tom Walsh", UserRole.STUDENT, "History"),
    ("mei.chen@campus.demo", "Mei Chen", UserRole.STUDENT, "Computer Science"),
    ("diego.ramos@campus.demo", "Diego Ramos", UserRole.STUDENT, "Physics"),
    ("sara.haddad@campus.demo", "Sara Haddad", UserRole.STUDENT, "Biology"),
]

# name, description, total quantity
RESOURCE_TYPES_DATA = [
    ("Projector", "Portable HD projector with HDMI cable", 6),
    ("Wireless microphone", "Handheld mic, batteries included", 12),
    ("Folding chair", "Stackable chairs from the central store", 400),
    ("PA system", "Speakers and mixer for halls up to 300 people", 2),
    ("Laptop", "Loan laptops for workshops", 25),
]


async def seed_users(session: AsyncSession) -> dict[str, User]:
    """Create demo accounts. Returns users by email."""
    auth = AuthService(session)
    users: dict[str, User] = {}
    for email, full_name, role, department in USERS_DATA:
        users[email] = await auth.create_user(
            email=email,
            password=DEMO_PASSWORD,
            full_name=full_name,
            role=role,
            department=department,
        )
    print(f"  Created {len(users)} users (password: {DEMO_PASSWORD}).")
    return users


async def seed_resource_types(session: AsyncSession, admin: User) -> dict[str, ResourceType]:
    service = ResourceService(session)
    resource_types: dict[str, ResourceType] = {}
    for name, description, total in RESOURCE_TYPES_DATA:
        resource_types[name] = await service.create_resource_type(
            ResourceTypeCreate(name=name, description=description, total_quantity=total),
            created_by_id=admin.id,
            commit=False,
        )
    print(f"  Created {len(resource_types)} resource types.")
    return resource_types


async def seed_events(
    session: AsyncSession,
    users: dict[str, User],
    resource_types: dict[str, ResourceType],
) -> dict[str, Event]:
    """One approved, one pending and one rejected event."""
    admin = users[ADMIN_EMAIL]
    drama = users["drama.club@campus.demo"]
    cs = users["cs.society@campus.demo"]
    students = [u for u in users.values() if u.role == UserRole.STUDENT.value]
    today = date.today()

    events = EventService(session)
    resources = ResourceService(session)
    registrations = RegistrationService(session)

    showcase = await events.create_event(
        EventCreate(
            title="Spring Drama Showcase",
            description="Three short plays written and staged by students.",
            date=today + timedelta(days=21),
            time=time(19, 0),
            venue="Main Auditorium",
            category=EventCategory.CULTURAL,
            capacity=250,
        ),
        drama,
        commit=False,
    )
    await resources.allocate(
        showcase.id, resource_types["Wireless microphone"].id, 6, allocated_by_id=admin.id, commit=False
    )
    await resources.allocate(
        showcase.id, resource_types["PA system"].id, 1, allocated_by_id=admin.id, commit=False
    )
    await resources.allocate(
        showcase.id, resource_types["Folding chair"].id, 200, allocated_by_id=admin.id, commit=False
    )
    showcase = await events.set_event_status(showcase.id, EventStatus.APPROVED, admin, commit=False)
    for student in students:
        await registrations.register(showcase.id, student, commit=False)

    workshop = await events.create_event(
        EventCreate(
            title="Intro to Machine Learning",
            description="Hands-on workshop, bring your own notebook or borrow one.",
            date=today + timedelta(days=10),
            time=time(14, 0),
            venue="Computer Lab 2",
            category=EventCategory.WORKSHOP,
            capacity=30,
            resource_requests=[
                ResourceRequestItem(resource_type_id=resource_types["Laptop"].id, requested_quantity=15),
                ResourceRequestItem(resource_type_id=resource_types["Projector"].id, requested_quantity=1),
            ],
        ),
        cs,
        commit=False,
    )

    bonfire = await events.create_event(
        EventCreate(
            title="Midnight Bonfire",
            date=today + timedelta(days=5),
            time=time(23, 30),
            venue="Sports Field",
            category=EventCategory.SOCIAL,
            capacity=500,
        ),
        drama,
        commit=False,
    )
    bonfire = await events.set_event_status(bonfire.id, EventStatus.REJECTED, admin, commit=False)

    print(
        f"  Created events: approved ({len(students)} registrations), "
        "pending with resource requests, rejected."
    )
    return {"showcase": showcase, "workshop": workshop, "bonfire": bonfire}


async def seed_meeting(session: AsyncSession, users: dict[str, User], event: Event) -> None:
    await MeetingService(session).create_meeting(
        MeetingCreate(
            event_id=event.id,
            title="Front-of-house volunteers briefing",
            meeting_link="https://meet.campus.demo/showcase-volunteers",
            meeting_date=event.date - timedelta(days=2),
            meeting_time=time(17, 30),
            agenda="Ticket desk rota, seating plan, emergency exits.",
            participant_ids=[
                users["priya.nair@campus.demo"].id,
                users["tom.walsh@campus.demo"].id,
            ],
        ),
        created_by=users["drama.club@campus.demo"],
        commit=False,
    )
    print("  Created 1 meeting with 2 invited volunteers.")


async def run_seed(session: AsyncSession, dry_run: bool) -> None:
    result = await session.execute(select(User.id).where(User.email == ADMIN_EMAIL))
    if result.scalar_one_or_none() is not None:
        print("  Demo data already present, skip.")
        return

    await EmailNotificationService(session).ensure_default_settings()
    users = await seed_users(session)
    resource_types = await seed_resource_types(session, users[ADMIN_EMAIL])
    events = await seed_events(session, users, resource_types)
    await seed_meeting(session, users, events["showcase"])

    if dry_run:
        await session.rollback()
        print("\n[DRY-RUN] Rolled back, no data written.")
    else:
        await session.commit()
        print("\nSeed completed successfully.")


async def main() -> None:
    import argparse
    parser = argparse.ArgumentParser(description="Seed database with demo campus events")
    parser.add_argument("--dry-run", action="store_true", help="Do not commit")
    parser.add_argument("--confirm", action="store_true", help="Commit changes")
    args = parser.parse_args()
    if not args.dry_run and not args.confirm:
        print("Use --dry-run or --confirm")
        sys.exit(1)

    print("Database:", settings.database_url_for_log)
    print("Mode:", "DRY-RUN" if args.dry_run else "CONFIRM")
    async with async_session() as session:
        await run_seed(session, dry_run=args.dry_run)
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
