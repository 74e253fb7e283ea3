"""API endpoints for Events module."""

import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.dependencies import AdminUser, CurrentUser, OrganizerUser
from campus_events.core.database.session import get_db
from campus_events.modules.events.models import Event, EventCategory, EventStatus
from campus_events.modules.events.schemas import (
    ConflictCheckResult,
    EventCreate,
    EventResponse,
    EventStatusUpdate,
    EventUpdate,
)
from campus_events.modules.events.service import EventService
from campus_events.shared.schemas.base import ApiResponse, PaginatedResponse

router = APIRouter(prefix="/events", tags=["Events"])


def _map_event(event: Event) -> EventResponse:
    organizer_name = None
    if getattr(event, "organizer", None) is not None:
        organizer_name = event.organizer.full_name
    return EventResponse(
        id=event.id,
        title=event.title,
        description=event.description,
        date=event.date,
        time=event.time,
        venue=event.venue,
        category=EventCategory(event.category),
        capacity=event.capacity,
        registered_count=event.registered_count,
        attended_count=event.attended_count,
        spots_left=event.spots_left,
        status=EventStatus(event.status),
        organizer_id=event.organizer_id,
        organizer_name=organizer_name,
        image_url=event.image_url,
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


@router.get("", response_model=ApiResponse[PaginatedResponse[EventResponse]])
async def list_events(
    current_user: CurrentUser,
    status: EventStatus | None = Query(None),
    category: EventCategory | None = Query(None),
    organizer_id: int | None = Query(None),
    date_from: datetime.date | None = Query(None),
    date_to: datetime.date | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """List events. Students only get approved events."""
    service = EventService(db)
    events, total = await service.list_events(
        viewer=current_user,
        status=status,
        category=category,
        organizer_id=organizer_id,
        date_from=date_from,
        date_to=date_to,
        search=search,
        page=page,
        limit=limit,
    )
    return ApiResponse(
        success=True,
        data=PaginatedResponse.create(
            items=[_map_event(e) for e in events],
            total=total,
            page=page,
            limit=limit,
        ),
    )


@router.get("/conflicts", response_model=ApiResponse[ConflictCheckResult])
async def check_scheduling_conflict(
    current_user: OrganizerUser,
    date: datetime.date = Query(...),
    venue: str = Query(..., min_length=1),
    exclude_event_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Check whether a venue is free on a date before submitting or editing an event."""
    service = EventService(db)
    result = await service.check_scheduling_conflict_for(
        current_user, date=date, venue=venue.strip(), exclude_event_id=exclude_event_id
    )
    return ApiResponse(success=True, data=result)


@router.get("/{event_id}", response_model=ApiResponse[EventResponse])
async def get_event(
    event_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = EventService(db)
    event = await service.get_visible_event(event_id, current_user)
    return ApiResponse(success=True, data=_map_event(event))


@router.post("", response_model=ApiResponse[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    """Submit an event for approval."""
    service = EventService(db)
    event = await service.create_event(payload, organizer=current_user)
    return ApiResponse(success=True, data=_map_event(event), message="Event submitted for approval")


@router.put("/{event_id}", response_model=ApiResponse[EventResponse])
async def update_event(
    event_id: int,
    payload: EventUpdate,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = EventService(db)
    event = await service.update_event(event_id, payload, acting_user=current_user)
    return ApiResponse(success=True, data=_map_event(event), message="Event updated")


@router.post("/{event_id}/status", response_model=ApiResponse[EventResponse])
async def set_event_status(
    event_id: int,
    payload: EventStatusUpdate,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a pending event. Approval needs at least one resource allocation."""
    service = EventService(db)
    event = await service.set_event_status(event_id, payload.status, decided_by=current_user)
    return ApiResponse(success=True, data=_map_event(event), message=f"Event {event.status}")


@router.post("/{event_id}/cancel", response_model=ApiResponse[EventResponse])
async def cancel_event(
    event_id: int,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = EventService(db)
    event = await service.cancel_event(event_id, acting_user=current_user)
    return ApiResponse(success=True, data=_map_event(event), message="Event cancelled")


@router.delete("/{event_id}", response_model=ApiResponse[None])
async def delete_event(
    event_id: int,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = EventService(db)
    await service.delete_event(event_id, acting_user=current_user)
    return ApiResponse(success=True, data=None, message="Event deleted")
