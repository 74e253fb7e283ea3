"""API endpoints for Registrations module."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.dependencies import CurrentUser, OrganizerUser
from campus_events.core.database.session import get_db
from campus_events.modules.events.router import _map_event
from campus_events.modules.registrations.models import Registration
from campus_events.modules.registrations.schemas import (
    AttendanceUpdate,
    MyRegistrationResponse,
    RegistrationResponse,
)
from campus_events.modules.registrations.service import RegistrationService
from campus_events.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/registrations", tags=["Registrations"])


def _map_registration(registration: Registration) -> RegistrationResponse:
    user = getattr(registration, "user", None)
    return RegistrationResponse(
        id=registration.id,
        event_id=registration.event_id,
        user_id=registration.user_id,
        user_name=user.full_name if user else None,
        user_email=user.email if user else None,
        registered_at=registration.registered_at,
        attended=registration.attended,
        attended_at=registration.attended_at,
    )


@router.get("/me", response_model=ApiResponse[list[MyRegistrationResponse]])
async def list_my_registrations(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = RegistrationService(db)
    registrations = await service.list_user_registrations(current_user.id)
    return ApiResponse(
        success=True,
        data=[
            MyRegistrationResponse(
                **_map_registration(r).model_dump(),
                event=_map_event(r.event) if r.event else None,
            )
            for r in registrations
        ],
    )


@router.post(
    "/events/{event_id}",
    response_model=ApiResponse[RegistrationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register_for_event(
    event_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = RegistrationService(db)
    registration = await service.register(event_id, current_user)
    return ApiResponse(success=True, data=_map_registration(registration), message="Registered")


@router.delete("/events/{event_id}", response_model=ApiResponse[None])
async def cancel_registration(
    event_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = RegistrationService(db)
    await service.cancel_registration(event_id, current_user)
    return ApiResponse(success=True, data=None, message="Registration cancelled")


@router.get("/events/{event_id}/me", response_model=ApiResponse[RegistrationResponse | None])
async def get_my_registration(
    event_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = RegistrationService(db)
    registration = await service.get_user_registration(event_id, current_user.id)
    return ApiResponse(
        success=True,
        data=_map_registration(registration) if registration else None,
    )


@router.get("/events/{event_id}", response_model=ApiResponse[list[RegistrationResponse]])
async def list_event_registrations(
    event_id: int,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    """Attendee list of an event (its organizer or an admin)."""
    service = RegistrationService(db)
    registrations = await service.list_event_registrations(event_id, viewer=current_user)
    return ApiResponse(success=True, data=[_map_registration(r) for r in registrations])


@router.post("/{registration_id}/attendance", response_model=ApiResponse[RegistrationResponse])
async def mark_attendance(
    registration_id: int,
    payload: AttendanceUpdate,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = RegistrationService(db)
    registration = await service.mark_attendance(
        registration_id, payload.attended, marked_by=current_user
    )
    return ApiResponse(success=True, data=_map_registration(registration))
