"""API endpoints for Meetings module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.dependencies import CurrentUser, OrganizerUser
from campus_events.core.database.session import get_db
from campus_events.modules.meetings.models import Meeting, MeetingParticipant, ParticipantStatus
from campus_events.modules.meetings.schemas import (
    MeetingCreate,
    MeetingResponse,
    MeetingUpdate,
    ParticipantCreate,
    ParticipantResponse,
    ParticipantStatusUpdate,
)
from campus_events.modules.meetings.service import MeetingService
from campus_events.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/meetings", tags=["Meetings"])


def _map_participant(participant: MeetingParticipant) -> ParticipantResponse:
    user = getattr(participant, "user", None)
    return ParticipantResponse(
        id=participant.id,
        meeting_id=participant.meeting_id,
        user_id=participant.user_id,
        user_name=user.full_name if user else None,
        status=ParticipantStatus(participant.status),
        attended=participant.attended,
        invited_at=participant.invited_at,
    )


def _map_meeting(meeting: Meeting) -> MeetingResponse:
    return MeetingResponse(
        id=meeting.id,
        event_id=meeting.event_id,
        event_title=meeting.event.title if meeting.event else None,
        title=meeting.title,
        description=meeting.description,
        meeting_link=meeting.meeting_link,
        meeting_date=meeting.meeting_date,
        meeting_time=meeting.meeting_time,
        duration_minutes=meeting.duration_minutes,
        agenda=meeting.agenda,
        created_by_id=meeting.created_by_id,
        created_at=meeting.created_at,
        updated_at=meeting.updated_at,
        participants=[_map_participant(p) for p in meeting.participants],
    )


@router.get("", response_model=ApiResponse[list[MeetingResponse]])
async def list_meetings(
    current_user: OrganizerUser,
    event_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    service = MeetingService(db)
    meetings = await service.list_meetings(event_id=event_id)
    return ApiResponse(success=True, data=[_map_meeting(m) for m in meetings])


@router.get("/me", response_model=ApiResponse[list[MeetingResponse]])
async def list_my_meetings(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Meetings the user is invited to or that belong to events they registered for."""
    service = MeetingService(db)
    meetings = await service.list_user_meetings(current_user.id)
    return ApiResponse(success=True, data=[_map_meeting(m) for m in meetings])


@router.get("/{meeting_id}", response_model=ApiResponse[MeetingResponse])
async def get_meeting(
    meeting_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = MeetingService(db)
    meeting = await service.get_visible_meeting(meeting_id, current_user)
    return ApiResponse(success=True, data=_map_meeting(meeting))


@router.post("", response_model=ApiResponse[MeetingResponse], status_code=status.HTTP_201_CREATED)
async def create_meeting(
    payload: MeetingCreate,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = MeetingService(db)
    meeting = await service.create_meeting(payload, created_by=current_user)
    return ApiResponse(success=True, data=_map_meeting(meeting), message="Meeting scheduled")


@router.put("/{meeting_id}", response_model=ApiResponse[MeetingResponse])
async def update_meeting(
    meeting_id: int,
    payload: MeetingUpdate,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = MeetingService(db)
    meeting = await service.update_meeting(meeting_id, payload, acting_user=current_user)
    return ApiResponse(success=True, data=_map_meeting(meeting))


@router.delete("/{meeting_id}", response_model=ApiResponse[None])
async def delete_meeting(
    meeting_id: int,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = MeetingService(db)
    await service.delete_meeting(meeting_id, acting_user=current_user)
    return ApiResponse(success=True, data=None, message="Meeting cancelled")


@router.get("/{meeting_id}/participants", response_model=ApiResponse[list[ParticipantResponse]])
async def list_participants(
    meeting_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = MeetingService(db)
    await service.get_visible_meeting(meeting_id, current_user)
    participants = await service.list_participants(meeting_id)
    return ApiResponse(success=True, data=[_map_participant(p) for p in participants])


@router.post(
    "/{meeting_id}/participants",
    response_model=ApiResponse[ParticipantResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_participant(
    meeting_id: int,
    payload: ParticipantCreate,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = MeetingService(db)
    participant = await service.add_participant(meeting_id, payload.user_id, acting_user=current_user)
    participants = await service.list_participants(meeting_id)
    participant = next(p for p in participants if p.id == participant.id)
    return ApiResponse(success=True, data=_map_participant(participant))


@router.put("/{meeting_id}/participants/me", response_model=ApiResponse[ParticipantResponse])
async def update_my_participation(
    meeting_id: int,
    payload: ParticipantStatusUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Accept or decline a meeting invitation."""
    service = MeetingService(db)
    participant = await service.update_my_participant_status(
        meeting_id, current_user, payload.status
    )
    return ApiResponse(success=True, data=_map_participant(participant))
