"""Schemas for Meetings module."""

from datetime import date, datetime, time

from pydantic import BaseModel, Field

from campus_events.modules.meetings.models import ParticipantStatus


class MeetingCreate(BaseModel):
    event_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    meeting_link: str = Field(..., min_length=1, max_length=500)
    meeting_date: date
    meeting_time: time
    # Defaults to settings.default_meeting_duration_minutes
    duration_minutes: int | None = Field(None, ge=1, le=24 * 60)
    agenda: str | None = None
    participant_ids: list[int] = Field(default_factory=list)


class MeetingUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    meeting_link: str | None = Field(None, min_length=1, max_length=500)
    meeting_date: date | None = None
    meeting_time: time | None = None
    duration_minutes: int | None = Field(None, ge=1, le=24 * 60)
    agenda: str | None = None


class ParticipantCreate(BaseModel):
    user_id: int


class ParticipantStatusUpdate(BaseModel):
    status: ParticipantStatus


class ParticipantResponse(BaseModel):
    id: int
    meeting_id: int
    user_id: int
    user_name: str | None = None
    status: ParticipantStatus
    attended: bool
    invited_at: datetime

    model_config = {"from_attributes": True}


class MeetingResponse(BaseModel):
    id: int
    event_id: int
    event_title: str | None = None
    title: str
    description: str | None = None
    meeting_link: str
    meeting_date: date
    meeting_time: time
    duration_minutes: int
    agenda: str | None = None
    created_by_id: int
    created_at: datetime
    updated_at: datetime
    participants: list[ParticipantResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}
