"""Schemas for Events module."""

import datetime

from pydantic import BaseModel, Field, field_validator

from campus_events.modules.events.models import EventCategory, EventStatus
from campus_events.modules.resource_requests.schemas import ResourceRequestItem


class EventCreate(BaseModel):
    """Submit an event. It starts in status 'pending'."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    date: datetime.date
    time: datetime.time
    venue: str = Field(..., min_length=1, max_length=200)
    category: EventCategory
    capacity: int = Field(..., ge=1)
    image_url: str | None = Field(None, max_length=500)
    # Optional wish list, stored as resource requests
    resource_requests: list[ResourceRequestItem] = Field(default_factory=list)

    @field_validator("venue", "title")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    date: datetime.date | None = None
    time: datetime.time | None = None
    venue: str | None = Field(None, min_length=1, max_length=200)
    category: EventCategory | None = None
    capacity: int | None = Field(None, ge=1)
    image_url: str | None = Field(None, max_length=500)

    @field_validator("venue", "title")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class EventStatusUpdate(BaseModel):
    """Approve or reject a pending event."""

    status: EventStatus


class ConflictCheckResult(BaseModel):
    has_conflict: bool
    conflicting_event_title: str | None = None


class EventResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    date: datetime.date
    time: datetime.time
    venue: str
    category: EventCategory
    capacity: int
    registered_count: int
    attended_count: int
    spots_left: int
    status: EventStatus
    organizer_id: int
    organizer_name: str | None = None
    image_url: str | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = {"from_attributes": True}
