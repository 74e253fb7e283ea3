"""Schemas for Registrations module."""

from datetime import datetime

from pydantic import BaseModel

from campus_events.modules.events.schemas import EventResponse


class AttendanceUpdate(BaseModel):
    attended: bool


class RegistrationResponse(BaseModel):
    id: int
    event_id: int
    user_id: int
    user_name: str | None = None
    user_email: str | None = None
    registered_at: datetime
    attended: bool
    attended_at: datetime | None = None

    model_config = {"from_attributes": True}


class MyRegistrationResponse(RegistrationResponse):
    """Registration with the event it belongs to."""

    event: EventResponse | None = None
