from datetime import datetime

from pydantic import BaseModel

from campus_events.modules.email_notifications.models import EmailLogStatus


class EmailSettingResponse(BaseModel):
    id: int
    notification_type: str
    enabled: bool
    description: str | None = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class EmailToggle(BaseModel):
    enabled: bool


class UserEmailPreferenceResponse(BaseModel):
    notification_type: str
    enabled: bool

    model_config = {"from_attributes": True}


class EmailLogResponse(BaseModel):
    id: int
    notification_type: str
    recipient_email: str
    recipient_user_id: int | None = None
    subject: str
    status: EmailLogStatus
    error_message: str | None = None
    event_id: int | None = None
    meeting_id: int | None = None
    sent_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
