"""Schemas for Resource Requests module."""

from datetime import datetime

from pydantic import BaseModel, Field

from campus_events.modules.resource_requests.models import ResourceRequestStatus


class ResourceRequestItem(BaseModel):
    resource_type_id: int
    requested_quantity: int = Field(1, ge=1)
    notes: str | None = None


class ResourceRequestBulkCreate(BaseModel):
    """Resources an organizer would like for an event."""

    event_id: int
    requests: list[ResourceRequestItem] = Field(default_factory=list)


class ResourceRequestReview(BaseModel):
    status: ResourceRequestStatus


class ResourceRequestResponse(BaseModel):
    id: int
    event_id: int
    resource_type_id: int
    resource_name: str
    requested_quantity: int
    status: ResourceRequestStatus
    notes: str | None = None
    requested_by_id: int
    requested_at: datetime
    reviewed_by_id: int | None = None
    reviewed_at: datetime | None = None

    model_config = {"from_attributes": True}
