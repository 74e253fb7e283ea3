"""Schemas for Resources module."""

from datetime import datetime

from pydantic import BaseModel, Field


class ResourceTypeCreate(BaseModel):
    """Create a resource type. The whole quantity starts out available."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    total_quantity: int = Field(..., ge=0)


class ResourceTypeResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    total_quantity: int
    available_quantity: int
    allocated_quantity: int
    created_at: datetime

    model_config = {"from_attributes": True}


class AllocationCreate(BaseModel):
    """Allocate a resource to an event. Re-allocating the same pair replaces the quantity."""

    event_id: int
    resource_type_id: int
    quantity: int = Field(..., ge=1)
    notes: str | None = None


class DeallocationRequest(BaseModel):
    """Return an allocation to the pool.

    resource_type_id and quantity must match the allocation row.
    """

    resource_type_id: int
    quantity: int = Field(..., ge=1)


class AllocationResponse(BaseModel):
    id: int
    event_id: int
    resource_type_id: int
    resource_name: str | None = None
    quantity: int
    allocated_by_id: int
    allocated_at: datetime
    notes: str | None = None

    model_config = {"from_attributes": True}
