"""API endpoints for Resources module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.dependencies import AdminUser, OrganizerUser
from campus_events.core.database.session import get_db
from campus_events.modules.events.service import EventService
from campus_events.modules.resources.models import EventResourceAllocation, ResourceType
from campus_events.modules.resources.schemas import (
    AllocationCreate,
    AllocationResponse,
    DeallocationRequest,
    ResourceTypeCreate,
    ResourceTypeResponse,
)
from campus_events.modules.resources.service import ResourceService
from campus_events.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/resources", tags=["Resources"])


def _map_resource_type(resource_type: ResourceType) -> ResourceTypeResponse:
    return ResourceTypeResponse(
        id=resource_type.id,
        name=resource_type.name,
        description=resource_type.description,
        total_quantity=resource_type.total_quantity,
        available_quantity=resource_type.available_quantity,
        allocated_quantity=resource_type.allocated_quantity,
        created_at=resource_type.created_at,
    )


def _map_allocation(allocation: EventResourceAllocation) -> AllocationResponse:
    return AllocationResponse(
        id=allocation.id,
        event_id=allocation.event_id,
        resource_type_id=allocation.resource_type_id,
        resource_name=allocation.resource_type.name if allocation.resource_type else None,
        quantity=allocation.quantity,
        allocated_by_id=allocation.allocated_by_id,
        allocated_at=allocation.allocated_at,
        notes=allocation.notes,
    )


@router.get("/types", response_model=ApiResponse[list[ResourceTypeResponse]])
async def list_resource_types(
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = ResourceService(db)
    resource_types = await service.list_resource_types()
    return ApiResponse(success=True, data=[_map_resource_type(r) for r in resource_types])


@router.post(
    "/types",
    response_model=ApiResponse[ResourceTypeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_resource_type(
    payload: ResourceTypeCreate,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    service = ResourceService(db)
    resource_type = await service.create_resource_type(payload, created_by_id=current_user.id)
    return ApiResponse(success=True, data=_map_resource_type(resource_type))


@router.get("/types/{resource_type_id}", response_model=ApiResponse[ResourceTypeResponse])
async def get_resource_type(
    resource_type_id: int,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = ResourceService(db)
    resource_type = await service.get_resource_type(resource_type_id)
    return ApiResponse(success=True, data=_map_resource_type(resource_type))


@router.get("/allocations", response_model=ApiResponse[list[AllocationResponse]])
async def list_event_allocations(
    current_user: OrganizerUser,
    event_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    await EventService(db).get_visible_event(event_id, current_user)
    allocations = await ResourceService(db).list_event_allocations(event_id)
    return ApiResponse(success=True, data=[_map_allocation(a) for a in allocations])


@router.post(
    "/allocations",
    response_model=ApiResponse[AllocationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def allocate_resource(
    payload: AllocationCreate,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Allocate a resource to an event, replacing any previous quantity for that pair."""
    service = ResourceService(db)
    allocation = await service.allocate(
        event_id=payload.event_id,
        resource_type_id=payload.resource_type_id,
        quantity=payload.quantity,
        allocated_by_id=current_user.id,
        notes=payload.notes,
    )
    return ApiResponse(success=True, data=_map_allocation(allocation))


@router.post("/allocations/{allocation_id}/deallocate", response_model=ApiResponse[None])
async def deallocate_resource(
    allocation_id: int,
    payload: DeallocationRequest,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    service = ResourceService(db)
    await service.deallocate(
        allocation_id=allocation_id,
        resource_type_id=payload.resource_type_id,
        quantity=payload.quantity,
        deallocated_by_id=current_user.id,
    )
    return ApiResponse(success=True, data=None, message="Resource returned to the pool")
