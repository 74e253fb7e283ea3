"""API endpoints for Resource Requests module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.dependencies import AdminUser, OrganizerUser
from campus_events.core.database.session import get_db
from campus_events.modules.resource_requests.models import ResourceRequest, ResourceRequestStatus
from campus_events.modules.resource_requests.schemas import (
    ResourceRequestBulkCreate,
    ResourceRequestResponse,
    ResourceRequestReview,
)
from campus_events.modules.resource_requests.service import ResourceRequestService
from campus_events.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/resource-requests", tags=["Resource Requests"])


def _map_request(request: ResourceRequest) -> ResourceRequestResponse:
    resource_name = "Unknown"
    if getattr(request, "resource_type", None) is not None:
        resource_name = request.resource_type.name
    return ResourceRequestResponse(
        id=request.id,
        event_id=request.event_id,
        resource_type_id=request.resource_type_id,
        resource_name=resource_name,
        requested_quantity=request.requested_quantity,
        status=ResourceRequestStatus(request.status),
        notes=request.notes,
        requested_by_id=request.requested_by_id,
        requested_at=request.requested_at,
        reviewed_by_id=request.reviewed_by_id,
        reviewed_at=request.reviewed_at,
    )


@router.get("", response_model=ApiResponse[list[ResourceRequestResponse]])
async def list_requests(
    current_user: OrganizerUser,
    event_id: int | None = Query(None),
    status: ResourceRequestStatus | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    service = ResourceRequestService(db)
    requests = await service.list_requests(event_id=event_id, status=status)
    return ApiResponse(success=True, data=[_map_request(r) for r in requests])


@router.post(
    "",
    response_model=ApiResponse[list[ResourceRequestResponse]],
    status_code=status.HTTP_201_CREATED,
)
async def create_requests(
    payload: ResourceRequestBulkCreate,
    current_user: OrganizerUser,
    db: AsyncSession = Depends(get_db),
):
    service = ResourceRequestService(db)
    created = await service.create_bulk_requests(
        payload.event_id, payload.requests, requested_by=current_user
    )
    requests = [await service.get_request(r.id) for r in created]
    return ApiResponse(success=True, data=[_map_request(r) for r in requests])


@router.post("/{request_id}/review", response_model=ApiResponse[ResourceRequestResponse])
async def review_request(
    request_id: int,
    payload: ResourceRequestReview,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Mark a request approved or rejected. Allocation is a separate step."""
    service = ResourceRequestService(db)
    request = await service.review_request(
        request_id, payload.status, reviewed_by_id=current_user.id
    )
    return ApiResponse(success=True, data=_map_request(request))
