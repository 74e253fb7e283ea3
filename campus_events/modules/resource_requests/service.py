"""Service for Resource Requests module."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.auth.models import User
from campus_events.core.audit.service import AuditAction, AuditService
from campus_events.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from campus_events.modules.events.models import Event
from campus_events.modules.resource_requests.models import ResourceRequest, ResourceRequestStatus
from campus_events.modules.resource_requests.schemas import ResourceRequestItem
from campus_events.modules.resources.models import ResourceType

logger = logging.getLogger(__name__)


class ResourceRequestService:
    """Organizer requests for resources.

    Requests are a record for the admin deciding allocations; reviewing one
    never touches the resource pool.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_bulk_requests(
        self,
        event_id: int,
        items: list[ResourceRequestItem],
        requested_by: User,
        commit: bool = True,
    ) -> list[ResourceRequest]:
        """Insert one pending request per item."""
        if not items:
            return []

        event = (
            await self.db.execute(select(Event).where(Event.id == event_id))
        ).scalar_one_or_none()
        if not event:
            raise NotFoundError("Event", event_id)
        if not requested_by.is_admin and event.organizer_id != requested_by.id:
            raise AuthorizationError("Only the event organizer can request resources")

        type_ids = {item.resource_type_id for item in items}
        result = await self.db.execute(select(ResourceType.id).where(ResourceType.id.in_(type_ids)))
        known_ids = set(result.scalars().all())

        requests: list[ResourceRequest] = []
        for item in items:
            if item.resource_type_id not in known_ids:
                raise NotFoundError("Resource type", item.resource_type_id)
            if item.requested_quantity <= 0:
                raise ValidationError("Requested quantity must be positive", "requested_quantity")
            request = ResourceRequest(
                event_id=event_id,
                resource_type_id=item.resource_type_id,
                requested_quantity=item.requested_quantity,
                notes=item.notes,
                status=ResourceRequestStatus.PENDING.value,
                requested_by_id=requested_by.id,
            )
            self.db.add(request)
            requests.append(request)
        await self.db.flush()

        for request in requests:
            await self.audit.log(
                action=AuditAction.CREATE,
                entity_type="ResourceRequest",
                entity_id=request.id,
                user_id=requested_by.id,
                new_values={
                    "event_id": event_id,
                    "resource_type_id": request.resource_type_id,
                    "requested_quantity": request.requested_quantity,
                },
            )

        if commit:
            await self.db.commit()
        logger.info("Created %d resource requests for event %s", len(requests), event_id)
        return requests

    async def list_requests(
        self,
        event_id: int | None = None,
        status: ResourceRequestStatus | None = None,
    ) -> list[ResourceRequest]:
        query = (
            select(ResourceRequest)
            .options(selectinload(ResourceRequest.resource_type))
            .order_by(ResourceRequest.requested_at.desc(), ResourceRequest.id.desc())
        )
        if event_id is not None:
            query = query.where(ResourceRequest.event_id == event_id)
        if status is not None:
            query = query.where(ResourceRequest.status == status.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_request(self, request_id: int) -> ResourceRequest:
        result = await self.db.execute(
            select(ResourceRequest)
            .where(ResourceRequest.id == request_id)
            .options(selectinload(ResourceRequest.resource_type))
        )
        request = result.scalar_one_or_none()
        if not request:
            raise NotFoundError("Resource request", request_id)
        return request

    async def review_request(
        self,
        request_id: int,
        status: ResourceRequestStatus,
        reviewed_by_id: int,
        commit: bool = True,
    ) -> ResourceRequest:
        """Mark a pending request approved or rejected."""
        if status == ResourceRequestStatus.PENDING:
            raise ValidationError("Review status must be approved or rejected", "status")

        request = await self.get_request(request_id)
        if request.status != ResourceRequestStatus.PENDING.value:
            raise ValidationError(f"Request is already {request.status}", "status")

        request.status = status.value
        request.reviewed_by_id = reviewed_by_id
        request.reviewed_at = datetime.now(timezone.utc)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.REVIEW_RESOURCE_REQUEST,
            entity_type="ResourceRequest",
            entity_id=request.id,
            user_id=reviewed_by_id,
            old_values={"status": ResourceRequestStatus.PENDING.value},
            new_values={"status": request.status},
        )

        if commit:
            await self.db.commit()
        return request
