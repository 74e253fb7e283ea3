"""Service for the resource pool and per-event allocations."""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_events.core.audit.service import AuditAction, AuditService
from campus_events.core.exceptions import (
    DuplicateError,
    InsufficientResourceError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from campus_events.modules.events.models import CLOSED_STATUSES, Event, EventStatus
from campus_events.modules.resources.models import EventResourceAllocation, ResourceType
from campus_events.modules.resources.schemas import ResourceTypeCreate

logger = logging.getLogger(__name__)


class ResourceService:
    """Allocation engine.

    Every movement of ResourceType.available_quantity goes through a conditional
    UPDATE (_take_from_pool / _return_to_pool), so the pool stays within
    [0, total_quantity] even with concurrent allocations.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    # --- Resource types ---

    async def create_resource_type(
        self, data: ResourceTypeCreate, created_by_id: int, commit: bool = True
    ) -> ResourceType:
        if data.total_quantity < 0:
            raise ValidationError("Total quantity cannot be negative", "total_quantity")

        existing = await self.db.execute(
            select(ResourceType.id).where(ResourceType.name == data.name)
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateError("Resource type", "name", data.name)

        resource_type = ResourceType(
            name=data.name,
            description=data.description,
            total_quantity=data.total_quantity,
            available_quantity=data.total_quantity,
        )
        self.db.add(resource_type)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="ResourceType",
            entity_id=resource_type.id,
            user_id=created_by_id,
            entity_identifier=resource_type.name,
            new_values={"name": resource_type.name, "total_quantity": resource_type.total_quantity},
        )

        if commit:
            await self.db.commit()
            await self.db.refresh(resource_type)
        logger.info(
            "Resource type %s created with %d units", resource_type.name, resource_type.total_quantity
        )
        return resource_type

    async def list_resource_types(self) -> list[ResourceType]:
        result = await self.db.execute(select(ResourceType).order_by(ResourceType.name))
        return list(result.scalars().all())

    async def get_resource_type(self, resource_type_id: int) -> ResourceType:
        result = await self.db.execute(
            select(ResourceType).where(ResourceType.id == resource_type_id)
        )
        resource_type = result.scalar_one_or_none()
        if not resource_type:
            raise NotFoundError("Resource type", resource_type_id)
        return resource_type

    async def _lock_resource_type(self, resource_type_id: int) -> ResourceType:
        result = await self.db.execute(
            select(ResourceType).where(ResourceType.id == resource_type_id).with_for_update()
        )
        resource_type = result.scalar_one_or_none()
        if not resource_type:
            raise NotFoundError("Resource type", resource_type_id)
        return resource_type

    # --- Allocations ---

    async def list_event_allocations(self, event_id: int) -> list[EventResourceAllocation]:
        result = await self.db.execute(
            select(EventResourceAllocation)
            .where(EventResourceAllocation.event_id == event_id)
            .options(selectinload(EventResourceAllocation.resource_type))
            .order_by(EventResourceAllocation.id)
        )
        return list(result.scalars().all())

    async def get_allocation(self, allocation_id: int) -> EventResourceAllocation:
        result = await self.db.execute(
            select(EventResourceAllocation)
            .where(EventResourceAllocation.id == allocation_id)
            .options(selectinload(EventResourceAllocation.resource_type))
        )
        allocation = result.scalar_one_or_none()
        if not allocation:
            raise NotFoundError("Resource allocation", allocation_id)
        return allocation

    async def count_event_allocations(self, event_id: int) -> int:
        result = await self.db.execute(
            select(func.count(EventResourceAllocation.id)).where(
                EventResourceAllocation.event_id == event_id
            )
        )
        return result.scalar() or 0

    async def has_allocations(self, event_id: int) -> bool:
        """True if at least one resource is allocated to the event."""
        return await self.count_event_allocations(event_id) > 0

    async def allocate(
        self,
        event_id: int,
        resource_type_id: int,
        quantity: int,
        allocated_by_id: int,
        notes: str | None = None,
        commit: bool = True,
    ) -> EventResourceAllocation:
        """Allocate `quantity` units of a resource type to an event.

        An existing allocation for the same (event, resource type) is replaced,
        not added to: the pool moves by the difference between the new and the
        old quantity.
        """
        if quantity <= 0:
            raise ValidationError("Quantity must be positive", "quantity")

        event = await self._get_event(event_id, lock=True)
        if event.status in CLOSED_STATUSES:
            raise ValidationError(
                f"Cannot allocate resources to a {event.status} event", "event_id"
            )

        resource_type = await self._lock_resource_type(resource_type_id)

        result = await self.db.execute(
            select(EventResourceAllocation)
            .where(
                EventResourceAllocation.event_id == event_id,
                EventResourceAllocation.resource_type_id == resource_type_id,
            )
            .with_for_update()
        )
        allocation = result.scalar_one_or_none()
        previous_quantity = allocation.quantity if allocation else 0

        delta = quantity - previous_quantity
        if delta > 0:
            await self._take_from_pool(resource_type, delta, requested=quantity, held=previous_quantity)
        elif delta < 0:
            await self._return_to_pool(resource_type, -delta)

        if allocation:
            allocation.quantity = quantity
            allocation.allocated_by_id = allocated_by_id
            allocation.allocated_at = datetime.now(timezone.utc)
            allocation.notes = notes
        else:
            allocation = EventResourceAllocation(
                event_id=event_id,
                resource_type_id=resource_type_id,
                quantity=quantity,
                allocated_by_id=allocated_by_id,
                notes=notes,
            )
            self.db.add(allocation)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.ALLOCATE_RESOURCE,
            entity_type="EventResourceAllocation",
            entity_id=allocation.id,
            user_id=allocated_by_id,
            entity_identifier=f"{resource_type.name} -> event {event_id}",
            old_values={"quantity": previous_quantity} if previous_quantity else None,
            new_values={
                "event_id": event_id,
                "resource_type_id": resource_type_id,
                "quantity": quantity,
            },
        )

        if commit:
            await self.db.commit()
        logger.info(
            "Allocated %d x %s to event %s (was %d, pool now %d/%d)",
            quantity,
            resource_type.name,
            event_id,
            previous_quantity,
            resource_type.available_quantity,
            resource_type.total_quantity,
        )
        return await self.get_allocation(allocation.id)

    async def deallocate(
        self,
        allocation_id: int,
        resource_type_id: int,
        quantity: int,
        deallocated_by_id: int,
        commit: bool = True,
    ) -> None:
        """Delete an allocation and return its quantity to the pool.

        The last allocation of an approved event cannot be removed: approval
        requires at least one allocation.
        """
        allocation = await self.get_allocation(allocation_id)
        if allocation.resource_type_id != resource_type_id:
            raise ValidationError(
                "Resource type does not match the allocation", "resource_type_id"
            )
        if allocation.quantity != quantity:
            raise ValidationError(
                f"Quantity must match the allocated quantity ({allocation.quantity})", "quantity"
            )

        event = await self._get_event(allocation.event_id, lock=True)
        if event.status == EventStatus.APPROVED.value:
            if await self.count_event_allocations(event.id) <= 1:
                raise PreconditionFailedError(
                    "Cannot remove the last resource allocation of an approved event"
                )

        resource_type = await self._lock_resource_type(resource_type_id)
        await self.db.delete(allocation)
        await self.db.flush()
        await self._return_to_pool(resource_type, quantity)

        await self.audit.log(
            action=AuditAction.DEALLOCATE_RESOURCE,
            entity_type="EventResourceAllocation",
            entity_id=allocation_id,
            user_id=deallocated_by_id,
            entity_identifier=f"{resource_type.name} -> event {event.id}",
            old_values={"quantity": quantity},
        )

        if commit:
            await self.db.commit()
        logger.info(
            "Deallocated %d x %s from event %s (pool now %d/%d)",
            quantity,
            resource_type.name,
            event.id,
            resource_type.available_quantity,
            resource_type.total_quantity,
        )

    async def release_event_allocations(self, event_id: int, released_by_id: int) -> int:
        """Return every allocation of an event to the pool. Does not commit."""
        allocations = await self.list_event_allocations(event_id)
        for allocation in allocations:
            resource_type = await self._lock_resource_type(allocation.resource_type_id)
            await self._return_to_pool(resource_type, allocation.quantity)
            await self.audit.log(
                action=AuditAction.DEALLOCATE_RESOURCE,
                entity_type="EventResourceAllocation",
                entity_id=allocation.id,
                user_id=released_by_id,
                entity_identifier=f"{resource_type.name} -> event {event_id}",
                old_values={"quantity": allocation.quantity},
                comment="Released on event deletion",
            )

        await self.db.execute(
            delete(EventResourceAllocation).where(EventResourceAllocation.event_id == event_id)
        )
        await self.db.flush()
        if allocations:
            logger.info("Released %d allocations of event %s", len(allocations), event_id)
        return len(allocations)

    # --- Pool movements ---

    async def _take_from_pool(
        self, resource_type: ResourceType, amount: int, requested: int, held: int = 0
    ) -> None:
        result = await self.db.execute(
            update(ResourceType)
            .where(
                ResourceType.id == resource_type.id,
                ResourceType.available_quantity >= amount,
            )
            .values(available_quantity=ResourceType.available_quantity - amount)
        )
        await self.db.refresh(resource_type)
        if result.rowcount != 1:
            logger.warning(
                "Insufficient %s: requested %d, available %d",
                resource_type.name,
                requested,
                resource_type.available_quantity + held,
            )
            raise InsufficientResourceError(
                resource_type_id=resource_type.id,
                resource_name=resource_type.name,
                requested=requested,
                available=resource_type.available_quantity + held,
            )

    async def _return_to_pool(self, resource_type: ResourceType, amount: int) -> None:
        result = await self.db.execute(
            update(ResourceType)
            .where(
                ResourceType.id == resource_type.id,
                ResourceType.available_quantity + amount <= ResourceType.total_quantity,
            )
            .values(available_quantity=ResourceType.available_quantity + amount)
        )
        await self.db.refresh(resource_type)
        if result.rowcount != 1:
            logger.error(
                "Returning %d x %s would exceed the total quantity %d",
                amount,
                resource_type.name,
                resource_type.total_quantity,
            )
            raise ValidationError(
                f"Returning {amount} {resource_type.name} would exceed the total quantity",
                "quantity",
            )

    async def _get_event(self, event_id: int, lock: bool = False) -> Event:
        query = select(Event).where(Event.id == event_id)
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        event = result.scalar_one_or_none()
        if not event:
            raise NotFoundError("Event", event_id)
        return event
