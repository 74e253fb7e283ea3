from enum import StrEnum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.audit.models import AuditLog


class AuditAction(StrEnum):
    """Standard audit actions."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    LOGIN = "LOGIN"

    # Domain-specific actions
    ALLOCATE_RESOURCE = "ALLOCATE_RESOURCE"
    DEALLOCATE_RESOURCE = "DEALLOCATE_RESOURCE"
    REVIEW_RESOURCE_REQUEST = "REVIEW_RESOURCE_REQUEST"
    ASSIGN_ROLE = "ASSIGN_ROLE"


class AuditService:
    """Service for creating audit logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        action: str | AuditAction,
        entity_type: str,
        entity_id: int,
        user_id: int | None = None,
        entity_identifier: str | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        comment: str | None = None,
        ip_address: str | None = None,
    ) -> AuditLog:
        """Create an audit log entry."""
        return await create_audit_log(
            session=self.db,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            entity_identifier=entity_identifier,
            old_values=old_values,
            new_values=new_values,
            comment=comment,
            ip_address=ip_address,
        )


async def create_audit_log(
    session: AsyncSession,
    action: str | AuditAction,
    entity_type: str,
    entity_id: int,
    user_id: int | None = None,
    entity_identifier: str | None = None,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
    comment: str | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """
    Create an audit log entry.

    Args:
        session: Database session
        action: Action performed (e.g., CREATE, APPROVE, ALLOCATE_RESOURCE)
        entity_type: Type of entity (e.g., Event, ResourceType, EventResourceAllocation)
        entity_id: ID of the entity
        user_id: ID of the user who performed the action
        entity_identifier: Human-readable identifier (e.g., event title)
        old_values: State before change
        new_values: State after change
        comment: Additional comment
        ip_address: Client IP address

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        user_id=user_id,
        action=str(action),
        entity_type=entity_type,
        entity_id=entity_id,
        entity_identifier=entity_identifier,
        old_values=old_values,
        new_values=new_values,
        comment=comment,
        ip_address=ip_address,
    )

    session.add(audit_log)
    await session.flush()

    return audit_log
