"""API endpoints for in-app notifications (always the caller's own)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.dependencies import CurrentUser
from campus_events.core.database.session import get_db
from campus_events.modules.notifications.schemas import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from campus_events.modules.notifications.service import NotificationService
from campus_events.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=ApiResponse[list[NotificationResponse]])
async def list_notifications(
    current_user: CurrentUser,
    unread_only: bool = Query(False),
    limit: int | None = Query(None, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    service = NotificationService(db)
    notifications = await service.list_for_user(current_user.id, unread_only=unread_only, limit=limit)
    return ApiResponse(
        success=True,
        data=[NotificationResponse.model_validate(n) for n in notifications],
    )


@router.get("/unread-count", response_model=ApiResponse[UnreadCountResponse])
async def unread_count(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = NotificationService(db)
    count = await service.unread_count(current_user.id)
    return ApiResponse(success=True, data=UnreadCountResponse(unread=count))


@router.post("/read-all", response_model=ApiResponse[MarkAllReadResponse])
async def mark_all_read(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = NotificationService(db)
    updated = await service.mark_all_read(current_user.id)
    return ApiResponse(success=True, data=MarkAllReadResponse(updated=updated))


@router.post("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read(
    notification_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = NotificationService(db)
    notification = await service.mark_read(notification_id, current_user.id)
    return ApiResponse(success=True, data=NotificationResponse.model_validate(notification))
