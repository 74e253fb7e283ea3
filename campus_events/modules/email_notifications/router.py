"""API endpoints for email notification settings, preferences and logs."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.dependencies import AdminUser, CurrentUser
from campus_events.core.database.session import get_db
from campus_events.modules.email_notifications.schemas import (
    EmailLogResponse,
    EmailSettingResponse,
    EmailToggle,
    UserEmailPreferenceResponse,
)
from campus_events.modules.email_notifications.service import (
    DEFAULT_NOTIFICATION_TYPES,
    EmailNotificationService,
)
from campus_events.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/email-notifications", tags=["Email Notifications"])


@router.get("/types", response_model=ApiResponse[dict[str, str]])
async def list_notification_types(current_user: CurrentUser):
    return ApiResponse(success=True, data=DEFAULT_NOTIFICATION_TYPES)


@router.get("/settings", response_model=ApiResponse[list[EmailSettingResponse]])
async def list_settings(
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    service = EmailNotificationService(db)
    settings = await service.list_settings()
    return ApiResponse(
        success=True,
        data=[EmailSettingResponse.model_validate(s) for s in settings],
    )


@router.put("/settings/{notification_type}", response_model=ApiResponse[EmailSettingResponse])
async def update_setting(
    notification_type: str,
    payload: EmailToggle,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Enable or disable a notification type for everyone."""
    service = EmailNotificationService(db)
    setting = await service.update_setting(
        notification_type, payload.enabled, updated_by_id=current_user.id
    )
    return ApiResponse(success=True, data=EmailSettingResponse.model_validate(setting))


@router.get("/preferences", response_model=ApiResponse[list[UserEmailPreferenceResponse]])
async def list_my_preferences(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Effective preference per notification type (missing rows count as enabled)."""
    service = EmailNotificationService(db)
    stored = {
        p.notification_type: p.enabled
        for p in await service.list_user_preferences(current_user.id)
    }
    return ApiResponse(
        success=True,
        data=[
            UserEmailPreferenceResponse(
                notification_type=notification_type,
                enabled=stored.get(notification_type, True),
            )
            for notification_type in DEFAULT_NOTIFICATION_TYPES
        ],
    )


@router.put(
    "/preferences/{notification_type}",
    response_model=ApiResponse[UserEmailPreferenceResponse],
)
async def update_my_preference(
    notification_type: str,
    payload: EmailToggle,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    service = EmailNotificationService(db)
    preference = await service.update_user_preference(
        current_user.id, notification_type, payload.enabled
    )
    return ApiResponse(success=True, data=UserEmailPreferenceResponse.model_validate(preference))


@router.get("/logs", response_model=ApiResponse[list[EmailLogResponse]])
async def list_logs(
    current_user: CurrentUser,
    limit: int | None = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """Admins see all outgoing emails, other users only their own."""
    service = EmailNotificationService(db)
    logs = await service.list_logs(current_user, limit=limit)
    return ApiResponse(success=True, data=[EmailLogResponse.model_validate(log) for log in logs])
