from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.auth.dependencies import AdminUser
from campus_events.core.auth.models import UserRole
from campus_events.core.database import get_db
from campus_events.modules.users.schemas import (
    UserCreate,
    UserListFilters,
    UserResponse,
    UserUpdate,
)
from campus_events.modules.users.service import UserService
from campus_events.shared.schemas import PaginatedResponse, SuccessResponse
from campus_events.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=ApiResponse[PaginatedResponse[UserResponse]])
async def list_users(
    current_user: AdminUser,
    role: UserRole | None = Query(None),
    is_active: bool | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """List users. Admin only."""
    service = UserService(db)
    filters = UserListFilters(role=role, is_active=is_active, search=search, page=page, limit=limit)
    users, total = await service.list_users(filters)

    return ApiResponse(
        success=True,
        data=PaginatedResponse.create(
            items=[UserResponse.model_validate(u) for u in users],
            total=total,
            page=page,
            limit=limit,
        ),
    )


@router.get("/{user_id}", response_model=SuccessResponse[UserResponse])
async def get_user(
    user_id: int,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    service = UserService(db)
    user = await service.get_user(user_id)
    return SuccessResponse(data=UserResponse.model_validate(user), message="User retrieved")


@router.post("", response_model=SuccessResponse[UserResponse], status_code=201)
async def create_user(
    data: UserCreate,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a user account.

    Without a password the account exists (can be invited to meetings,
    notified) but cannot log in until one is set.
    """
    service = UserService(db)
    user = await service.create(data, created_by_id=current_user.id)
    return SuccessResponse(
        data=UserResponse.model_validate(user),
        message="User created successfully",
    )


@router.put("/{user_id}", response_model=SuccessResponse[UserResponse])
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Update user data, including the role."""
    service = UserService(db)
    user = await service.update(user_id, data, updated_by_id=current_user.id)
    return SuccessResponse(
        data=UserResponse.model_validate(user),
        message="User updated successfully",
    )


@router.post("/{user_id}/deactivate", response_model=SuccessResponse[UserResponse])
async def deactivate_user(
    user_id: int,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    service = UserService(db)
    user = await service.deactivate(user_id, deactivated_by_id=current_user.id)
    return SuccessResponse(data=UserResponse.model_validate(user), message="User deactivated")


@router.post("/{user_id}/activate", response_model=SuccessResponse[UserResponse])
async def activate_user(
    user_id: int,
    current_user: AdminUser,
    db: AsyncSession = Depends(get_db),
):
    service = UserService(db)
    user = await service.activate(user_id, activated_by_id=current_user.id)
    return SuccessResponse(data=UserResponse.model_validate(user), message="User activated")
