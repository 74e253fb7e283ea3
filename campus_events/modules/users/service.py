import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.audit import AuditAction, create_audit_log
from campus_events.core.auth.models import User, UserRole
from campus_events.core.auth.service import AuthService
from campus_events.core.exceptions import DuplicateError, NotFoundError, ValidationError
from campus_events.modules.notifications.service import NotificationService
from campus_events.modules.users.schemas import UserCreate, UserListFilters, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Service for user management operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> User | None:
        """Get user by ID."""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user(self, user_id: int) -> User:
        user = await self.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def list_users(self, filters: UserListFilters) -> tuple[list[User], int]:
        """
        List users with filters and pagination.

        Returns:
            Tuple of (users list, total count)
        """
        stmt = select(User)
        count_stmt = select(func.count(User.id))

        if filters.role:
            stmt = stmt.where(User.role == filters.role.value)
            count_stmt = count_stmt.where(User.role == filters.role.value)

        if filters.is_active is not None:
            stmt = stmt.where(User.is_active == filters.is_active)
            count_stmt = count_stmt.where(User.is_active == filters.is_active)

        if filters.search:
            search_term = f"%{filters.search}%"
            search_filter = or_(
                User.full_name.ilike(search_term),
                User.email.ilike(search_term),
                User.department.ilike(search_term),
            )
            stmt = stmt.where(search_filter)
            count_stmt = count_stmt.where(search_filter)

        total = (await self.session.execute(count_stmt)).scalar_one()

        offset = (filters.page - 1) * filters.limit
        stmt = stmt.order_by(User.full_name).offset(offset).limit(filters.limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def create(self, data: UserCreate, created_by_id: int | None) -> User:
        """Create a new user account."""
        user = await AuthService(self.session).create_user(
            email=data.email,
            password=data.password,
            full_name=data.full_name,
            role=data.role,
            department=data.department,
            created_by_id=created_by_id,
        )
        logger.info("User %s created with role %s", user.id, user.role)
        return user

    async def update(self, user_id: int, data: UserUpdate, updated_by_id: int) -> User:
        """Update user data. A role change notifies the user."""
        user = await self.get_user(user_id)

        old_values = {
            "email": user.email,
            "full_name": user.full_name,
            "department": user.department,
            "role": user.role,
        }

        if data.email and data.email != user.email:
            if await self.get_by_email(data.email):
                raise DuplicateError("User", "email", data.email)
            user.email = data.email

        if data.full_name is not None:
            user.full_name = data.full_name

        if data.department is not None:
            user.department = data.department

        role_changed = data.role is not None and data.role.value != user.role
        if role_changed:
            if user.id == updated_by_id and data.role != UserRole.ADMIN:
                raise ValidationError("Cannot remove your own admin role", "role")
            user.role = data.role.value

        await self.session.flush()

        new_values = {
            "email": user.email,
            "full_name": user.full_name,
            "department": user.department,
            "role": user.role,
        }
        await create_audit_log(
            session=self.session,
            action=AuditAction.ASSIGN_ROLE if role_changed else AuditAction.UPDATE,
            entity_type="User",
            entity_id=user.id,
            user_id=updated_by_id,
            entity_identifier=user.email,
            old_values=old_values,
            new_values=new_values,
        )

        if role_changed:
            await NotificationService(self.session).notify(
                user,
                "role_assigned",
                "Role updated",
                f"Your role is now {user.role}.",
            )
            logger.info("User %s role changed %s -> %s", user.id, old_values["role"], user.role)

        return user

    async def deactivate(self, user_id: int, deactivated_by_id: int) -> User:
        """Deactivate a user."""
        user = await self.get_user(user_id)

        if user.id == deactivated_by_id:
            raise ValidationError("Cannot deactivate your own account")
        if not user.is_active:
            raise ValidationError("User is already deactivated")

        user.is_active = False
        await self.session.flush()

        await create_audit_log(
            session=self.session,
            action=AuditAction.UPDATE,
            entity_type="User",
            entity_id=user.id,
            user_id=deactivated_by_id,
            entity_identifier=user.email,
            old_values={"is_active": True},
            new_values={"is_active": False},
            comment="User deactivated",
        )

        return user

    async def activate(self, user_id: int, activated_by_id: int) -> User:
        """Activate a user."""
        user = await self.get_user(user_id)

        if user.is_active:
            raise ValidationError("User is already active")

        user.is_active = True
        await self.session.flush()

        await create_audit_log(
            session=self.session,
            action=AuditAction.UPDATE,
            entity_type="User",
            entity_id=user.id,
            user_id=activated_by_id,
            entity_identifier=user.email,
            old_values={"is_active": False},
            new_values={"is_active": True},
            comment="User activated",
        )

        return user
