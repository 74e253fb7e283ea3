from datetime import datetime
from enum import StrEnum

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from campus_events.core.database.base import BaseModel


class UserRole(StrEnum):
    """User roles in the system."""

    ADMIN = "admin"
    ORGANIZER = "organizer"
    STUDENT = "student"


class User(BaseModel):
    """
    Account of a student, an event organizer or an administrator.

    The profile fields (name, department) live on the same row; there is one
    role per user.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str | None] = mapped_column(String(200), nullable=True)

    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.STUDENT.value, index=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def has_role(self, *roles: UserRole) -> bool:
        """Check if user has any of the specified roles."""
        return self.role in [r.value for r in roles]

    @property
    def can_login(self) -> bool:
        return self.password_hash is not None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_organizer(self) -> bool:
        return self.role == UserRole.ORGANIZER.value
