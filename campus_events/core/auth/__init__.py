from campus_events.core.auth.models import User, UserRole
from campus_events.core.auth.service import AuthService
from campus_events.core.auth.jwt import create_access_token, create_refresh_token, decode_token
from campus_events.core.auth.dependencies import get_current_user, require_roles

__all__ = [
    "User",
    "UserRole",
    "AuthService",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "get_current_user",
    "require_roles",
]
