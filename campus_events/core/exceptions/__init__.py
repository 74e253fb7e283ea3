from campus_events.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    InsufficientResourceError,
    PreconditionFailedError,
    SchedulingConflictError,
    CapacityExceededError,
    DuplicateError,
    StoreUnavailableError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "InsufficientResourceError",
    "PreconditionFailedError",
    "SchedulingConflictError",
    "CapacityExceededError",
    "DuplicateError",
    "StoreUnavailableError",
]
