from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class ValidationError(AppException):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=422, details=details)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, status_code=401)


class AuthorizationError(AppException):
    """Not authorized to perform action."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message=message, status_code=403)


class InsufficientResourceError(AppException):
    """Requested quantity exceeds what is left in the pool."""

    def __init__(self, resource_type_id: int, resource_name: str, requested: int, available: int):
        message = f"Only {available} {resource_name} available (requested {requested})"
        super().__init__(
            message=message,
            status_code=400,
            details={
                "field": "quantity",
                "resource_type_id": resource_type_id,
                "resource_name": resource_name,
                "requested": requested,
                "available": available,
                "shortfall": requested - available,
            },
        )


class PreconditionFailedError(AppException):
    """Operation is blocked until another step is done first."""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=412)


class SchedulingConflictError(AppException):
    """Venue is already booked on that date."""

    def __init__(self, conflicting_title: str | None, venue: str, date: Any):
        if conflicting_title:
            message = (
                f'Scheduling conflict: "{conflicting_title}" is already booked '
                f"at {venue} on {date}"
            )
        else:
            message = f"Scheduling conflict: {venue} is already booked on {date}"
        super().__init__(
            message=message,
            status_code=409,
            details={"field": "venue", "conflicting_event_title": conflicting_title},
        )


class CapacityExceededError(AppException):
    """Event has no free places left."""

    def __init__(self, event_id: int, capacity: int):
        super().__init__(
            message=f"Event is full: all {capacity} places are taken",
            status_code=409,
            details={"event_id": event_id, "capacity": capacity},
        )


class DuplicateError(AppException):
    """Duplicate resource."""

    def __init__(self, resource: str, field: str, value: Any):
        message = f"{resource} with {field}={value} already exists"
        super().__init__(message=message, status_code=409, details={"field": field, "value": value})


class StoreUnavailableError(AppException):
    """Database cannot be reached."""

    def __init__(self, message: str = "Database is temporarily unavailable, please retry"):
        super().__init__(message=message, status_code=503)
