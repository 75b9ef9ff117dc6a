"""
Exception classes for the application.

Every error carries a stable ``code`` so callers can branch on the category
instead of parsing the message.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors rendered by the application error handler."""

    code: str = "internal_error"

    def __init__(self, status_code: int, message: str):
        super().__init__(status_code=status_code, detail=message)


class ValidationError(AppError):
    """Raised when caller input has the wrong shape or type."""

    code = "validation_error"

    def __init__(self, message: str):
        super().__init__(status.HTTP_400_BAD_REQUEST, message)


class InvalidTabError(ValidationError):
    """Raised when a draft listing is requested for an unknown tab."""

    code = "invalid_tab"

    def __init__(self, tab):
        super().__init__(f"Invalid tab parameter: {tab!r}")


class NotFoundError(AppError):
    """
    Raised when a requested resource is not found.

    Also used when the resource belongs to another user, so the two cases
    look the same to the caller.
    """

    code = "not_found"

    def __init__(self, resource_type: str, resource_id=None):
        super().__init__(
            status.HTTP_404_NOT_FOUND, f"{resource_type} not found or not authorized"
        )
        self.resource_id = resource_id


class ConflictError(AppError):
    """Raised when there's a conflict with existing data."""

    code = "conflict"

    def __init__(self, message: str):
        super().__init__(status.HTTP_409_CONFLICT, message)


class UnauthorizedError(AppError):
    """Raised when a user is not authorized to access a resource."""

    code = "unauthorized"

    def __init__(self, message: str):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message)
        self.headers = {"WWW-Authenticate": "Bearer"}


class UnresolvableLocationError(AppError):
    """Raised when a place name cannot be mapped to a known country or coordinate."""

    code = "unresolvable_location"

    def __init__(self, place: str):
        super().__init__(
            status.HTTP_400_BAD_REQUEST, f"Could not determine location for {place!r}"
        )
        self.place = place


class MalformedAIResponseError(AppError):
    """Raised when no JSON value can be extracted from a model response."""

    code = "malformed_ai_response"

    def __init__(self, message: str = "Invalid AI response format"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


class InvalidAIResponseError(AppError):
    """Raised when a model response parsed but has the wrong structure."""

    code = "invalid_ai_response"

    def __init__(self, message: str):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


class RouteValidationError(InvalidAIResponseError):
    """Raised when a generated route batch breaks a structural rule."""


class DatabaseError(AppError):
    """Raised when database operations fail."""

    code = "storage_fault"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


class ExternalServiceError(AppError):
    """Raised when external service calls fail."""

    code = "external_service_error"

    def __init__(self, service_name: str, message: str):
        super().__init__(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"{service_name} service error: {message}",
        )
        self.service_name = service_name
