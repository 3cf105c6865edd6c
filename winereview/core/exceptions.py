"""
Custom Exceptions - Application-specific error classes.

Every domain failure is one of these kinds. Each carries its HTTP status
and a stable error code; the API layer translates them in one place
(winereview.api.main) into a structured ErrorResponse body.
"""
from typing import Optional, Union
from uuid import UUID


class WineReviewerException(Exception):
    """
    Base exception for all domain errors.

    Subclass this for specific error types.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to error response dict."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


class AuthenticationError(WineReviewerException):
    """Raised when an external identity token is missing, invalid or expired."""
    status_code = 401
    error_code = "authentication_failed"

    def __init__(self, message: str = "Invalid or expired identity token", details: Optional[str] = None):
        super().__init__(message, details)


class UnauthenticatedError(WineReviewerException):
    """Raised when a protected route is called without a valid session."""
    status_code = 403
    error_code = "unauthenticated"

    def __init__(self, message: str = "A valid session is required for this operation"):
        super().__init__(message)


class ForbiddenError(WineReviewerException):
    """Raised when an authenticated user tries to mutate a resource they do not own."""
    status_code = 403
    error_code = "forbidden"

    def __init__(self, requester_id: Union[UUID, str], resource_type: str, resource_id: Union[UUID, str, None] = None):
        super().__init__(
            message=f"User {requester_id} is not allowed to modify this {resource_type}",
            details=f"{resource_type.lower()}_id={resource_id}" if resource_id else None
        )
        self.requester_id = requester_id
        self.resource_type = resource_type
        self.resource_id = resource_id


class NotFoundError(WineReviewerException):
    """Raised when a referenced user, wine, review or comment does not exist."""
    status_code = 404
    error_code = "not_found"

    def __init__(self, resource_type: str, resource_id: Union[UUID, str]):
        super().__init__(
            message=f"{resource_type} not found: {resource_id}",
            details=f"{resource_type.lower()}_id={resource_id}"
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ValidationError(WineReviewerException):
    """Raised when input validation fails."""
    status_code = 400
    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details=f"field={field}" if field else None)
        self.field = field


class StorageError(WineReviewerException):
    """Raised when the file store rejects or fails a write."""
    status_code = 502
    error_code = "storage_error"

    def __init__(self, message: str = "File storage operation failed", details: Optional[str] = None):
        super().__init__(message, details)


class InternalError(WineReviewerException):
    """Raised for unexpected failures that still deserve a structured body."""
    status_code = 500
    error_code = "internal_error"


class UserLookupError(InternalError):
    """
    Raised by the email-only login path when no user matches.

    Kept as a 500 to preserve the existing client contract; this path is
    a development shortcut and is disabled outside development.
    """
    error_code = "user_not_found"

    def __init__(self, email: str):
        super().__init__(
            message=f"No user registered with email: {email}",
            details="email login only works for existing users"
        )
        self.email = email
