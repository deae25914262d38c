"""
e-Foncier Backend: Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a human-readable message and an optional
       context dict. Global handlers (registered in main.py) map them to
       HTTP status codes and `{"error": message, ...}` bodies.
Who:   Raised by services and middleware; caught by the global handlers.

Exception Hierarchy:
    EFoncierError (base)
    ├── ValidationError          → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class EFoncierError(Exception):
    """
    Base exception for all e-Foncier application errors.

    Attributes:
        message:  User-facing error description (returned as `error`)
        context:  Additional info; returned as `details` for client errors,
                  logged only for server errors
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(EFoncierError):
    """
    Raised when client input fails a business rule.

    Examples:
        Missing field: owner_name
        Latitude must be between -90 and 90
        File type '.exe' is not supported
    """

    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class MissingFieldError(ValidationError):
    """A required field is absent, null, or blank."""

    def __init__(self, field: str):
        super().__init__(message=f"Missing field: {field}", field=field)


class NotFoundError(EFoncierError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception so routes never check for it.
    """

    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(EFoncierError):
    """
    Raised when a write would break a uniqueness rule or a workflow rule.

    When:    Duplicate cadastral reference, or a request status transition
             that the workflow does not allow.
    HTTP:    409 Conflict
    """

    code = "conflict"

    def __init__(
        self,
        message: str = "The resource is in a conflicting state",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(EFoncierError):
    """
    Raised when file system operations on the document store fail.

    The client receives a generic message; paths and OS errors stay in the
    context and are only logged.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(EFoncierError):
    """Raised when a database operation fails unexpectedly."""

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(EFoncierError):
    """Raised when a client exceeds the per-IP request rate limit."""

    code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
