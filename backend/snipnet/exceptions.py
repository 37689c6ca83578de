"""
SnipNet Backend - Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions, one per error kind an operation can
       report.
How:   Each exception carries a message and optional context dict. Services
       raise them; global handlers registered in main.py translate them into
       structured JSON error responses with the matching HTTP status code.
Who:   Raised by services, dependencies and middleware.

Exception Hierarchy:
    SnipNetError (base)
    ├── ValidationError          → 400 Bad Request (invalid argument, self-reference)
    ├── AuthenticationError      → 401 Unauthorized (no caller identity)
    ├── ForbiddenError           → 403 Forbidden (not the owner)
    ├── NotFoundError            → 404 Not Found (missing, or wrong state)
    ├── ConflictError            → 409 Conflict (relationship already exists)
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error (opaque)

Every service method documents which of these it raises; together they form
the explicit error result of the operation. Nothing is retried.
"""

from typing import Any, Dict, Optional


class SnipNetError(Exception):
    """
    Base exception for all SnipNet application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 5xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnipNetError):
    """
    Raised when an argument is missing, malformed or self-referential.

    When:    Empty identifiers, sending a friend request to yourself, blocking
             yourself, empty or oversized comment content.
    HTTP:    400 Bad Request
    """

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


class AuthenticationError(SnipNetError):
    """
    Raised when a protected route is called without a caller identity.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(SnipNetError):
    """
    Raised when a caller mutates something they do not own.

    When:    Deleting someone else's comment; removing a user tag from a
             snippet the caller did not create.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SnipNetError):
    """
    Raised when a requested resource does not exist, or does not exist in the
    state the operation needs (e.g. accepting a request that is not pending).

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(SnipNetError):
    """
    Raised when creating something that already exists.

    When:    A friendship edge already exists between the two users (any
             status, either direction), or a concurrent duplicate insert hit a
             uniqueness constraint.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SnipNetError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. SQL text and
        constraint names stay in the server-side log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(SnipNetError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

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
