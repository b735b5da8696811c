"""
JobTrail Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the failure classes of the API.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) turn them into JSON
       error responses; the context is logged server-side only.

Exception Hierarchy:
    JobTrailError (base)
    ├── ValidationError          → 400 Bad Request (single record or field)
    ├── MalformedRequestError    → 400 Bad Request (whole request unusable)
    ├── UnauthorizedError        → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── StoreUnavailableError    → 503 Service Unavailable (retryable)
    └── DatabaseError            → 500 Internal Server Error

Scope:
    ValidationError raised while merging one proposed record during a push is
    caught by the sync service and reported as a "rejected" outcome; it never
    aborts the batch. Every other exception fails the whole call.
"""

from typing import Any, Dict, Optional


class JobTrailError(Exception):
    """
    Base exception for all JobTrail application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(JobTrailError):
    """
    Raised when client input fails a business rule.

    When:    Missing company/position on a proposed application, bad PIN format,
             username already taken, résumé payload too large.
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


class MalformedRequestError(JobTrailError):
    """
    Raised when a request as a whole cannot be interpreted.

    When:    The sync batch is not a list of record-shaped objects, lastSync is
             not a timestamp, a résumé action is unknown.
    HTTP:    400 Bad Request. Nothing has been written when this is raised.
    """

    def __init__(
        self,
        message: str = "The request body is malformed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(JobTrailError):
    """
    Raised when the caller's credential is missing, invalid or expired,
    and when a login presents wrong credentials.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(JobTrailError):
    """
    Raised when a requested resource does not exist for the caller.

    Absent, tombstoned and foreign-owned records all raise this same error with
    the same message, so a response never reveals that another user owns an id.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(JobTrailError):
    """
    Raised when a client exceeds the auth attempt limit.

    HTTP:    429 Too Many Requests, with a Retry-After header
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "Too many attempts. Please try again later."
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class StoreUnavailableError(JobTrailError):
    """
    Raised when the record store is not ready or cannot be reached.

    When:    Request arrives before startup finished, database connection
             refused, SQLite file locked or unreadable.
    HTTP:    503 Service Unavailable, with a Retry-After header
    """

    def __init__(
        self,
        message: str = "Database not ready, please try again",
        retry_after: int = 5,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(JobTrailError):
    """
    Raised when a database operation fails unexpectedly.

    The client always receives a generic message; statement details stay in
    the server log.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
