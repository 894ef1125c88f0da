"""
JobBoard Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions, one per failure category.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) catch these
       and return `{"error": ...}` JSON bodies with the right status code.
Who:   Raised by the request pipeline, services and the backend client;
       caught by global handlers.

Exception Hierarchy:
    JobBoardError (base)
    ├── AuthenticationError      → 401 Unauthorized
    ├── AuthorizationError       → 403 Forbidden
    ├── ValidationError          → 400 Bad Request (+ per-field messages)
    ├── RateLimitExceededError   → 429 Too Many Requests (+ Retry-After)
    ├── ServerError              → 500 Internal Server Error
    └── ExternalServiceError     → status derived from BackendErrorKind

The `context` dict is logged server-side and never returned to the client.
"""

from enum import Enum
from typing import Any, Dict, Optional


class JobBoardError(Exception):
    """
    Base exception for all JobBoard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(JobBoardError):
    """
    The caller could not be identified.

    When:    Missing/malformed bearer token, token rejected by the auth provider,
             or bad credentials on sign-in.
    HTTP:    401 Unauthorized
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Authorization token required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(JobBoardError):
    """
    The caller is known but may not perform the operation.

    When:    Non-admin on an admin route, non-employer creating a job.
    HTTP:    403 Forbidden
    """

    status_code = 403

    def __init__(
        self,
        message: str = "Admin access required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(JobBoardError):
    """
    Raised when client input fails validation.

    What:    The client sent data that can be corrected.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "Validation failed",
            "fields": {"title": "Must be at least 3 characters"}
        }

    `fields` is None for whole-payload failures (e.g. malformed JSON), in which
    case the body carries only `error`.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        fields: Optional[Dict[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.fields = fields


class RateLimitExceededError(JobBoardError):
    """
    Raised when a client exceeds the rate limit of an operation.

    HTTP:    429 Too Many Requests

    Response includes a Retry-After header with `retry_after` seconds.
    """

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        message: str = "Too many requests. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class ServerError(JobBoardError):
    """
    A store operation failed or returned nothing.

    HTTP:    500 Internal Server Error

    The message is an operation-level summary ("Failed to create job"); the
    underlying cause stays in `context` for the logs.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A server error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BackendErrorKind(str, Enum):
    """Tagged categories for failures reported by the hosted data/auth service."""

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    TOO_MANY_REQUESTS = "too_many_requests"
    WEAK_PASSWORD = "weak_password"
    EMAIL_EXISTS = "email_exists"
    INVALID_EMAIL = "invalid_email"
    DUPLICATE_ENTRY = "duplicate_entry"
    INVALID_REFERENCE = "invalid_reference"
    CONSTRAINT_VIOLATION = "constraint_violation"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class ExternalServiceError(JobBoardError):
    """
    A call to the hosted data/auth service failed.

    Produced only by the error translation layer. `kind` is the tagged
    category, `message` is already the friendly client-facing text, and
    `status_code` is the HTTP status the kind maps to. The provider's raw
    message is kept in `context["provider_message"]` for logging only.
    """

    def __init__(
        self,
        kind: BackendErrorKind,
        message: str,
        status_code: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx["kind"] = kind.value
        super().__init__(message=message, context=ctx)
        self.kind = kind
        self.status_code = status_code
