"""
JobBoard Backend - Provider Error Translation
==============================================

What:  Converts raw failures from the hosted data/auth service into
       ExternalServiceError values tagged with a BackendErrorKind.
How:   The provider reports errors as free text. Known substrings map to a
       kind, each kind has a fixed HTTP status and a friendly message.
Who:   Called only by the backend client (SupabaseService), which is the one
       place raw provider responses are received.

Raw provider text never leaves this module except inside the exception's
`context`, which is logged but not returned to clients.
"""

import logging
from typing import Optional, Tuple

import httpx

from jobboard.exceptions import BackendErrorKind, ExternalServiceError

logger = logging.getLogger(__name__)


FRIENDLY_MESSAGES = {
    BackendErrorKind.INVALID_CREDENTIALS: (
        "Invalid email or password. Please check your credentials and try again."
    ),
    BackendErrorKind.EMAIL_NOT_CONFIRMED: (
        "Please check your email and click the confirmation link before signing in."
    ),
    BackendErrorKind.TOO_MANY_REQUESTS: (
        "Too many login attempts. Please wait a few minutes before trying again."
    ),
    BackendErrorKind.WEAK_PASSWORD: "Password is too weak. Please choose a stronger password.",
    BackendErrorKind.EMAIL_EXISTS: (
        "An account with this email already exists. Please try signing in instead."
    ),
    BackendErrorKind.INVALID_EMAIL: "Please enter a valid email address.",
    BackendErrorKind.DUPLICATE_ENTRY: "This record already exists",
    BackendErrorKind.INVALID_REFERENCE: "Invalid reference to related data",
    BackendErrorKind.CONSTRAINT_VIOLATION: "Data does not meet requirements",
    BackendErrorKind.UNAVAILABLE: (
        "The data service is temporarily unavailable. Please try again later."
    ),
    BackendErrorKind.UNKNOWN: "A server error occurred. Please try again later.",
}

STATUS_CODES = {
    BackendErrorKind.INVALID_CREDENTIALS: 401,
    BackendErrorKind.EMAIL_NOT_CONFIRMED: 401,
    BackendErrorKind.TOO_MANY_REQUESTS: 429,
    BackendErrorKind.WEAK_PASSWORD: 400,
    BackendErrorKind.EMAIL_EXISTS: 409,
    BackendErrorKind.INVALID_EMAIL: 400,
    BackendErrorKind.DUPLICATE_ENTRY: 400,
    BackendErrorKind.INVALID_REFERENCE: 400,
    BackendErrorKind.CONSTRAINT_VIOLATION: 400,
    BackendErrorKind.UNAVAILABLE: 503,
    BackendErrorKind.UNKNOWN: 500,
}

# Checked in order; first matching substring wins
_SUBSTRING_RULES: Tuple[Tuple[str, BackendErrorKind], ...] = (
    ("Invalid login credentials", BackendErrorKind.INVALID_CREDENTIALS),
    ("Email not confirmed", BackendErrorKind.EMAIL_NOT_CONFIRMED),
    ("Too many requests", BackendErrorKind.TOO_MANY_REQUESTS),
    ("Password should be at least", BackendErrorKind.WEAK_PASSWORD),
    ("User already registered", BackendErrorKind.EMAIL_EXISTS),
    ("Invalid email", BackendErrorKind.INVALID_EMAIL),
    ("foreign key constraint", BackendErrorKind.INVALID_REFERENCE),
    ("check constraint", BackendErrorKind.CONSTRAINT_VIOLATION),
)

_UNIQUE_VIOLATION = "duplicate key value violates unique constraint"


def classify(message: str, status_code: Optional[int] = None) -> BackendErrorKind:
    """Map a provider error message (and optional HTTP status) to a kind."""
    for substring, kind in _SUBSTRING_RULES:
        if substring in message:
            return kind

    if _UNIQUE_VIOLATION in message:
        if "email" in message:
            return BackendErrorKind.EMAIL_EXISTS
        return BackendErrorKind.DUPLICATE_ENTRY

    if status_code == 429:
        return BackendErrorKind.TOO_MANY_REQUESTS
    return BackendErrorKind.UNKNOWN


def translate_provider_error(
    message: str,
    status_code: Optional[int] = None,
    operation: str = "request",
) -> ExternalServiceError:
    """
    Build the client-safe exception for a provider error response.

    Args:
        message:     Raw error text returned by the provider
        status_code: HTTP status of the provider response, if any
        operation:   Short label of the call ("sign_in", "insert jobs", ...)
    """
    kind = classify(message or "", status_code)
    logger.info(
        "Provider error on %s classified as %s (status=%s)",
        operation,
        kind.value,
        status_code,
    )
    return ExternalServiceError(
        kind=kind,
        message=FRIENDLY_MESSAGES[kind],
        status_code=STATUS_CODES[kind],
        context={
            "operation": operation,
            "provider_status": status_code,
            "provider_message": message,
        },
    )


def translate_transport_error(exc: httpx.HTTPError, operation: str = "request") -> ExternalServiceError:
    """The provider could not be reached (DNS, connect, timeout, protocol)."""
    logger.error("Provider unreachable during %s: %s", operation, type(exc).__name__)
    kind = BackendErrorKind.UNAVAILABLE
    return ExternalServiceError(
        kind=kind,
        message=FRIENDLY_MESSAGES[kind],
        status_code=STATUS_CODES[kind],
        context={"operation": operation, "error_type": type(exc).__name__},
    )
