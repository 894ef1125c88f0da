"""
JobBoard Backend - Auth Gate
=============================

What:  Resolves the caller's identity from a bearer token and enforces the
       "authenticated" and "admin" access tiers.
How:   The token is verified by the hosted auth provider on EVERY request;
       nothing is cached between requests.
Who:   Called by the request pipeline after the rate limiter.

Outcomes:
    No / malformed Authorization header      → 401 "Authorization token required"
    Provider rejects token or returns nobody → 401 "Invalid or expired token"
    Unexpected failure during verification   → 401 "Authentication failed" (logged)
    Authenticated but not the admin (admin)  → 403 "Admin access required"
    Users-table role lookup fails            → 500 "Failed to verify user role"

The admin is whoever's verified email equals settings.admin_email. Emails sent
by the client in the payload are never consulted. Student and Employer roles
are read from the users table, only for operations that check a role.
"""

import logging
from typing import Any, Dict, Optional

from starlette.requests import Request

from jobboard.config import settings
from jobboard.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    ServerError,
)
from jobboard.schemas.auth import Principal, Role
from jobboard.services.backend_base import BackendService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
USERS_TABLE = "users"


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of a well-formed `Bearer <token>` header, else None."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def is_admin_email(email: Optional[str]) -> bool:
    return bool(email) and email.strip().lower() == settings.admin_email.strip().lower()


def principal_from_user(user: Dict[str, Any], access_token: str) -> Principal:
    """
    Build the Principal from the provider's user object.

    Only the configured admin email resolves to a role here. Student and
    Employer roles live in the users table and are loaded on demand by
    AuthGate.load_role; the provider's user metadata is editable by its
    owner and is never consulted.
    """
    email = user.get("email") or ""
    return Principal(
        id=str(user["id"]),
        email=email,
        role=Role.ADMIN if is_admin_email(email) else None,
        access_token=access_token,
    )


def role_from_profile(row: Optional[Dict[str, Any]]) -> Optional[Role]:
    """Role recorded in a users row. Missing, unknown and Admin resolve to None."""
    if not row:
        return None
    try:
        role = Role(row.get("role"))
    except ValueError:
        return None
    return None if role is Role.ADMIN else role


class AuthGate:
    """Token verification front-end over a BackendService."""

    def __init__(self, backend: BackendService):
        self.backend = backend

    async def require_auth(self, request: Request) -> Principal:
        token = extract_bearer_token(request.headers.get("authorization"))
        if token is None:
            raise AuthenticationError("Authorization token required")

        try:
            user = await self.backend.get_user(token)
        except ExternalServiceError as exc:
            logger.info("Token rejected by auth provider: %s", exc.kind.value)
            raise AuthenticationError(
                "Invalid or expired token", context={"kind": exc.kind.value}
            )
        except Exception as exc:
            logger.error("Token verification failed: %s", type(exc).__name__, exc_info=True)
            raise AuthenticationError(
                "Authentication failed", context={"error_type": type(exc).__name__}
            )

        if not user:
            raise AuthenticationError("Invalid or expired token")

        return principal_from_user(user, token)

    async def require_admin(self, request: Request) -> Principal:
        principal = await self.require_auth(request)
        if not principal.is_admin:
            logger.warning("Admin route denied for user %s", principal.id)
            raise AuthorizationError("Admin access required")
        return principal

    async def load_role(self, principal: Principal) -> Principal:
        """
        Return the principal with the role from its users row.

        The admin has no users row and is returned unchanged. A caller
        without a row gets no role, so role checks deny it.
        """
        if principal.is_admin:
            return principal

        try:
            rows = await self.backend.select(
                USERS_TABLE,
                columns="role",
                filters={"id": principal.id},
                access_token=principal.access_token,
            )
        except ExternalServiceError as exc:
            logger.error("Role lookup for user %s failed: %s", principal.id, exc.kind.value)
            raise ServerError("Failed to verify user role", context={"kind": exc.kind.value})

        role = role_from_profile(rows[0] if rows else None)
        return principal.model_copy(update={"role": role})
