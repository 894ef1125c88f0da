"""
JobBoard Backend - Account Service
===================================

What:  Sign-up, sign-in, admin bootstrap sign-in, the caller's own profile,
       password reset requests and the advisory password report.
How:   Thin orchestration over the auth provider. Provider failures arrive as
       ExternalServiceError already carrying a friendly message and status,
       so they propagate unchanged to the global handler.
Who:   Called by routes/auth.py.

Admin Bootstrap:
    The admin account lives only in the auth provider (no users-table row).
    On admin sign-in the submitted credentials must match ADMIN_EMAIL /
    ADMIN_PASSWORD. If the provider does not know the admin yet
    (INVALID_CREDENTIALS), the account is registered and the sign-in is
    attempted once more.
"""

import logging
import secrets
from typing import Any, Mapping

from jobboard.config import settings
from jobboard.exceptions import (
    AuthenticationError,
    BackendErrorKind,
    ExternalServiceError,
    ServerError,
    ValidationError,
)
from jobboard.middleware.auth import is_admin_email
from jobboard.schemas.auth import (
    AccountUser,
    PasswordStrengthResponse,
    Principal,
    Role,
    SessionResponse,
    SignUpResponse,
    StrengthReport,
)
from jobboard.schemas.job import ProfileResponse, User
from jobboard.services.backend_base import BackendService
from jobboard.validators import password_strength, validate_email, validate_password

logger = logging.getLogger(__name__)

USERS_TABLE = "users"


class AccountService:

    async def sign_up(self, backend: BackendService, payload: Mapping[str, Any]) -> SignUpResponse:
        """Register with the auth provider, then record the profile row."""
        email = payload["email"].lower()
        auth_user = await backend.sign_up(
            email,
            payload["password"],
            metadata={"name": payload["name"], "role": payload["role"]},
        )
        user_id = auth_user.get("id")
        if not user_id:
            logger.error("Sign-up for %s returned no user id", email)
            raise ServerError("An error occurred during sign up")

        profile = {
            "id": user_id,
            "name": payload["name"],
            "email": email,
            "role": payload["role"],
        }
        await backend.insert(USERS_TABLE, profile)
        logger.info("Registered %s account %s", payload["role"], user_id)
        return SignUpResponse(user=AccountUser(**profile))

    async def sign_in(self, backend: BackendService, email: str, password: str) -> SessionResponse:
        session = await backend.sign_in_with_password(email, password)
        # Admin flag follows the account the provider signed in, not the submitted email
        session_user = session.get("user") or {}
        return SessionResponse(session=session, is_admin=is_admin_email(session_user.get("email")))

    async def admin_sign_in(
        self, backend: BackendService, email: str, password: str
    ) -> SessionResponse:
        if not (
            is_admin_email(email)
            and secrets.compare_digest(password, settings.admin_password.get_secret_value())
        ):
            logger.warning("Rejected admin sign-in attempt")
            raise AuthenticationError("Invalid admin credentials")

        admin_email = settings.admin_email
        try:
            session = await backend.sign_in_with_password(admin_email, password)
        except ExternalServiceError as exc:
            if exc.kind is not BackendErrorKind.INVALID_CREDENTIALS:
                raise
            session = await self._bootstrap_admin(backend, admin_email, password)

        return SessionResponse(session=session, is_admin=True)

    async def _bootstrap_admin(
        self, backend: BackendService, admin_email: str, password: str
    ) -> dict:
        logger.info("Admin account not found in auth provider; registering it")
        try:
            await backend.sign_up(
                admin_email, password, metadata={"name": "Admin", "role": Role.ADMIN.value}
            )
        except ExternalServiceError as exc:
            logger.error("Admin bootstrap sign-up failed: %s", exc.kind.value)
            raise ServerError("Failed to create admin account")

        try:
            return await backend.sign_in_with_password(admin_email, password)
        except ExternalServiceError as exc:
            logger.error("Admin sign-in after bootstrap failed: %s", exc.kind.value)
            raise ServerError("Failed to authenticate admin")

    async def current_profile(
        self, backend: BackendService, principal: Principal
    ) -> ProfileResponse:
        """The caller's users row, looked up by the verified id."""
        if principal.is_admin:
            return ProfileResponse(user=None, is_admin=True)

        try:
            rows = await backend.select(
                USERS_TABLE,
                filters={"id": principal.id},
                access_token=principal.access_token,
            )
        except ExternalServiceError as exc:
            logger.error("Failed to fetch profile of %s: %s", principal.id, exc.kind.value)
            raise ServerError("Failed to fetch user data", context={"kind": exc.kind.value})

        if not rows:
            logger.warning("User %s has no profile row", principal.id)
            raise ServerError("Failed to fetch user data", context={"user_id": principal.id})
        return ProfileResponse(user=User.model_validate(rows[0]))

    async def request_password_reset(self, backend: BackendService, email: str) -> None:
        normalized = email.strip().lower()
        if not validate_email(normalized):
            raise ValidationError("Validation failed", fields={"email": "Invalid email format"})
        await backend.reset_password_for_email(
            normalized, redirect_to=settings.password_reset_redirect_url
        )

    def password_report(self, password: str) -> PasswordStrengthResponse:
        check = validate_password(password)
        strength = password_strength(password)
        return PasswordStrengthResponse(
            valid=check.valid,
            errors=check.errors,
            strength=StrengthReport(
                level=strength.level,
                label=strength.label,
                percentage=strength.percentage,
                score=strength.score,
            ),
        )


account_service = AccountService()
