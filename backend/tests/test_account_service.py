"""
JobBoard Backend - Account Service Unit Tests
==============================================

What we test:
    ✅ Sign-up registers with the provider and records the profile row
    ✅ Sign-in flags the admin from the session the provider returned
    ✅ The caller's profile comes from its own users row
    ✅ Admin sign-in checks configured credentials and bootstraps the account
    ✅ Password reset normalizes and checks the email, then passes the redirect URL
    ✅ Password report lists unmet rules and the strength level
"""

from unittest.mock import call

import pytest

from conftest import ADMIN_ID, STUDENT_ID
from jobboard.config import settings
from jobboard.exceptions import (
    AuthenticationError,
    BackendErrorKind,
    ExternalServiceError,
    ServerError,
    ValidationError,
)
from jobboard.schemas.auth import Principal, Role
from jobboard.services.account_service import AccountService

SESSION = {
    "access_token": "jwt",
    "refresh_token": "refresh",
    "user": {"id": "u1", "email": "sam@uni.edu"},
}
ADMIN_SESSION = {
    "access_token": "jwt",
    "refresh_token": "refresh",
    "user": {"id": ADMIN_ID, "email": "admin@app.com"},
}


def provider_error(kind, status_code=400):
    return ExternalServiceError(kind=kind, message="friendly", status_code=status_code)


class TestSignUp:

    def setup_method(self):
        self.service = AccountService()

    @pytest.mark.asyncio
    async def test_sign_up_records_profile(self, mock_backend):
        mock_backend.sign_up.return_value = {"id": STUDENT_ID, "email": "sam@uni.edu"}
        payload = {
            "name": "Sam",
            "email": "Sam@Uni.edu",
            "password": "Str0ng!Pass",
            "role": "Student",
        }

        result = await self.service.sign_up(mock_backend, payload)

        assert result.user.id == STUDENT_ID
        assert result.user.email == "sam@uni.edu"
        assert "check your email" in result.message
        mock_backend.sign_up.assert_awaited_once_with(
            "sam@uni.edu", "Str0ng!Pass", metadata={"name": "Sam", "role": "Student"}
        )
        mock_backend.insert.assert_awaited_once_with(
            "users",
            {"id": STUDENT_ID, "name": "Sam", "email": "sam@uni.edu", "role": "Student"},
        )

    @pytest.mark.asyncio
    async def test_existing_email_propagates(self, mock_backend):
        mock_backend.sign_up.side_effect = provider_error(BackendErrorKind.EMAIL_EXISTS, 409)
        payload = {"name": "Sam", "email": "sam@uni.edu", "password": "Str0ng!Pass",
                   "role": "Student"}

        with pytest.raises(ExternalServiceError) as exc_info:
            await self.service.sign_up(mock_backend, payload)
        assert exc_info.value.status_code == 409
        mock_backend.insert.assert_not_awaited()


class TestSignIn:

    def setup_method(self):
        self.service = AccountService()

    @pytest.mark.asyncio
    async def test_regular_sign_in(self, mock_backend):
        mock_backend.sign_in_with_password.return_value = SESSION
        result = await self.service.sign_in(mock_backend, "sam@uni.edu", "pw")
        assert result.session == SESSION
        assert result.is_admin is False

    @pytest.mark.asyncio
    async def test_admin_session_is_flagged(self, mock_backend):
        mock_backend.sign_in_with_password.return_value = ADMIN_SESSION
        result = await self.service.sign_in(mock_backend, "ADMIN@app.com", "pw")
        assert result.is_admin is True

    @pytest.mark.asyncio
    async def test_submitted_email_does_not_set_admin_flag(self, mock_backend):
        """Only the signed-in account counts, not what the client typed."""
        mock_backend.sign_in_with_password.return_value = SESSION
        result = await self.service.sign_in(mock_backend, "admin@app.com", "pw")
        assert result.is_admin is False

    @pytest.mark.asyncio
    async def test_session_without_user(self, mock_backend):
        mock_backend.sign_in_with_password.return_value = {"access_token": "jwt"}
        result = await self.service.sign_in(mock_backend, "sam@uni.edu", "pw")
        assert result.is_admin is False


class TestCurrentProfile:

    def setup_method(self):
        self.service = AccountService()
        self.student = Principal(
            id=STUDENT_ID, email="student@uni.edu", role=Role.STUDENT, access_token="t"
        )

    @pytest.mark.asyncio
    async def test_returns_users_row(self, mock_backend):
        result = await self.service.current_profile(mock_backend, self.student)

        assert result.user.id == STUDENT_ID
        assert result.user.name == "Sam Student"
        assert result.is_admin is False
        mock_backend.select.assert_awaited_once_with(
            "users", filters={"id": STUDENT_ID}, access_token="t"
        )

    @pytest.mark.asyncio
    async def test_store_failure(self, mock_backend):
        mock_backend.select.side_effect = provider_error(BackendErrorKind.UNAVAILABLE, 503)
        with pytest.raises(ServerError) as exc_info:
            await self.service.current_profile(mock_backend, self.student)
        assert exc_info.value.message == "Failed to fetch user data"

    @pytest.mark.asyncio
    async def test_admin_has_no_row(self, mock_backend):
        admin = Principal(id=ADMIN_ID, email="admin@app.com", role=Role.ADMIN)
        result = await self.service.current_profile(mock_backend, admin)
        assert result.user is None
        assert result.is_admin is True
        mock_backend.select.assert_not_awaited()


class TestAdminSignIn:

    def setup_method(self):
        self.service = AccountService()
        self.admin_email = settings.admin_email
        self.admin_password = settings.admin_password.get_secret_value()

    @pytest.mark.asyncio
    async def test_wrong_admin_credentials_never_reach_provider(self, mock_backend):
        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.admin_sign_in(mock_backend, self.admin_email, "guess")
        assert exc_info.value.message == "Invalid admin credentials"
        mock_backend.sign_in_with_password.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_existing_admin_signs_in(self, mock_backend):
        mock_backend.sign_in_with_password.return_value = SESSION

        result = await self.service.admin_sign_in(
            mock_backend, self.admin_email, self.admin_password
        )

        assert result.is_admin is True
        mock_backend.sign_up.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_admin_is_bootstrapped(self, mock_backend):
        mock_backend.sign_in_with_password.side_effect = [
            provider_error(BackendErrorKind.INVALID_CREDENTIALS, 401),
            SESSION,
        ]

        result = await self.service.admin_sign_in(
            mock_backend, self.admin_email, self.admin_password
        )

        assert result.session == SESSION
        mock_backend.sign_up.assert_awaited_once_with(
            self.admin_email, self.admin_password, metadata={"name": "Admin", "role": "Admin"}
        )
        assert mock_backend.sign_in_with_password.await_args_list == [
            call(self.admin_email, self.admin_password),
            call(self.admin_email, self.admin_password),
        ]

    @pytest.mark.asyncio
    async def test_failed_bootstrap_is_server_error(self, mock_backend):
        mock_backend.sign_in_with_password.side_effect = provider_error(
            BackendErrorKind.INVALID_CREDENTIALS, 401
        )
        mock_backend.sign_up.side_effect = provider_error(BackendErrorKind.WEAK_PASSWORD)

        with pytest.raises(ServerError) as exc_info:
            await self.service.admin_sign_in(
                mock_backend, self.admin_email, self.admin_password
            )
        assert exc_info.value.message == "Failed to create admin account"

    @pytest.mark.asyncio
    async def test_other_provider_errors_propagate(self, mock_backend):
        mock_backend.sign_in_with_password.side_effect = provider_error(
            BackendErrorKind.EMAIL_NOT_CONFIRMED, 401
        )
        with pytest.raises(ExternalServiceError):
            await self.service.admin_sign_in(
                mock_backend, self.admin_email, self.admin_password
            )
        mock_backend.sign_up.assert_not_awaited()


class TestPasswordHelpers:

    def setup_method(self):
        self.service = AccountService()

    @pytest.mark.asyncio
    async def test_reset_normalizes_email(self, mock_backend):
        await self.service.request_password_reset(mock_backend, "  Sam@Uni.EDU ")
        mock_backend.reset_password_for_email.assert_awaited_once_with(
            "sam@uni.edu", redirect_to=settings.password_reset_redirect_url
        )

    @pytest.mark.asyncio
    async def test_reset_rejects_malformed_email(self, mock_backend):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.request_password_reset(mock_backend, "not-an-email")
        assert exc_info.value.fields == {"email": "Invalid email format"}
        mock_backend.reset_password_for_email.assert_not_awaited()

    def test_password_report(self):
        report = self.service.password_report("weak")
        assert report.valid is False
        assert len(report.errors) == 4
        assert report.strength.level == "very-weak"
