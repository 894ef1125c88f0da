"""
JobBoard Backend - Auth Gate Tests
===================================

What we test:
    ✅ Missing or malformed Authorization headers → 401 before any provider call
    ✅ Provider rejections and unexpected failures → 401
    ✅ Role resolution (admin email only; metadata roles are ignored)
    ✅ Student/Employer roles loaded from the users table
    ✅ Admin tier → 403 for everyone else
"""

import pytest
from starlette.requests import Request

from conftest import ADMIN_ID, ADMIN_TOKEN, EMPLOYER_ID, EMPLOYER_TOKEN, STUDENT_ID, STUDENT_TOKEN
from jobboard.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendErrorKind,
    ExternalServiceError,
    ServerError,
)
from jobboard.middleware.auth import (
    AuthGate,
    extract_bearer_token,
    principal_from_user,
    role_from_profile,
)
from jobboard.schemas.auth import Principal, Role


def request_with(authorization=None) -> Request:
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


class TestBearerToken:

    def test_extracts_token(self):
        assert extract_bearer_token("Bearer abc.def") == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "bearer abc"])
    def test_rejects_malformed_headers(self, header):
        assert extract_bearer_token(header) is None


class TestPrincipalFromUser:

    def test_admin_email_is_admin(self):
        principal = principal_from_user({"id": "a", "email": "Admin@App.com"}, "t")
        assert principal.role is Role.ADMIN
        assert principal.is_admin

    def test_metadata_role_is_ignored(self):
        """Users can edit their own metadata, so it never grants a role."""
        user = {"id": "e", "email": "e@x.io", "user_metadata": {"role": "Employer"}}
        principal = principal_from_user(user, "t")
        assert principal.role is None
        assert not principal.is_employer
        assert principal.access_token == "t"

    def test_metadata_cannot_grant_admin(self):
        user = {"id": "m", "email": "mallory@x.io", "user_metadata": {"role": "Admin"}}
        assert principal_from_user(user, "t").role is None

    def test_token_not_serialized(self):
        principal = principal_from_user({"id": "a", "email": "a@x.io"}, "secret-token")
        assert "access_token" not in principal.model_dump()
        assert "secret-token" not in repr(principal)


class TestAuthGate:

    @pytest.mark.asyncio
    async def test_missing_header(self, mock_backend):
        with pytest.raises(AuthenticationError) as exc_info:
            await AuthGate(mock_backend).require_auth(request_with())
        assert exc_info.value.message == "Authorization token required"
        mock_backend.get_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_token(self, mock_backend):
        with pytest.raises(AuthenticationError) as exc_info:
            await AuthGate(mock_backend).require_auth(request_with("Bearer nope"))
        assert exc_info.value.message == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_provider_rejection(self, mock_backend):
        mock_backend.get_user.side_effect = ExternalServiceError(
            kind=BackendErrorKind.UNKNOWN, message="x", status_code=500
        )
        with pytest.raises(AuthenticationError) as exc_info:
            await AuthGate(mock_backend).require_auth(request_with("Bearer expired"))
        assert exc_info.value.message == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_unexpected_failure(self, mock_backend):
        mock_backend.get_user.side_effect = RuntimeError("boom")
        with pytest.raises(AuthenticationError) as exc_info:
            await AuthGate(mock_backend).require_auth(request_with("Bearer t"))
        assert exc_info.value.message == "Authentication failed"

    @pytest.mark.asyncio
    async def test_valid_token(self, mock_backend):
        principal = await AuthGate(mock_backend).require_auth(
            request_with(f"Bearer {EMPLOYER_TOKEN}")
        )
        assert principal.id == EMPLOYER_ID
        assert principal.role is None

    @pytest.mark.asyncio
    async def test_admin_tier_rejects_non_admin(self, mock_backend):
        with pytest.raises(AuthorizationError) as exc_info:
            await AuthGate(mock_backend).require_admin(request_with(f"Bearer {STUDENT_TOKEN}"))
        assert exc_info.value.message == "Admin access required"

    @pytest.mark.asyncio
    async def test_admin_tier_accepts_admin(self, mock_backend):
        principal = await AuthGate(mock_backend).require_admin(
            request_with(f"Bearer {ADMIN_TOKEN}")
        )
        assert principal.is_admin


class TestProfileRole:

    def test_role_from_profile(self):
        assert role_from_profile({"role": "Employer"}) is Role.EMPLOYER
        assert role_from_profile({"role": "Student"}) is Role.STUDENT
        assert role_from_profile({"role": "Wizard"}) is None
        assert role_from_profile({"role": "Admin"}) is None
        assert role_from_profile(None) is None


class TestLoadRole:

    def setup_method(self):
        self.employer = Principal(id=EMPLOYER_ID, email="owner@barista.example", access_token="t")

    @pytest.mark.asyncio
    async def test_role_comes_from_users_row(self, mock_backend):
        principal = await AuthGate(mock_backend).load_role(self.employer)

        assert principal.role is Role.EMPLOYER
        assert principal.access_token == "t"
        mock_backend.select.assert_awaited_once_with(
            "users", columns="role", filters={"id": EMPLOYER_ID}, access_token="t"
        )

    @pytest.mark.asyncio
    async def test_users_row_overrides_metadata(self, mock_backend):
        """Metadata claiming Employer does not help a Student."""
        user = {"id": STUDENT_ID, "email": "s@uni.edu", "user_metadata": {"role": "Employer"}}
        principal = await AuthGate(mock_backend).load_role(principal_from_user(user, "t"))
        assert principal.role is Role.STUDENT

    @pytest.mark.asyncio
    async def test_missing_row_has_no_role(self, mock_backend):
        stranger = Principal(id="99999999-9999-4999-8999-999999999999", email="x@x.io")
        principal = await AuthGate(mock_backend).load_role(stranger)
        assert principal.role is None

    @pytest.mark.asyncio
    async def test_admin_skips_lookup(self, mock_backend):
        admin = Principal(id=ADMIN_ID, email="admin@app.com", role=Role.ADMIN)
        assert await AuthGate(mock_backend).load_role(admin) is admin
        mock_backend.select.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lookup_failure_is_server_error(self, mock_backend):
        mock_backend.select.side_effect = ExternalServiceError(
            kind=BackendErrorKind.UNAVAILABLE, message="down", status_code=503
        )
        with pytest.raises(ServerError) as exc_info:
            await AuthGate(mock_backend).load_role(self.employer)
        assert exc_info.value.message == "Failed to verify user role"
