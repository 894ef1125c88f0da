"""
JobBoard Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The hosted backend is replaced by an AsyncMock spec'd on
       BackendService; the app is built per test with that mock and a fresh
       rate limiter, and driven through httpx's ASGITransport.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_backend:     AsyncMock(spec=BackendService)
    ├── fake_clock:       controllable millisecond clock for the limiter
    ├── rate_limiter:     RateLimiter over an in-memory store and fake_clock
    ├── app:              create_app(mock_backend, rate_limiter)
    ├── test_client:      HTTPX AsyncClient bound to `app`
    ├── student/employer/admin_user: provider user objects
    └── profiles:         users-table rows the mock returns for id lookups
"""

import os
from unittest.mock import DEFAULT, AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key-not-real"
os.environ["ADMIN_EMAIL"] = "admin@app.com"
os.environ["ADMIN_PASSWORD"] = "admin123"
os.environ["LOG_LEVEL"] = "WARNING"

from jobboard.middleware.rate_limit import InMemoryRateLimitStore, RateLimiter  # noqa: E402
from jobboard.services.backend_base import BackendService  # noqa: E402

STUDENT_ID = "11111111-1111-4111-8111-111111111111"
EMPLOYER_ID = "22222222-2222-4222-8222-222222222222"
ADMIN_ID = "33333333-3333-4333-8333-333333333333"
JOB_ID = "44444444-4444-4444-8444-444444444444"

STUDENT_TOKEN = "student-token"
EMPLOYER_TOKEN = "employer-token"
ADMIN_TOKEN = "admin-token"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_000_000):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def student_user():
    return {
        "id": STUDENT_ID,
        "email": "student@uni.edu",
        "user_metadata": {"name": "Sam Student", "role": "Student"},
    }


@pytest.fixture
def employer_user():
    return {
        "id": EMPLOYER_ID,
        "email": "owner@barista.example",
        "user_metadata": {"name": "Barista Co", "role": "Employer"},
    }


@pytest.fixture
def admin_user():
    return {"id": ADMIN_ID, "email": "admin@app.com", "user_metadata": {"role": "Admin"}}


@pytest.fixture
def profiles():
    """users-table rows keyed by id. The admin has none."""
    return {
        STUDENT_ID: {
            "id": STUDENT_ID,
            "name": "Sam Student",
            "email": "student@uni.edu",
            "role": "Student",
        },
        EMPLOYER_ID: {
            "id": EMPLOYER_ID,
            "name": "Barista Co",
            "email": "owner@barista.example",
            "role": "Employer",
        },
    }


@pytest.fixture
def sample_job():
    return {
        "id": JOB_ID,
        "title": "Barista",
        "date": "2025-03-01",
        "pay": "$15/hr",
        "employer_id": EMPLOYER_ID,
        "created_at": "2025-02-01T10:00:00+00:00",
    }


@pytest.fixture
def mock_backend(student_user, employer_user, admin_user, profiles):
    """
    Provides a mock hosted backend.

    get_user resolves the three well-known tokens; anything else is an
    unknown token (None). A users select filtered on id returns that
    user's profile row. Other table calls return empty results until a
    test sets return values.

    Usage:
        async def test_list(mock_backend, test_client):
            mock_backend.select.return_value = [job_row]
    """
    backend = AsyncMock(spec=BackendService)
    users = {
        STUDENT_TOKEN: student_user,
        EMPLOYER_TOKEN: employer_user,
        ADMIN_TOKEN: admin_user,
    }

    async def get_user(token):
        return users.get(token)

    def select(table, *, filters=None, **kwargs):
        if table == "users" and filters and "id" in filters:
            row = profiles.get(filters["id"])
            return [row] if row else []
        return DEFAULT

    backend.get_user.side_effect = get_user
    backend.select.side_effect = select
    backend.select.return_value = []
    backend.update.return_value = []
    backend.delete.return_value = []
    backend.health_check.return_value = True
    return backend


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(fake_clock):
    return RateLimiter(store=InMemoryRateLimitStore(), clock=fake_clock)


@pytest.fixture
def app(mock_backend, rate_limiter):
    from jobboard.main import create_app
    return create_app(backend=mock_backend, rate_limiter=rate_limiter)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
