"""
JobBoard Backend - User Service (Admin Domain Handlers)
========================================================

What:  Admin-only reads and deletion over the users table.
Who:   Called by routes/admin.py after the pipeline's admin gate.

Deleting a user removes the row from the users table only. Whether the
user's job listings go with it is decided by the data service's foreign key
rules, not here.
"""

import asyncio
import logging

from jobboard.exceptions import ExternalServiceError, ServerError
from jobboard.schemas.auth import Principal
from jobboard.schemas.job import (
    AdminOverviewResponse,
    SuccessResponse,
    User,
    UserListResponse,
)
from jobboard.services.backend_base import BackendService
from jobboard.services.job_service import job_service

logger = logging.getLogger(__name__)

USERS_TABLE = "users"
NEWEST_FIRST = "created_at.desc"


class UserService:
    """Stateless admin handlers for user accounts."""

    async def list_users(self, backend: BackendService, principal: Principal) -> UserListResponse:
        try:
            rows = await backend.select(
                USERS_TABLE, order=NEWEST_FIRST, access_token=principal.access_token
            )
        except ExternalServiceError as exc:
            logger.error("Failed to fetch users: %s | Context: %s", exc.kind.value, exc.context)
            raise ServerError("Failed to fetch users", context={"kind": exc.kind.value})
        return UserListResponse(users=[User.model_validate(row) for row in rows])

    async def delete_user(
        self, backend: BackendService, principal: Principal, user_id: str
    ) -> SuccessResponse:
        try:
            rows = await backend.delete(
                USERS_TABLE,
                filters={"id": user_id},
                access_token=principal.access_token,
            )
        except ExternalServiceError as exc:
            logger.error("Failed to delete user %s: %s", user_id, exc.kind.value)
            raise ServerError("Failed to delete user", context={"user_id": user_id})

        if not rows:
            logger.warning("Delete of user %s matched no rows", user_id)
            raise ServerError("Failed to delete user", context={"user_id": user_id})

        logger.info("User %s deleted by admin", user_id)
        return SuccessResponse()

    async def overview(self, backend: BackendService, principal: Principal) -> AdminOverviewResponse:
        """
        Users and job listings for the moderation dashboard.

        The two reads are independent and run concurrently; if either fails
        the whole overview fails.
        """
        users, jobs = await asyncio.gather(
            self.list_users(backend, principal),
            job_service.list_jobs(backend),
        )
        return AdminOverviewResponse(users=users.users, jobs=jobs.jobs)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
