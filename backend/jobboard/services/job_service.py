"""
JobBoard Backend - Job Service (Domain Handlers)
=================================================

What:  List, create, update and delete job listings.
How:   Each operation runs after the request pipeline has rate-limited,
       authenticated and validated the call, and issues exactly ONE call to
       the data service.
Who:   Called by routes/jobs.py (and the admin overview).

Ownership Rules:
    create  → only principals with the Employer role
    update  → store call constrained to id AND employer_id = caller
    delete  → constrained to the caller's rows, unless the caller is admin

    A constrained update/delete that matches nothing (someone else's job,
    or a job that no longer exists) is reported as a generic failure; the
    two cases are not distinguished.

Error Handling:
    ExternalServiceError from the backend is logged with its kind and
    re-raised as ServerError with an operation-level message. The raw
    provider text never reaches the client.
"""

import logging
from typing import Any, Dict, Mapping

from jobboard.exceptions import AuthorizationError, ExternalServiceError, ServerError
from jobboard.schemas.auth import Principal
from jobboard.schemas.job import Job, JobListResponse, JobResponse, SuccessResponse
from jobboard.services.backend_base import BackendService

logger = logging.getLogger(__name__)

JOBS_TABLE = "jobs"
# Listings embed the owner's public profile through the jobs → users foreign key
JOB_LISTING_COLUMNS = "*,employer:users!jobs_employer_id_fkey(name,email)"
NEWEST_FIRST = "created_at.desc"


def ensure_employer(principal: Principal) -> None:
    """Permission check for job creation (raises 403 for everyone else).

    `principal.role` must come from the users table (see AuthGate.load_role).
    """
    if not principal.is_employer:
        raise AuthorizationError(
            "Only employers can post jobs",
            context={"user_id": principal.id, "role": principal.role},
        )


def _failure(message: str, exc: ExternalServiceError, **context: Any) -> ServerError:
    logger.error(
        "%s: %s | Context: %s",
        message,
        exc.kind.value,
        {**exc.context, **context},
    )
    return ServerError(message=message, context={"kind": exc.kind.value, **context})


class JobService:
    """Stateless domain handlers for job listings."""

    async def list_jobs(self, backend: BackendService) -> JobListResponse:
        try:
            rows = await backend.select(
                JOBS_TABLE, columns=JOB_LISTING_COLUMNS, order=NEWEST_FIRST
            )
        except ExternalServiceError as exc:
            raise _failure("Failed to fetch jobs", exc)
        return JobListResponse(jobs=[Job.model_validate(row) for row in rows])

    async def list_employer_jobs(
        self, backend: BackendService, principal: Principal
    ) -> JobListResponse:
        """The caller's own listings, newest first."""
        try:
            rows = await backend.select(
                JOBS_TABLE,
                filters={"employer_id": principal.id},
                order=NEWEST_FIRST,
                access_token=principal.access_token,
            )
        except ExternalServiceError as exc:
            raise _failure("Failed to fetch jobs", exc, user_id=principal.id)
        return JobListResponse(jobs=[Job.model_validate(row) for row in rows])

    async def create_job(
        self,
        backend: BackendService,
        principal: Principal,
        payload: Mapping[str, Any],
    ) -> JobResponse:
        ensure_employer(principal)

        row = {
            "title": payload["title"],
            "date": payload["date"],
            "pay": payload["pay"],
            "employer_id": principal.id,
        }
        try:
            created = await backend.insert(
                JOBS_TABLE, row, access_token=principal.access_token
            )
        except ExternalServiceError as exc:
            raise _failure("Failed to create job", exc, user_id=principal.id)

        logger.info("Job %s created by employer %s", created.get("id"), principal.id)
        return JobResponse(job=Job.model_validate(created))

    async def update_job(
        self,
        backend: BackendService,
        principal: Principal,
        payload: Mapping[str, Any],
    ) -> JobResponse:
        job_id = payload["id"]
        values = {
            "title": payload["title"],
            "date": payload["date"],
            "pay": payload["pay"],
        }
        try:
            rows = await backend.update(
                JOBS_TABLE,
                values,
                filters={"id": job_id, "employer_id": principal.id},
                access_token=principal.access_token,
            )
        except ExternalServiceError as exc:
            raise _failure("Failed to update job", exc, job_id=job_id)

        if not rows:
            logger.warning("Update of job %s by %s matched no rows", job_id, principal.id)
            raise ServerError("Failed to update job", context={"job_id": job_id})

        return JobResponse(job=Job.model_validate(rows[0]))

    async def delete_job(
        self,
        backend: BackendService,
        principal: Principal,
        job_id: str,
    ) -> SuccessResponse:
        filters: Dict[str, str] = {"id": job_id}
        if not principal.is_admin:
            filters["employer_id"] = principal.id

        try:
            rows = await backend.delete(
                JOBS_TABLE,
                filters=filters,
                access_token=principal.access_token,
            )
        except ExternalServiceError as exc:
            raise _failure("Failed to delete job", exc, job_id=job_id)

        if not rows:
            logger.warning("Delete of job %s by %s matched no rows", job_id, principal.id)
            raise ServerError("Failed to delete job", context={"job_id": job_id})

        logger.info("Job %s deleted by %s", job_id, "admin" if principal.is_admin else principal.id)
        return SuccessResponse()


# ── Singleton Instance ────────────────────────────────────────────────────
job_service = JobService()
