"""
JobBoard Backend - Job Route Handlers
======================================

What:  GET/POST/PUT/DELETE /api/jobs and GET /api/jobs/mine.
How:   Each route depends on one pipeline gate, then hands the resolved
       principal and sanitized payload to JobService.
Who:   Called by the job board frontend (listing page, employer dashboard).

Gates:
    GET    /api/jobs       rate limited, public
    GET    /api/jobs/mine  rate limited, authenticated
    POST   /api/jobs       rate limited, authenticated, Employer only, validated
    PUT    /api/jobs       authenticated, validated (owner enforced by the store filter)
    DELETE /api/jobs?id=   authenticated, validated (owner or admin)
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from jobboard.pipeline import (
    JOB_CREATE_POLICY,
    JOB_LIST_POLICY,
    AuthTier,
    PayloadSource,
    RequestContext,
    pipeline,
)
from jobboard.schemas.common import ErrorResponse
from jobboard.schemas.job import JobListResponse, JobResponse, SuccessResponse
from jobboard.services.job_service import ensure_employer, job_service
from jobboard.validators import JOB_CREATE_SCHEMA, JOB_DELETE_SCHEMA, JOB_UPDATE_SCHEMA

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Jobs"])

list_jobs_gate = pipeline(policy=JOB_LIST_POLICY)
my_jobs_gate = pipeline(policy=JOB_LIST_POLICY, tier=AuthTier.AUTHENTICATED)
create_job_gate = pipeline(
    policy=JOB_CREATE_POLICY,
    tier=AuthTier.AUTHENTICATED,
    authorize=ensure_employer,
    schema=JOB_CREATE_SCHEMA,
)
update_job_gate = pipeline(tier=AuthTier.AUTHENTICATED, schema=JOB_UPDATE_SCHEMA)
delete_job_gate = pipeline(
    tier=AuthTier.AUTHENTICATED,
    schema=JOB_DELETE_SCHEMA,
    source=PayloadSource.QUERY,
)

_ERRORS = {
    400: {"description": "Validation failed", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not permitted", "model": ErrorResponse},
    429: {"description": "Too many requests", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "/jobs",
    response_model=JobListResponse,
    responses={429: _ERRORS[429], 500: _ERRORS[500]},
    summary="List all job listings",
    description="Every listing, newest first, with the employer's name and email embedded.",
)
async def list_jobs(
    request: Request, ctx: RequestContext = Depends(list_jobs_gate)
) -> JobListResponse:
    return await job_service.list_jobs(request.app.state.backend)


@router.get(
    "/jobs/mine",
    response_model=JobListResponse,
    responses={401: _ERRORS[401], 429: _ERRORS[429], 500: _ERRORS[500]},
    summary="List the caller's own job listings",
)
async def list_my_jobs(
    request: Request, ctx: RequestContext = Depends(my_jobs_gate)
) -> JobListResponse:
    return await job_service.list_employer_jobs(request.app.state.backend, ctx.principal)


@router.post(
    "/jobs",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Post a new job listing",
    description="Employers only. The listing is owned by the caller.",
)
async def create_job(
    request: Request, ctx: RequestContext = Depends(create_job_gate)
) -> JobResponse:
    return await job_service.create_job(request.app.state.backend, ctx.principal, ctx.payload)


@router.put(
    "/jobs",
    response_model=JobResponse,
    responses={k: v for k, v in _ERRORS.items() if k != 429},
    summary="Update one of the caller's job listings",
    description=(
        "The update only touches a listing owned by the caller. Updating someone "
        "else's listing, or one that no longer exists, fails with a generic error."
    ),
)
async def update_job(
    request: Request, ctx: RequestContext = Depends(update_job_gate)
) -> JobResponse:
    return await job_service.update_job(request.app.state.backend, ctx.principal, ctx.payload)


@router.delete(
    "/jobs",
    response_model=SuccessResponse,
    responses={k: v for k, v in _ERRORS.items() if k != 429},
    summary="Delete a job listing",
    description="Owners may delete their own listings; the admin may delete any listing.",
)
async def delete_job(
    request: Request, ctx: RequestContext = Depends(delete_job_gate)
) -> SuccessResponse:
    return await job_service.delete_job(
        request.app.state.backend, ctx.principal, ctx.payload["id"]
    )
