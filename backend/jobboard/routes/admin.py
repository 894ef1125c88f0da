"""
JobBoard Backend - Admin Route Handlers
========================================

What:  User moderation endpoints for the administrator.
Who:   Called by the admin dashboard only. Every route requires the admin tier.
"""

import logging

from fastapi import APIRouter, Depends, Request

from jobboard.pipeline import (
    ADMIN_DELETE_POLICY,
    ADMIN_READ_POLICY,
    AuthTier,
    PayloadSource,
    RequestContext,
    pipeline,
)
from jobboard.schemas.common import ErrorResponse
from jobboard.schemas.job import AdminOverviewResponse, SuccessResponse, UserListResponse
from jobboard.services.user_service import user_service
from jobboard.validators import USER_DELETE_SCHEMA

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

admin_read_gate = pipeline(policy=ADMIN_READ_POLICY, tier=AuthTier.ADMIN)
admin_delete_gate = pipeline(
    policy=ADMIN_DELETE_POLICY,
    tier=AuthTier.ADMIN,
    schema=USER_DELETE_SCHEMA,
    source=PayloadSource.QUERY,
)

_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Admin access required", "model": ErrorResponse},
    429: {"description": "Too many requests", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "/users",
    response_model=UserListResponse,
    responses=_ERRORS,
    summary="List every registered user",
)
async def list_users(
    request: Request, ctx: RequestContext = Depends(admin_read_gate)
) -> UserListResponse:
    return await user_service.list_users(request.app.state.backend, ctx.principal)


@router.get(
    "/overview",
    response_model=AdminOverviewResponse,
    responses=_ERRORS,
    summary="Users and job listings for the moderation dashboard",
)
async def overview(
    request: Request, ctx: RequestContext = Depends(admin_read_gate)
) -> AdminOverviewResponse:
    return await user_service.overview(request.app.state.backend, ctx.principal)


@router.delete(
    "/users",
    response_model=SuccessResponse,
    responses={400: {"description": "Malformed id", "model": ErrorResponse}, **_ERRORS},
    summary="Delete a user account",
    description="`id` must be a well-formed UUID; malformed ids never reach the store.",
)
async def delete_user(
    request: Request, ctx: RequestContext = Depends(admin_delete_gate)
) -> SuccessResponse:
    return await user_service.delete_user(
        request.app.state.backend, ctx.principal, ctx.payload["id"]
    )
