"""
JobBoard Backend - Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the hosted auth/data service and reports the aggregate status.
Who:   Called by container health checks and uptime monitors.

Status levels:
    healthy:   hosted service reachable
    degraded:  hosted service unreachable (HTTP 200, flag for monitoring)

The process itself holds no resources that can fail, so the endpoint never
returns 503; a degraded backend shows up in the body instead.
"""

import logging
import time

from fastapi import APIRouter, Request

from jobboard import __version__
from jobboard.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    backend_status = "available"
    overall = "healthy"

    if not await request.app.state.backend.health_check():
        backend_status = "unavailable"
        overall = "degraded"
        logger.warning("Health check: hosted backend unreachable")

    return HealthResponse(
        status=overall,
        version=__version__,
        backend=backend_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
