"""
JobBoard Backend - Access Log Middleware
=========================================

What:  One access log line per request: method, path, status, duration and
       the client address used for rate limiting.
Who:   Applied to every request; runs inside RequestIDMiddleware so the line
       carries the request's correlation ID.

Never logged: request bodies (passwords, personal data), query strings
(ids, emails) and the Authorization header.

Level by outcome:
    5xx → ERROR, 429 → WARNING, other 4xx → INFO, 2xx/3xx → INFO
    401/403/400 are routine for a public job board; 429 is worth watching.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from jobboard.middleware.rate_limit import client_identifier

logger = logging.getLogger("jobboard.access")

QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status == 429:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms from %s",
            request.method,
            path,
            status,
            duration_ms,
            client_identifier(request),
        )
        return response
