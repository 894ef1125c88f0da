"""
JobBoard Backend - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       with its own rate limiter and backend client on app.state.
Who:   Called by uvicorn to start the server (uvicorn jobboard.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Access Log → GZip → CORS      │
    │                                                          │
    │  Routes (each gated by a pipeline dependency):           │
    │   /api/jobs   /api/jobs/mine   /api/admin/*              │
    │   /api/auth/*   /health                                  │
    │                                                          │
    │  app.state:                                              │
    │   rate_limiter → RateLimiter (in-memory store)           │
    │   backend      → SupabaseService (httpx)                 │
    │                                                          │
    │  Exception Handlers:                                     │
    │   JobBoardError → its status, {"error", "fields"?}       │
    │   Exception     → 500 generic message                    │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   configure logging, validate configuration
    Shutdown:  close the backend's HTTP connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from jobboard import __version__
from jobboard.config import settings
from jobboard.exceptions import (
    ExternalServiceError,
    JobBoardError,
    RateLimitExceededError,
    ValidationError,
)
from jobboard.middleware.logging import RequestLoggingMiddleware
from jobboard.middleware.rate_limit import RateLimiter
from jobboard.middleware.request_id import RequestIDMiddleware, RequestIdLogFilter
from jobboard.routes import admin, auth, health, jobs
from jobboard.services.backend_base import BackendService
from jobboard.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole application.

    Format: 2024-01-15T12:00:00 [INFO] jobboard.access [a1b2c3d4]: GET /api/jobs 200 ...

    Every record carries the request ID of the request it was logged under
    ("-" outside a request).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # httpx logs every request URL at INFO, including query strings
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("JobBoard Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health reports the backend as unavailable
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("JobBoard Backend shutting down...")
    await app.state.backend.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(exc: JobBoardError) -> dict:
    body = {"error": exc.message}
    if isinstance(exc, ValidationError) and exc.fields:
        body["fields"] = exc.fields
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to status codes and `{"error": ...}` bodies.

    Handler hierarchy:
        RateLimitExceededError → 429 + Retry-After header
        ExternalServiceError   → status of its kind (friendly message)
        JobBoardError (base)   → the subclass's status_code
        Exception (fallback)   → 500 generic message

    `context` is logged, never returned.
    """

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(ExternalServiceError)
    async def handle_external_service_error(request: Request, exc: ExternalServiceError):
        log_level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(log_level, "Backend error %s on %s | Context: %s",
                   exc.kind.value, request.url.path, exc.context)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(JobBoardError)
    async def handle_jobboard_error(request: Request, exc: JobBoardError):
        if exc.status_code >= 500:
            logger.error("%s on %s | Context: %s", exc.message, request.url.path, exc.context)
        elif exc.context:
            logger.info("%s on %s | Context: %s", exc.message, request.url.path, exc.context)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error on %s: %s", request.url.path, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    backend: Optional[BackendService] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        backend:       Hosted auth/data client; defaults to SupabaseService
                       built from settings.
        rate_limiter:  Defaults to a RateLimiter with a fresh in-memory store.
    """
    app = FastAPI(
        title="JobBoard API",
        description=(
            "Job board backend: employers post listings, students browse them, "
            "an administrator moderates users. Auth and storage are delegated to "
            "a hosted Supabase project."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.backend = backend or SupabaseService()
    app.state.rate_limiter = rate_limiter or RateLimiter()

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(jobs.router)
    app.include_router(admin.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    return app


app = create_app()
