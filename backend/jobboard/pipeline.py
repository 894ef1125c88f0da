"""
JobBoard Backend - Request Pipeline
====================================

What:  Composes the gating stages every externally reachable operation goes
       through before its domain handler runs.
How:   `pipeline(...)` returns one FastAPI dependency. When a route depends
       on it, the stages run strictly in this order and the first failure
       raises immediately (later stages never run):

           ┌────────────┐   ┌───────────┐   ┌────────────┐   ┌──────────┐
           │ Rate Limit │──▶│ Auth Gate │──▶│ Validation │──▶│ Handler  │
           │   (429)    │   │ (401/403) │   │   (400)    │   │ (route)  │
           └────────────┘   └───────────┘   └────────────┘   └──────────┘

       On success the route receives a RequestContext holding the resolved
       principal (if any) and the sanitized payload (if a schema was given).
Who:   Used by routes/jobs.py, routes/admin.py and routes/auth.py.

The limiter and backend are read from `request.app.state`, so each app
instance (and each test app) has its own.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from starlette.requests import Request

from jobboard.config import settings
from jobboard.exceptions import RateLimitExceededError, ValidationError
from jobboard.middleware.auth import AuthGate
from jobboard.middleware.rate_limit import RatePolicy, RateLimiter, client_identifier
from jobboard.schemas.auth import Principal
from jobboard.validators import ValidationSchema, sanitize_payload, validate_payload

logger = logging.getLogger(__name__)


class AuthTier(str, Enum):
    NONE = "none"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


class PayloadSource(str, Enum):
    BODY = "body"    # JSON object in the request body
    QUERY = "query"  # URL query parameters


@dataclass
class RequestContext:
    principal: Optional[Principal] = None
    payload: Dict[str, Any] = field(default_factory=dict)


# ── Rate Policies ─────────────────────────────────────────────────────────

JOB_LIST_POLICY = RatePolicy(
    "job_list",
    settings.rate_limit_job_list_requests,
    settings.rate_limit_job_list_window_ms,
)
JOB_CREATE_POLICY = RatePolicy(
    "job_create",
    settings.rate_limit_job_create_requests,
    settings.rate_limit_job_create_window_ms,
)
ADMIN_READ_POLICY = RatePolicy(
    "admin_read",
    settings.rate_limit_admin_read_requests,
    settings.rate_limit_admin_read_window_ms,
)
ADMIN_DELETE_POLICY = RatePolicy(
    "admin_delete",
    settings.rate_limit_admin_delete_requests,
    settings.rate_limit_admin_delete_window_ms,
)
ACCOUNT_POLICY = RatePolicy(
    "account",
    settings.rate_limit_account_requests,
    settings.rate_limit_account_window_ms,
)


# ══════════════════════════════════════════════════════════════════════════
# Stages
# ══════════════════════════════════════════════════════════════════════════


def enforce_rate_limit(request: Request, policy: RatePolicy) -> None:
    limiter: RateLimiter = request.app.state.rate_limiter
    decision = limiter.check_policy(policy, client_identifier(request))
    if not decision.allowed:
        raise RateLimitExceededError(
            retry_after=decision.retry_after,
            context={"policy": policy.name},
        )


async def resolve_principal(request: Request, tier: AuthTier) -> Optional[Principal]:
    if tier is AuthTier.NONE:
        return None
    gate = AuthGate(request.app.state.backend)
    if tier is AuthTier.ADMIN:
        return await gate.require_admin(request)
    return await gate.require_auth(request)


async def read_payload(request: Request, source: PayloadSource) -> Dict[str, Any]:
    if source is PayloadSource.QUERY:
        return dict(request.query_params)

    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON in request body")
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON in request body")
    return body


def check_payload(payload: Dict[str, Any], schema: ValidationSchema) -> Dict[str, Any]:
    """Sanitize the schema fields, then validate exactly what will be stored."""
    cleaned = sanitize_payload(payload, schema)
    errors = validate_payload(cleaned, schema)
    if errors:
        raise ValidationError("Validation failed", fields=errors)
    return cleaned


# ══════════════════════════════════════════════════════════════════════════
# Composition
# ══════════════════════════════════════════════════════════════════════════


def pipeline(
    *,
    policy: Optional[RatePolicy] = None,
    tier: AuthTier = AuthTier.NONE,
    authorize: Optional[Callable[[Principal], None]] = None,
    schema: Optional[ValidationSchema] = None,
    source: PayloadSource = PayloadSource.BODY,
) -> Callable[[Request], Awaitable[RequestContext]]:
    """
    Build the gating dependency for one operation.

    `authorize` is an operation-specific permission check owned by the
    domain handler (e.g. "only employers post jobs"). It runs right after
    the auth stage, so a caller lacking the permission gets 403 whatever
    the payload looks like. The principal it receives carries the role
    from the caller's users row.

    Example:
        create_job_gate = pipeline(
            policy=JOB_CREATE_POLICY,
            tier=AuthTier.AUTHENTICATED,
            authorize=ensure_employer,
            schema=JOB_CREATE_SCHEMA,
        )

        @router.post("/jobs")
        async def create_job(ctx: RequestContext = Depends(create_job_gate)): ...
    """

    async def run(request: Request) -> RequestContext:
        if policy is not None:
            enforce_rate_limit(request, policy)

        principal = await resolve_principal(request, tier)
        if authorize is not None and principal is not None:
            principal = await AuthGate(request.app.state.backend).load_role(principal)
            authorize(principal)

        payload: Dict[str, Any] = {}
        if schema is not None:
            raw = await read_payload(request, source)
            payload = check_payload(raw, schema)

        return RequestContext(principal=principal, payload=payload)

    return run
