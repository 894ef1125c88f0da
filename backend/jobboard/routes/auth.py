"""
JobBoard Backend - Account Route Handlers
==========================================

What:  Sign-up, sign-in, admin sign-in, the caller's profile, password reset
       and the password strength report.
How:   Sign-up, sign-in and reset share the strict account rate policy
       (5 requests per minute per client) and need no bearer token.
       GET /me is the only route here that requires one.
Who:   Called by the frontend sign-up, login and reset forms and the dashboard.

Provider failures surface with friendly messages, e.g. a wrong password
returns 401 "Invalid email or password. Please check your credentials and
try again." and a taken email returns 409.
"""

from fastapi import APIRouter, Depends, Request, status

from jobboard.pipeline import ACCOUNT_POLICY, AuthTier, RequestContext, pipeline
from jobboard.schemas.common import ErrorResponse
from jobboard.schemas.auth import PasswordStrengthResponse, SessionResponse, SignUpResponse
from jobboard.schemas.job import ProfileResponse, SuccessResponse
from jobboard.services.account_service import account_service
from jobboard.validators import (
    LOGIN_SCHEMA,
    PASSWORD_RESET_SCHEMA,
    PASSWORD_STRENGTH_SCHEMA,
    SIGNUP_SCHEMA,
)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

signup_gate = pipeline(policy=ACCOUNT_POLICY, schema=SIGNUP_SCHEMA)
login_gate = pipeline(policy=ACCOUNT_POLICY, schema=LOGIN_SCHEMA)
reset_gate = pipeline(policy=ACCOUNT_POLICY, schema=PASSWORD_RESET_SCHEMA)
strength_gate = pipeline(schema=PASSWORD_STRENGTH_SCHEMA)
profile_gate = pipeline(tier=AuthTier.AUTHENTICATED)

_ERRORS = {
    400: {"description": "Validation failed", "model": ErrorResponse},
    429: {"description": "Too many requests", "model": ErrorResponse},
}


@router.post(
    "/signup",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered", "model": ErrorResponse}, **_ERRORS},
    summary="Register a Student or Employer account",
)
async def sign_up(
    request: Request, ctx: RequestContext = Depends(signup_gate)
) -> SignUpResponse:
    return await account_service.sign_up(request.app.state.backend, ctx.payload)


@router.post(
    "/login",
    response_model=SessionResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}, **_ERRORS},
    summary="Sign in with email and password",
)
async def login(
    request: Request, ctx: RequestContext = Depends(login_gate)
) -> SessionResponse:
    return await account_service.sign_in(
        request.app.state.backend, ctx.payload["email"], ctx.payload["password"]
    )


@router.post(
    "/admin/login",
    response_model=SessionResponse,
    responses={401: {"description": "Invalid admin credentials", "model": ErrorResponse}, **_ERRORS},
    summary="Sign in as the administrator",
    description=(
        "Credentials must match the configured admin account. The admin account "
        "is registered with the auth provider on first use."
    ),
)
async def admin_login(
    request: Request, ctx: RequestContext = Depends(login_gate)
) -> SessionResponse:
    return await account_service.admin_sign_in(
        request.app.state.backend, ctx.payload["email"], ctx.payload["password"]
    )


@router.get(
    "/me",
    response_model=ProfileResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Get the signed-in user's profile",
)
async def me(request: Request, ctx: RequestContext = Depends(profile_gate)) -> ProfileResponse:
    return await account_service.current_profile(request.app.state.backend, ctx.principal)


@router.post(
    "/password-reset",
    response_model=SuccessResponse,
    responses=_ERRORS,
    summary="Email a password reset link",
)
async def password_reset(
    request: Request, ctx: RequestContext = Depends(reset_gate)
) -> SuccessResponse:
    await account_service.request_password_reset(request.app.state.backend, ctx.payload["email"])
    return SuccessResponse()


@router.post(
    "/password-strength",
    response_model=PasswordStrengthResponse,
    responses={400: _ERRORS[400]},
    summary="Check a password against the account rules",
    description="Advisory only; nothing is stored or sent to the auth provider.",
)
async def password_report(ctx: RequestContext = Depends(strength_gate)) -> PasswordStrengthResponse:
    return account_service.password_report(ctx.payload["password"])
