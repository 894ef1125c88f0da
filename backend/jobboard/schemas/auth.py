"""
JobBoard Backend - Identity and Account Schemas
================================================

What:  The resolved caller identity (Principal) and account endpoint payloads.
Who:   Principal is produced by the auth gate for every request that needs
       one; the response models are returned by routes/auth.py.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    STUDENT = "Student"
    EMPLOYER = "Employer"
    ADMIN = "Admin"


class Principal(BaseModel):
    """
    The caller, as verified by the auth provider for ONE request.

    Never cached. `access_token` is the bearer token the principal was
    resolved from; it is forwarded to the data service so row-level
    policies see the same caller, and it is excluded from serialization.

    `role` is Admin for the configured admin email. Student and Employer
    are filled in from the users table only when an operation checks them;
    until then the role is None.
    """

    id: str
    email: str
    role: Optional[Role] = None
    access_token: str = Field(default="", repr=False, exclude=True)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_employer(self) -> bool:
        return self.role is Role.EMPLOYER


class AccountUser(BaseModel):
    """Public view of a freshly registered account."""

    id: str
    name: str
    email: str
    role: str


class SignUpResponse(BaseModel):
    user: AccountUser
    message: str = "Account created successfully! Please check your email to verify your account."


class SessionResponse(BaseModel):
    """Tokens returned to the client after a successful sign-in."""

    session: Dict[str, Any]
    is_admin: bool = False


class StrengthReport(BaseModel):
    level: str
    label: str
    percentage: int
    score: int


class PasswordStrengthResponse(BaseModel):
    valid: bool = Field(description="Whether the password meets every requirement")
    errors: List[str] = Field(description="Unmet requirements, in rule order")
    strength: StrengthReport
