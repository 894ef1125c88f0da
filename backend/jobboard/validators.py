"""
JobBoard Backend - Validator Registry
======================================

What:  Reusable field predicates, payload schemas and password helpers.
How:   A validator is any callable `(value) -> Optional[str]` returning an
       error message, or None when the value is acceptable. A schema is an
       ordered mapping from field name to a list of validators; the first
       failing validator of a field provides that field's message, and every
       field is evaluated so the client sees all problems at once.
Who:   Used by the request pipeline (payload validation) and the account
       service (password report).

All functions here are pure: no I/O, no state.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

Validator = Callable[[Any], Optional[str]]
ValidationSchema = Mapping[str, Sequence[Validator]]


EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
UUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)

MAX_EMAIL_LENGTH = 254
MAX_SANITIZED_LENGTH = 1000
MIN_PASSWORD_LENGTH = 8

SPECIAL_CHARACTERS = frozenset("!@#$%^&*()_+-=[]{};':\"\\|,.<>?")
# The complexity bonus of the strength meter only counts this narrower set
BONUS_SPECIAL_CHARACTERS = frozenset("!@#$%^&*")

SIGNUP_ROLES = ("Student", "Employer")

# Credentials are passed through verbatim
UNSANITIZED_FIELDS = frozenset({"password"})


def _is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict, tuple, set)):
        return len(value) == 0
    return False


def _has_lower(value: str) -> bool:
    return any("a" <= ch <= "z" for ch in value)


def _has_upper(value: str) -> bool:
    return any("A" <= ch <= "Z" for ch in value)


def _has_digit(value: str) -> bool:
    return any("0" <= ch <= "9" for ch in value)


def _has_special(value: str, charset: frozenset = SPECIAL_CHARACTERS) -> bool:
    return any(ch in charset for ch in value)


# ══════════════════════════════════════════════════════════════════════════
# Field Validators
# ══════════════════════════════════════════════════════════════════════════


def required(value: Any) -> Optional[str]:
    if _is_blank(value):
        return "This field is required"
    return None


def email(value: Any) -> Optional[str]:
    if not value:
        return "Email is required"
    if not isinstance(value, str) or not EMAIL_PATTERN.fullmatch(value):
        return "Invalid email format"
    if len(value) > MAX_EMAIL_LENGTH:
        return "Email is too long"
    return None


def string(min_length: int = 1, max_length: int = 1000) -> Validator:
    """
    Build a length-bounded string validator.

    Example:
        title_rule = string(3, 200)
        title_rule("Hi")  # -> "Must be at least 3 characters"
    """

    def validate(value: Any) -> Optional[str]:
        if not value:
            return "This field is required"
        if not isinstance(value, str):
            return "Must be a string"
        if len(value) < min_length:
            return f"Must be at least {min_length} characters"
        if len(value) > max_length:
            return f"Must be no more than {max_length} characters"
        return None

    return validate


def password(value: Any) -> Optional[str]:
    """
    Pass/fail password rule. Reports only the FIRST unmet requirement.

    Use `validate_password` to list every unmet requirement.
    """
    if not value:
        return "Password is required"
    if not isinstance(value, str):
        return "Must be a string"
    if len(value) < MIN_PASSWORD_LENGTH:
        return "Password must be at least 8 characters"
    if not _has_upper(value):
        return "Password must contain an uppercase letter"
    if not _has_lower(value):
        return "Password must contain a lowercase letter"
    if not _has_digit(value):
        return "Password must contain a number"
    if not _has_special(value):
        return "Password must contain a special character"
    return None


def role(value: Any) -> Optional[str]:
    # Admin is never a self-selectable role
    if not value:
        return "Role is required"
    if value not in SIGNUP_ROLES:
        return "Role must be either Student or Employer"
    return None


def iso_date(value: Any) -> Optional[str]:
    """Requires a real calendar date written as YYYY-MM-DD."""
    if _is_blank(value):
        return "This field is required"
    if not isinstance(value, str) or not ISO_DATE_PATTERN.fullmatch(value):
        return "Must be a date in YYYY-MM-DD format"
    try:
        date.fromisoformat(value)
    except ValueError:
        return "Must be a valid calendar date"
    return None


def uuid_shape(value: Any) -> Optional[str]:
    if _is_blank(value):
        return "This field is required"
    if not isinstance(value, str) or not UUID_PATTERN.fullmatch(value):
        return "Must be a valid UUID"
    return None


# ══════════════════════════════════════════════════════════════════════════
# Schema Evaluation
# ══════════════════════════════════════════════════════════════════════════


def validate_payload(payload: Mapping[str, Any], schema: ValidationSchema) -> Dict[str, str]:
    """
    Run every field's validators over the payload.

    Returns:
        Mapping field → message for each failing field, in schema order.
        An empty dict means the payload is valid.
    """
    errors: Dict[str, str] = {}
    for field_name, validators in schema.items():
        value = payload.get(field_name)
        for validator in validators:
            message = validator(value)
            if message:
                errors[field_name] = message
                break
    return errors


def sanitize_input(value: str) -> str:
    """Trim, strip angle brackets and cap the length of free-text input."""
    return value.strip().replace("<", "").replace(">", "")[:MAX_SANITIZED_LENGTH]


def sanitize_payload(payload: Mapping[str, Any], schema: ValidationSchema) -> Dict[str, Any]:
    """Keep only schema fields, sanitizing string values (credentials excepted)."""
    cleaned: Dict[str, Any] = {}
    for field_name in schema:
        value = payload.get(field_name)
        if isinstance(value, str) and field_name not in UNSANITIZED_FIELDS:
            value = sanitize_input(value)
        cleaned[field_name] = value
    return cleaned


# ── Operation Schemas ─────────────────────────────────────────────────────

JOB_CREATE_SCHEMA: ValidationSchema = {
    "title": [string(3, 200)],
    "date": [required, iso_date],
    "pay": [string(1, 100)],
}

JOB_UPDATE_SCHEMA: ValidationSchema = {
    "id": [required, uuid_shape],
    "title": [string(3, 200)],
    "date": [required, iso_date],
    "pay": [string(1, 100)],
}

JOB_DELETE_SCHEMA: ValidationSchema = {
    "id": [required],
}

USER_DELETE_SCHEMA: ValidationSchema = {
    "id": [required, uuid_shape],
}

SIGNUP_SCHEMA: ValidationSchema = {
    "name": [string(1, 100)],
    "email": [email],
    "password": [password],
    "role": [role],
}

LOGIN_SCHEMA: ValidationSchema = {
    "email": [required, email],
    "password": [required],
}

PASSWORD_RESET_SCHEMA: ValidationSchema = {
    "email": [email],
}

PASSWORD_STRENGTH_SCHEMA: ValidationSchema = {
    "password": [required, string(1, MAX_SANITIZED_LENGTH)],
}


# ══════════════════════════════════════════════════════════════════════════
# Password Helpers
# ══════════════════════════════════════════════════════════════════════════


@dataclass
class PasswordCheck:
    """Result of `validate_password`: every unmet requirement, in rule order."""

    valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PasswordStrength:
    level: str
    label: str
    percentage: int
    score: int


STRENGTH_LEVELS = (
    ("very-weak", "Very Weak", 20),
    ("weak", "Weak", 40),
    ("fair", "Fair", 60),
    ("good", "Good", 80),
    ("strong", "Strong", 100),
)


def validate_password(value: str) -> PasswordCheck:
    errors: List[str] = []
    if len(value) < MIN_PASSWORD_LENGTH:
        errors.append("Password must be at least 8 characters long")
    if not _has_upper(value):
        errors.append("Password must contain at least one uppercase letter")
    if not _has_lower(value):
        errors.append("Password must contain at least one lowercase letter")
    if not _has_digit(value):
        errors.append("Password must contain at least one number")
    if not _has_special(value):
        errors.append("Password must contain at least one special character")
    return PasswordCheck(valid=not errors, errors=errors)


def validate_email(value: str) -> bool:
    """Boolean form of the `email` rule, for callers outside schema validation."""
    return isinstance(value, str) and email(value) is None


def password_strength(value: str) -> PasswordStrength:
    """
    Advisory strength meter. Never used to accept or reject a password.

    Scoring (one point each):
        length >= 8, length >= 12, length >= 16,
        lowercase, uppercase, digit, special character,
        complexity bonus (lower + upper + digit + one of !@#$%^&*)

    The score maps to five levels, two points per level, capped at "strong".
    """
    score = 0

    if len(value) >= 8:
        score += 1
    if len(value) >= 12:
        score += 1

    has_lower = _has_lower(value)
    has_upper = _has_upper(value)
    has_digit = _has_digit(value)
    score += sum((has_lower, has_upper, has_digit, _has_special(value)))

    if len(value) >= 16:
        score += 1
    if has_lower and has_upper and has_digit and _has_special(value, BONUS_SPECIAL_CHARACTERS):
        score += 1

    level, label, percentage = STRENGTH_LEVELS[min(score // 2, len(STRENGTH_LEVELS) - 1)]
    return PasswordStrength(level=level, label=label, percentage=percentage, score=score)
