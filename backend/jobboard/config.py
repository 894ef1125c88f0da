"""
JobBoard Backend - Application Configuration
=============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, SecretStr, field_validator
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Production deployments MUST override the hosted service credentials
    and the admin account (SUPABASE_URL, SUPABASE_ANON_KEY, ADMIN_EMAIL,
    ADMIN_PASSWORD).

    Attributes are grouped by concern for readability.
    """

    # ── Hosted database + auth service ────────────────────────────────────
    # Base URL of the project, e.g. https://<project>.supabase.co
    # Auth API lives under /auth/v1, table API under /rest/v1
    supabase_url: str = Field(
        default="",
        description="Base URL of the hosted data/auth service"
    )

    # Public (anon) key, sent as the `apikey` header on every call
    supabase_anon_key: str = Field(
        default="",
        description="API key for the hosted data/auth service"
    )

    # Upper bound for a single call to the hosted service, in seconds
    http_timeout_seconds: float = Field(default=10.0, gt=0, le=120)

    # ── Admin account ─────────────────────────────────────────────────────
    # The admin is identified by email only; there is no admin role in the
    # users table. The password is used by the admin bootstrap sign-in only.
    admin_email: str = Field(default="admin@app.com")
    admin_password: SecretStr = Field(default=SecretStr("admin123"))

    # Where the password reset email sends the user back to
    password_reset_redirect_url: str = Field(
        default="http://localhost:3000/reset-password"
    )

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by the property below)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # One (max requests, window) policy per operation group.
    # Windows are in milliseconds; each window resets at a fixed instant.
    rate_limit_job_list_requests: int = Field(default=50, ge=1, le=10000)
    rate_limit_job_list_window_ms: int = Field(default=60_000, ge=1000)

    rate_limit_job_create_requests: int = Field(default=10, ge=1, le=10000)
    rate_limit_job_create_window_ms: int = Field(default=60_000, ge=1000)

    rate_limit_admin_read_requests: int = Field(default=20, ge=1, le=10000)
    rate_limit_admin_read_window_ms: int = Field(default=60_000, ge=1000)

    rate_limit_admin_delete_requests: int = Field(default=10, ge=1, le=10000)
    rate_limit_admin_delete_window_ms: int = Field(default=60_000, ge=1000)

    rate_limit_account_requests: int = Field(default=5, ge=1, le=10000)
    rate_limit_account_window_ms: int = Field(default=60_000, ge=1000)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # SUPABASE_URL and supabase_url both work
    }

    def validate_required_for_production(self) -> None:
        """
        Checks that the hosted service is configured.

        Called during app startup (lifespan). Raises ValueError listing every
        missing value so the operator can fix them in one pass.
        """
        errors = []
        if not self.supabase_url:
            errors.append("SUPABASE_URL is not set.")
        if not self.supabase_anon_key:
            errors.append("SUPABASE_ANON_KEY is not set.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
