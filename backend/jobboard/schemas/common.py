"""
JobBoard Backend - Shared Response Schemas
===========================================

What:  Error and health response models shared by every router.
Why:   Clients parse one error shape regardless of which stage failed.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body.

    Examples:
        {"error": "Admin access required"}
        {"error": "Validation failed", "fields": {"date": "This field is required"}}

    The correlation ID travels in the X-Request-ID response header.
    """
    error: str = Field(description="Human-readable error description")
    fields: Optional[Dict[str, str]] = Field(
        default=None, description="Per-field validation messages"
    )


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    backend: str = Field(description="Hosted data/auth service: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
