"""
e-Foncier Backend: Shared Response Schemas
===========================================

What:  Error and health payloads shared by every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error body.

    Example:
        {
            "error": "Missing field: owner_name",
            "code": "validation_error",
            "details": {"field": "owner_name"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Document storage: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
