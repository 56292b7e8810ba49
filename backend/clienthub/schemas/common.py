"""
ClientHub Backend - Shared Response Schemas
============================================

What:  Envelope models shared by every route: errors, plain messages, health.
Who:   Referenced in route `responses=` declarations so the OpenAPI docs show
       the error format; the exception handlers in main.py build the same shape.
"""

from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Body of operations that only report success (logout, change-password)."""
    message: str = Field(description="Human-readable success message")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Missing required fields",
            "details": {"missing_fields": ["license_no"]},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Asset directory: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
