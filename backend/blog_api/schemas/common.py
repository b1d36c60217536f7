"""
Blog API - Shared Response Schemas
==================================

What:  The error envelope, plain message envelope and health payload.
Why:   Every endpoint answers in the same {"success": ..., ...} shape, so
       clients can branch on `success` before looking at anything else.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    field: Optional[str] = Field(default=None, description="Request field that failed")
    message: str = Field(description="What is wrong with it")


class ErrorResponse(BaseModel):
    """
    Standardized error response.

    Example:
        {"success": false, "error": "Post not found"}
    """
    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error description")
    errors: Optional[List[FieldError]] = Field(
        default=None,
        description="Per-field failures (validation errors only)",
    )


class MessageResponse(BaseModel):
    success: bool = Field(default=True)
    message: str


class HealthResponse(BaseModel):
    """
    Health check response.

    A backend that cannot reach its database cannot serve a single post, so
    the database check decides healthy vs unhealthy.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
