"""
SnipNet Backend - Shared API Schemas
=====================================

What:  Schemas used across several route modules: list ordering, the error
       envelope and the health report.
"""

import enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, Field


class ListOrder(str, enum.Enum):
    """
    Ordering for list endpoints.

    Validated by FastAPI at the boundary, so an unknown value is a 422 before
    any service code runs. Ties on created_at are broken by a second column in
    the same direction, which keeps listings stable.
    """

    CREATED_AT_DESC = "created_at_desc"
    CREATED_AT_ASC = "created_at_asc"

    def clauses(self, created_at: Any, tie_breaker: Any) -> Tuple[Any, Any]:
        """ORDER BY clauses for a (created_at, tie_breaker) column pair."""
        if self is ListOrder.CREATED_AT_ASC:
            return created_at.asc(), tie_breaker.asc()
        return created_at.desc(), tie_breaker.desc()


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models - Consistent error format across all endpoints
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "conflict", "not_found")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "conflict",
            "message": "A relationship already exists between these users",
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
