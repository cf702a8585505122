"""Shared enums for the URL shortener application.

This module defines all status and state enums used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["HealthStatus", "RequestStatus"]


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class RequestStatus(StrEnum):
    """Request outcome values for metrics and logging."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    CONFLICT = "conflict"
    ERROR = "error"
    NOT_FOUND = "not_found"
