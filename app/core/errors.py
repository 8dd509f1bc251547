"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep the shape stable across error types.
    """

    code: str
    message: str
    hint: str
    reason: str
    limit: int
    http_status: int
    retry_after: int
    upstream: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class RateLimitAppError(AppError):
    """Raised when a request is rejected by admission control."""


class AuthenticationAppError(AppError):
    """Raised when the caller origin is not allowed."""


class UpstreamAppError(AppError):
    """Describes a failed Steam API call.

    Carried inside a FetchResult rather than raised past the service layer.
    """
