"""Rate limiter interfaces.

The controller depends on this abstraction (not the concrete implementation)
so we can swap storage backends later with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RejectReason(str, Enum):
    """Why admission control rejected a request."""

    DAILY_LIMIT = "daily_limit_exceeded"
    PER_CLIENT = "per_client_rate_exceeded"


REJECT_MESSAGES: dict[RejectReason, str] = {
    RejectReason.DAILY_LIMIT: "Daily request limit reached. Try again tomorrow.",
    RejectReason.PER_CLIENT: "Too many requests. Please slow down and try again later.",
}


@dataclass(frozen=True)
class RateLimitResult:
    """Result of an admission check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        reason: Rejection reason (None when allowed).
        limit: The limit that applied (per-client limit when allowed).
        remaining: Remaining requests in the client's window (0 when blocked).
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    reason: RejectReason | None
    limit: int
    remaining: int
    retry_after_seconds: int | None

    @property
    def message(self) -> str | None:
        if self.reason is None:
            return None
        return REJECT_MESSAGES[self.reason]


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(self, key: str, now: datetime | None = None) -> RateLimitResult:
        """Check and record an admission attempt for a given client key.

        Args:
            key: Client identifier (e.g., IP address).
            now: Timestamp of the attempt; defaults to the limiter's clock.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Forget all recorded attempts."""
        raise NotImplementedError
