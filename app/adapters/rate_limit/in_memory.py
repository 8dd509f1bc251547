"""In-memory sliding-window rate limiter with a global daily budget.

Notes:
- Per-process only: running multiple workers multiplies the effective limits.
- Thread-safe: one lock guards the daily counter and the window registry,
  and each client window carries its own lock so clients never block each
  other while their timestamps are pruned.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult, RejectReason

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC already.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_utc_midnight(now: datetime) -> datetime:
    """Return the start of the UTC day following ``now``."""
    tomorrow = as_utc(now).date() + timedelta(days=1)
    return datetime.combine(tomorrow, time.min, tzinfo=timezone.utc)


@dataclass
class _ClientWindow:
    timestamps: list[datetime] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Per-client sliding window plus a global per-UTC-day counter.

    The daily counter is incremented before the per-client window is
    consulted, so a request rejected for per-client reasons still consumes
    one unit of the daily budget.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        per_client_limit: int,
        window_seconds: int,
        daily_limit: int,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            per_client_limit: Maximum admitted requests per client per window.
            window_seconds: Size of the per-client sliding window in seconds.
            daily_limit: Maximum admitted attempts across all clients per UTC day.
            clock: Time source returning the current (UTC) datetime.

        Raises:
            ValueError: If any limit or window size is invalid.
        """
        if per_client_limit < 1:
            raise ValueError("per_client_limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")
        if daily_limit < 1:
            raise ValueError("daily_limit must be >= 1")

        self._per_client_limit = per_client_limit
        self._window = timedelta(seconds=window_seconds)
        self._daily_limit = daily_limit
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, _ClientWindow] = {}
        self._daily_count = 0
        self._reset_at = next_utc_midnight(self._clock())

    @property
    def daily_count(self) -> int:
        return self._daily_count

    @property
    def reset_at(self) -> datetime:
        return self._reset_at

    def _rollover_locked(self, now: datetime) -> None:
        logger.info(
            "rate_limit.daily_reset",
            extra={
                "previous_count": self._daily_count,
                "clients": len(self._windows),
            },
        )
        self._daily_count = 0
        self._reset_at = next_utc_midnight(now)
        self._windows = {}

    def _build_blocked_result(
        self, *, reason: RejectReason, limit: int, retry_at: datetime, now: datetime
    ) -> RateLimitResult:
        retry_after = max(0, int(math.ceil((retry_at - now).total_seconds())))
        return RateLimitResult(
            allowed=False,
            reason=reason,
            limit=limit,
            remaining=0,
            retry_after_seconds=retry_after,
        )

    def check(self, key: str, now: datetime | None = None) -> RateLimitResult:
        """Record an admission attempt for ``key`` and decide admit/reject.

        Args:
            key: Client identifier (e.g., IP address).
            now: Timestamp of the attempt; defaults to the limiter's clock.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = as_utc(now if now is not None else self._clock())

        with self._lock:
            if now >= self._reset_at:
                self._rollover_locked(now)

            if self._daily_count >= self._daily_limit:
                return self._build_blocked_result(
                    reason=RejectReason.DAILY_LIMIT,
                    limit=self._daily_limit,
                    retry_at=self._reset_at,
                    now=now,
                )
            self._daily_count += 1

            window = self._windows.get(key)
            if window is None:
                window = _ClientWindow()
                self._windows[key] = window

        with window.lock:
            cutoff = now - self._window
            window.timestamps[:] = [t for t in window.timestamps if t >= cutoff]

            if len(window.timestamps) >= self._per_client_limit:
                return self._build_blocked_result(
                    reason=RejectReason.PER_CLIENT,
                    limit=self._per_client_limit,
                    retry_at=min(window.timestamps) + self._window,
                    now=now,
                )

            window.timestamps.append(now)
            return RateLimitResult(
                allowed=True,
                reason=None,
                limit=self._per_client_limit,
                remaining=self._per_client_limit - len(window.timestamps),
                retry_after_seconds=None,
            )

    def reset(self) -> None:
        """Zero the daily counter, drop all client windows, re-arm the deadline."""
        with self._lock:
            self._daily_count = 0
            self._windows = {}
            self._reset_at = next_utc_midnight(self._clock())
