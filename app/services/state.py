"""Shared in-memory state for the now-playing controller.

One ControllerState is built at application startup and handed to the
controller; nothing here is a module-level global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter, utcnow
from app.core.config import AppSettings
from app.utils.simple_cache import DuplicateResultCache, GameNameCache

logger = logging.getLogger(__name__)


@dataclass
class ControllerState:
    """Rate limiter plus both caches, shared by all requests.

    Attributes:
        rate_limiter: Per-client windows and the global daily counter.
        duplicate_cache: steamid -> recently computed response body.
        game_names: game id -> display name.
        clock: Time source used when callers do not pass ``now``.
    """

    rate_limiter: InMemorySlidingWindowRateLimiter
    duplicate_cache: DuplicateResultCache
    game_names: GameNameCache = field(default_factory=GameNameCache)
    clock: Callable[[], datetime] = utcnow

    @classmethod
    def from_settings(
        cls,
        app_settings: AppSettings,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> "ControllerState":
        """Build empty state sized by the application settings."""
        return cls(
            rate_limiter=InMemorySlidingWindowRateLimiter(
                per_client_limit=app_settings.per_client_limit,
                window_seconds=app_settings.per_client_window_seconds,
                daily_limit=app_settings.global_daily_limit,
                clock=clock,
            ),
            duplicate_cache=DuplicateResultCache(
                window_seconds=app_settings.duplicate_window_seconds,
            ),
            game_names=GameNameCache(),
            clock=clock,
        )

    def reset(self) -> None:
        """Clear all limiter and cache state (cold start)."""
        self.rate_limiter.reset()
        self.duplicate_cache.clear()
        self.game_names.clear()
        logger.info("state.reset", extra={"scope": "all"})

    def reset_duplicate_cache(self) -> None:
        """Forget recent responses while keeping limiter state and game names."""
        self.duplicate_cache.clear()
        logger.info("state.reset", extra={"scope": "duplicate_cache"})
