"""Admission and caching controller for now-playing lookups.

Sequencing per request:
1. Validate the steamid format.
2. Admission control (global daily budget, then per-client window).
3. Serve a recent identical lookup from the duplicate cache.
4. Otherwise resolve upstream and remember the serialized response.

The controller returns a tagged outcome; translating it to HTTP is the
route's job.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime

from app.adapters.rate_limit.base import RejectReason
from app.adapters.rate_limit.in_memory import as_utc
from app.services.now_playing_service import NowPlayingService
from app.services.state import ControllerState
from app.utils.identifier_validators import is_valid_steam_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvalidInput:
    """The steamid was missing or not 17 digits."""


@dataclass(frozen=True)
class RateLimited:
    reason: RejectReason
    message: str
    retry_after_seconds: int | None = None


@dataclass(frozen=True)
class Ok:
    """Serialized NowPlayingResponse body, fresh or replayed from cache."""

    body: str
    cached: bool = False


Outcome = InvalidInput | RateLimited | Ok


def _hash_client_key(key: str) -> str:
    """Hash the client address for logging without exposing it."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


class NowPlayingController:
    """Composition root for one now-playing request.

    Owns no state of its own; everything mutable lives in ControllerState.
    """

    def __init__(self, state: ControllerState, service: NowPlayingService) -> None:
        self.state = state
        self.service = service

    async def handle(
        self,
        steam_id: str | None,
        client_address: str,
        now: datetime | None = None,
    ) -> Outcome:
        """Run one lookup through validation, admission, caching and resolution.

        Args:
            steam_id: Raw steamid query value (may be empty or malformed).
            client_address: Caller address used for per-client limits.
            now: Request time; defaults to the state clock.

        Returns:
            InvalidInput, RateLimited or Ok.
        """
        if not is_valid_steam_id(steam_id):
            logger.info("now_playing.invalid_steam_id", extra={"length": len(steam_id or "")})
            return InvalidInput()

        fixed_time = now is not None
        # Limiter and cache compare timestamps, so they must all be UTC-aware.
        now = as_utc(now if fixed_time else self.state.clock())

        decision = self.state.rate_limiter.check(client_address, now)
        if not decision.allowed:
            logger.warning(
                "rate_limit.exceeded",
                extra={
                    "key_hash": _hash_client_key(client_address),
                    "reason": decision.reason.value,
                    "limit": decision.limit,
                    "retry_after_s": decision.retry_after_seconds,
                },
            )
            return RateLimited(
                reason=decision.reason,
                message=decision.message,
                retry_after_seconds=decision.retry_after_seconds,
            )

        logger.info(
            "rate_limit.allowed",
            extra={
                "key_hash": _hash_client_key(client_address),
                "limit": decision.limit,
                "remaining": decision.remaining,
            },
        )

        cached = self.state.duplicate_cache.get(steam_id, now)
        if cached is not None:
            return Ok(body=cached, cached=True)

        result = await self.service.resolve(steam_id)
        body = result.to_json()
        # Stamped when the result was computed, i.e. after the upstream calls.
        computed_at = now if fixed_time else as_utc(self.state.clock())
        self.state.duplicate_cache.put(steam_id, computed_at, body)
        return Ok(body=body)
