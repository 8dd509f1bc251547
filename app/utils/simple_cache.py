"""In-memory caches used to avoid redundant Steam API calls.

Two caches with different lifetimes:

- DuplicateResultCache: steamid -> serialized response, served for a short
  window so bursts of identical lookups cost one upstream round trip.
  Expiry is checked on read; stale entries stay until overwritten.
- GameNameCache: game id -> display name, kept for the process lifetime
  because the mapping does not change.

Both are thread-safe and expose lightweight stats without leaking values.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheItem:
    """Cached response body and the moment it was computed."""

    body: str
    computed_at: datetime


class DuplicateResultCache:
    """Thread-safe short-lived response cache keyed by steamid.

    Attributes:
        window_seconds: Entries younger than this are served as hits.
    """

    def __init__(self, window_seconds: int = 30) -> None:
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")
        self._window = timedelta(seconds=window_seconds)
        self._store: dict[str, CacheItem] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"DuplicateResultCache(window_seconds={self._window.total_seconds():g}, "
            f"size={len(self._store)}, hits={self._hits}, misses={self._misses})"
        )

    def get(self, key: str, now: datetime) -> str | None:
        """Return the cached body if it was computed less than a window ago.

        Args:
            key: Steam id.
            now: Current time.

        Returns:
            Cached response body, or None if not found/stale.
        """

        with self._lock:
            item = self._store.get(key)
            if item is None:
                self._misses += 1
                logger.debug("cache.miss", extra={"cache": "duplicate", "reason": "not_found"})
                return None

            if now - item.computed_at >= self._window:
                self._misses += 1
                logger.debug("cache.miss", extra={"cache": "duplicate", "reason": "expired"})
                return None

            self._hits += 1
            logger.debug("cache.hit", extra={"cache": "duplicate"})
            return item.body

    def put(self, key: str, now: datetime, body: str) -> None:
        """Store ``body`` for ``key``, overwriting any previous entry."""

        with self._lock:
            self._store[key] = CacheItem(body=body, computed_at=now)
            logger.debug(
                "cache.set",
                extra={"cache": "duplicate", "size": len(self._store)},
            )

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int | float]:
        with self._lock:
            return {
                "window_seconds": self._window.total_seconds(),
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
            }


class GameNameCache:
    """Thread-safe, never-expiring game id -> display name map.

    A name, once recorded, is never replaced. Empty names are not recorded so
    a later lookup for the same game is still attempted upstream.
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"GameNameCache(size={len(self._store)}, hits={self._hits}, misses={self._misses})"

    def get(self, game_id: str) -> str | None:
        with self._lock:
            name = self._store.get(game_id)
            if name is None:
                self._misses += 1
                logger.debug("cache.miss", extra={"cache": "game_name", "game_id": game_id})
            else:
                self._hits += 1
                logger.debug("cache.hit", extra={"cache": "game_name", "game_id": game_id})
            return name

    def put(self, game_id: str, name: str) -> bool:
        """Record ``name`` for ``game_id``.

        Returns:
            True if the name was stored, False if it was empty or a name
            already exists for this game id.
        """

        if not name:
            return False

        with self._lock:
            if game_id in self._store:
                return False
            self._store[game_id] = name
            logger.debug(
                "cache.set",
                extra={"cache": "game_name", "game_id": game_id, "size": len(self._store)},
            )
            return True

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
            }
