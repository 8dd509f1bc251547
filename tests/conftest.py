"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before any app import so Settings picks them up.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ["STEAM_API_KEY"] = "test-key"
os.environ["APP_ALLOWED_ORIGIN"] = "https://marsantony.github.io"

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping
from urllib.parse import urlencode

import pytest

from app.adapters.steam.base import AbstractJsonFetcher, FetchResult
from app.core.errors import UpstreamAppError

ALLOWED_ORIGIN = "https://marsantony.github.io"
TEST_STEAM_ID = "76561198003344359"
OTHER_STEAM_ID = "76561198000000001"

PLAYER_PLAYING = {"response": {"players": [{"steamid": TEST_STEAM_ID, "gameid": "1245620"}]}}
PLAYER_NOT_PLAYING = {"response": {"players": [{"steamid": TEST_STEAM_ID}]}}
APP_DETAILS = {"1245620": {"success": True, "data": {"name": "ELDEN RING"}}}


class FakeClock:
    """Deterministic UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class FakeJsonFetcher(AbstractJsonFetcher):
    """Records requested URLs and answers from canned payloads.

    A request matches a canned payload when the full URL (query included)
    contains the registered fragment; unmatched requests fail like an HTTP 500.
    """

    def __init__(self) -> None:
        self._responses: dict[str, Any] = {}
        self.requested_urls: list[str] = []

    def set_response(self, url_contains: str, payload: Any) -> None:
        self._responses[url_contains] = payload

    def count(self, url_contains: str) -> int:
        return sum(1 for url in self.requested_urls if url_contains in url)

    async def fetch_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
    ) -> FetchResult:
        full_url = f"{url}?{urlencode(params)}" if params else url
        self.requested_urls.append(full_url)

        for fragment, payload in self._responses.items():
            if fragment in full_url:
                return FetchResult.success(payload)

        return FetchResult.failure(
            UpstreamAppError(
                code="upstream_bad_status",
                message="Steam API returned HTTP 500",
                details={"http_status": 500},
            )
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher() -> FakeJsonFetcher:
    return FakeJsonFetcher()
