"""httpx-based JSON fetcher for the Steam Web/Store APIs."""

from __future__ import annotations

import logging
from typing import Mapping

import httpx

from app.adapters.steam.base import AbstractJsonFetcher, FetchResult
from app.core.errors import UpstreamAppError

logger = logging.getLogger(__name__)


class HttpxJsonFetcher(AbstractJsonFetcher):
    """Async JSON fetcher backed by a shared ``httpx.AsyncClient``.

    Every request carries the configured Accept-Language header. Transport
    errors, non-2xx statuses and undecodable bodies are reported as failed
    FetchResults instead of exceptions.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        accept_language: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout_seconds: Timeout applied when the client is created here.
            accept_language: Value for the Accept-Language request header.
            client: Optional pre-built client (e.g., with a mock transport).
        """
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._headers = {"Accept-Language": accept_language} if accept_language else {}

    def _fail(self, url: str, code: str, message: str, **details) -> FetchResult:
        # Only scheme/host/path are logged: the query string carries the API key.
        endpoint = url.split("?", 1)[0]
        logger.warning(
            "upstream.request_failed",
            extra={"endpoint": endpoint, "error_code": code, **details},
        )
        return FetchResult.failure(
            UpstreamAppError(
                code=code,
                message=message,
                details={"upstream": endpoint, **details},
            )
        )

    async def fetch_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
    ) -> FetchResult:
        try:
            response = await self._client.get(url, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            return self._fail(
                url,
                "upstream_transport_error",
                f"Steam API request failed: {type(exc).__name__}",
            )

        if not response.is_success:
            return self._fail(
                url,
                "upstream_bad_status",
                f"Steam API returned HTTP {response.status_code}",
                http_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError:
            return self._fail(url, "upstream_invalid_json", "Steam API returned invalid JSON")

        return FetchResult.success(payload)

    async def aclose(self) -> None:
        await self._client.aclose()
