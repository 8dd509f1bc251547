"""Factory for the upstream JSON fetcher."""

import logging

from app.adapters.steam.base import AbstractJsonFetcher
from app.adapters.steam.httpx_client import HttpxJsonFetcher
from app.core.config import settings

logger = logging.getLogger(__name__)


def create_json_fetcher() -> AbstractJsonFetcher:
    """Instantiate the Steam JSON fetcher from settings.

    A missing STEAM_API_KEY is not fatal: player summaries will fail upstream
    and every lookup degrades to an empty game name.

    Returns:
        AbstractJsonFetcher: Configured fetcher instance.
    """
    if not settings.steam.api_key:
        logger.warning(
            "steam.api_key_missing",
            extra={"hint": "Set STEAM_API_KEY; lookups will return empty game names"},
        )

    return HttpxJsonFetcher(
        timeout_seconds=settings.steam.timeout_seconds,
        accept_language=settings.steam.accept_language,
    )
