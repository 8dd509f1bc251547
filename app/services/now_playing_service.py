"""Now-playing lookup service orchestrating the two Steam API calls.

Resolution is a two-step chain:
- GetPlayerSummaries: steamid -> current game id (absent when not in game)
- appdetails: game id -> localized display name (memoized per game id)

Upstream failures never escape this module. Every failed step degrades to an
empty game name so callers always receive a well-formed response.
"""

from __future__ import annotations

import logging
from typing import Any

from app.adapters.steam.base import AbstractJsonFetcher
from app.core.config import settings
from app.schemas.now_playing import NowPlayingResponse
from app.utils.simple_cache import GameNameCache

logger = logging.getLogger(__name__)

PLAYER_SUMMARIES_PATH = "/ISteamUser/GetPlayerSummaries/v2/"
APP_DETAILS_PATH = "/api/appdetails"


def extract_game_id(payload: Any) -> str | None:
    """Pull ``response.players[0].gameid`` out of a player summaries payload.

    Args:
        payload: Decoded GetPlayerSummaries JSON.

    Returns:
        The game id as a string, or None if the player is not in a game or
        the payload does not have the expected shape.
    """
    try:
        player = payload["response"]["players"][0]
    except (KeyError, IndexError, TypeError):
        return None

    if not isinstance(player, dict):
        return None

    game_id = player.get("gameid")
    if game_id is None or game_id == "":
        return None
    return str(game_id)


def extract_game_name(payload: Any, game_id: str) -> str | None:
    """Pull ``<game_id>.data.name`` out of an appdetails payload."""
    try:
        name = payload[game_id]["data"]["name"]
    except (KeyError, TypeError):
        return None

    if not isinstance(name, str) or not name:
        return None
    return name


class NowPlayingService:
    """Resolves the game a Steam user is currently playing.

    Attributes:
        fetcher: Upstream JSON fetcher.
        game_names: Process-lifetime game id -> name cache.
    """

    def __init__(self, fetcher: AbstractJsonFetcher, game_names: GameNameCache) -> None:
        self.fetcher = fetcher
        self.game_names = game_names

    async def _fetch_game_id(self, steam_id: str) -> str | None:
        steam = settings.steam
        result = await self.fetcher.fetch_json(
            steam.api_base_url.rstrip("/") + PLAYER_SUMMARIES_PATH,
            params={"key": steam.api_key, "format": "json", "steamids": steam_id},
        )
        if not result.ok:
            return None

        game_id = extract_game_id(result.payload)
        if game_id is None:
            logger.debug("now_playing.not_in_game", extra={"steam_id": steam_id})
        return game_id

    async def _fetch_game_name(self, game_id: str) -> str | None:
        steam = settings.steam
        result = await self.fetcher.fetch_json(
            steam.store_base_url.rstrip("/") + APP_DETAILS_PATH,
            params={"appids": game_id, "l": steam.store_language},
        )
        if not result.ok:
            return None

        name = extract_game_name(result.payload, game_id)
        if name is None:
            logger.info("now_playing.name_unavailable", extra={"game_id": game_id})
        return name

    async def resolve(self, steam_id: str) -> NowPlayingResponse:
        """Resolve the current game name for ``steam_id``.

        Args:
            steam_id: Validated SteamID64.

        Returns:
            NowPlayingResponse with the resolved name, or an empty name when
            the user is not in game or any upstream step failed.
        """
        game_id = await self._fetch_game_id(steam_id)
        if game_id is None:
            return NowPlayingResponse()

        name = self.game_names.get(game_id)
        if name is None:
            name = await self._fetch_game_name(game_id)
            if name is None:
                return NowPlayingResponse()
            self.game_names.put(game_id, name)

        logger.info(
            "now_playing.resolved",
            extra={"steam_id": steam_id, "game_id": game_id},
        )
        return NowPlayingResponse(game_name=name)
