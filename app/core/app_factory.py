"""Application factory for the FastAPI app.

Centralizes app construction (shared state, middleware, handlers, routers) so
tests can build isolated apps with their own fetcher and clock.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Callable

from fastapi import FastAPI

from app.adapters.rate_limit.in_memory import utcnow
from app.adapters.steam.base import AbstractJsonFetcher
from app.adapters.steam.factory import create_json_fetcher
from app.api.routes import health_router, now_playing_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import origin_guard_middleware, request_id_middleware
from app.services.controller import NowPlayingController
from app.services.now_playing_service import NowPlayingService
from app.services.state import ControllerState


def create_app(
    *,
    fetcher: AbstractJsonFetcher | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        fetcher: Upstream JSON fetcher; defaults to the httpx-backed one.
        clock: Time source shared by the rate limiter and caches.

    Returns:
        Configured FastAPI app. The controller and its ControllerState are
        available as ``app.state.controller``.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    fetcher = fetcher or create_json_fetcher()
    state = ControllerState.from_settings(settings.app, clock=clock)
    service = NowPlayingService(fetcher=fetcher, game_names=state.game_names)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await fetcher.aclose()

    app = FastAPI(
        title="Now Playing API",
        description=(
            "Returns the name of the game a Steam user is currently playing. "
            "Requests are limited per client and per day, repeated lookups are "
            "served from a short-lived cache, and game names are memoized."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.controller = NowPlayingController(state=state, service=service)

    # Middleware (last added runs first)
    app.middleware("http")(origin_guard_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(now_playing_router, prefix="/v1")
    app.include_router(health_router)

    return app
