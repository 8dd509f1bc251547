from fastapi import APIRouter, Depends, Query, Request, Response

from app.core.errors import RateLimitAppError, ValidationAppError
from app.schemas.now_playing import NowPlayingResponse
from app.services.controller import InvalidInput, NowPlayingController, RateLimited

router = APIRouter(tags=["NowPlaying"])


def get_controller(request: Request) -> NowPlayingController:
    """Return the controller built at startup (see app_factory.create_app)."""
    return request.app.state.controller


def _client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.get(
    "/now-playing",
    response_model=NowPlayingResponse,
    responses={
        400: {"description": "Missing or malformed steamid"},
        403: {"description": "Origin not allowed"},
        429: {"description": "Per-client or daily rate limit exceeded"},
    },
)
async def get_now_playing(
    request: Request,
    steamid: str = Query("", description="17-digit SteamID64"),
    controller: NowPlayingController = Depends(get_controller),
) -> Response:
    """Return the game a Steam user is currently playing.

    The body is ``{"GameName": "<name>"}``; the name is empty when the user
    is not in game or Steam could not be reached.

    Raises:
        ValidationAppError: 400 when steamid is not 17 digits.
        RateLimitAppError: 429 when per-client or daily limits are exceeded.
    """
    outcome = await controller.handle(steamid, _client_address(request))

    if isinstance(outcome, InvalidInput):
        raise ValidationAppError(
            code="invalid_steam_id",
            message="Missing or invalid steamid parameter",
            details={"hint": "steamid must be a 17-digit SteamID64"},
        )

    if isinstance(outcome, RateLimited):
        raise RateLimitAppError(
            code=outcome.reason.value,
            message=outcome.message,
            details={
                "reason": outcome.reason.value,
                "retry_after": outcome.retry_after_seconds,
            },
        )

    return Response(content=outcome.body, media_type="application/json")
