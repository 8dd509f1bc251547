from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Health check endpoint.

    Exempt from the origin guard so load balancers can poll it. Reports
    cache sizes and today's admitted request count alongside the status.

    Returns:
        dict: ``status`` plus lightweight counters (no cached values).
    """

    state = request.app.state.controller.state
    return {
        "status": "ok",
        "daily_requests": state.rate_limiter.daily_count,
        "duplicate_cache": state.duplicate_cache.stats(),
        "game_name_cache": state.game_names.stats(),
    }
