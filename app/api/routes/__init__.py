from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.now_playing import router as now_playing_router

__all__ = ["health_router", "now_playing_router"]
