from __future__ import annotations

from moodic.api.routes.auth import router as auth_router
from moodic.api.routes.health import router as health_router
from moodic.api.routes.mood import router as mood_router
from moodic.api.routes.playlists import router as playlists_router

__all__ = ["auth_router", "health_router", "mood_router", "playlists_router"]
