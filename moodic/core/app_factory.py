"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build fresh instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from moodic.api.dependencies import close_clients
from moodic.api.routes import auth_router, health_router, mood_router, playlists_router
from moodic.core.config import settings
from moodic.core.exception_handlers import setup_exception_handlers
from moodic.core.logging import configure_logging
from moodic.core.middleware import (
    configure_cors,
    request_id_middleware,
    security_headers_middleware,
)
from moodic.core.openapi import apply_openapi_customizations
from moodic.core.rate_limit import close_rate_limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "app.startup",
        extra={
            "app_env": settings.app_env,
            "production": settings.app.production,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "redis_configured": bool(settings.redis.url),
        },
    )
    yield
    await close_clients()
    await close_rate_limiter()
    logger.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Moodic API",
        description=(
            "Turns a free-text mood into Spotify search terms with an LLM and "
            "finds matching playlists. Quota-bearing routes are rate limited "
            "per client IP."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Middleware: last added runs first, so CORS wraps everything
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(request_id_middleware)
    configure_cors(app)

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(mood_router)
    app.include_router(playlists_router)
    app.include_router(auth_router)

    apply_openapi_customizations(app)

    return app
