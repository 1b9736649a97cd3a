"""HTTP middleware: request correlation, security headers and CORS.

Usage:
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(security_headers_middleware)
    configure_cors(app)
"""

from __future__ import annotations

import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from moodic.core.config import settings
from moodic.core.logging import clear_request_id, set_request_id

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["Content-Type", "Authorization"]
CORS_EXPOSED_HEADERS = [
    "X-RateLimit-Limit",
    "X-RateLimit-Remaining",
    "X-RateLimit-Reset",
    "Retry-After",
]


async def request_id_middleware(request: Request, call_next) -> Response:
    """Propagate a correlation id and measure request duration.

    Uses the incoming request-id header (``LOG_REQUEST_ID_HEADER``) or a new
    UUID, stores it in contextvars for log correlation, and echoes it back
    together with ``X-Request-Duration-ms``.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def security_headers_middleware(request: Request, call_next) -> Response:
    """Attach hardening headers in production.

    HSTS is left to the TLS-terminating proxy.
    """

    response: Response = await call_next(request)
    if settings.app.production and settings.app.security_headers_enabled:
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
    return response


def parse_origins(origins: str | None) -> list[str]:
    """Split a comma-separated origin list, dropping blanks.

    Examples:
        >>> parse_origins("https://a.com, https://b.com ,")
        ['https://a.com', 'https://b.com']
    """
    if not origins:
        return []
    return [origin.strip() for origin in origins.split(",") if origin.strip()]


def configure_cors(app: FastAPI) -> None:
    """Install CORS: any origin in development, the allow-list in production.

    Requests without an Origin header (server-to-server) are never subject to
    CORS, so they pass in both modes.
    """

    if settings.app.production:
        origin_options: dict = {"allow_origins": parse_origins(settings.app.cors_allowed_origins)}
    else:
        # Credentials forbid "*", so echo back whatever origin asked
        origin_options = {"allow_origin_regex": ".*"}

    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
        expose_headers=CORS_EXPOSED_HEADERS,
        **origin_options,
    )
