"""Shared FastAPI dependencies: upstream clients, services and bearer tokens.

Clients are created lazily on first use and reused for the process lifetime,
so the app can start (and serve /health) before every upstream is configured.
Tests replace them through ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header

from moodic.adapters.llm.base import AbstractLLMClient
from moodic.adapters.llm.factory import create_llm_client
from moodic.adapters.spotify.client import SpotifyClient
from moodic.adapters.spotify.factory import create_spotify_client
from moodic.core.errors import AuthenticationAppError
from moodic.services.moodic_service import MoodicService
from moodic.services.playlist_service import PlaylistService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

_llm_client: AbstractLLMClient | None = None
_spotify_client: SpotifyClient | None = None


def get_llm_client() -> AbstractLLMClient:
    global _llm_client
    if _llm_client is None:
        _llm_client = create_llm_client()
    return _llm_client


def get_spotify_client() -> SpotifyClient:
    global _spotify_client
    if _spotify_client is None:
        _spotify_client = create_spotify_client()
    return _spotify_client


def get_moodic_service(
    llm: Annotated[AbstractLLMClient, Depends(get_llm_client)],
) -> MoodicService:
    return MoodicService(llm=llm)


def get_playlist_service(
    spotify: Annotated[SpotifyClient, Depends(get_spotify_client)],
) -> PlaylistService:
    return PlaylistService(spotify=spotify)


async def close_clients() -> None:
    """Close upstream HTTP clients (application shutdown)."""
    global _llm_client, _spotify_client

    if _llm_client is not None:
        await _llm_client.close()
        _llm_client = None
    if _spotify_client is not None:
        await _spotify_client.close()
        _spotify_client = None


async def require_bearer_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Extract the Spotify access token from ``Authorization: Bearer <token>``.

    Raises:
        AuthenticationAppError: 401 when the header is missing or not a bearer token.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        logger.warning(
            "auth.missing_bearer_token",
            extra={"authorization_present": authorization is not None},
        )
        raise AuthenticationAppError(
            code="missing_bearer_token",
            message="Authorization token required",
        )

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationAppError(
            code="missing_bearer_token",
            message="Authorization token required",
        )
    return token
