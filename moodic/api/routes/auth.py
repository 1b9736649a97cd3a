from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import RedirectResponse

from moodic.adapters.spotify.client import SpotifyClient
from moodic.api.dependencies import get_spotify_client, require_bearer_token
from moodic.core.errors import ValidationAppError
from moodic.schemas.auth import RefreshTokenRequest, SpotifyCallbackRequest

router = APIRouter(tags=["Auth"])

SpotifyDep = Annotated[SpotifyClient, Depends(get_spotify_client)]


@router.get("/login", response_class=RedirectResponse, status_code=302)
async def login(spotify: SpotifyDep) -> RedirectResponse:
    """Redirect the browser to Spotify's consent page."""
    url = spotify.build_authorize_url(spotify.new_state())
    return RedirectResponse(url=url, status_code=302)


@router.post("/auth/spotify/callback")
async def spotify_callback(body: SpotifyCallbackRequest, spotify: SpotifyDep) -> dict[str, Any]:
    """Exchange the authorization code for tokens and hand them to the frontend."""
    return await spotify.exchange_code(body.code, body.state)


@router.post("/auth/refresh")
async def refresh_token(
    spotify: SpotifyDep,
    body: Annotated[RefreshTokenRequest | None, Body()] = None,
) -> dict[str, Any]:
    """Trade a refresh token for a new access token.

    Raises:
        ValidationAppError: 400 when no refresh token is given, including
            when the request has no body at all.
        AuthenticationAppError: 401 when Spotify rejects it.
    """
    if body is None or not body.refresh_token:
        raise ValidationAppError(
            code="refresh_token_required",
            message="Refresh token required",
        )
    return await spotify.refresh_access_token(body.refresh_token)


@router.get("/me")
async def current_user(
    token: Annotated[str, Depends(require_bearer_token)],
    spotify: SpotifyDep,
) -> dict[str, Any]:
    """Spotify profile of the signed-in user."""
    return await spotify.get_current_user(token)
