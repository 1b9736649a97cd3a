"""Pydantic schemas for the Spotify OAuth endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SpotifyCallbackRequest(BaseModel):
    """Body of ``POST /auth/spotify/callback``."""

    code: str = Field(..., min_length=1, description="Authorization code from Spotify.")
    state: str = Field(..., description="State echoed back by Spotify.")


class RefreshTokenRequest(BaseModel):
    """Body of ``POST /auth/refresh``.

    ``refresh_token`` is optional at the schema level (and the body itself is
    optional on the route) so a missing value is reported as a 400 domain
    error rather than a 422.
    """

    refresh_token: str | None = Field(default=None, description="Spotify refresh token.")
