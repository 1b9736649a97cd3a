"""Factory for creating the Spotify client from settings."""

from moodic.adapters.spotify.client import SpotifyClient
from moodic.core.config import settings
from moodic.core.errors import ConfigurationAppError


def create_spotify_client() -> SpotifyClient:
    """Instantiate ``SpotifyClient`` from ``SPOTIFY_*`` settings.

    Raises:
        ConfigurationAppError: If client credentials are not configured.
    """
    cfg = settings.spotify
    if not cfg.client_id or not cfg.client_secret:
        raise ConfigurationAppError(
            code="spotify_missing_credentials",
            message="Spotify requires SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET",
        )

    return SpotifyClient(
        client_id=cfg.client_id,
        client_secret=cfg.client_secret,
        redirect_uri=cfg.redirect_uri,
        auth_url=cfg.auth_url,
        token_url=cfg.token_url,
        api_base=cfg.api_base,
        scopes=cfg.scopes,
        timeout_seconds=cfg.timeout_seconds,
    )
