"""Spotify Web API and OAuth client.

Covers the authorization-code flow (authorize URL, code exchange, refresh)
and the handful of Web API reads the recommendation flow needs. Tokens are
passed through to the caller; nothing is stored.
"""

from __future__ import annotations

import logging
import secrets
from typing import Any
from urllib.parse import urlencode

import httpx

from moodic.core.errors import AuthenticationAppError, ConfigurationAppError, SpotifyAppError

logger = logging.getLogger(__name__)

# Upstream statuses meaning "this user token/code is not valid"
_AUTH_FAILURE_STATUSES = {400, 401}


class SpotifyClient:
    """Async client for Spotify accounts and Web API endpoints.

    Attributes:
        http: Shared ``httpx.AsyncClient``; injectable for tests.
    """

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str | None,
        auth_url: str,
        token_url: str,
        api_base: str,
        scopes: str,
        timeout_seconds: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.auth_url = auth_url
        self.token_url = token_url
        self.api_base = api_base.rstrip("/")
        self.scopes = scopes
        self.http = http or httpx.AsyncClient(timeout=timeout_seconds)

    @staticmethod
    def new_state() -> str:
        """Random hex state for the authorize request."""
        return secrets.token_hex(16)

    def build_authorize_url(self, state: str) -> str:
        """Build the URL the browser is redirected to for consent.

        Args:
            state: Opaque value Spotify echoes back to the callback.

        Raises:
            ConfigurationAppError: If no redirect URI is configured.
        """
        if not self.redirect_uri:
            raise ConfigurationAppError(
                code="spotify_missing_redirect_uri",
                message="Spotify login requires SPOTIFY_REDIRECT_URI",
            )
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "scope": self.scopes,
            "redirect_uri": self.redirect_uri,
            "state": state,
        }
        return f"{self.auth_url}?{urlencode(params)}"

    async def _token_request(self, data: dict[str, str], *, operation: str) -> dict[str, Any]:
        try:
            response = await self.http.post(
                self.token_url,
                data=data,
                auth=(self.client_id, self.client_secret),
            )
        except httpx.HTTPError as exc:
            logger.error(
                "spotify.token_request_failed",
                extra={"operation": operation, "error_msg": str(exc)},
            )
            raise SpotifyAppError(
                code="spotify_unreachable",
                message="Failed to contact the Spotify token endpoint",
            ) from exc

        if response.status_code in _AUTH_FAILURE_STATUSES:
            logger.warning(
                "spotify.token_rejected",
                extra={"operation": operation, "status_code": response.status_code},
            )
            raise AuthenticationAppError(
                code=f"spotify_{operation}_rejected",
                message="Spotify rejected the authorization grant",
                details={"http_status": response.status_code},
            )
        if response.is_error:
            logger.error(
                "spotify.token_request_failed",
                extra={"operation": operation, "status_code": response.status_code},
            )
            raise SpotifyAppError(
                code="spotify_token_error",
                message="Spotify token endpoint returned an error",
                details={"http_status": response.status_code},
            )
        return self._decode(response, path="token")

    @staticmethod
    def _decode(response: httpx.Response, *, path: str) -> dict[str, Any]:
        """JSON object body of a successful response.

        Raises:
            SpotifyAppError: If the body is not a JSON object.
        """
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            logger.error(
                "spotify.invalid_response",
                extra={"path": path, "status_code": response.status_code},
            )
            raise SpotifyAppError(
                code="spotify_invalid_response",
                message="Spotify returned a malformed response",
            )
        return payload

    async def exchange_code(self, code: str, state: str) -> dict[str, Any]:
        """Exchange an authorization code for access and refresh tokens.

        Returns:
            Spotify token payload (access_token, refresh_token, expires_in, ...).

        Raises:
            AuthenticationAppError: If Spotify rejects the code.
            SpotifyAppError: On transport or upstream server errors.
        """
        data = {"grant_type": "authorization_code", "code": code, "state": state}
        if self.redirect_uri:
            data["redirect_uri"] = self.redirect_uri
        return await self._token_request(data, operation="code_exchange")

    async def refresh_access_token(self, refresh_token: str) -> dict[str, Any]:
        """Obtain a fresh access token from a refresh token.

        Raises:
            AuthenticationAppError: If Spotify rejects the refresh token.
            SpotifyAppError: On transport or upstream server errors.
        """
        return await self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            operation="refresh",
        )

    async def _get(
        self, path: str, token: str, *, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        try:
            return await self.http.get(
                f"{self.api_base}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            logger.error("spotify.request_failed", extra={"path": path, "error_msg": str(exc)})
            raise SpotifyAppError(
                code="spotify_unreachable",
                message="Failed to contact the Spotify Web API",
            ) from exc

    def _raise_for_status(self, response: httpx.Response, *, path: str) -> None:
        if response.status_code == 401:
            raise AuthenticationAppError(
                code="spotify_token_invalid",
                message="Spotify access token is invalid or expired",
            )
        if response.is_error:
            logger.error(
                "spotify.request_failed",
                extra={"path": path, "status_code": response.status_code},
            )
            raise SpotifyAppError(
                code="spotify_api_error",
                message="Spotify Web API returned an error",
                details={"http_status": response.status_code},
            )

    async def get_current_user(self, token: str) -> dict[str, Any]:
        """Profile of the user owning ``token``."""
        response = await self._get("/me", token)
        self._raise_for_status(response, path="/me")
        return self._decode(response, path="/me")

    async def get_top_artists(self, token: str, limit: int = 5) -> list[dict[str, Any]] | None:
        """The user's top artists over the medium term.

        Returns:
            List of artist objects, or None when Spotify does not return them.
            Failures are logged and never raised.
        """
        try:
            response = await self._get(
                "/me/top/artists",
                token,
                params={"limit": limit, "time_range": "medium_term"},
            )
        except SpotifyAppError:
            return None

        if response.is_error:
            logger.warning(
                "spotify.top_artists_unavailable",
                extra={"status_code": response.status_code},
            )
            return None

        try:
            payload = self._decode(response, path="/me/top/artists")
        except SpotifyAppError:
            logger.warning(
                "spotify.top_artists_unavailable",
                extra={"status_code": response.status_code, "reason": "malformed_body"},
            )
            return None
        items = payload.get("items")
        if not isinstance(items, list):
            return []
        return [artist for artist in items if isinstance(artist, dict)]

    async def get_top_genres(self, token: str, limit: int = 5) -> list[str]:
        """Unique genres of the user's top 20 artists, first ``limit`` kept.

        Order follows artist rank then the artist's own genre order.
        """
        artists = await self.get_top_artists(token, limit=20)
        if not artists:
            return []

        genres: dict[str, None] = {}
        for artist in artists:
            for genre in artist.get("genres") or []:
                genres.setdefault(genre, None)
        return list(genres)[:limit]

    async def search_playlists(self, token: str, query: str, limit: int = 20) -> dict[str, Any]:
        """Search playlists matching ``query``.

        Returns:
            Raw Spotify search payload.

        Raises:
            AuthenticationAppError: If the token is rejected.
            SpotifyAppError: On transport or upstream errors.
        """
        response = await self._get(
            "/search",
            token,
            params={"q": query, "type": "playlist", "limit": limit},
        )
        self._raise_for_status(response, path="/search")
        return self._decode(response, path="/search")

    async def close(self) -> None:
        await self.http.aclose()
