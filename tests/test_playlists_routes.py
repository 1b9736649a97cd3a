"""Tests for GET /playlists (bearer token, moodic parsing, rate limit)."""

import json
from typing import Iterator
from urllib.parse import quote

import httpx
import pytest
from fastapi.testclient import TestClient

from moodic.adapters.spotify.client import SpotifyClient
from moodic.api.dependencies import get_spotify_client
from moodic.main import app

MOODIC = {
    "genres": ["lo-fi", "jazz"],
    "mood": "calm",
    "keywords": ["study", "focus"],
    "tempo": "slow",
}

SEARCH_PAYLOAD = {"playlists": {"items": [{"id": "p1", "name": "Rainy Lo-Fi"}], "total": 1}}


class SpotifyStub:
    """Records requests and answers like the Spotify Web API."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.search_status = 200
        self.search_html = False
        self.top_artists_status = 200
        self.top_artists_html = False
        self.me_status = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/me/top/artists"):
            if self.top_artists_status != 200:
                return httpx.Response(self.top_artists_status)
            if self.top_artists_html:
                return httpx.Response(200, text="<html>gateway</html>")
            return httpx.Response(200, json={"items": [{"genres": ["bossa nova", "mpb"]}]})
        if path.endswith("/search"):
            if self.search_status != 200:
                return httpx.Response(self.search_status, json={"error": {"status": self.search_status}})
            if self.search_html:
                return httpx.Response(200, text="<html>gateway</html>")
            return httpx.Response(200, json=SEARCH_PAYLOAD)
        if path.endswith("/me"):
            if self.me_status != 200:
                return httpx.Response(self.me_status, json={"error": {"status": self.me_status}})
            return httpx.Response(200, json={"id": "listener", "display_name": "Listener"})
        return httpx.Response(404)

    def search_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/search")]


@pytest.fixture
def spotify_stub() -> SpotifyStub:
    return SpotifyStub()


@pytest.fixture
def client(spotify_stub: SpotifyStub) -> Iterator[TestClient]:
    spotify = SpotifyClient(
        client_id="cid",
        client_secret="secret",
        redirect_uri="http://localhost:3000/callback",
        auth_url="https://accounts.example/authorize",
        token_url="https://accounts.example/api/token",
        api_base="https://api.example/v1",
        scopes="user-top-read",
        http=httpx.AsyncClient(transport=httpx.MockTransport(spotify_stub)),
    )
    app.dependency_overrides[get_spotify_client] = lambda: spotify
    yield TestClient(app)
    app.dependency_overrides.clear()


def _get(client: TestClient, moodic: dict | str | None = MOODIC, token: str | None = "user-token", ip: str = "abc"):
    headers = {"x-real-ip": ip}
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"
    params = {}
    if moodic is not None:
        params["moodic"] = moodic if isinstance(moodic, str) else json.dumps(moodic)
    return client.get("/playlists", params=params, headers=headers)


class TestPlaylists:
    def test_returns_spotify_search_payload(self, client: TestClient, spotify_stub: SpotifyStub) -> None:
        response = _get(client)

        assert response.status_code == 200
        assert response.json() == SEARCH_PAYLOAD
        search = spotify_stub.search_requests()[0]
        assert search.url.params["type"] == "playlist"
        assert search.url.params["limit"] == "20"
        assert search.headers["Authorization"] == "Bearer user-token"
        assert "study, focus" in search.url.params["q"]
        assert search.url.params["q"].endswith(" slow")

    def test_accepts_double_encoded_moodic(self, client: TestClient) -> None:
        response = _get(client, moodic=quote(json.dumps(MOODIC)))

        assert response.status_code == 200

    def test_missing_bearer_token_returns_401(self, client: TestClient) -> None:
        response = _get(client, token=None)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "missing_bearer_token"

    def test_non_bearer_authorization_returns_401(self, client: TestClient) -> None:
        response = client.get(
            "/playlists",
            params={"moodic": json.dumps(MOODIC)},
            headers={"Authorization": "Basic abc"},
        )

        assert response.status_code == 401

    def test_missing_moodic_returns_400(self, client: TestClient) -> None:
        response = _get(client, moodic=None)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "moodic_required"

    @pytest.mark.parametrize(
        "moodic",
        ["not json", json.dumps({"genres": [], "mood": "x", "keywords": ["a"], "tempo": "slow"})],
    )
    def test_invalid_moodic_returns_400(self, client: TestClient, moodic: str) -> None:
        response = _get(client, moodic=moodic)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "moodic_invalid"

    def test_search_failure_returns_502(self, client: TestClient, spotify_stub: SpotifyStub) -> None:
        spotify_stub.search_status = 500

        response = _get(client)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "spotify_api_error"

    def test_expired_token_on_search_returns_401(self, client: TestClient, spotify_stub: SpotifyStub) -> None:
        spotify_stub.search_status = 401

        assert _get(client).status_code == 401

    def test_top_artists_failure_still_searches(self, client: TestClient, spotify_stub: SpotifyStub) -> None:
        spotify_stub.top_artists_status = 403

        response = _get(client)

        assert response.status_code == 200
        query = spotify_stub.search_requests()[0].url.params["q"]
        assert query == "study, focus lo-fi, jazz slow"

    def test_malformed_top_artists_body_still_searches(
        self, client: TestClient, spotify_stub: SpotifyStub
    ) -> None:
        spotify_stub.top_artists_html = True

        response = _get(client)

        assert response.status_code == 200
        assert spotify_stub.search_requests()[0].url.params["q"] == "study, focus lo-fi, jazz slow"

    def test_malformed_search_body_returns_502(
        self, client: TestClient, spotify_stub: SpotifyStub
    ) -> None:
        spotify_stub.search_html = True

        response = _get(client)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "spotify_invalid_response"


class TestPlaylistsRateLimit:
    def test_twenty_per_window_then_429(self, client: TestClient) -> None:
        statuses = [_get(client).status_code for _ in range(20)]
        blocked = _get(client)

        assert statuses == [200] * 20
        assert blocked.status_code == 429
        assert blocked.headers["X-RateLimit-Limit"] == "20"
        assert "Retry-After" in blocked.headers

    def test_limit_is_checked_before_authentication(self, client: TestClient) -> None:
        for _ in range(20):
            _get(client, token=None)

        assert _get(client).status_code == 429

    def test_independent_from_mood_quota(self, client: TestClient) -> None:
        response = _get(client)

        assert response.headers["X-RateLimit-Remaining"] == "19"
