"""Playlist search driven by a moodic and the listener's own taste."""

import logging
import random
from typing import Any

from moodic.adapters.spotify.client import SpotifyClient
from moodic.schemas.moodic import Moodic

logger = logging.getLogger(__name__)

MAX_QUERY_GENRES = 5
USER_GENRES_BLENDED = 2
PLAYLIST_SEARCH_LIMIT = 20


def blend_genres(
    moodic_genres: list[str],
    user_genres: list[str],
    rng: random.Random | None = None,
) -> list[str]:
    """Mix up to two of the user's genres into the moodic genres.

    Without user genres the moodic genres are returned unchanged. Otherwise the
    combined list is shuffled and cut to five entries.
    """
    if not user_genres:
        return list(moodic_genres)

    combined = [*moodic_genres, *user_genres[:USER_GENRES_BLENDED]]
    (rng or random).shuffle(combined)
    return combined[:MAX_QUERY_GENRES]


def build_search_query(moodic: Moodic, genres: list[str]) -> str:
    """``"<keywords> <genres> <tempo>"`` with list items joined by ", "."""
    return f"{', '.join(moodic.keywords)} {', '.join(genres)} {moodic.tempo}"


class PlaylistService:
    """Finds Spotify playlists for a moodic."""

    def __init__(self, spotify: SpotifyClient, rng: random.Random | None = None) -> None:
        self.spotify = spotify
        self.rng = rng

    async def search(self, token: str, moodic: Moodic) -> dict[str, Any]:
        """Search playlists for ``moodic`` on behalf of the token's owner.

        Raises:
            AuthenticationAppError: If Spotify rejects the token.
            SpotifyAppError: If the search fails upstream.
        """
        user_genres = await self.spotify.get_top_genres(token)
        genres = blend_genres(moodic.genres, user_genres, self.rng)
        query = build_search_query(moodic, genres)

        logger.info(
            "playlists.search",
            extra={"user_genre_count": len(user_genres), "query_genre_count": len(genres)},
        )
        return await self.spotify.search_playlists(token, query, limit=PLAYLIST_SEARCH_LIMIT)
