"""Spotify adapter layer."""

from moodic.adapters.spotify.client import SpotifyClient
from moodic.adapters.spotify.factory import create_spotify_client

__all__ = ["SpotifyClient", "create_spotify_client"]
