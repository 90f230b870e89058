"""
Spotify module for spot-linker.

Handles everything on the Spotify side of the pipeline:
    - resolver: Playlist reference (short link, URI, URL) -> playlist ID
    - client: spotipy wrapper (token acquisition, paginated reads)
    - fetcher: Playlist track enumeration
    - models: Track dataclass

Usage:
    from spot_linker.spotify import SpotifyClient, resolve_playlist_id, fetch_playlist_tracks

    playlist_id = resolve_playlist_id(url, session)
    client = SpotifyClient.connect(client_id, client_secret)
    tracks = fetch_playlist_tracks(client, playlist_id)
"""

from spot_linker.spotify.client import SpotifyClient
from spot_linker.spotify.fetcher import TrackEnumerator, fetch_playlist_tracks
from spot_linker.spotify.models import Track
from spot_linker.spotify.resolver import expand_playlist_url, resolve_playlist_id

__all__ = [
    "SpotifyClient",
    "TrackEnumerator",
    "fetch_playlist_tracks",
    "Track",
    "expand_playlist_url",
    "resolve_playlist_id",
]
