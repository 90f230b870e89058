"""
Playlist track enumeration for spot-linker.

Walks every page of a playlist's track listing and flattens it into an
ordered list of Track objects.

Workflow:
    1. Fetch the first page of playlist items (100 per page)
    2. Convert each item; skip removed tracks (item.track is null) and
       items without a title or artist
    3. Follow the page's 'next' cursor until it is empty
    4. Return tracks in playlist order (no dedup, no reordering)

Any failed page aborts enumeration with UpstreamFetchError; tracks
collected so far are discarded.
"""

from typing import Any

from spot_linker.core.logger import get_logger
from spot_linker.spotify.client import SpotifyClient
from spot_linker.spotify.models import Track

logger = get_logger(__name__)


class TrackEnumerator:
    """
    Collects the tracks of one playlist.

    Attributes:
        _client: Authenticated SpotifyClient.
    """

    def __init__(self, client: SpotifyClient) -> None:
        self._client = client

    def fetch_tracks(self, playlist_id: str) -> list[Track]:
        """
        Fetch all tracks of a playlist.

        Args:
            playlist_id: Canonical Spotify playlist ID.

        Returns:
            Ordered list of Track objects.

        Raises:
            UpstreamFetchError: If any page cannot be fetched.
        """
        logger.info(f"Fetching tracks for playlist: {playlist_id}")

        tracks: list[Track] = []
        skipped = 0
        pages = 0

        page: dict[str, Any] | None = self._client.playlist_items(playlist_id)
        while page:
            pages += 1
            for item in page.get("items") or []:
                track = self._parse_item(item)
                if track is None:
                    skipped += 1
                    continue
                tracks.append(track)
                logger.debug(f"Parsed: {track.artist} - {track.title}")

            page = self._client.next_page(page)

        if skipped > 0:
            logger.warning(f"Skipped {skipped} playlist items (removed, local or missing metadata)")

        logger.info(f"Found {len(tracks)} tracks across {pages} page(s)")
        return tracks

    @staticmethod
    def _parse_item(item: dict[str, Any] | None) -> Track | None:
        """Convert one playlist item, or None if it has no usable track."""
        if not isinstance(item, dict):
            return None
        return Track.from_spotify_api(item.get("track"))


def fetch_playlist_tracks(client: SpotifyClient, playlist_id: str) -> list[Track]:
    """
    Convenience wrapper around TrackEnumerator.fetch_tracks().

    Args:
        client: Authenticated SpotifyClient.
        playlist_id: Canonical Spotify playlist ID.

    Returns:
        Ordered list of Track objects.
    """
    return TrackEnumerator(client).fetch_tracks(playlist_id)
