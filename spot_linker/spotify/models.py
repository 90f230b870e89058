"""
Data models for Spotify entities.

Design Decisions:
    - Dataclasses are frozen (immutable); a Track never changes after
      it leaves the enumerator
    - Only the fields the store lookups need are kept (title, artist)
    - Invalid API items produce None instead of raising, so one broken
      playlist entry never aborts enumeration

Usage:
    from spot_linker.spotify.models import Track

    track = Track.from_spotify_api(item["track"])
    if track is not None:
        print(f"{track.artist} - {track.title}")
"""

from dataclasses import dataclass
from typing import Any


# Separator used to join contributing artists
ARTIST_SEPARATOR = ", "


@dataclass(frozen=True)
class Track:
    """
    Immutable representation of a Spotify playlist track.

    Attributes:
        title: Track title as it appears on Spotify.
               Example: "Windowlicker - 2019 Remaster"

        artist: All contributing artist names joined with ", ",
                in the order Spotify lists them.
                Example: "Calvin Harris, Dua Lipa"

    Class Methods:
        from_spotify_api: Create Track from a Spotify track object.
    """

    title: str
    artist: str

    @classmethod
    def from_spotify_api(cls, track_data: dict[str, Any] | None) -> "Track | None":
        """
        Create a Track from the 'track' object of a playlist item.

        Args:
            track_data: Track object from the playlist items endpoint.
                        May be None for removed/unavailable tracks.

        Returns:
            Track, or None if track_data is missing, or if the title or
            the joined artist string is empty.

        Example:
            Track.from_spotify_api({
                "name": "Get Lucky",
                "artists": [{"name": "Daft Punk"}, {"name": "Pharrell Williams"}]
            })
            # Track(title="Get Lucky", artist="Daft Punk, Pharrell Williams")
        """
        if not isinstance(track_data, dict):
            return None

        title = track_data.get("name") or ""
        artists = track_data.get("artists") or []
        names = [
            a.get("name") for a in artists
            if isinstance(a, dict) and a.get("name")
        ]
        artist = ARTIST_SEPARATOR.join(names)

        if not title or not artist:
            return None

        return cls(title=title, artist=artist)
