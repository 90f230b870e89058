"""
Data models for store lookup results.

BandcampLinks and AppleLinks are what each searcher returns; MatchResult
pairs them with the Spotify track and renders the response row.

Design:
    - Frozen dataclasses; a result is built once per track
    - Every model has a fallback constructor so failure paths build the
      same shape as success paths
"""

from dataclasses import dataclass
from typing import Any

from spot_linker.spotify.models import Track


@dataclass(frozen=True)
class BandcampLinks:
    """
    Bandcamp lookup outcome.

    Attributes:
        search: Bandcamp search URL for the track. Always present.
        direct: Track page URL when the best candidate reached the
                confidence threshold, else None.
        score: Score of the best candidate, None if there were none
               or the search failed.
    """
    search: str
    direct: str | None = None
    score: int | None = None

    @classmethod
    def fallback(cls, search_url: str) -> "BandcampLinks":
        """Search link only."""
        return cls(search=search_url)


@dataclass(frozen=True)
class AppleLinks:
    """
    iTunes lookup outcome.

    Attributes:
        store_candidates: itms:// deep links, most specific first.
                          A client tries them in order.
        web: Public web page of the song (or album), or None.
        confident: True if the chosen result contained both the artist and
                   the cleaned title. False for a first-result guess or no
                   result at all.
    """
    store_candidates: tuple[str, ...] = ()
    web: str | None = None
    confident: bool = False

    @classmethod
    def empty(cls) -> "AppleLinks":
        """No result."""
        return cls()


@dataclass(frozen=True)
class MatchResult:
    """
    Links for one playlist track.

    Attributes:
        track: The Spotify track.
        apple: iTunes lookup outcome.
        bandcamp: Bandcamp lookup outcome.

    Example:
        result.to_dict()
        # {
        #     "title": "Song", "artist": "Band",
        #     "links": {
        #         "appleStoreCandidates": [...],
        #         "appleWeb": "https://music.apple.com/...",
        #         "bandcamp": None,
        #         "bandcampSearch": "https://bandcamp.com/search?q=Band%20Song&item_type=t"
        #     }
        # }
    """
    track: Track
    apple: AppleLinks
    bandcamp: BandcampLinks

    def to_dict(self) -> dict[str, Any]:
        """Render the response row."""
        return {
            "title": self.track.title,
            "artist": self.track.artist,
            "links": {
                "appleStoreCandidates": list(self.apple.store_candidates),
                "appleWeb": self.apple.web,
                "bandcamp": self.bandcamp.direct,
                "bandcampSearch": self.bandcamp.search,
            },
        }
