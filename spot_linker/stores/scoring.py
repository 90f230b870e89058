"""
Similarity scoring of store result URLs.

Store search pages give us little more than a list of URLs, so candidates
are ranked by how much of the track's title and artist shows up in the URL
itself. The score is a hand-tuned linear heuristic: it is only meaningful
relative to other candidates for the same track.

Scoring Components (all applied, cumulative):
    +2  per primary-artist token found in the URL
    +1  per title token found in the URL
    -3  URL mentions remix/mix/cover/tribute/edit/karaoke
    -1  URL mentions live/concert
    +2  URL is a track page on the storefront
    +3  URL host is the artist's own storefront subdomain
"""

import re
from dataclasses import dataclass
from urllib.parse import urlparse

from spot_linker.stores.text import normalize_tokens


ARTIST_TOKEN_POINTS = 2
TITLE_TOKEN_POINTS = 1
ALTERNATE_VERSION_PENALTY = 3
LIVE_PENALTY = 1
TRACK_PAGE_BONUS = 2
ARTIST_SUBDOMAIN_BONUS = 3

ALTERNATE_VERSION_WORDS = re.compile(r"remix|mix|cover|tribute|edit|karaoke")
LIVE_WORDS = re.compile(r"live|concert")


@dataclass(frozen=True)
class Storefront:
    """
    URL conventions of a store that hosts artists on their own subdomain.

    Attributes:
        domain: Registrable domain, e.g. "bandcamp.com".
        track_marker: Regex matched against the lowercased URL to detect
                      a track page.
    """
    domain: str
    track_marker: re.Pattern

    def artist_host(self, slug: str) -> str:
        return f"{slug}.{self.domain}"


BANDCAMP = Storefront(
    domain="bandcamp.com",
    track_marker=re.compile(r"\.bandcamp\.com/track/"),
)


def similarity_score(
    title: str,
    artist: str,
    url: str,
    storefront: Storefront = BANDCAMP
) -> int:
    """
    Score a candidate URL against a track.

    Args:
        title: Cleaned track title (see clean_track_title()).
        artist: Artist string; only the first comma-separated name counts.
        url: Candidate result URL.
        storefront: URL conventions of the store the URL comes from.

    Returns:
        Integer score, higher is better.

    Example:
        similarity_score("Song", "Band", "https://band.bandcamp.com/track/song")
        # 2 (artist) + 1 (title) + 2 (track page) + 3 (subdomain) = 8
    """
    lowered = url.lower()
    artist_tokens = normalize_tokens(artist.split(",")[0])
    title_tokens = normalize_tokens(title)

    score = 0
    score += ARTIST_TOKEN_POINTS * sum(1 for token in artist_tokens if token in lowered)
    score += TITLE_TOKEN_POINTS * sum(1 for token in title_tokens if token in lowered)

    if ALTERNATE_VERSION_WORDS.search(lowered):
        score -= ALTERNATE_VERSION_PENALTY
    if LIVE_WORDS.search(lowered):
        score -= LIVE_PENALTY
    if storefront.track_marker.search(lowered):
        score += TRACK_PAGE_BONUS

    slug = "-".join(artist_tokens)
    if slug and (urlparse(lowered).hostname or "") == storefront.artist_host(slug):
        score += ARTIST_SUBDOMAIN_BONUS

    return score
