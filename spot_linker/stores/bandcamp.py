"""
Bandcamp lookup for spot-linker.

Bandcamp has no public search API, so the search results page is fetched
as HTML and every track-page URL in it is treated as a candidate.

Matching Algorithm:
    1. Build query "<artist> <cleaned title>"
    2. GET https://bandcamp.com/search?q=<query>&item_type=t
    3. Extract https://<sub>.bandcamp.com/track/<slug> URLs, dedupe
    4. Score each with similarity_score(); keep the first maximum
    5. Direct link only if score >= BANDCAMP_MIN_SCORE

The search URL is returned in every case, so the user always has
somewhere to click. Failures never propagate out of lookup().
"""

import re
from urllib.parse import quote

import requests

from spot_linker.core.exceptions import StoreLookupError
from spot_linker.core.logger import get_logger
from spot_linker.stores.models import BandcampLinks
from spot_linker.stores.scoring import BANDCAMP, similarity_score
from spot_linker.stores.text import clean_track_title

logger = get_logger(__name__)


BANDCAMP_SEARCH_URL = "https://bandcamp.com/search"

# Minimum similarity score for a candidate to be returned as a direct link
BANDCAMP_MIN_SCORE = 6

TRACK_URL_PATTERN = re.compile(
    r"https?://[a-z0-9-]+\.bandcamp\.com/track/[a-z0-9-]+",
    re.IGNORECASE
)

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0",
    "Accept": "text/html",
}


def build_search_url(query: str) -> str:
    """
    Build the Bandcamp track search URL for a query.

    Example:
        build_search_url("Band Song")
        # "https://bandcamp.com/search?q=Band%20Song&item_type=t"
    """
    return f"{BANDCAMP_SEARCH_URL}?q={quote(query, safe=_URI_COMPONENT_SAFE)}&item_type=t"


def extract_track_urls(html: str) -> list[str]:
    """Return distinct track-page URLs in order of first appearance."""
    return list(dict.fromkeys(TRACK_URL_PATTERN.findall(html)))


def pick_best_candidate(
    candidates: list[str],
    title: str,
    artist: str
) -> tuple[str, int] | None:
    """
    Score candidates and return the best (url, score).

    Ties go to the earlier candidate, i.e. Bandcamp's own ranking.
    Returns None for an empty list.
    """
    best: tuple[str, int] | None = None
    for url in candidates:
        score = similarity_score(title, artist, url, BANDCAMP)
        if best is None or score > best[1]:
            best = (url, score)
    return best


class BandcampSearcher:
    """
    Finds a Bandcamp track page for a Spotify track.

    Attributes:
        _session: Shared HTTP session (used read-only, thread-safe for GETs).
        _timeout: Request timeout in seconds.
        _min_score: Confidence threshold for a direct link.
    """

    def __init__(
        self,
        session: requests.Session,
        timeout: float = 10.0,
        min_score: int = BANDCAMP_MIN_SCORE
    ) -> None:
        self._session = session
        self._timeout = timeout
        self._min_score = min_score

    def lookup(self, title: str, artist: str) -> BandcampLinks:
        """
        Look up one track.

        Args:
            title: Raw Spotify title (cleaned here).
            artist: Artist string as produced by the enumerator.

        Returns:
            BandcampLinks; search is always set, direct only when confident.
        """
        cleaned = clean_track_title(title)
        query = f"{artist} {cleaned}".strip()
        search_url = build_search_url(query)

        try:
            candidates = self._search(search_url)
        except StoreLookupError as e:
            logger.debug(f"Bandcamp lookup failed for {artist} - {title}: {e.message}")
            return BandcampLinks.fallback(search_url)

        best = pick_best_candidate(candidates, cleaned, artist)
        if best is None:
            logger.debug(f"No Bandcamp candidates for: {query}")
            return BandcampLinks.fallback(search_url)

        best_url, best_score = best
        if best_score >= self._min_score:
            logger.debug(f"Bandcamp match: {best_url} (score: {best_score})")
            return BandcampLinks(search=search_url, direct=best_url, score=best_score)

        logger.debug(
            f"Best Bandcamp candidate below threshold: {best_url} "
            f"(score: {best_score} < {self._min_score})"
        )
        return BandcampLinks(search=search_url, score=best_score)

    def _search(self, search_url: str) -> list[str]:
        """
        Fetch the search page and return the candidate track URLs.

        Raises:
            StoreLookupError: On network failure or a non-200 response.
        """
        try:
            response = self._session.get(
                search_url,
                headers=REQUEST_HEADERS,
                timeout=self._timeout
            )
        except requests.RequestException as e:
            raise StoreLookupError(
                f"Bandcamp search request failed: {e}",
                store="bandcamp",
                details={"url": search_url, "original_error": str(e)}
            ) from e

        if response.status_code != 200:
            raise StoreLookupError(
                f"Bandcamp search returned HTTP {response.status_code}",
                store="bandcamp",
                details={"url": search_url, "http_status": response.status_code}
            )

        return extract_track_urls(response.text or "")
