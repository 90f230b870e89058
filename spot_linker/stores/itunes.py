"""
Apple Music / iTunes lookup for spot-linker.

Uses the public iTunes Search API (no auth):
    https://itunes.apple.com/search?term=X&media=music&entity=song&limit=5&country=US

Selection:
    The first result whose artistName contains the artist and whose
    trackName contains the cleaned title (case-insensitive) wins. If none
    qualifies the first result is used anyway and the links are marked
    not confident.

Deep links:
    Three legacy itms:// variants are returned, most specific first, so a
    client can try each until the iTunes Store app opens one. The public
    web URL is returned separately for browsers.
"""

from typing import Any

import requests

from spot_linker.core.exceptions import StoreLookupError
from spot_linker.core.logger import get_logger
from spot_linker.stores.models import AppleLinks
from spot_linker.stores.text import clean_track_title

logger = get_logger(__name__)


ITUNES_SEARCH_URL = "https://itunes.apple.com/search"
ITUNES_RESULT_LIMIT = 5
DEFAULT_STOREFRONT = "US"

_STORE_BASE = "itms://itunes.apple.com"


def build_store_candidates(track_id: Any, collection_id: Any) -> tuple[str, ...]:
    """
    Build iTunes Store deep links for a song.

    Args:
        track_id: iTunes trackId, or None.
        collection_id: iTunes collectionId (album), or None.

    Returns:
        Three links (album+track view, album by id, song view) when both
        IDs are known, one album link with only the collection, else ().
    """
    if track_id and collection_id:
        return (
            f"{_STORE_BASE}/WebObjects/MZStore.woa/wa/viewAlbum"
            f"?i={track_id}&id={collection_id}&uo=4&app=itunes",
            f"{_STORE_BASE}/album/id{collection_id}?i={track_id}&uo=4&app=itunes",
            f"{_STORE_BASE}/WebObjects/MZStore.woa/wa/viewSong"
            f"?i={track_id}&uo=4&app=itunes",
        )
    if collection_id:
        return (f"{_STORE_BASE}/album/id{collection_id}?uo=4&app=itunes",)
    return ()


def select_result(
    results: list[dict[str, Any]],
    title: str,
    artist: str
) -> tuple[dict[str, Any] | None, bool]:
    """
    Pick the result to link to.

    Returns:
        (result, confident). confident is True only for a result that
        contains both artist and title; (None, False) for no results.
    """
    artist_lower = artist.lower()
    title_lower = title.lower()

    for result in results:
        result_artist = (result.get("artistName") or "").lower()
        result_title = (result.get("trackName") or "").lower()
        if artist_lower in result_artist and title_lower in result_title:
            return result, True

    if results:
        return results[0], False
    return None, False


class ITunesSearcher:
    """
    Finds iTunes Store links for a Spotify track.

    Attributes:
        _session: Shared HTTP session (used read-only).
        _timeout: Request timeout in seconds.
    """

    def __init__(self, session: requests.Session, timeout: float = 10.0) -> None:
        self._session = session
        self._timeout = timeout

    def lookup(self, title: str, artist: str, country: str | None = None) -> AppleLinks:
        """
        Look up one track.

        Args:
            title: Raw Spotify title (cleaned here).
            artist: Artist string as produced by the enumerator.
            country: Two-letter storefront; DEFAULT_STOREFRONT when empty.

        Returns:
            AppleLinks; empty when there is no result or the search failed.
        """
        cleaned = clean_track_title(title)
        params = {
            "term": f"{cleaned} {artist}",
            "media": "music",
            "entity": "song",
            "limit": str(ITUNES_RESULT_LIMIT),
            "country": country or DEFAULT_STOREFRONT,
        }

        try:
            results = self._search(params)
        except StoreLookupError as e:
            logger.debug(f"iTunes lookup failed for {artist} - {title}: {e.message}")
            return AppleLinks.empty()

        best, confident = select_result(results, cleaned, artist)
        if best is None:
            logger.debug(f"No iTunes results for: {params['term']}")
            return AppleLinks.empty()

        if not confident:
            logger.debug(
                f"No iTunes result contains '{artist}' / '{cleaned}', "
                f"using first result: {best.get('artistName')} - {best.get('trackName')}"
            )

        return AppleLinks(
            store_candidates=build_store_candidates(
                best.get("trackId"),
                best.get("collectionId")
            ),
            web=best.get("trackViewUrl") or best.get("collectionViewUrl") or None,
            confident=confident
        )

    def _search(self, params: dict[str, str]) -> list[dict[str, Any]]:
        """
        Call the search endpoint and return its result list.

        Raises:
            StoreLookupError: On network failure, a non-200 response or a
                              body that is not the expected JSON object.
        """
        try:
            response = self._session.get(
                ITUNES_SEARCH_URL,
                params=params,
                timeout=self._timeout
            )
        except requests.RequestException as e:
            raise StoreLookupError(
                f"iTunes search request failed: {e}",
                store="itunes",
                details={"term": params["term"], "original_error": str(e)}
            ) from e

        if response.status_code != 200:
            raise StoreLookupError(
                f"iTunes search returned HTTP {response.status_code}",
                store="itunes",
                details={"term": params["term"], "http_status": response.status_code}
            )

        try:
            data = response.json()
        except ValueError as e:
            raise StoreLookupError(
                "iTunes search returned invalid JSON",
                store="itunes",
                details={"term": params["term"], "original_error": str(e)}
            ) from e

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            return []
        return [r for r in results if isinstance(r, dict)]
