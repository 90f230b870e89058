"""
Cross-store matching for spot-linker.

Runs the iTunes and Bandcamp lookups for every playlist track and pairs
the outcomes into MatchResult rows.

Isolation:
    Each sub-lookup is wrapped on its own. An unexpected exception in the
    iTunes lookup never costs the track its Bandcamp links and vice versa;
    the failing side is replaced by its fallback value and a warning is
    logged. match_tracks() therefore always returns one row per track.

Concurrency:
    Tracks are processed on a bounded ThreadPoolExecutor. Workers share the
    searchers (and their requests.Session) read-only and only ever build
    their own track's result.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable

import requests

from spot_linker.core.config import DEFAULT_COUNTRY, DEFAULT_THREADS, LookupConfig
from spot_linker.core.logger import get_logger, log_unmatched_track
from spot_linker.spotify.models import Track
from spot_linker.stores.bandcamp import BandcampSearcher, build_search_url
from spot_linker.stores.itunes import ITunesSearcher
from spot_linker.stores.models import AppleLinks, BandcampLinks, MatchResult
from spot_linker.stores.text import clean_track_title

logger = get_logger(__name__)


ResultCallback = Callable[[MatchResult], None]


class CrossStoreMatcher:
    """
    Matches Spotify tracks against iTunes and Bandcamp.

    Attributes:
        _itunes: iTunes searcher.
        _bandcamp: Bandcamp searcher.
        _threads: Maximum number of tracks looked up at once.

    Example:
        matcher = CrossStoreMatcher.from_config(session, config.lookup)
        results = matcher.match_tracks(tracks, country="GB")
    """

    def __init__(
        self,
        itunes: ITunesSearcher,
        bandcamp: BandcampSearcher,
        threads: int = DEFAULT_THREADS
    ) -> None:
        if threads < 1:
            raise ValueError(f"threads must be positive, got {threads}")
        self._itunes = itunes
        self._bandcamp = bandcamp
        self._threads = threads

    @classmethod
    def from_config(
        cls,
        session: requests.Session,
        lookup_config: LookupConfig
    ) -> "CrossStoreMatcher":
        """Build a matcher whose searchers share one session and timeout."""
        return cls(
            itunes=ITunesSearcher(session, timeout=lookup_config.timeout),
            bandcamp=BandcampSearcher(session, timeout=lookup_config.timeout),
            threads=lookup_config.threads
        )

    def match_track(self, track: Track, country: str = DEFAULT_COUNTRY) -> MatchResult:
        """
        Look up one track on both stores.

        Args:
            track: Track to look up.
            country: iTunes storefront.

        Returns:
            MatchResult. Never raises for lookup failures.
        """
        try:
            apple = self._itunes.lookup(track.title, track.artist, country)
        except Exception as e:
            logger.warning(f"iTunes lookup crashed for {track.artist} - {track.title}: {e}")
            apple = AppleLinks.empty()

        try:
            bandcamp = self._bandcamp.lookup(track.title, track.artist)
        except Exception as e:
            logger.warning(f"Bandcamp lookup crashed for {track.artist} - {track.title}: {e}")
            bandcamp = BandcampLinks.fallback(self._fallback_search_url(track))

        if not bandcamp.direct:
            log_unmatched_track(logger, track.title, track.artist, bandcamp.search)

        return MatchResult(track=track, apple=apple, bandcamp=bandcamp)

    def match_tracks(
        self,
        tracks: list[Track],
        country: str = DEFAULT_COUNTRY,
        on_result: ResultCallback | None = None
    ) -> list[MatchResult]:
        """
        Look up multiple tracks in parallel.

        Args:
            tracks: Tracks in playlist order.
            country: iTunes storefront.
            on_result: Optional callback invoked (from the collecting
                       thread) once per finished track, in completion order.

        Returns:
            One MatchResult per input track, in input order.
        """
        if not tracks:
            return []

        # Keyed by position: a playlist may list the same track twice
        results_map: dict[int, MatchResult] = {}

        with ThreadPoolExecutor(max_workers=min(self._threads, len(tracks))) as executor:
            future_to_index = {
                executor.submit(self.match_track, track, country): index
                for index, track in enumerate(tracks)
            }

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                track = tracks[index]

                try:
                    result = future.result()
                except Exception as e:
                    logger.error(f"Error matching {track.artist} - {track.title}: {e}")
                    result = MatchResult(
                        track=track,
                        apple=AppleLinks.empty(),
                        bandcamp=BandcampLinks.fallback(self._fallback_search_url(track))
                    )

                results_map[index] = result
                if on_result is not None:
                    on_result(result)

        direct = sum(1 for r in results_map.values() if r.bandcamp.direct)
        confident = sum(1 for r in results_map.values() if r.apple.confident)
        logger.info(
            f"Matched {len(tracks)} tracks: {direct} Bandcamp direct, "
            f"{confident} confident Apple matches"
        )

        return [results_map[index] for index in range(len(tracks))]

    @staticmethod
    def _fallback_search_url(track: Track) -> str:
        query = f"{track.artist} {clean_track_title(track.title)}".strip()
        return build_search_url(query)


def match_tracks_parallel(
    tracks: list[Track],
    session: requests.Session,
    lookup_config: LookupConfig,
    country: str | None = None,
    on_result: ResultCallback | None = None
) -> list[MatchResult]:
    """
    Convenience function to match tracks with a throwaway matcher.

    Args:
        tracks: Tracks in playlist order.
        session: HTTP session for the store requests.
        lookup_config: Threads, timeout and default country.
        country: Storefront override; lookup_config.country when None.
        on_result: Optional per-track callback.

    Returns:
        One MatchResult per track, in order.
    """
    matcher = CrossStoreMatcher.from_config(session, lookup_config)
    return matcher.match_tracks(
        tracks,
        country=country or lookup_config.country,
        on_result=on_result
    )
