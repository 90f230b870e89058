"""
Stores module for spot-linker.

Finds each Spotify track on the stores where it can be bought:
    - text: Title cleaning and tokenization
    - scoring: URL similarity heuristic
    - bandcamp: Bandcamp search page scraping
    - itunes: iTunes Search API lookup and itms:// deep links
    - matcher: Per-track cross-store matching on a thread pool
    - models: BandcampLinks, AppleLinks, MatchResult

Usage:
    from spot_linker.stores import CrossStoreMatcher

    matcher = CrossStoreMatcher.from_config(session, config.lookup)
    results = matcher.match_tracks(tracks, country="US")
"""

from spot_linker.stores.bandcamp import BandcampSearcher, build_search_url
from spot_linker.stores.itunes import ITunesSearcher, build_store_candidates
from spot_linker.stores.matcher import CrossStoreMatcher, match_tracks_parallel
from spot_linker.stores.models import AppleLinks, BandcampLinks, MatchResult
from spot_linker.stores.scoring import BANDCAMP, Storefront, similarity_score
from spot_linker.stores.text import clean_track_title, normalize_tokens

__all__ = [
    "BandcampSearcher",
    "build_search_url",
    "ITunesSearcher",
    "build_store_candidates",
    "CrossStoreMatcher",
    "match_tracks_parallel",
    "AppleLinks",
    "BandcampLinks",
    "MatchResult",
    "BANDCAMP",
    "Storefront",
    "similarity_score",
    "clean_track_title",
    "normalize_tokens",
]
