"""
spot-linker: Find where to buy the tracks of a Spotify playlist.

This package takes a Spotify playlist reference (short link, spotify: URI
or web URL) and annotates every track with purchase/listen links on
Bandcamp and the iTunes Store.

Architecture:
    The request runs as one pipeline:

    spotify/: Resolve and enumerate the playlist
        - Expand short links, parse URIs and URLs, fall back to oEmbed
        - Acquire an app token (client credentials)
        - Page through the playlist's tracks

    stores/: Match each track
        - Clean the title of version noise
        - Scrape Bandcamp search results and score candidate URLs
        - Query the iTunes Search API and build itms:// deep links
        - Fan out over a bounded thread pool

Modules:
    core/       - Configuration, logging, exceptions, progress bar
    spotify/    - Link resolution, Spotify client, track enumeration
    stores/     - Title normalization, scoring, Bandcamp, iTunes, matcher
    utils/      - CSV / JSON export
    service.py  - Request handler ({playlistUrl} -> {results} / {error})
    cli.py      - Command-line interface

Usage:
    Command Line:
        spot-links --url "https://open.spotify.com/playlist/..."
        spot-links --url "spotify:playlist:..." --country GB --csv links.csv

    Python API:
        from spot_linker import load_config, PlaylistLinkService

        config = load_config()
        with PlaylistLinkService(config) as service:
            body, status = service.handle_request({"playlistUrl": url, "country": "gb"})

Configuration:
    Optional config.yaml in the current directory:

        spotify:
          client_id: "your_client_id"
          client_secret: "your_client_secret"

        lookup:
          threads: 8
          timeout: 10
          country: "US"

        output:
          directory: null

    SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET (environment or .env)
    override the spotify section.

Dependencies:
    - spotipy: Spotify API client
    - requests: HTTP for link expansion, oEmbed, Bandcamp and iTunes
    - rich-click: CLI framework and colors
    - rich: Progress bar
    - tqdm: Progress-bar-safe console logging
    - pyyaml: Configuration file parsing
    - python-dotenv: .env loading
"""

__version__ = "0.1.0"
__author__ = "spot-linker"
__license__ = "MIT"

# Convenience imports for common usage
from spot_linker.core import (
    Config,
    ConfigError,
    SpotifyError,
    SpotLinkerError,
    StoreLookupError,
    UnresolvableLinkError,
    UpstreamFetchError,
    get_logger,
    load_config,
    setup_logging,
)
from spot_linker.service import PlaylistLinkService, link_playlist
from spot_linker.spotify import SpotifyClient, Track
from spot_linker.stores import CrossStoreMatcher, MatchResult

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "SpotLinkerError",
    "ConfigError",
    "UnresolvableLinkError",
    "SpotifyError",
    "UpstreamFetchError",
    "StoreLookupError",
    # Pipeline
    "PlaylistLinkService",
    "link_playlist",
    "SpotifyClient",
    "CrossStoreMatcher",
    # Models
    "Track",
    "MatchResult",
]
