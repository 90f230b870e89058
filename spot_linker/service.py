"""
Playlist link service for spot-linker.

The request action of the application: takes a playlist reference and
returns every track with its store links. Framework-agnostic; any HTTP
layer can call handle_request() with the decoded JSON body and send back
the returned (body, status) pair.

Pipeline (one request):
    1. Acquire a Spotify app token (SpotifyClient.connect)
    2. Resolve the playlist reference to a playlist ID
    3. Enumerate the playlist's tracks
    4. Match every track on iTunes and Bandcamp (bounded thread pool)

Steps 1-3 are fatal: any failure aborts the request and no partial
results are returned. Step 4 never fails; a track whose lookups fail
still gets a row with its Bandcamp search link.

Request / response contract:
    request:  {"playlistUrl": str, "country": str (optional)}
    200:      {"results": [MatchResult.to_dict(), ...]}
    400:      {"error": "playlistUrl required"}
    500:      {"error": <message>}
"""

from typing import Any

import requests

from spot_linker.core.config import Config, normalize_country
from spot_linker.core.exceptions import ConfigError, SpotLinkerError
from spot_linker.core.logger import get_logger
from spot_linker.spotify.client import SpotifyClient
from spot_linker.spotify.fetcher import fetch_playlist_tracks
from spot_linker.spotify.models import Track
from spot_linker.spotify.resolver import resolve_playlist_id
from spot_linker.stores.matcher import CrossStoreMatcher, ResultCallback
from spot_linker.stores.models import MatchResult

logger = get_logger(__name__)


HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_INTERNAL_ERROR = 500

MISSING_URL_MESSAGE = "playlistUrl required"


class PlaylistLinkService:
    """
    Runs the full playlist -> store links pipeline.

    Attributes:
        _config: Application configuration.
        _session: HTTP session for resolver and store requests. Created
                  (and closed by close()) when not supplied.

    Example:
        with PlaylistLinkService(config) as service:
            body, status = service.handle_request({"playlistUrl": url})
    """

    def __init__(self, config: Config, session: requests.Session | None = None) -> None:
        self._config = config
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()

    def __enter__(self) -> "PlaylistLinkService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP session if this service created it."""
        if self._owns_session:
            self._session.close()

    def run(
        self,
        playlist_url: str,
        country: str | None = None,
        on_result: ResultCallback | None = None
    ) -> list[MatchResult]:
        """
        Resolve a playlist and match all of its tracks.

        Args:
            playlist_url: Short link, spotify: URI or web URL.
            country: iTunes storefront; the configured default when None.
            on_result: Optional per-track callback passed to the matcher.

        Returns:
            One MatchResult per playlist track, in playlist order.

        Raises:
            ConfigError: If country is not a two-letter code.
            SpotifyError: If the token cannot be acquired.
            UnresolvableLinkError: If no playlist ID can be derived.
            UpstreamFetchError: If a page of the track listing fails.
        """
        storefront = normalize_country(country) if country else self._config.lookup.country
        tracks = self.fetch_tracks(playlist_url)
        return self.match(tracks, storefront, on_result)

    def fetch_tracks(self, playlist_url: str) -> list[Track]:
        """
        Run the fatal half of the pipeline: token, resolution, enumeration.

        Raises:
            SpotifyError: If the token cannot be acquired.
            UnresolvableLinkError: If no playlist ID can be derived.
            UpstreamFetchError: If a page of the track listing fails.
        """
        timeout = self._config.lookup.timeout

        client = SpotifyClient.connect(
            self._config.spotify.client_id,
            self._config.spotify.client_secret,
            timeout=timeout
        )

        playlist_id = resolve_playlist_id(playlist_url, self._session, timeout)
        logger.info(f"Resolved playlist ID: {playlist_id}")

        return fetch_playlist_tracks(client, playlist_id)

    def match(
        self,
        tracks: list[Track],
        country: str,
        on_result: ResultCallback | None = None
    ) -> list[MatchResult]:
        """Look up tracks on both stores. Never raises for lookup failures."""
        matcher = CrossStoreMatcher.from_config(self._session, self._config.lookup)
        return matcher.match_tracks(tracks, country=country, on_result=on_result)

    def handle_request(self, payload: Any) -> tuple[dict[str, Any], int]:
        """
        Handle one decoded request body.

        Args:
            payload: Decoded JSON body, expected {"playlistUrl", "country"?}.

        Returns:
            (response_body, http_status).
        """
        if not isinstance(payload, dict):
            return {"error": MISSING_URL_MESSAGE}, HTTP_BAD_REQUEST

        playlist_url = payload.get("playlistUrl")
        if not isinstance(playlist_url, str) or not playlist_url.strip():
            return {"error": MISSING_URL_MESSAGE}, HTTP_BAD_REQUEST

        country = payload.get("country") or None
        if country is not None:
            try:
                country = normalize_country(country)
            except ConfigError as e:
                return {"error": e.message}, HTTP_BAD_REQUEST

        try:
            results = self.run(playlist_url, country)
        except SpotLinkerError as e:
            logger.error(f"Request failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
            return {"error": e.message}, HTTP_INTERNAL_ERROR
        except Exception as e:
            logger.exception(f"Unexpected error handling request: {e}")
            return {"error": str(e) or type(e).__name__}, HTTP_INTERNAL_ERROR

        return {"results": [result.to_dict() for result in results]}, HTTP_OK


def link_playlist(
    playlist_url: str,
    config: Config,
    country: str | None = None
) -> list[MatchResult]:
    """
    Convenience function to run one request with a throwaway service.

    Example:
        results = link_playlist("spotify:playlist:ABC123", load_config(), "GB")
    """
    with PlaylistLinkService(config) as service:
        return service.run(playlist_url, country)
