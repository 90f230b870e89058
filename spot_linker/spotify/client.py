"""
Spotify API client for spot-linker.

This module wraps the spotipy library for the two things the pipeline
needs from Spotify: an app access token and the paginated track listing
of a playlist.

Authentication:
    Client Credentials only (client_id and client_secret). This is
    enough for public playlists. The token is requested eagerly in
    connect() so that a credential problem fails the request up front
    instead of surfacing halfway through pagination.

Lifetime:
    One client per request. The token lives in a MemoryCacheHandler
    owned by the client, so nothing is written to disk and nothing is
    shared between requests.

Usage:
    from spot_linker.spotify.client import SpotifyClient

    client = SpotifyClient.connect(
        client_id="your_client_id",
        client_secret="your_client_secret",
        timeout=10.0
    )
    page = client.playlist_items("37i9dQZF1DXcBWIGoYBM5M")
    while page:
        ...
        page = client.next_page(page)
"""

from typing import Any

import requests
import spotipy
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from spot_linker.core.exceptions import SpotifyError, UpstreamFetchError
from spot_linker.core.logger import get_logger

logger = get_logger(__name__)


# Maximum page size of the playlist items endpoint
PLAYLIST_PAGE_LIMIT = 100


class SpotifyClient:
    """
    Spotify API client bound to one set of app credentials.

    Wraps spotipy.Spotify and converts its failures into SpotifyError /
    UpstreamFetchError with the HTTP status kept in details.

    Attributes:
        _spotify: The underlying spotipy.Spotify instance.

    Retries:
        spotipy is built with retries disabled. A failed call fails the
        request; there is no backoff anywhere in the pipeline.
    """

    def __init__(self, spotify_instance: spotipy.Spotify) -> None:
        """
        Wrap an already configured spotipy instance.

        Use connect() in application code; this constructor exists so
        tests can pass a mocked spotipy object.
        """
        self._spotify = spotify_instance

    @classmethod
    def connect(
        cls,
        client_id: str,
        client_secret: str,
        timeout: float = 10.0
    ) -> "SpotifyClient":
        """
        Create a client and acquire an app access token.

        Args:
            client_id: Spotify application client ID.
            client_secret: Spotify application client secret.
            timeout: Timeout in seconds for token and API requests.

        Returns:
            A ready SpotifyClient.

        Raises:
            SpotifyError: With is_auth_error=True if the token endpoint
                          rejects the credentials or cannot be reached.
        """
        auth_manager = SpotifyClientCredentials(
            client_id=client_id,
            client_secret=client_secret,
            cache_handler=MemoryCacheHandler(),
            requests_timeout=timeout
        )

        try:
            auth_manager.get_access_token(as_dict=False)
        except SpotifyOauthError as e:
            raise SpotifyError(
                f"Failed to get Spotify token: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e
        except requests.RequestException as e:
            raise SpotifyError(
                f"Failed to get Spotify token: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e

        logger.debug("Spotify app token acquired")

        spotify_instance = spotipy.Spotify(
            auth_manager=auth_manager,
            requests_timeout=timeout,
            retries=0,
            status_retries=0
        )
        return cls(spotify_instance)

    # =========================================================================
    # Playlist Operations
    # =========================================================================

    def playlist_items(
        self,
        playlist_id: str,
        limit: int = PLAYLIST_PAGE_LIMIT
    ) -> dict[str, Any]:
        """
        Get the first page of a playlist's tracks.

        Args:
            playlist_id: Canonical Spotify playlist ID.
            limit: Page size (max 100).

        Returns:
            Dictionary containing:
            - items: List of playlist track objects
            - next: URL for next page (or None)
            - total: Total number of items

        Raises:
            UpstreamFetchError: On any non-success response or network error.
        """
        return self._call(
            self._spotify.playlist_items,
            playlist_id,
            limit=min(limit, PLAYLIST_PAGE_LIMIT),
            additional_types=("track",),
            context={"playlist_id": playlist_id}
        )

    def next_page(self, page: dict[str, Any]) -> dict[str, Any] | None:
        """
        Follow a page's 'next' cursor.

        Args:
            page: A paging object previously returned by Spotify.

        Returns:
            The next page, or None if 'next' is empty or absent.

        Raises:
            UpstreamFetchError: On any non-success response or network error.
        """
        if not page.get("next"):
            return None
        return self._call(self._spotify.next, page, context={"url": page["next"]})

    def _call(self, func, *args, context: dict, **kwargs) -> dict[str, Any]:
        """
        Run a spotipy call and map its failures to UpstreamFetchError.

        A None/empty body is treated as a failure too: the caller expects
        a paging object.
        """
        try:
            result = func(*args, **kwargs)
        except spotipy.SpotifyException as e:
            raise UpstreamFetchError(
                f"Failed to fetch Spotify tracks: {e.msg}",
                details={**context, "http_status": e.http_status},
                is_rate_limit=e.http_status == 429,
                is_auth_error=e.http_status == 401
            ) from e
        except requests.RequestException as e:
            raise UpstreamFetchError(
                f"Failed to fetch Spotify tracks: {e}",
                details={**context, "original_error": str(e)}
            ) from e

        if not isinstance(result, dict):
            raise UpstreamFetchError(
                "Failed to fetch Spotify tracks: empty response",
                details=context
            )
        return result
