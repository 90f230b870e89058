"""
Exception classes for spot-linker.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary, and the class itself tells the caller how bad the failure is.

Exception Hierarchy:
    SpotLinkerError (base)
        ConfigError - Configuration file / environment issues
        UnresolvableLinkError - Playlist reference could not be resolved to an ID
        SpotifyError - Spotify API issues (token, catalog)
            UpstreamFetchError - Playlist track listing failed
        StoreLookupError - A single Bandcamp/iTunes lookup failed

Severity:
    ConfigError, UnresolvableLinkError, SpotifyError and UpstreamFetchError
    abort the whole request. StoreLookupError is raised inside a store
    searcher and always converted to that store's fallback links before
    leaving the lookup.
"""


class SpotLinkerError(Exception):
    """
    Base exception for all spot-linker errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all spot-linker errors with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., URLs, status codes).

    Example:
        try:
            service.run(playlist_url)
        except SpotLinkerError as e:
            logger.error(f"Request failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'playlist_url': The raw playlist reference involved
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SpotLinkerError):
    """
    Raised when there's an issue with the configuration.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - Explicit config file path does not exist
        - config.yaml has invalid YAML syntax
        - Spotify credentials missing from both config.yaml and environment
        - Invalid field values (e.g., zero threads, three-letter country)

    Example:
        raise ConfigError(
            "'lookup.threads' must be a positive integer",
            details={'field': 'lookup.threads', 'value': 0}
        )
    """
    pass


class UnresolvableLinkError(SpotLinkerError):
    """
    Raised when a playlist reference cannot be turned into a playlist ID.

    This is a CRITICAL error for the current request: without an ID there
    is nothing to enumerate.

    Raised only after the whole fallback chain (URI, URL path, oEmbed
    probe) came back empty. Short-link expansion failures alone never
    raise; they fall through to the next strategy.

    Example:
        raise UnresolvableLinkError(
            "Could not parse playlist ID",
            details={'playlist_url': raw, 'expanded_url': expanded}
        )
    """
    pass


class SpotifyError(SpotLinkerError):
    """
    Raised when there's an issue with the Spotify API.

    Common causes:
        - Invalid credentials or token endpoint failure (CRITICAL)
        - Rate limiting
        - Playlist not found or private
        - Network connectivity issues

    Attributes:
        is_auth_error: True if this is an authentication error.
        is_rate_limit: True if Spotify answered with HTTP 429.

    Example:
        raise SpotifyError(
            "Spotify authentication failed: invalid_client",
            details={'original_error': str(e)},
            is_auth_error=True
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        """
        Initialize Spotify error with additional flags.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_auth_error: Set to True if this is an authentication failure.
            is_rate_limit: Set to True if this is a rate limit error.
                          No retry is attempted; the flag only improves the
                          message shown to the user.
        """
        super().__init__(message, details)
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit


class UpstreamFetchError(SpotifyError):
    """
    Raised when a page of the playlist track listing cannot be fetched.

    Any non-success status from the catalog API while paginating aborts
    the request; partially collected tracks are discarded.

    Example:
        raise UpstreamFetchError(
            "Failed to fetch Spotify tracks",
            details={'playlist_id': playlist_id, 'http_status': 404}
        )
    """
    pass


class StoreLookupError(SpotLinkerError):
    """
    Raised when a single store lookup (Bandcamp or iTunes) fails.

    This is a NON-CRITICAL error. Searchers raise it internally and turn
    it into their fallback result (search URL only, or no candidates), so
    it never reaches the matcher or the caller.

    Attributes:
        store: Name of the store that failed ("bandcamp" or "itunes").

    Example:
        raise StoreLookupError(
            "Bandcamp search returned HTTP 503",
            store="bandcamp",
            details={'url': search_url, 'http_status': 503}
        )
    """

    def __init__(self, message: str, store: str, details: dict | None = None) -> None:
        super().__init__(message, details)
        self.store = store
