"""
Playlist link resolution for spot-linker.

Turns whatever the user pasted into the canonical playlist ID used by the
Spotify Web API. Accepted shapes:

    spotify:playlist:37i9dQZF1DXcBWIGoYBM5M
    https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc
    https://open.spotify.com/intl-de/playlist/37i9dQZF1DXcBWIGoYBM5M
    https://open.spotify.com/user/someone/playlist/37i9dQZF1DXcBWIGoYBM5M
    https://spotify.link/AbCdEf            (short link, expanded first)

Resolution is two steps:

    1. expand_playlist_url(): short links are expanded through a waterfall
       (HEAD Location -> GET Location -> HTML scrape). Every step is
       fail-soft: if nothing works the input comes back unchanged.

    2. resolve_playlist_id(): an ordered list of extractors, each returning
       an ID or None. The first non-None wins. Only when all of them come
       back empty is UnresolvableLinkError raised.

Short-link hosts change redirect mechanics (302, meta refresh, JS) without
notice, so no single step is allowed to be load-bearing.
"""

import html
import re
from typing import Callable
from urllib.parse import urljoin, urlparse

import requests

from spot_linker.core.exceptions import UnresolvableLinkError
from spot_linker.core.logger import get_logger

logger = get_logger(__name__)


# Short-link hosts that must be expanded before an ID can be read
SHORT_LINK_HOSTS = frozenset({
    "spotify.link",
    "spoti.fi",
    "link.tospotify.com",
    "spotify.app.link",
})

OEMBED_URL = "https://open.spotify.com/oembed"

# Some shorteners only serve the redirect page to browsers
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

NATIVE_URI_PATTERN = re.compile(r"^spotify:playlist:([a-z0-9]+)$", re.IGNORECASE)
URI_PREFIX_PATTERN = re.compile(r"^spotify:playlist:([a-z0-9]+)", re.IGNORECASE)
PLAYLIST_PATH_PATTERN = re.compile(r"/playlist/([a-z0-9]+)", re.IGNORECASE)
EMBED_PATH_PATTERN = re.compile(r"/embed/playlist/([a-z0-9]+)", re.IGNORECASE)
EMBEDDED_URI_PATTERN = re.compile(r"spotify:playlist:([a-z0-9]+)", re.IGNORECASE)

# Redirect targets hidden in a short-link landing page, tried in this order
META_REFRESH_PATTERN = re.compile(
    r"<meta[^>]+http-equiv=[\"']?refresh[\"']?[^>]*url=([^\"'>\s]+)",
    re.IGNORECASE
)
JS_REDIRECT_PATTERN = re.compile(
    r"window\.location\.href\s*=\s*[\"']([^\"']+)[\"']",
    re.IGNORECASE
)
BARE_SPOTIFY_URL_PATTERN = re.compile(
    r"https?://open\.spotify\.com/[^\s\"'<>]+",
    re.IGNORECASE
)
HTML_REDIRECT_PATTERNS = (
    META_REFRESH_PATTERN,
    JS_REDIRECT_PATTERN,
    BARE_SPOTIFY_URL_PATTERN,
)


def _is_short_link_host(host: str) -> bool:
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host in SHORT_LINK_HOSTS


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


# =============================================================================
# Short-link expansion
# =============================================================================

def _location_from_head(url: str, session: requests.Session, timeout: float) -> str | None:
    response = session.head(url, allow_redirects=False, timeout=timeout)
    location = response.headers.get("Location")
    return urljoin(url, location) if location else None


def _location_from_page(url: str, session: requests.Session, timeout: float) -> str | None:
    """
    GET the short link without following redirects.

    Uses the Location header if present, otherwise scans the body for a
    meta refresh, a JS redirect, or any open.spotify.com URL.
    """
    response = session.get(
        url,
        allow_redirects=False,
        headers={"User-Agent": BROWSER_USER_AGENT, "Accept": "text/html"},
        timeout=timeout
    )
    location = response.headers.get("Location")
    if location:
        return urljoin(url, location)

    body = response.text or ""
    for pattern in HTML_REDIRECT_PATTERNS:
        match = pattern.search(body)
        if match:
            found = match.group(1) if pattern.groups else match.group(0)
            return html.unescape(found)
    return None


def expand_playlist_url(
    raw: str,
    session: requests.Session,
    timeout: float = 10.0
) -> str:
    """
    Expand a short link into its target URL.

    Args:
        raw: Whatever the user supplied.
        session: HTTP session used for the expansion requests.
        timeout: Per-request timeout in seconds.

    Returns:
        The expanded URL for short links, otherwise the input unchanged.
        Never raises for network problems; callers must still validate
        the result.

    Behavior:
        1. spotify:playlist:ID -> returned as-is, no network call
        2. Not an http(s) URL -> returned as-is
        3. Host not a short-link host -> returned as-is
        4. HEAD Location, then GET Location / HTML scan; first hit wins
        5. Nothing found or a request raised -> returned as-is
    """
    value = raw.strip()

    if NATIVE_URI_PATTERN.match(value):
        return value

    if not _is_http_url(value):
        return value

    if not _is_short_link_host(urlparse(value).hostname or ""):
        return value

    logger.debug(f"Expanding short link: {value}")

    try:
        for step in (_location_from_head, _location_from_page):
            expanded = step(value, session, timeout)
            if expanded:
                logger.debug(f"Short link expanded via {step.__name__}: {expanded}")
                return expanded
    except requests.RequestException as e:
        logger.debug(f"Short link expansion failed for {value}: {e}")
        return value

    logger.debug(f"Short link could not be expanded: {value}")
    return value


# =============================================================================
# ID extraction
# =============================================================================

def id_from_uri(value: str, session: requests.Session, timeout: float) -> str | None:
    match = URI_PREFIX_PATTERN.match(value)
    return match.group(1) if match else None


def id_from_path(value: str, session: requests.Session, timeout: float) -> str | None:
    if not _is_http_url(value):
        return None
    match = PLAYLIST_PATH_PATTERN.search(urlparse(value).path)
    return match.group(1) if match else None


def id_from_oembed(value: str, session: requests.Session, timeout: float) -> str | None:
    """
    Ask Spotify's oEmbed endpoint about the URL and read the ID from
    either the embed iframe path or an embedded spotify:playlist: URI.
    """
    if not _is_http_url(value):
        return None

    try:
        response = session.get(OEMBED_URL, params={"url": value}, timeout=timeout)
    except requests.RequestException as e:
        logger.debug(f"oEmbed probe failed for {value}: {e}")
        return None

    if response.status_code != 200:
        logger.debug(f"oEmbed probe returned HTTP {response.status_code} for {value}")
        return None

    body = response.text or ""
    for pattern in (EMBED_PATH_PATTERN, EMBEDDED_URI_PATTERN):
        match = pattern.search(body)
        if match:
            return match.group(1)
    return None


# Tried in order; each returns an ID or None
ID_EXTRACTORS: tuple[Callable[[str, requests.Session, float], str | None], ...] = (
    id_from_uri,
    id_from_path,
    id_from_oembed,
)


def resolve_playlist_id(
    raw: str,
    session: requests.Session,
    timeout: float = 10.0
) -> str:
    """
    Resolve any supported playlist reference to its canonical ID.

    Args:
        raw: Short link, spotify: URI, or web URL.
        session: HTTP session for expansion and the oEmbed probe.
        timeout: Per-request timeout in seconds.

    Returns:
        The playlist ID, e.g. "37i9dQZF1DXcBWIGoYBM5M".

    Raises:
        UnresolvableLinkError: If no extractor produced an ID.

    Example:
        resolve_playlist_id("spotify:playlist:ABC123", session)  # "ABC123"
        resolve_playlist_id(
            "https://open.spotify.com/intl-en/playlist/ABC123?si=xyz", session
        )  # "ABC123"
    """
    expanded = expand_playlist_url(raw, session, timeout)

    for extractor in ID_EXTRACTORS:
        playlist_id = extractor(expanded, session, timeout)
        if playlist_id:
            logger.debug(f"Playlist ID {playlist_id} resolved by {extractor.__name__}")
            return playlist_id

    raise UnresolvableLinkError(
        "Could not parse playlist ID",
        details={"playlist_url": raw, "expanded_url": expanded}
    )
