"""
Configuration management for spot-linker.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml and the environment.

The configuration contains:
    - Spotify API credentials (client_id, client_secret)
    - Store lookup settings (worker threads, HTTP timeout, default storefront)
    - Optional output directory for log files

Configuration Sources (later wins):
    1. Built-in defaults
    2. config.yaml (current working directory, or an explicit path)
    3. Environment variables SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET,
       also read from a .env file if present

    config.yaml is optional when the credentials come from the environment.

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"

    lookup:
      threads: 8        # Parallel per-track store lookups
      timeout: 10       # Seconds, applied to every outbound HTTP call
      country: "US"     # Default iTunes storefront

    output:
      directory: null   # Set to a path to write log files
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from spot_linker.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

# Environment variables that override the spotify section
ENV_CLIENT_ID = "SPOTIFY_CLIENT_ID"
ENV_CLIENT_SECRET = "SPOTIFY_CLIENT_SECRET"

DEFAULT_THREADS = 8
DEFAULT_TIMEOUT = 10.0
DEFAULT_COUNTRY = "US"

_COUNTRY_PATTERN = re.compile(r"^[A-Za-z]{2}$")


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify API credentials configuration.

    These credentials are obtained from the Spotify Developer Dashboard:
    https://developer.spotify.com/dashboard

    Attributes:
        client_id: The Spotify application client ID.
        client_secret: The Spotify application client secret.
    """
    client_id: str
    client_secret: str


@dataclass(frozen=True)
class LookupConfig:
    """
    Store lookup behavior configuration.

    Attributes:
        threads: Maximum number of tracks looked up concurrently.
                 Bounds the fan-out against Bandcamp and iTunes.
                 Default: 8.
        timeout: Timeout in seconds for every outbound HTTP request,
                 Spotify included. Default: 10.
        country: Two-letter iTunes storefront used when a request does
                 not name one. Stored upper-cased. Default: "US".
    """
    threads: int
    timeout: float
    country: str


@dataclass(frozen=True)
class OutputConfig:
    """
    Output configuration.

    Attributes:
        directory: Directory where log files are written, or None to log
                   to the console only. ~ is expanded.
    """
    directory: Path | None


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable (frozen dataclass).

    Attributes:
        spotify: Spotify API credentials.
        lookup: Store lookup settings.
        output: Output settings.

    Example:
        config = load_config()
        print(f"Using {config.lookup.threads} lookup threads")
    """
    spotify: SpotifyConfig
    lookup: LookupConfig
    output: OutputConfig


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml and the environment.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory
                     and silently skips it when absent.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is not found, the YAML is
                     invalid, credentials are missing, or a value is invalid.
                     The error message indicates the specific problem.

    Behavior:
        1. Load .env into the process environment (existing vars win)
        2. Locate and parse config.yaml if present
        3. Merge credentials with SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET
        4. Validate lookup and output sections, applying defaults
        5. Return frozen Config object

    Example:
        try:
            config = load_config()
        except ConfigError as e:
            print(f"Configuration error: {e.message}")
            sys.exit(1)
    """
    load_dotenv()

    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    raw_config: dict[str, Any] = {}
    if config_path.exists():
        raw_config = _read_config_file(config_path)
    elif explicit:
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    _validate_sections(raw_config)

    spotify_config = _parse_spotify_config(raw_config.get("spotify") or {})
    lookup_config = _parse_lookup_config(raw_config.get("lookup"))
    output_config = _parse_output_config(raw_config.get("output"))

    return Config(
        spotify=spotify_config,
        lookup=lookup_config,
        output=output_config
    )


def _read_config_file(config_path: Path) -> dict[str, Any]:
    """
    Read and parse a YAML configuration file.

    An empty file is treated as an empty configuration.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or
                     does not contain a mapping at the top level.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return raw_config


def _validate_sections(raw_config: dict[str, Any]) -> None:
    """
    Check that every known section present in the file is a dictionary.

    Raises:
        ConfigError: If a section has the wrong type.
    """
    for section in ("spotify", "lookup", "output"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _parse_spotify_config(spotify_section: dict[str, Any]) -> SpotifyConfig:
    """
    Parse the Spotify credentials, letting the environment override the file.

    Raises:
        ConfigError: If client_id or client_secret ends up missing or empty.
    """
    client_id = os.getenv(ENV_CLIENT_ID) or spotify_section.get("client_id", "")
    client_secret = os.getenv(ENV_CLIENT_SECRET) or spotify_section.get("client_secret", "")

    if not isinstance(client_id, str) or not client_id.strip():
        raise ConfigError(
            f"'spotify.client_id' must be a non-empty string "
            f"(or set {ENV_CLIENT_ID})",
            details={"field": "spotify.client_id"}
        )

    if not isinstance(client_secret, str) or not client_secret.strip():
        raise ConfigError(
            f"'spotify.client_secret' must be a non-empty string "
            f"(or set {ENV_CLIENT_SECRET})",
            details={"field": "spotify.client_secret"}
        )

    return SpotifyConfig(
        client_id=client_id.strip(),
        client_secret=client_secret.strip()
    )


def _parse_lookup_config(lookup_section: dict[str, Any] | None) -> LookupConfig:
    """
    Parse and validate the lookup section, applying defaults.

    Raises:
        ConfigError: If threads is not a positive integer, timeout is not a
                     positive number, or country is not two letters.
    """
    threads = DEFAULT_THREADS
    timeout = DEFAULT_TIMEOUT
    country = DEFAULT_COUNTRY

    if lookup_section is not None:
        raw_threads = lookup_section.get("threads")
        if raw_threads is not None:
            if isinstance(raw_threads, bool) or not isinstance(raw_threads, int) or raw_threads < 1:
                raise ConfigError(
                    "'lookup.threads' must be a positive integer",
                    details={"field": "lookup.threads", "value": raw_threads}
                )
            threads = raw_threads

        raw_timeout = lookup_section.get("timeout")
        if raw_timeout is not None:
            if isinstance(raw_timeout, bool) or not isinstance(raw_timeout, (int, float)) or raw_timeout <= 0:
                raise ConfigError(
                    "'lookup.timeout' must be a positive number of seconds",
                    details={"field": "lookup.timeout", "value": raw_timeout}
                )
            timeout = float(raw_timeout)

        raw_country = lookup_section.get("country")
        if raw_country is not None:
            country = normalize_country(raw_country)

    return LookupConfig(threads=threads, timeout=timeout, country=country)


def _parse_output_config(output_section: dict[str, Any] | None) -> OutputConfig:
    """
    Parse the output section. A missing or null directory disables file logging.

    Raises:
        ConfigError: If directory is present but not a non-empty string.
    """
    if output_section is None:
        return OutputConfig(directory=None)

    directory = output_section.get("directory")
    if directory is None:
        return OutputConfig(directory=None)

    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'output.directory' must be a non-empty string or null",
            details={"field": "output.directory"}
        )

    return OutputConfig(directory=Path(directory.strip()).expanduser().resolve())


def normalize_country(country: Any) -> str:
    """
    Validate a two-letter storefront code and return it upper-cased.

    Args:
        country: Raw value from config, CLI or request payload.

    Returns:
        The upper-cased code, e.g. "gb" -> "GB".

    Raises:
        ConfigError: If the value is not a two-letter string.
    """
    if not isinstance(country, str) or not _COUNTRY_PATTERN.match(country.strip()):
        raise ConfigError(
            f"Storefront country must be a two-letter code, got: {country!r}",
            details={"field": "lookup.country", "value": country}
        )
    return country.strip().upper()
