"""
Core module for spot-linker.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with console and optional file outputs

The progress bar lives in core.progress and is imported directly by the CLI,
since it depends on the store result models.

Usage:
    from spot_linker.core import (
        Config, load_config,
        setup_logging, get_logger,
        SpotLinkerError, ConfigError, SpotifyError
    )
"""

from spot_linker.core.config import (
    Config,
    LookupConfig,
    OutputConfig,
    SpotifyConfig,
    load_config,
    normalize_country,
)
from spot_linker.core.exceptions import (
    ConfigError,
    SpotifyError,
    SpotLinkerError,
    StoreLookupError,
    UnresolvableLinkError,
    UpstreamFetchError,
)
from spot_linker.core.logger import (
    get_logger,
    log_unmatched_track,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "LookupConfig",
    "OutputConfig",
    "load_config",
    "normalize_country",
    # Exceptions
    "SpotLinkerError",
    "ConfigError",
    "UnresolvableLinkError",
    "SpotifyError",
    "UpstreamFetchError",
    "StoreLookupError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_unmatched_track",
    "shutdown_logging",
]
