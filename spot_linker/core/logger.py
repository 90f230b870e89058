"""
Logging configuration for spot-linker.

This module sets up the logging system with up to three outputs:
    - Console: Real-time output with tqdm-compatible formatting
    - log_full_{timestamp}.log: Complete log of all events (DEBUG and above)
    - unmatched_{timestamp}.log: Tracks without a confident Bandcamp match,
      each followed by the fallback search URL

The file outputs are only created when an output directory is configured.

Usage:
    from spot_linker.core.logger import setup_logging, get_logger

    setup_logging(output_dir)  # Call once at startup (output_dir may be None)
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Resolving playlist")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at DEBUG
NOISY_LOGGERS = ("urllib3", "spotipy")


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Custom formatter that adds colors to console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to the console without breaking progress bars.

    Standard logging to stderr interferes with in-place progress bar updates.
    This handler uses tqdm.write(), which prints above any active bar.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class UnmatchedTrackHandler(logging.Handler):
    """
    Custom handler that collects tracks without a Bandcamp direct match.

    Writes entries to unmatched_{timestamp}.log in a simple,
    human-readable format, so the user can search by hand:

        Artist Name - Song Title
        https://bandcamp.com/search?q=Artist%20Name%20Song%20Title&item_type=t

    The handler looks for specific extra fields in log records:
        - 'unmatched_track_title': The Spotify track title
        - 'unmatched_track_artist': The artist string
        - 'unmatched_search_url': The fallback search URL

    Only records containing these fields are written.

    Attributes:
        report_path: Path to the unmatched log file.
        report_file: Open file handle (set by open()).
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "unmatched_track_title"):
            return

        if self.report_file is None:
            return

        try:
            title = getattr(record, "unmatched_track_title", "Unknown")
            artist = getattr(record, "unmatched_track_artist", "Unknown")
            url = getattr(record, "unmatched_search_url", "")

            # Worker threads log concurrently
            self.acquire()
            try:
                self.report_file.write(f"{artist} - {title}\n")
                self.report_file.write(f"{url}\n\n")
                self.report_file.flush()
            finally:
                self.release()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


def setup_logging(output_dir: Path | None = None, verbose: bool = False) -> None:
    """
    Configure the logging system for the application.

    Call ONCE at application startup, after the configuration is loaded.

    Args:
        output_dir: Directory where log files are created, in a 'logs'
                    subdirectory. None means console output only.
        verbose: Show DEBUG messages on the console.

    Behavior:
        1. Configure root logger level to DEBUG and drop existing handlers
        2. Add console handler (TqdmLoggingHandler), INFO or DEBUG
        3. If output_dir is set:
           - output_dir/logs/log_full_{timestamp}.log (DEBUG)
           - output_dir/logs/unmatched_{timestamp}.log (UnmatchedTrackHandler)
        4. Quiet urllib3/spotipy down to WARNING
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    if output_dir is not None:
        logs_dir = output_dir / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

        full_log_path = logs_dir / f"log_full_{timestamp}.log"
        full_handler = logging.FileHandler(full_log_path, mode="w", encoding="utf-8")
        full_handler.setLevel(logging.DEBUG)
        full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
        root_logger.addHandler(full_handler)

        unmatched_handler = UnmatchedTrackHandler(logs_dir / f"unmatched_{timestamp}.log")
        unmatched_handler.open()
        root_logger.addHandler(unmatched_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger configured by setup_logging().
    """
    return logging.getLogger(name)


def format_track_line(
    artist: str,
    title: str,
    bandcamp_url: str | None,
    bandcamp_search: str,
    apple_web: str | None
) -> str:
    """
    Format the console line printed for one track.

    Direct Bandcamp links are green, search fallbacks yellow.
    """
    if bandcamp_url:
        bandcamp = f"{Colors.GREEN}Bandcamp{Colors.RESET}: {bandcamp_url}"
    else:
        bandcamp = f"{Colors.YELLOW}Bandcamp search{Colors.RESET}: {bandcamp_search}"

    apple = (
        f"{Colors.CYAN}Apple{Colors.RESET}: {apple_web}"
        if apple_web
        else f"{Colors.RED}Apple{Colors.RESET}: no result"
    )
    return f"{artist} - {title}\n    {bandcamp}\n    {apple}"


def log_unmatched_track(
    logger: logging.Logger,
    title: str,
    artist: str,
    search_url: str
) -> None:
    """
    Log a track that got no Bandcamp direct match.

    Attaches the extra fields UnmatchedTrackHandler picks up. Logged at
    DEBUG: a missing direct link is an expected outcome, not a failure.

    Example:
        log_unmatched_track(
            logger,
            title="Song Title",
            artist="Artist Name",
            search_url="https://bandcamp.com/search?q=...&item_type=t"
        )
    """
    logger.debug(
        f"No Bandcamp direct match for: {artist} - {title}",
        extra={
            "unmatched_track_title": title,
            "unmatched_track_artist": artist,
            "unmatched_search_url": search_url,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close all handlers on the root logger and remove them.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
