"""
Command-line interface for spot-linker.

Runs one playlist request and prints, for every track, its Bandcamp link
(or Bandcamp search link) and its Apple Music page.
rich-click is used for the help output colors.

Usage:
    # Print links for a playlist (US storefront)
    spot-links --url "https://open.spotify.com/playlist/..."

    # Short links and URIs work too
    spot-links --url "https://spotify.link/AbCdEf"
    spot-links --url "spotify:playlist:37i9dQZF1DXcBWIGoYBM5M"

    # UK storefront, 16 lookup threads, export the results
    spot-links --url "..." --country GB --threads 16 --csv links.csv --json links.json

Configuration:
    Spotify credentials come from config.yaml in the current directory
    (or --config), or from SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET in
    the environment or a .env file.

Exit Codes:
    0    Success
    1    Configuration error (or unexpected error)
    2    Playlist reference could not be resolved
    3    Spotify error (token or track listing)
    4    Other application error
    130  Interrupted by user
"""

import dataclasses
import sys
from pathlib import Path
from typing import Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "cli": [
        {
            "name": "Input",
            "options": ["--url", "--country"],
        },
        {
            "name": "Output",
            "options": ["--csv", "--json"],
        },
        {
            "name": "Advanced Options",
            "options": ["--threads", "--config", "--verbose"],
        },
        {
            "name": "Info",
            "options": ["--version", "--help"],
        },
    ],
}

from spot_linker import __version__
from spot_linker.core import (
    Config,
    ConfigError,
    SpotifyError,
    SpotLinkerError,
    UnresolvableLinkError,
    get_logger,
    load_config,
    normalize_country,
    setup_logging,
    shutdown_logging,
)
from spot_linker.core.logger import format_track_line
from spot_linker.core.progress import LookupProgressBar
from spot_linker.service import PlaylistLinkService
from spot_linker.stores.models import MatchResult
from spot_linker.utils.export import write_csv, write_json

logger = get_logger(__name__)


@click.command()
@click.option(
    "--url",
    type=str,
    default=None,
    metavar="<playlist-ref>",
    help="Spotify playlist URL, short link or spotify:playlist: URI"
)
@click.option(
    "--country",
    type=str,
    default=None,
    metavar="<CC>",
    help="iTunes storefront (two letters), default from config or US"
)
@click.option(
    "--threads",
    type=click.IntRange(min=1),
    default=None,
    metavar="<n>",
    help="Parallel track lookups (default 8)"
)
@click.option(
    "--csv", "csv_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<file.csv>",
    help="Write results as CSV"
)
@click.option(
    "--json", "json_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<file.json>",
    help="Write results as JSON"
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default ./config.yaml)"
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show debug output"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(
    ctx: click.Context,
    url: Optional[str],
    country: Optional[str],
    threads: Optional[int],
    csv_path: Optional[Path],
    json_path: Optional[Path],
    config_path: Optional[Path],
    verbose: bool,
    version: bool
) -> None:
    """
    spot-linker: Find where to buy the tracks of a Spotify playlist.

    Looks up every track of a playlist on Bandcamp and the iTunes Store
    and prints the best links found.

    \b
    BASIC USAGE:
        spot-links --url "https://open.spotify.com/playlist/..."
        spot-links --url "spotify:playlist:..." --country GB

    \b
    EXPORT:
        spot-links --url "..." --csv links.csv --json links.json
    """
    if version:
        click.echo(f"spot-linker {__version__}")
        ctx.exit(0)

    if not url:
        click.echo(ctx.get_help())
        ctx.exit(0)

    _run_lookup({
        "url": url,
        "country": country,
        "threads": threads,
        "csv_path": csv_path,
        "json_path": json_path,
        "config_path": config_path,
        "verbose": verbose,
    })


def _run_lookup(options: dict) -> None:
    """
    Execute one playlist request based on CLI options.

    1. Loads configuration and applies CLI overrides
    2. Sets up logging
    3. Fetches the playlist's tracks
    4. Matches them with a progress bar
    5. Prints, summarizes and exports the results

    Raises:
        SystemExit: On fatal errors (with appropriate exit code).
    """
    try:
        config = _load_configuration(options["config_path"], options["threads"])
        setup_logging(config.output.directory, verbose=options["verbose"])
        logger.info("spot-linker starting")

        country = (
            normalize_country(options["country"])
            if options["country"]
            else config.lookup.country
        )

        with PlaylistLinkService(config) as service:
            tracks = service.fetch_tracks(options["url"])

            if not tracks:
                logger.warning("Playlist has no tracks")
                results: list[MatchResult] = []
            else:
                with LookupProgressBar(total=len(tracks)) as progress:
                    results = service.match(tracks, country, on_result=progress.update)

        _print_results(results)
        _print_summary(results, country)

        if options["csv_path"]:
            write_csv(results, options["csv_path"], country)
        if options["json_path"]:
            write_json(results, options["json_path"])

        logger.info("spot-linker completed successfully")

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except UnresolvableLinkError as e:
        click.echo(f"Error: {e.message}", err=True)
        click.echo("Pass a playlist URL, a spotify.link short link or a spotify:playlist: URI", err=True)
        logger.debug(f"Details: {e.details}")
        sys.exit(2)

    except SpotifyError as e:
        click.echo(f"Spotify error: {e.message}", err=True)
        if e.is_auth_error:
            click.echo("Check your client_id and client_secret in config.yaml or .env", err=True)
        elif e.is_rate_limit:
            click.echo("Spotify is rate limiting requests, try again later", err=True)
        logger.error(f"Spotify error: {e.message}", exc_info=True)
        sys.exit(3)

    except SpotLinkerError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(4)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        shutdown_logging()


def _load_configuration(config_path: Optional[Path], threads: Optional[int]) -> Config:
    """
    Load configuration and apply the --threads override.

    Raises:
        ConfigError: If configuration is invalid or missing.
    """
    config = load_config(config_path)
    if threads is not None:
        config = dataclasses.replace(
            config,
            lookup=dataclasses.replace(config.lookup, threads=threads)
        )
    return config


def _print_results(results: list[MatchResult]) -> None:
    """Print one block per track in playlist order."""
    for result in results:
        click.echo(
            format_track_line(
                result.track.artist,
                result.track.title,
                result.bandcamp.direct,
                result.bandcamp.search,
                result.apple.web
            )
        )


def _print_summary(results: list[MatchResult], country: str) -> None:
    """Log the aggregate counts for the request."""
    total = len(results)
    bandcamp_direct = sum(1 for r in results if r.bandcamp.direct)
    apple_confident = sum(1 for r in results if r.apple.confident)
    apple_guess = sum(
        1 for r in results
        if not r.apple.confident and (r.apple.web or r.apple.store_candidates)
    )

    logger.info("=" * 60)
    logger.info("SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Storefront:        {country}")
    logger.info(f"Tracks:            {total}")
    logger.info(f"Bandcamp direct:   {bandcamp_direct}")
    logger.info(f"Bandcamp search:   {total - bandcamp_direct}")
    logger.info(f"Apple confident:   {apple_confident}")
    logger.info(f"Apple best guess:  {apple_guess}")
    logger.info(f"Apple not found:   {total - apple_confident - apple_guess}")
    logger.info("=" * 60)


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `spot-links` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
