"""
Export of match results to CSV and JSON files.

CSV layout (one row per track, playlist order):
    Title,Artist,Country,iTunesStore(1st),AppleWeb,BandcampDirect,BandcampSearch

Title and artist have every run of CR, LF and comma replaced by a single
space, so a row always stays on one line with seven columns. Missing
links are written as empty cells.

The JSON file holds the same body the request handler returns:
    {"results": [...]}
"""

import csv
import json
import re
from pathlib import Path

from spot_linker.core.logger import get_logger
from spot_linker.stores.models import MatchResult
from spot_linker.utils import ensure_directory

logger = get_logger(__name__)


CSV_HEADER = (
    "Title",
    "Artist",
    "Country",
    "iTunesStore(1st)",
    "AppleWeb",
    "BandcampDirect",
    "BandcampSearch",
)

_UNSAFE_CELL = re.compile(r"[\r\n,]+")


def _safe_cell(value: str | None) -> str:
    return _UNSAFE_CELL.sub(" ", value or "")


def csv_row(result: MatchResult, country: str) -> list[str]:
    """Build the CSV cells for one result."""
    candidates = result.apple.store_candidates
    return [
        _safe_cell(result.track.title),
        _safe_cell(result.track.artist),
        country,
        candidates[0] if candidates else "",
        result.apple.web or "",
        result.bandcamp.direct or "",
        result.bandcamp.search,
    ]


def write_csv(results: list[MatchResult], path: Path, country: str) -> Path:
    """
    Write results as CSV.

    Args:
        results: Match results in playlist order.
        path: Destination file; parent directories are created.
        country: Storefront code written in the Country column.

    Returns:
        The written path.
    """
    ensure_directory(path.parent)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for result in results:
            writer.writerow(csv_row(result, country))

    logger.info(f"Wrote {len(results)} rows to {path}")
    return path


def write_json(results: list[MatchResult], path: Path) -> Path:
    """
    Write results as the {"results": [...]} response body.

    Returns:
        The written path.
    """
    ensure_directory(path.parent)
    body = {"results": [result.to_dict() for result in results]}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(body, f, ensure_ascii=False, indent=2)

    logger.info(f"Wrote {len(results)} results to {path}")
    return path
