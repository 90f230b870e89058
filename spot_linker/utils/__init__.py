"""
Utility functions for spot-linker.

    - ensure_directory: Create an output directory on demand
    - export: CSV and JSON export of match results

Usage:
    from spot_linker.utils import ensure_directory
    from spot_linker.utils.export import write_csv, write_json
"""

from pathlib import Path


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Path to the directory.

    Returns:
        The same path (for chaining).

    Raises:
        OSError: If directory cannot be created (permissions, etc.)

    Example:
        out_dir = ensure_directory(Path("exports"))
    """
    path.mkdir(parents=True, exist_ok=True)
    return path
