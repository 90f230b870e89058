"""
Progress bar for the store lookup step, using the Rich library.

Usage:
    from spot_linker.core.progress import LookupProgressBar

    with LookupProgressBar(total=len(tracks)) as progress:
        results = matcher.match_tracks(tracks, country, on_result=progress.update)
"""

from typing import Optional

from rich import get_console
from rich.progress import BarColumn, Progress, TaskID, TextColumn
from rich.theme import Theme

from spot_linker.stores.models import MatchResult


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(165,66,129)",
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(165,66,129)",
    "progress.percentage": "white",
})


class LookupProgressBar:
    """
    Progress bar for per-track store lookups.

    Displays:
    - Description (e.g., "Looking up")
    - Status: Bandcamp direct matches, search-only fallbacks, Apple misses
    - Progress bar
    - Percentage

    Example:
        Looking up   ✓ 31  ? 9  ✗ 2          ━━━━━━━━━━━━━━━━━  42%

    update() is safe to call from worker threads; Rich serializes
    refreshes internally.
    """

    def __init__(self, total: int, description: str = "Looking up") -> None:
        self.total = total
        self.description = description
        self.completed = 0
        self.bandcamp_direct = 0
        self.bandcamp_search_only = 0
        self.apple_missing = 0

        self.console = get_console()
        self.console.push_theme(PROGRESS_THEME)

        self.progress = Progress(
            TextColumn("[white]{task.description}", justify="left"),
            TextColumn("{task.fields[status]}"),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )

        self.task_id: Optional[TaskID] = None
        self._started = False

    def __enter__(self) -> "LookupProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        """Start the progress bar (can be called manually)."""
        if not self._started:
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        if self._started:
            self.progress.stop()
            self.console.pop_theme()
            self._started = False

    def update(self, result: MatchResult) -> None:
        """Count one finished track."""
        self.completed += 1
        if result.bandcamp.direct:
            self.bandcamp_direct += 1
        else:
            self.bandcamp_search_only += 1
        if not result.apple.web and not result.apple.store_candidates:
            self.apple_missing += 1

        if self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._get_status_text(),
            )

    def _get_status_text(self) -> str:
        parts = [
            f"[green]✓ {self.bandcamp_direct}[/green]",
            f"[yellow]? {self.bandcamp_search_only}[/yellow]",
        ]
        if self.apple_missing > 0:
            parts.append(f"[red]✗ {self.apple_missing}[/red]")
        return "  ".join(parts)
