"""CLI progress display for listing and path resolution.

This module provides Rich-based progress displays driven by the callbacks
of DriveFileSource.list_all_files and PathResolver.resolve_paths.
"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .models import FileRecord


class ScanProgressDisplay:
    """Rich-based progress display for a duplicate scan.

    Two tasks are shown: an open-ended spinner while listing pages are
    fetched, then a bar over the files whose paths are being resolved.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the progress display.

        Args:
            console: Console to draw on (default: stderr)
        """
        self._console = console or Console(stderr=True)
        self._progress: Optional[Progress] = None
        self._list_task: Optional[TaskID] = None
        self._resolve_task: Optional[TaskID] = None

    def on_page(self, page: int, total_files: int) -> None:
        """Listing callback: one more page has been fetched."""
        if self._progress is None:
            return
        if self._list_task is None:
            self._list_task = self._progress.add_task("Listing files", total=None)
        self._progress.update(
            self._list_task,
            description=f"Listing files (page {page}, {total_files} files)",
        )

    def start_resolving(self, total_files: int) -> None:
        """Finish the listing task and start the path resolution bar."""
        if self._progress is None:
            return
        if self._list_task is not None:
            self._progress.update(self._list_task, total=1, completed=1)
        self._resolve_task = self._progress.add_task(
            "Resolving paths", total=total_files
        )

    def on_file_resolved(self, record: FileRecord) -> None:
        """Resolution callback: one more file has been handled."""
        if self._progress is None or self._resolve_task is None:
            return
        self._progress.advance(self._resolve_task)

    def __enter__(self) -> "ScanProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
            refresh_per_second=4,
        )
        self._progress.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._list_task = None
            self._resolve_task = None
