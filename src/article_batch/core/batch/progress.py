"""Live progress display for a batch run."""

import threading
from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressReporter:
    """Counts completed work items and renders them as a progress bar.

    ``advance()`` is the only mutation and is serialised by a lock, so each
    completion is counted exactly once however many extractions finish
    together. Rendering goes to stderr and is skipped entirely when disabled
    or when stderr is not a terminal.

    Usage:
        with ProgressReporter(total=len(items)) as progress:
            ...
            progress.advance()
    """

    def __init__(
        self,
        total: int,
        enabled: bool = True,
        description: str = "Extracting articles",
        console: Optional[Console] = None
    ):
        self.total = total
        self._completed = 0
        self._lock = threading.Lock()

        console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
            disable=not (enabled and console.is_terminal),
        )
        self._task_id = self._progress.add_task(description, total=total)

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def start(self) -> None:
        self._progress.start()

    def stop(self) -> None:
        self._progress.stop()

    def advance(self) -> int:
        """Record one completed item and return the new count."""
        with self._lock:
            self._completed += 1
            completed = self._completed
        self._progress.update(self._task_id, completed=completed)
        return completed

    def __enter__(self) -> "ProgressReporter":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.stop()
        return False
