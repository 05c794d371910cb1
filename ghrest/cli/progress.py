"""Terminal progress display for multi-page requests."""
from __future__ import annotations
from typing import Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskID, TextColumn

from ..core.pagination import page_status


class RichProgress:
    """`ProgressReporter` drawing a rich progress bar on stderr.

    The bar is created on the first update, so single-page requests never
    draw anything.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def update(self, description: str, page: int, total: int) -> None:
        if self._progress is None:
            self._progress = Progress(
                TextColumn("{task.description}"),
                BarColumn(),
                console=self.console,
                transient=True,
            )
            self._progress.start()
            self._task = self._progress.add_task(description, total=None)
        self._progress.update(
            self._task,
            description=page_status(description, page, total),
            completed=page,
            total=total or None,
        )

    def complete(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task = None
