"""
Manages a Rich progress display for the sequential sync loop.
Shows overall batch progress and the beatmap currently downloading.
"""

import asyncio
import logging

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.progress import (
    BarColumn,
    DownloadColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from synth_sync.utils.formatting import truncate_middle

log = logging.getLogger("synth_sync")


class ProgressManager:
    """Live progress for a sync batch. Does nothing in dry-run mode."""

    def __init__(self, console: Console, dry_run: bool = False):
        self.console = console
        self.dry_run = dry_run

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
        )
        self.overall_progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            console=console,
        )
        self._overall_task_id: TaskID | None = None
        self._live: Live | None = None

    def start_batch(self, total: int) -> None:
        if self.dry_run:
            return
        self._overall_task_id = self.overall_progress.add_task(
            "Syncing beatmaps", total=total
        )

    def advance_batch(self) -> None:
        if self._overall_task_id is not None and not self.dry_run:
            self.overall_progress.advance(self._overall_task_id)

    def add_download_task(self, name: str) -> TaskID | None:
        if self.dry_run:
            return None
        return self.progress.add_task(escape(truncate_middle(name, 48)), total=None, start=True)

    def update_download(self, task_id: TaskID | None, completed: int, total: int) -> None:
        if task_id is None or self.dry_run:
            return
        self.progress.update(task_id, completed=completed, total=total or None)

    def remove_download_task(self, task_id: TaskID | None) -> None:
        if task_id is None or self.dry_run:
            return
        try:
            self.progress.remove_task(task_id)
        except KeyError:
            log.debug(f"Progress task {task_id} was already removed.")

    async def __aenter__(self):
        if self.dry_run:
            return self
        self._live = Live(
            Group(self.overall_progress, self.progress),
            console=self.console,
            refresh_per_second=10,
            transient=True,
        )
        self._live.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._live:
            await asyncio.sleep(0.1)
            self._live.stop()
            self._live = None
