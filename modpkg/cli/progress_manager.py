"""
Manages the Rich progress display for catalog refreshes and concurrent downloads.
Shows one bar per active transfer plus an overall bar for the install run.
"""

import asyncio
import logging

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

log = logging.getLogger("modpkg")


class ProgressManager:
    """
    Thin wrapper around a Rich Progress instance.

    Transfer bars with an unknown total render as indeterminate (pulsing);
    their byte counters still increase.
    """

    def __init__(self, console: Console, quiet: bool = False):
        self.console = console
        self.quiet = quiet

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=None),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=False,
        )
        self._overall_task_id: TaskID | None = None
        self._active_tasks: dict[TaskID, str] = {}
        self._stats = {"completed": 0, "failed": 0, "peak_concurrent": 0}

    def log_message(self, message: str, level: str = "info"):
        getattr(log, level, log.info)(message)

    def initialize_session(self, total_files: int):
        """Adds the overall bar counting finished files."""
        if self.quiet:
            return
        self._overall_task_id = self.progress.add_task(
            f"[bold blue]Installing {total_files} files", total=total_files
        )

    @staticmethod
    def _shorten(description: str) -> str:
        if len(description) > 30:
            return description[:28] + "…"
        return description

    def add_transfer_task(self, description: str, total: int | None) -> TaskID | None:
        if self.quiet:
            return None
        task_id = self.progress.add_task(self._shorten(description), total=total)
        self._active_tasks[task_id] = description
        self._stats["peak_concurrent"] = max(
            self._stats["peak_concurrent"], len(self._active_tasks)
        )
        return task_id

    def advance(self, task_id: TaskID | None, amount: int):
        if task_id is not None and not self.quiet:
            self.progress.advance(task_id, amount)

    def update_task_total(self, task_id: TaskID | None, total: int | None):
        if task_id is not None and not self.quiet:
            self.progress.update(task_id, total=total)

    def finish_task(self, task_id: TaskID | None, success: bool = True):
        if task_id is None or self.quiet:
            return
        task = next((t for t in self.progress.tasks if t.id == task_id), None)
        if task is not None and task.total is None:
            # Give indeterminate bars a final size so they render as full.
            self.progress.update(task_id, total=task.completed)
        self._active_tasks.pop(task_id, None)
        if task_id == self._overall_task_id:
            return
        if success:
            self._stats["completed"] += 1
        else:
            self._stats["failed"] += 1
        if self._overall_task_id is not None:
            self.progress.update(
                self._overall_task_id,
                completed=self._stats["completed"] + self._stats["failed"],
            )

    def get_statistics(self) -> dict:
        return self._stats.copy()

    async def __aenter__(self):
        if not self.quiet:
            self.progress.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self.quiet:
            await asyncio.sleep(0.1)
            self.progress.stop()
