"""Tests for the Rich progress wrapper."""

import io

import pytest
from rich.console import Console

from modpkg.cli.progress_manager import ProgressManager


@pytest.fixture
def manager():
    return ProgressManager(Console(file=io.StringIO(), width=120))


class TestProgressManager:
    def test_indeterminate_task_is_completed_on_finish(self, manager):
        task_id = manager.add_transfer_task("Fetching mod database", total=None)
        manager.advance(task_id, 1500)
        manager.finish_task(task_id)

        task = manager.progress.tasks[0]
        assert task.total == 1500
        assert task.finished

    def test_overall_bar_counts_finished_files(self, manager):
        manager.initialize_session(2)
        first = manager.add_transfer_task("a.jar", total=10)
        second = manager.add_transfer_task("b.jar", total=10)
        manager.finish_task(first, success=True)
        manager.finish_task(second, success=False)

        overall = manager.progress.tasks[0]
        assert overall.completed == 2
        assert manager.get_statistics() == {
            "completed": 1,
            "failed": 1,
            "peak_concurrent": 2,
        }

    def test_update_total(self, manager):
        task_id = manager.add_transfer_task("a.jar", total=2_500_000)
        manager.update_task_total(task_id, 42)
        assert manager.progress.tasks[0].total == 42

    def test_long_descriptions_are_shortened(self, manager):
        manager.add_transfer_task("x" * 50, total=1)
        assert len(manager.progress.tasks[0].description) == 29

    def test_quiet_mode_adds_no_tasks(self):
        manager = ProgressManager(Console(file=io.StringIO()), quiet=True)
        manager.initialize_session(3)
        assert manager.add_transfer_task("a.jar", total=1) is None
        manager.finish_task(None)
        assert manager.progress.tasks == []

    @pytest.mark.asyncio
    async def test_async_context(self, manager):
        async with manager as pm:
            task_id = pm.add_transfer_task("a.jar", total=3)
            pm.advance(task_id, 3)
        assert manager.progress.tasks[0].completed == 3
