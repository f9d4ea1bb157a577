"""
The orchestrator that downloads a resolved file set into a target directory.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import aiohttp

from modpkg.cli.progress_manager import ProgressManager
from modpkg.exceptions import LocalIOError
from modpkg.models.catalog import FileRecord
from modpkg.models.config import AppConfig
from modpkg.models.stats import InstallStats
from modpkg.utils.concurrency import gather_fail_fast
from modpkg.utils.path import package_file_name

from .downloader import Downloader

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallOutcome:
    """What happened to one file of an install run."""

    file: FileRecord
    path: Path
    bytes_written: int


class InstallManager:
    """
    Downloads every file of a resolved set concurrently.

    At most `config.max_downloads` transfers run at once. Any failed transfer
    aborts the whole install: the remaining transfers are cancelled and the
    error propagates to the caller. Files that already finished stay on disk.
    """

    def __init__(
        self,
        config: AppConfig,
        session: aiohttp.ClientSession,
        progress_manager: Optional[ProgressManager] = None,
    ):
        self.config = config
        self.progress_manager = progress_manager
        self.downloader = Downloader(session, chunk_size=config.chunk_size)
        self.semaphore = asyncio.Semaphore(config.max_downloads)
        self.stats = InstallStats()

    async def install(
        self, files: Iterable[FileRecord], target_dir: Path
    ) -> List[InstallOutcome]:
        """
        Downloads each file into `target_dir`.

        Returns:
            One outcome per file, in input order.
        """
        files = list(files)
        destinations = self._plan_destinations(files, target_dir)
        try:
            await asyncio.to_thread(target_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise LocalIOError(f"Could not create '{target_dir}': {e}") from e

        self.stats.files_total += len(files)
        if self.progress_manager:
            self.progress_manager.initialize_session(len(files))

        outcomes = await gather_fail_fast(
            self._install_one(file, destination)
            for file, destination in zip(files, destinations)
        )
        log.debug(
            f"Installed {self.stats.files_installed} files "
            f"({self.stats.bytes_downloaded} bytes) into {target_dir}"
        )
        return outcomes

    @staticmethod
    def _plan_destinations(files: List[FileRecord], target_dir: Path) -> List[Path]:
        """
        Maps each file to its on-disk path. Two files that would land on the
        same name (compared case-insensitively) are rejected before anything
        is downloaded.
        """
        claimed: Dict[str, FileRecord] = {}
        destinations = []
        for file in files:
            name = package_file_name(file.file_name)
            other = claimed.setdefault(name.lower(), file)
            if other is not file:
                raise LocalIOError(
                    f"Files {other.id} ('{other.file_name}') and {file.id} "
                    f"('{file.file_name}') would both be written to '{name}'."
                )
            destinations.append(target_dir / name)
        return destinations

    async def _install_one(self, file: FileRecord, destination: Path) -> InstallOutcome:
        async with self.semaphore:
            task_id = None
            if self.progress_manager:
                task_id = self.progress_manager.add_transfer_task(
                    destination.name, total=self.config.estimated_file_size
                )
            success = False
            try:
                written = await self.downloader.download_file(
                    file.download_url,
                    destination,
                    total_size_estimate=self.config.estimated_file_size,
                    stats=self.stats,
                    progress_manager=self.progress_manager,
                    task_id=task_id,
                    part_suffix=f".{file.id}.part",
                )
                success = True
            finally:
                if self.progress_manager:
                    self.progress_manager.finish_task(task_id, success=success)

        await self.stats.mark_installed()
        return InstallOutcome(file=file, path=destination, bytes_written=written)
