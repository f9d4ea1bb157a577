"""
Dataclass for tracking install session statistics.
"""

import asyncio
from dataclasses import dataclass, field


@dataclass
class InstallStats:
    """Aggregate counters for one install run. Increments are monotonic."""

    files_installed: int = 0
    bytes_downloaded: int = 0
    files_total: int = 0
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def add_bytes(self, count: int) -> None:
        async with self._lock:
            self.bytes_downloaded += count

    async def mark_installed(self) -> None:
        async with self._lock:
            self.files_installed += 1
