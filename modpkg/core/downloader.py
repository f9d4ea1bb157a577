"""
Handles the low-level downloading of files over HTTP, streamed to disk in
chunks and committed atomically by rename.
"""

import asyncio
import logging
import os
from pathlib import Path

import aiofiles
import aiohttp
from rich.progress import TaskID

from modpkg.cli.progress_manager import ProgressManager
from modpkg.exceptions import LocalIOError, NetworkError
from modpkg.models.stats import InstallStats

log = logging.getLogger(__name__)


class Downloader:
    """Streams one URL to one destination path."""

    def __init__(self, session: aiohttp.ClientSession, chunk_size: int = 65536):
        self.session = session
        self.chunk_size = chunk_size

    async def download_file(
        self,
        url: str,
        destination_path: Path,
        total_size_estimate: int,
        stats: InstallStats | None = None,
        progress_manager: ProgressManager | None = None,
        task_id: TaskID | None = None,
        part_suffix: str = ".part",
    ) -> int:
        """
        Downloads `url` into `destination_path`, updating a Rich Progress task
        on every chunk.

        The body is written to a sibling temp file that is renamed over the
        destination only after the last chunk, so a failed transfer never
        leaves a truncated file under the final name.

        Returns:
            The number of bytes written.
        """
        tmp_path = destination_path.with_name(destination_path.name + part_suffix)
        bytes_downloaded = 0
        try:
            async with self.session.get(url, allow_redirects=True) as response:
                response.raise_for_status()

                effective_total_size = response.content_length or total_size_estimate
                if progress_manager and task_id is not None:
                    progress_manager.update_task_total(
                        task_id, total=effective_total_size
                    )

                async with aiofiles.open(tmp_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        await f.write(chunk)
                        bytes_downloaded += len(chunk)
                        if stats:
                            await stats.add_bytes(len(chunk))
                        if progress_manager and task_id is not None:
                            progress_manager.advance(task_id, len(chunk))

            await asyncio.to_thread(os.replace, tmp_path, destination_path)
        except aiohttp.ClientResponseError as e:
            raise NetworkError(
                f"Downloading '{destination_path.name}' failed: {e.status} {e.message}"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(
                f"Downloading '{destination_path.name}' failed: {e!r}"
            ) from e
        except OSError as e:
            raise LocalIOError(
                f"Could not write '{destination_path}': {e}"
            ) from e
        finally:
            await asyncio.to_thread(_discard, tmp_path)

        log.debug(f"Wrote {bytes_downloaded} bytes to {destination_path}")
        return bytes_downloaded


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
