"""
Owns the on-disk catalog snapshot: fetches the remote feed, re-encodes it for
local storage and loads it back, refreshing automatically when it is missing.

The refresh path is a chunked pipeline:
network reader -> bz2 decode -> lz4 frame encode -> temp file -> rename.
"""

import asyncio
import bz2
import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles
import aiohttp
import lz4.frame
from pydantic import ValidationError

from modpkg.api.client import create_session
from modpkg.cli.progress_manager import ProgressManager
from modpkg.exceptions import (
    CacheCorruptError,
    CacheMissingError,
    LocalIOError,
    NetworkError,
)
from modpkg.models.catalog import Catalog
from modpkg.models.config import AppConfig

log = logging.getLogger(__name__)


class FeedDecoder:
    """
    Incremental bz2 decoder that also accepts multi-stream payloads
    (several bz2 streams concatenated back to back).
    """

    def __init__(self) -> None:
        self._decompressor = bz2.BZ2Decompressor()

    def decode(self, chunk: bytes) -> bytes:
        output = []
        data = chunk
        while data:
            if self._decompressor.eof:
                self._decompressor = bz2.BZ2Decompressor()
            output.append(self._decompressor.decompress(data))
            data = self._decompressor.unused_data if self._decompressor.eof else b""
        return b"".join(output)

    @property
    def finished(self) -> bool:
        return self._decompressor.eof


class CatalogStore:
    """Loads the catalog from the local snapshot, or from the remote feed on a miss."""

    def __init__(
        self,
        config: AppConfig,
        session: Optional[aiohttp.ClientSession] = None,
        progress_manager: Optional[ProgressManager] = None,
    ):
        self.config = config
        self.snapshot_path: Path = config.snapshot_path
        self._session = session
        self.progress_manager = progress_manager

    async def load(self) -> Catalog:
        """
        Returns the current catalog. A missing snapshot triggers exactly one
        refresh followed by a second read; every other failure propagates.
        """
        try:
            return await asyncio.to_thread(self._read_snapshot)
        except CacheMissingError:
            log.info("There is no local mod database yet. Downloading it now…")
        await self.refresh()
        return await asyncio.to_thread(self._read_snapshot)

    def _read_snapshot(self) -> Catalog:
        try:
            with lz4.frame.open(self.snapshot_path, mode="rb") as f:
                raw = f.read()
        except FileNotFoundError as e:
            raise CacheMissingError(
                f"No catalog snapshot at '{self.snapshot_path}'."
            ) from e
        except (RuntimeError, EOFError) as e:
            raise CacheCorruptError(
                f"The catalog snapshot at '{self.snapshot_path}' is damaged: {e}. "
                "Run 'modpkg refresh' to download it again."
            ) from e
        except OSError as e:
            raise LocalIOError(
                f"Could not read the catalog snapshot '{self.snapshot_path}': {e}"
            ) from e

        try:
            catalog = Catalog.model_validate_json(raw)
        except ValidationError as e:
            raise CacheCorruptError(
                f"The catalog snapshot at '{self.snapshot_path}' is not a valid "
                f"catalog ({e.error_count()} errors). Run 'modpkg refresh'."
            ) from e
        log.debug(f"Loaded {len(catalog)} catalog entries from {self.snapshot_path}.")
        return catalog

    async def refresh(self) -> None:
        """
        Streams the remote feed into a fresh snapshot. The new file replaces
        the old one only once it is completely written.
        """
        session = self._session
        owns_session = session is None
        if owns_session:
            session = create_session(self.config)
        try:
            await self._download_snapshot(session)
        finally:
            if owns_session:
                await session.close()
        log.info("[green]✔ Updated local mod database.[/green]")

    async def _download_snapshot(self, session: aiohttp.ClientSession) -> None:
        url = self.config.catalog_url
        tmp_path = self.snapshot_path.with_name(self.snapshot_path.name + ".part")
        task_id = None
        try:
            await asyncio.to_thread(
                self.snapshot_path.parent.mkdir, parents=True, exist_ok=True
            )
            async with session.get(url) as response:
                response.raise_for_status()
                total = response.content_length
                log.debug(f"Fetching catalog feed from {url} ({total or '?'} bytes)")
                if self.progress_manager:
                    task_id = self.progress_manager.add_transfer_task(
                        "Fetching mod database", total=total
                    )

                decoder = FeedDecoder()
                encoder = lz4.frame.LZ4FrameCompressor()
                async with aiofiles.open(tmp_path, "wb") as f:
                    await f.write(encoder.begin())
                    async for chunk in response.content.iter_chunked(
                        self.config.chunk_size
                    ):
                        try:
                            decoded = decoder.decode(chunk)
                        except OSError as e:
                            raise NetworkError(
                                "The mod database feed is not valid bzip2 data."
                            ) from e
                        if decoded:
                            await f.write(encoder.compress(decoded))
                        if self.progress_manager:
                            self.progress_manager.advance(task_id, len(chunk))
                    if not decoder.finished:
                        raise NetworkError(
                            "The mod database download ended before the feed was "
                            "complete."
                        )
                    await f.write(encoder.flush())

            await asyncio.to_thread(os.replace, tmp_path, self.snapshot_path)
        except aiohttp.ClientResponseError as e:
            raise NetworkError(
                f"Fetching the mod database failed: {e.status} {e.message}"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Fetching the mod database failed: {e!r}") from e
        except OSError as e:
            raise LocalIOError(f"Could not write the catalog snapshot: {e}") from e
        finally:
            if task_id is not None:
                self.progress_manager.finish_task(task_id)
            await asyncio.to_thread(_remove_if_exists, tmp_path)


def _remove_if_exists(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
