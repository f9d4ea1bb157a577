"""Pytest configuration and shared fixtures for modpkg tests."""

import asyncio
import tempfile
from collections import Counter
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import aiohttp
import pytest

from modpkg.exceptions import NetworkError
from modpkg.models.catalog import (
    Catalog,
    CatalogEntry,
    Dependency,
    FileRecord,
    GameVersionRelease,
    RequirementKind,
)
from modpkg.models.config import AppConfig


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def app_config(temp_dir: Path) -> AppConfig:
    """Configuration pointing all storage at the temp directory."""
    return AppConfig(
        data_dir=temp_dir / "data",
        catalog_url="https://feed.example.com/complete.json.bz2",
        meta_api_url="https://meta.example.com/api",
        max_downloads=4,
        chunk_size=1024,
        estimated_file_size=2_500_000,
    )


def make_file(
    file_id: int,
    requires: tuple[int, ...] = (),
    optional: tuple[int, ...] = (),
    file_name: str | None = None,
    game_versions: tuple[str, ...] = ("1.12.2",),
) -> FileRecord:
    dependencies = [
        Dependency(entry_id=dep, kind=RequirementKind.REQUIRED) for dep in requires
    ] + [Dependency(entry_id=dep, kind=RequirementKind.OPTIONAL) for dep in optional]
    return FileRecord(
        id=file_id,
        download_url=f"https://files.example.com/{file_id}",
        file_name=file_name or f"mod-{file_id}.jar",
        game_versions=list(game_versions),
        dependencies=dependencies,
    )


def make_entry(
    entry_id: int,
    name: str | None = None,
    releases: dict[str, int] | None = None,
    download_count: int = 0,
    slug: str | None = None,
    latest_files: list[FileRecord] | None = None,
) -> CatalogEntry:
    return CatalogEntry(
        id=entry_id,
        name=name or f"Mod {entry_id}",
        web_site_url=(
            f"https://minecraft.curseforge.com/projects/{slug or f'mod-{entry_id}'}"
        ),
        download_count=download_count,
        latest_files=latest_files or [],
        releases=[
            GameVersionRelease(file_id=file_id, game_version=version)
            for version, file_id in (releases or {}).items()
        ],
    )


class FakeMetaClient:
    """
    In-memory stand-in for MetaAPIClient.

    `graph` maps entry id -> (release map, required deps). The file id of an
    entry's release for version v is taken from the release map.
    """

    def __init__(self, entries: dict[int, CatalogEntry], files: dict[int, FileRecord]):
        self.entries = entries
        self.files = files
        self.entry_calls: Counter = Counter()
        self.file_calls: Counter = Counter()
        self.fail_entries: set[int] = set()

    @classmethod
    def from_graph(
        cls, graph: dict[int, list[int]], game_version: str = "1.12.2"
    ) -> "FakeMetaClient":
        """Entry n has exactly one release whose file id is n * 10."""
        entries = {
            entry_id: make_entry(entry_id, releases={game_version: entry_id * 10})
            for entry_id in graph
        }
        files = {
            entry_id * 10: make_file(entry_id * 10, requires=tuple(deps))
            for entry_id, deps in graph.items()
        }
        return cls(entries, files)

    async def fetch_entry(self, entry_id: int) -> CatalogEntry:
        self.entry_calls[entry_id] += 1
        await asyncio.sleep(0)
        if entry_id in self.fail_entries:
            raise NetworkError(f"metadata API unavailable for {entry_id}")
        return self.entries[entry_id]

    async def fetch_file(self, entry_id: int, file_id: int) -> FileRecord:
        self.file_calls[file_id] += 1
        await asyncio.sleep(0)
        return self.files[file_id]


class FakeContent:
    def __init__(self, chunks: list[bytes], delay: float = 0):
        self._chunks = chunks
        self._delay = delay

    async def iter_chunked(self, n: int):
        for chunk in self._chunks:
            if self._delay:
                await asyncio.sleep(self._delay)
            yield chunk


class FakeResponse:
    def __init__(
        self,
        url: str,
        chunks: list[bytes],
        status: int = 200,
        content_length: int | None = None,
        delay: float = 0,
        session: "FakeSession | None" = None,
    ):
        self.url = url
        self.status = status
        self.content_length = content_length
        self.content = FakeContent(chunks, delay)
        self._session = session

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                request_info=Mock(real_url=self.url),
                history=(),
                status=self.status,
                message="Error",
            )

    async def __aenter__(self) -> "FakeResponse":
        if self._session:
            self._session.active += 1
            self._session.peak_active = max(
                self._session.peak_active, self._session.active
            )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._session:
            self._session.active -= 1


class FakeSession:
    """Serves canned bodies per URL, mimicking aiohttp.ClientSession.get()."""

    def __init__(self) -> None:
        self.routes: dict[str, dict[str, Any]] = {}
        self.requested: list[str] = []
        self.active = 0
        self.peak_active = 0
        self.closed = False

    def add(
        self,
        url: str,
        body: bytes = b"",
        chunk_size: int = 100,
        status: int = 200,
        with_length: bool = True,
        delay: float = 0,
    ) -> None:
        chunks = [body[i : i + chunk_size] for i in range(0, len(body), chunk_size)]
        self.routes[url] = {
            "chunks": chunks,
            "status": status,
            "content_length": len(body) if with_length else None,
            "delay": delay,
        }

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requested.append(url)
        if url not in self.routes:
            return FakeResponse(url, [], status=404, session=self)
        return FakeResponse(url, session=self, **self.routes[url])

    async def close(self) -> None:
        self.closed = True

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()


class RecordingProgress:
    """Collects progress calls made by the store and the installer."""

    def __init__(self) -> None:
        self.tasks: dict[int, dict[str, Any]] = {}
        self.session_total: int | None = None

    def initialize_session(self, total_files: int) -> None:
        self.session_total = total_files

    def add_transfer_task(self, description: str, total: int | None) -> int:
        task_id = len(self.tasks)
        self.tasks[task_id] = {
            "description": description,
            "total": total,
            "completed": 0,
            "finished": None,
        }
        return task_id

    def advance(self, task_id: int, amount: int) -> None:
        self.tasks[task_id]["completed"] += amount

    def update_task_total(self, task_id: int, total: int | None) -> None:
        self.tasks[task_id]["total"] = total

    def finish_task(self, task_id: int, success: bool = True) -> None:
        self.tasks[task_id]["finished"] = success


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def recording_progress() -> RecordingProgress:
    return RecordingProgress()


@pytest.fixture
def sample_catalog() -> Catalog:
    """A small catalog in catalog order, as the feed would list it."""
    return Catalog(
        entries=[
            make_entry(1, "Ender IO", download_count=5_000_000, slug="ender-io"),
            make_entry(2, "EnderCore", download_count=4_000_000, slug="endercore"),
            make_entry(3, "Ender Storage", download_count=9_000_000, slug="ender-storage"),
            make_entry(4, "JourneyMap", download_count=30_000_000, slug="journeymap"),
            make_entry(5, "Foo Bar", download_count=10, slug="foo-bar"),
        ]
    )
