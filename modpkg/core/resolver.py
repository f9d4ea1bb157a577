"""
Resolves the transitive set of required files for one or more root entries
against a fixed game version, using the remote metadata API.
"""

import logging
from typing import Dict, Iterator, List, Protocol, Set

from modpkg.exceptions import UnsupportedVersionError
from modpkg.models.catalog import CatalogEntry, FileRecord
from modpkg.utils.concurrency import gather_fail_fast

log = logging.getLogger(__name__)


class MetadataSource(Protocol):
    """What the resolver needs from the metadata service."""

    async def fetch_entry(self, entry_id: int) -> CatalogEntry: ...

    async def fetch_file(self, entry_id: int, file_id: int) -> FileRecord: ...


class ResolvedSet:
    """
    Files keyed by file id. Adding an id that is already present is a no-op.

    `add` never awaits, so under asyncio the membership check and the insert
    cannot interleave with another branch: exactly one racing caller gets True.
    """

    def __init__(self) -> None:
        self._files: Dict[int, FileRecord] = {}

    def add(self, file: FileRecord) -> bool:
        """Inserts `file` if its id is unseen. Returns True when newly inserted."""
        if file.id in self._files:
            return False
        self._files[file.id] = file
        return True

    def __contains__(self, file: object) -> bool:
        return isinstance(file, FileRecord) and file.id in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(list(self._files.values()))

    def ids(self) -> Set[int]:
        return set(self._files)

    def files(self) -> List[FileRecord]:
        return list(self._files.values())


class DependencyResolver:
    """
    Walks the required-dependency graph concurrently.

    Each branch fetches an entry, picks its release for the target game
    version, fetches that file and, if the file is new to the resolved set,
    spawns one branch per required dependency. Branches for an entry that
    another branch already claimed stop immediately, which bounds the work on
    cycles and diamonds. The first error aborts the whole resolution.
    """

    def __init__(self, api_client: MetadataSource, game_version: str):
        self.api_client = api_client
        self.game_version = game_version
        self.resolved = ResolvedSet()
        self._claimed_entries: Set[int] = set()

    async def resolve(self, *entry_ids: int) -> ResolvedSet:
        """
        Resolves all given roots and their required dependencies.

        Returns:
            The resolved set, including the root files themselves.

        Raises:
            UnsupportedVersionError: An entry in the graph has no release for
                the target game version.
            NetworkError, NotFoundError: A metadata call failed.
        """
        await gather_fail_fast(self._resolve_branch(eid) for eid in entry_ids)
        log.debug(
            f"Resolved {len(self.resolved)} files for game version {self.game_version}"
        )
        return self.resolved

    async def _resolve_branch(self, entry_id: int) -> None:
        if entry_id in self._claimed_entries:
            return
        self._claimed_entries.add(entry_id)

        entry = await self.api_client.fetch_entry(entry_id)
        release = entry.release_for_version(self.game_version)
        if release is None:
            raise UnsupportedVersionError(entry.name, self.game_version)

        file = await self.api_client.fetch_file(entry.id, release.file_id)
        if not self.resolved.add(file):
            log.debug(f"File {file.id} ({file.file_name}) already resolved")
            return
        log.debug(f"{entry.name} -> {file.file_name}")

        dependencies = file.required_dependencies()
        if dependencies:
            await gather_fail_fast(
                self._resolve_branch(dep.entry_id) for dep in dependencies
            )
