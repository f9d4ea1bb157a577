"""
Pydantic models for the add-on catalog feed and the per-id metadata API.

Both sources share the same PascalCase record shapes, with a few quirks:
enum-like fields arrive either as integers or as strings, download counts are
floats, and a file's dependency list may be null.
"""

import math
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from modpkg.utils.path import slug_from_url


class RequirementKind(str, Enum):
    REQUIRED = "Required"
    OPTIONAL = "Optional"
    EMBEDDED = "Embedded"


class ReleaseType(str, Enum):
    RELEASE = "Release"
    BETA = "Beta"
    ALPHA = "Alpha"


_REQUIREMENT_CODES = {1: RequirementKind.REQUIRED, 2: RequirementKind.OPTIONAL}
_RELEASE_CODES = {1: ReleaseType.RELEASE, 2: ReleaseType.BETA}


def _map_enum(value: Any, codes: dict, fallback: Enum) -> Enum:
    """Maps an integer code or a string name onto an enum, defaulting to `fallback`."""
    if isinstance(value, fallback.__class__):
        return value
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return codes.get(value, fallback)
    if isinstance(value, str):
        for member in codes.values():
            if value == member.value:
                return member
    return fallback


class _FeedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Dependency(_FeedModel):
    """A reference from a file to another catalog entry."""

    entry_id: int = Field(alias="AddOnId", ge=0)
    kind: RequirementKind = Field(alias="Type", default=RequirementKind.REQUIRED)

    @field_validator("kind", mode="before")
    @classmethod
    def map_kind(cls, v: Any) -> RequirementKind:
        return _map_enum(v, _REQUIREMENT_CODES, RequirementKind.EMBEDDED)

    @property
    def is_required(self) -> bool:
        return self.kind is RequirementKind.REQUIRED


class FileRecord(_FeedModel):
    """
    One downloadable artifact of an entry.

    Equality and hashing use the file id only, so a set of FileRecords never
    holds the same artifact twice regardless of how the record was fetched.
    """

    id: int = Field(alias="Id", ge=0)
    download_url: str = Field(alias="DownloadURL", default="")
    file_name: str = Field(alias="FileName", default="")
    game_versions: list[str] = Field(alias="GameVersion", default_factory=list)
    dependencies: list[Dependency] = Field(
        alias="Dependencies", default_factory=list
    )

    @field_validator("dependencies", "game_versions", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def required_dependencies(self) -> list[Dependency]:
        return [dep for dep in self.dependencies if dep.is_required]

    def supports(self, game_version: str) -> bool:
        return game_version in self.game_versions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileRecord):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class GameVersionRelease(_FeedModel):
    """The latest file of an entry for one game version."""

    file_id: int = Field(alias="ProjectFileID", ge=0)
    # The feed really spells this key "GameVesion".
    game_version: str = Field(
        validation_alias=AliasChoices("GameVesion", "GameVersion", "game_version")
    )
    release_type: ReleaseType = Field(alias="FileType", default=ReleaseType.RELEASE)

    @field_validator("release_type", mode="before")
    @classmethod
    def map_release_type(cls, v: Any) -> ReleaseType:
        return _map_enum(v, _RELEASE_CODES, ReleaseType.ALPHA)


class CatalogEntry(_FeedModel):
    """A distributable add-on as listed in the catalog."""

    id: int = Field(alias="Id", ge=0)
    name: str = Field(alias="Name")
    web_site_url: str = Field(alias="WebSiteURL", default="")
    download_count: int = Field(alias="DownloadCount", default=0)
    latest_files: list[FileRecord] = Field(alias="LatestFiles", default_factory=list)
    releases: list[GameVersionRelease] = Field(
        alias="GameVersionLatestFiles", default_factory=list
    )

    @field_validator("download_count", mode="before")
    @classmethod
    def truncate_download_count(cls, v: Any) -> Any:
        """The feed reports downloads as a float; truncate it, clamping at zero."""
        if isinstance(v, float) and not math.isfinite(v):
            return 0
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return max(0, int(v))
        return v

    @field_validator("latest_files", "releases", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def slug(self) -> str:
        return slug_from_url(self.web_site_url)

    def release_for_version(self, game_version: str) -> GameVersionRelease | None:
        """Gets the latest release record for the given game version."""
        for release in self.releases:
            if release.game_version == game_version:
                return release
        return None

    def latest_file_for(self, game_version: str) -> FileRecord | None:
        """
        Gets the first of the latest uploads that supports `game_version`.
        May return None even if the entry supports that version.
        """
        for file in self.latest_files:
            if file.supports(game_version):
                return file
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CatalogEntry):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class Catalog(_FeedModel):
    """The full, ordered listing of entries as retrieved from the remote feed."""

    entries: list[CatalogEntry] = Field(alias="data", default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)
