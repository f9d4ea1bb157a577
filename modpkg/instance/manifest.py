"""
Reads and writes the minepkg.toml manifest that records a modpack's dependencies.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import List

import tomlkit
from tomlkit.exceptions import TOMLKitError

from modpkg.exceptions import ManifestError
from modpkg.models.catalog import CatalogEntry

log = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "minepkg.toml"
CURSE_PROVIDER = "curse"

MANIFEST_TEMPLATE = """\
[package]
name = ""
version = "0.1.0"

[requirements]
minecraft-version = ""

[dependencies]
"""


@dataclass(frozen=True)
class ManifestDependency:
    provider: str
    name: str


class Manifest:
    """A format-preserving view over one minepkg.toml file."""

    def __init__(self, path: Path, document: tomlkit.TOMLDocument):
        self.path = path
        self._doc = document

    @classmethod
    def load(cls, path: Path) -> "Manifest":
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise
        except OSError as e:
            raise ManifestError(f"Error reading your {path.name}: {e}") from e
        try:
            return cls(path, tomlkit.parse(text))
        except TOMLKitError as e:
            raise ManifestError(f"Invalid {path.name} manifest: {e}") from e

    @classmethod
    def default(cls, path: Path, game_version: str) -> "Manifest":
        """A fresh manifest named after the directory that will hold it."""
        manifest = cls(path, tomlkit.parse(MANIFEST_TEMPLATE))
        manifest._doc["package"]["name"] = path.parent.resolve().name
        manifest.set_game_version(game_version)
        return manifest

    @property
    def name(self) -> str:
        try:
            return str(self._doc["package"]["name"])
        except KeyError as e:
            raise ManifestError("The modpack has no name.") from e

    @property
    def game_version(self) -> str | None:
        requirements = self._doc.get("requirements", {})
        value = requirements.get("minecraft-version")
        return str(value) if value else None

    def set_game_version(self, version: str) -> None:
        if "requirements" not in self._doc:
            self._doc["requirements"] = tomlkit.table()
        self._doc["requirements"]["minecraft-version"] = version

    def dependencies(self) -> List[ManifestDependency]:
        """Parses each `slug = "provider:name"` entry of the dependencies table."""
        table = self._doc.get("dependencies")
        if table is None:
            return []
        if not isinstance(table, Mapping):
            raise ManifestError("Invalid modpack dependencies.")

        dependencies = []
        for key, value in table.items():
            provider, sep, name = str(value).partition(":")
            if not sep or not name:
                raise ManifestError(
                    f"Dependency '{key}' must look like 'provider:name', got '{value}'."
                )
            if provider != CURSE_PROVIDER:
                raise ManifestError(
                    f"Dependency '{key}' uses unsupported provider '{provider}'."
                )
            dependencies.append(ManifestDependency(provider=provider, name=name))
        return dependencies

    def add_dependency(self, entry: CatalogEntry) -> None:
        slug = entry.slug
        if "dependencies" not in self._doc:
            self._doc["dependencies"] = tomlkit.table()
        self._doc["dependencies"][slug] = f"{CURSE_PROVIDER}:{slug}"
        log.debug(f"Added {slug} to {self.path.name}")

    def save(self) -> None:
        try:
            self.path.write_text(tomlkit.dumps(self._doc), encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Could not save {self.path}: {e}") from e
