"""
Locates the game instance in a directory: its installed game version and the
directory that mods are installed into.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from packaging.version import InvalidVersion, Version

from modpkg.exceptions import InstanceNotFoundError, ManifestError

from .manifest import MANIFEST_FILE_NAME, Manifest

log = logging.getLogger(__name__)

MULTIMC_PACK_FILE = "mmc-pack.json"
GAME_COMPONENT_UID = "net.minecraft"


class Flavour(str, Enum):
    MULTIMC = "MultiMC"
    VANILLA = "Vanilla"


@dataclass
class GameInstance:
    flavour: Flavour
    game_version: Optional[str]
    mods_dir: Path
    root: Path

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_FILE_NAME

    def manifest(self, game_version: Optional[str] = None) -> Manifest:
        """
        Reads the instance's manifest, or creates a default one in memory.
        A new manifest records `game_version` when given, else the detected one.
        """
        game_version = game_version or self.game_version
        try:
            return Manifest.load(self.manifest_path)
        except FileNotFoundError:
            if not game_version:
                raise ManifestError(
                    "Cannot create a manifest for an instance without a game version."
                ) from None
            log.debug(f"No {MANIFEST_FILE_NAME} found, starting a new one")
            return Manifest.default(self.manifest_path, game_version)


def _version_key(name: str) -> tuple:
    try:
        return (1, Version(name), name)
    except InvalidVersion:
        return (0, Version("0"), name)


def _read_multimc_instance(root: Path) -> Optional[GameInstance]:
    pack_file = root / MULTIMC_PACK_FILE
    if not pack_file.is_file():
        return None
    try:
        pack = json.loads(pack_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.debug(f"Ignoring unreadable {pack_file}: {e}")
        return None

    version = None
    for component in pack.get("components", []):
        if component.get("uid") == GAME_COMPONENT_UID:
            version = component.get("cachedVersion")
            break

    game_dir = next(
        (
            path
            for path in (root / "minecraft", root / ".minecraft")
            if path.is_dir()
        ),
        None,
    )
    if game_dir is None:
        log.debug(f"{pack_file} has no minecraft directory next to it")
        return None
    return GameInstance(Flavour.MULTIMC, version, game_dir / "mods", root)


def _read_vanilla_instance(root: Path) -> Optional[GameInstance]:
    versions_dir = root / "versions"
    if not versions_dir.is_dir():
        return None
    names = [p.name for p in versions_dir.iterdir() if p.is_dir()]
    if not names:
        raise InstanceNotFoundError("You need to launch the game once.")
    latest = max(names, key=_version_key)
    log.info(
        f"🛈 Assuming the latest installed game version {latest}. "
        "Use --game-version <version> to override this."
    )
    return GameInstance(
        Flavour.VANILLA, latest, versions_dir / latest / "mods", root
    )


def detect_instance(root: Path | None = None) -> GameInstance:
    """
    Tries a MultiMC instance first, then falls back to a vanilla launcher layout.

    Raises:
        InstanceNotFoundError: Neither layout is present under `root`.
    """
    root = (root or Path.cwd()).resolve()
    instance = _read_multimc_instance(root) or _read_vanilla_instance(root)
    if instance is None:
        raise InstanceNotFoundError(f"No game instance found in '{root}'.")
    log.debug(f"Detected {instance.flavour.value} instance at {root}")
    return instance
