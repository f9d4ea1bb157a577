"""
Game Instance Layer.

Detects the local game installation and manages its minepkg.toml manifest.
"""

from .detector import Flavour, GameInstance, detect_instance
from .manifest import Manifest, ManifestDependency

__all__ = [
    "Flavour",
    "GameInstance",
    "Manifest",
    "ManifestDependency",
    "detect_instance",
]
