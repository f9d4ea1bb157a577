"""
Storage Layer.

This package handles all data persistence: the catalog snapshot and the
configuration file.
"""

from .catalog_store import CatalogStore
from .config_manager import ConfigManager

__all__ = ["CatalogStore", "ConfigManager"]
