"""
Core Logic Layer.

Catalog lookups, dependency resolution and the install orchestrator.
"""

from .catalog_index import CatalogIndex
from .install_manager import InstallManager, InstallOutcome
from .resolver import DependencyResolver, ResolvedSet

__all__ = [
    "CatalogIndex",
    "DependencyResolver",
    "InstallManager",
    "InstallOutcome",
    "ResolvedSet",
]
