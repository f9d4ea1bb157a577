"""
Data Models Layer.

This package contains Pydantic models that define the catalog records, the
application configuration and the install statistics.
"""

from .catalog import (
    Catalog,
    CatalogEntry,
    Dependency,
    FileRecord,
    GameVersionRelease,
    ReleaseType,
    RequirementKind,
)
from .config import AppConfig
from .stats import InstallStats

__all__ = [
    "AppConfig",
    "Catalog",
    "CatalogEntry",
    "Dependency",
    "FileRecord",
    "GameVersionRelease",
    "InstallStats",
    "ReleaseType",
    "RequirementKind",
]
