"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CATALOG_URL = (
    "https://clientupdate-v6.cursecdn.com/feed/addons/432/v10/complete.json.bz2"
)
DEFAULT_META_API_URL = "https://cursemeta.dries007.net/api/v2/direct"
SNAPSHOT_FILE_NAME = "complete.json.lz4"


def get_data_dir() -> Path:
    """Per-user directory holding the catalog snapshot."""
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_DATA_HOME", "~/.local/share"))
    return base_dir.expanduser() / "modpkg"


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "modpkg"


class AppConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Storage
    data_dir: Path = Field(default_factory=get_data_dir)

    # Remote endpoints
    catalog_url: str = DEFAULT_CATALOG_URL
    meta_api_url: str = DEFAULT_META_API_URL

    # Transfer settings
    max_downloads: int = 8
    request_timeout: float | None = 60.0
    chunk_size: int = 65536
    estimated_file_size: int = 2_500_000

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / SNAPSHOT_FILE_NAME

    @field_validator("catalog_url", "meta_api_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Expected an http(s) URL, got: {v!r}")
        return v.rstrip("/")

    @field_validator("max_downloads")
    @classmethod
    def validate_downloads(cls, v: int) -> int:
        """Ensures a reasonable number of concurrent downloads."""
        if v < 1 or v > 32:
            raise ValueError("Max downloads must be between 1 and 32.")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        # 0 disables the timeout
        if v is None or v == 0:
            return None
        if v < 0:
            raise ValueError("Request timeout cannot be negative.")
        return v

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v < 1024:
            raise ValueError("Chunk size must be at least 1024 bytes.")
        return v

    @field_validator("estimated_file_size")
    @classmethod
    def validate_estimate(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Estimated file size must be positive.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        return set(cls.model_fields)
