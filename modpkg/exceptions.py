"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class ModPkgError(Exception):
    """Base exception for all application-specific errors."""


class NotFoundError(ModPkgError):
    """Raised when no catalog entry or file matches a query or reference."""


class UnsupportedVersionError(ModPkgError):
    """Raised when an entry has no release for the target game version."""

    def __init__(self, entry_name: str, game_version: str):
        self.entry_name = entry_name
        self.game_version = game_version
        super().__init__(
            f"The mod {entry_name} is not available for your game version "
            f"({game_version})."
        )


class CacheMissingError(ModPkgError):
    """Raised when the local catalog snapshot does not exist yet."""


class CacheCorruptError(ModPkgError):
    """
    Raised when the local catalog snapshot exists but cannot be decoded.
    This is never treated as a missing cache.
    """


class NetworkError(ModPkgError):
    """Raised for any transport or HTTP failure, or a malformed remote record."""


class LocalIOError(ModPkgError):
    """Raised when reading from or writing to the local disk fails."""


class InvalidReferenceError(ModPkgError):
    """Raised when a user-supplied mod reference cannot be interpreted."""


class ConfigurationError(ModPkgError):
    """Raised for issues related to configuration loading or validation."""


class InstanceNotFoundError(ModPkgError):
    """Raised when no game instance can be found in the working directory."""


class ManifestError(ModPkgError):
    """Raised when the minepkg.toml manifest cannot be read, parsed or saved."""
