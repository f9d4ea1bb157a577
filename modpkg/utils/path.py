"""
Utilities for handling file names and catalog URLs.
"""

from pathvalidate import sanitize_filename

PACKAGE_EXTENSION = ".jar"


def slug_from_url(url: str) -> str:
    """Returns the last non-empty path segment of a project URL."""
    segments = [s for s in url.split("?", 1)[0].split("/") if s]
    return segments[-1] if segments else ""


def package_file_name(declared_name: str) -> str:
    """
    Builds the on-disk name for a downloaded file.

    Files whose declared name lacks the package-archive extension get it
    appended so the game's loader picks them up.
    """
    file_name = sanitize_filename(declared_name, platform="auto")
    if not file_name:
        file_name = "unnamed"
    if not file_name.lower().endswith(PACKAGE_EXTENSION):
        file_name += PACKAGE_EXTENSION
    return file_name
