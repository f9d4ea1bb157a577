"""
Read-only lookups over a loaded catalog: by id, by URL slug, by fuzzy name,
and the three-way dispatch that turns a user-supplied reference into an entry.
"""

import logging
from typing import Dict, List, Optional

from modpkg.exceptions import InvalidReferenceError
from modpkg.models.catalog import Catalog, CatalogEntry

log = logging.getLogger(__name__)

KNOWN_URL_PREFIXES = (
    "https://minecraft.curseforge.com/projects/",
    "https://www.curseforge.com/minecraft/mc-mods/",
)
NAME_MATCH_WINDOW = 100
MAX_ENTRY_ID = 2**32 - 1


class CatalogIndex:
    """In-memory index over one catalog snapshot."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self._by_id: Dict[int, CatalogEntry] = {}
        for entry in catalog.entries:
            self._by_id.setdefault(entry.id, entry)

    def __len__(self) -> int:
        return len(self.catalog.entries)

    def find_by_id(self, entry_id: int) -> Optional[CatalogEntry]:
        return self._by_id.get(entry_id)

    def find_by_slug(self, fragment: str) -> Optional[CatalogEntry]:
        """Case-insensitive suffix match against each entry's web-site URL."""
        fragment = fragment.lower()
        for entry in self.catalog.entries:
            if entry.web_site_url.lower().endswith(fragment):
                return entry
        return None

    def find_by_name(self, query: str) -> Optional[CatalogEntry]:
        """
        Finds a mod by name, preferring popular ones.

        Only the first 100 substring matches (in catalog order) are considered;
        the most downloaded of those wins. A better match further down the
        catalog is not seen.
        """
        query = query.lower()
        window: List[CatalogEntry] = []
        for entry in self.catalog.entries:
            if query in entry.name.lower():
                window.append(entry)
                if len(window) == NAME_MATCH_WINDOW:
                    break
        if not window:
            return None
        return max(window, key=lambda e: e.download_count)

    def search_by_name_substring(self, query: str) -> List[CatalogEntry]:
        """All entries whose name contains `query`, most downloaded first."""
        query = query.lower()
        matches = [e for e in self.catalog.entries if query in e.name.lower()]
        matches.sort(key=lambda e: e.download_count, reverse=True)
        return matches

    def resolve_reference(self, token: str) -> Optional[CatalogEntry]:
        """
        Tries its best to find a mod from a human-supplied reference:

        1. a known project URL -> search by the slug after the prefix
        2. an unsigned integer -> find by id
        3. anything else -> find by name
        """
        token = token.strip()
        if not token:
            raise InvalidReferenceError("An empty mod reference was given.")

        lowered = token.lower()
        for prefix in KNOWN_URL_PREFIXES:
            if lowered.startswith(prefix):
                slug = token[len(prefix):].strip("/").split("/", 1)[0]
                if not slug:
                    raise InvalidReferenceError(
                        f"The URL '{token}' does not name a project."
                    )
                log.debug(f"Looking up '{token}' by slug '{slug}'")
                return self.find_by_slug(slug)

        if token.isascii() and token.isdigit():
            entry_id = int(token)
            if entry_id > MAX_ENTRY_ID:
                raise InvalidReferenceError(
                    f"'{token}' looks like a mod id but is out of range."
                )
            log.debug(f"Looking up '{token}' by id")
            return self.find_by_id(entry_id)

        log.debug(f"Looking up '{token}' by name")
        return self.find_by_name(token)
