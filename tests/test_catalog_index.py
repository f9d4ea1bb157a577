"""Tests for catalog lookups and reference dispatch."""

from unittest.mock import patch

import pytest

from conftest import make_entry
from modpkg.core.catalog_index import CatalogIndex
from modpkg.exceptions import InvalidReferenceError
from modpkg.models.catalog import Catalog


@pytest.fixture
def index(sample_catalog):
    return CatalogIndex(sample_catalog)


class TestLookups:
    def test_find_by_id(self, index):
        assert index.find_by_id(4).name == "JourneyMap"
        assert index.find_by_id(999) is None

    def test_duplicate_ids_keep_first(self):
        catalog = Catalog(entries=[make_entry(1, "First"), make_entry(1, "Second")])
        assert CatalogIndex(catalog).find_by_id(1).name == "First"

    def test_find_by_slug_is_suffix_match(self, index):
        assert index.find_by_slug("ender-io").id == 1
        assert index.find_by_slug("ENDER-IO").id == 1
        assert index.find_by_slug("does-not-exist") is None

    def test_find_by_slug_returns_first_in_catalog_order(self, index):
        # endercore and ender-storage both end in "e"
        assert index.find_by_slug("e").id == 2

    def test_find_by_name_prefers_downloads(self, index):
        assert index.find_by_name("ender").name == "Ender Storage"
        assert index.find_by_name("ENDER io").name == "Ender IO"
        assert index.find_by_name("nothing like this") is None

    def test_find_by_name_only_considers_first_hundred_matches(self):
        entries = [make_entry(i, f"Thing {i}", download_count=i) for i in range(1, 101)]
        entries.append(make_entry(500, "Thing Popular", download_count=10**9))
        index = CatalogIndex(Catalog(entries=entries))

        assert index.find_by_name("thing").id == 100

    def test_find_by_name_tie_keeps_first(self):
        entries = [
            make_entry(1, "Twin A", download_count=7),
            make_entry(2, "Twin B", download_count=7),
        ]
        assert CatalogIndex(Catalog(entries=entries)).find_by_name("twin").id == 1

    def test_search_orders_by_downloads(self, index):
        results = index.search_by_name_substring("ender")
        assert [e.name for e in results] == ["Ender Storage", "Ender IO", "EnderCore"]

    def test_search_without_match(self, index):
        assert index.search_by_name_substring("zzz") == []

    def test_len(self, index):
        assert len(index) == 5


class TestResolveReference:
    """Test the URL / id / name dispatch."""

    def test_numeric_reference_uses_id_lookup(self, index):
        with patch.object(index, "find_by_id", wraps=index.find_by_id) as by_id:
            entry = index.resolve_reference("4")
        by_id.assert_called_once_with(4)
        assert entry.name == "JourneyMap"

    def test_project_url_uses_slug_lookup(self, index):
        with patch.object(index, "find_by_slug", wraps=index.find_by_slug) as by_slug:
            entry = index.resolve_reference(
                "https://minecraft.curseforge.com/projects/foo-bar"
            )
        by_slug.assert_called_once_with("foo-bar")
        assert entry.id == 5

    def test_new_style_url_with_trailing_path(self, index):
        with patch.object(index, "find_by_slug", wraps=index.find_by_slug) as by_slug:
            entry = index.resolve_reference(
                "https://www.curseforge.com/minecraft/mc-mods/journeymap/files"
            )
        by_slug.assert_called_once_with("journeymap")
        assert entry.id == 4

    def test_text_reference_uses_name_lookup(self, index):
        with patch.object(index, "find_by_name", wraps=index.find_by_name) as by_name:
            entry = index.resolve_reference("Ender IO")
        by_name.assert_called_once_with("Ender IO")
        assert entry.id == 1

    def test_unknown_url_is_treated_as_name(self, index):
        with patch.object(index, "find_by_name", return_value=None) as by_name:
            assert index.resolve_reference("https://example.com/foo-bar") is None
        by_name.assert_called_once()

    def test_surrounding_whitespace_ignored(self, index):
        assert index.resolve_reference("  4  ").id == 4

    def test_missing_id_returns_none(self, index):
        assert index.resolve_reference("123") is None

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "   ",
            "https://minecraft.curseforge.com/projects/",
            "https://minecraft.curseforge.com/projects///",
            str(2**32),
        ],
    )
    def test_invalid_references(self, index, token):
        with pytest.raises(InvalidReferenceError):
            index.resolve_reference(token)

    def test_largest_id_is_valid(self, index):
        assert index.resolve_reference(str(2**32 - 1)) is None
