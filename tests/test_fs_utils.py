"""Tests for fs/utils.py — relative folder helpers and natural ordering."""

from __future__ import annotations

import pytest

from sharegate.fs.utils import (
    ancestors,
    join_relative,
    natural_key,
    normalize_folder,
    split_folder,
)

# ---------------------------------------------------------------------------
# normalize_folder
# ---------------------------------------------------------------------------


class TestNormalizeFolder:
    @pytest.mark.parametrize(
        ("folder", "expected"),
        [
            pytest.param("", "root", id="empty"),
            pytest.param("root", "root", id="root"),
            pytest.param("/", "root", id="slash"),
            pytest.param("/reports/", "reports", id="surrounding-slashes"),
            pytest.param("reports\\drafts", "reports/drafts", id="backslashes"),
            pytest.param("a//b", "a/b", id="double-slash"),
            pytest.param("  docs \n", "docs", id="whitespace"),
            pytest.param("Root", "Root", id="root-is-case-sensitive"),
        ],
    )
    def test_normalize(self, folder: str, expected: str):
        assert normalize_folder(folder) == expected


class TestSplitAndJoin:
    def test_split_root(self):
        assert split_folder("root") == []

    def test_split_nested(self):
        assert split_folder("/reports/drafts/") == ["reports", "drafts"]

    def test_join_onto_root(self):
        assert join_relative("root", "a") == "a"

    def test_join_nested(self):
        assert join_relative("a/b", "c") == "a/b/c"


class TestAncestors:
    def test_most_specific_first(self):
        assert ancestors("a/b/c") == ["a/b/c", "a/b", "a", "root"]

    def test_root_only(self):
        assert ancestors("root") == ["root"]


class TestNaturalKey:
    def test_numbers_sort_numerically(self):
        names = ["file10", "file2", "File1"]
        assert sorted(names, key=natural_key) == ["File1", "file2", "file10"]

    def test_case_insensitive(self):
        assert natural_key("Alpha") == natural_key("alpha")
