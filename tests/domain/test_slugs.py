"""Tests for heading anchor slugs."""

from __future__ import annotations

import pytest

from guidectl.domain.slugs import slugify, unique_anchors


class TestSlugify:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Data Changes", "data-changes"),
            ("Repo.preload/3 & Joins", "repopreload3--joins"),
            ("has_many :through", "has_many-through"),
            ("  Trailing  ", "trailing"),
            ("Übersicht", "übersicht"),
            ("Step 1 - Setup", "step-1---setup"),
        ],
    )
    def test_github_compatible(self, text: str, expected: str) -> None:
        assert slugify(text) == expected

    def test_empty(self) -> None:
        assert slugify("") == ""


class TestUniqueAnchors:
    def test_repeats_get_suffixes(self) -> None:
        assert unique_anchors(["Example", "Example", "Example"]) == [
            "example",
            "example-1",
            "example-2",
        ]

    def test_distinct_headings_untouched(self) -> None:
        assert unique_anchors(["Schemas", "Changesets"]) == ["schemas", "changesets"]

    def test_suffix_skips_existing_anchor(self) -> None:
        """An explicit 'Example 1' heading already owns example-1."""
        assert unique_anchors(["Example-1", "Example", "Example"]) == [
            "example-1",
            "example",
            "example-2",
        ]
