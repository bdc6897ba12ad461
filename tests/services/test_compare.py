"""Tests for CompareService — translation pairs."""

from __future__ import annotations

from pathlib import Path

from guidectl.infrastructure.guide import Guide
from guidectl.services.compare import CompareService
from tests.conftest import open_guide, write_files


class TestPairs:
    def test_default_languages(self, guide: Guide) -> None:
        result = CompareService(guide).pairs()
        assert result.ok
        assert result.op == "pairs"
        assert result.data["left"] == "ruby"
        assert result.data["right"] == "elixir"
        assert result.data["count"] == 2
        assert result.data["unpaired_count"] == 0

        first, second = result.data["pairs"]
        assert first["path"] == "schemas.md"
        assert first["section"] == "defining-a-schema"
        assert first["heading"] == "Defining a schema"
        assert first["left"]["code"].startswith("class User")
        assert first["right"]["line"] == 12
        assert second["path"] == "querying.md"
        assert second["left"]["language"] == "rb"

    def test_single_chapter(self, guide: Guide) -> None:
        result = CompareService(guide).pairs(chapter="querying")
        assert [p["path"] for p in result.data["pairs"]] == ["querying.md"]

    def test_unknown_chapter(self, guide: Guide) -> None:
        result = CompareService(guide).pairs(chapter="callbacks")
        assert result.error is not None
        assert result.error.code == "CHAPTER_NOT_FOUND"

    def test_unknown_language(self, guide: Guide) -> None:
        result = CompareService(guide).pairs(left="notalanguage")
        assert result.error is not None
        assert result.error.code == "UNKNOWN_LANGUAGE"

    def test_aliases_accepted(self, guide: Guide) -> None:
        result = CompareService(guide).pairs(left="rb", right="exs")
        assert result.data["left"] == "ruby"
        assert result.data["count"] == 2

    def test_unpaired_blocks(self, guide_root: Path) -> None:
        write_files(
            guide_root,
            {
                "querying.md": (
                    "# Querying\n\n[Back](README.md)\n\n## Missing translation\n\n"
                    "```ruby\nUser.first\n```\n\n## Stray\n\n```elixir\nRepo.one(q)\n```\n"
                )
            },
        )
        result = CompareService(open_guide(guide_root)).pairs(chapter="querying")
        assert result.data["count"] == 0
        sides = {(u["section"], u["side"]) for u in result.data["unpaired"]}
        assert sides == {("missing-translation", "left"), ("stray", "right")}

    def test_pairs_in_order_within_section(self, guide_root: Path) -> None:
        write_files(
            guide_root,
            {
                "querying.md": (
                    "# Querying\n\n[Back](README.md)\n\n## Both\n\n"
                    "```ruby\nA\n```\n\n```ruby\nB\n```\n\n"
                    "```elixir\na\n```\n\n```elixir\nb\n```\n"
                )
            },
        )
        pairs = CompareService(open_guide(guide_root)).pairs(chapter="querying").data["pairs"]
        assert [(p["left"]["code"], p["right"]["code"]) for p in pairs] == [
            ("A\n", "a\n"),
            ("B\n", "b\n"),
        ]

    def test_other_languages_ignored(self, guide_root: Path) -> None:
        write_files(
            guide_root,
            {
                "querying.md": (
                    "# Querying\n\n[Back](README.md)\n\n## SQL\n\n"
                    "```ruby\nA\n```\n\n```sql\nSELECT 1\n```\n\n```elixir\na\n```\n"
                )
            },
        )
        result = CompareService(open_guide(guide_root)).pairs(chapter="querying")
        assert result.data["count"] == 1
