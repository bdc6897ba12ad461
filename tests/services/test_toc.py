"""Tests for TocService."""

from __future__ import annotations

from pathlib import Path

from guidectl.infrastructure.guide import Guide
from guidectl.services.toc import TocService, _nest, render_markdown_toc
from tests.conftest import open_guide, write_files


class TestNest:
    def test_builds_tree(self) -> None:
        flat = [
            {"level": 2, "text": "A"},
            {"level": 3, "text": "A.1"},
            {"level": 3, "text": "A.2"},
            {"level": 2, "text": "B"},
        ]
        tree = _nest(flat)
        assert [n["text"] for n in tree] == ["A", "B"]
        assert [n["text"] for n in tree[0]["children"]] == ["A.1", "A.2"]
        assert tree[1]["children"] == []


class TestToc:
    def test_chapters_in_reading_order(self, guide: Guide) -> None:
        result = TocService(guide).toc()
        assert result.ok
        assert result.op == "toc"
        assert result.data["title"] == "Ecto for Rails Developers"
        assert [c["path"] for c in result.data["chapters"]] == [
            "README.md",
            "schemas.md",
            "querying.md",
        ]
        assert result.data["count"] == 3

    def test_title_heading_folded_into_chapter(self, guide: Guide) -> None:
        chapters = TocService(guide).toc().data["chapters"]
        schemas = chapters[1]
        assert schemas["title"] == "Schemas"
        assert [h["text"] for h in schemas["headings"]] == ["Defining a schema", "Associations"]
        assert schemas["headings"][0]["anchor"] == "defining-a-schema"
        assert schemas["headings"][0]["line"] == 5

    def test_depth_limit(self, guide: Guide) -> None:
        chapters = TocService(guide).toc(depth=1).data["chapters"]
        assert all(c["headings"] == [] for c in chapters)

    def test_depth_from_config(self, guide_root: Path) -> None:
        write_files(
            guide_root,
            {
                "guidectl.toml": "[build]\ntoc_depth = 2\n",
                "querying.md": "# Querying\n\n[Back](README.md)\n\n## Joins\n\n### Inner\n",
            },
        )
        chapters = TocService(open_guide(guide_root)).toc().data["chapters"]
        joins = chapters[-1]["headings"][0]
        assert joins["text"] == "Joins"
        assert joins["children"] == []

    def test_nested_headings(self, guide_root: Path) -> None:
        write_files(
            guide_root,
            {"querying.md": "# Querying\n\n[Back](README.md)\n\n## Joins\n\n### Inner\n"},
        )
        chapters = TocService(open_guide(guide_root)).toc().data["chapters"]
        joins = chapters[-1]["headings"][0]
        assert [c["anchor"] for c in joins["children"]] == ["inner"]

    def test_markdown_rendering(self, guide: Guide) -> None:
        markdown = TocService(guide).toc().data["markdown"]
        lines = markdown.splitlines()
        assert lines[0] == "- [Ecto for Rails Developers](README.md)"
        assert "  - [Glossary](#glossary)" in lines
        assert "- [Schemas](schemas.md)" in lines
        assert "  - [Defining a schema](schemas.md#defining-a-schema)" in lines
        assert "  - [Preloading](querying.md#preloading)" in lines


class TestRenderMarkdownToc:
    def test_relative_to_base(self) -> None:
        chapters = [
            {
                "path": "guides/intro.md",
                "title": "Intro",
                "headings": [{"text": "Setup", "anchor": "setup", "children": []}],
            }
        ]
        text = render_markdown_toc(chapters, base="docs/README.md")
        assert text == "- [Intro](../guides/intro.md)\n  - [Setup](../guides/intro.md#setup)"
