"""Tests for the Guide repository object."""

from __future__ import annotations

from pathlib import Path

from guidectl.infrastructure.guide import Guide
from tests.conftest import open_guide, write_files


class TestDocuments:
    def test_loads_every_chapter(self, guide: Guide) -> None:
        assert sorted(guide.documents) == ["README.md", "querying.md", "schemas.md"]
        assert guide.load_warnings == []

    def test_settings_from_toml(self, guide: Guide) -> None:
        assert guide.settings.guide.title == "Ecto for Rails Developers"

    def test_output_dir_excluded(self, guide_root: Path) -> None:
        write_files(guide_root, {"site/stale.md": "# Stale\n"})
        assert "site/stale.md" not in open_guide(guide_root).documents

    def test_configured_exclude(self, guide_root: Path) -> None:
        write_files(
            guide_root,
            {
                "guidectl.toml": '[guide]\nexclude = ["drafts"]\n',
                "drafts/wip.md": "# WIP\n",
            },
        )
        assert "drafts/wip.md" not in open_guide(guide_root).documents

    def test_unreadable_file_is_a_warning(self, guide_root: Path) -> None:
        (guide_root / "broken.md").write_bytes(b"# \xff\xfe bad\n")
        guide = open_guide(guide_root)
        assert "broken.md" not in guide.documents
        assert len(guide.load_warnings) == 1
        assert "broken.md" in guide.load_warnings[0]

    def test_reload_picks_up_changes(self, guide: Guide) -> None:
        assert "extra.md" not in guide.documents
        write_files(guide.root, {"extra.md": "# Extra\n"})
        guide.reload()
        assert "extra.md" in guide.documents


class TestDocumentLookup:
    def test_by_path(self, guide: Guide) -> None:
        doc = guide.document("querying.md")
        assert doc is not None
        assert doc.path == "querying.md"

    def test_by_path_without_suffix(self, guide: Guide) -> None:
        doc = guide.document("./schemas")
        assert doc is not None
        assert doc.path == "schemas.md"

    def test_by_title(self, guide: Guide) -> None:
        doc = guide.document("Ecto for Rails Developers")
        assert doc is not None
        assert doc.path == "README.md"

    def test_case_insensitive_stem(self, guide: Guide) -> None:
        doc = guide.document("QUERYING")
        assert doc is not None
        assert doc.path == "querying.md"

    def test_missing(self, guide: Guide) -> None:
        assert guide.document("callbacks") is None


class TestGraphAndOrder:
    def test_edges_follow_internal_links(self, guide: Guide) -> None:
        g = guide.graph
        assert g.has_edge("README.md", "schemas.md")
        assert g.has_edge("README.md", "querying.md")
        assert g.has_edge("schemas.md", "querying.md")
        assert g.has_edge("querying.md", "README.md")

    def test_reading_order_follows_root_links(self, guide: Guide) -> None:
        assert guide.chapter_order() == ["README.md", "schemas.md", "querying.md"]

    def test_configured_order_wins(self, guide_root: Path) -> None:
        write_files(
            guide_root,
            {"guidectl.toml": '[guide]\nchapters = ["querying", "schemas.md"]\n'},
        )
        guide = open_guide(guide_root)
        assert guide.chapter_order() == ["README.md", "querying.md", "schemas.md"]

    def test_unlinked_documents_sort_last(self, guide_root: Path) -> None:
        write_files(guide_root, {"appendix.md": "# Appendix\n"})
        guide = open_guide(guide_root)
        assert guide.chapter_order()[-1] == "appendix.md"
        assert "appendix.md" not in guide.reachable_from_root()

    def test_neighbours(self, guide: Guide) -> None:
        assert guide.neighbours("README.md") == (None, "schemas.md")
        assert guide.neighbours("schemas.md") == ("README.md", "querying.md")
        assert guide.neighbours("querying.md") == ("schemas.md", None)
        assert guide.neighbours("nope.md") == (None, None)

    def test_missing_root_has_nothing_reachable(self, guide_root: Path) -> None:
        (guide_root / "README.md").unlink()
        guide = open_guide(guide_root)
        assert guide.reachable_from_root() == set()
        assert guide.chapter_order() == ["querying.md", "schemas.md"]


class TestPaths:
    def test_state_and_output_dirs(self, guide: Guide) -> None:
        assert guide.state_dir == guide.root / ".guidectl"
        assert guide.output_dir == (guide.root / "site").resolve()
        assert guide.root_document == "README.md"

    def test_exists(self, guide: Guide) -> None:
        assert guide.exists("schemas.md")
        assert guide.exists("guidectl.toml")
        assert not guide.exists("nope.md")
