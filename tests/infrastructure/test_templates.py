"""Tests for Jinja2 template loading and per-guide overrides."""

from __future__ import annotations

from pathlib import Path

from guidectl.infrastructure.templates import build_template_environment


class TestTemplateEnvironment:
    def test_packaged_templates(self) -> None:
        env = build_template_environment("guide")
        text = env.get_template("chapter.md.j2").render(
            chapter={"title": "Callbacks", "file": "callbacks.md"},
            left="ruby",
            right="elixir",
            left_label="ActiveRecord",
            right_label="Ecto",
        )
        assert text.startswith("# Callbacks\n")
        assert "```ruby" in text
        assert "```elixir" in text

    def test_html_is_autoescaped(self) -> None:
        env = build_template_environment("html")
        html = env.get_template("page.html.j2").render(
            guide_title="A <b> guide",
            page_title="Intro",
            base="",
            content="<p>kept</p>",
            chapters=[],
            prev=None,
            next=None,
        )
        assert "A &lt;b&gt; guide" in html
        assert "<p>kept</p>" in html

    def test_guide_override_wins(self, tmp_path: Path) -> None:
        override = tmp_path / ".guidectl" / "templates" / "html"
        override.mkdir(parents=True)
        (override / "page.html.j2").write_text("custom {{ page_title }}", encoding="utf-8")
        env = build_template_environment("html", guide_root=tmp_path)
        assert env.get_template("page.html.j2").render(page_title="X") == "custom X"

    def test_shared_override_directory(self, tmp_path: Path) -> None:
        shared = tmp_path / ".guidectl" / "templates"
        shared.mkdir(parents=True)
        (shared / "README.md.j2").write_text("# {{ title }}", encoding="utf-8")
        env = build_template_environment("guide", guide_root=tmp_path)
        assert env.get_template("README.md.j2").render(title="Mine") == "# Mine"
