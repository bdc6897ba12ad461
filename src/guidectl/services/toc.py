"""TocService — table of contents over the guide's reading order."""

from __future__ import annotations

from typing import Any

from guidectl.domain.links import relative_href
from guidectl.services.base import BaseService
from guidectl.services.result import ServiceResult
from guidectl.services.telemetry import traced


def _nest(headings: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Turn a flat heading list into a tree keyed by level."""
    roots: list[dict[str, Any]] = []
    stack: list[dict[str, Any]] = []
    for heading in headings:
        node = {**heading, "children": []}
        while stack and stack[-1]["level"] >= node["level"]:
            stack.pop()
        if stack:
            stack[-1]["children"].append(node)
        else:
            roots.append(node)
        stack.append(node)
    return roots


def render_markdown_toc(chapters: list[dict[str, Any]], *, base: str = "README.md") -> str:
    """Render a TOC payload as a nested Markdown list of relative links.

    *base* is the document the list will be pasted into; hrefs are
    relative to it.
    """
    lines: list[str] = []

    def walk(path: str, nodes: list[dict[str, Any]], depth: int) -> None:
        for node in nodes:
            href = relative_href(base, path) if path != base else ""
            lines.append(f"{'  ' * depth}- [{node['text']}]({href}#{node['anchor']})")
            walk(path, node["children"], depth + 1)

    for chapter in chapters:
        href = relative_href(base, chapter["path"])
        lines.append(f"- [{chapter['title']}]({href})")
        walk(chapter["path"], chapter["headings"], 1)
    return "\n".join(lines)


class TocService(BaseService):
    """Builds the guide's table of contents."""

    @traced
    def toc(self, *, depth: int | None = None) -> ServiceResult:
        """Chapters in reading order, each with its heading tree.

        The chapter's own title heading (its first H1) is folded into the
        chapter entry rather than repeated as a child.
        """
        max_depth = depth if depth is not None else self._guide.settings.build.toc_depth
        chapters: list[dict[str, Any]] = []
        for path in self._guide.chapter_order():
            doc = self._guide.documents[path]
            flat: list[dict[str, Any]] = []
            skipped_title = False
            for heading in doc.headings:
                if heading.level > max_depth:
                    continue
                if heading.level == 1 and not skipped_title and heading.text == doc.title:
                    skipped_title = True
                    continue
                flat.append(
                    {
                        "level": heading.level,
                        "text": heading.text,
                        "anchor": heading.anchor,
                        "line": heading.line,
                    }
                )
            chapters.append({"path": path, "title": doc.title, "headings": _nest(flat)})

        return ServiceResult(
            ok=True,
            op="toc",
            data={
                "title": self._guide.settings.guide.title,
                "chapters": chapters,
                "count": len(chapters),
                "markdown": render_markdown_toc(chapters, base=self._guide.root_document),
            },
            warnings=list(self._guide.load_warnings),
        )
