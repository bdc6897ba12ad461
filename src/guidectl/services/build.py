"""BuildService — render the guide to a static HTML site.

Each chapter is rendered with markdown-it-py and wrapped in the Jinja2
``page.html.j2`` layout. The renderer reuses the parser and anchors from
:mod:`guidectl.domain.document`, so every fragment ``check`` accepted
resolves in the output.

Output layout mirrors the source tree: ``querying.md`` becomes
``querying.html`` and the root document becomes ``index.html``.
"""

from __future__ import annotations

import shutil
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

import pygments
from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from guidectl.domain.document import split_frontmatter
from guidectl.domain.links import Link, relative_href, resolve_link_path
from guidectl.infrastructure.filesystem import copy_file, write_text
from guidectl.infrastructure.templates import build_template_environment
from guidectl.services.base import BaseService
from guidectl.services.result import ServiceResult, failure
from guidectl.services.telemetry import trace_span, traced
from guidectl.services.toc import TocService

if TYPE_CHECKING:
    from markdown_it.token import Token

    from guidectl.domain.document import GuideDocument

_CODE_SELECTOR = "pre code"


def _highlight(code: str, lang: str, _attrs: str) -> str:
    """markdown-it highlight hook: Pygments spans, or escaped text."""
    if lang:
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lexer = None
        if lexer is not None:
            return pygments.highlight(code, lexer, HtmlFormatter(nowrap=True))
    return escapeHtml(code)


def build_renderer() -> MarkdownIt:
    """CommonMark + tables renderer with Pygments highlighting."""
    return MarkdownIt("commonmark", {"highlight": _highlight}).enable("table")


def page_path(doc_path: str, root_document: str) -> str:
    """Output page for a source document.

    Examples:
        >>> page_path("README.md", "README.md")
        'index.html'
        >>> page_path("guides/querying.md", "README.md")
        'guides/querying.html'
    """
    if doc_path == root_document:
        return "index.html"
    return PurePosixPath(doc_path).with_suffix(".html").as_posix()


class BuildService(BaseService):
    """Renders every document to HTML."""

    @traced
    def build(self, output_dir: Path | None = None, *, clean: bool = False) -> ServiceResult:
        guide = self._guide
        out = (output_dir or guide.output_dir).resolve()
        if guide.root.is_relative_to(out) or self._holds_sources(out):
            return failure(
                "build",
                "INVALID_OUTPUT",
                f"Output directory {out} would overwrite the guide sources",
            )
        if guide.root_document not in guide.documents:
            return failure(
                "build",
                "MISSING_ROOT",
                f"Root document {guide.root_document} not found",
            )

        warnings: list[str] = list(guide.load_warnings)
        style = self._pygments_style(warnings)

        if clean and out.exists():
            shutil.rmtree(out)
        out.mkdir(parents=True, exist_ok=True)

        order = guide.chapter_order()
        pages = {path: page_path(path, guide.root_document) for path in order}
        toc = TocService(guide).toc().data["chapters"]
        env = build_template_environment("html", guide_root=guide.root)
        template = env.get_template("page.html.j2")
        renderer = build_renderer()
        assets: set[str] = set()

        with trace_span("render_pages") as span:
            if span is not None:
                span.annotate("pages", len(order))
            for idx, path in enumerate(order):
                doc = guide.documents[path]
                page = pages[path]
                _fm, body, _offset, _err = split_frontmatter(doc.text)
                tokens = renderer.parse(body)
                self._decorate(tokens, doc, pages, assets)
                content = renderer.renderer.render(tokens, renderer.options, {})

                base = "../" * page.count("/")
                html = template.render(
                    guide_title=guide.settings.guide.title,
                    page_title=doc.title,
                    base=base,
                    content=content,
                    chapters=self._sidebar(toc, pages, page),
                    prev=self._pager(order, idx - 1, pages, page),
                    next=self._pager(order, idx + 1, pages, page),
                )
                write_text(out / page, html)

        with trace_span("assets"):
            css_template = env.get_template("style.css.j2")
            pygments_css = HtmlFormatter(style=style).get_style_defs(_CODE_SELECTOR)
            write_text(out / "style.css", css_template.render(pygments_css=pygments_css))
            for rel in sorted(assets):
                copy_file(guide.root / rel, out / rel)

        page_list = [pages[p] for p in order]
        self._dispatch_event(
            "post_build",
            {"output_dir": str(out), "pages": page_list},
            warnings,
        )
        return ServiceResult(
            ok=True,
            op="build",
            data={
                "output_dir": str(out),
                "pages": page_list,
                "count": len(page_list),
                "assets": sorted(assets),
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _holds_sources(self, out: Path) -> bool:
        root = self._guide.root
        return any((root / rel).is_relative_to(out) for rel in self._guide.documents)

    def _pygments_style(self, warnings: list[str]) -> str:
        style = self._guide.settings.build.pygments_style
        try:
            HtmlFormatter(style=style)
        except ClassNotFound:
            warnings.append(f"Unknown Pygments style {style!r}; using 'default'")
            return "default"
        return style

    def _decorate(
        self,
        tokens: list[Token],
        doc: GuideDocument,
        pages: dict[str, str],
        assets: set[str],
    ) -> None:
        """Add heading ids and rewrite internal links to output pages."""
        anchors = iter(doc.headings)
        source_page = pages[doc.path]
        for tok in tokens:
            if tok.type == "heading_open":
                heading = next(anchors, None)
                if heading is not None:
                    tok.attrSet("id", heading.anchor)
            elif tok.type == "inline":
                for child in tok.children or []:
                    if child.type == "link_open":
                        href = str(child.attrGet("href") or "")
                        new_href = self._rewrite(href, doc.path, source_page, pages, assets)
                        if new_href is not None:
                            child.attrSet("href", new_href)
                    elif child.type == "image":
                        src = str(child.attrGet("src") or "")
                        self._rewrite(src, doc.path, source_page, pages, assets)

    def _rewrite(
        self,
        href: str,
        doc_path: str,
        source_page: str,
        pages: dict[str, str],
        assets: set[str],
    ) -> str | None:
        """New href for an internal document link; records linked assets."""
        link = Link(target=href, text="", line=0)
        if link.is_external or not link.path:
            return None
        target = resolve_link_path(doc_path, link.path)
        if target is None:
            return None
        if target in pages:
            new_href = relative_href(source_page, pages[target])
            return f"{new_href}#{link.fragment}" if link.fragment else new_href
        if (self._guide.root / target).is_file():
            assets.add(target)
        return None

    @staticmethod
    def _sidebar(
        toc: list[dict[str, Any]],
        pages: dict[str, str],
        current_page: str,
    ) -> list[dict[str, Any]]:
        entries: list[dict[str, Any]] = []
        for chapter in toc:
            page = pages[chapter["path"]]
            entries.append(
                {
                    "title": chapter["title"],
                    "href": relative_href(current_page, page),
                    "current": page == current_page,
                    "headings": chapter["headings"],
                }
            )
        return entries

    def _pager(
        self,
        order: list[str],
        idx: int,
        pages: dict[str, str],
        current_page: str,
    ) -> dict[str, str] | None:
        if idx < 0 or idx >= len(order):
            return None
        target = order[idx]
        return {
            "href": relative_href(current_page, pages[target]),
            "title": self._guide.documents[target].title,
        }
