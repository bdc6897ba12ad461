"""QueryService — reading, searching, and navigating the guide.

Read-only. Chapters are addressed by path, stem, or title; sections by
heading anchor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from guidectl.domain.languages import resolve_language
from guidectl.services._helpers import snippet
from guidectl.services.base import BaseService
from guidectl.services.result import ServiceResult, failure
from guidectl.services.telemetry import traced

if TYPE_CHECKING:
    from guidectl.domain.document import GuideDocument, Section

HEADING_WEIGHT = 3
BODY_WEIGHT = 1


class QueryService(BaseService):
    """Read-only access to chapters and sections."""

    @traced
    def list_chapters(self) -> ServiceResult:
        """Chapters in reading order with headline counts."""
        items: list[dict[str, Any]] = []
        for position, path in enumerate(self._guide.chapter_order(), start=1):
            doc = self._guide.documents[path]
            items.append(
                {
                    "position": position,
                    "path": path,
                    "title": doc.title,
                    "headings": len(doc.headings),
                    "code_blocks": len(doc.code_blocks),
                    "links": len(doc.links),
                }
            )
        return ServiceResult(
            ok=True,
            op="list_chapters",
            data={"items": items, "count": len(items)},
            warnings=list(self._guide.load_warnings),
        )

    @traced
    def show(self, chapter: str, anchor: str | None = None) -> ServiceResult:
        """Return a chapter, or one section of it, with prev/next chapters."""
        doc = self._guide.document(chapter)
        if doc is None:
            return failure(
                "show",
                "CHAPTER_NOT_FOUND",
                f"No chapter matches {chapter!r}",
                available=self._guide.chapter_order(),
            )

        prev_path, next_path = self._guide.neighbours(doc.path)
        data: dict[str, Any] = {
            "path": doc.path,
            "title": doc.title,
            "prev": self._nav_entry(prev_path),
            "next": self._nav_entry(next_path),
        }

        if anchor is None:
            data["anchor"] = None
            data["heading"] = doc.title
            data["body"] = self._document_body(doc)
        else:
            wanted = anchor.removeprefix("#")
            section = doc.section(wanted) or doc.section(wanted.lower())
            if section is None:
                return failure(
                    "show",
                    "SECTION_NOT_FOUND",
                    f"No section #{wanted} in {doc.path}",
                    anchors=[h.anchor for h in doc.headings],
                )
            data["anchor"] = section.anchor
            data["heading"] = section.title
            data["line"] = section.heading.line if section.heading else section.start + 1
            data["body"] = doc.section_text(section)

        return ServiceResult(ok=True, op="show", data=data)

    @traced
    def search(
        self,
        query: str,
        *,
        code_only: bool = False,
        language: str | None = None,
        limit: int = 20,
    ) -> ServiceResult:
        """Find sections containing every term of *query*.

        Heading hits weigh more than body hits. With *code_only* (or a
        *language*) only fenced code is searched, optionally restricted
        to one language.
        """
        terms = [t.lower() for t in query.split() if t.strip()]
        if not terms:
            return failure("search", "EMPTY_QUERY", "Search query is empty")

        wanted_lang: str | None = None
        if language:
            extra = self._guide.settings.check.extra_languages
            wanted_lang = resolve_language(language, extra)
            if wanted_lang is None:
                return failure(
                    "search",
                    "UNKNOWN_LANGUAGE",
                    f"Unrecognized language identifier {language!r}",
                )
            code_only = True

        hits: list[dict[str, Any]] = []
        for rank, path in enumerate(self._guide.chapter_order()):
            doc = self._guide.documents[path]
            for section in doc.sections:
                hit = self._score_section(
                    doc, section, terms, code_only=code_only, language=wanted_lang
                )
                if hit is not None:
                    hit["_rank"] = rank
                    hits.append(hit)

        hits.sort(key=lambda h: (-h["score"], h["_rank"], h["line"]))
        for hit in hits:
            del hit["_rank"]
        total = len(hits)
        items = hits[:limit] if limit > 0 else hits

        return ServiceResult(
            ok=True,
            op="search",
            data={"query": query, "items": items, "count": len(items), "total": total},
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _nav_entry(self, path: str | None) -> dict[str, str] | None:
        if path is None:
            return None
        return {"path": path, "title": self._guide.documents[path].title}

    @staticmethod
    def _document_body(doc: GuideDocument) -> str:
        if not doc.sections:
            return ""
        start = doc.sections[0].start
        return "\n".join(doc.lines[start:]).strip("\n")

    def _score_section(
        self,
        doc: GuideDocument,
        section: Section,
        terms: list[str],
        *,
        code_only: bool,
        language: str | None,
    ) -> dict[str, Any] | None:
        heading = section.title.lower()
        if code_only:
            extra = self._guide.settings.check.extra_languages
            blocks = [
                b
                for b in doc.code_blocks
                if section.start < b.line <= section.body_end
                and (language is None or resolve_language(b.language, extra) == language)
            ]
            haystack = "\n".join(b.content for b in blocks)
            heading = ""
        else:
            haystack = doc.section_body(section)
        lowered = haystack.lower()

        score = 0
        for term in terms:
            in_heading = heading.count(term)
            in_body = lowered.count(term)
            if not in_heading and not in_body:
                return None
            score += in_heading * HEADING_WEIGHT + in_body * BODY_WEIGHT

        return {
            "path": doc.path,
            "anchor": section.anchor,
            "heading": section.title or doc.title,
            "line": section.heading.line if section.heading else section.start + 1,
            "score": score,
            "snippet": snippet(haystack, terms[0]),
        }
