"""CompareService — side-by-side translation pairs.

The guide explains one framework by putting a snippet in the source
language next to its equivalent in the target language. Within a
section, each *left* block is paired with the next *right* block that
follows it; blocks left over on either side are reported as unpaired so
an author can spot a translation that was never written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from guidectl.domain.languages import resolve_language
from guidectl.services.base import BaseService
from guidectl.services.result import ServiceResult, failure
from guidectl.services.telemetry import traced

if TYPE_CHECKING:
    from guidectl.domain.document import CodeBlock, GuideDocument


def _block_payload(block: CodeBlock) -> dict[str, Any]:
    return {"language": block.language, "line": block.line, "code": block.content}


class CompareService(BaseService):
    """Extracts left/right snippet pairs per section."""

    @traced
    def pairs(
        self,
        *,
        left: str | None = None,
        right: str | None = None,
        chapter: str | None = None,
    ) -> ServiceResult:
        config = self._guide.settings.compare
        extra = list(self._guide.settings.check.extra_languages)
        requested_left = left or config.left
        requested_right = right or config.right
        left_lang = resolve_language(requested_left, extra)
        right_lang = resolve_language(requested_right, extra)
        if left_lang is None or right_lang is None:
            bad = requested_left if left_lang is None else requested_right
            return failure("pairs", "UNKNOWN_LANGUAGE", f"Unrecognized language identifier {bad!r}")

        if chapter is not None:
            doc = self._guide.document(chapter)
            if doc is None:
                return failure("pairs", "CHAPTER_NOT_FOUND", f"No chapter matches {chapter!r}")
            docs = [doc]
        else:
            docs = [self._guide.documents[p] for p in self._guide.chapter_order()]

        pairs: list[dict[str, Any]] = []
        unpaired: list[dict[str, Any]] = []
        for doc in docs:
            doc_pairs, doc_unpaired = self._pair_document(doc, left_lang, right_lang, extra)
            pairs.extend(doc_pairs)
            unpaired.extend(doc_unpaired)

        return ServiceResult(
            ok=True,
            op="pairs",
            data={
                "left": left_lang,
                "right": right_lang,
                "pairs": pairs,
                "count": len(pairs),
                "unpaired": unpaired,
                "unpaired_count": len(unpaired),
            },
        )

    @staticmethod
    def _pair_document(
        doc: GuideDocument,
        left: str,
        right: str,
        extra: list[str],
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        pairs: list[dict[str, Any]] = []
        unpaired: list[dict[str, Any]] = []
        headings = {h.anchor: h.text for h in doc.headings}

        by_section: dict[str | None, list[tuple[str, CodeBlock]]] = {}
        for block in doc.code_blocks:
            lang = resolve_language(block.language, extra) if block.tagged else None
            if lang not in (left, right):
                continue
            by_section.setdefault(block.section, []).append((lang, block))

        for section, blocks in by_section.items():
            base = {
                "path": doc.path,
                "section": section,
                "heading": headings.get(section, "") if section else "",
            }
            pending: list[CodeBlock] = []
            for lang, block in blocks:
                if lang == left:
                    pending.append(block)
                elif pending:
                    source = pending.pop(0)
                    pairs.append(
                        {**base, "left": _block_payload(source), "right": _block_payload(block)}
                    )
                else:
                    unpaired.append({**base, "side": "right", **_block_payload(block)})
            for block in pending:
                unpaired.append({**base, "side": "left", **_block_payload(block)})
        return pairs, unpaired
