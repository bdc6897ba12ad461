"""CheckService — documentation-quality linting and fence repair.

Single command following the linter pattern. Four built-in categories:
structure, links, code blocks, duplicate sections; plugins may add a
fifth. ``fix`` only ever rewrites fence info strings, and snapshots each
touched file to ``.guidectl/backups/`` first so ``rollback`` can undo it.
"""

from __future__ import annotations

import re
import shutil
from typing import TYPE_CHECKING, Any

from guidectl.domain.languages import resolve_language
from guidectl.domain.links import resolve_link_path
from guidectl.infrastructure.filesystem import copy_file, has_bom, write_text
from guidectl.services._helpers import normalize_whitespace, now_compact
from guidectl.services.base import BaseService
from guidectl.services.result import ServiceResult, failure
from guidectl.services.telemetry import get_current_span, trace_span, traced

if TYPE_CHECKING:
    from pathlib import Path

    from guidectl.domain.document import CodeBlock, GuideDocument


# ---------------------------------------------------------------------------
# Issue severity and category constants
# ---------------------------------------------------------------------------

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
_SEVERITY_RANK = {SEVERITY_WARNING: 0, SEVERITY_ERROR: 1}

CAT_STRUCTURE = "structure"
CAT_LINKS = "links"
CAT_CODE = "code_blocks"
CAT_DUPLICATES = "duplicates"
CAT_PLUGINS = "plugins"

ALLOW_DUPLICATE_MARKER = "<!-- guidectl: allow-duplicate -->"

# Opening fence: container prefix (indentation, `>` and list markers), fence run, info string.
_FENCE_LINE = re.compile(
    r"^(?P<indent>(?:[ \t>]|(?:[-*+]|\d{1,9}[.)])[ \t]+)*)"
    r"(?P<fence>`{3,}|~{3,})(?P<info>.*)$"
)


def _issue(
    category: str,
    severity: str,
    code: str,
    path: str,
    message: str,
    *,
    line: int | None = None,
    fix_action: str | None = None,
) -> dict[str, Any]:
    issue: dict[str, Any] = {
        "category": category,
        "severity": severity,
        "code": code,
        "path": path,
        "line": line,
        "message": message,
    }
    if fix_action is not None:
        issue["fix_action"] = fix_action
    return issue


# ---------------------------------------------------------------------------
# CheckService
# ---------------------------------------------------------------------------


class CheckService(BaseService):
    """Lints the guide and repairs fence language tags."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def check(self, *, min_severity: str = SEVERITY_WARNING) -> ServiceResult:
        """Report issues without modifying anything."""
        warnings: list[str] = list(self._guide.load_warnings)
        order = self._guide.chapter_order()
        docs = [self._guide.documents[p] for p in order]
        extra = self._extra_languages(warnings)

        issues: list[dict[str, Any]] = []
        with trace_span("structure"):
            issues.extend(self._check_structure(docs))
        with trace_span("links"):
            for doc in docs:
                issues.extend(self._check_links(doc))
        with trace_span("code_blocks"):
            for doc in docs:
                issues.extend(self._check_code_blocks(doc, extra))
        with trace_span("duplicates"):
            issues.extend(self._check_duplicates(docs))
        with trace_span("plugins"):
            issues.extend(self._check_plugins(docs, warnings))

        # Issues on paths outside the reading order (missing files) sort last.
        rank = {path: idx for idx, path in enumerate(order)}
        issues.sort(key=lambda i: (rank.get(i["path"], len(rank)), i["line"] or 0))

        floor = _SEVERITY_RANK.get(min_severity, 0)
        issues = [i for i in issues if _SEVERITY_RANK.get(i["severity"], 0) >= floor]
        error_count = sum(1 for i in issues if i["severity"] == SEVERITY_ERROR)
        span = get_current_span()
        if span is not None:
            span.annotate("documents", len(docs))
            span.annotate("issues", len(issues))

        self._dispatch_event(
            "post_check",
            {"issues_found": len(issues), "error_count": error_count},
            warnings,
        )

        return ServiceResult(
            ok=True,
            op="check",
            data={
                "issues": issues,
                "count": len(issues),
                "error_count": error_count,
                "warning_count": len(issues) - error_count,
                "healthy": error_count == 0,
                "documents": len(docs),
            },
            warnings=warnings,
        )

    @traced
    def fix(self, *, level: str = "safe") -> ServiceResult:
        """Rewrite fence info strings. Level: 'safe' or 'aggressive'.

        ``safe`` canonicalises recognized aliases (``rb`` -> ``ruby``).
        ``aggressive`` also tags untagged fences with
        ``[check] default_language``.
        """
        warnings: list[str] = []
        extra = self._extra_languages(warnings)
        fixes: list[str] = []
        rewrites: dict[str, str] = {}

        for path in self._guide.chapter_order():
            doc = self._guide.documents[path]
            lines = list(doc.lines)
            changed = False
            for block in doc.code_blocks:
                new_lang = self._replacement_language(block, extra, level=level)
                if new_lang is None:
                    continue
                idx = block.line - 1
                match = _FENCE_LINE.match(lines[idx])
                if match is None:
                    continue
                lines[idx] = _retag_fence(match, new_lang)
                changed = True
                old = block.language or "(untagged)"
                fixes.append(f"{path}:{block.line}: {old} -> {new_lang}")
            if changed:
                newline = "\r\n" if "\r\n" in doc.text else "\n"
                rewrites[path] = newline.join(lines)

        backup_name: str | None = None
        if rewrites:
            backup_name = self._backup_files(list(rewrites))
            for path, content in rewrites.items():
                target = self._guide.root / path
                write_text(target, content, bom=has_bom(target))
            self._guide.reload()
            self._dispatch_event("post_fix", {"files_changed": sorted(rewrites)}, warnings)

        return ServiceResult(
            ok=True,
            op="fix",
            data={
                "fixes": fixes,
                "count": len(fixes),
                "files_changed": sorted(rewrites),
                "backup": backup_name,
            },
            warnings=warnings,
        )

    @traced
    def rollback(self) -> ServiceResult:
        """Restore every file from the most recent backup set."""
        backup_root = self._guide.state_dir / "backups"
        sets: list[Path] = []
        if backup_root.is_dir():
            sets = sorted(p for p in backup_root.iterdir() if p.is_dir())
        if not sets:
            return failure("rollback", "NO_BACKUPS", "No backup sets found")

        latest = sets[-1]
        restored: list[str] = []
        for src in sorted(latest.rglob("*")):
            if not src.is_file():
                continue
            rel = src.relative_to(latest).as_posix()
            copy_file(src, self._guide.root / rel)
            restored.append(rel)
        self._guide.reload()

        return ServiceResult(
            ok=True,
            op="rollback",
            data={"backup": latest.name, "restored": restored, "count": len(restored)},
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _extra_languages(self, warnings: list[str]) -> list[str]:
        extra = list(self._guide.settings.check.extra_languages)
        try:
            extra.extend(self._guide.plugin_manager.collect_languages())
        except Exception:
            warnings.append("Plugin language registration failed")
        return extra

    def _replacement_language(
        self,
        block: CodeBlock,
        extra: list[str],
        *,
        level: str,
    ) -> str | None:
        config = self._guide.settings.check
        if not block.tagged:
            return config.default_language if level == "aggressive" else None
        canonical = resolve_language(block.language, extra)
        if canonical is None or canonical == block.language:
            return None
        return canonical if config.canonical_languages else None

    def _backup_files(self, paths: list[str]) -> str:
        """Copy *paths* into a fresh timestamped backup set; return its name."""
        backup_root = self._guide.state_dir / "backups"
        name = now_compact()
        for rel in paths:
            copy_file(self._guide.root / rel, backup_root / name / rel)
        self._prune_backups(backup_root)
        return name

    def _prune_backups(self, backup_root: Path) -> None:
        """Keep only the newest ``[check] backup_max_count`` sets."""
        keep = self._guide.settings.check.backup_max_count
        sets = sorted(p for p in backup_root.iterdir() if p.is_dir())
        if len(sets) > keep:
            for old in sets[: len(sets) - keep]:
                shutil.rmtree(old, ignore_errors=True)

    # ------------------------------------------------------------------
    # Check categories (read-only)
    # ------------------------------------------------------------------

    def _check_structure(self, docs: list[GuideDocument]) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []
        guide = self._guide
        root = guide.root_document

        if root not in guide.documents:
            issues.append(
                _issue(
                    CAT_STRUCTURE,
                    SEVERITY_ERROR,
                    "missing_root",
                    root,
                    f"Root document {root} not found",
                )
            )
        else:
            reachable = guide.reachable_from_root()
            for doc in docs:
                if doc.path not in reachable:
                    issues.append(
                        _issue(
                            CAT_STRUCTURE,
                            SEVERITY_WARNING,
                            "orphan_document",
                            doc.path,
                            f"{doc.path} is not linked from {root} (directly or indirectly)",
                        )
                    )

        for ref in guide.settings.guide.chapters:
            if guide.document(ref) is None:
                issues.append(
                    _issue(
                        CAT_STRUCTURE,
                        SEVERITY_ERROR,
                        "missing_chapter",
                        ref,
                        f"Configured chapter {ref!r} does not exist",
                    )
                )

        for doc in docs:
            if doc.frontmatter_error:
                issues.append(
                    _issue(
                        CAT_STRUCTURE,
                        SEVERITY_WARNING,
                        "invalid_frontmatter",
                        doc.path,
                        doc.frontmatter_error,
                        line=1,
                    )
                )
            previous: int | None = None
            for heading in doc.headings:
                if previous is not None and heading.level > previous + 1:
                    issues.append(
                        _issue(
                            CAT_STRUCTURE,
                            SEVERITY_WARNING,
                            "heading_skip",
                            doc.path,
                            f"Heading '{heading.text}' jumps from h{previous} to h{heading.level}",
                            line=heading.line,
                        )
                    )
                previous = heading.level
        return issues

    def _check_links(self, doc: GuideDocument) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []
        docs = self._guide.documents
        for link in doc.links:
            if link.is_external:
                continue
            noun = "Image" if link.kind == "image" else "Link"
            target = resolve_link_path(doc.path, link.path)
            if target is None:
                issues.append(
                    _issue(
                        CAT_LINKS,
                        SEVERITY_ERROR,
                        "broken_link",
                        doc.path,
                        f"{noun} target {link.target!r} escapes the guide root",
                        line=link.line,
                    )
                )
                continue
            if link.path and not self._guide.exists(target):
                issues.append(
                    _issue(
                        CAT_LINKS,
                        SEVERITY_ERROR,
                        "broken_link",
                        doc.path,
                        f"{noun} target {link.target!r} does not exist",
                        line=link.line,
                    )
                )
                continue
            fragment = link.fragment
            target_doc = docs.get(target)
            if not fragment or target_doc is None:
                continue
            if fragment not in target_doc.anchors and fragment.lower() not in target_doc.anchors:
                where = "this document" if target == doc.path else target
                issues.append(
                    _issue(
                        CAT_LINKS,
                        SEVERITY_ERROR,
                        "broken_anchor",
                        doc.path,
                        f"Anchor #{fragment} not found in {where}",
                        line=link.line,
                    )
                )
        return issues

    def _check_code_blocks(self, doc: GuideDocument, extra: list[str]) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []
        config = self._guide.settings.check
        for block in doc.code_blocks:
            if not block.tagged:
                issues.append(
                    _issue(
                        CAT_CODE,
                        SEVERITY_ERROR if config.require_language else SEVERITY_WARNING,
                        "missing_language",
                        doc.path,
                        "Fenced code block has no language identifier",
                        line=block.line,
                        fix_action=f"tag as {config.default_language} (aggressive)",
                    )
                )
                continue
            canonical = resolve_language(block.language, extra)
            if canonical is None:
                issues.append(
                    _issue(
                        CAT_CODE,
                        SEVERITY_ERROR,
                        "unknown_language",
                        doc.path,
                        f"Unrecognized language identifier {block.language!r}",
                        line=block.line,
                    )
                )
            elif config.canonical_languages and canonical != block.language:
                issues.append(
                    _issue(
                        CAT_CODE,
                        SEVERITY_WARNING,
                        "language_alias",
                        doc.path,
                        f"Language {block.language!r} is an alias of {canonical!r}",
                        line=block.line,
                        fix_action=f"rewrite fence as {canonical}",
                    )
                )
        return issues

    def _check_duplicates(self, docs: list[GuideDocument]) -> list[dict[str, Any]]:
        """Flag sections whose own body repeats an earlier section verbatim.

        Earlier means earlier in reading order, so the README's copy is
        treated as the original and the chapter's copy is reported.
        """
        issues: list[dict[str, Any]] = []
        config = self._guide.settings.check
        allowed = {
            doc.path
            for ref in config.allow_duplicates_in
            if (doc := self._guide.document(ref)) is not None
        }
        seen: dict[str, tuple[str, str | None]] = {}

        for doc in docs:
            for section in doc.sections:
                body = doc.section_body(section)
                if ALLOW_DUPLICATE_MARKER in body:
                    continue
                normalized = normalize_whitespace(body)
                if len(normalized) < config.duplicate_min_chars:
                    continue
                first = seen.get(normalized)
                if first is None:
                    seen[normalized] = (doc.path, section.anchor)
                    continue
                first_path, first_anchor = first
                if doc.path in allowed or first_path in allowed:
                    continue
                original = f"{first_path}#{first_anchor}" if first_anchor else first_path
                label = section.title or "(preamble)"
                issues.append(
                    _issue(
                        CAT_DUPLICATES,
                        SEVERITY_WARNING,
                        "duplicate_section",
                        doc.path,
                        f"Section '{label}' duplicates {original}",
                        line=section.heading.line if section.heading else section.start + 1,
                    )
                )
        return issues

    def _check_plugins(
        self,
        docs: list[GuideDocument],
        warnings: list[str],
    ) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []
        try:
            pm = self._guide.plugin_manager
            for doc in docs:
                for raw in pm.collect_issues(doc):
                    severity = raw.get("severity", SEVERITY_WARNING)
                    if severity not in _SEVERITY_RANK:
                        severity = SEVERITY_WARNING
                    issues.append(
                        _issue(
                            CAT_PLUGINS,
                            severity,
                            str(raw["code"]),
                            doc.path,
                            str(raw["message"]),
                            line=raw.get("line"),
                        )
                    )
        except Exception:
            warnings.append("Plugin checks failed")
        return issues


def _retag_fence(match: re.Match[str], language: str) -> str:
    """Rebuild an opening fence line with *language* as the first info word."""
    parts = match.group("info").strip().split(maxsplit=1)
    rest = parts[1] if len(parts) > 1 else ""
    new_info = f"{language} {rest}".rstrip()
    return f"{match.group('indent')}{match.group('fence')}{new_info}"
