"""Document model — headings, sections, fenced code, and links.

A guide chapter is parsed once with markdown-it-py (CommonMark + tables)
into an immutable :class:`GuideDocument`. Everything downstream (the
linter, search, the pair extractor, the HTML renderer's navigation) works
from this model instead of re-scanning raw text.

Line numbers exposed to users are 1-based and relative to the whole file,
frontmatter included. :class:`Section` stores 0-based slice indices into
:attr:`GuideDocument.lines`.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

from markdown_it import MarkdownIt
from markdown_it.token import Token
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from guidectl.domain.languages import fence_language
from guidectl.domain.links import Link
from guidectl.domain.slugs import unique_anchors

_FRONTMATTER_DELIMITER = "---"


@functools.lru_cache(maxsize=1)
def markdown_parser() -> MarkdownIt:
    """Shared CommonMark parser with GitHub-style tables enabled."""
    return MarkdownIt("commonmark").enable("table")


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Heading:
    """An ATX or setext heading."""

    level: int
    text: str
    anchor: str
    line: int


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block."""

    language: str  # first word of the info string, "" when untagged
    info: str
    content: str
    line: int  # opening fence
    end_line: int  # closing fence (or last line when unterminated)
    section: str | None = None  # anchor of the enclosing heading

    @property
    def tagged(self) -> bool:
        return bool(self.language)


@dataclass(frozen=True)
class Section:
    """Line ranges for one heading (or the preamble above the first one).

    ``lines[start:body_end]`` is the section's own text, up to the next
    heading of any level. ``lines[start:end]`` also covers nested
    subsections. ``body_start`` skips the heading line(s) themselves.
    """

    heading: Heading | None
    start: int
    body_start: int
    body_end: int
    end: int

    @property
    def anchor(self) -> str | None:
        return self.heading.anchor if self.heading else None

    @property
    def title(self) -> str:
        return self.heading.text if self.heading else ""


@dataclass(frozen=True)
class GuideDocument:
    """A parsed Markdown chapter."""

    path: str  # POSIX path relative to the guide root
    text: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    frontmatter_error: str | None = None
    headings: list[Heading] = field(default_factory=list)
    code_blocks: list[CodeBlock] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)

    @functools.cached_property
    def lines(self) -> list[str]:
        return self.text.replace("\r\n", "\n").split("\n")

    @property
    def stem(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def title(self) -> str:
        """Frontmatter ``title``, else the first H1, else the file stem."""
        fm_title = self.frontmatter.get("title")
        if fm_title:
            return str(fm_title)
        for heading in self.headings:
            if heading.level == 1:
                return heading.text
        return self.stem

    @property
    def anchors(self) -> set[str]:
        return {h.anchor for h in self.headings}

    def section(self, anchor: str) -> Section | None:
        """Return the section under heading *anchor*, or None."""
        for sec in self.sections:
            if sec.anchor == anchor:
                return sec
        return None

    def section_text(self, section: Section, *, nested: bool = True) -> str:
        """Raw Markdown of *section*, with or without its subsections."""
        stop = section.end if nested else section.body_end
        return "\n".join(self.lines[section.start : stop]).strip("\n")

    def section_body(self, section: Section) -> str:
        """The section's own body text, excluding its heading and subsections."""
        return "\n".join(self.lines[section.body_start : section.body_end]).strip("\n")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def split_frontmatter(text: str) -> tuple[dict[str, Any], str, int, str | None]:
    """Split an optional ``---`` YAML block off the top of *text*.

    Returns ``(frontmatter, body, body_line_offset, error)``. Without a
    complete frontmatter block the whole text is the body. Invalid YAML
    yields an empty mapping and an error message.
    """
    lines = text.replace("\r\n", "\n").split("\n")
    if not lines or lines[0].strip() != _FRONTMATTER_DELIMITER:
        return {}, text, 0, None

    end_idx: int | None = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == _FRONTMATTER_DELIMITER:
            end_idx = i
            break
    if end_idx is None:
        return {}, text, 0, None

    yaml_block = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1 :])
    y = YAML(typ="safe")
    try:
        loaded = y.load(yaml_block)
    except YAMLError as exc:
        return {}, body, end_idx + 1, f"invalid frontmatter: {exc}"
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        return {}, body, end_idx + 1, "frontmatter is not a mapping"
    return dict(loaded), body, end_idx + 1, None


def inline_text(token: Token) -> str:
    """Plain text of an inline token (text, code spans, line breaks)."""
    parts: list[str] = []
    for child in token.children or []:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif child.type == "image":
            parts.append(child.content)
    return "".join(parts).strip()


def _extract_links(token: Token, first_line: int) -> list[Link]:
    """Collect links and images from one inline token."""
    links: list[Link] = []
    line = first_line
    href: str | None = None
    link_line = line
    label: list[str] = []
    for child in token.children or []:
        if child.type in ("softbreak", "hardbreak"):
            line += 1
            if href is not None:
                label.append(" ")
        elif child.type == "link_open":
            href = str(child.attrGet("href") or "")
            label = []
            link_line = line
        elif child.type == "link_close" and href is not None:
            links.append(Link(target=href, text="".join(label).strip(), line=link_line))
            href = None
        elif child.type == "image":
            src = str(child.attrGet("src") or "")
            links.append(Link(target=src, text=child.content, line=line, kind="image"))
        elif href is not None and child.type in ("text", "code_inline"):
            label.append(child.content)
    return links


def parse_document(path: str, text: str) -> GuideDocument:
    """Parse *text* (the full file contents of *path*) into a document."""
    frontmatter, body, offset, fm_error = split_frontmatter(text)
    tokens = markdown_parser().parse(body)
    total_lines = len(text.replace("\r\n", "\n").split("\n"))

    raw_headings: list[tuple[int, str, int, int]] = []  # level, text, start, stop
    fences: list[tuple[str, str, int, int]] = []  # info, content, start, stop
    links: list[Link] = []

    for i, tok in enumerate(tokens):
        if tok.type == "heading_open" and tok.map is not None:
            level = int(tok.tag[1:])
            raw_headings.append(
                (level, inline_text(tokens[i + 1]), tok.map[0] + offset, tok.map[1] + offset)
            )
        elif tok.type == "fence" and tok.map is not None:
            fences.append((tok.info, tok.content, tok.map[0] + offset, tok.map[1] + offset))
        elif tok.type == "inline" and tok.map is not None:
            links.extend(_extract_links(tok, tok.map[0] + offset + 1))

    anchors = unique_anchors(title for _, title, _, _ in raw_headings)
    headings = [
        Heading(level=level, text=heading_text, anchor=anchor, line=start + 1)
        for (level, heading_text, start, _), anchor in zip(raw_headings, anchors, strict=True)
    ]

    sections = _build_sections(headings, raw_headings, offset, total_lines)

    code_blocks: list[CodeBlock] = []
    for info, content, start, stop in fences:
        owner: str | None = None
        for heading in headings:
            if heading.line - 1 > start:
                break
            owner = heading.anchor
        code_blocks.append(
            CodeBlock(
                language=fence_language(info),
                info=info.strip(),
                content=content,
                line=start + 1,
                end_line=stop,
                section=owner,
            )
        )

    return GuideDocument(
        path=path,
        text=text,
        frontmatter=frontmatter,
        frontmatter_error=fm_error,
        headings=headings,
        code_blocks=code_blocks,
        links=links,
        sections=sections,
    )


def _build_sections(
    headings: list[Heading],
    raw_headings: list[tuple[int, str, int, int]],
    offset: int,
    total_lines: int,
) -> list[Section]:
    sections: list[Section] = []
    first_start = raw_headings[0][2] if raw_headings else total_lines
    if first_start > offset:
        sections.append(
            Section(
                heading=None,
                start=offset,
                body_start=offset,
                body_end=first_start,
                end=first_start,
            )
        )

    for idx, heading in enumerate(headings):
        _, _, start, stop = raw_headings[idx]
        body_end = raw_headings[idx + 1][2] if idx + 1 < len(raw_headings) else total_lines
        end = total_lines
        for later_idx in range(idx + 1, len(headings)):
            if headings[later_idx].level <= heading.level:
                end = raw_headings[later_idx][2]
                break
        sections.append(
            Section(heading=heading, start=start, body_start=stop, body_end=body_end, end=end)
        )
    return sections
