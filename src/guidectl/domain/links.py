"""Link model and resolution rules.

Pure functions, no filesystem access. Paths are POSIX strings relative to
the guide root, which is how documents are keyed everywhere else.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit


@dataclass(frozen=True)
class Link:
    """An inline link or image extracted from a document."""

    target: str  # href/src exactly as written
    text: str
    line: int  # 1-based line in the source file
    kind: str = "link"  # "link" | "image"

    @property
    def is_external(self) -> bool:
        """True for ``https://...``, ``mailto:...``, ``//host/...`` targets."""
        parts = urlsplit(self.target)
        return bool(parts.scheme or parts.netloc)

    @property
    def path(self) -> str:
        """Percent-decoded path portion (empty for same-document anchors)."""
        return unquote(urlsplit(self.target).path)

    @property
    def fragment(self) -> str | None:
        """Percent-decoded fragment without ``#``, or None when absent."""
        parts = urlsplit(self.target)
        if not parts.fragment and not self.target.endswith("#"):
            return None
        return unquote(parts.fragment)


def resolve_link_path(source: str, link_path: str) -> str | None:
    """Resolve *link_path* as written in document *source*.

    Returns the normalized root-relative path, *source* itself for an
    empty path (same-document anchor), or None when the target escapes
    the guide root.

    Examples:
        >>> resolve_link_path("README.md", "./querying.md")
        'querying.md'
        >>> resolve_link_path("guides/intro.md", "../README.md")
        'README.md'
        >>> resolve_link_path("README.md", "../outside.md") is None
        True
    """
    if not link_path:
        return source
    if link_path.startswith("/"):
        joined = link_path.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(source), link_path)
    normalized = posixpath.normpath(joined)
    if normalized == ".." or normalized.startswith("../"):
        return None
    return normalized.rstrip("/") or "."


def relative_href(source: str, target: str) -> str:
    """Relative href from the page at *source* to the page at *target*."""
    start = posixpath.dirname(source) or "."
    return posixpath.relpath(target, start)
