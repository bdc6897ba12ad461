"""Shared service-layer helper functions."""

from __future__ import annotations

import re
from datetime import UTC, datetime

_WHITESPACE = re.compile(r"\s+")


def now_compact() -> str:
    """Current UTC time as compact ISO (YYYYMMDDTHHmmssffffff, for backup dirs)."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")


def normalize_whitespace(text: str) -> str:
    """Collapse all runs of whitespace to one space and strip the ends."""
    return _WHITESPACE.sub(" ", text).strip()


def snippet(text: str, term: str, *, width: int = 80) -> str:
    """One-line excerpt of *text* centred on the first hit of *term*.

    Examples:
        >>> snippet("Use Repo.preload/2 to load associations.", "preload", width=20)
        '…Repo.preload/2 to lo…'
    """
    flat = normalize_whitespace(text)
    idx = flat.lower().find(term.lower())
    if idx < 0 or len(flat) <= width:
        return flat[:width] + ("…" if len(flat) > width else "")
    start = max(0, idx - width // 4)
    end = min(len(flat), start + width)
    prefix = "…" if start > 0 else ""
    suffix = "…" if end < len(flat) else ""
    return f"{prefix}{flat[start:end]}{suffix}"
