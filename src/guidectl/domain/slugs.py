"""Heading anchors — GitHub-compatible slugs.

Pure functions. The linter and the HTML renderer both derive heading ids
from here, so a fragment that passes ``check`` also resolves in the
built site.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

# Everything except word characters, hyphens, and spaces is dropped.
_STRIP_PATTERN = re.compile(r"[^\w\- ]", re.UNICODE)


def slugify(text: str) -> str:
    """Return the GitHub-style anchor for heading *text*.

    Examples:
        >>> slugify("Data Changes")
        'data-changes'
        >>> slugify("Repo.preload/3 & Joins")
        'repopreload3--joins'
        >>> slugify("  `has_many` Associations ")
        'has_many-associations'
    """
    slug = _STRIP_PATTERN.sub("", text.strip().lower())
    return slug.replace(" ", "-")


def unique_anchors(texts: Iterable[str]) -> list[str]:
    """Slugify each heading text, suffixing repeats with ``-1``, ``-2``, ...

    Mirrors how GitHub de-duplicates anchors within a single document.
    """
    seen: dict[str, int] = {}
    taken: set[str] = set()
    anchors: list[str] = []
    for text in texts:
        base = slugify(text)
        slug = base
        if slug in taken:
            count = seen.get(base, 0)
            while True:
                count += 1
                slug = f"{base}-{count}"
                if slug not in taken:
                    break
            seen[base] = count
        taken.add(slug)
        anchors.append(slug)
    return anchors
