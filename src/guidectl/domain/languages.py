"""Fence language identifiers.

A language identifier is *recognized* when Pygments has a lexer for it or
when the guide's config lists it in ``[check] extra_languages`` (diagram
languages and template dialects Pygments does not ship). The canonical
spelling is the lexer's first alias, so ``rb`` resolves to ``ruby`` and
``exs`` to ``elixir``.
"""

from __future__ import annotations

import functools
from collections.abc import Iterable

from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound


def fence_language(info: str) -> str:
    """Return the language word of a fence info string (``""`` if untagged).

    ``ruby title="user.rb"`` and ``{ruby}`` both yield ``ruby``.
    """
    info = info.strip()
    if not info:
        return ""
    word = info.split(maxsplit=1)[0]
    return word.strip("{}.").lower()


@functools.lru_cache(maxsize=256)
def _canonical_from_pygments(name: str) -> str | None:
    try:
        lexer = get_lexer_by_name(name)
    except ClassNotFound:
        return None
    aliases = getattr(lexer, "aliases", None) or [name]
    return str(aliases[0])


def resolve_language(name: str, extra: Iterable[str] = ()) -> str | None:
    """Return the canonical identifier for *name*, or None when unknown."""
    normalized = name.strip().lower()
    if not normalized:
        return None
    if normalized in {e.lower() for e in extra}:
        return normalized
    return _canonical_from_pygments(normalized)
