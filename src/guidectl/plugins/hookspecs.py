"""Pluggy hook specifications for guidectl.

Three lifecycle events fire after ``check``, ``build``, and ``init``.
Two collection hooks let plugins extend the linter: extra issues per
document, and extra recognized fence languages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from guidectl.domain.document import GuideDocument

hookspec = pluggy.HookspecMarker("guidectl")


class GuidectlHookSpec:
    """Hook specifications for the guidectl plugin system."""

    @hookspec
    def check_document(self, document: GuideDocument) -> list[dict[str, Any]] | None:
        """Return extra lint issues for *document*.

        Each issue is a dict with at least ``code``, ``severity``
        (``"error"`` or ``"warning"``), and ``message``. ``line`` is
        optional. The category is always ``"plugins"``.
        """

    @hookspec
    def register_languages(self) -> list[str] | None:
        """Return extra fence language identifiers to accept."""

    @hookspec
    def post_check(
        self,
        issues_found: int,
        error_count: int,
    ) -> None:
        """Called after the guide is linted."""

    @hookspec
    def post_fix(self, files_changed: list[str]) -> None:
        """Called after fences were rewritten by ``check --fix``."""

    @hookspec
    def post_build(
        self,
        output_dir: str,
        pages: list[str],
    ) -> None:
        """Called after the HTML site is written."""

    @hookspec
    def post_init(
        self,
        title: str,
        chapters: list[str],
    ) -> None:
        """Called after a guide skeleton is scaffolded."""
