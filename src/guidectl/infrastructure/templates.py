"""Shared Jinja2 template loading with per-guide override support."""

from __future__ import annotations

from pathlib import Path

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    select_autoescape,
)


def build_template_environment(group: str, *, guide_root: Path | None = None) -> Environment:
    """Build a Jinja2 environment with user overrides before packaged defaults.

    User overrides are loaded from ``.guidectl/templates/`` inside the guide.
    Both a namespaced directory (for example ``.guidectl/templates/html/``)
    and the shared root are searched, so a single ``page.html.j2`` dropped
    into either place replaces the packaged page layout.
    """

    loaders: list[BaseLoader] = []
    if guide_root is not None:
        template_root = guide_root / ".guidectl" / "templates"
        loaders.append(FileSystemLoader([str(template_root / group), str(template_root)]))

    loaders.append(PackageLoader("guidectl", f"templates/{group}"))
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
        keep_trailing_newline=True,
    )
