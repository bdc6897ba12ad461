"""Command: guide initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from guidectl.commands._base import GuideCommand

if TYPE_CHECKING:
    from guidectl.commands._context import AppContext

_INIT_EXAMPLES = """\
  guidectl init
  guidectl init docs/migration --title "Ecto for Rails developers"
  guidectl init . --chapters "Schemas,Associations,Querying"
  guidectl init . --force"""


@click.command("init", cls=GuideCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("--title", default=None, help="Guide title.")
@click.option("--chapters", default=None, help="Comma-separated chapter titles.")
@click.option("--force", is_flag=True, help="Overwrite existing files.")
@click.pass_obj
def init_cmd(
    app: AppContext,
    path: str,
    title: str | None,
    chapters: str | None,
    force: bool,
) -> None:
    """Create guidectl.toml, a README, and chapter stubs."""
    chapter_list: list[str] | None = None
    if chapters is not None:
        chapter_list = [c.strip() for c in chapters.split(",") if c.strip()]

    from guidectl.services.scaffold import ScaffoldService

    app.emit(
        ScaffoldService(app.guide).init(
            root=Path(path),
            title=title,
            chapters=chapter_list,
            force=force,
        )
    )
