"""Command: table of contents."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from guidectl.commands._base import GuideCommand

if TYPE_CHECKING:
    from guidectl.commands._context import AppContext


@click.command(
    cls=GuideCommand,
    examples="""\
  guidectl toc
  guidectl toc --depth 2
  guidectl toc --markdown >> README.md
  guidectl --json toc""",
)
@click.option("--depth", type=click.IntRange(min=1, max=6), default=None, help="Deepest level.")
@click.option("--markdown", is_flag=True, help="Print a Markdown link list instead.")
@click.pass_obj
def toc(app: AppContext, depth: int | None, markdown: bool) -> None:
    """Show chapters and their headings in reading order."""
    from guidectl.services.toc import TocService

    result = TocService(app.guide).toc(depth=depth)
    if markdown and result.ok and not app.settings.json_output:
        click.echo(result.data["markdown"])
        return
    app.emit(result)
