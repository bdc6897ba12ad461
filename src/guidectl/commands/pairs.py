"""Command: side-by-side translation pairs."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from guidectl.commands._base import GuideCommand

if TYPE_CHECKING:
    from guidectl.commands._context import AppContext


@click.command(
    cls=GuideCommand,
    examples="""\
  guidectl pairs
  guidectl pairs querying
  guidectl pairs --left rb --right ex
  guidectl --json pairs | jq '.data.unpaired'""",
)
@click.argument("chapter", required=False)
@click.option("--left", default=None, help="Source language (default from [compare]).")
@click.option("--right", default=None, help="Target language (default from [compare]).")
@click.pass_obj
def pairs(app: AppContext, chapter: str | None, left: str | None, right: str | None) -> None:
    """Show source/target snippet pairs, per section."""
    from guidectl.services.compare import CompareService

    app.emit(CompareService(app.guide).pairs(left=left, right=right, chapter=chapter))
