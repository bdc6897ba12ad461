"""Command: static HTML site."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from guidectl.commands._base import GuideCommand

if TYPE_CHECKING:
    from guidectl.commands._context import AppContext


@click.command(
    cls=GuideCommand,
    examples="""\
  guidectl build
  guidectl build --output public --clean
  guidectl -v build""",
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (default from [build] output_dir).",
)
@click.option("--clean", is_flag=True, help="Remove the output directory first.")
@click.pass_obj
def build(app: AppContext, output_dir: Path | None, clean: bool) -> None:
    """Render every chapter to HTML with highlighted code."""
    from guidectl.services.build import BuildService

    app.emit(BuildService(app.guide).build(output_dir, clean=clean))
