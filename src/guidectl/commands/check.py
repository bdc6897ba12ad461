"""Command: lint the guide and optionally repair code fences."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from guidectl.commands._base import GuideCommand

if TYPE_CHECKING:
    from guidectl.commands._context import AppContext


@click.command(
    cls=GuideCommand,
    examples="""\
  guidectl check
  guidectl check --errors-only
  guidectl --json check
  guidectl check --fix
  guidectl check --fix --level aggressive
  guidectl check --rollback""",
)
@click.option(
    "--min-severity",
    type=click.Choice(["warning", "error"]),
    default="warning",
    help="Hide issues below this severity.",
)
@click.option("--errors-only", is_flag=True, help="Shortcut for --min-severity error.")
@click.option("--fix", is_flag=True, help="Rewrite fence languages in place (with backup).")
@click.option(
    "--level",
    type=click.Choice(["safe", "aggressive"]),
    default="safe",
    help="safe: canonicalise aliases. aggressive: also tag untagged fences.",
)
@click.option("--rollback", is_flag=True, help="Restore files from the latest backup.")
@click.pass_obj
def check(
    app: AppContext,
    min_severity: str,
    errors_only: bool,
    fix: bool,
    level: str,
    rollback: bool,
) -> None:
    """Check links, anchors, code fences, structure, and duplication.

    Exits with status 1 when any error-severity issue remains.
    """
    from guidectl.services.check import CheckService

    svc = CheckService(app.guide)

    if rollback:
        app.emit(svc.rollback())
    elif fix:
        app.emit(svc.fix(level=level))
    else:
        threshold = "error" if errors_only else min_severity
        result = svc.check(min_severity=threshold)
        app.emit(result, exit_code=0 if result.data.get("healthy", True) else 1)
