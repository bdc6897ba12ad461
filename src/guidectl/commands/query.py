"""Commands: read-only access to chapters and sections."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from guidectl.commands._base import GuideCommand

if TYPE_CHECKING:
    from guidectl.commands._context import AppContext


@click.command(
    cls=GuideCommand,
    examples="""\
  guidectl chapters
  guidectl -q chapters
  guidectl --json chapters""",
)
@click.pass_obj
def chapters(app: AppContext) -> None:
    """List chapters in reading order."""
    from guidectl.services.query import QueryService

    app.emit(QueryService(app.guide).list_chapters())


@click.command(
    cls=GuideCommand,
    examples="""\
  guidectl show querying
  guidectl show querying.md preloading
  guidectl show "Data Changes" '#changesets'
  guidectl -q show schemas > schemas.txt""",
)
@click.argument("chapter")
@click.argument("anchor", required=False)
@click.pass_obj
def show(app: AppContext, chapter: str, anchor: str | None) -> None:
    """Print CHAPTER, or one section of it addressed by ANCHOR."""
    from guidectl.services.query import QueryService

    app.emit(QueryService(app.guide).show(chapter, anchor))


@click.command(
    cls=GuideCommand,
    examples="""\
  guidectl search preload
  guidectl search "has_many through"
  guidectl search --code Repo.insert
  guidectl search --language elixir cast
  guidectl search --limit 5 validation""",
)
@click.argument("query", nargs=-1, required=True)
@click.option("--code", "code_only", is_flag=True, help="Search fenced code only.")
@click.option("--language", default=None, help="Search code in one language only.")
@click.option("--limit", default=20, show_default=True, type=int, help="Maximum results.")
@click.pass_obj
def search(
    app: AppContext,
    query: tuple[str, ...],
    code_only: bool,
    language: str | None,
    limit: int,
) -> None:
    """Find sections containing every word of QUERY."""
    from guidectl.services.query import QueryService

    app.emit(
        QueryService(app.guide).search(
            " ".join(query), code_only=code_only, language=language, limit=limit
        )
    )
