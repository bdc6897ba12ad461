"""Subcommand modules for guidectl.

Provides register_commands() which uses deferred imports so that
``guidectl --help`` never parses the guide.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every standalone command on the root CLI group."""
    from guidectl.commands.build import build
    from guidectl.commands.check import check
    from guidectl.commands.init_cmd import init_cmd
    from guidectl.commands.pairs import pairs
    from guidectl.commands.query import chapters, search, show
    from guidectl.commands.toc import toc

    cli.add_command(check)
    cli.add_command(toc)
    cli.add_command(chapters)
    cli.add_command(show)
    cli.add_command(search)
    cli.add_command(pairs)
    cli.add_command(build)
    cli.add_command(init_cmd)
