"""``GuideCommand``: a click command with an ``--examples`` flag.

``--help`` lists options; ``--examples`` prints ready-to-paste
invocations (declared next to each command) and exits.
"""

from __future__ import annotations

from typing import Any

import click


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    command = ctx.command
    assert isinstance(command, GuideCommand)
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(command.examples)
    ctx.exit(0)


class GuideCommand(click.Command):
    """Command accepting ``examples=`` in its decorator."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples or ""
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    is_eager=True,
                    expose_value=False,
                    callback=_print_examples,
                    help="Show usage examples and exit.",
                )
            )
