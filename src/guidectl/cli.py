"""``guidectl`` entry point: global flags, settings, and the command table."""

from __future__ import annotations

from pathlib import Path

import click

from guidectl import __version__
from guidectl.commands import register_commands
from guidectl.commands._context import AppContext
from guidectl.config.settings import GuideSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="guidectl")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="One identifier per line (paths, locations).")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and timing spans.")
@click.option("--log-json", is_flag=True, help="Emit logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    help="Use this guidectl.toml instead of discovering one.",
)
@click.option(
    "-C",
    "--root",
    "guide_root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Guide directory (default: where guidectl.toml is found, else CWD).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    guide_root: Path | None,
) -> None:
    """guidectl — lint, navigate, and publish side-by-side migration guides."""
    settings = GuideSettings.from_cli(
        config_path=config_path,
        guide_root=guide_root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
