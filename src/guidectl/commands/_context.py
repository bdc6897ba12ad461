"""Per-invocation state handed to every subcommand as ``ctx.obj``.

The root group builds one :class:`AppContext`; commands take it with
``@click.pass_obj``, ask it for the guide, and hand their result to
:meth:`AppContext.emit`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from guidectl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from guidectl.config.settings import GuideSettings
    from guidectl.infrastructure.guide import Guide
    from guidectl.services.result import ServiceResult


class AppContext:
    """Settings, logging setup and the lazily opened guide."""

    def __init__(self, settings: GuideSettings) -> None:
        from guidectl.config.logging import configure_logging

        self.settings = settings
        self._guide: Guide | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from guidectl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def guide(self) -> Guide:
        # Opened on demand: --help and --version never scan the tree.
        if self._guide is None:
            from guidectl.infrastructure.guide import Guide

            self._guide = Guide(self.settings)
        return self._guide

    def _output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    def emit(self, result: ServiceResult, *, exit_code: int = 0) -> None:
        """Print *result* and set the process exit status.

        A successful result goes to stdout, its warnings to stderr (omitted
        in JSON mode, where they are part of the document). ``exit_code``
        lets ``check`` exit 1 after printing a report with errors. A failed
        result is printed to stderr and always exits 1.
        """
        text = format_result(result, settings=self._output_settings())
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)

        if text:
            click.echo(text)
        if not self.settings.json_output:
            for warning in result.warnings:
                click.echo(f"warning: {warning}", err=True)
        if exit_code:
            raise SystemExit(exit_code)
