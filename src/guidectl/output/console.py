"""The rich theme and an off-screen console for building output strings.

Renderers draw into a console whose file is a ``StringIO``; the caller
reads the buffer back, so formatting stays a pure ``result -> str`` step.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DEFAULT_WIDTH = 120

GUIDE_THEME = Theme(
    {
        "guide.ok": "bold green",
        "guide.error": "bold red",
        "guide.warning": "bold yellow",
        "guide.op": "bold cyan",
        "guide.key": "dim",
        "guide.path": "blue",
        "guide.anchor": "dim cyan",
        "guide.title": "bold",
        "guide.line": "dim",
        "guide.score": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """A themed console writing to memory; *width* defaults to 120 columns."""
    return Console(
        file=StringIO(),
        theme=GUIDE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or DEFAULT_WIDTH,
    )


def get_output(console: Console) -> str:
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError("console was not created by create_console()")
    return buffer.getvalue()
