"""Locating and reading ``guidectl.toml``.

The config file marks the guide root, the way ``.git`` marks a
repository: commands run from any chapter subdirectory find it by walking
up. ``GUIDECTL_CONFIG`` (or ``--config``) names a file explicitly.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click

from guidectl.config.models import GuideCtlConfig

CONFIG_FILENAME = "guidectl.toml"
CONFIG_ENV_VAR = "GUIDECTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None.

    An explicit ``GUIDECTL_CONFIG`` wins; if it names a missing file no
    walk-up is attempted.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        candidate = Path(explicit)
        return candidate if candidate.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for folder in (directory, *directory.parents):
        candidate = folder / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*; syntax errors surface as a CLI error naming the file."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> GuideCtlConfig:
    """Validated config sections from *path* (discovered from *cwd* if None).

    A missing file yields the code defaults.
    """
    source = path if path is not None else find_config(cwd)
    if source is None or not source.is_file():
        return GuideCtlConfig()
    return GuideCtlConfig.model_validate(read_toml(source))
