"""Shared pytest fixtures and test helpers for guidectl tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from guidectl.config.settings import GuideSettings
from guidectl.infrastructure.guide import Guide
from guidectl.services.telemetry import disable_telemetry

# A three-chapter ActiveRecord -> Ecto guide. The only issue it carries is
# the ``rb`` alias in querying.md (line 9).
SAMPLE_GUIDE: dict[str, str] = {
    "guidectl.toml": '[guide]\ntitle = "Ecto for Rails Developers"\n',
    "README.md": """\
# Ecto for Rails Developers

Start with [Schemas](schemas.md), then move on to [Querying](querying.md).

## Glossary

- **Repo**: the gateway through which every query and persistence call is issued.
""",
    "schemas.md": """\
# Schemas

[Back to the overview](README.md)

## Defining a schema

```ruby
class User < ApplicationRecord
end
```

```elixir
defmodule User do
  use Ecto.Schema
end
```

## Associations

Associations are loaded lazily in Rails; see [preloading](querying.md#preloading).
""",
    "querying.md": """\
# Querying

[Back to the overview](README.md)

## Preloading

Use Repo.preload/2 to load associations after the fact.

```rb
User.includes(:posts)
```

```elixir
Repo.all(User) |> Repo.preload(:posts)
```
""",
}


def write_files(root: Path, files: dict[str, str]) -> None:
    """Write ``{relative path: content}`` under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def open_guide(root: Path) -> Guide:
    """Fresh Guide over *root* (re-reads guidectl.toml)."""
    return Guide(GuideSettings.from_cli(guide_root=root))


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """``-v`` CLI invocations enable telemetry for the rest of the thread."""
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def guide_root(tmp_path: Path) -> Path:
    """Temporary directory holding the sample guide.

    This is the single source of truth for the guide layout; ``guide``
    and ``_isolated_guide`` build on it.
    """
    write_files(tmp_path, SAMPLE_GUIDE)
    return tmp_path


@pytest.fixture
def guide(guide_root: Path) -> Guide:
    """Guide instance over the sample guide."""
    return open_guide(guide_root)


@pytest.fixture
def _isolated_guide(guide_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the sample guide so the CLI discovers its guidectl.toml.

    Use via ``@pytest.mark.usefixtures("_isolated_guide")`` on command test
    classes. Tests that need the path can also request ``tmp_path``.
    """
    monkeypatch.delenv("GUIDECTL_CONFIG", raising=False)
    monkeypatch.chdir(guide_root)
