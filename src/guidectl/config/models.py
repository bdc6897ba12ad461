"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, guidectl.toml only contains
overrides. A fresh guide needs nothing beyond ``[guide] title``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- guidectl.toml sections ---


class GuideConfig(BaseModel):
    """[guide] section."""

    model_config = {"frozen": True}

    title: str = "Migration Guide"
    root_document: str = "README.md"
    # Explicit chapter order; empty means "follow the root document's links".
    chapters: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


class CheckConfig(BaseModel):
    """[check] section."""

    model_config = {"frozen": True}

    require_language: bool = True
    canonical_languages: bool = True
    extra_languages: list[str] = Field(
        default_factory=lambda: ["mermaid", "heex", "plaintext"],
    )
    duplicate_min_chars: int = 80
    allow_duplicates_in: list[str] = Field(default_factory=list)
    default_language: str = "text"
    backup_max_count: int = 10


class BuildConfig(BaseModel):
    """[build] section."""

    model_config = {"frozen": True}

    output_dir: str = "site"
    pygments_style: str = "default"
    toc_depth: int = 3


class CompareConfig(BaseModel):
    """[compare] section."""

    model_config = {"frozen": True}

    left: str = "ruby"
    right: str = "elixir"
    left_label: str = "ActiveRecord"
    right_label: str = "Ecto"


class GuideCtlConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    guide: GuideConfig = Field(default_factory=GuideConfig)
    check: CheckConfig = Field(default_factory=CheckConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    compare: CompareConfig = Field(default_factory=CompareConfig)
