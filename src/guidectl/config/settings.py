"""GuideSettings: one frozen object for flags, environment, and TOML.

Sources, strongest first:

1. keyword arguments (the root command's flags);
2. ``GUIDECTL_*`` environment variables, ``__`` separating nested keys
   (``GUIDECTL_CHECK__DUPLICATE_MIN_CHARS=40``);
3. the discovered ``guidectl.toml``;
4. defaults declared on the section models.
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from guidectl.config.discovery import find_config, read_toml
from guidectl.config.models import BuildConfig, CheckConfig, CompareConfig, GuideConfig

# The TOML path chosen by ``from_cli`` for the settings object under construction.
_toml_path: ContextVar[Path | None] = ContextVar("guidectl_toml_path", default=None)


class GuideTomlSource(PydanticBaseSettingsSource):
    """Settings source backed by a single ``guidectl.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None) -> None:
        super().__init__(settings_cls)
        self._values: dict[str, Any] = read_toml(path) if path and path.is_file() else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        present = field_name in self._values
        return self._values.get(field_name), field_name, present

    def __call__(self) -> dict[str, Any]:
        return self._values


class GuideSettings(BaseSettings):
    """Resolved configuration for one CLI invocation.

    ``guide_root`` is the directory holding the config file (or the cwd
    when there is none); ``config_path`` is the file actually read.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "GUIDECTL_",
        "env_nested_delimiter": "__",
    }

    guide_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    guide: GuideConfig = Field(default_factory=GuideConfig)
    check: CheckConfig = Field(default_factory=CheckConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    compare: CompareConfig = Field(default_factory=CompareConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, GuideTomlSource(settings_cls, _toml_path.get())

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        guide_root: Path | None = None,
        **flags: Any,
    ) -> GuideSettings:
        """Build settings the way the root command does.

        *config_path* (``--config``) is used as given when it exists;
        otherwise ``guidectl.toml`` is looked up from *guide_root* or the
        cwd. Without ``--root`` the guide root is the config's directory.
        """
        if config_path:
            explicit = Path(config_path)
            toml_file = explicit if explicit.is_file() else None
        else:
            toml_file = find_config(guide_root)

        if guide_root is not None:
            root = guide_root
        elif toml_file is not None:
            root = toml_file.parent
        else:
            root = Path.cwd()

        token = _toml_path.set(toml_file)
        try:
            return cls(guide_root=root, config_path=toml_file, **flags)
        finally:
            _toml_path.reset(token)
