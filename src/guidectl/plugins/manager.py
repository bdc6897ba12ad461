"""Plugin loading for guidectl.

Plugins come from two places:

* installed distributions exposing a ``guidectl.plugins`` entry point;
* single-file modules in the guide's ``.guidectl/plugins/`` directory.

A plugin that cannot be imported or instantiated is logged and skipped;
it never stops ``check`` or ``build`` from running.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from importlib.metadata import entry_points
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

import pluggy

from guidectl.plugins.hookspecs import GuidectlHookSpec

if TYPE_CHECKING:
    from guidectl.domain.document import GuideDocument

PROJECT_NAME = "guidectl"
ENTRY_POINT_GROUP = "guidectl.plugins"
LOCAL_MODULE_PREFIX = "guidectl_local_plugin_"

_REQUIRED_ISSUE_KEYS = ("code", "message")

logger = logging.getLogger(__name__)


def _load_module(path: Path) -> ModuleType | None:
    """Import a plugin file under a private module name, or None on failure."""
    module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Cannot import plugin file %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        logger.warning("Plugin file %s raised on import; skipped", path, exc_info=True)
        return None
    return module


class PluginManager:
    """Thin wrapper over :class:`pluggy.PluginManager` with guide-aware collectors."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(GuidectlHookSpec)
        self._loaded = False

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    @property
    def is_loaded(self) -> bool:
        """True once :meth:`discover_and_load` has run."""
        return self._loaded

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then the ``*.py`` files in *local_dir*.

        Returns the names of every registered plugin.
        """
        self._load_entry_points()
        self._instantiate_registered_classes()
        if local_dir is not None and local_dir.is_dir():
            for path in sorted(local_dir.glob("*.py")):
                if not path.name.startswith("_"):
                    self._load_local_file(path)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        plugin_name = name or type(plugin).__name__
        self._pm.register(plugin, name=plugin_name)
        logger.debug("Registered plugin %s", plugin_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def list_plugin_names(self) -> list[str]:
        names: list[str] = []
        for plugin in self._pm.get_plugins():
            names.append(self._pm.get_name(plugin) or type(plugin).__name__)
        return names

    # -- collectors ----------------------------------------------------

    def collect_languages(self) -> list[str]:
        """Extra fence languages from every ``register_languages`` impl."""
        return [
            str(language)
            for batch in self._pm.hook.register_languages()
            for language in batch or ()
        ]

    def collect_issues(self, document: GuideDocument) -> list[dict[str, Any]]:
        """Issues from every ``check_document`` impl.

        Entries that are not dicts carrying ``code`` and ``message`` are
        logged and dropped.
        """
        issues: list[dict[str, Any]] = []
        for batch in self._pm.hook.check_document(document=document):
            for issue in batch or ():
                if isinstance(issue, dict) and all(k in issue for k in _REQUIRED_ISSUE_KEYS):
                    issues.append(issue)
                else:
                    logger.warning(
                        "Ignoring malformed plugin issue for %s: %r", document.path, issue
                    )
        return issues

    # -- loading -------------------------------------------------------

    def _load_entry_points(self) -> None:
        # One entry point at a time so a broken distribution does not hide the rest.
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP, name=ep.name)
            except Exception:
                logger.warning(
                    "Entry-point plugin %s failed to load; skipped", ep.name, exc_info=True
                )

    def _load_local_file(self, path: Path) -> None:
        module = _load_module(path)
        if module is None:
            return
        for _name, cls in inspect.getmembers(module, inspect.isclass):
            # Classes imported into the plugin file belong to another module.
            if cls.__module__ != module.__name__ or not self._has_hook_impls(cls):
                continue
            try:
                self.register_plugin(cls(), name=f"{module.__name__}.{cls.__name__}")
            except Exception:
                logger.warning(
                    "Could not instantiate %s from %s", cls.__name__, path, exc_info=True
                )

    def _instantiate_registered_classes(self) -> None:
        """Swap plugin classes registered by entry points for instances.

        An entry point may name a class rather than an object; pluggy would
        then call its hooks unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._has_hook_impls(plugin):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Could not instantiate entry-point plugin %s", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Whether any public attribute of *cls* carries a ``guidectl`` hookimpl mark."""
        marker = f"{PROJECT_NAME}_impl"
        return any(
            getattr(getattr(cls, attr, None), marker, None) is not None
            for attr in dir(cls)
            if not attr.startswith("_")
        )
