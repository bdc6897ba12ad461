"""Tests for ``.guidectl/plugins/`` discovery."""

from __future__ import annotations

from pathlib import Path

from guidectl.infrastructure.guide import Guide
from guidectl.plugins.manager import PluginManager
from guidectl.services.check import CheckService

_LANGUAGE_PLUGIN_SRC = """\
import pluggy

hookimpl = pluggy.HookimplMarker("guidectl")


class DiagramLanguages:
    @hookimpl
    def register_languages(self):
        return ["excalidraw"]
"""

_ISSUE_PLUGIN_SRC = """\
import pluggy

hookimpl = pluggy.HookimplMarker("guidectl")


class NoTodos:
    @hookimpl
    def check_document(self, document):
        if "TODO" in document.text:
            return [{"code": "todo", "severity": "warning", "message": "TODO left", "line": 1}]
        return []


class NotAPlugin:
    pass
"""


def _write_plugin(root: Path, name: str, source: str) -> Path:
    plugin_dir = root / ".guidectl" / "plugins"
    plugin_dir.mkdir(parents=True, exist_ok=True)
    path = plugin_dir / name
    path.write_text(source, encoding="utf-8")
    return plugin_dir


class TestLocalDiscovery:
    def test_loads_hook_classes_only(self, tmp_path: Path) -> None:
        plugin_dir = _write_plugin(tmp_path, "todos.py", _ISSUE_PLUGIN_SRC)
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=plugin_dir)
        assert "guidectl_local_plugin_todos.NoTodos" in names
        assert not any(n.endswith("NotAPlugin") for n in names)

    def test_underscore_files_skipped(self, tmp_path: Path) -> None:
        plugin_dir = _write_plugin(tmp_path, "_helpers.py", _ISSUE_PLUGIN_SRC)
        names = PluginManager().discover_and_load(local_dir=plugin_dir)
        assert not any("helpers" in n for n in names)

    def test_broken_plugin_does_not_raise(self, tmp_path: Path) -> None:
        plugin_dir = _write_plugin(tmp_path, "broken.py", "raise RuntimeError('nope')\n")
        _write_plugin(tmp_path, "langs.py", _LANGUAGE_PLUGIN_SRC)
        pm = PluginManager()
        pm.discover_and_load(local_dir=plugin_dir)
        assert pm.collect_languages() == ["excalidraw"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path / "nope")
        assert pm.is_loaded

    def test_guide_uses_local_plugins(self, guide: Guide) -> None:
        _write_plugin(guide.root, "langs.py", _LANGUAGE_PLUGIN_SRC)
        _write_plugin(guide.root, "todos.py", _ISSUE_PLUGIN_SRC)
        (guide.root / "querying.md").write_text(
            "# Querying TODO\n\n[Back](README.md)\n\n## Preloading\n\n```excalidraw\n{}\n```\n",
            encoding="utf-8",
        )
        result = CheckService(guide).check()
        codes = [i["code"] for i in result.data["issues"]]
        assert codes == ["todo"]
