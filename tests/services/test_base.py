"""Tests for BaseService and event dispatch."""

from __future__ import annotations

import pytest

from guidectl.infrastructure.guide import Guide
from guidectl.plugins import hookimpl
from guidectl.services.base import BaseService
from guidectl.services.build import BuildService
from guidectl.services.check import CheckService
from guidectl.services.compare import CompareService
from guidectl.services.query import QueryService
from guidectl.services.scaffold import ScaffoldService
from guidectl.services.toc import TocService

ALL_SERVICES = [
    CheckService,
    TocService,
    QueryService,
    CompareService,
    BuildService,
    ScaffoldService,
]


class _Listener:
    def __init__(self) -> None:
        self.checks: list[tuple[int, int]] = []

    @hookimpl
    def post_check(self, issues_found: int, error_count: int) -> None:
        self.checks.append((issues_found, error_count))


class _Exploding:
    @hookimpl
    def post_check(self, issues_found: int, error_count: int) -> None:
        raise RuntimeError("plugin bug")


class TestServiceInheritance:
    @pytest.mark.parametrize("service_cls", ALL_SERVICES, ids=lambda c: c.__name__)
    def test_guide_injection(self, service_cls: type, guide: Guide) -> None:
        svc = service_cls(guide)
        assert isinstance(svc, BaseService)
        assert svc._guide is guide


class TestDispatchEvent:
    def test_hook_receives_payload(self, guide: Guide) -> None:
        listener = _Listener()
        guide.plugin_manager.register_plugin(listener)
        CheckService(guide).check()
        assert listener.checks == [(1, 0)]

    def test_plugin_failure_becomes_warning(self, guide: Guide) -> None:
        guide.plugin_manager.register_plugin(_Exploding())
        result = CheckService(guide).check()
        assert result.ok
        assert result.warnings == ["Plugin hook failed: post_check"]

    def test_unavailable_plugin_manager_becomes_warning(
        self, guide: Guide, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def unavailable(self: Guide) -> None:
            raise ModuleNotFoundError("No module named 'broken_plugin'")

        monkeypatch.setattr(Guide, "plugin_manager", property(unavailable))
        warnings: list[str] = []
        BaseService(guide)._dispatch_event("post_build", {"output_dir": "site"}, warnings)
        assert warnings == ["Plugin hook failed: post_build"]
