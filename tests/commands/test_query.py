"""Tests for chapters, show, and search CLI commands."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from guidectl.cli import cli


@pytest.mark.usefixtures("_isolated_guide")
class TestChaptersCommand:
    def test_table(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["chapters"])
        assert result.exit_code == 0
        assert "Schemas" in result.output
        assert "3 chapters" in result.output

    def test_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "chapters"])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["README.md", "schemas.md", "querying.md"]


@pytest.mark.usefixtures("_isolated_guide")
class TestShowCommand:
    def test_section(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "show", "querying", "preloading"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["heading"] == "Preloading"
        assert "Repo.preload/2" in data["body"]

    def test_quiet_prints_body(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "show", "schemas.md"])
        assert result.exit_code == 0
        assert result.stdout.startswith("# Schemas")

    def test_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["show", "schemas"])
        assert result.exit_code == 0
        assert "schemas.md" in result.output
        assert "Querying" in result.output

    def test_missing_chapter(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["show", "migrations"])
        assert result.exit_code == 1
        assert result.stdout == ""
        assert "ERROR" in result.stderr


@pytest.mark.usefixtures("_isolated_guide")
class TestSearchCommand:
    def test_quiet_locations(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "search", "preload"])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            "querying.md#preloading",
            "schemas.md#associations",
        ]

    def test_multi_word(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "search", "preload", "rails"])
        items = json.loads(result.stdout)["data"]["items"]
        assert [i["anchor"] for i in items] == ["associations"]

    def test_language_filter(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "search", "--language", "ex", "repo"])
        assert result.exit_code == 0
        items = json.loads(result.stdout)["data"]["items"]
        assert [(i["path"], i["anchor"]) for i in items] == [("querying.md", "preloading")]

    def test_unknown_language(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["search", "--language", "nope-lang", "x"])
        assert result.exit_code == 1

    def test_query_required(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["search"])
        assert result.exit_code == 2
