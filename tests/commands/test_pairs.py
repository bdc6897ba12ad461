"""Tests for pairs CLI command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from guidectl.cli import cli


@pytest.mark.usefixtures("_isolated_guide")
class TestPairsCommand:
    def test_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "pairs"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["left"] == "ruby"
        assert data["right"] == "elixir"
        assert data["count"] == 2
        assert data["unpaired_count"] == 0

    def test_single_chapter_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "pairs", "querying"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "querying.md#preloading"

    def test_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["pairs", "schemas"])
        assert result.exit_code == 0
        assert "defmodule User do" in result.output
        assert "1 pairs, 0 unpaired blocks" in result.output

    def test_swapped_sides_leave_unpaired(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "pairs", "--left", "ex", "--right", "rb"])
        data = json.loads(result.stdout)["data"]
        assert data["count"] == 0
        assert {u["side"] for u in data["unpaired"]} == {"left", "right"}

    def test_unknown_chapter(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["pairs", "nowhere"])
        assert result.exit_code == 1
