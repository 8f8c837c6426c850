"""Tests for the projects command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from tasknotes.cli import cli


@pytest.fixture
def _seeded(cli_runner: CliRunner, _in_collection: None) -> None:
    for text in ("Plant tulips +Garden", "Buy soil +Garden", "Draft slides +[[Q1 Review]]"):
        assert cli_runner.invoke(cli, ["create", text]).exit_code == 0
    assert cli_runner.invoke(cli, ["complete", "soil"]).exit_code == 0


@pytest.mark.usefixtures("_seeded")
class TestProjectsCommand:
    def test_list(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["projects", "list"])
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["  +Garden", "  +Q1 Review"]

    def test_list_stats(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["projects", "list", "--stats"])
        assert "  +Garden  1 open, 1 done (50%)" in result.output
        assert "  +Q1 Review  1 open, 0 done (0%)" in result.output

    def test_show(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "projects", "show", "garden"])
        assert result.exit_code == 0
        titles = {i["title"] for i in json.loads(result.output)["data"]["items"]}
        assert titles == {"Plant tulips", "Buy soil"}

    def test_show_empty(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["projects", "show", "Nope"])
        assert result.exit_code == 0
        assert result.output.strip() == 'No tasks in project "Nope".'


@pytest.mark.usefixtures("_in_collection")
class TestProjectsEmpty:
    def test_none(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["projects", "list"])
        assert result.output.strip() == "No projects found."
