"""Tests for show, complete, archive, and delete commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from tasknotes.cli import cli
from tests.conftest import write_task


@pytest.fixture
def _seeded(collection_root: Path, _in_collection: None) -> None:
    write_task(
        collection_root,
        "tasks/Write report.md",
        "title: Write report\nstatus: open\npriority: high\ntags: [task]",
        "Quarterly numbers\n",
    )
    write_task(
        collection_root, "tasks/Write email.md", "title: Write email\nstatus: open\ntags: [task]"
    )


@pytest.mark.usefixtures("_seeded")
class TestShowCommand:
    def test_show(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["show", "report"])
        assert result.exit_code == 0, result.output
        assert "☐ Write report" in result.output
        assert "Priority:  high" in result.output
        assert "Quarterly numbers" in result.output

    def test_ambiguous(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["show", "Write"])
        assert result.exit_code == 1
        assert 'Ambiguous title "Write"' in result.output
        assert "tasks/Write email.md" in result.output

    def test_not_found(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "show", "nothing"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "NOT_FOUND"

    def test_malformed_document(self, cli_runner: CliRunner, collection_root: Path) -> None:
        write_task(collection_root, "tasks/bad.md", "title: A\ntitle: B")
        result = cli_runner.invoke(cli, ["--json", "show", "tasks/bad.md"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "INVALID_DOCUMENT"


@pytest.mark.usefixtures("_seeded")
class TestCompleteCommand:
    def test_complete(self, cli_runner: CliRunner, collection_root: Path) -> None:
        result = cli_runner.invoke(cli, ["complete", "report"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "✓ Completed: Write report"
        assert "status: done" in (collection_root / "tasks" / "Write report.md").read_text()

    def test_twice(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["complete", "report"])
        result = cli_runner.invoke(cli, ["complete", "report"])
        assert result.exit_code == 0
        assert result.output.strip() == "Already done: Write report"


@pytest.mark.usefixtures("_seeded")
class TestArchiveCommand:
    def test_archive(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "archive", "email"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["data"]["tags"] == ["task", "archive"]


@pytest.mark.usefixtures("_seeded")
class TestDeleteCommand:
    def test_delete(self, cli_runner: CliRunner, collection_root: Path) -> None:
        result = cli_runner.invoke(cli, ["delete", "email"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "✓ Deleted: tasks/Write email.md"
        assert not (collection_root / "tasks" / "Write email.md").exists()

    def test_backlinks_block(self, cli_runner: CliRunner, collection_root: Path) -> None:
        write_task(collection_root, "daily/today.md", "title: today", "- [[Write email]]\n")
        result = cli_runner.invoke(cli, ["delete", "email"])
        assert result.exit_code == 1
        assert "Use --force to delete anyway." in result.output
        assert "  - daily/today.md" in result.output

        forced = cli_runner.invoke(cli, ["delete", "email", "--force"])
        assert forced.exit_code == 0
        assert not (collection_root / "tasks" / "Write email.md").exists()
