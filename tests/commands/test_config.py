"""Tests for the config command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from tasknotes.cli import cli


class TestConfigCommand:
    def test_list_default(self, cli_runner: CliRunner, _isolated_home: Path) -> None:
        result = cli_runner.invoke(cli, ["config"])
        assert result.exit_code == 0, result.output
        assert f"Config file: {_isolated_home / 'config.json'}" in result.output
        assert "collectionPath: (not set)" in result.output

    def test_set_then_get(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["config", "--set", f"collectionPath={tmp_path}"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == f"✓ Set collectionPath = {tmp_path}"

        result = cli_runner.invoke(cli, ["config", "--get", "collectionPath"])
        assert result.output.strip() == str(tmp_path)

    def test_explicit_config_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        custom = tmp_path / "custom.json"
        result = cli_runner.invoke(cli, ["-c", str(custom), "config", "--set", "language=de"])
        assert result.exit_code == 0
        assert json.loads(custom.read_text())["language"] == "de"

    def test_invalid_format(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["config", "--set", "collectionPath"])
        assert result.exit_code == 1
        assert "Invalid format. Use --set key=value" in result.output

    def test_unknown_key(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "config", "--get", "theme"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "UNKNOWN_KEY"

    def test_configured_collection_used(
        self, cli_runner: CliRunner, collection_root: Path
    ) -> None:
        cli_runner.invoke(cli, ["config", "--set", f"collectionPath={collection_root}"])
        result = cli_runner.invoke(cli, ["-q", "create", "From config"])
        assert result.exit_code == 0, result.output
        assert (collection_root / "tasks" / "From config.md").is_file()

    def test_set_repairs_invalid_file(self, cli_runner: CliRunner, _isolated_home: Path) -> None:
        config_file = _isolated_home / "config.json"
        config_file.write_text("{broken", encoding="utf-8")
        result = cli_runner.invoke(cli, ["config", "--set", "language=de"])
        assert result.exit_code == 0, result.output
        assert result.output.count(f"WARNING: Ignoring invalid config file {config_file}") == 1
        assert "✓ Set language = de" in result.output
        assert json.loads(config_file.read_text())["language"] == "de"

    def test_invalid_file_does_not_block_commands(
        self, cli_runner: CliRunner, collection_root: Path, _isolated_home: Path
    ) -> None:
        (_isolated_home / "config.json").write_text("[1, 2", encoding="utf-8")
        result = cli_runner.invoke(cli, ["list", "-p", str(collection_root)])
        assert result.exit_code == 0, result.output
        assert "WARNING: Ignoring invalid config file" in result.output
        assert "No tasks found." in result.output
