"""Tests for TnSettings — flags, env vars, and the user config file."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tasknotes.config.settings import TnSettings


class TestTnSettingsDefaults:
    def test_all_defaults(self) -> None:
        settings = TnSettings.from_cli()
        assert settings.path is None
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.user.collection_path is None

    def test_flags(self) -> None:
        settings = TnSettings.from_cli(json_output=True, verbose=True)
        assert settings.json_output is True
        assert settings.verbose is True

    def test_frozen(self) -> None:
        settings = TnSettings.from_cli()
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestSources:
    def test_env_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MDBASE_TASKNOTES_PATH", str(tmp_path))
        settings = TnSettings.from_cli()
        assert settings.path == tmp_path
        assert settings.collection_root() == tmp_path.resolve()

    def test_user_config_file(self, _isolated_home: Path, tmp_path: Path) -> None:
        (_isolated_home / "config.json").write_text(
            json.dumps({"collectionPath": str(tmp_path)}), encoding="utf-8"
        )
        settings = TnSettings.from_cli()
        assert settings.user.collection_path == str(tmp_path)
        assert settings.collection_root() == tmp_path.resolve()

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "my.json"
        custom.write_text(json.dumps({"language": "de"}), encoding="utf-8")
        settings = TnSettings.from_cli(config_path=str(custom))
        assert settings.user.language == "de"
        assert settings.config_path == custom

    def test_flag_beats_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MDBASE_TASKNOTES_PATH", str(tmp_path / "env"))
        settings = TnSettings.from_cli()
        assert settings.collection_root(tmp_path / "flag") == (tmp_path / "flag").resolve()

    def test_invalid_config_falls_back(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{oops", encoding="utf-8")
        settings = TnSettings.from_cli(config_path=str(bad))
        assert settings.user.collection_path is None
        assert settings.config_error is not None
        assert settings.config_error.startswith(f"Ignoring invalid config file {bad}: ")

    def test_valid_config_has_no_error(self) -> None:
        assert TnSettings.from_cli().config_error is None
