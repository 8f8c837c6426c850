"""Unified settings — CLI flags, env vars, and the user config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``MDBASE_TASKNOTES_*`` prefix
  3. JSON file    — ``~/.config/mdbase-tasknotes/config.json`` (an unreadable
                    file is ignored and reported through ``config_error``)
  4. Code defaults — baked into the models

Uses Pydantic Settings v2 with a custom :class:`UserConfigSource` that
reuses :func:`tasknotes.config.discovery.load_user_config`.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tasknotes.config.discovery import (
    load_user_config,
    resolve_collection_path,
    user_config_path,
)
from tasknotes.config.models import UserConfig


class UserConfigSource(PydanticBaseSettingsSource):
    """Read the user config JSON file into the ``user`` section."""

    def __init__(self, settings_cls: type[BaseSettings], config_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        try:
            user = load_user_config(config_path)
        except (OSError, UnicodeError, json.JSONDecodeError, ValidationError) as exc:
            shown = config_path or user_config_path()
            self._data["config_error"] = f"Ignoring invalid config file {shown}: {exc}"
            return
        self._data["user"] = user.model_dump(by_alias=True)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the file data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for the config file path during construction.
_tls = threading.local()


class TnSettings(BaseSettings):
    """Unified settings for the entire mtn CLI.

    Stored in ``click.Context.obj`` (via ``AppContext``) at the CLI root.

    Attributes:
        path: Collection directory from ``MDBASE_TASKNOTES_PATH``, if set.
        config_path: Explicit ``--config`` override, or None for the default.
        user: Values read from the user config file.
        config_error: Why the user config file was ignored, if it was.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "MDBASE_TASKNOTES_",
        "env_nested_delimiter": "__",
    }

    path: Path | None = None
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    no_color: bool = False

    user: UserConfig = Field(default_factory=UserConfig)
    config_error: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the user config source between env vars and defaults."""
        config_path = getattr(_tls, "config_path", None)
        return (
            init_settings,
            env_settings,
            UserConfigSource(settings_cls, config_path),
        )

    @classmethod
    def from_cli(cls, *, config_path: str | None = None, **cli_flags: Any) -> TnSettings:
        """Construct settings from a CLI invocation."""
        resolved = Path(config_path).expanduser() if config_path else None
        _tls.config_path = resolved
        try:
            return cls(config_path=resolved, **cli_flags)
        finally:
            _tls.config_path = None

    def collection_root(self, flag_path: str | Path | None = None) -> Path:
        """Resolve the collection directory for this invocation."""
        return resolve_collection_path(flag_path, env_path=self.path, config=self.user)
