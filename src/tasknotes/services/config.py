"""ConfigService — read and write the user config file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from tasknotes.config.discovery import load_user_config, save_user_config, user_config_path
from tasknotes.config.models import CONFIG_KEYS, UserConfig
from tasknotes.services.result import ServiceResult, fail

logger = logging.getLogger(__name__)


def _unknown_key(op: str, key: str) -> ServiceResult:
    return fail(
        op,
        "UNKNOWN_KEY",
        f"Unknown config key: {key}. Valid keys: {', '.join(CONFIG_KEYS)}",
        key=key,
    )


class ConfigService:
    """``mtn config`` operations over one config file."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or user_config_path()

    @property
    def path(self) -> Path:
        return self._path

    def list_config(self) -> ServiceResult:
        op = "list_config"
        loaded, warnings = self._load()
        values = {key: loaded.get_key(key) for key in CONFIG_KEYS}
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(self._path), "values": values},
            warnings=warnings,
        )

    def get_config(self, key: str) -> ServiceResult:
        op = "get_config"
        if key not in CONFIG_KEYS:
            return _unknown_key(op, key)
        loaded, warnings = self._load()
        data = {"key": key, "value": loaded.get_key(key)}
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def set_config(self, assignment: str) -> ServiceResult:
        """Apply ``key=value``. An empty value clears the key."""
        op = "set_config"
        key, sep, value = assignment.partition("=")
        if not sep:
            return fail(
                op,
                "INVALID_FORMAT",
                "Invalid format. Use --set key=value (e.g., --set collectionPath=/path/to/vault)",
            )
        if key not in CONFIG_KEYS:
            return _unknown_key(op, key)
        loaded, warnings = self._load()
        updated = loaded.with_key(key, value or None)
        try:
            written = save_user_config(updated, self._path)
        except OSError as exc:
            return fail(op, "IO_ERROR", f"Failed to write config: {exc}")
        return ServiceResult(
            ok=True,
            op=op,
            data={"key": key, "value": updated.get_key(key), "path": str(written)},
            warnings=warnings,
        )

    def _load(self) -> tuple[UserConfig, list[str]]:
        """Current config. An unreadable file counts as empty and yields a warning."""
        try:
            return load_user_config(self._path), []
        except (OSError, UnicodeError, json.JSONDecodeError, ValidationError) as exc:
            logger.debug("Config load failed for %s", self._path, exc_info=True)
            return UserConfig(), [f"Ignoring invalid config file {self._path}: {exc}"]
