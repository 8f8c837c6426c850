"""User config file discovery and collection path resolution.

The user config lives at ``~/.config/mdbase-tasknotes/config.json``
unless ``MDBASE_TASKNOTES_CONFIG`` names another file. The collection
to operate on is chosen by, in order: the ``--path`` flag, the
``MDBASE_TASKNOTES_PATH`` env var, the config's ``collectionPath``,
and finally the current directory.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from tasknotes.config.models import UserConfig

CONFIG_DIRNAME = "mdbase-tasknotes"
CONFIG_FILENAME = "config.json"
CONFIG_ENV_VAR = "MDBASE_TASKNOTES_CONFIG"
PATH_ENV_VAR = "MDBASE_TASKNOTES_PATH"


def user_config_path() -> Path:
    """Location of the user config file (which may not exist yet)."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / CONFIG_DIRNAME / CONFIG_FILENAME


def load_user_config(path: Path | None = None) -> UserConfig:
    """Load and validate the user config.

    Returns the defaults when the file does not exist.

    Raises:
        json.JSONDecodeError: If the file is not valid JSON.
        pydantic.ValidationError: If a value has the wrong type.
    """
    path = path or user_config_path()
    if not path.is_file():
        return UserConfig()
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return UserConfig()
    return UserConfig.model_validate(json.loads(raw))


def save_user_config(config: UserConfig, path: Path | None = None) -> Path:
    """Write *config* as pretty JSON, creating the directory if needed."""
    path = path or user_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(by_alias=True, indent=2) + "\n", encoding="utf-8")
    return path


def resolve_collection_path(
    flag_path: str | Path | None = None,
    *,
    env_path: str | Path | None = None,
    config: UserConfig | None = None,
    cwd: Path | None = None,
) -> Path:
    """Pick the collection directory by flag, env, config, then cwd."""
    for candidate in (flag_path, env_path, config.collection_path if config else None):
        if candidate:
            return Path(candidate).expanduser().resolve()
    return (cwd or Path.cwd()).resolve()
