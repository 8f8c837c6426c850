"""Pydantic configuration models with code-baked defaults.

The user config file only contains overrides; a missing file means
every default applies.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# Keys accepted by ``mtn config``, in the file's camelCase spelling.
CONFIG_KEYS: tuple[str, ...] = ("collectionPath", "language")


class UserConfig(BaseModel):
    """``~/.config/mdbase-tasknotes/config.json``."""

    model_config = {"frozen": True, "populate_by_name": True}

    collection_path: str | None = Field(default=None, alias="collectionPath")
    language: str = "en"

    def get_key(self, key: str) -> str | None:
        """Look up a value by its file key (``collectionPath``)."""
        return self.model_dump(by_alias=True)[key]

    def with_key(self, key: str, value: str | None) -> UserConfig:
        """Return a copy with one file key replaced."""
        data = self.model_dump(by_alias=True)
        if key == "language":
            value = value or "en"
        data[key] = value
        return UserConfig.model_validate(data)
