"""Collection configuration and type definitions.

A collection root holds ``mdbase.yaml``::

    spec_version: "0.2.0"
    settings:
      types_folder: "_types"

and one markdown file per type inside the types folder whose frontmatter
is the definition (``name``, ``path_pattern``, ``match``, ``fields``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from tasknotes.infrastructure.filesystem import read_content_file

CONFIG_FILENAME = "mdbase.yaml"
DEFAULT_TYPES_FOLDER = "_types"


class SchemaError(Exception):
    """The collection config or a type definition could not be loaded."""


class CollectionSettings(BaseModel):
    """``settings`` block of ``mdbase.yaml``."""

    model_config = {"frozen": True, "extra": "allow"}

    types_folder: str = DEFAULT_TYPES_FOLDER
    exclude: list[str] = Field(default_factory=list)


class CollectionConfig(BaseModel):
    """Root of ``mdbase.yaml``."""

    model_config = {"frozen": True, "extra": "allow"}

    spec_version: str | None = None
    settings: CollectionSettings = Field(default_factory=CollectionSettings)

    @field_validator("settings", mode="before")
    @classmethod
    def _empty_settings(cls, value: Any) -> Any:
        return {} if value is None else value


class FieldDefinition(BaseModel):
    """One entry of a type's ``fields`` block."""

    model_config = {"frozen": True, "extra": "allow"}

    type: str | None = None
    required: bool = False
    default: Any = None
    values: list[Any] | None = None
    items: dict[str, Any] | None = None
    tn_role: str | None = None


class MatchRule(BaseModel):
    """``match`` block: which documents belong to a type."""

    model_config = {"frozen": True, "extra": "allow"}

    path_glob: str | None = None
    where: dict[str, Any] = Field(default_factory=dict)

    @field_validator("where", mode="before")
    @classmethod
    def _empty_where(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def declared(self) -> bool:
        return bool(self.path_glob or self.where)


class TypeDefinition(BaseModel):
    """A document type loaded from the types folder."""

    model_config = {"frozen": True, "extra": "allow"}

    name: str
    path_pattern: str | None = None
    match: MatchRule = Field(default_factory=MatchRule)
    fields: dict[str, FieldDefinition] = Field(default_factory=dict)

    @field_validator("match", mode="before")
    @classmethod
    def _empty_match(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("fields", mode="before")
    @classmethod
    def _empty_fields(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {k: ({} if v is None else v) for k, v in value.items()}
        return value


def load_collection_config(root: Path) -> CollectionConfig:
    """Load and validate ``mdbase.yaml`` at *root*.

    Raises:
        SchemaError: If the file is missing or malformed.
    """
    path = root / CONFIG_FILENAME
    if not path.is_file():
        msg = f"No {CONFIG_FILENAME} found in {root}"
        raise SchemaError(msg)
    try:
        data = YAML(typ="safe").load(path.read_text(encoding="utf-8")) or {}
        return CollectionConfig.model_validate(data)
    except (OSError, UnicodeError, YAMLError, ValidationError) as exc:
        msg = f"Invalid {CONFIG_FILENAME} in {root}: {exc}"
        raise SchemaError(msg) from exc


def load_type_definitions(root: Path, config: CollectionConfig) -> dict[str, TypeDefinition]:
    """Load every type definition from the configured types folder.

    A definition without ``name`` is named after its file stem.

    Raises:
        SchemaError: If a definition file cannot be parsed.
    """
    folder = root / config.settings.types_folder
    if not folder.is_dir():
        return {}

    types: dict[str, TypeDefinition] = {}
    for path in sorted(folder.glob("*.md")):
        try:
            frontmatter, _body = read_content_file(path)
            frontmatter.setdefault("name", path.stem)
            type_def = TypeDefinition.model_validate(frontmatter)
        except (OSError, UnicodeError, YAMLError, ValidationError) as exc:
            msg = f"Invalid type definition {path.name}: {exc}"
            raise SchemaError(msg) from exc
        types[type_def.name] = type_def
    return types


def load_type_definition(root: Path, name: str) -> TypeDefinition | None:
    """Load a single type definition by name, or None if undefined."""
    config = load_collection_config(root)
    return load_type_definitions(root, config).get(name)
