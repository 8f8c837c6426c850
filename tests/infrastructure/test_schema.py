"""Tests for collection config and type definition loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from tasknotes.infrastructure.schema import (
    SchemaError,
    load_collection_config,
    load_type_definition,
    load_type_definitions,
)
from tests.conftest import write_collection


class TestCollectionConfig:
    def test_defaults(self, collection_root: Path) -> None:
        config = load_collection_config(collection_root)
        assert config.spec_version == "0.2.0"
        assert config.settings.types_folder == "_types"
        assert config.settings.exclude == []

    def test_custom_types_folder(self, tmp_path: Path) -> None:
        (tmp_path / "mdbase.yaml").write_text(
            "settings:\n  types_folder: schema\n  exclude: [archive]\n", encoding="utf-8"
        )
        config = load_collection_config(tmp_path)
        assert config.settings.types_folder == "schema"
        assert config.settings.exclude == ["archive"]

    def test_empty_settings(self, tmp_path: Path) -> None:
        (tmp_path / "mdbase.yaml").write_text("settings:\n", encoding="utf-8")
        assert load_collection_config(tmp_path).settings.types_folder == "_types"

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(SchemaError, match="mdbase.yaml"):
            load_collection_config(tmp_path)

    def test_malformed(self, tmp_path: Path) -> None:
        (tmp_path / "mdbase.yaml").write_text("settings: [unclosed\n", encoding="utf-8")
        with pytest.raises(SchemaError):
            load_collection_config(tmp_path)


class TestTypeDefinitions:
    def test_task_type(self, collection_root: Path) -> None:
        task = load_type_definition(collection_root, "task")
        assert task is not None
        assert task.path_pattern == "tasks/{title}.md"
        assert task.match.where == {"tags": {"contains": "task"}}
        assert task.fields["status"].values == ["open", "in-progress", "done", "cancelled"]
        assert task.fields["title"].required is True

    def test_name_defaults_to_stem(self, tmp_path: Path) -> None:
        root = write_collection(tmp_path / "c")
        (root / "_types" / "note.md").write_text("---\nfields:\n  title:\n---\n", encoding="utf-8")
        types = load_type_definitions(root, load_collection_config(root))
        assert set(types) == {"task", "note"}
        assert types["note"].fields["title"].type is None

    def test_role_annotation(self, tmp_path: Path) -> None:
        root = write_collection(
            tmp_path / "c", "---\nname: task\nfields:\n  state:\n    tn_role: status\n---\n"
        )
        task = load_type_definition(root, "task")
        assert task.fields["state"].tn_role == "status"
        assert task.match.declared is False

    def test_unknown_type(self, collection_root: Path) -> None:
        assert load_type_definition(collection_root, "nope") is None

    def test_invalid_definition(self, tmp_path: Path) -> None:
        root = write_collection(tmp_path / "c", "---\nname: task\nfields: [a, b]\n---\n")
        with pytest.raises(SchemaError, match="task.md"):
            load_type_definitions(root, load_collection_config(root))
