"""Shared pytest fixtures and test helpers for mtn tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from tasknotes.infrastructure.collection import Collection

TASK_TYPE_MD = """\
---
name: task
path_pattern: "tasks/{title}.md"
match:
  where:
    tags:
      contains: task
fields:
  title:
    type: string
    required: true
  status:
    type: enum
    values: [open, in-progress, done, cancelled]
    default: open
  priority:
    type: enum
    values: [low, normal, high, urgent]
    default: normal
  due:
    type: date
  scheduled:
    type: date
  completedDate:
    type: date
  tags:
    type: list
  contexts:
    type: list
  projects:
    type: list
  timeEstimate:
    type: integer
  recurrence:
    type: string
  dateCreated:
    type: datetime
    required: true
  dateModified:
    type: datetime
---
"""


def write_collection(root: Path, task_type: str = TASK_TYPE_MD) -> Path:
    """Write ``mdbase.yaml`` and ``_types/task.md`` under *root*."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "mdbase.yaml").write_text('spec_version: "0.2.0"\n', encoding="utf-8")
    (root / "_types").mkdir(exist_ok=True)
    (root / "_types" / "task.md").write_text(task_type, encoding="utf-8")
    return root


def write_task(root: Path, relative: str, frontmatter: str, body: str = "") -> Path:
    """Write a task document given its raw YAML frontmatter."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\n{frontmatter.strip()}\n---\n{body}", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_home(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Keep every test away from the real user config and env overrides."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("MDBASE_TASKNOTES_CONFIG", str(home / "config.json"))
    monkeypatch.delenv("MDBASE_TASKNOTES_PATH", raising=False)
    return home


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Generator[None]:
    """CLI invocations reconfigure logging; put the root logger back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def collection_root(tmp_path: Path) -> Path:
    """Temporary collection with the standard ``task`` type."""
    return write_collection(tmp_path / "collection")


@pytest.fixture
def collection(collection_root: Path) -> Collection:
    """Opened collection on :func:`collection_root`."""
    c = Collection.open(collection_root)
    try:
        yield c
    finally:
        c.close()


@pytest.fixture
def _in_collection(collection_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the CLI at the temp collection via the environment."""
    monkeypatch.setenv("MDBASE_TASKNOTES_PATH", str(collection_root))


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def create_task(collection: Collection, text: str, **kwargs: Any) -> dict[str, Any]:
    """Create a task via CreateService, asserting success."""
    from tasknotes.services.create import CreateService

    result = CreateService(collection).create_task(text, **kwargs)
    assert result.ok, result.error
    return result.data
