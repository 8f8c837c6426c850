"""Filesystem operations for collection documents.

INVARIANT: Files are truth. Every query re-reads the markdown files; there
is no index to fall out of date.

Pure parsing/rendering utilities live in :mod:`tasknotes.domain.content`
(correct dependency direction: infrastructure -> domain). This module
handles actual file I/O, path resolution, and file discovery.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path, PurePosixPath
from typing import Any

from tasknotes.domain.content import parse_frontmatter, render_frontmatter

# Directories to skip when discovering documents.
_SKIP_DIRS = frozenset({".git", ".obsidian", ".trash", "node_modules"})


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_content_file(path: Path) -> tuple[dict[str, Any], str]:
    """Read a markdown file, returning ``(frontmatter, body)``."""
    content = path.read_text(encoding="utf-8")
    return parse_frontmatter(content)


def write_content_file(path: Path, frontmatter: dict[str, Any], body: str) -> None:
    """Write frontmatter + body to a markdown file.

    Creates parent directories if they don't exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    rendered = render_frontmatter(frontmatter, body)
    path.write_text(rendered, encoding="utf-8")


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


def resolve_document_path(root: Path, relative: str) -> Path:
    """Resolve a collection-relative path to an absolute one.

    Raises:
        ValueError: If the path is absolute or escapes the collection root.
    """
    posix = PurePosixPath(relative.replace("\\", "/"))
    if posix.is_absolute() or ".." in posix.parts or "\0" in relative:
        msg = f"Invalid document path: {relative!r}"
        raise ValueError(msg)

    result = root / Path(*posix.parts)

    # Guard against path traversal via symlinks
    if not result.resolve().is_relative_to(root.resolve()):
        msg = f"Path escapes collection root: {result}"
        raise ValueError(msg)

    return result


def relative_posix(root: Path, path: Path) -> str:
    """Collection-relative path with forward slashes."""
    return path.relative_to(root).as_posix()


def find_documents(root: Path, *, exclude: Iterable[str] = ()) -> list[Path]:
    """Discover all markdown documents under *root*.

    Skips hidden and tool directories plus any top-level folder named in
    *exclude* (the types folder, for instance).
    """
    excluded = {e.strip("/") for e in exclude}
    results: list[Path] = []
    for path in root.rglob("*.md"):
        if not path.is_file():
            continue
        parts = path.relative_to(root).parts
        if any(part in _SKIP_DIRS or part.startswith(".") for part in parts[:-1]):
            continue
        if parts[0] in excluded:
            continue
        results.append(path)

    return sorted(results)
