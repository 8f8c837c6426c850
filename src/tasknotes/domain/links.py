"""Link extraction — wikilinks in bodies and project references.

Pure functions, no infrastructure dependencies. Projects are stored as
wikilinks (``[[Projects/Launch|Launch]]``); display and path templates
only want the note name.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

# [[Title]] or [[Title|Display Text]]: captures content between brackets.
_WIKILINK_PATTERN = re.compile(r"\[\[([^\[\]]+)\]\]")

# [[folder/Name|Alias]]: captures the last path segment before any alias.
_PROJECT_LINK = re.compile(r"\[\[(?:.*/)?([^\]|]+)(?:\|[^\]]+)?\]\]")

# [text](target.md): markdown links to local files.
_MARKDOWN_LINK = re.compile(r"\[[^\]]*\]\(([^)\s]+)\)")


@dataclass(frozen=True)
class WikiLink:
    """A wikilink extracted from body text."""

    raw: str  # original text between [[ ]] (target portion)
    display: str | None = None  # display text after | if present


def extract_wikilinks(body: str) -> list[WikiLink]:
    """Extract all ``[[wikilinks]]`` from markdown text.

    Handles both ``[[Target]]`` and ``[[Target|Display Text]]`` formats.
    Returns an empty list if no wikilinks are found.
    """
    results: list[WikiLink] = []
    for match in _WIKILINK_PATTERN.finditer(body):
        inner = match.group(1)
        parts = inner.split("|", 1)
        target = parts[0].strip()
        display = parts[1].strip() if len(parts) > 1 else None
        results.append(WikiLink(raw=target, display=display))
    return results


def extract_markdown_link_targets(body: str) -> list[str]:
    """Extract targets of ``[text](target)`` links, ignoring URLs."""
    return [m.group(1) for m in _MARKDOWN_LINK.finditer(body) if "://" not in m.group(1)]


def extract_project_name(project: str) -> str:
    """Unwrap a wikilink project reference to its bare note name.

    Examples:
        >>> extract_project_name("[[Projects/Launch|Q3 launch]]")
        'Launch'
        >>> extract_project_name("Garden")
        'Garden'
    """
    match = _PROJECT_LINK.search(project)
    if match:
        return match.group(1)
    return project


def extract_project_names(projects: Iterable[object] | None) -> list[str]:
    """Bare names for every string entry of a ``projects`` value."""
    if projects is None:
        return []
    if isinstance(projects, str):
        return [extract_project_name(projects)]
    return [extract_project_name(p) for p in projects if isinstance(p, str) and p.strip()]


def as_wikilink(name: str) -> str:
    """Wrap a bare note name in ``[[ ]]`` unless it already is a link."""
    stripped = name.strip()
    if stripped.startswith("[[") and stripped.endswith("]]"):
        return stripped
    return f"[[{stripped}]]"


def link_targets_path(target: str, path: str) -> bool:
    """Return True if a link *target* points at the document at *path*.

    Matches full relative paths (with or without ``.md``) and bare file
    stems, the way wikilinks usually address notes.
    """
    target = target.split("#", 1)[0].strip().removeprefix("./")
    if not target:
        return False
    without_ext = path[:-3] if path.lower().endswith(".md") else path
    stem = without_ext.rsplit("/", 1)[-1]
    candidates = {path, without_ext, stem}
    return target in candidates or target.removesuffix(".md") in candidates
