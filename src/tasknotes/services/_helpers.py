"""Shared service-layer helper functions."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from tasknotes.domain.roles import (
    FieldMapping,
    FieldRole,
    build_field_mapping,
    default_field_mapping,
    normalize_frontmatter,
    resolve_field,
)
from tasknotes.infrastructure.collection import Collection, Record
from tasknotes.infrastructure.schema import load_type_definition
from tasknotes.services.result import ServiceError

logger = logging.getLogger(__name__)

TASK_TYPE = "task"

# Statuses that count as finished for default listings and project stats.
CLOSED_STATUSES: tuple[str, ...] = ("done", "cancelled")
DEFAULT_STATUS = "open"
DONE_STATUS = "done"
ARCHIVE_TAG = "archive"


def today_iso() -> str:
    """Today's local date as YYYY-MM-DD."""
    return date.today().isoformat()


def local_now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def load_field_mapping(root: Path) -> FieldMapping:
    """Build the field mapping from the ``task`` type of the collection at *root*.

    Any failure (missing collection, malformed config, no task type)
    yields the identity mapping.
    """
    try:
        type_def = load_type_definition(root, TASK_TYPE)
    except Exception:
        logger.debug("Field mapping load failed for %s; using identity", root, exc_info=True)
        return default_field_mapping()
    if type_def is None:
        return default_field_mapping()
    return build_field_mapping(type_def.fields)


def task_payload(record: Record, mapping: FieldMapping) -> dict[str, Any]:
    """Role-keyed frontmatter of a record, prefixed with its path."""
    return {"path": record.path, **normalize_frontmatter(record.frontmatter, mapping)}


def modified_stamp(collection: Collection, mapping: FieldMapping) -> dict[str, str]:
    """``{field: now}`` for the modification field, if the schema declares it."""
    type_def = collection.get_type(TASK_TYPE)
    field = resolve_field(mapping, FieldRole.DATE_MODIFIED)
    if type_def is not None and field in type_def.fields:
        return {field: local_now().isoformat()}
    return {}


def resolve_task_path(
    collection: Collection,
    mapping: FieldMapping,
    path_or_title: str,
) -> tuple[str | None, ServiceError | None]:
    """Resolve a path or a (partial) title to one task path.

    Values containing ``/`` or ending in ``.md`` are taken as paths.
    Otherwise an exact title match wins, then a unique substring match.
    """
    if "/" in path_or_title or path_or_title.endswith(".md"):
        return path_or_title, None

    title_field = resolve_field(mapping, FieldRole.TITLE)

    exact = collection.query(types=[TASK_TYPE], where={title_field: path_or_title}, limit=2)
    if exact.error:
        return None, ServiceError(code=exact.error.code, message=exact.error.message)
    if len(exact.results) == 1:
        return exact.results[0].path, None

    fuzzy = collection.query(
        types=[TASK_TYPE],
        where={title_field: {"contains": path_or_title}},
        limit=5,
    )
    if fuzzy.error:
        return None, ServiceError(code=fuzzy.error.code, message=fuzzy.error.message)
    if len(fuzzy.results) == 1:
        return fuzzy.results[0].path, None
    if len(fuzzy.results) > 1:
        paths = [r.path for r in fuzzy.results]
        listing = "\n".join(f"  - {p}" for p in paths)
        return None, ServiceError(
            code="AMBIGUOUS",
            message=f'Ambiguous title "{path_or_title}". Matches:\n{listing}',
            detail={"matches": paths},
        )
    return None, ServiceError(code="NOT_FOUND", message=f'No task found matching "{path_or_title}"')
