"""Creation defaults — fill a new task's frontmatter before it is stored.

Applied in a fixed order because later steps read what earlier ones set:

1. schema field defaults
2. creation / modification timestamps
3. ``match.where`` predicates, so the new document classifies as a task

All functions mutate the (denormalized) frontmatter dict in place.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from tasknotes.domain.roles import FieldMapping, FieldRole, resolve_field


def has_value(value: Any) -> bool:
    return value is not None


def apply_field_defaults(frontmatter: dict[str, Any], fields: Mapping[str, Any] | None) -> None:
    """Copy each field's schema ``default`` into absent frontmatter keys."""
    if not fields:
        return
    for field_name, definition in fields.items():
        default = _definition_attr(definition, "default")
        if default is not None and not has_value(frontmatter.get(field_name)):
            frontmatter[field_name] = copy.deepcopy(default)


def apply_timestamp_defaults(
    frontmatter: dict[str, Any],
    mapping: FieldMapping,
    fields: Mapping[str, Any] | None,
    now: datetime,
) -> None:
    """Stamp the created/modified fields when the schema declares them."""
    if not fields:
        return
    now_iso = now.isoformat()
    for role in (FieldRole.DATE_CREATED, FieldRole.DATE_MODIFIED):
        field_name = resolve_field(mapping, role)
        if field_name in fields and not has_value(frontmatter.get(field_name)):
            frontmatter[field_name] = now_iso


def apply_match_defaults(frontmatter: dict[str, Any], where: Mapping[str, Any] | None) -> None:
    """Pre-populate values so the document satisfies ``match.where``.

    * scalar or ``eq``: set only if absent
    * ``contains``: append to a list, or to a string with a space, unless
      already present; ``[value]`` if absent
    * ``exists: true``: ``True`` if absent
    """
    if not where or not isinstance(where, Mapping):
        return

    for field_name, condition in where.items():
        if condition is None:
            continue

        if not isinstance(condition, Mapping):
            if not has_value(frontmatter.get(field_name)):
                frontmatter[field_name] = copy.deepcopy(condition)
            continue

        if "eq" in condition and not has_value(frontmatter.get(field_name)):
            frontmatter[field_name] = copy.deepcopy(condition["eq"])
            continue

        if "contains" in condition:
            _apply_contains(frontmatter, field_name, condition["contains"])
            continue

        if condition.get("exists") is True and not has_value(frontmatter.get(field_name)):
            frontmatter[field_name] = True


def _apply_contains(frontmatter: dict[str, Any], field_name: str, expected: Any) -> None:
    current = frontmatter.get(field_name)
    if isinstance(current, list):
        if not any(str(v) == str(expected) for v in current):
            current.append(expected)
        return
    if isinstance(current, str):
        if str(expected) not in current:
            frontmatter[field_name] = f"{current} {expected}".strip()
        return
    if not has_value(current):
        frontmatter[field_name] = [expected]


def _definition_attr(definition: Any, name: str) -> Any:
    if isinstance(definition, Mapping):
        return definition.get(name)
    return getattr(definition, name, None)
