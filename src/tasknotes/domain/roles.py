"""Field roles — translate between task concepts and schema field names.

A collection's ``task`` type may rename any field (``due`` could be stored
as ``deadline``). Fields opt in to a role with a ``tn_role`` annotation::

    fields:
      deadline:
        type: date
        tn_role: due

Commands speak roles; the store speaks field names. A :class:`FieldMapping`
is rebuilt from the schema on every invocation and never persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class FieldRole(StrEnum):
    """Schema-independent task concepts."""

    TITLE = "title"
    STATUS = "status"
    PRIORITY = "priority"
    DUE = "due"
    SCHEDULED = "scheduled"
    COMPLETED_DATE = "completedDate"
    TAGS = "tags"
    CONTEXTS = "contexts"
    PROJECTS = "projects"
    TIME_ESTIMATE = "timeEstimate"
    DATE_CREATED = "dateCreated"
    DATE_MODIFIED = "dateModified"
    RECURRENCE = "recurrence"
    RECURRENCE_ANCHOR = "recurrenceAnchor"
    TIME_ENTRIES = "timeEntries"


ALL_ROLES: tuple[FieldRole, ...] = tuple(FieldRole)
_ROLE_NAMES: frozenset[str] = frozenset(r.value for r in FieldRole)

ROLE_ANNOTATION = "tn_role"


@dataclass(frozen=True)
class FieldMapping:
    """Bidirectional role/field lookup.

    ``role_to_field`` is total over :data:`ALL_ROLES`. ``field_to_role`` is
    partial: only annotated fields and schema fields named after a role.
    """

    role_to_field: dict[FieldRole, str]
    field_to_role: dict[str, FieldRole]
    warnings: tuple[str, ...] = field(default=())


def default_field_mapping() -> FieldMapping:
    """Identity mapping where every role maps to a field of the same name."""
    return FieldMapping(
        role_to_field={role: role.value for role in ALL_ROLES},
        field_to_role={role.value: role for role in ALL_ROLES},
    )


def build_field_mapping(fields: Mapping[str, Any]) -> FieldMapping:
    """Build a mapping from a type definition's ``fields`` block.

    Explicit ``tn_role`` annotations bind first; a second claim on the same
    role is reported and ignored. Roles left unbound map to their own name
    whether or not the schema declares such a field.
    """
    role_to_field: dict[FieldRole, str] = {}
    field_to_role: dict[str, FieldRole] = {}
    warnings: list[str] = []

    for field_name, definition in fields.items():
        role_name = _annotated_role(definition)
        if role_name is None or role_name not in _ROLE_NAMES:
            continue
        role = FieldRole(role_name)
        if role in role_to_field:
            msg = f'Duplicate {ROLE_ANNOTATION} "{role}" on field "{field_name}", ignoring.'
            logger.warning(msg)
            warnings.append(msg)
            continue
        role_to_field[role] = field_name
        field_to_role[field_name] = role

    for role in ALL_ROLES:
        if role in role_to_field:
            continue
        role_to_field[role] = role.value
        if role.value in fields and role.value not in field_to_role:
            field_to_role[role.value] = role

    return FieldMapping(
        role_to_field=role_to_field,
        field_to_role=field_to_role,
        warnings=tuple(warnings),
    )


def _annotated_role(definition: Any) -> str | None:
    if isinstance(definition, Mapping):
        value = definition.get(ROLE_ANNOTATION)
    else:
        value = getattr(definition, ROLE_ANNOTATION, None)
    return value if isinstance(value, str) else None


def resolve_field(mapping: FieldMapping, role: FieldRole | str) -> str:
    """Return the field name currently bound to *role*."""
    return mapping.role_to_field[FieldRole(role)]


def normalize_frontmatter(raw: Mapping[str, Any], mapping: FieldMapping) -> dict[str, Any]:
    """Translate schema field names to role names. Unknown keys pass through."""
    result: dict[str, Any] = {}
    for key, value in raw.items():
        role = mapping.field_to_role.get(key)
        result[role.value if role is not None else key] = value
    return result


def denormalize_frontmatter(role_data: Mapping[str, Any], mapping: FieldMapping) -> dict[str, Any]:
    """Translate role-keyed data to schema field names. Unknown keys pass through."""
    result: dict[str, Any] = {}
    for key, value in role_data.items():
        if key in _ROLE_NAMES:
            result[mapping.role_to_field[FieldRole(key)]] = value
        else:
            result[key] = value
    return result
