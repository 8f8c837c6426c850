"""Per-date instance state of recurring tasks.

A recurring task is one document carrying an RRULE in its ``recurrence``
role. Individual occurrences are tracked by date in two plain list
fields, which are not roles and are never renamed by the schema::

    recurrence: FREQ=WEEKLY;BYDAY=MO
    complete_instances: ['2026-02-09']
    skipped_instances: ['2026-02-16']

An occurrence listed in neither field is open. Occurrences are computed
from the task's anchor date: ``scheduled``, then ``due``, then the date
part of ``dateCreated``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, time
from enum import StrEnum
from typing import Any

from dateutil.rrule import rrulestr

from tasknotes.domain.roles import FieldRole

COMPLETE_INSTANCES_FIELD = "complete_instances"
SKIPPED_INSTANCES_FIELD = "skipped_instances"

_ANCHOR_ROLES: tuple[FieldRole, ...] = (
    FieldRole.SCHEDULED,
    FieldRole.DUE,
    FieldRole.DATE_CREATED,
)


class InstanceState(StrEnum):
    OPEN = "open"
    COMPLETED = "completed"
    SKIPPED = "skipped"


def parse_instance_date(value: str) -> str:
    """Validate a ``YYYY-MM-DD`` instance date and return it normalized.

    Raises:
        ValueError: If *value* is not a calendar date.
    """
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        msg = f"Invalid date: {value!r} (expected YYYY-MM-DD)"
        raise ValueError(msg) from None


def anchor_date(task: Mapping[str, Any]) -> date | None:
    """First usable date among the anchor roles of a normalized task."""
    for role in _ANCHOR_ROLES:
        value = task.get(role)
        if not value:
            continue
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            continue
    return None


def occurs_on(rule: str, start: date, on: date) -> bool:
    """Whether the RRULE *rule*, starting at *start*, produces *on*.

    Raises:
        ValueError: If *rule* is not a valid RRULE.
    """
    if on < start:
        return False
    recurrence = rrulestr(rule.strip(), dtstart=datetime.combine(start, time()))
    return datetime.combine(on, time()) in recurrence


def instance_dates(value: Any) -> list[str]:
    """Instance dates stored in a frontmatter list field, as strings."""
    if isinstance(value, list):
        return [str(v)[:10] for v in value if v]
    if isinstance(value, str) and value:
        return [value[:10]]
    return []


def instance_state(task: Mapping[str, Any], on: str) -> InstanceState:
    """State of the occurrence on *on*. Completion wins over a skip."""
    if on in instance_dates(task.get(COMPLETE_INSTANCES_FIELD)):
        return InstanceState.COMPLETED
    if on in instance_dates(task.get(SKIPPED_INSTANCES_FIELD)):
        return InstanceState.SKIPPED
    return InstanceState.OPEN


def transition(
    task: Mapping[str, Any], on: str, state: InstanceState
) -> dict[str, list[str] | None]:
    """Field updates that move the occurrence on *on* to *state*.

    An emptied list maps to ``None`` so the store drops the key.
    """
    completed = [d for d in instance_dates(task.get(COMPLETE_INSTANCES_FIELD)) if d != on]
    skipped = [d for d in instance_dates(task.get(SKIPPED_INSTANCES_FIELD)) if d != on]
    if state is InstanceState.COMPLETED:
        completed.append(on)
    elif state is InstanceState.SKIPPED:
        skipped.append(on)
    return {
        COMPLETE_INSTANCES_FIELD: sorted(completed) or None,
        SKIPPED_INSTANCES_FIELD: sorted(skipped) or None,
    }
