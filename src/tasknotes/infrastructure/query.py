"""Frontmatter predicates and ordering for collection queries.

A ``where`` mapping pairs field names with conditions. A scalar condition
means equality; a mapping combines operators, all of which must hold::

    {"status": {"not_in": ["done", "cancelled"]}, "tags": {"contains": "work"}}

The same vocabulary classifies documents through a type's ``match.where``.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from tasknotes.domain.content import to_plain

_ORDERING: dict[str, Callable[[Any, Any], bool]] = {
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
}

OPERATORS = frozenset({"eq", "neq", "contains", "exists", "in", "not_in", *_ORDERING})


def parse_where(text: str) -> dict[str, Any]:
    """Parse a ``where`` mapping written as YAML or JSON.

    Raises:
        ValueError: If *text* is not a mapping of field names to conditions.
    """
    try:
        loaded = YAML(typ="safe").load(text)
    except YAMLError as exc:
        msg = f"Invalid where expression: {exc}"
        raise ValueError(msg) from exc
    if not isinstance(loaded, Mapping) or not loaded:
        msg = "Invalid where expression: expected a mapping such as {status: open}"
        raise ValueError(msg)
    return to_plain(dict(loaded))


def matches_where(frontmatter: Mapping[str, Any], where: Mapping[str, Any] | None) -> bool:
    """Return True if *frontmatter* satisfies every condition in *where*."""
    if not where:
        return True
    return all(
        _matches_condition(frontmatter.get(field), field in frontmatter, condition)
        for field, condition in where.items()
    )


def _matches_condition(value: Any, present: bool, condition: Any) -> bool:
    if not isinstance(condition, Mapping):
        return _equals(value, condition)

    unknown = set(condition) - OPERATORS
    if unknown:
        msg = f"Unknown query operator(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)

    for op, expected in condition.items():
        if op == "eq" and not _equals(value, expected):
            return False
        if op == "neq" and _equals(value, expected):
            return False
        if op == "contains" and not _contains(value, expected):
            return False
        if op == "exists" and (present and value is not None) != bool(expected):
            return False
        if op == "in" and not _in(value, expected):
            return False
        if op == "not_in" and _in(value, expected):
            return False
        if op in _ORDERING and not _compare(value, expected, _ORDERING[op]):
            return False
    return True


def _equals(value: Any, expected: Any) -> bool:
    if isinstance(value, list) and not isinstance(expected, list):
        return any(_scalar_equals(v, expected) for v in value)
    return _scalar_equals(value, expected)


def _scalar_equals(value: Any, expected: Any) -> bool:
    if value == expected:
        return True
    if value is None or expected is None:
        return False
    return str(value) == str(expected)


def _contains(value: Any, expected: Any) -> bool:
    if isinstance(value, list):
        return any(str(v) == str(expected) for v in value)
    if isinstance(value, str):
        return str(expected) in value
    return False


def _in(value: Any, options: Any) -> bool:
    if not isinstance(options, (list, tuple, set, frozenset)):
        options = [options]
    return any(_scalar_equals(value, option) for option in options)


def _compare(value: Any, expected: Any, op: Callable[[Any, Any], bool]) -> bool:
    if value is None or expected is None:
        return False
    if isinstance(value, (int, float)) and isinstance(expected, (int, float)):
        return op(value, expected)
    return op(str(value), str(expected))


def sort_records(
    records: Sequence[Any],
    order_by: Sequence[Mapping[str, str]] | None,
    key: Callable[[Any], Mapping[str, Any]],
) -> list[Any]:
    """Stable multi-key sort over record frontmatter.

    Each ``order_by`` entry is ``{"field": name, "direction": "asc"|"desc"}``.
    Records missing the field sort last in either direction.
    """
    result = list(records)
    for spec in reversed(order_by or []):
        field = spec["field"]
        descending = str(spec.get("direction", "asc")).lower() == "desc"
        present = [r for r in result if key(r).get(field) is not None]
        missing = [r for r in result if key(r).get(field) is None]
        present.sort(key=lambda r: _sort_key(key(r)[field]), reverse=descending)
        result = present + missing
    return result


def _sort_key(value: Any) -> tuple[int, Any]:
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value))
