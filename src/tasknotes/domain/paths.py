"""Path templates — compute a collection-relative path for a new task.

A type definition may declare ``path_pattern`` such as::

    calendar/{{year}}/{{month}}-{{monthNameShort}}/{{titleKebab}}.md

When the store cannot place a new document on its own, the pattern is
rendered against a :class:`TemplateValues` set derived from the task's
frontmatter and a reference instant. Rendering either yields a safe
relative path or reports exactly which placeholders could not be filled.
"""

from __future__ import annotations

import re
import secrets
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import Any

from tasknotes.domain.links import extract_project_name
from tasknotes.domain.roles import FieldMapping, FieldRole, resolve_field

# {{name}} or {name}
_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}|\{(\w+)\}")

_WHITESPACE = re.compile(r"\s+")
_ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*#\[\]]')
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_EDGE_DOTS = re.compile(r"^\.+|\.+$")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9\s]")
_SEPARATORS = re.compile(r"/+")

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

MARKDOWN_EXT = ".md"


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class TemplateValues(Mapping[str, str]):
    """Read-only placeholder → value lookup for one creation attempt."""

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


@dataclass(frozen=True)
class RenderResult:
    """Outcome of substituting one template."""

    rendered: str
    path: str | None = None
    missing: tuple[str, ...] = ()
    unsafe: bool = False


@dataclass(frozen=True)
class PathResolution:
    """Outcome of :func:`derive_path`.

    Exactly one of these holds: no template was declared (``template`` is
    None), a ``path`` was produced, placeholders are ``missing``, or every
    placeholder resolved but the result was ``unsafe``.
    """

    template: str | None = None
    path: str | None = None
    missing: tuple[str, ...] = field(default=())
    unsafe: bool = False


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def derive_path(
    template: str | None,
    frontmatter: Mapping[str, Any],
    mapping: FieldMapping,
    now: datetime,
) -> PathResolution:
    """Render *template* for a (denormalized) task frontmatter.

    A missing or blank template means no rendering was attempted.
    """
    if not isinstance(template, str) or not template.strip():
        return PathResolution()

    values = build_template_values(frontmatter, mapping, now)
    result = render_template(template, values)
    if result.path:
        return PathResolution(template=template, path=ensure_markdown_ext(result.path))
    return PathResolution(template=template, missing=result.missing, unsafe=result.unsafe)


def render_template(template: str, values: Mapping[str, str]) -> RenderResult:
    """Substitute placeholders in a single pass.

    Unresolved placeholders render as empty strings, but the render is only
    accepted when none were missing and the normalized path is safe.
    """
    missing: set[str] = set()

    def _substitute(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        value = values.get(key)
        if value is None or not str(value).strip():
            missing.add(key)
            return ""
        return str(value)

    rendered = _PLACEHOLDER.sub(_substitute, template)
    if missing:
        return RenderResult(rendered=rendered, missing=tuple(sorted(missing)))

    normalized = normalize_relative_path(rendered)
    if not is_safe_relative_path(normalized):
        return RenderResult(rendered=rendered, unsafe=True)
    return RenderResult(rendered=rendered, path=normalized)


def build_template_values(
    frontmatter: Mapping[str, Any],
    mapping: FieldMapping,
    now: datetime,
) -> TemplateValues:
    """Derive every placeholder value from *frontmatter* and *now*."""
    now = _as_local(now)

    title_field = resolve_field(mapping, FieldRole.TITLE)
    priority_field = resolve_field(mapping, FieldRole.PRIORITY)
    status_field = resolve_field(mapping, FieldRole.STATUS)
    due_field = resolve_field(mapping, FieldRole.DUE)
    scheduled_field = resolve_field(mapping, FieldRole.SCHEDULED)
    contexts_field = resolve_field(mapping, FieldRole.CONTEXTS)
    projects_field = resolve_field(mapping, FieldRole.PROJECTS)
    tags_field = resolve_field(mapping, FieldRole.TAGS)
    estimate_field = resolve_field(mapping, FieldRole.TIME_ESTIMATE)

    def read(field_name: str, role: FieldRole) -> str | None:
        return _read_string(frontmatter.get(field_name)) or _read_string(frontmatter.get(role))

    def read_list(field_name: str, role: FieldRole) -> list[str]:
        raw = frontmatter.get(field_name)
        if raw is None:
            raw = frontmatter.get(role)
        return _read_string_list(raw)

    title = sanitize_path_segment(read(title_field, FieldRole.TITLE) or "task")
    priority = sanitize_path_segment(read(priority_field, FieldRole.PRIORITY) or "normal")
    status = sanitize_path_segment(read(status_field, FieldRole.STATUS) or "open")
    due_date = read(due_field, FieldRole.DUE) or ""
    scheduled_date = read(scheduled_field, FieldRole.SCHEDULED) or ""

    contexts = _clean_segments(read_list(contexts_field, FieldRole.CONTEXTS))
    projects = _clean_segments(
        extract_project_name(p) for p in read_list(projects_field, FieldRole.PROJECTS)
    )
    tags = _clean_segments(read_list(tags_field, FieldRole.TAGS))

    time_estimate = frontmatter.get(estimate_field)
    if time_estimate is None:
        time_estimate = frontmatter.get(FieldRole.TIME_ESTIMATE)

    title_lower = title.lower()
    offset = _utc_offset(now)
    unix_ms = int(now.timestamp() * 1000)

    values: dict[str, str] = {
        "title": title,
        "priority": priority,
        "status": status,
        "dueDate": due_date,
        "scheduledDate": scheduled_date,
        "context": contexts[0] if contexts else "",
        "contexts": "/".join(contexts),
        "project": projects[0] if projects else "",
        "projects": "/".join(projects),
        "tags": ", ".join(tags),
        "hashtags": " ".join(f"#{t}" for t in tags),
        "timeEstimate": str(time_estimate) if time_estimate is not None else "",
        "details": "",
        "parentNote": "",
        "date": now.strftime("%Y-%m-%d"),
        "time": now.strftime("%H%M%S"),
        "timestamp": now.strftime("%Y-%m-%d-%H%M%S"),
        "dateTime": now.strftime("%Y-%m-%d-%H%M"),
        "year": now.strftime("%Y"),
        "month": now.strftime("%m"),
        "day": now.strftime("%d"),
        "hour": now.strftime("%H"),
        "minute": now.strftime("%M"),
        "second": now.strftime("%S"),
        "shortDate": now.strftime("%y%m%d"),
        "shortYear": now.strftime("%y"),
        "monthName": now.strftime("%B"),
        "monthNameShort": now.strftime("%b"),
        "dayName": now.strftime("%A"),
        "dayNameShort": now.strftime("%a"),
        "week": f"{week_of_year(now.date()):02d}",
        "quarter": str((now.month - 1) // 3 + 1),
        "time12": sanitize_path_segment(now.strftime("%I:%M %p")),
        "time24": sanitize_path_segment(now.strftime("%H:%M")),
        "hourPadded": now.strftime("%H"),
        "hour12": now.strftime("%I"),
        "ampm": now.strftime("%p"),
        "unix": str(unix_ms // 1000),
        "unixMs": str(unix_ms),
        "milliseconds": f"{now.microsecond // 1000:03d}",
        "ms": f"{now.microsecond // 1000:03d}",
        "timezone": sanitize_path_segment(offset),
        "timezoneShort": sanitize_path_segment(offset.replace(":", "")),
        "utcOffset": sanitize_path_segment(offset),
        "utcOffsetShort": sanitize_path_segment(offset.replace(":", "")),
        "utcZ": "Z",
        "priorityShort": priority[:1].upper(),
        "statusShort": status[:1].upper(),
        "titleLower": title_lower,
        "titleUpper": title.upper(),
        "titleSnake": _WHITESPACE.sub("_", title_lower),
        "titleKebab": _WHITESPACE.sub("-", title_lower),
        "titleCamel": to_camel_case(title, pascal=False),
        "titlePascal": to_camel_case(title, pascal=True),
        "zettel": zettel_code(now),
        "nano": f"{unix_ms}{_random_base36(5)}",
    }

    # Mapped field names are valid placeholders too.
    values[title_field] = title
    values[priority_field] = priority
    values[status_field] = status
    values[due_field] = due_date
    values[scheduled_field] = scheduled_date

    for key, value in frontmatter.items():
        if key in values:
            continue
        if isinstance(value, (str, int, float, bool)):
            values[key] = sanitize_path_segment(str(value))

    return TemplateValues(values)


# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------


def sanitize_path_segment(value: str) -> str:
    """Make a value safe to embed in one path segment.

    Collapses whitespace, drops characters illegal in file names (including
    ``#`` and square brackets) and control characters, and trims edge dots.
    """
    value = _WHITESPACE.sub(" ", value.strip())
    value = _ILLEGAL_CHARS.sub("", value)
    value = _CONTROL_CHARS.sub("", value)
    value = _EDGE_DOTS.sub("", value)
    return value.strip()


def normalize_relative_path(value: str) -> str:
    """Forward slashes only, no repeated or edge separators."""
    value = _SEPARATORS.sub("/", value.replace("\\", "/"))
    return value.strip("/").strip()


def is_safe_relative_path(value: str) -> bool:
    """Reject empty results, parent traversal, and NUL bytes."""
    return bool(value) and ".." not in value and "\0" not in value


def ensure_markdown_ext(path: str) -> str:
    """Append ``.md`` unless the path already ends with it (any case)."""
    normalized = normalize_relative_path(path)
    if not normalized or normalized.lower().endswith(MARKDOWN_EXT):
        return normalized
    return f"{normalized}{MARKDOWN_EXT}"


def to_camel_case(value: str, *, pascal: bool) -> str:
    words = _NON_ALNUM.sub(" ", value).split()
    parts: list[str] = []
    for index, word in enumerate(words):
        lower = word.lower()
        if index == 0 and not pascal:
            parts.append(lower)
        else:
            parts.append(lower[:1].upper() + lower[1:])
    return "".join(parts)


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------


def zettel_code(now: datetime) -> str:
    """``YYMMDD`` followed by the base-36 seconds since local midnight."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    seconds = int((now - midnight).total_seconds())
    return f"{now.strftime('%y%m%d')}{_to_base36(seconds)}"


def week_of_year(day: date) -> int:
    """Sunday-start week number where week 1 contains 1 January."""
    week_start = day - timedelta(days=(day.weekday() + 1) % 7)
    if (week_start + timedelta(days=6)).year > day.year:
        return 1
    jan1 = date(day.year, 1, 1)
    first_week_start = jan1 - timedelta(days=(jan1.weekday() + 1) % 7)
    return (week_start - first_week_start).days // 7 + 1


def _as_local(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.astimezone()
    return now


def _utc_offset(now: datetime) -> str:
    raw = now.strftime("%z") or "+0000"
    return f"{raw[:3]}:{raw[3:5]}"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits: list[str] = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _random_base36(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


# ---------------------------------------------------------------------------
# Frontmatter readers
# ---------------------------------------------------------------------------


def _read_string(value: Any) -> str | None:
    if isinstance(value, (date, datetime)):
        value = value.isoformat()
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _read_string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def _clean_segments(values: Any) -> list[str]:
    cleaned = (sanitize_path_segment(v) for v in values)
    return [v for v in cleaned if v]
