"""Natural-language task text → structured task draft.

Recognised anywhere on the first line::

    Ship launch plan tomorrow #work @office +[[Q3 Launch]] !high ~1h30m every week

* ``#tag``, ``@context``, ``+project`` / ``+[[Project Name]]``
* ``!urgent`` ``!high`` ``!normal`` ``!low``, or ``urgent`` / ``high priority``
* ``~30m`` ``~2h`` ``~1h30m`` time estimates (minutes)
* ``every day|week|month|year|weekday|<weekday>`` recurrence (RRULE)
* ``due <date>`` / ``scheduled <date>``; bare date phrases set ``due``

Everything else becomes the title. Lines after the first form the body.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any

from dateutil import parser as date_parser
from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta
from pydantic import BaseModel, Field

from tasknotes.domain.links import as_wikilink
from tasknotes.domain.roles import FieldRole

_WEEKDAYS = {
    "monday": MO,
    "mon": MO,
    "tuesday": TU,
    "tue": TU,
    "tues": TU,
    "wednesday": WE,
    "wed": WE,
    "thursday": TH,
    "thu": TH,
    "thur": TH,
    "thurs": TH,
    "friday": FR,
    "fri": FR,
    "saturday": SA,
    "sat": SA,
    "sunday": SU,
    "sun": SU,
}

# Abbreviations ("sat", "sun") only count after an explicit keyword.
_FULL_WEEKDAYS = frozenset(
    {"monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"}
)

_RRULE_DAYS = {MO: "MO", TU: "TU", WE: "WE", TH: "TH", FR: "FR", SA: "SA", SU: "SU"}

_RECURRENCE = {
    "day": "FREQ=DAILY",
    "daily": "FREQ=DAILY",
    "week": "FREQ=WEEKLY",
    "month": "FREQ=MONTHLY",
    "year": "FREQ=YEARLY",
    "weekday": "FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR",
    "weekdays": "FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR",
}

_PRIORITY_MARKERS = {"!urgent": "urgent", "!high": "high", "!normal": "normal", "!low": "low"}

_ESTIMATE = re.compile(r"^~(?:(\d+)h)?(?:(\d+)m)?$", re.IGNORECASE)
_ESTIMATE_MINUTES = re.compile(r"^~(\d+)$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_IN_UNITS = {"day": "days", "days": "days", "week": "weeks", "weeks": "weeks"}
_IN_MONTHS = {"month", "months"}

_DUE_KEYWORDS = frozenset({"due", "by"})
_SCHEDULED_KEYWORDS = frozenset({"scheduled", "start", "starting"})


class TaskDraft(BaseModel):
    """Role-keyed fields extracted from free text."""

    model_config = {"frozen": True, "populate_by_name": True}

    title: str
    priority: str | None = None
    due: str | None = None
    scheduled: str | None = None
    tags: list[str] = Field(default_factory=list)
    contexts: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    time_estimate: int | None = Field(default=None, alias="timeEstimate")
    recurrence: str | None = None
    body: str | None = None

    def to_role_frontmatter(self) -> dict[str, Any]:
        """Role-keyed frontmatter, omitting empty values."""
        candidates: dict[str, Any] = {
            FieldRole.TITLE: self.title,
            FieldRole.PRIORITY: self.priority,
            FieldRole.DUE: self.due,
            FieldRole.SCHEDULED: self.scheduled,
            FieldRole.TAGS: list(self.tags),
            FieldRole.CONTEXTS: list(self.contexts),
            FieldRole.PROJECTS: list(self.projects),
            FieldRole.TIME_ESTIMATE: self.time_estimate,
            FieldRole.RECURRENCE: self.recurrence,
        }
        return {str(k): v for k, v in candidates.items() if v not in (None, [], "")}


def parse_task_text(text: str, *, today: date | None = None) -> TaskDraft:
    """Parse *text* into a :class:`TaskDraft`.

    *today* anchors relative dates; defaults to the local current date.
    """
    today = today or date.today()
    first_line, _, rest = text.strip().partition("\n")
    tokens = first_line.split()

    fields: dict[str, Any] = {"tags": [], "contexts": [], "projects": []}
    title_words: list[str] = []

    i = 0
    while i < len(tokens):
        token = tokens[i]
        lower = token.lower()

        if token.startswith("#") and len(token) > 1:
            _append_unique(fields["tags"], token[1:])
            i += 1
            continue

        if token.startswith("@") and len(token) > 1:
            _append_unique(fields["contexts"], token[1:])
            i += 1
            continue

        if token.startswith("+") and len(token) > 1:
            name, consumed = _read_project(tokens, i)
            if name:
                _append_unique(fields["projects"], as_wikilink(name))
            i += consumed
            continue

        if lower in _PRIORITY_MARKERS:
            fields.setdefault("priority", _PRIORITY_MARKERS[lower])
            i += 1
            continue

        if lower == "urgent" and "priority" not in fields:
            fields["priority"] = "urgent"
            i += 1
            continue

        if lower in ("high", "low") and _peek(tokens, i + 1) == "priority":
            fields.setdefault("priority", lower)
            i += 2
            continue

        estimate = _parse_estimate(token)
        if estimate is not None:
            fields.setdefault("timeEstimate", estimate)
            i += 1
            continue

        if lower == "every" and i + 1 < len(tokens):
            rule = _parse_recurrence(tokens[i + 1])
            if rule and "recurrence" not in fields:
                fields["recurrence"] = rule
                i += 2
                continue

        if lower in _DUE_KEYWORDS or lower in _SCHEDULED_KEYWORDS:
            target = "due" if lower in _DUE_KEYWORDS else "scheduled"
            parsed, consumed = parse_date_phrase(tokens, i + 1, today, explicit=True)
            if parsed is not None and target not in fields:
                fields[target] = parsed.isoformat()
                i += 1 + consumed
                continue

        if "due" not in fields:
            parsed, consumed = parse_date_phrase(tokens, i, today)
            if parsed is not None:
                fields["due"] = parsed.isoformat()
                i += consumed
                continue

        title_words.append(token)
        i += 1

    title = " ".join(title_words).strip() or first_line.strip()
    body = rest.strip() or None
    return TaskDraft(title=title, body=body, **fields)


def parse_date_phrase(
    tokens: list[str],
    start: int,
    today: date,
    *,
    explicit: bool = False,
) -> tuple[date | None, int]:
    """Parse a date phrase at ``tokens[start]``.

    Returns ``(date, tokens_consumed)`` or ``(None, 0)``. With *explicit*
    (after a ``due``/``scheduled`` keyword) free-form dates such as
    ``March 3`` are accepted too.
    """
    word = _peek(tokens, start)
    if word is None:
        return None, 0

    if word in ("today", "tonight"):
        return today, 1
    if word == "tomorrow":
        return today + timedelta(days=1), 1
    if word in _FULL_WEEKDAYS or (explicit and word in _WEEKDAYS):
        return today + relativedelta(weekday=_WEEKDAYS[word](+1)), 1
    if _ISO_DATE.match(word):
        try:
            return date.fromisoformat(word), 1
        except ValueError:
            return None, 0

    following = _peek(tokens, start + 1)
    if word == "next" and following is not None:
        if following in _WEEKDAYS:
            return today + relativedelta(days=+1, weekday=_WEEKDAYS[following](+1)), 2
        if following == "week":
            return today + timedelta(weeks=1), 2
        if following == "month":
            return today + relativedelta(months=+1), 2
        if following == "year":
            return today + relativedelta(years=+1), 2

    if word == "in" and following is not None and following.isdigit():
        unit = _peek(tokens, start + 2)
        amount = int(following)
        if unit in _IN_UNITS:
            return today + relativedelta(**{_IN_UNITS[unit]: amount}), 3
        if unit in _IN_MONTHS:
            return today + relativedelta(months=amount), 3

    if explicit:
        return _parse_free_date(tokens, start, today)
    return None, 0


def _parse_free_date(tokens: list[str], start: int, today: date) -> tuple[date | None, int]:
    default = datetime(today.year, today.month, today.day)
    for width in (3, 2, 1):
        chunk = tokens[start : start + width]
        if len(chunk) < width:
            continue
        try:
            parsed = date_parser.parse(" ".join(chunk).rstrip(","), default=default)
        except (ValueError, OverflowError):
            continue
        return parsed.date(), width
    return None, 0


def _parse_estimate(token: str) -> int | None:
    match = _ESTIMATE_MINUTES.match(token)
    if match:
        return int(match.group(1))
    match = _ESTIMATE.match(token)
    if match and (match.group(1) or match.group(2)):
        hours = int(match.group(1) or 0)
        minutes = int(match.group(2) or 0)
        return hours * 60 + minutes
    return None


def _parse_recurrence(word: str) -> str | None:
    lower = word.lower().rstrip(",")
    if lower in _RECURRENCE:
        return _RECURRENCE[lower]
    if lower in _WEEKDAYS:
        return f"FREQ=WEEKLY;BYDAY={_RRULE_DAYS[_WEEKDAYS[lower]]}"
    return None


def _read_project(tokens: list[str], start: int) -> tuple[str, int]:
    """Read ``+name`` or a possibly multi-word ``+[[Name With Spaces]]``."""
    token = tokens[start][1:]
    if not token.startswith("[["):
        return token, 1
    parts = [token]
    index = start
    while not parts[-1].endswith("]]") and index + 1 < len(tokens):
        index += 1
        parts.append(tokens[index])
    joined = " ".join(parts)
    return joined.removeprefix("[[").removesuffix("]]").strip(), index - start + 1


def _peek(tokens: list[str], index: int) -> str | None:
    if 0 <= index < len(tokens):
        return tokens[index].lower().rstrip(",")
    return None


def _append_unique(values: list[str], value: str) -> None:
    if value not in values:
        values.append(value)
