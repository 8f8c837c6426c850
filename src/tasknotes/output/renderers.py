"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from rich.text import Text

from tasknotes.domain.links import extract_project_names
from tasknotes.domain.recurrence import (
    COMPLETE_INSTANCES_FIELD,
    SKIPPED_INSTANCES_FIELD,
    instance_dates,
)
from tasknotes.output.console import (
    create_console,
    get_output,
    status_icon,
    style_for_priority,
    style_for_status,
)

if TYPE_CHECKING:
    from rich.console import Console

    from tasknotes.services.result import ServiceResult

RULE_WIDTH = 60
EXAMPLE_CREATE = 'mtn create "Buy groceries tomorrow #shopping"'

_INSTANCE_STYLES = {"open": "tn.status.open", "completed": "tn.status.done", "skipped": "dim"}

# op -> (message on change, message when nothing changed)
_INSTANCE_MESSAGES = {
    "complete_instance": ("Completed:", "Already completed"),
    "skip_instance": ("Skipped:", "Already skipped"),
    "unskip_instance": ("Reopened:", "Not skipped"),
}


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False, no_color: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console(no_color=no_color)

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: paths only."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"✗ {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(_extract_key(item) for item in items if _extract_key(item))
    if result.op == "get_config":
        value = result.data.get("value")
        return "" if value is None else str(value)
    if "path" in result.data:
        return str(result.data["path"])
    return ""


def format_duration(minutes: int) -> str:
    """``45m``, ``2h`` or ``1h 30m``."""
    if minutes < 60:
        return f"{minutes}m"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m" if rest else f"{hours}h"


def format_date(value: Any, *, today: date | None = None) -> Text:
    """A due/scheduled date: ``today``, red when past, plain otherwise."""
    raw = str(value)
    try:
        day = date.fromisoformat(raw[:10])
    except ValueError:
        return Text(raw)
    today = today or date.today()
    if day == today:
        return Text("today", style="tn.today")
    if day < today:
        return Text(day.isoformat(), style="tn.overdue")
    return Text(day.isoformat())


def format_task_line(task: dict[str, Any], *, today: date | None = None) -> Text:
    """One-line summary: icon, priority badge, title, dates, tags, contexts, projects, estimate."""
    line = Text(status_icon(task.get("status")))

    priority = task.get("priority")
    if priority and priority != "normal":
        line.append(" ")
        line.append(f"[{priority}]", style=style_for_priority(priority))

    line.append(" ")
    line.append(str(task.get("title") or task.get("path") or ""))

    for key in ("due", "scheduled"):
        if task.get(key):
            line.append(f" {key}:", style="dim")
            line.append_text(format_date(task[key], today=today))

    _append_words(line, "#", _as_list(task.get("tags")), "tn.tag")
    _append_words(line, "@", _as_list(task.get("contexts")), "tn.context")
    _append_words(line, "+", extract_project_names(task.get("projects")), "tn.project")

    estimate = task.get("timeEstimate")
    if isinstance(estimate, int) and not isinstance(estimate, bool) and estimate > 0:
        line.append(f" ~{format_duration(estimate)}", style="dim")
    return line


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_key(item: Any) -> str:
    if isinstance(item, dict):
        for key in ("path", "name"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _as_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value if v not in (None, "")]
    if isinstance(value, str) and value:
        return [value]
    return []


def _append_words(line: Text, prefix: str, words: list[str], style: str) -> None:
    if words:
        line.append(" ")
        line.append(" ".join(f"{prefix}{w}" for w in words), style=style)


def _success(console: Console, message: str, detail: str | None = None) -> None:
    text = Text("✓", style="tn.ok")
    text.append(f" {message}")
    if detail:
        text.append(f" {detail}", style="tn.title")
    console.print(text)


def _detail_row(console: Console, label: str, value: Text | str) -> None:
    row = Text(f"  {label + ':':<10} ")
    row.append_text(value if isinstance(value, Text) else Text(value))
    console.print(row)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _success(console, result.op)
    for key, value in result.data.items():
        console.print(Text(f"  {key}: ", style="tn.key"), Text(str(value)), sep="")


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text("✗", style="tn.error"), Text(msg))

    if err and err.code == "HAS_BACKLINKS":
        for path in err.detail.get("backlinks", []):
            console.print(Text(f"  - {path}", style="tn.path"))
    elif verbose and err:
        console.print(Text(f"  code: {err.code}", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"  {k}: {v}", style="dim"))


# ── Task renderers ────────────────────────────────────────────────────


def _render_create(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _success(console, "Task created")
    console.print(Text("  ").append_text(format_task_line(result.data)))
    console.print(Text(f"  → {result.data.get('path', '')}", style="tn.path"))


def _render_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No tasks found.", style="dim"))
        return
    for task in items:
        console.print(format_task_line(task))
        if verbose:
            console.print(Text(f"    {task.get('path', '')}", style="tn.path"))
    if result.data.get("has_more"):
        more = f"\n… more tasks not shown (raise --limit above {len(items)})"
        console.print(Text(more, style="dim"))


def _render_detail(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    task = result.data
    status = task.get("status")
    header = Text(f"{status_icon(status)} ")
    header.append(str(task.get("title", "")), style="tn.title")
    console.print(header)
    console.print(Text("─" * RULE_WIDTH, style="dim"))

    if status:
        _detail_row(console, "Status", Text(str(status), style=style_for_status(status)))
    priority = task.get("priority")
    if priority:
        _detail_row(console, "Priority", Text(str(priority), style=style_for_priority(priority)))
    if task.get("due"):
        _detail_row(console, "Due", format_date(task["due"]))
    if task.get("scheduled"):
        _detail_row(console, "Scheduled", format_date(task["scheduled"]))
    if task.get("completedDate"):
        _detail_row(console, "Completed", format_date(task["completedDate"]))
    if task.get("dateCreated"):
        _detail_row(console, "Created", Text(str(task["dateCreated"]), style="dim"))

    tags = _as_list(task.get("tags"))
    if tags:
        _detail_row(console, "Tags", Text(" ".join(f"#{t}" for t in tags), style="tn.tag"))
    contexts = _as_list(task.get("contexts"))
    if contexts:
        joined = " ".join(f"@{c}" for c in contexts)
        _detail_row(console, "Contexts", Text(joined, style="tn.context"))
    projects = extract_project_names(task.get("projects"))
    if projects:
        joined = " ".join(f"+{p}" for p in projects)
        _detail_row(console, "Projects", Text(joined, style="tn.project"))

    estimate = task.get("timeEstimate")
    if isinstance(estimate, int) and not isinstance(estimate, bool) and estimate > 0:
        _detail_row(console, "Estimate", format_duration(estimate))
    if task.get("recurrence"):
        _detail_row(console, "Recurs", str(task["recurrence"]))
        done_on = instance_dates(task.get(COMPLETE_INSTANCES_FIELD))
        if done_on:
            _detail_row(console, "Done on", ", ".join(done_on))
        skipped_on = instance_dates(task.get(SKIPPED_INSTANCES_FIELD))
        if skipped_on:
            _detail_row(console, "Skipped", ", ".join(skipped_on))

    instance = task.get("instance")
    if isinstance(instance, dict):
        state = str(instance.get("state", ""))
        line = Text(f"  Instance ({instance.get('date', '')}): ")
        line.append(state, style=_INSTANCE_STYLES.get(state, ""))
        console.print(line)

    entries = task.get("timeEntries")
    if isinstance(entries, list) and entries:
        console.print()
        console.print(Text("  Time entries:", style="dim"))
        for entry in entries:
            if isinstance(entry, dict):
                console.print(Text(f"    {_format_time_entry(entry)}"))

    console.print()
    console.print(Text(f"  Path: {task.get('path', '')}", style="tn.path"))

    body = task.get("body")
    if body and str(body).strip():
        console.print()
        console.print(Text("─" * RULE_WIDTH, style="dim"))
        console.print(Text(str(body).rstrip("\n")))


def _format_time_entry(entry: dict[str, Any]) -> str:
    start = _format_instant(entry.get("startTime"), "%Y-%m-%d %H:%M") or "?"
    end = _format_instant(entry.get("endTime"), "%H:%M") or "running"
    duration = entry.get("duration")
    suffix = f" ({format_duration(duration)})" if isinstance(duration, int) and duration > 0 else ""
    return f"{start} → {end}{suffix}"


def _format_instant(value: Any, fmt: str) -> str | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value)).strftime(fmt)
    except ValueError:
        return str(value)


def _render_complete(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    title = str(result.data.get("title", result.data.get("path", "")))
    if result.data.get("already"):
        console.print(Text(f"Already done: {title}", style="dim"))
    else:
        _success(console, "Completed:", title)


def _render_instance(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    title = str(result.data.get("title", result.data.get("path", "")))
    day = result.data.get("instance", {}).get("date", "")
    changed, unchanged = _INSTANCE_MESSAGES[result.op]
    if result.data.get("already"):
        console.print(Text(f"{unchanged}: {title} ({day})", style="dim"))
    else:
        _success(console, changed, f"{title} ({day})")


def _render_archive(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    title = str(result.data.get("title", result.data.get("path", "")))
    if result.data.get("already"):
        console.print(Text(f"Already archived: {title}", style="dim"))
    else:
        _success(console, "Archived:", title)


def _render_delete(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _success(console, "Deleted:", str(result.data.get("path", "")))


# ── Project renderers ─────────────────────────────────────────────────


def _render_projects(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No projects found.", style="dim"))
        return
    stats = result.data.get("stats", False)
    for entry in items:
        line = Text("  ")
        line.append(f"+{entry['name']}", style="tn.project")
        if stats:
            line.append(f"  {entry['open']} open, {entry['done']} done ({entry['percent']}%)")
        console.print(line)


def _render_project(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    name = result.data.get("project", "")
    items = result.data.get("items", [])
    if not items:
        console.print(Text(f'No tasks in project "{name}".', style="dim"))
        return
    console.print(Text(f"Project: +{name}\n", style="bold"))
    for task in items:
        console.print(format_task_line(task))


# ── Config / init renderers ───────────────────────────────────────────


def _render_config_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    console.print(Text(f"Config file: {result.data.get('path', '')}\n", style="dim"))
    for key, value in result.data.get("values", {}).items():
        line = Text(f"  {key}: ")
        if value is None:
            line.append("(not set)", style="dim")
        else:
            line.append(str(value))
        console.print(line)


def _render_config_get(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    value = result.data.get("value")
    console.print(Text("(not set)" if value is None else str(value)))


def _render_config_set(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    value = result.data.get("value")
    _success(console, f"Set {result.data.get('key')} = {'(null)' if value is None else value}")


def _render_init(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _success(console, "Initialized mdbase-tasknotes collection:")
    for created in result.data.get("created", []):
        console.print(Text(f"  {created}", style="dim"))
    console.print()
    line = Text("Collection path: ")
    line.append(str(result.data.get("path", "")), style="cyan")
    console.print(line)
    hint = Text("Create tasks with: ")
    hint.append(EXAMPLE_CREATE, style="cyan")
    console.print(hint)


_OP_RENDERERS: dict[str, Any] = {
    # Tasks
    "create_task": _render_create,
    "list_tasks": _render_list,
    "show_task": _render_detail,
    "complete_task": _render_complete,
    "complete_instance": _render_instance,
    "skip_instance": _render_instance,
    "unskip_instance": _render_instance,
    "archive_task": _render_archive,
    "delete_task": _render_delete,
    # Projects
    "list_projects": _render_projects,
    "show_project": _render_project,
    # Config / init
    "list_config": _render_config_list,
    "get_config": _render_config_get,
    "set_config": _render_config_set,
    "init_collection": _render_init,
}
