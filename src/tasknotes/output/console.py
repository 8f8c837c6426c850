"""Rich Console factory and theme for mtn output.

Consoles render to a StringIO buffer so every renderer keeps the
``format_result() -> str`` contract. Rich drops color codes on its own
when the output is not a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

TN_THEME = Theme(
    {
        "tn.ok": "bold green",
        "tn.error": "bold red",
        "tn.warning": "bold yellow",
        "tn.key": "dim",
        "tn.path": "dim",
        "tn.title": "bold",
        "tn.tag": "cyan",
        "tn.context": "magenta",
        "tn.project": "blue",
        "tn.today": "cyan",
        "tn.overdue": "red",
        "tn.status.open": "blue",
        "tn.status.in-progress": "yellow",
        "tn.status.done": "green",
        "tn.status.cancelled": "bright_black",
        "tn.priority.urgent": "bold red",
        "tn.priority.high": "red",
        "tn.priority.normal": "yellow",
        "tn.priority.low": "green",
    }
)

STATUS_ICONS: dict[str, str] = {
    "open": "☐",
    "in-progress": "◐",
    "done": "☑",
    "cancelled": "☒",
}
DEFAULT_ICON = "•"


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=TN_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def status_icon(status: object) -> str:
    return STATUS_ICONS.get(str(status), DEFAULT_ICON) if status else DEFAULT_ICON


def style_for_status(status: object) -> str:
    """Rich style name for a task status ("" when unknown)."""
    return f"tn.status.{status}" if status in STATUS_ICONS else ""


def style_for_priority(priority: object) -> str:
    """Rich style name for a priority ("" when unknown)."""
    if priority in ("urgent", "high", "normal", "low"):
        return f"tn.priority.{priority}"
    return ""
