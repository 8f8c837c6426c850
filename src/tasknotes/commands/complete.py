"""Command: mark a task done."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnCommand, collection_option

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext


@click.command(
    cls=TnCommand,
    examples="""\
  mtn complete "Buy groceries"
  mtn complete tasks/Buy groceries.md
  mtn complete "Weekly review" --date 2026-02-16""",
)
@click.argument("task")
@click.option(
    "-d",
    "--date",
    "on",
    default=None,
    help="Complete only the occurrence of a recurring task on this date (YYYY-MM-DD).",
)
@collection_option
@click.pass_obj
def complete(app: AppContext, task: str, on: str | None, collection_path: str | None) -> None:
    """Mark a task done and record today's completion date."""
    from tasknotes.services.update import UpdateService

    app.emit(UpdateService(app.collection(collection_path)).complete_task(task, on=on))
