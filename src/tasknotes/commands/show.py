"""Command: show one task in detail."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnCommand, collection_option

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext


@click.command(
    cls=TnCommand,
    examples="""\
  mtn show tasks/Buy groceries.md
  mtn show "Buy groceries"
  mtn show groceries
  mtn show "Weekly review" --on 2026-02-16""",
)
@click.argument("task")
@click.option(
    "--on",
    default=None,
    help="Also show the state of the recurring occurrence on this date (YYYY-MM-DD).",
)
@collection_option
@click.pass_obj
def show(app: AppContext, task: str, on: str | None, collection_path: str | None) -> None:
    """Show a task by path or title."""
    from tasknotes.services.query import QueryService

    app.emit(QueryService(app.collection(collection_path)).show_task(task, on=on))
