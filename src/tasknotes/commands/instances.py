"""Commands: skip and unskip one occurrence of a recurring task."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnCommand, collection_option

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext

_date_option = click.option(
    "-d",
    "--date",
    "on",
    required=True,
    help="Occurrence date (YYYY-MM-DD).",
)


@click.command(
    cls=TnCommand,
    examples="""\
  mtn skip "Weekly review" --date 2026-02-16
  mtn --json skip tasks/Standup.md -d 2026-02-11""",
)
@click.argument("task")
@_date_option
@collection_option
@click.pass_obj
def skip(app: AppContext, task: str, on: str, collection_path: str | None) -> None:
    """Skip one occurrence of a recurring task."""
    from tasknotes.services.update import UpdateService

    app.emit(UpdateService(app.collection(collection_path)).skip_instance(task, on))


@click.command(
    cls=TnCommand,
    examples="""\
  mtn unskip "Weekly review" --date 2026-02-16""",
)
@click.argument("task")
@_date_option
@collection_option
@click.pass_obj
def unskip(app: AppContext, task: str, on: str, collection_path: str | None) -> None:
    """Reopen a skipped occurrence of a recurring task."""
    from tasknotes.services.update import UpdateService

    app.emit(UpdateService(app.collection(collection_path)).unskip_instance(task, on))
