"""Command: archive a task (tag-based, the file stays in place)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnCommand, collection_option

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext


@click.command(
    cls=TnCommand,
    examples="""\
  mtn archive "Buy groceries"
  mtn --json archive tasks/Old task.md""",
)
@click.argument("task")
@collection_option
@click.pass_obj
def archive(app: AppContext, task: str, collection_path: str | None) -> None:
    """Archive a task by adding the archive tag."""
    from tasknotes.services.update import UpdateService

    app.emit(UpdateService(app.collection(collection_path)).archive_task(task))
