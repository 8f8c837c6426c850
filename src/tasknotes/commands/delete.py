"""Command: delete a task file."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnCommand, collection_option

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext


@click.command(
    cls=TnCommand,
    examples="""\
  mtn delete "Buy groceries"
  mtn delete tasks/Old task.md --force""",
)
@click.argument("task")
@click.option("-f", "--force", is_flag=True, help="Delete even when other notes link to the task.")
@collection_option
@click.pass_obj
def delete(app: AppContext, task: str, force: bool, collection_path: str | None) -> None:
    """Delete a task. Refuses when other documents link to it unless --force."""
    from tasknotes.services.update import UpdateService

    app.emit(UpdateService(app.collection(collection_path)).delete_task(task, force=force))
