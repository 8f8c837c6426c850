"""Command: list tasks (named list_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnCommand, collection_option

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext


@click.command(
    "list",
    cls=TnCommand,
    examples="""\
  mtn list
  mtn list --status in-progress
  mtn list --tag work --priority high
  mtn list --overdue
  mtn list --all --limit 200
  mtn list --where "{status: {in: [open, in-progress]}, tags: {contains: work}}"
  mtn --json list --due 2026-03-01""",
)
@click.option("-s", "--status", default=None, help="Only tasks with this status.")
@click.option("--priority", default=None, help="Only tasks with this priority.")
@click.option("-t", "--tag", default=None, help="Only tasks carrying this tag.")
@click.option("--due", default=None, help="Only tasks due on this date (YYYY-MM-DD).")
@click.option("--overdue", is_flag=True, help="Only open tasks whose due date has passed.")
@click.option("--all", "include_closed", is_flag=True, help="Include done and cancelled tasks.")
@click.option(
    "-w",
    "--where",
    default=None,
    help="YAML or JSON mapping of stored field names. Replaces the other filters.",
)
@click.option(
    "-l",
    "--limit",
    type=click.IntRange(min=1),
    default=50,
    show_default=True,
    help="Maximum number of tasks.",
)
@collection_option
@click.pass_obj
def list_cmd(
    app: AppContext,
    status: str | None,
    priority: str | None,
    tag: str | None,
    due: str | None,
    overdue: bool,
    include_closed: bool,
    where: str | None,
    limit: int,
    collection_path: str | None,
) -> None:
    """List tasks, soonest due first. Done and cancelled tasks are hidden by default."""
    from tasknotes.services.query import QueryService

    app.emit(
        QueryService(app.collection(collection_path)).list_tasks(
            status=status,
            priority=priority,
            tag=tag,
            due=due,
            overdue=overdue,
            include_closed=include_closed,
            where=where,
            limit=limit,
        )
    )
