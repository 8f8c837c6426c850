"""Command group: projects referenced by tasks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnGroup, collection_option

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext


@click.group(
    cls=TnGroup,
    examples="""\
  mtn projects list
  mtn projects list --stats
  mtn projects show "Q1 Review\"""",
)
def projects() -> None:
    """Inspect the projects that tasks belong to."""


@projects.command(
    "list",
    examples="""\
  mtn projects list
  mtn projects list --stats""",
)
@click.option("--stats", is_flag=True, help="Show open/done counts per project.")
@collection_option
@click.pass_obj
def list_projects(app: AppContext, stats: bool, collection_path: str | None) -> None:
    """List every project referenced by a task."""
    from tasknotes.services.query import QueryService

    app.emit(QueryService(app.collection(collection_path)).list_projects(stats=stats))


@projects.command(
    "show",
    examples="""\
  mtn projects show Garden
  mtn projects show "q1 review\"""",
)
@click.argument("name")
@collection_option
@click.pass_obj
def show_project(app: AppContext, name: str, collection_path: str | None) -> None:
    """List the tasks of one project (case-insensitive)."""
    from tasknotes.services.query import QueryService

    app.emit(QueryService(app.collection(collection_path)).show_project(name))
