"""Command: create a task from natural-language text."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnCommand, collection_option

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext


@click.command(
    cls=TnCommand,
    examples="""\
  mtn create "Buy groceries tomorrow #shopping"
  mtn create Call mom friday @phone !high
  mtn create "Write report due 2026-03-01 +[[Q1 Review]] ~2h"
  mtn create "Water plants every week"
  mtn --json create "Draft outline #writing\"""",
)
@click.argument("text", nargs=-1)
@collection_option
@click.pass_obj
def create(app: AppContext, text: tuple[str, ...], collection_path: str | None) -> None:
    """Create a task from text; tags, contexts, projects, dates and priority are parsed out."""
    from tasknotes.services.create import CreateService
    from tasknotes.services.result import fail

    joined = " ".join(text).strip()
    if not joined:
        app.emit(fail("create_task", "EMPTY_INPUT", "Please provide task text."))
        return

    app.emit(CreateService(app.collection(collection_path)).create_task(joined))
