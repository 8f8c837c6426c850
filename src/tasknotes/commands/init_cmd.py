"""Command: collection initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnCommand

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext

_INIT_EXAMPLES = """\
  mtn init
  mtn init ~/tasks
  mtn init . --force"""


@click.command("init", cls=TnCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("-f", "--force", is_flag=True, help="Overwrite an existing mdbase.yaml.")
@click.pass_obj
def init_cmd(app: AppContext, path: str, force: bool) -> None:
    """Initialize a task collection: mdbase.yaml, the task type, and tasks/."""
    from tasknotes.services.init import InitService

    app.emit(InitService.init_collection(Path(path), force=force))
