"""Command: read and write the user config (named config_cmd to avoid shadowing)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasknotes.commands._base import TnCommand

if TYPE_CHECKING:
    from tasknotes.commands._context import AppContext


@click.command(
    "config",
    cls=TnCommand,
    examples="""\
  mtn config --list
  mtn config --get collectionPath
  mtn config --set collectionPath=~/notes
  mtn config --set language=""",
)
@click.option("--set", "assignment", default=None, metavar="KEY=VALUE", help="Set a config value.")
@click.option("--get", "key", default=None, metavar="KEY", help="Print one config value.")
@click.option("--list", "list_all", is_flag=True, help="Print every config value (default).")
@click.pass_obj
def config_cmd(app: AppContext, assignment: str | None, key: str | None, list_all: bool) -> None:
    """Show or change mtn settings (collectionPath, language)."""
    from tasknotes.services.config import ConfigService

    service = ConfigService(app.settings.config_path)
    if assignment is not None:
        app.emit(service.set_config(assignment))
    elif key is not None:
        app.emit(service.get_config(key))
    else:
        app.emit(service.list_config())
