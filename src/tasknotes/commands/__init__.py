"""Subcommand modules for mtn.

Provides register_commands() which uses deferred imports to keep
``mtn --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``projects`` group and the standalone commands on the root group."""
    # --- Groups ---
    from tasknotes.commands.projects import projects

    cli.add_command(projects)

    # --- Standalone commands ---
    from tasknotes.commands.archive import archive
    from tasknotes.commands.complete import complete
    from tasknotes.commands.config_cmd import config_cmd
    from tasknotes.commands.create import create
    from tasknotes.commands.delete import delete
    from tasknotes.commands.init_cmd import init_cmd
    from tasknotes.commands.instances import skip, unskip
    from tasknotes.commands.list_cmd import list_cmd
    from tasknotes.commands.show import show

    cli.add_command(create)
    cli.add_command(list_cmd)
    cli.add_command(show)
    cli.add_command(complete)
    cli.add_command(skip)
    cli.add_command(unskip)
    cli.add_command(archive)
    cli.add_command(delete)
    cli.add_command(config_cmd)
    cli.add_command(init_cmd)
