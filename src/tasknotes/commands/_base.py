"""Custom Click base classes with --examples support.

Provides TnCommand and TnGroup that accept an ``examples`` parameter.
When ``--examples`` is passed, the command prints usage examples and exits.
Also home of the ``-p/--path`` option shared by every collection command.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class TnCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class TnGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag.

    Sets ``command_class = TnCommand`` so subcommands accept ``examples``
    without an explicit ``cls=``.
    """

    command_class = TnCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


def collection_option(func: F) -> F:
    """``-p/--path``: operate on this collection instead of the configured one."""
    return click.option(
        "-p",
        "--path",
        "collection_path",
        default=None,
        type=click.Path(file_okay=False),
        help="Path to the mdbase collection.",
    )(func)
