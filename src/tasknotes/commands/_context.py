"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Opens the collection lazily and owns result
emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from tasknotes.output.formatters import OutputSettings, format_result
from tasknotes.services.result import fail

if TYPE_CHECKING:
    from tasknotes.config.settings import TnSettings
    from tasknotes.infrastructure.collection import Collection
    from tasknotes.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The collection is opened on first use so ``--help``, ``config`` and
    ``init`` never touch a collection.
    """

    def __init__(self, settings: TnSettings) -> None:
        self.settings = settings
        self._collection: Collection | None = None
        self._reported: set[str] = set()

        from tasknotes.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
            no_color=settings.no_color,
        )
        if settings.config_error:
            self._warn(settings.config_error)

    def collection_root(self, flag_path: str | None = None) -> Path:
        """Collection directory chosen by flag, env, user config, or cwd."""
        return self.settings.collection_root(flag_path)

    def collection(self, flag_path: str | None = None) -> Collection:
        """Open the collection for this invocation.

        An unusable collection is reported like any failed result and
        exits with code 1. The handle is closed with the Click context.
        """
        if self._collection is not None:
            return self._collection

        from tasknotes.config.logging import bind_collection
        from tasknotes.infrastructure.collection import Collection, CollectionError

        root = self.collection_root(flag_path)
        bind_collection(root)
        try:
            collection = Collection.open(root)
        except CollectionError as exc:
            self.emit(fail("open_collection", exc.code.upper(), exc.message, path=str(root)))
            raise SystemExit(1) from exc

        ctx = click.get_current_context(silent=True)
        if ctx is not None:
            ctx.call_on_close(collection.close)
        self._collection = collection
        return collection

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Warnings go to stderr first (in JSON mode they stay in the payload).
        * Success: output to stdout, returns normally.
        * Failure: output to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
            no_color=self.settings.no_color,
        )
        if not settings.json_output:
            for warning in result.warnings:
                self._warn(warning)

        output = format_result(result, settings=settings)
        if result.ok:
            if output:
                click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def _warn(self, message: str) -> None:
        """Print a warning to stderr once per invocation."""
        if message in self._reported:
            return
        self._reported.add(message)
        click.echo(f"WARNING: {message}", err=True)
