"""structlog setup for mtn.

Every log line goes to stderr so ``mtn --json list`` stays pipeable.
``--log-json`` switches from the console renderer to JSON lines, and
``--verbose``/``--quiet`` move the ``tasknotes`` logger between DEBUG,
WARNING and ERROR. Third-party loggers stay at WARNING.

Lines logged after :func:`bind_collection` carry a ``collection`` key
naming the collection the command works on.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog

LOGGER_NAME = "tasknotes"


def log_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Level of the ``tasknotes`` logger. ``verbose`` beats ``quiet``."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
    no_color: bool = False,
) -> None:
    """Route stdlib and structlog records through one stderr handler.

    Context bound by an earlier invocation in the same process is
    dropped first.
    """
    structlog.contextvars.clear_contextvars()

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=log_json),
        structlog.processors.StackInfoRenderer(),
    ]

    final: list[structlog.types.Processor]
    if log_json:
        final = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        colors = not no_color and sys.stderr.isatty()
        final = [structlog.dev.ConsoleRenderer(colors=colors)]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger(LOGGER_NAME).setLevel(log_level(verbose=verbose, quiet=quiet))


def bind_collection(root: Path) -> None:
    """Tag subsequent log lines with the collection directory."""
    structlog.contextvars.bind_contextvars(collection=str(root))
