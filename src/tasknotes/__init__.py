"""mdbase-tasknotes — markdown task manager CLI."""

__version__ = "0.3.0"
