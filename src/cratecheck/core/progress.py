"""Console feedback for the CLI.

Everything here writes to stderr so ``--json`` output on stdout stays
machine-readable. While a spinner is live, console log handlers are muted
(see ``ConsoleSuppressingFilter``); file handlers keep logging.
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from rich.console import Console

_console = Console(stderr=True)

_MARKERS = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
}

# Depth of live displays; nested spinners keep logs muted until the outermost ends
_live_depth: ContextVar[int] = ContextVar("live_depth", default=0)


def is_console_suppressed() -> bool:
    return _live_depth.get() > 0


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    token = _live_depth.set(_live_depth.get() + 1)
    try:
        yield
    finally:
        _live_depth.reset(token)


class ConsoleSuppressingFilter(logging.Filter):
    """Drops records while a live display owns the terminal."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        return not is_console_suppressed()


def _is_tty() -> bool:
    return sys.stderr.isatty()


def get_console() -> Console:
    return _console


def status(message: str, *, style: str = "info") -> None:
    """One result line, prefixed with a marker for ``style``."""
    _console.print(f"{_MARKERS.get(style, '')}{message}", highlight=False)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return "1 file" / "3 files" style counts."""
    return f"{count} {singular if count == 1 else (plural or singular + 's')}"


@contextmanager
def spinner(message: str) -> Iterator[None]:
    """Show ``message`` while a slow step (download, clone, history walk) runs.

    Without a terminal a single ``message...`` line is printed instead.
    """
    from cratecheck.core.logging import get_logger

    started = time.monotonic()
    if _is_tty():
        with suppress_console_logs(), _console.status(f"[cyan]{message}[/cyan]", spinner="dots"):
            yield
    else:
        _console.print(f"{message}...")
        yield
    get_logger("progress").debug("step_finished", step=message, seconds=round(time.monotonic() - started, 2))
