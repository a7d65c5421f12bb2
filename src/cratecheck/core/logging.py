"""Structured logging for analysis runs.

Every event emitted while one crate is analyzed carries the same
``request_id`` plus the ``crate`` and ``crate_version`` being analyzed, so a
JSON log of a batch run can be split back into individual analyses::

    with analysis_context("serde", "1.0.200"):
        log.info("tarball_downloaded")   # -> crate=serde crate_version=1.0.200 request_id=...

Console outputs are muted while a spinner is on screen; file outputs are not.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from cratecheck.config.models import LoggingConfig, LogOutputConfig

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)

# Libraries that log every request or object at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def get_request_id() -> str | None:
    return _request_id.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set or generate the correlation ID for the current run."""
    rid = request_id or uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def clear_request_id() -> None:
    _request_id.set(None)


@contextmanager
def analysis_context(name: str, version: str) -> Iterator[str]:
    """Tag every event in the block with the crate under analysis.

    Reuses the current request ID when one is set (one CLI invocation),
    otherwise opens a fresh one for the duration of the block.
    """
    token = None if get_request_id() else _request_id.set(uuid4().hex[:12])
    try:
        with structlog.contextvars.bound_contextvars(crate=name, crate_version=version):
            yield get_request_id() or ""
    finally:
        if token is not None:
            _request_id.reset(token)


def _add_request_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if rid := get_request_id():
        event_dict.setdefault("request_id", rid)
    return event_dict


def _level(name: str) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_request_id,  # type: ignore[list-item]
    ]


def _handler(output: LogOutputConfig, level: int) -> logging.Handler:
    from cratecheck.core.progress import ConsoleSuppressingFilter

    handler: logging.Handler
    if output.destination in ("stderr", "stdout"):
        stream = sys.stderr if output.destination == "stderr" else sys.stdout
        handler = logging.StreamHandler(stream)
        handler.addFilter(ConsoleSuppressingFilter())
        renderer: structlog.types.Processor = (
            structlog.processors.JSONRenderer()
            if output.format == "json"
            else structlog.dev.ConsoleRenderer(colors=stream.isatty(), pad_event_to=0, pad_level=False)
        )
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a")
        renderer = (
            structlog.processors.JSONRenderer()
            if output.format == "json"
            else structlog.dev.ConsoleRenderer(colors=False, pad_event_to=0, pad_level=False)
        )

    handler.setLevel(_level(output.level) if output.level else level)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_pre_chain()))
    return handler


def configure_logging(*, config: LoggingConfig | None = None, level: str = "INFO") -> None:
    """Route structlog through stdlib logging to the configured outputs.

    Without ``config``, logs to stderr in console format at ``level``.
    Safe to call again; previous handlers are replaced.
    """
    from cratecheck.config.models import LoggingConfig

    config = config or LoggingConfig(level=level)  # type: ignore[arg-type]
    root_level = _level(config.level)

    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(root_level)
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
    for output in config.outputs:
        root.addHandler(_handler(output, root_level))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    return logger.bind(logger=name) if name else logger  # type: ignore[no-any-return]
