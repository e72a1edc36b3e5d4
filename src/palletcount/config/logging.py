"""Logging setup for palletcount: stdlib loggers rendered by structlog.

Modules log through ``logging.getLogger(__name__)``. ``configure_logging``
routes every record to stderr through structlog's ``ProcessorFormatter``,
either as a colored console line or, with ``--log-json``, as one JSON
object per line.

Services wrap each operation in :func:`operation_context` so records carry
``op`` plus the session/product id being worked on.
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager

import structlog

APP_LOGGER = "palletcount"

# Libraries that stay at WARNING even under --verbose.
NOISY_LOGGERS: tuple[str, ...] = ("sqlalchemy",)


def operation_context(op: str, **ids: str | None) -> AbstractContextManager[None]:
    """Bind *op* and non-None *ids* to log records emitted inside the block."""
    bound = {key: value for key, value in ids.items() if value is not None}
    return structlog.contextvars.bound_contextvars(op=op, **bound)


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the single stderr handler and set palletcount's log level.

    Safe to call repeatedly; the root handler is replaced, not stacked.

    Args:
        verbose: DEBUG for ``palletcount.*`` loggers; WARNING otherwise.
        log_json: JSON lines instead of the console renderer.
    """
    pre_chain = _pre_chain()
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
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(APP_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
