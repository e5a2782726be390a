"""structlog setup for the aggregator and the per-cycle log context.

Every cycle binds a short cycle_id into structlog contextvars; adapter tasks
spawned by asyncio.gather copy the current context, so their venue-level
events carry the id of the cycle that started them.
"""

import logging
import os
import uuid
from contextlib import contextmanager
from typing import Iterator

import structlog

# Third-party loggers that are chatty at INFO (client sessions, access lines)
_QUIET_LOGGERS = ("aiohttp", "uvicorn.access")


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Route structlog and stdlib records through one root handler.

    Args:
        log_level: Root level name; unknown names fall back to INFO.
        log_format: "json" for shipping to a collector, anything else for the
            console renderer. Defaults to the LOG_FORMAT environment variable.
    """
    fmt = (log_format or os.environ.get("LOG_FORMAT", "console")).lower()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(fmt),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def bound_cycle_context(**fields: object) -> Iterator[str]:
    """Bind a fresh cycle_id (plus any extra fields) for the duration of a block.

    Yields the cycle_id. Previously bound values are restored on exit.
    """
    cycle_id = uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(cycle_id=cycle_id, **fields):
        yield cycle_id
