"""structlog setup for library users and the ccex-rates command.

The library itself only calls get_logger(); applications call
setup_logging() once to route structlog and stdlib records (httpx included)
through one renderer.
"""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Any

import structlog

# Chatty transport loggers; silenced below DEBUG
_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def _json_default(value: Any) -> Any:
    # Rates and volumes are Decimal; keep their exact digits in JSON output
    if isinstance(value, Decimal):
        return format(value, "f")
    return repr(value)


def setup_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Root level name, e.g. "DEBUG".
        log_format: "json" for one JSON object per line, anything else for
            the human-readable console renderer.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    if log_format.lower() == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(
            serializer=json.dumps, default=_json_default
        )
    else:
        renderer = structlog.dev.ConsoleRenderer()

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)


@contextmanager
def bound_exchange(name: str) -> Iterator[None]:
    """Tag every log line emitted in this context (and tasks it spawns) with exchange=name."""
    with structlog.contextvars.bound_contextvars(exchange=name):
        yield
