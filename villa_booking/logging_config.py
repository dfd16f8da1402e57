"""
Structured logging for the booking service.

Every event is emitted by structlog. Records from the standard library
(uvicorn, Stripe's SDK, SQLAlchemy) are passed through the same processors,
so a single log stream carries one format. Each line is stamped with the
property this deployment serves and, while a request is in flight, with the
request_id bound by RequestIDMiddleware.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping

import structlog

from villa_booking.config import DEBUG, LOG_LEVEL, PROPERTY_ID

# Library loggers and the level they are held at
LIBRARY_LOG_LEVELS = {
    "stripe": logging.WARNING,
    "urllib3": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


def add_property_id(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Stamp the configured property on events that do not name one."""
    if PROPERTY_ID:
        event_dict.setdefault("property_id", PROPERTY_ID)
    return event_dict


def setup_logging() -> None:
    """
    Configure structlog and route standard library logging through it.

    JSON lines are written unless LOG_LEVEL is DEBUG, in which case the
    coloured console renderer is used.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        add_property_id,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    render_chain: list[Any] = (
        [structlog.dev.ConsoleRenderer(colors=True)]
        if DEBUG
        else [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render_chain],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(LOG_LEVEL)
    for name, level in LIBRARY_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
