"""Structured logging configuration for ladderkeeper.

Two renderers are available:
- JSON renderer when the ladder runs inside a host service
- Console renderer for the backfill CLI

Call ``configure_logging`` once at startup. Modules obtain loggers through
``get_logger(__name__)``; the module name travels with every event under the
``logger`` key, next to snake_case event names and key/value context.
"""

import logging

import structlog
from structlog.processors import (
    JSONRenderer,
    StackInfoRenderer,
    TimeStamper,
    add_log_level,
    format_exc_info,
)

from ladderkeeper.config import LOG_LEVEL


def configure_logging(cli_mode: bool = False, log_level: str = LOG_LEVEL) -> None:
    """Configure structlog for the ladder.

    Args:
        cli_mode: Console output for a terminal; JSON lines otherwise
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Unknown names fall back to INFO.
    """
    processors = [
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        StackInfoRenderer(),
        format_exc_info,
    ]

    if cli_mode:
        from structlog.dev import ConsoleRenderer
        processors.append(ConsoleRenderer(colors=True))
    else:
        processors.append(JSONRenderer(sort_keys=True))

    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger whose events carry ``name`` under the ``logger`` key."""
    if name:
        return structlog.get_logger().bind(logger=name)
    return structlog.get_logger()
