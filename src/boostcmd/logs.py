"""Structured logging configuration using structlog.

Events are rendered by structlog and handed to the stdlib ``boostcmd`` logger,
so the stdlib level decides what is emitted. The package logger writes to the
current ``sys.stderr`` and never touches the root logger.
"""

from __future__ import annotations

import logging
import sys

import structlog

PACKAGE_LOGGER = "boostcmd"


class _StderrHandler(logging.StreamHandler):
    """Stream handler writing to whatever ``sys.stderr`` is at emit time."""

    def __init__(self, level: int = logging.NOTSET) -> None:
        logging.Handler.__init__(self, level)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr


def configure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """Configure structured logging for the dispatcher.

    Logs go to stderr so command results written to stdout stay clean.
    Calling again replaces the previous configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: If True, render each event as one JSON object.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in [h for h in package_logger.handlers if isinstance(h, _StderrHandler)]:
        package_logger.removeHandler(handler)
    handler = _StderrHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    package_logger.propagate = False

    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors: list[structlog.types.Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def ensure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """Configure logging unless the application already has."""
    if not structlog.is_configured():
        configure_logging(level, json_output)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name (typically ``__name__`` of the module).
    """
    ensure_logging()
    return structlog.get_logger(name)


__all__ = ["PACKAGE_LOGGER", "configure_logging", "ensure_logging", "get_logger"]
