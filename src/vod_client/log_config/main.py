"""Logging configuration and utilities."""

import logging
import structlog
from typing import Any


def get_context_logger(name: str) -> structlog.BoundLogger:
    """Get a context-aware logger.

    Args:
        name: Logger name

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)


def configure_logging(
    level: str | None = None, json_output: bool | None = None
) -> None:
    """Configure structlog processors for the process.

    Unset arguments fall back to the ``logging`` settings section.

    Args:
        level: Minimum log level name
        json_output: Render JSON lines instead of console output
    """
    if level is None or json_output is None:
        from ..settings import get_settings

        log_settings = get_settings().logging
        level = level or log_settings.level
        json_output = log_settings.json_output if json_output is None else json_output

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )


class SessionLogContext:
    """Context manager binding playback session fields into the logging context."""

    def __init__(self, **context: Any):
        """Initialize with context variables.

        Args:
            **context: Context key-value pairs
        """
        self.context = context

    def __enter__(self):
        """Enter context."""
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context."""
        structlog.contextvars.unbind_contextvars(*self.context.keys())


__all__ = [
    "get_context_logger",
    "configure_logging",
    "SessionLogContext",
]
