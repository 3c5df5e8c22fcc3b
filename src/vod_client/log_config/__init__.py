"""Logging configuration package."""

from .main import SessionLogContext, configure_logging, get_context_logger


__all__ = [
    "get_context_logger",
    "configure_logging",
    "SessionLogContext",
]
