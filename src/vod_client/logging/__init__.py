"""Logging context with request IDs and hierarchical spans."""

from .context import LoggingContext, clear_context, get_current_context


__all__ = [
    "LoggingContext",
    "get_current_context",
    "clear_context",
]
