"""
Span tracking for races and probes.

A race opens a root span with a fresh request ID; each probe it launches
opens a child span carrying the same request ID. The active span lives in a
single context variable, so probe tasks created by ``asyncio.create_task``
see the race that spawned them.
"""

import contextlib
import contextvars
import secrets
import time
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import structlog


_SPAN_KEYS = ("request_id", "span_id", "parent_id", "operation")
_BUILTIN_NAMESPACES = ("race", "probe", "result")


class _ActiveSpan(NamedTuple):
    request_id: str
    span_id: str
    parent_id: str | None
    operation: str | None


_active_span: contextvars.ContextVar[_ActiveSpan | None] = contextvars.ContextVar(
    "vod_active_span", default=None
)


def _new_id() -> str:
    # 6 random bytes, 12 hex characters
    return secrets.token_hex(6)


def _bind(span: _ActiveSpan | None) -> None:
    structlog.contextvars.unbind_contextvars(*_SPAN_KEYS)
    if span is not None:
        structlog.contextvars.bind_contextvars(**span._asdict())


@dataclass
class LoggingContext:
    """
    A race or probe span bound to structlog's context variables.

    IDs not given explicitly are derived from the enclosing span: the
    request ID is inherited and the enclosing span becomes the parent.
    Leaving the span restores whatever was active before it.

    Namespaces group related fields for ``to_log_dict``. ``race``,
    ``probe`` and ``result`` are predefined; others are created on first
    use by ``set_namespace``.

    Example:
        ```python
        async with LoggingContext(operation="race", race={"title": title}) as ctx:
            async with LoggingContext(operation="probe", probe={"origin_id": "alpha"}):
                ...
            ctx.set_namespace("result", best_origin_id="alpha")
        ```
    """

    request_id: str | None = None
    span_id: str | None = None
    parent_id: str | None = None
    operation: str | None = None

    race: dict[str, Any] = field(default_factory=dict)
    probe: dict[str, Any] = field(default_factory=dict)
    result: dict[str, Any] = field(default_factory=dict)
    extra_namespaces: dict[str, dict[str, Any]] = field(default_factory=dict, repr=False)

    started_at: float = field(default_factory=time.monotonic, repr=False)
    _token: contextvars.Token | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        enclosing = _active_span.get()
        if self.request_id is None:
            self.request_id = enclosing.request_id if enclosing else _new_id()
        if self.span_id is None:
            self.span_id = _new_id()
        if self.parent_id is None and enclosing is not None:
            self.parent_id = enclosing.span_id

    def _span(self) -> _ActiveSpan:
        return _ActiveSpan(self.request_id, self.span_id, self.parent_id, self.operation)

    def __enter__(self) -> "LoggingContext":
        span = self._span()
        self._token = _active_span.set(span)
        _bind(span)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._token is not None:
            _active_span.reset(self._token)
            self._token = None
        _bind(_active_span.get())

    async def __aenter__(self) -> "LoggingContext":
        return self.__enter__()

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)

    def set_namespace(self, namespace: str, **fields: Any) -> None:
        """Merge fields into a namespace, creating it if needed."""
        self._namespace(namespace).update(fields)

    def get_namespace(self, namespace: str) -> dict[str, Any]:
        """Copy of a namespace's fields (empty if it was never set)."""
        if namespace in _BUILTIN_NAMESPACES:
            return dict(getattr(self, namespace))
        return dict(self.extra_namespaces.get(namespace, {}))

    def _namespace(self, namespace: str) -> dict[str, Any]:
        if namespace in _BUILTIN_NAMESPACES:
            return getattr(self, namespace)
        return self.extra_namespaces.setdefault(namespace, {})

    def to_log_dict(self, include_namespaces: bool = True) -> dict[str, Any]:
        """
        Span fields for a structured log line.

        Args:
            include_namespaces: Add non-empty namespaces as nested dicts

        Returns:
            dict: IDs, operation and (optionally) namespaces
        """
        log_dict = {
            key: value for key, value in self._span()._asdict().items() if value
        }
        if not include_namespaces:
            return log_dict

        for namespace in (*_BUILTIN_NAMESPACES, *self.extra_namespaces):
            fields = self.get_namespace(namespace)
            if fields:
                log_dict[namespace] = fields
        return log_dict

    @property
    def elapsed(self) -> float:
        """Seconds since the span was created."""
        return time.monotonic() - self.started_at


def get_current_context() -> LoggingContext | None:
    """The active span as a LoggingContext, or None outside any span."""
    span = _active_span.get()
    if span is None:
        return None
    return LoggingContext(**span._asdict())


def clear_context() -> None:
    """Drop the active span in the current context. Mostly for tests."""
    _active_span.set(None)
    with contextlib.suppress(KeyError):
        structlog.contextvars.unbind_contextvars(*_SPAN_KEYS)


__all__ = [
    "LoggingContext",
    "get_current_context",
    "clear_context",
]
