"""Short-lived cache of race results keyed by title."""

import threading
from dataclasses import dataclass

from ..events import VodEvents
from ..log_config import get_context_logger
from ..metrics import MetricsCollector, NoOpMetrics, VodMetrics
from ..time_provider import RealtimeTimeProvider, TimeProvider
from .models import ProbeResult


DEFAULT_TTL = 300.0
DEFAULT_MAX_ENTRIES = 10


@dataclass(frozen=True)
class CacheEntry:
    """Race results for one title and when they were stored."""

    title: str
    results: tuple[ProbeResult, ...]
    created_at: float


class ProbeResultCache:
    """
    TTL cache for race results.

    An entry is fresh while ``now - created_at < ttl``. Stale entries are
    evicted when they are looked up; inserting beyond ``max_entries`` drops
    the oldest entries first. All access is serialized by a lock so the
    cache can be shared between concurrent races.

    Examples:
        >>> cache = ProbeResultCache(ttl=300)
        >>> cache.set("Big Buck Bunny", results)
        >>> cache.get("Big Buck Bunny") == tuple(results)
        True
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        time_provider: TimeProvider | None = None,
        metrics: MetricsCollector | None = None,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.logger = get_context_logger("probe_result_cache")
        self.ttl = ttl
        self.max_entries = max_entries
        self.time_provider = time_provider or RealtimeTimeProvider()
        self.metrics = metrics or NoOpMetrics()
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, title: str) -> tuple[ProbeResult, ...] | None:
        """Return fresh results for a title, or None."""
        with self._lock:
            entry = self._entries.get(title)
            if entry is None:
                self.metrics.increment(VodMetrics.CACHE_MISSES)
                return None
            if self.time_provider.now() - entry.created_at >= self.ttl:
                del self._entries[title]
                self.metrics.increment(VodMetrics.CACHE_MISSES)
                self.metrics.increment(VodMetrics.CACHE_EVICTIONS)
                self.logger.debug(VodEvents.CACHE_EVICTED, title=title, reason="expired")
                return None

        self.metrics.increment(VodMetrics.CACHE_HITS)
        return entry.results

    def set(self, title: str, results: list[ProbeResult] | tuple[ProbeResult, ...]) -> None:
        """Store results for a title, replacing any previous entry."""
        with self._lock:
            self._entries.pop(title, None)
            self._entries[title] = CacheEntry(
                title=title,
                results=tuple(results),
                created_at=self.time_provider.now(),
            )
            overflow = len(self._entries) - self.max_entries
            if overflow <= 0:
                return
            oldest = sorted(self._entries.values(), key=lambda e: e.created_at)[:overflow]
            for entry in oldest:
                del self._entries[entry.title]

        self.metrics.increment(VodMetrics.CACHE_EVICTIONS, len(oldest))
        self.logger.debug(
            VodEvents.CACHE_EVICTED,
            titles=[entry.title for entry in oldest],
            reason="capacity",
        )

    def invalidate(self, title: str) -> bool:
        with self._lock:
            return self._entries.pop(title, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, title: str) -> bool:
        with self._lock:
            return title in self._entries


__all__ = ["ProbeResultCache", "CacheEntry", "DEFAULT_TTL", "DEFAULT_MAX_ENTRIES"]
