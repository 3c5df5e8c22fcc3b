"""
Abstract base class for metrics collection.

Races, the probe cache, the manifest rewriter and the recovery state machine
all report through a ``MetricsCollector``. The default collector is a no-op;
``InMemoryMetrics`` keeps values in dictionaries for inspection in tests and
debugging tools.
"""

from abc import ABC, abstractmethod
from collections import defaultdict


LabelKey = tuple[tuple[str, str], ...]


def _label_key(labels: dict[str, str] | None) -> LabelKey:
    return tuple(sorted((labels or {}).items()))


class MetricsCollector(ABC):
    """
    Abstract base class for metrics collection.

    Implementations must be safe to call from asyncio tasks; none of the
    methods may block.
    """

    @abstractmethod
    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        """
        Increment a counter metric.

        Args:
            metric: Metric name (e.g., 'vod.race.requests.total')
            value: Amount to increment (default: 1)
            labels: Optional labels (e.g., {'origin_id': 'alpha', 'result': 'success'})
        """

    @abstractmethod
    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """
        Record a histogram/timing observation.

        Args:
            metric: Metric name (e.g., 'vod.probe.latency.milliseconds')
            value: Observed value
            labels: Optional labels
        """

    @abstractmethod
    def gauge(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """
        Adjust a gauge metric by a relative amount.

        Args:
            metric: Metric name (e.g., 'vod.race.active')
            value: Positive to increase, negative to decrease
            labels: Optional labels
        """

    def timing(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """Record a duration in milliseconds (alias for histogram)."""
        self.histogram(metric, value, labels)


class NoOpMetrics(MetricsCollector):
    """Metrics collector that discards everything."""

    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        pass

    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        pass

    def gauge(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        pass


class InMemoryMetrics(MetricsCollector):
    """
    Metrics collector that keeps every value in memory.

    Example:
        >>> metrics = InMemoryMetrics()
        >>> metrics.increment('vod.cache.hits')
        >>> metrics.counter('vod.cache.hits')
        1
    """

    def __init__(self) -> None:
        self.counters: dict[str, dict[LabelKey, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self.histograms: dict[str, dict[LabelKey, list[float]]] = defaultdict(
            lambda: defaultdict(list)
        )
        self.gauges: dict[str, dict[LabelKey, float]] = defaultdict(
            lambda: defaultdict(float)
        )

    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        self.counters[metric][_label_key(labels)] += value

    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        self.histograms[metric][_label_key(labels)].append(value)

    def gauge(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        self.gauges[metric][_label_key(labels)] += value

    def counter(self, metric: str, labels: dict[str, str] | None = None) -> int:
        """Return a counter value; without labels, the sum over all label sets."""
        series = self.counters.get(metric, {})
        if labels is None:
            return sum(series.values())
        return series.get(_label_key(labels), 0)

    def observations(
        self, metric: str, labels: dict[str, str] | None = None
    ) -> list[float]:
        """Return recorded histogram values; without labels, all of them."""
        series = self.histograms.get(metric, {})
        if labels is None:
            return [value for values in series.values() for value in values]
        return list(series.get(_label_key(labels), []))


__all__ = ["MetricsCollector", "NoOpMetrics", "InMemoryMetrics"]
