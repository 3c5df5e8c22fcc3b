"""
Prometheus metrics collector implementation.

Exposes race, cache, manifest and recovery metrics through prometheus_client.
"""

from typing import Any

from .base import MetricsCollector


class PrometheusMetrics(MetricsCollector):
    """
    Prometheus metrics collector.

    Metric objects are created lazily on first use. Label names are fixed by
    the first call for a given metric, as Prometheus requires.

    Note: prometheus_client is an optional dependency. Install with:
        pip install vod-client[prometheus]

    Example:
        >>> from vod_client.metrics import PrometheusMetrics, VodMetrics
        >>> metrics = PrometheusMetrics()
        >>> metrics.increment(VodMetrics.RACE_REQUESTS_TOTAL)
    """

    def __init__(self, registry: Any | None = None, namespace: str = "") -> None:
        """
        Initialize Prometheus metrics collector.

        Args:
            registry: Optional prometheus_client CollectorRegistry.
                     If None, uses the default REGISTRY.
            namespace: Optional prefix for every exported metric name
        """
        try:
            from prometheus_client import REGISTRY, Counter, Gauge, Histogram
        except ImportError as e:
            raise ImportError(
                "prometheus_client is required for PrometheusMetrics. "
                "Install with: pip install prometheus-client"
            ) from e

        self._registry = registry or REGISTRY
        self._namespace = namespace
        self._factories = {"counter": Counter, "histogram": Histogram, "gauge": Gauge}
        self._metrics: dict[tuple[str, str], Any] = {}

    def _sanitize_metric_name(self, metric: str) -> str:
        """Convert dotted metric names to Prometheus identifiers."""
        name = metric.replace(".", "_").replace("-", "_")
        if self._namespace:
            name = f"{self._namespace}_{name}"
        return name

    def _child(self, kind: str, metric: str, labels: dict[str, str] | None) -> Any:
        name = self._sanitize_metric_name(metric)
        key = (kind, name)
        if key not in self._metrics:
            self._metrics[key] = self._factories[kind](
                name,
                f"{kind.capitalize()} for {metric}",
                sorted(labels) if labels else [],
                registry=self._registry,
            )
        collector = self._metrics[key]
        return collector.labels(**labels) if labels else collector

    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        self._child("counter", metric, labels).inc(value)

    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        self._child("histogram", metric, labels).observe(value)

    def gauge(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        child = self._child("gauge", metric, labels)
        if value > 0:
            child.inc(value)
        elif value < 0:
            child.dec(abs(value))


__all__ = ["PrometheusMetrics"]
