"""
Metrics collection module for the VOD client.

Example:
    >>> from vod_client.metrics import NoOpMetrics, VodMetrics
    >>>
    >>> metrics = NoOpMetrics()
    >>> metrics.increment(VodMetrics.CACHE_HITS)  # No-op
"""

from .base import InMemoryMetrics, MetricsCollector, NoOpMetrics
from .constants import MetricLabels, VodMetrics
from .prometheus import PrometheusMetrics

__all__ = [
    "MetricsCollector",
    "NoOpMetrics",
    "InMemoryMetrics",
    "PrometheusMetrics",
    "VodMetrics",
    "MetricLabels",
]
