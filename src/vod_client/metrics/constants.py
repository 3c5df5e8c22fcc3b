"""
Metric name constants.

Keeps metric names consistent between the components that emit them and the
dashboards that read them.
"""


class VodMetrics:
    """Metric name constants for VOD client operations."""

    # Race counters
    RACE_REQUESTS_TOTAL = "vod.race.requests.total"
    RACE_ORIGINS_ATTEMPTED = "vod.race.origins.attempted"
    RACE_ORIGINS_AVAILABLE = "vod.race.origins.available"
    RACE_ORIGINS_UNAVAILABLE = "vod.race.origins.unavailable"
    RACE_PROBES_ABANDONED = "vod.race.probes.abandoned"
    RACE_SWITCH_RECOMMENDED = "vod.race.switch.recommended"

    # Latency histograms
    PROBE_LATENCY_MS = "vod.probe.latency.milliseconds"
    RACE_DURATION_MS = "vod.race.duration.milliseconds"

    # Gauges
    RACE_ACTIVE = "vod.race.active"

    # Cache
    CACHE_HITS = "vod.cache.hits"
    CACHE_MISSES = "vod.cache.misses"
    CACHE_EVICTIONS = "vod.cache.evictions"

    # Manifest
    MANIFEST_FILTERED = "vod.manifest.filtered"
    MANIFEST_SEGMENTS_REMOVED = "vod.manifest.segments.removed"

    # Recovery
    RECOVERY_FAULTS = "vod.recovery.faults"
    RECOVERY_FATAL = "vod.recovery.fatal"


class MetricLabels:
    """Standard label names for metrics."""

    ORIGIN_ID = "origin_id"
    RESULT = "result"  # available, timeout, network, not_found, invalid_content
    FAULT_CLASS = "fault_class"  # network, media, fatal
    ACTION = "action"  # retry_network, retry_media, ignore, destroy, none


__all__ = ["VodMetrics", "MetricLabels"]
