"""VOD event type constants."""

from enum import Enum


class VodEvents(str, Enum):
    """Event type constants for structured logging."""

    # Manifest events
    MANIFEST_PARSED = "vod.manifest.parsed"
    MANIFEST_PARSE_FAILED = "vod.manifest.parse_failed"
    MANIFEST_FILTERED = "vod.manifest.filtered"
    MANIFEST_FETCH_FAILED = "vod.manifest.fetch_failed"
    MANIFEST_PASSTHROUGH = "vod.manifest.passthrough"

    # Ad pattern events
    PATTERN_ADDED = "vod.patterns.added"
    PATTERN_REMOVED = "vod.patterns.removed"

    # Race events
    RACE_STARTED = "vod.race.started"
    RACE_COMPLETED = "vod.race.completed"
    RACE_PROBE_ABANDONED = "vod.race.probe_abandoned"

    # Probe events
    PROBE_STARTED = "vod.probe.started"
    PROBE_SUCCESS = "vod.probe.success"
    PROBE_FAILED = "vod.probe.failed"

    # Selection events
    SELECTION_SWITCH_RECOMMENDED = "vod.selection.switch_recommended"
    SELECTION_NO_SOURCE = "vod.selection.no_source"

    # Availability events
    AVAILABILITY_CHECKED = "vod.availability.checked"
    AVAILABILITY_URL_FAILED = "vod.availability.url_failed"

    # Cache events
    CACHE_HIT = "vod.cache.hit"
    CACHE_MISS = "vod.cache.miss"
    CACHE_EVICTED = "vod.cache.evicted"

    # Recovery events
    RECOVERY_FAULT = "vod.recovery.fault"
    RECOVERY_RETRY_SCHEDULED = "vod.recovery.retry_scheduled"
    RECOVERY_RECOVERED = "vod.recovery.recovered"
    RECOVERY_FATAL = "vod.recovery.fatal"
    RECOVERY_RESET = "vod.recovery.reset"


__all__ = ["VodEvents"]
