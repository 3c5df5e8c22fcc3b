"""
Origin Race Package

Probes third-party video origins concurrently for a title, ranks them and
recommends whether the player should switch origin.

Main Components:
    - RaceCoordinator: Cache → race → rank → recommend
    - OriginProbe: Search, detail and playability check for one origin
    - SelectionPolicy: Ranking and switch rules
    - ProbeResultCache: Five minute result cache, shared between races
    - CmsOriginAdapter: Adapter for CMS JSON origins
    - SourceRegistry: Configured origins by priority
    - check_source_availability / check_multiple_videos: Playability pre-checks

Usage:
    >>> from vod_client.origins import RaceCoordinator, SourceRegistry
    >>> registry = SourceRegistry.from_settings()
    >>> outcome = await RaceCoordinator().find_sources("Big Buck Bunny", registry.enabled())
"""

from .adapter import (
    BaseOriginAdapter,
    CmsOriginAdapter,
    OriginAdapter,
    normalize_detail,
    normalize_item,
    parse_play_url,
)
from .availability import (
    check_multiple_sources,
    check_multiple_videos,
    check_source_availability,
    check_video_url,
    filter_by_available_sources,
    first_playable_url,
)
from .cache import CacheEntry, ProbeResultCache
from .coordinator import RaceCoordinator
from .models import (
    Episode,
    OriginCandidate,
    ProbeErrorKind,
    ProbeResult,
    RaceConfig,
    RaceOutcome,
    VideoDetail,
    VideoItem,
)
from .probe import OriginProbe
from .registry import SourceRegistry
from .selection import (
    SelectionPolicy,
    build_switch_params,
    format_latency,
    speed_level,
)

__all__ = [
    # Models
    "OriginCandidate",
    "Episode",
    "VideoItem",
    "VideoDetail",
    "ProbeErrorKind",
    "ProbeResult",
    "RaceConfig",
    "RaceOutcome",
    # Adapters
    "OriginAdapter",
    "BaseOriginAdapter",
    "CmsOriginAdapter",
    "parse_play_url",
    "normalize_item",
    "normalize_detail",
    # Race
    "OriginProbe",
    "RaceCoordinator",
    "ProbeResultCache",
    "CacheEntry",
    "SelectionPolicy",
    "speed_level",
    "format_latency",
    "build_switch_params",
    "SourceRegistry",
    # Availability
    "first_playable_url",
    "check_video_url",
    "check_source_availability",
    "check_multiple_sources",
    "check_multiple_videos",
    "filter_by_available_sources",
]
