"""
VOD Client Package

Client-side core of a multi-origin video-on-demand player: HLS playlist ad
filtering, concurrent origin racing with switch recommendations, and bounded
playback fault recovery.

This package provides:
- VodClient: Facade wiring the components below from settings
- ManifestRewriter / AdFilteringLoader: Ad segment removal from playlists
- RaceCoordinator / SelectionPolicy: Origin racing and ranking
- RecoveryStateMachine / PlaybackRecoveryController: Stream fault recovery

Usage:
    from vod_client import VodClient

    async with VodClient() as client:
        outcome = await client.find_sources("Big Buck Bunny", current_origin_id="alpha")
        if outcome.recommend_switch:
            ...
        loaded = await client.load_manifest(playlist_url)
"""

from .client import VodClient
from .exceptions import (
    ManifestFetchError,
    ManifestParseError,
    ParseError,
    ProbeError,
    StreamFatalError,
    StreamFault,
    VodConfigError,
    VodException,
)
from .manifest import (
    AdFilteringLoader,
    AdPatternSet,
    ManifestParser,
    ManifestRewriter,
    Playlist,
    Segment,
    SegmentClassifier,
    detect_ads,
    filter_manifest,
)
from .origins import (
    CmsOriginAdapter,
    OriginCandidate,
    OriginProbe,
    ProbeResult,
    ProbeResultCache,
    RaceCoordinator,
    RaceOutcome,
    SelectionPolicy,
    SourceRegistry,
)
from .playback import (
    FaultClass,
    FaultDescriptor,
    PlaybackRecoveryController,
    RecoveryAction,
    RecoveryState,
    RecoveryStateMachine,
)
from .time_provider import (
    RealtimeTimeProvider,
    SimulatedTimeProvider,
    TimeProvider,
    create_time_provider,
)

__version__ = "1.0.0"

__all__ = [
    # Main client
    "VodClient",
    # Manifest
    "Segment",
    "Playlist",
    "ManifestParser",
    "SegmentClassifier",
    "ManifestRewriter",
    "AdFilteringLoader",
    "AdPatternSet",
    "filter_manifest",
    "detect_ads",
    # Origins
    "OriginCandidate",
    "ProbeResult",
    "RaceOutcome",
    "CmsOriginAdapter",
    "OriginProbe",
    "RaceCoordinator",
    "SelectionPolicy",
    "ProbeResultCache",
    "SourceRegistry",
    # Playback
    "FaultClass",
    "FaultDescriptor",
    "RecoveryAction",
    "RecoveryState",
    "RecoveryStateMachine",
    "PlaybackRecoveryController",
    # Time providers
    "TimeProvider",
    "RealtimeTimeProvider",
    "SimulatedTimeProvider",
    "create_time_provider",
    # Exceptions
    "VodException",
    "ParseError",
    "ManifestParseError",
    "ManifestFetchError",
    "ProbeError",
    "StreamFault",
    "StreamFatalError",
    "VodConfigError",
]
