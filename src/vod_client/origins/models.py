"""
Origin Race Data Model

Configuration and result structures for probing and racing video origins.
"""

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field


class OriginCandidate(BaseModel):
    """
    One third-party origin offering search/detail/playback.

    Owned by the source registry; read-only to the race layer.

    Attributes:
        id: Stable origin identifier
        name: Display name
        base_url: API base URL
        search_path: Path appended to base_url for searches
        detail_path: Path appended to base_url for detail lookups
        headers: Extra request headers
        priority: Lower values are raced and listed first
        enabled: Disabled origins are never probed
    """

    model_config = {"frozen": True}

    id: str
    name: str
    base_url: str
    search_path: str = ""
    detail_path: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    priority: int = 0
    enabled: bool = True

    @property
    def search_url(self) -> str:
        return _join_url(self.base_url, self.search_path)

    @property
    def detail_url(self) -> str:
        return _join_url(self.base_url, self.detail_path or self.search_path)


def _join_url(base_url: str, path: str) -> str:
    if not path:
        return base_url
    if path.startswith("?"):
        return f"{base_url}{path}"
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


@dataclass(frozen=True)
class Episode:
    """One playable entry of a title."""

    name: str
    url: str
    index: int


@dataclass(frozen=True)
class VideoItem:
    """A search hit, normalized from an origin's payload."""

    vod_id: str
    vod_name: str
    source: str
    vod_pic: str = ""
    type_name: str | None = None
    vod_remarks: str | None = None
    vod_year: str | None = None


@dataclass(frozen=True)
class VideoDetail:
    """A title's detail record with its playable episodes."""

    vod_id: str
    vod_name: str
    source: str
    episodes: tuple[Episode, ...] = ()
    vod_pic: str = ""
    type_name: str | None = None
    vod_remarks: str | None = None
    vod_year: str | None = None
    vod_area: str | None = None
    vod_actor: str | None = None
    vod_director: str | None = None
    vod_content: str | None = None


class ProbeErrorKind(str, Enum):
    """Classification of a failed probe."""

    TIMEOUT = "timeout"
    NETWORK = "network"
    NOT_FOUND = "not_found"
    INVALID_CONTENT = "invalid_content"
    UNKNOWN = "error"


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of probing one origin for one title.

    Results are never mutated; a new probe produces a new result.

    Attributes:
        origin_id: Probed origin
        origin_name: Display name of the origin
        latency_ms: Search start → playability check completion, inf if unavailable
        available: Whether a playable URL was confirmed
        error: Failure message
        error_kind: Failure classification
        sample_detail: Detail record fetched during the probe
        sample_url: URL that was checked
        checked_at: Unix timestamp of completion
    """

    origin_id: str
    origin_name: str
    latency_ms: float = math.inf
    available: bool = False
    error: str | None = None
    error_kind: ProbeErrorKind | None = None
    sample_detail: VideoDetail | None = None
    sample_url: str | None = None
    checked_at: float = field(default_factory=time.time)

    @classmethod
    def success(
        cls,
        candidate: OriginCandidate,
        latency_ms: float,
        detail: VideoDetail,
        sample_url: str,
    ) -> "ProbeResult":
        return cls(
            origin_id=candidate.id,
            origin_name=candidate.name,
            latency_ms=latency_ms,
            available=True,
            sample_detail=detail,
            sample_url=sample_url,
        )

    @classmethod
    def failure(
        cls,
        candidate: OriginCandidate,
        error: str,
        kind: ProbeErrorKind = ProbeErrorKind.UNKNOWN,
        detail: VideoDetail | None = None,
        sample_url: str | None = None,
    ) -> "ProbeResult":
        return cls(
            origin_id=candidate.id,
            origin_name=candidate.name,
            error=error,
            error_kind=kind,
            sample_detail=detail,
            sample_url=sample_url,
        )

    @classmethod
    def timed_out(cls, candidate: OriginCandidate) -> "ProbeResult":
        return cls.failure(candidate, "timeout", ProbeErrorKind.TIMEOUT)

    def to_dict(self) -> dict[str, Any]:
        """Flat representation for logging and API responses."""
        return {
            "origin_id": self.origin_id,
            "origin_name": self.origin_name,
            "latency_ms": None if math.isinf(self.latency_ms) else round(self.latency_ms, 1),
            "available": self.available,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "sample_url": self.sample_url,
        }


@dataclass
class RaceConfig:
    """
    Timing configuration for origin races.

    Attributes:
        deadline: Hard wall-clock limit for a whole race, and for each probe (seconds)
        check_timeout: Sub-deadline for the playability check inside a probe (seconds)

    Examples:
        >>> config = RaceConfig(deadline=6.0, check_timeout=3.0)
    """

    deadline: float = 10.0
    check_timeout: float = 5.0

    @classmethod
    def from_settings(cls, settings: Any) -> "RaceConfig":
        return cls(
            deadline=settings.race.deadline,
            check_timeout=settings.race.check_timeout,
        )


@dataclass(frozen=True)
class RaceOutcome:
    """
    Ranked race result with the selection decision.

    Attributes:
        results: Ranked probe results (current origin first)
        best: Fastest available result, if any
        current: Result for the current origin, if one was supplied
        recommend_switch: Whether switching to ``best`` is recommended
        from_cache: Whether the results came from the cache
    """

    results: tuple[ProbeResult, ...]
    best: ProbeResult | None = None
    current: ProbeResult | None = None
    recommend_switch: bool = False
    from_cache: bool = False

    @property
    def any_available(self) -> bool:
        return self.best is not None


def origin_of(url: str) -> str:
    """scheme://host[:port] of a URL, used as Referer."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


__all__ = [
    "OriginCandidate",
    "Episode",
    "VideoItem",
    "VideoDetail",
    "ProbeErrorKind",
    "ProbeResult",
    "RaceConfig",
    "RaceOutcome",
    "origin_of",
]
