"""
Origin Adapter Protocol and Implementations

Abstracts how one origin is searched, how its detail records are fetched and
how a sample stream URL is checked for playability. The race layer only
talks to adapters through this protocol.
"""

from abc import ABC, abstractmethod
from typing import Any, Protocol
from urllib.parse import urlsplit

import httpx

from ..exceptions import (
    ProbeInvalidContent,
    ProbeNetworkError,
    ProbeNotFound,
    ProbeTimeout,
)
from ..log_config import get_context_logger
from .models import Episode, OriginCandidate, VideoDetail, VideoItem, origin_of


PLAY_GROUP_SEPARATOR = "$$$"
EPISODE_SEPARATOR = "#"
NAME_URL_SEPARATOR = "$"
PLAYABLE_STATUSES = (200, 206)
PLAYABLE_CONTENT_TYPES = ("video", "mpegurl", "m3u8", "octet-stream")
PROBE_RANGE = "bytes=0-1024"


class OriginAdapter(Protocol):
    """
    Protocol for origin adapters.

    Examples:
        >>> class StaticAdapter:
        ...     async def search(self, title, candidate):
        ...         return [VideoItem("1", title, candidate.id)]
        ...     async def detail(self, vod_id, candidate): ...
        ...     async def check_playable(self, url, timeout=None, headers=None): ...
    """

    async def search(self, title: str, candidate: OriginCandidate) -> list[VideoItem]:
        """Search the origin for a title."""
        ...

    async def detail(self, vod_id: str, candidate: OriginCandidate) -> VideoDetail:
        """Fetch a title's detail record."""
        ...

    async def check_playable(
        self,
        url: str,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> bool:
        """Check that a stream URL answers with playable content."""
        ...


def is_valid_url(url: str) -> bool:
    """Check that a URL is absolute http(s)."""
    parts = urlsplit(url.strip())
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def parse_play_url(vod_play_url: str) -> list[Episode]:
    """
    Parse a CMS play-url field into episodes.

    The field holds one or more play groups separated by ``$$$``; each group
    lists ``name$url`` entries separated by ``#``. The first group containing
    HLS playlist URLs wins, otherwise the first group with any valid URL.

    Args:
        vod_play_url: Raw play-url field

    Returns:
        list[Episode]: Episodes in listing order (empty if none are valid)

    Examples:
        >>> eps = parse_play_url("EP1$https://a.example/1.m3u8#EP2$https://a.example/2.m3u8")
        >>> [e.name for e in eps]
        ['EP1', 'EP2']
    """
    groups = [
        _parse_play_group(group)
        for group in (vod_play_url or "").split(PLAY_GROUP_SEPARATOR)
    ]
    groups = [group for group in groups if group]
    if not groups:
        return []

    for group in groups:
        if any(".m3u8" in episode.url.lower() for episode in group):
            return group
    return groups[0]


def _parse_play_group(group: str) -> list[Episode]:
    episodes = []
    for entry in group.split(EPISODE_SEPARATOR):
        entry = entry.strip()
        if not entry:
            continue
        if NAME_URL_SEPARATOR in entry:
            name, _, url = entry.partition(NAME_URL_SEPARATOR)
        else:
            name, url = "", entry
        url = url.strip()
        if not is_valid_url(url):
            continue
        index = len(episodes)
        episodes.append(
            Episode(name=name.strip() or f"Episode {index + 1}", url=url, index=index)
        )
    return episodes


def _text(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_item(raw: dict[str, Any], source: str) -> VideoItem:
    """Normalize one CMS list entry into a VideoItem."""
    vod_id = _text(raw.get("vod_id"))
    if vod_id is None:
        raise ProbeInvalidContent(
            "search entry without vod_id",
            origin_id=source,
            payload_preview=str(raw),
        )
    return VideoItem(
        vod_id=vod_id,
        vod_name=_text(raw.get("vod_name")) or "",
        source=source,
        vod_pic=_text(raw.get("vod_pic")) or "",
        type_name=_text(raw.get("type_name")),
        vod_remarks=_text(raw.get("vod_remarks")),
        vod_year=_text(raw.get("vod_year")),
    )


def normalize_detail(raw: dict[str, Any], source: str) -> VideoDetail:
    """Normalize one CMS detail entry into a VideoDetail with parsed episodes."""
    item = normalize_item(raw, source)
    return VideoDetail(
        vod_id=item.vod_id,
        vod_name=item.vod_name,
        source=source,
        episodes=tuple(parse_play_url(str(raw.get("vod_play_url") or ""))),
        vod_pic=item.vod_pic,
        type_name=item.type_name,
        vod_remarks=item.vod_remarks,
        vod_year=item.vod_year,
        vod_area=_text(raw.get("vod_area")),
        vod_actor=_text(raw.get("vod_actor")),
        vod_director=_text(raw.get("vod_director")),
        vod_content=_text(raw.get("vod_content")),
    )


class BaseOriginAdapter(ABC):
    """
    Base class for origin adapters.

    Owns the HTTP client lookup and the playability check, which are the
    same for every origin API flavour.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None):
        self.logger = get_context_logger(f"origin_adapter.{self.__class__.__name__}")
        self._http_client = http_client

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        from ..http_client_manager import get_probe_http_client

        return get_probe_http_client()

    @abstractmethod
    async def search(self, title: str, candidate: OriginCandidate) -> list[VideoItem]:
        pass

    @abstractmethod
    async def detail(self, vod_id: str, candidate: OriginCandidate) -> VideoDetail:
        pass

    async def check_playable(
        self,
        url: str,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> bool:
        """
        Request the first KiB of a stream URL.

        URLs that are not absolute http(s) are not playable and are not requested.

        The request carries ``Range: bytes=0-1024`` and a Referer set to the
        URL's origin. The URL is playable when the response is 200 or 206 with
        a video, HLS or octet-stream content type.

        Args:
            url: Sample stream URL
            timeout: Request timeout in seconds (client default if None)
            headers: Extra request headers

        Returns:
            bool: Whether the URL looks playable

        Raises:
            ProbeTimeout: If the request times out
            ProbeNetworkError: On transport errors
        """
        if not is_valid_url(url):
            return False

        request_headers = {
            "Range": PROBE_RANGE,
            "Referer": origin_of(url),
            **(headers or {}),
        }
        request_kwargs: dict[str, Any] = {"headers": request_headers}
        if timeout is not None:
            request_kwargs["timeout"] = timeout
        try:
            response = await self._client().get(url, **request_kwargs)
        except httpx.TimeoutException as e:
            raise ProbeTimeout() from e
        except httpx.HTTPError as e:
            raise ProbeNetworkError(
                str(e) or type(e).__name__, network_error=e
            ) from e

        content_type = response.headers.get("content-type", "").lower()
        playable = response.status_code in PLAYABLE_STATUSES and any(
            marker in content_type for marker in PLAYABLE_CONTENT_TYPES
        )
        self.logger.debug(
            "Playability check",
            url=url,
            status_code=response.status_code,
            content_type=content_type,
            playable=playable,
        )
        return playable


class CmsOriginAdapter(BaseOriginAdapter):
    """
    Adapter for the common "provide/vod" CMS JSON API.

    Search sends ``ac=videolist&wd=<title>``, detail sends
    ``ac=videolist&ids=<vod_id>``. Both answer ``{"code": 1, "list": [...]}``.

    Examples:
        >>> adapter = CmsOriginAdapter()
        >>> items = await adapter.search("Big Buck Bunny", candidate)
        >>> detail = await adapter.detail(items[0].vod_id, candidate)
        >>> detail.episodes[0].url
        'https://cdn.example.com/bbb/index.m3u8'
    """

    async def search(self, title: str, candidate: OriginCandidate) -> list[VideoItem]:
        payload = await self._get_json(
            candidate.search_url, {"ac": "videolist", "wd": title}, candidate
        )
        return [normalize_item(raw, candidate.id) for raw in _entries(payload, candidate)]

    async def detail(self, vod_id: str, candidate: OriginCandidate) -> VideoDetail:
        payload = await self._get_json(
            candidate.detail_url, {"ac": "videolist", "ids": vod_id}, candidate
        )
        entries = _entries(payload, candidate)
        if not entries:
            raise ProbeNotFound("not found", origin_id=candidate.id)
        return normalize_detail(entries[0], candidate.id)

    async def _get_json(
        self, url: str, params: dict[str, str], candidate: OriginCandidate
    ) -> Any:
        try:
            response = await self._client().get(
                url, params=params, headers=candidate.headers
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ProbeTimeout(origin_id=candidate.id) from e
        except httpx.HTTPStatusError as e:
            raise ProbeNetworkError(
                f"HTTP {e.response.status_code}",
                origin_id=candidate.id,
                http_status=e.response.status_code,
                network_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise ProbeNetworkError(
                str(e) or type(e).__name__,
                origin_id=candidate.id,
                network_error=e,
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise ProbeInvalidContent(
                "response is not JSON",
                origin_id=candidate.id,
                payload_preview=response.text,
            ) from e


def _entries(payload: Any, candidate: OriginCandidate) -> list[dict[str, Any]]:
    if not isinstance(payload, dict) or not isinstance(payload.get("list", []), list):
        raise ProbeInvalidContent(
            "unexpected response shape",
            origin_id=candidate.id,
            payload_preview=str(payload),
        )
    return [entry for entry in payload.get("list") or [] if isinstance(entry, dict)]


__all__ = [
    "OriginAdapter",
    "BaseOriginAdapter",
    "CmsOriginAdapter",
    "parse_play_url",
    "normalize_item",
    "normalize_detail",
    "is_valid_url",
]
