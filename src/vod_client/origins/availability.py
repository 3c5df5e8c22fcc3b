"""
Source availability checks.

Pre-validates origins and titles outside of a race: a stream URL check with
retries, a per-origin check over a few sample titles, a bounded-concurrency
check over many titles and a filter that keeps titles from available
origins.
"""

import asyncio
from typing import Callable, Iterable, Sequence, TypeVar

import httpx

from ..events import VodEvents
from ..exceptions import ProbeError
from ..log_config import get_context_logger
from ..playback.retry import is_retryable_error, retry_with_backoff
from ..time_provider import RealtimeTimeProvider, TimeProvider
from .adapter import OriginAdapter, is_valid_url
from .models import OriginCandidate, ProbeErrorKind, ProbeResult, VideoDetail


CHECK_TIMEOUT = 3.0
CHECK_RETRIES = 2
CHECK_RETRY_DELAY = 0.5
SAMPLE_LIMIT = 3
DEFAULT_CONCURRENCY = 10

V = TypeVar("V")

logger = get_context_logger("source_availability")


def first_playable_url(detail: VideoDetail) -> str | None:
    """First episode URL with a valid http(s) format, if any."""
    for episode in detail.episodes:
        if is_valid_url(episode.url):
            return episode.url
    return None


async def check_video_url(
    adapter: OriginAdapter,
    url: str,
    headers: dict[str, str] | None = None,
    timeout: float = CHECK_TIMEOUT,
    retries: int = CHECK_RETRIES,
    retry_delay: float = CHECK_RETRY_DELAY,
    time_provider: TimeProvider | None = None,
) -> bool:
    """
    Check that a stream URL is playable, retrying transient failures.

    URLs that are not absolute http(s) fail without a request. Timeouts and
    transport errors are retried up to ``retries`` times; a response that is
    not playable is final.

    Args:
        adapter: Adapter performing the playability request
        url: Stream URL
        headers: Extra request headers
        timeout: Per-attempt timeout in seconds
        retries: Retries after the first attempt
        retry_delay: First delay between attempts in seconds
        time_provider: Clock used for the delays

    Returns:
        bool: Whether the URL answered with playable content
    """
    if not is_valid_url(url):
        return False

    try:
        return await retry_with_backoff(
            lambda: adapter.check_playable(url, timeout, headers),
            max_retries=retries,
            initial_delay=retry_delay,
            should_retry=is_retryable_error,
            time_provider=time_provider,
        )
    except (ProbeError, httpx.HTTPError, asyncio.TimeoutError) as e:
        logger.debug(
            VodEvents.AVAILABILITY_URL_FAILED,
            url=url,
            error=str(e) or type(e).__name__,
            error_type=type(e).__name__,
        )
        return False


async def check_source_availability(
    adapter: OriginAdapter,
    candidate: OriginCandidate,
    samples: Sequence[VideoDetail],
    sample_limit: int = SAMPLE_LIMIT,
    time_provider: TimeProvider | None = None,
    **check_kwargs,
) -> ProbeResult:
    """
    Check an origin by trying up to ``sample_limit`` of its titles.

    The first sample whose first valid episode URL is playable makes the
    origin available; that URL is reported as ``sample_url``.

    Args:
        adapter: Adapter performing the playability requests
        candidate: Origin the samples came from
        samples: Titles returned by the origin
        sample_limit: Maximum number of samples to try
        time_provider: Clock for latency and retry delays
        **check_kwargs: Passed to check_video_url (timeout, retries, retry_delay)

    Returns:
        ProbeResult: Available with the sample URL, or unavailable with a reason
    """
    time_provider = time_provider or RealtimeTimeProvider()
    if not samples:
        return ProbeResult.failure(candidate, "no videos found", ProbeErrorKind.NOT_FOUND)

    start = time_provider.now()
    for detail in samples[:sample_limit]:
        url = first_playable_url(detail)
        if url is None:
            continue
        playable = await check_video_url(
            adapter,
            url,
            headers=candidate.headers or None,
            time_provider=time_provider,
            **check_kwargs,
        )
        if playable:
            latency_ms = (time_provider.now() - start) * 1000
            logger.info(
                VodEvents.AVAILABILITY_CHECKED,
                origin_id=candidate.id,
                available=True,
                sample_url=url,
            )
            return ProbeResult.success(candidate, latency_ms, detail, url)

    logger.info(VodEvents.AVAILABILITY_CHECKED, origin_id=candidate.id, available=False)
    return ProbeResult.failure(
        candidate, "all sample videos failed to load", ProbeErrorKind.INVALID_CONTENT
    )


async def check_multiple_sources(
    adapter: OriginAdapter,
    sources: Iterable[tuple[OriginCandidate, Sequence[VideoDetail]]],
    **kwargs,
) -> list[ProbeResult]:
    """Check several origins concurrently; results follow the input order."""
    return list(
        await asyncio.gather(
            *(
                check_source_availability(adapter, candidate, samples, **kwargs)
                for candidate, samples in sources
            )
        )
    )


async def check_multiple_videos(
    adapter: OriginAdapter,
    videos: Sequence[VideoDetail],
    concurrency: int = DEFAULT_CONCURRENCY,
    on_progress: Callable[[int, int], None] | None = None,
    **check_kwargs,
) -> list[VideoDetail]:
    """
    Keep the titles whose first episode is playable.

    At most ``concurrency`` checks run at once. ``on_progress`` is called
    with ``(checked, total)`` after each check.

    Returns:
        list[VideoDetail]: Playable titles in input order
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    semaphore = asyncio.Semaphore(concurrency)
    checked = 0

    async def check(detail: VideoDetail) -> bool:
        nonlocal checked
        url = first_playable_url(detail)
        async with semaphore:
            playable = url is not None and await check_video_url(
                adapter, url, **check_kwargs
            )
        checked += 1
        if on_progress is not None:
            on_progress(checked, len(videos))
        return playable

    results = await asyncio.gather(*(check(detail) for detail in videos))
    return [detail for detail, playable in zip(videos, results) if playable]


def filter_by_available_sources(videos: Iterable[V], results: Iterable[ProbeResult]) -> list[V]:
    """Keep titles whose ``source`` is an origin with an available result."""
    available = {result.origin_id for result in results if result.available}
    return [video for video in videos if getattr(video, "source", None) in available]


__all__ = [
    "first_playable_url",
    "check_video_url",
    "check_source_availability",
    "check_multiple_sources",
    "check_multiple_videos",
    "filter_by_available_sources",
]
