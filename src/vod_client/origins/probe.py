"""
Origin probe.

Measures one origin for one title: search, fetch the first hit's detail and
check that its first episode URL is playable. Every failure is encoded into
the returned ProbeResult so a single origin never aborts a race.
"""

import asyncio
import math

import httpx

from ..events import VodEvents
from ..exceptions import ProbeError, ProbeTimeout
from ..log_config import get_context_logger
from ..logging import LoggingContext
from ..metrics import MetricLabels, MetricsCollector, NoOpMetrics, VodMetrics
from ..time_provider import RealtimeTimeProvider, TimeProvider
from .adapter import CmsOriginAdapter, OriginAdapter
from .models import OriginCandidate, ProbeErrorKind, ProbeResult, RaceConfig


class OriginProbe:
    """
    Probes a single origin for a title.

    Examples:
        >>> probe = OriginProbe(CmsOriginAdapter(), RaceConfig(deadline=10.0))
        >>> result = await probe.probe("Big Buck Bunny", candidate)
        >>> result.available, result.latency_ms
        (True, 412.5)
    """

    def __init__(
        self,
        adapter: OriginAdapter | None = None,
        config: RaceConfig | None = None,
        time_provider: TimeProvider | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the probe.

        Args:
            adapter: Origin adapter (defaults to the CMS adapter)
            config: Race timing configuration
            time_provider: Clock used for latency measurement
            metrics: Metrics collector
        """
        self.logger = get_context_logger("origin_probe")
        self.adapter = adapter or CmsOriginAdapter()
        self.config = config or RaceConfig()
        self.time_provider = time_provider or RealtimeTimeProvider()
        self.metrics = metrics or NoOpMetrics()

    async def probe(
        self,
        title: str,
        candidate: OriginCandidate,
        deadline: float | None = None,
    ) -> ProbeResult:
        """
        Probe one origin.

        Args:
            title: Title to search for
            candidate: Origin to probe
            deadline: Per-origin deadline in seconds (defaults to the race deadline)

        Returns:
            ProbeResult: Available with latency, or unavailable with an error.
            Only cancellation propagates.
        """
        deadline = deadline if deadline is not None else self.config.deadline

        async with LoggingContext(
            operation="probe",
            probe={"origin_id": candidate.id, "origin_name": candidate.name},
        ):
            self.logger.debug(VodEvents.PROBE_STARTED, origin_id=candidate.id, title=title)
            try:
                result = await asyncio.wait_for(
                    self._run(title, candidate), timeout=deadline
                )
            except asyncio.TimeoutError:
                result = ProbeResult.timed_out(candidate)
            except ProbeError as e:
                result = ProbeResult.failure(
                    candidate, e.message, ProbeErrorKind(e.kind)
                )
            except httpx.TimeoutException:
                result = ProbeResult.timed_out(candidate)
            except httpx.HTTPError as e:
                result = ProbeResult.failure(
                    candidate, str(e) or type(e).__name__, ProbeErrorKind.NETWORK
                )
            except Exception as e:
                result = ProbeResult.failure(candidate, str(e) or type(e).__name__)

            self._record(candidate, result)
            return result

    async def _run(self, title: str, candidate: OriginCandidate) -> ProbeResult:
        start = self.time_provider.now()

        items = await self.adapter.search(title, candidate)
        if not items:
            return ProbeResult.failure(candidate, "not found", ProbeErrorKind.NOT_FOUND)

        detail = await self.adapter.detail(items[0].vod_id, candidate)
        if not detail.episodes:
            return ProbeResult.failure(
                candidate, "no episodes", ProbeErrorKind.NOT_FOUND, detail=detail
            )

        sample_url = detail.episodes[0].url
        try:
            playable = await asyncio.wait_for(
                self.adapter.check_playable(
                    sample_url, self.config.check_timeout, candidate.headers or None
                ),
                timeout=self.config.check_timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException, ProbeTimeout):
            playable = False

        if not playable:
            return ProbeResult.failure(
                candidate,
                "not accessible",
                ProbeErrorKind.INVALID_CONTENT,
                detail=detail,
                sample_url=sample_url,
            )

        latency_ms = (self.time_provider.now() - start) * 1000
        return ProbeResult.success(candidate, latency_ms, detail, sample_url)

    def _record(self, candidate: OriginCandidate, result: ProbeResult) -> None:
        labels = {MetricLabels.ORIGIN_ID: candidate.id}
        if result.available:
            self.metrics.histogram(VodMetrics.PROBE_LATENCY_MS, result.latency_ms, labels)
            self.logger.info(
                VodEvents.PROBE_SUCCESS,
                origin_id=candidate.id,
                latency_ms=round(result.latency_ms, 1),
            )
        else:
            self.logger.info(
                VodEvents.PROBE_FAILED,
                origin_id=candidate.id,
                error=result.error,
                error_kind=result.error_kind.value if result.error_kind else None,
                latency_ms=None if math.isinf(result.latency_ms) else result.latency_ms,
            )


__all__ = ["OriginProbe"]
