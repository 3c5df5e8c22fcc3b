"""
Origin Race Coordinator

Main entry point for origin selection. Implements the pipeline:
CACHE → RACE → RANK → RECOMMEND
"""

import asyncio
from typing import Any, Iterable

from ..events import VodEvents
from ..log_config import get_context_logger
from ..logging import LoggingContext
from ..metrics import MetricsCollector, NoOpMetrics, VodMetrics
from ..time_provider import RealtimeTimeProvider, TimeProvider
from .cache import ProbeResultCache
from .models import OriginCandidate, ProbeResult, RaceConfig, RaceOutcome
from .probe import OriginProbe
from .selection import SelectionPolicy


def _consume_result(task: asyncio.Task) -> None:
    # Abandoned probes may still finish; their outcome is discarded.
    if not task.cancelled():
        task.exception()


class RaceCoordinator:
    """
    Races enabled origins for a title and recommends where to play it from.

    Every enabled candidate gets its own probe task. The race never waits past
    its deadline: probes still running at that point are recorded as timed
    out and abandoned. Results are cached per title.

    Attributes:
        probe: Probe used for every origin
        cache: Race result cache
        policy: Ranking and switch rules
        config: Race timing configuration

    Examples:
        >>> coordinator = RaceCoordinator()
        >>> outcome = await coordinator.find_sources(
        ...     "Big Buck Bunny", registry.enabled(), current_origin_id="alpha"
        ... )
        >>> outcome.best.origin_id, outcome.recommend_switch
        ('beta', True)
    """

    def __init__(
        self,
        probe: OriginProbe | None = None,
        cache: ProbeResultCache | None = None,
        policy: SelectionPolicy | None = None,
        config: RaceConfig | None = None,
        metrics: MetricsCollector | None = None,
        time_provider: TimeProvider | None = None,
    ):
        """
        Initialize the coordinator.

        Args:
            probe: Origin probe (created from config if None)
            cache: Result cache (a default 5 minute cache if None)
            policy: Selection policy
            config: Race timing configuration
            metrics: Metrics collector
            time_provider: Clock for race duration
        """
        self.logger = get_context_logger("race_coordinator")
        self.config = config or RaceConfig()
        self.metrics = metrics or NoOpMetrics()
        self.time_provider = time_provider or RealtimeTimeProvider()
        self.probe = probe or OriginProbe(
            config=self.config, time_provider=self.time_provider, metrics=self.metrics
        )
        self.cache = cache if cache is not None else ProbeResultCache(
            time_provider=self.time_provider, metrics=self.metrics
        )
        self.policy = policy or SelectionPolicy()

    @classmethod
    def from_settings(
        cls,
        settings: Any = None,
        metrics: MetricsCollector | None = None,
        probe: OriginProbe | None = None,
        time_provider: TimeProvider | None = None,
    ) -> "RaceCoordinator":
        """
        Build a coordinator from the ``race`` settings section.

        The cache takes its TTL and capacity from settings and shares the
        coordinator's clock.
        """
        if settings is None:
            from ..settings import get_settings

            settings = get_settings()

        return cls(
            cache=ProbeResultCache(
                ttl=settings.race.cache_ttl,
                max_entries=settings.race.cache_max_entries,
                time_provider=time_provider,
                metrics=metrics,
            ),
            probe=probe,
            config=RaceConfig.from_settings(settings),
            metrics=metrics,
            time_provider=time_provider,
        )

    async def race(
        self,
        title: str,
        candidates: Iterable[OriginCandidate],
        deadline: float | None = None,
    ) -> list[ProbeResult]:
        """
        Probe every enabled candidate concurrently under one deadline.

        Args:
            title: Title to search for
            candidates: Origins to race; disabled ones are skipped
            deadline: Race deadline in seconds (defaults to config.deadline)

        Returns:
            list[ProbeResult]: One result per enabled candidate, in candidate
            order. Never raises for per-origin failures.
        """
        deadline = deadline if deadline is not None else self.config.deadline
        enabled = [candidate for candidate in candidates if candidate.enabled]
        if not enabled:
            return []

        self.logger.info(
            VodEvents.RACE_STARTED,
            title=title,
            origin_count=len(enabled),
            deadline=deadline,
        )
        self.metrics.increment(VodMetrics.RACE_ORIGINS_ATTEMPTED, len(enabled))
        self.metrics.gauge(VodMetrics.RACE_ACTIVE, 1)
        start = self.time_provider.now()

        tasks = [
            asyncio.create_task(self.probe.probe(title, candidate, deadline))
            for candidate in enabled
        ]
        try:
            await asyncio.wait(tasks, timeout=deadline)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise
        finally:
            self.metrics.gauge(VodMetrics.RACE_ACTIVE, -1)

        results = []
        abandoned = 0
        for candidate, task in zip(enabled, tasks):
            if not task.done():
                task.add_done_callback(_consume_result)
                task.cancel()
                abandoned += 1
                self.logger.warning(
                    VodEvents.RACE_PROBE_ABANDONED,
                    origin_id=candidate.id,
                    deadline=deadline,
                )
                results.append(ProbeResult.timed_out(candidate))
            elif task.cancelled():
                results.append(ProbeResult.failure(candidate, "cancelled"))
            elif task.exception() is not None:
                error = task.exception()
                results.append(
                    ProbeResult.failure(candidate, str(error) or type(error).__name__)
                )
            else:
                results.append(task.result())

        available = sum(1 for result in results if result.available)
        elapsed_ms = (self.time_provider.now() - start) * 1000
        self.metrics.increment(VodMetrics.RACE_ORIGINS_AVAILABLE, available)
        self.metrics.increment(VodMetrics.RACE_ORIGINS_UNAVAILABLE, len(results) - available)
        if abandoned:
            self.metrics.increment(VodMetrics.RACE_PROBES_ABANDONED, abandoned)
        self.metrics.timing(VodMetrics.RACE_DURATION_MS, elapsed_ms)

        self.logger.info(
            VodEvents.RACE_COMPLETED,
            title=title,
            available=available,
            unavailable=len(results) - available,
            abandoned=abandoned,
            elapsed_ms=round(elapsed_ms, 1),
        )
        return results

    async def find_sources(
        self,
        title: str,
        candidates: Iterable[OriginCandidate],
        current_origin_id: str | None = None,
        deadline: float | None = None,
        use_cache: bool = True,
    ) -> RaceOutcome:
        """
        Race (or reuse cached results), rank, and recommend.

        Args:
            title: Title to search for
            candidates: Enabled origins, usually from the source registry
            current_origin_id: Origin the player is using now, if any
            deadline: Race deadline in seconds
            use_cache: Whether fresh cached results may be reused

        Returns:
            RaceOutcome: Ranked results with the best origin and switch advice

        Raises:
            ValueError: If the title is empty
        """
        title = (title or "").strip()
        if not title:
            raise ValueError("title must not be empty")

        self.metrics.increment(VodMetrics.RACE_REQUESTS_TOTAL)

        async with LoggingContext(
            operation="race",
            race={"title": title, "current_origin_id": current_origin_id},
        ) as ctx:
            results = self.cache.get(title) if use_cache else None
            from_cache = results is not None
            if from_cache:
                self.logger.debug(VodEvents.CACHE_HIT, title=title)
            else:
                self.logger.debug(VodEvents.CACHE_MISS, title=title)
                results = tuple(await self.race(title, candidates, deadline))
                self.cache.set(title, results)

            ranked = self.policy.rank(results, current_origin_id)
            best = self.policy.find_best_source(ranked)
            current = None
            if current_origin_id is not None:
                current = next(
                    (r for r in ranked if r.origin_id == current_origin_id), None
                )
            recommend = self.policy.recommend_switch(current, best)

            ctx.set_namespace(
                "result",
                best_origin_id=best.origin_id if best else None,
                recommend_switch=recommend,
                from_cache=from_cache,
            )

            if best is None:
                self.logger.info(
                    VodEvents.SELECTION_NO_SOURCE, title=title, origin_count=len(ranked)
                )
            elif recommend:
                self.metrics.increment(VodMetrics.RACE_SWITCH_RECOMMENDED)
                self.logger.info(
                    VodEvents.SELECTION_SWITCH_RECOMMENDED,
                    title=title,
                    current_origin_id=current_origin_id,
                    best_origin_id=best.origin_id,
                    best_latency_ms=round(best.latency_ms, 1),
                )

            return RaceOutcome(
                results=tuple(ranked),
                best=best,
                current=current,
                recommend_switch=recommend,
                from_cache=from_cache,
            )


__all__ = ["RaceCoordinator"]
