"""
Origin selection policy.

Ranks probe results and decides whether the player should stay on its
current origin or switch to a faster one.
"""

import math
from typing import Iterable

from .models import ProbeResult, VideoDetail


SWITCH_IMPROVEMENT_THRESHOLD = 0.5
FAST_LATENCY_MS = 1000
MEDIUM_LATENCY_MS = 2000


class SelectionPolicy:
    """
    Ranking and switch rules for raced origins.

    Ranking order:
        1. The current origin, regardless of its speed
        2. Available origins by ascending latency
        3. Unavailable origins

    The sort is stable, so ties keep race (candidate) order.

    Examples:
        >>> policy = SelectionPolicy()
        >>> ranked = policy.rank(results, current_origin_id="alpha")
        >>> best = policy.find_best_source(ranked)
        >>> policy.recommend_switch(ranked[0], best)
        False
    """

    def __init__(self, improvement_threshold: float = SWITCH_IMPROVEMENT_THRESHOLD):
        self.improvement_threshold = improvement_threshold

    def rank(
        self,
        results: Iterable[ProbeResult],
        current_origin_id: str | None = None,
    ) -> list[ProbeResult]:
        def sort_key(result: ProbeResult) -> tuple[int, int, float]:
            is_current = current_origin_id is not None and result.origin_id == current_origin_id
            return (
                0 if is_current else 1,
                0 if result.available else 1,
                result.latency_ms if result.available else math.inf,
            )

        return sorted(results, key=sort_key)

    def find_best_source(self, results: Iterable[ProbeResult]) -> ProbeResult | None:
        """Fastest available result; the earliest one wins a tie. None if nothing is available."""
        best = None
        for result in results:
            if not result.available:
                continue
            if best is None or result.latency_ms < best.latency_ms:
                best = result
        return best

    def get_alternative_sources(
        self, results: Iterable[ProbeResult], current_origin_id: str | None
    ) -> list[ProbeResult]:
        """Available results other than the current origin, fastest first."""
        alternatives = [
            result
            for result in results
            if result.available and result.origin_id != current_origin_id
        ]
        return sorted(alternatives, key=lambda result: result.latency_ms)

    def recommend_switch(
        self, current: ProbeResult | None, best: ProbeResult | None
    ) -> bool:
        """
        Decide whether to leave the current origin for the best one.

        Args:
            current: Result for the current origin (None counts as unavailable)
            best: Fastest available result

        Returns:
            bool: True if the current origin is unavailable, or the best origin
            cuts latency by more than the improvement threshold. Always False
            without a best result to switch to.
        """
        if best is None:
            return False
        if current is None or not current.available:
            return True
        if not best.available or current.latency_ms <= 0:
            return False

        improvement = (current.latency_ms - best.latency_ms) / current.latency_ms
        return improvement > self.improvement_threshold


def speed_level(latency_ms: float) -> str:
    """
    Bucket a latency for display.

    Returns:
        str: "fast" (<1s), "medium" (<2s), "slow", or "error" for unavailable
    """
    if math.isinf(latency_ms):
        return "error"
    if latency_ms < FAST_LATENCY_MS:
        return "fast"
    if latency_ms < MEDIUM_LATENCY_MS:
        return "medium"
    return "slow"


def format_latency(latency_ms: float) -> str:
    """
    Format a latency for display.

    Examples:
        >>> format_latency(450)
        '450ms'
        >>> format_latency(1500)
        '1.50s'
        >>> format_latency(math.inf)
        'N/A'
    """
    if math.isinf(latency_ms):
        return "N/A"
    if latency_ms < FAST_LATENCY_MS:
        return f"{round(latency_ms)}ms"
    return f"{latency_ms / 1000:.2f}s"


def build_switch_params(
    origin_id: str, detail: VideoDetail, episode_index: int = 0
) -> dict[str, str]:
    """
    Query parameters that reopen the player on another origin.

    The episode index and URL are only included when the target origin
    has that episode.
    """
    params = {"source": origin_id, "id": str(detail.vod_id)}
    if 0 <= episode_index < len(detail.episodes):
        params["index"] = str(episode_index)
        params["url"] = detail.episodes[episode_index].url
    return params


__all__ = [
    "SelectionPolicy",
    "SWITCH_IMPROVEMENT_THRESHOLD",
    "speed_level",
    "format_latency",
    "build_switch_params",
]
