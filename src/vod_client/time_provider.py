"""
Time Provider Abstraction

Provides a pluggable clock for probe latency measurement, cache TTL checks
and recovery backoff. Production code uses the monotonic wall clock; tests
drive a simulated clock so TTL expiry and backoff need no real waiting.
"""

import asyncio
import time
from abc import ABC, abstractmethod


class TimeProvider(ABC):
    """
    Abstract base class for time providers.

    Subclasses must implement time retrieval and sleep operations.
    """

    @abstractmethod
    def now(self) -> float:
        """Get current time in seconds (monotonic for real, virtual for simulated)."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Sleep for specified duration.

        Args:
            seconds: Duration to sleep (wall-clock for real, virtual for simulated)
        """

    def elapsed_time(self, start_time: float) -> float:
        """Calculate elapsed time since start_time.

        Args:
            start_time: Reference time from an earlier now() call

        Returns:
            Elapsed time in seconds
        """
        return self.now() - start_time

    @abstractmethod
    def get_mode(self) -> str:
        """Get time provider mode identifier."""


class RealtimeTimeProvider(TimeProvider):
    """
    Real-time provider backed by time.monotonic() and asyncio.sleep().

    Examples:
        >>> provider = RealtimeTimeProvider()
        >>> start = provider.now()
        >>> await provider.sleep(1.0)
        >>> assert 0.95 < provider.elapsed_time(start) < 1.1
    """

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def get_mode(self) -> str:
        return "realtime"


class SimulatedTimeProvider(TimeProvider):
    """
    Simulated time provider.

    Maintains virtual time independent of wall-clock time. ``sleep`` advances
    virtual time immediately and yields once to the event loop.

    Examples:
        >>> provider = SimulatedTimeProvider()
        >>> start = provider.now()
        >>> provider.advance(301.0)
        >>> provider.elapsed_time(start)
        301.0
    """

    def __init__(self, initial_time: float = 0.0, speed_multiplier: float = 1.0):
        """
        Initialize simulated time provider.

        Args:
            initial_time: Starting virtual time
            speed_multiplier: Factor applied to sleep durations

        Raises:
            ValueError: If speed_multiplier <= 0
        """
        if speed_multiplier <= 0:
            raise ValueError(f"Speed must be positive, got {speed_multiplier}")

        self.speed_multiplier = speed_multiplier
        self.virtual_time = initial_time
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.virtual_time

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.virtual_time += seconds * self.speed_multiplier
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        """Advance virtual time without sleeping.

        Args:
            seconds: Virtual seconds to add
        """
        self.virtual_time += seconds

    def get_mode(self) -> str:
        return "simulated"


def create_time_provider(mode: str = "real", **kwargs) -> TimeProvider:
    """
    Factory function to create a time provider.

    Args:
        mode: 'real' or 'simulated'
        **kwargs: Additional arguments passed to SimulatedTimeProvider

    Returns:
        Configured TimeProvider instance
    """
    if mode == "simulated":
        return SimulatedTimeProvider(**kwargs)
    return RealtimeTimeProvider()


__all__ = [
    "TimeProvider",
    "RealtimeTimeProvider",
    "SimulatedTimeProvider",
    "create_time_provider",
]
