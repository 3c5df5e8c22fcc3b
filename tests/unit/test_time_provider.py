"""Unit tests for time providers."""

import asyncio

import pytest

from vod_client.time_provider import (
    RealtimeTimeProvider,
    SimulatedTimeProvider,
    TimeProvider,
    create_time_provider,
)


class TestRealtimeTimeProvider:
    """Test RealtimeTimeProvider (monotonic clock)."""

    def test_now_is_monotonic(self):
        provider = RealtimeTimeProvider()
        t1 = provider.now()
        t2 = provider.now()

        assert isinstance(t1, float)
        assert t2 >= t1

    @pytest.mark.asyncio
    async def test_sleep(self):
        """Test async sleep with realtime provider."""
        provider = RealtimeTimeProvider()

        start = provider.now()
        await provider.sleep(0.05)

        assert provider.elapsed_time(start) >= 0.05

    def test_mode(self):
        assert RealtimeTimeProvider().get_mode() == "realtime"


class TestSimulatedTimeProvider:
    """Test SimulatedTimeProvider (virtual time)."""

    def test_initial_time(self):
        provider = SimulatedTimeProvider(initial_time=1000.0)

        assert provider.now() == 1000.0
        assert provider.get_mode() == "simulated"

    def test_advance(self):
        """Test advancing virtual time, as used for cache TTL checks."""
        provider = SimulatedTimeProvider()
        start = provider.now()

        provider.advance(301.0)

        assert provider.elapsed_time(start) == 301.0

    @pytest.mark.asyncio
    async def test_sleep_advances_and_records(self):
        provider = SimulatedTimeProvider()

        await provider.sleep(1.0)
        await provider.sleep(2.0)

        assert provider.now() == 3.0
        assert provider.sleeps == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_sleep_with_speed_multiplier(self):
        provider = SimulatedTimeProvider(speed_multiplier=2.0)

        await provider.sleep(1.5)

        assert provider.now() == 3.0
        assert provider.sleeps == [1.5]

    @pytest.mark.asyncio
    async def test_sleep_yields_to_loop(self):
        """Test a simulated sleep lets other tasks run."""
        provider = SimulatedTimeProvider()
        ran = []

        async def other():
            ran.append(True)

        task = asyncio.create_task(other())
        await provider.sleep(10.0)

        assert ran == [True]
        await task

    @pytest.mark.parametrize("speed", [0, -1.0])
    def test_invalid_speed_multiplier(self, speed):
        with pytest.raises(ValueError):
            SimulatedTimeProvider(speed_multiplier=speed)


class TestCreateTimeProvider:
    """Test time provider factory."""

    def test_default_is_realtime(self):
        assert isinstance(create_time_provider(), RealtimeTimeProvider)

    def test_simulated_with_kwargs(self):
        provider = create_time_provider("simulated", initial_time=5.0)

        assert isinstance(provider, SimulatedTimeProvider)
        assert provider.now() == 5.0

    def test_providers_share_interface(self):
        assert isinstance(RealtimeTimeProvider(), TimeProvider)
        assert isinstance(SimulatedTimeProvider(), TimeProvider)
