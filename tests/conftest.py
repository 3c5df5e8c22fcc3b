"""Pytest configuration and shared fixtures for VOD client tests."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest


sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from test_utils import PLAYLIST_BASE_URL, build_playlist, make_candidate
from vod_client.logging import clear_context
from vod_client.manifest import AdPatternSet
from vod_client.metrics import InMemoryMetrics
from vod_client.origins import OriginCandidate, RaceConfig
from vod_client.settings import get_settings
from vod_client.storage import InMemoryStore
from vod_client.time_provider import SimulatedTimeProvider


# ==================== Pytest Configuration ====================


@pytest.fixture(autouse=True)
def isolated_context():
    """Clear logging context and cached settings around every test."""
    clear_context()
    get_settings.cache_clear()
    yield
    clear_context()
    get_settings.cache_clear()


# ==================== Playlist Fixtures ====================


@pytest.fixture
def base_url() -> str:
    return PLAYLIST_BASE_URL


@pytest.fixture
def five_segment_playlist() -> str:
    """Five 4 s segments; the 2nd and 4th are ads."""
    return "\n".join(
        [
            "#EXTM3U",
            "#EXTINF:4.0,",
            "https://cdn.example.com/show/seg1.ts",
            "#EXTINF:4.0,",
            "https://cdn.example.com/ads/seg.ts?n=2",
            "#EXTINF:4.0,",
            "https://cdn.example.com/show/seg3.ts",
            "#EXTINF:4.0,",
            "https://cdn.example.com/ads/seg.ts?n=4",
            "#EXTINF:4.0,",
            "https://cdn.example.com/show/seg5.ts",
        ]
    )


@pytest.fixture
def relative_playlist() -> str:
    """Playlist with relative URIs, a leading ad run and an end list."""
    return build_playlist(
        ["ads/intro.ts", "ads/intro2.ts", "part1.ts", "part2.ts", "/ads/mid.ts", "part3.ts"]
    )


@pytest.fixture
def patterns() -> AdPatternSet:
    return AdPatternSet()


# ==================== Origin Fixtures ====================


@pytest.fixture
def candidates() -> list[OriginCandidate]:
    return [make_candidate("alpha", 1), make_candidate("beta", 2), make_candidate("gamma", 3)]


@pytest.fixture
def race_config() -> RaceConfig:
    return RaceConfig(deadline=0.5, check_timeout=0.2)


@pytest.fixture
def clock() -> SimulatedTimeProvider:
    return SimulatedTimeProvider(initial_time=1000.0)


@pytest.fixture
def metrics() -> InMemoryMetrics:
    return InMemoryMetrics()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


# ==================== HTTP Fixtures ====================


@pytest.fixture
def mock_http_client():
    """Create mock HTTP client whose ``get`` is an AsyncMock."""
    client = MagicMock(spec=httpx.AsyncClient)
    client.get = AsyncMock()
    client.is_closed = False
    return client
