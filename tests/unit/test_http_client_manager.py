"""Unit tests for pooled HTTP clients."""

import pytest

from vod_client.http_client_manager import (
    close_http_clients,
    get_manifest_http_client,
    get_probe_http_client,
)


@pytest.fixture
async def pooled_clients():
    yield
    await close_http_clients()


class TestHttpClientManager:
    """Test client pooling and per-kind configuration."""

    @pytest.mark.asyncio
    async def test_probe_timeout_capped_by_race_deadline(self, monkeypatch, pooled_clients):
        """Test probe requests use the race deadline when it is shorter."""
        monkeypatch.setenv("VOD_HTTP__TIMEOUT", "20")
        monkeypatch.setenv("VOD_RACE__DEADLINE", "4")

        probe_client = get_probe_http_client()
        manifest_client = get_manifest_http_client()

        assert probe_client.timeout.read == 4.0
        assert manifest_client.timeout.read == 20.0

    @pytest.mark.asyncio
    async def test_probe_timeout_when_deadline_longer(self, monkeypatch, pooled_clients):
        monkeypatch.setenv("VOD_HTTP__TIMEOUT", "3")
        monkeypatch.setenv("VOD_RACE__DEADLINE", "10")

        assert get_probe_http_client().timeout.read == 3.0

    @pytest.mark.asyncio
    async def test_clients_pooled_until_closed(self, pooled_clients):
        client = get_manifest_http_client()

        assert get_manifest_http_client() is client
        assert get_probe_http_client() is not client

        await close_http_clients()

        assert client.is_closed
        assert get_manifest_http_client() is not client

    @pytest.mark.asyncio
    async def test_explicit_timeout_wins(self, pooled_clients):
        assert get_probe_http_client(timeout=1.5).timeout.read == 1.5
