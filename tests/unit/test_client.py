"""Unit tests for the VOD client facade."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog

from test_utils import FakeAdapter, make_response
from vod_client import VodClient
from vod_client.manifest import CUSTOM_AD_PATTERNS_KEY, REMOVED_AD_PATTERNS_KEY
from vod_client.origins import OriginProbe, RaceConfig, RaceCoordinator
from vod_client.playback import FaultClass, FaultDescriptor
from vod_client.settings import Settings


@pytest.fixture
def settings(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(
        "race:\n"
        "  deadline: 0.5\n"
        "recovery:\n"
        "  max_retries: 2\n"
        "  backoff_base: 0.5\n"
        "ad_filter:\n"
        "  extra_patterns: [midroll]\n"
        "origins:\n"
        "  - {id: alpha, name: Alpha, base_url: 'https://alpha.example.com/api', priority: 2}\n"
        "  - {id: beta, name: Beta, base_url: 'https://beta.example.com/api', priority: 1}\n"
        "  - {id: gamma, name: Gamma, base_url: 'https://gamma.example.com/api', enabled: false}\n"
    )
    return Settings.load_from_yaml(config)


class TestVodClientInitialization:
    """Test wiring from settings."""

    def test_registry_from_settings(self, settings, store):
        client = VodClient(settings, store)

        assert [c.id for c in client.registry.enabled()] == ["beta", "alpha"]
        assert client.coordinator.config.deadline == 0.5

    def test_extra_patterns_loaded(self, settings, store):
        client = VodClient(settings, store)

        assert "midroll" in client.list_ad_patterns()
        assert "/ads/" in client.list_ad_patterns()

    def test_stored_patterns_restored(self, settings, store):
        store.set(CUSTOM_AD_PATTERNS_KEY, ["sponsor-break"])

        client = VodClient(settings, store)

        assert "sponsor-break" in client.list_ad_patterns()


class TestVodClientAdPatterns:
    """Test ad pattern management."""

    def test_add_persists(self, settings, store):
        client = VodClient(settings, store)

        assert client.add_ad_pattern("Preroll")
        assert "preroll" in store.get(CUSTOM_AD_PATTERNS_KEY)
        assert not client.add_ad_pattern("preroll")

    def test_remove_persists(self, settings, store):
        client = VodClient(settings, store)
        client.add_ad_pattern("preroll")

        assert client.remove_ad_pattern("preroll")
        assert "preroll" not in store.get(CUSTOM_AD_PATTERNS_KEY)
        assert not client.remove_ad_pattern("preroll")

    def test_new_client_sees_added_pattern(self, settings, store):
        VodClient(settings, store).add_ad_pattern("preroll")

        assert "preroll" in VodClient(settings, store).list_ad_patterns()

    def test_removed_default_stays_removed(self, settings, store):
        """Test removing a built-in pattern survives a new client on the same store."""
        assert VodClient(settings, store).remove_ad_pattern("banner")

        reloaded = VodClient(settings, store)

        assert "banner" not in reloaded.list_ad_patterns()
        assert "/ads/" in reloaded.list_ad_patterns()

    def test_readding_removed_default(self, settings, store):
        VodClient(settings, store).remove_ad_pattern("banner")
        VodClient(settings, store).add_ad_pattern("banner")

        assert "banner" in VodClient(settings, store).list_ad_patterns()
        assert store.get(REMOVED_AD_PATTERNS_KEY) == []
        assert store.get(CUSTOM_AD_PATTERNS_KEY) == []

    def test_configured_patterns_not_stored(self, settings, store):
        """Test patterns from settings are never written to the store."""
        client = VodClient(settings, store)
        client.add_ad_pattern("user-added")

        assert store.get(CUSTOM_AD_PATTERNS_KEY) == ["user-added"]
        assert "midroll" in client.list_ad_patterns()

    def test_configured_pattern_dropped_from_settings(self, settings, store):
        VodClient(settings, store).add_ad_pattern("user-added")
        settings.ad_filter.extra_patterns = []

        patterns = VodClient(settings, store).list_ad_patterns()

        assert "midroll" not in patterns
        assert "user-added" in patterns

    def test_removed_configured_pattern_stays_removed(self, settings, store):
        VodClient(settings, store).remove_ad_pattern("midroll")

        assert "midroll" not in VodClient(settings, store).list_ad_patterns()
        assert store.get(REMOVED_AD_PATTERNS_KEY) == ["midroll"]


class TestVodClientFindSources:
    """Test origin racing through the facade."""

    @pytest.mark.asyncio
    async def test_races_enabled_origins(self, settings, store):
        adapter = FakeAdapter({"alpha": 0.1, "beta": 0.01, "gamma": 0.0})
        config = RaceConfig(deadline=0.5, check_timeout=0.2)
        coordinator = RaceCoordinator(probe=OriginProbe(adapter, config), config=config)
        client = VodClient(settings, store, coordinator=coordinator)

        outcome = await client.find_sources("Big Buck Bunny", current_origin_id="alpha")

        assert sorted(adapter.searched) == ["alpha", "beta"]
        assert outcome.best.origin_id == "beta"
        assert outcome.current.origin_id == "alpha"


class TestVodClientLoadManifest:
    """Test playlist loading through the facade."""

    @pytest.mark.asyncio
    async def test_filters_with_client_patterns(
        self, settings, store, mock_http_client, base_url
    ):
        text = "#EXTM3U\n#EXTINF:4.0,\nseg1.ts\n#EXTINF:4.0,\nmidroll-2.ts\n#EXTINF:4.0,\nseg3.ts\n"
        mock_http_client.get.return_value = make_response(base_url, text=text)
        client = VodClient(settings, store)

        with patch(
            "vod_client.http_client_manager.get_manifest_http_client",
            return_value=mock_http_client,
        ):
            loaded = await client.load_manifest(base_url, headers={"Referer": "https://cdn.example.com"})

        assert loaded.filtered
        assert loaded.report.ad_count == 1
        assert "midroll" not in loaded.content
        assert mock_http_client.get.await_args.kwargs["headers"] == {
            "Referer": "https://cdn.example.com"
        }

    @pytest.mark.asyncio
    async def test_filtering_disabled(self, settings, store, mock_http_client, five_segment_playlist, base_url):
        settings.ad_filter.enabled = False
        mock_http_client.get.return_value = make_response(base_url, text=five_segment_playlist)
        client = VodClient(settings, store)

        with patch(
            "vod_client.http_client_manager.get_manifest_http_client",
            return_value=mock_http_client,
        ):
            loaded = await client.load_manifest(base_url)

        assert not loaded.filtered
        assert loaded.report is None
        assert loaded.content == five_segment_playlist

    @pytest.mark.asyncio
    async def test_filtering_disabled_skips_parsing(self, settings, store, mock_http_client, base_url):
        """Test a broken playlist is handed over as is when filtering is off."""
        settings.ad_filter.enabled = False
        broken = "#EXTM3U\n#EXTINF:4.0,\nseg1.ts\n#EXTINF:4.0,\n"
        mock_http_client.get.return_value = make_response(base_url, text=broken)
        client = VodClient(settings, store)

        with patch(
            "vod_client.http_client_manager.get_manifest_http_client",
            return_value=mock_http_client,
        ):
            loaded = await client.load_manifest(base_url)

        assert loaded.content == broken
        assert not loaded.filtered


class TestVodClientRecovery:
    """Test recovery controller creation."""

    @pytest.mark.asyncio
    async def test_controller_uses_recovery_settings(self, settings, store):
        client = VodClient(settings, store)
        controller = client.recovery_controller(MagicMock())

        decision = await controller.handle_fault(FaultDescriptor(FaultClass.NETWORK))
        controller.reset()

        assert controller.state_machine.max_retries == 2
        assert decision.backoff == 0.5


class TestVodClientLifecycle:
    """Test async context manager behaviour."""

    @pytest.mark.asyncio
    async def test_context_binds_and_closes(self, settings, store):
        with patch("vod_client.client.close_http_clients", new=AsyncMock()) as close:
            async with VodClient(settings, store, ctx={"session_id": "abc"}):
                assert structlog.contextvars.get_contextvars()["session_id"] == "abc"

        assert "session_id" not in structlog.contextvars.get_contextvars()
        close.assert_awaited_once()
