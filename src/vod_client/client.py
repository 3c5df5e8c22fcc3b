"""Main VOD client implementation."""

from typing import Any

from .http_client_manager import close_http_clients
from .log_config import SessionLogContext, get_context_logger
from .manifest import AdFilteringLoader, AdPatternSet, LoadedManifest, ManifestRewriter
from .metrics import MetricsCollector, NoOpMetrics
from .origins import RaceCoordinator, RaceOutcome, SourceRegistry
from .playback import PlaybackRecoveryController, PlayerHandle
from .settings import Settings, get_settings
from .storage import InMemoryStore, KeyValueStore


class VodClient:
    """
    Facade for origin selection, ad-filtered playlist loading and playback recovery.

    Ad pattern edits (user additions and removals of built-in or configured
    patterns) are persisted in the key-value store and reloaded on
    construction.

    Examples:
        >>> async with VodClient() as client:
        ...     outcome = await client.find_sources("Big Buck Bunny", current_origin_id="alpha")
        ...     loaded = await client.load_manifest(outcome.best.sample_url)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: KeyValueStore | None = None,
        registry: SourceRegistry | None = None,
        coordinator: RaceCoordinator | None = None,
        metrics: MetricsCollector | None = None,
        ctx: dict[str, Any] | None = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Settings (defaults to the cached global settings)
            store: Persistence for custom ad patterns
            registry: Source registry (built from settings.origins if None)
            coordinator: Race coordinator (built from settings.race if None)
            metrics: Metrics collector
            ctx: Playback context bound to log lines while the client is open
        """
        self.logger = get_context_logger("vod_client")
        self.settings = settings or get_settings()
        self.store = store if store is not None else InMemoryStore()
        self.metrics = metrics or NoOpMetrics()
        self.ctx = ctx or {}

        self.registry = (
            registry if registry is not None else SourceRegistry.from_settings(self.settings)
        )
        self.coordinator = coordinator or RaceCoordinator.from_settings(
            self.settings, metrics=self.metrics
        )

        self.patterns = AdPatternSet.from_store(self.store)
        self.patterns.add_configured(self.settings.ad_filter.extra_patterns)
        self.rewriter = ManifestRewriter(self.patterns, metrics=self.metrics)

    async def find_sources(
        self,
        title: str,
        current_origin_id: str | None = None,
        use_cache: bool = True,
    ) -> RaceOutcome:
        """Race the registry's enabled origins for a title."""
        return await self.coordinator.find_sources(
            title,
            self.registry.enabled(),
            current_origin_id=current_origin_id,
            use_cache=use_cache,
        )

    async def load_manifest(self, url: str, headers: dict[str, str] | None = None) -> LoadedManifest:
        """Fetch a playlist, filtering ads unless ad filtering is disabled."""
        loader = AdFilteringLoader(
            self.rewriter,
            timeout=self.settings.http.timeout,
            headers=headers,
            enabled=self.settings.ad_filter.enabled,
        )
        return await loader.load(url)

    def add_ad_pattern(self, pattern: str) -> bool:
        added = self.patterns.add(pattern)
        if added:
            self.patterns.save(self.store)
        return added

    def remove_ad_pattern(self, pattern: str) -> bool:
        removed = self.patterns.remove(pattern)
        if removed:
            self.patterns.save(self.store)
        return removed

    def list_ad_patterns(self) -> list[str]:
        return self.patterns.list_patterns()

    def recovery_controller(self, player: PlayerHandle) -> PlaybackRecoveryController:
        """Create a recovery controller for one playback session."""
        return PlaybackRecoveryController.from_settings(
            player, self.settings, metrics=self.metrics
        )

    async def close(self):
        """Close pooled HTTP clients."""
        await close_http_clients()
        self.logger.info("VodClient closed")

    async def __aenter__(self):
        if self.ctx:
            self._log_context = SessionLogContext(**self.ctx)
            self._log_context.__enter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if hasattr(self, "_log_context"):
            self._log_context.__exit__(exc_type, exc_val, exc_tb)
        await self.close()


__all__ = ["VodClient"]
