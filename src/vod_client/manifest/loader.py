"""
Ad-filtering playlist loader.

Fetches playlists for the player and hands back filtered text. Responses
that are not media playlists (master playlists, segments, keys) pass
through unchanged.
"""

from dataclasses import dataclass

import httpx

from ..events import VodEvents
from ..exceptions import ManifestFetchError
from ..log_config import get_context_logger
from .models import AdReport
from .parser import looks_like_media_playlist
from .rewriter import ManifestRewriter


@dataclass(frozen=True)
class LoadedManifest:
    """
    Result of a playlist load.

    Attributes:
        url: Requested URL
        content: Text handed to the player
        filtered: Whether ad filtering was applied
        report: Ad summary of the original playlist (None on pass-through)
    """

    url: str
    content: str
    filtered: bool
    report: AdReport | None = None


class AdFilteringLoader:
    """
    Loader that removes ad segments from fetched playlists.

    Examples:
        >>> loader = AdFilteringLoader(ManifestRewriter(patterns))
        >>> loaded = await loader.load("https://cdn.example.com/show/index.m3u8")
        >>> loaded.filtered
        True
    """

    def __init__(
        self,
        rewriter: ManifestRewriter | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        enabled: bool = True,
    ):
        """
        Initialize the loader.

        Args:
            rewriter: Rewriter carrying the ad pattern set
            http_client: HTTP client (defaults to the shared manifest client)
            timeout: Request timeout in seconds
            headers: Extra request headers
            enabled: Filter media playlists; when False every response passes through
        """
        self.logger = get_context_logger("ad_filtering_loader")
        self.rewriter = rewriter or ManifestRewriter()
        self._http_client = http_client
        self.timeout = timeout
        self.headers = headers or {}
        self.enabled = enabled

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        from ..http_client_manager import get_manifest_http_client

        return get_manifest_http_client()

    async def load(self, url: str) -> LoadedManifest:
        """
        Fetch a playlist and filter it when it lists media segments.

        Args:
            url: Playlist URL, also used to resolve relative segment URIs

        Returns:
            LoadedManifest: Text for the player

        Raises:
            ManifestFetchError: On transport errors or HTTP error status
            ManifestParseError: If a media playlist is structurally broken
        """
        try:
            response = await self._client().get(
                url, headers=self.headers, timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.logger.warning(
                VodEvents.MANIFEST_FETCH_FAILED,
                url=url,
                status_code=e.response.status_code,
            )
            raise ManifestFetchError(
                f"HTTP {e.response.status_code}",
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            self.logger.warning(
                VodEvents.MANIFEST_FETCH_FAILED,
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ManifestFetchError(str(e) or type(e).__name__, url=url) from e

        content = response.text
        if not self.enabled or not looks_like_media_playlist(content):
            self.logger.debug(VodEvents.MANIFEST_PASSTHROUGH, url=url)
            return LoadedManifest(url=url, content=content, filtered=False)

        playlist = self.rewriter.classifier.classify_all(
            self.rewriter.parser.parse(content, url)
        )
        filtered = self.rewriter.filter(playlist)
        report = AdReport(
            has_ads=playlist.ad_count > 0,
            ad_count=playlist.ad_count,
            total_segments=playlist.segment_count,
        )

        self.logger.info(
            VodEvents.MANIFEST_FILTERED,
            url=url,
            ad_count=report.ad_count,
            total_segments=report.total_segments,
        )

        return LoadedManifest(
            url=url,
            content=self.rewriter.serialize(filtered),
            filtered=True,
            report=report,
        )


__all__ = ["AdFilteringLoader", "LoadedManifest"]
