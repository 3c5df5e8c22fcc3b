"""
Manifest rewriter.

Drops ad segments from a playlist and repairs discontinuity markers at the
cut points, then serializes the result.
"""

from dataclasses import replace

from ..events import VodEvents
from ..log_config import get_context_logger
from ..metrics import MetricsCollector, NoOpMetrics, VodMetrics
from .classifier import SegmentClassifier
from .models import AdReport, Playlist
from .parser import ManifestParser
from .patterns import AdPatternSet


class ManifestRewriter:
    """
    Removes ad segments from playlists.

    A retained segment that directly follows one or more removed segments
    gets an #EXT-X-DISCONTINUITY marker unless its metadata already carries
    one. Header and trailer lines are copied unchanged and segment order is
    preserved. Filtering an already filtered playlist returns it unchanged.

    Examples:
        >>> rewriter = ManifestRewriter(AdPatternSet())
        >>> clean = rewriter.filter_text(text, "https://cdn.example.com/index.m3u8")
    """

    def __init__(
        self,
        patterns: AdPatternSet | None = None,
        parser: ManifestParser | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the rewriter.

        Args:
            patterns: Ad pattern set (defaults to the built-in patterns)
            parser: Playlist parser
            metrics: Metrics collector
        """
        self.logger = get_context_logger("manifest_rewriter")
        self.classifier = SegmentClassifier(patterns)
        self.parser = parser or ManifestParser()
        self.metrics = metrics or NoOpMetrics()

    @property
    def patterns(self) -> AdPatternSet:
        return self.classifier.patterns

    def filter(self, playlist: Playlist) -> Playlist:
        """
        Remove ad segments.

        Args:
            playlist: Parsed playlist

        Returns:
            Playlist: New playlist containing only non-ad segments
        """
        classified = self.classifier.classify_all(playlist)

        retained = []
        removed_run = 0
        for segment in classified.segments:
            if segment.is_ad:
                removed_run += 1
                continue
            if removed_run:
                segment = segment.with_discontinuity()
                removed_run = 0
            retained.append(segment)

        removed = classified.segment_count - len(retained)
        if removed:
            self.metrics.increment(VodMetrics.MANIFEST_SEGMENTS_REMOVED, removed)
        self.metrics.increment(VodMetrics.MANIFEST_FILTERED)

        self.logger.debug(
            VodEvents.MANIFEST_FILTERED,
            total_segments=classified.segment_count,
            removed_segments=removed,
        )

        return replace(classified, segments=tuple(retained))

    def serialize(self, playlist: Playlist) -> str:
        return playlist.serialize()

    def filter_text(self, content: str | bytes, base_url: str = "") -> str:
        """
        Parse, filter and serialize playlist text.

        Raises:
            ManifestParseError: If the playlist is structurally broken
        """
        return self.serialize(self.filter(self.parser.parse(content, base_url)))

    def report(self, content: str | bytes, base_url: str = "") -> AdReport:
        """Count ad segments without rewriting the playlist."""
        classified = self.classifier.classify_all(self.parser.parse(content, base_url))
        return AdReport(
            has_ads=classified.ad_count > 0,
            ad_count=classified.ad_count,
            total_segments=classified.segment_count,
        )


def filter_manifest(
    content: str | bytes,
    base_url: str = "",
    patterns: AdPatternSet | None = None,
) -> str:
    """Filter playlist text with a one-off rewriter."""
    return ManifestRewriter(patterns).filter_text(content, base_url)


def detect_ads(
    content: str | bytes,
    base_url: str = "",
    patterns: AdPatternSet | None = None,
) -> AdReport:
    """Report ad segments in playlist text with a one-off rewriter."""
    return ManifestRewriter(patterns).report(content, base_url)


__all__ = ["ManifestRewriter", "filter_manifest", "detect_ads"]
