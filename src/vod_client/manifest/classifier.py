"""Ad segment classification by case-insensitive substring match."""

from dataclasses import replace
from typing import Iterable

from .models import Playlist, Segment
from .patterns import AdPatternSet


def is_ad_url(url: str, patterns: Iterable[str]) -> bool:
    """
    Check whether a URL contains any ad pattern.

    Args:
        url: Absolute or relative segment URL
        patterns: Lower-cased substrings

    Returns:
        bool: True on the first matching pattern
    """
    lowered = url.lower()
    return any(pattern in lowered for pattern in patterns)


def classify(segment: Segment, patterns: AdPatternSet | Iterable[str]) -> bool:
    """
    Decide whether a segment is advertising.

    The resolved URI is matched when available, otherwise the URI text.
    """
    if isinstance(patterns, AdPatternSet):
        patterns = patterns.snapshot()
    return is_ad_url(segment.resolved_uri or segment.uri, patterns)


class SegmentClassifier:
    """
    Classifies every segment of a playlist against one pattern set.

    Examples:
        >>> classifier = SegmentClassifier(AdPatternSet())
        >>> classified = classifier.classify_all(playlist)
        >>> classified.ad_count
        2
    """

    def __init__(self, patterns: AdPatternSet | None = None):
        self.patterns = patterns if patterns is not None else AdPatternSet()

    def classify(self, segment: Segment) -> bool:
        return classify(segment, self.patterns)

    def classify_all(self, playlist: Playlist) -> Playlist:
        """Return a copy of the playlist with ``is_ad`` set on every segment."""
        snapshot = self.patterns.snapshot()
        return replace(
            playlist,
            segments=tuple(
                segment.classified(classify(segment, snapshot))
                for segment in playlist.segments
            ),
        )


__all__ = ["SegmentClassifier", "classify", "is_ad_url"]
