"""
Playlist data model.

Segments and playlists are immutable; every filter pass produces new
objects and never edits the input.
"""

from dataclasses import dataclass, field, replace


DISCONTINUITY_TAG = "#EXT-X-DISCONTINUITY"


@dataclass(frozen=True)
class Segment:
    """
    One media segment of an HLS media playlist.

    Attributes:
        duration: Duration from the #EXTINF directive (None if unparseable)
        uri: URI line exactly as written in the playlist
        metadata_lines: Directive/comment lines preceding the URI, #EXTINF included
        is_ad: Classification result
        resolved_uri: Absolute URI used for classification
    """

    duration: float | None
    uri: str
    metadata_lines: tuple[str, ...] = ()
    is_ad: bool = False
    resolved_uri: str = ""

    @property
    def has_discontinuity(self) -> bool:
        """Whether a discontinuity marker precedes this segment."""
        return any(line == DISCONTINUITY_TAG for line in self.metadata_lines)

    def classified(self, is_ad: bool) -> "Segment":
        """Return a copy carrying the given classification."""
        return replace(self, is_ad=is_ad)

    def with_discontinuity(self) -> "Segment":
        """Return a copy preceded by a discontinuity marker (no-op if present)."""
        if self.has_discontinuity:
            return self
        return replace(self, metadata_lines=(DISCONTINUITY_TAG, *self.metadata_lines))

    def lines(self) -> list[str]:
        """Serialized lines of the segment: metadata followed by the URI."""
        return [*self.metadata_lines, self.uri]


@dataclass(frozen=True)
class Playlist:
    """
    A parsed playlist.

    Attributes:
        header_lines: Lines preceding the first segment
        segments: Segments in playback order
        trailer_lines: Directive lines following the last segment (e.g. #EXT-X-ENDLIST)
    """

    header_lines: tuple[str, ...] = ()
    segments: tuple[Segment, ...] = ()
    trailer_lines: tuple[str, ...] = field(default=())

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    @property
    def total_duration(self) -> float:
        """Sum of known segment durations in seconds."""
        return sum(s.duration for s in self.segments if s.duration is not None)

    @property
    def ad_count(self) -> int:
        return sum(1 for s in self.segments if s.is_ad)

    def serialize(self) -> str:
        """Render the playlist as newline-joined text."""
        lines = list(self.header_lines)
        for segment in self.segments:
            lines.extend(segment.lines())
        lines.extend(self.trailer_lines)
        return "\n".join(lines)


@dataclass(frozen=True)
class AdReport:
    """Summary of ad segments found in a playlist."""

    has_ads: bool
    ad_count: int
    total_segments: int


__all__ = ["DISCONTINUITY_TAG", "Segment", "Playlist", "AdReport"]
