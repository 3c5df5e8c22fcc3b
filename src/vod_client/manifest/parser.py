"""
HLS playlist parser.

Splits playlist text into header lines, segments and trailer lines. The
parser is tolerant: unknown directives and stray lines are kept verbatim in
the nearest bucket. The only failure is a duration directive that is never
followed by a URI.
"""

import re
from urllib.parse import urljoin

from ..exceptions import ManifestParseError
from .models import Playlist, Segment


FORMAT_MARKER = "#EXTM3U"
DURATION_DIRECTIVE = "#EXTINF"

_DURATION_RE = re.compile(r"^#EXTINF:\s*([0-9]*\.?[0-9]+)")


def resolve_uri(uri: str, base_url: str) -> str:
    """
    Resolve a possibly relative segment URI against the playlist URL.

    Args:
        uri: URI as written in the playlist
        base_url: URL the playlist was fetched from

    Returns:
        str: Absolute URI, or the input unchanged if it cannot be resolved
    """
    if not base_url or uri.startswith(("http://", "https://")):
        return uri
    try:
        return urljoin(base_url, uri)
    except ValueError:
        return uri


def parse_duration(directive: str) -> float | None:
    """Extract the duration in seconds from an #EXTINF line."""
    match = _DURATION_RE.match(directive)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def _decode(content: str | bytes) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8-sig", errors="replace")
    return content.lstrip("\ufeff")


class ManifestParser:
    """
    Parser for HLS media playlists.

    Examples:
        >>> parser = ManifestParser()
        >>> playlist = parser.parse(text, "https://cdn.example.com/show/index.m3u8")
        >>> playlist.segment_count
        5
    """

    def parse(self, content: str | bytes, base_url: str = "") -> Playlist:
        """
        Parse playlist text.

        Args:
            content: Playlist text (bytes are decoded as UTF-8)
            base_url: Fetch URL used to resolve relative segment URIs

        Returns:
            Playlist: Parsed playlist with unclassified segments

        Raises:
            ManifestParseError: If a duration directive has no URI line
        """
        lines = _decode(content).splitlines()

        header: list[str] = []
        segments: list[Segment] = []
        pending: list[str] = []
        in_header = True

        i = 0
        while i < len(lines):
            line = lines[i].strip()
            i += 1

            if not line:
                continue

            if line.startswith(DURATION_DIRECTIVE):
                in_header = False
                directive_line = i
                metadata = [*pending, line]
                pending = []

                uri = None
                while i < len(lines):
                    candidate = lines[i].strip()
                    i += 1
                    if not candidate:
                        continue
                    if candidate.startswith("#"):
                        metadata.append(candidate)
                        continue
                    uri = candidate
                    break

                if uri is None:
                    raise ManifestParseError(
                        "Duration directive without a segment URI",
                        line_number=directive_line,
                        directive=line,
                    )

                segments.append(
                    Segment(
                        duration=parse_duration(line),
                        uri=uri,
                        metadata_lines=tuple(metadata),
                        resolved_uri=resolve_uri(uri, base_url),
                    )
                )
                continue

            if in_header:
                # Format marker, #EXT-X-* directives and anything unrecognized
                # before the first segment stay in the header
                header.append(line)
            else:
                pending.append(line)

        return Playlist(
            header_lines=tuple(header),
            segments=tuple(segments),
            trailer_lines=tuple(pending),
        )


def parse_manifest(content: str | bytes, base_url: str = "") -> Playlist:
    """Parse playlist text with a default ManifestParser."""
    return ManifestParser().parse(content, base_url)


def looks_like_media_playlist(content: str) -> bool:
    """Whether the text is an HLS playlist that lists media segments."""
    return FORMAT_MARKER in content and DURATION_DIRECTIVE in content


__all__ = [
    "ManifestParser",
    "parse_manifest",
    "parse_duration",
    "resolve_uri",
    "looks_like_media_playlist",
    "FORMAT_MARKER",
    "DURATION_DIRECTIVE",
]
