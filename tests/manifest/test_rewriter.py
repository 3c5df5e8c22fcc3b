"""Tests for ad segment removal and discontinuity repair."""

from test_utils import build_playlist
from vod_client.manifest import (
    DISCONTINUITY_TAG,
    AdPatternSet,
    ManifestRewriter,
    detect_ads,
    filter_manifest,
    parse_manifest,
)
from vod_client.metrics import InMemoryMetrics, VodMetrics


class TestFilterExample:
    """Test the five segment reference playlist."""

    def test_filtered_output(self, five_segment_playlist):
        """Test ads 2 and 4 are removed and segments 3 and 5 get a marker."""
        output = filter_manifest(five_segment_playlist)

        assert output == "\n".join(
            [
                "#EXTM3U",
                "#EXTINF:4.0,",
                "https://cdn.example.com/show/seg1.ts",
                DISCONTINUITY_TAG,
                "#EXTINF:4.0,",
                "https://cdn.example.com/show/seg3.ts",
                DISCONTINUITY_TAG,
                "#EXTINF:4.0,",
                "https://cdn.example.com/show/seg5.ts",
            ]
        )

    def test_filtered_counts(self, five_segment_playlist):
        rewriter = ManifestRewriter()
        filtered = rewriter.filter(parse_manifest(five_segment_playlist))

        assert filtered.segment_count == 3
        assert filtered.total_duration == 12.0
        assert filtered.ad_count == 0

    def test_input_not_modified(self, five_segment_playlist):
        """Test filtering returns a new playlist and leaves the input intact."""
        playlist = parse_manifest(five_segment_playlist)
        ManifestRewriter().filter(playlist)

        assert playlist.segment_count == 5
        assert not any(s.has_discontinuity for s in playlist.segments)


class TestFilterProperties:
    """Test filter invariants."""

    def test_idempotent(self, five_segment_playlist, relative_playlist, base_url):
        """Test filtering twice gives the same text as filtering once."""
        rewriter = ManifestRewriter()
        for text, url in ((five_segment_playlist, ""), (relative_playlist, base_url)):
            once = rewriter.filter_text(text, url)
            twice = rewriter.filter_text(once, url)
            assert twice == once

    def test_monotonic(self, relative_playlist, base_url):
        rewriter = ManifestRewriter()
        playlist = parse_manifest(relative_playlist, base_url)
        filtered = rewriter.filter(playlist)

        assert filtered.segment_count <= playlist.segment_count
        assert filtered.total_duration <= playlist.total_duration

    def test_one_marker_per_cut(self, relative_playlist, base_url):
        """Test each retained segment after a removed run carries exactly one marker."""
        filtered = ManifestRewriter().filter(parse_manifest(relative_playlist, base_url))

        assert [s.uri for s in filtered.segments] == ["part1.ts", "part2.ts", "part3.ts"]
        assert [s.metadata_lines.count(DISCONTINUITY_TAG) for s in filtered.segments] == [
            1,
            0,
            1,
        ]

    def test_existing_marker_not_duplicated(self):
        """Test a retained segment that already has a marker keeps just one."""
        text = "\n".join(
            [
                "#EXTM3U",
                "#EXTINF:4.0,",
                "show/seg1.ts",
                "#EXTINF:4.0,",
                "ads/seg.ts",
                DISCONTINUITY_TAG,
                "#EXTINF:4.0,",
                "show/seg3.ts",
            ]
        )
        output = filter_manifest(text, "https://cdn.example.com/index.m3u8")

        assert output.count(DISCONTINUITY_TAG) == 1
        assert output.splitlines()[-3:] == [DISCONTINUITY_TAG, "#EXTINF:4.0,", "show/seg3.ts"]

    def test_header_and_trailer_preserved(self, relative_playlist, base_url):
        output = filter_manifest(relative_playlist, base_url)
        lines = output.splitlines()

        assert lines[:3] == ["#EXTM3U", "#EXT-X-VERSION:3", "#EXT-X-TARGETDURATION:4"]
        assert lines[-1] == "#EXT-X-ENDLIST"

    def test_no_ads_unchanged(self):
        text = build_playlist(["seg1.ts", "seg2.ts", "seg3.ts"])

        assert filter_manifest(text, "https://cdn.example.com/show/index.m3u8") == text

    def test_all_ads_removed(self):
        text = build_playlist(["/ads/1.ts", "/ads/2.ts"])
        filtered = ManifestRewriter().filter(parse_manifest(text))

        assert filtered.segment_count == 0
        assert filtered.serialize().splitlines()[-1] == "#EXT-X-ENDLIST"


class TestPatternSets:
    """Test rewriters with explicit pattern sets."""

    def test_custom_pattern(self):
        text = build_playlist(["show/seg1.ts", "show/midroll-1.ts", "show/seg2.ts"])
        patterns = AdPatternSet()
        patterns.add("midroll")

        filtered = ManifestRewriter(patterns).filter(parse_manifest(text))

        assert [s.uri for s in filtered.segments] == ["show/seg1.ts", "show/seg2.ts"]

    def test_rewriter_sees_pattern_edits(self):
        """Test a shared pattern set edited after construction is honoured."""
        patterns = AdPatternSet(include_defaults=False)
        rewriter = ManifestRewriter(patterns)
        text = build_playlist(["a.ts", "b-midroll.ts"])

        assert rewriter.filter(parse_manifest(text)).segment_count == 2
        patterns.add("midroll")
        assert rewriter.filter(parse_manifest(text)).segment_count == 1

    def test_patterns_property(self):
        patterns = AdPatternSet()

        assert ManifestRewriter(patterns).patterns is patterns


class TestReportAndMetrics:
    """Test ad detection and metrics."""

    def test_detect_ads(self, five_segment_playlist):
        report = detect_ads(five_segment_playlist)

        assert report.has_ads
        assert report.ad_count == 2
        assert report.total_segments == 5

    def test_detect_no_ads(self):
        report = detect_ads(build_playlist(["seg1.ts"]))

        assert not report.has_ads
        assert report.ad_count == 0

    def test_metrics_recorded(self, five_segment_playlist):
        metrics = InMemoryMetrics()
        ManifestRewriter(metrics=metrics).filter_text(five_segment_playlist)

        assert metrics.counter(VodMetrics.MANIFEST_FILTERED) == 1
        assert metrics.counter(VodMetrics.MANIFEST_SEGMENTS_REMOVED) == 2
