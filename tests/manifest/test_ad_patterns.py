"""Tests for ad pattern sets and segment classification."""

import pytest

from vod_client.manifest import (
    CUSTOM_AD_PATTERNS_KEY,
    REMOVED_AD_PATTERNS_KEY,
    DEFAULT_AD_KEYWORDS,
    DEFAULT_AD_PATTERNS,
    AdPatternSet,
    SegmentClassifier,
    classify,
    is_ad_url,
    parse_manifest,
)
from vod_client.manifest.models import Segment
from vod_client.storage import InMemoryStore


class TestAdPatternSet:
    """Test the owned pattern configuration."""

    def test_defaults(self):
        """Test a new set holds the built-in patterns and keywords."""
        patterns = AdPatternSet()

        assert len(patterns) == len(set(DEFAULT_AD_PATTERNS) | set(DEFAULT_AD_KEYWORDS))
        assert "/ads/" in patterns
        assert "sponsored" in patterns

    def test_without_defaults(self):
        patterns = AdPatternSet(["midroll"], include_defaults=False)

        assert patterns.list_patterns() == ["midroll"]

    def test_add_normalizes(self):
        """Test patterns are stored lower-cased and stripped."""
        patterns = AdPatternSet(include_defaults=False)

        assert patterns.add("  Sponsor-Break ")
        assert patterns.list_patterns() == ["sponsor-break"]
        assert "SPONSOR-BREAK" in patterns

    def test_add_duplicate(self):
        patterns = AdPatternSet(include_defaults=False)
        patterns.add("midroll")

        assert patterns.add("MIDROLL") is False
        assert len(patterns) == 1

    def test_add_empty_raises(self):
        with pytest.raises(ValueError):
            AdPatternSet().add("   ")

    def test_remove(self):
        patterns = AdPatternSet()

        assert patterns.remove("/ADS/")
        assert "/ads/" not in patterns
        assert patterns.remove("/ads/") is False

    def test_custom_patterns_excludes_defaults(self):
        patterns = AdPatternSet()
        patterns.add("midroll")

        assert patterns.custom_patterns() == ["midroll"]

    def test_copy_is_independent(self):
        patterns = AdPatternSet()
        clone = patterns.copy()
        clone.add("midroll")

        assert "midroll" in clone
        assert "midroll" not in patterns
        assert clone.custom_patterns() == ["midroll"]

    def test_snapshot_unaffected_by_later_edits(self):
        patterns = AdPatternSet(include_defaults=False)
        patterns.add("midroll")
        snapshot = patterns.snapshot()
        patterns.add("preroll")

        assert snapshot == ("midroll",)

    def test_persistence_round_trip(self):
        """Test custom patterns survive a save and reload."""
        store = InMemoryStore()
        patterns = AdPatternSet()
        patterns.add("midroll")
        patterns.add("preroll")
        patterns.save(store)

        restored = AdPatternSet.from_store(store)

        assert store.get(CUSTOM_AD_PATTERNS_KEY) == ["midroll", "preroll"]
        assert restored.custom_patterns() == ["midroll", "preroll"]
        assert "/ads/" in restored

    def test_from_store_ignores_garbage(self):
        store = InMemoryStore({CUSTOM_AD_PATTERNS_KEY: ["midroll", 3, "", None]})

        assert AdPatternSet.from_store(store).custom_patterns() == ["midroll"]

    def test_from_store_non_list(self):
        store = InMemoryStore({CUSTOM_AD_PATTERNS_KEY: "midroll"})

        assert AdPatternSet.from_store(store).custom_patterns() == []

    def test_removed_default_persisted(self):
        """Test a removed built-in pattern stays removed after reload."""
        store = InMemoryStore()
        patterns = AdPatternSet()
        patterns.remove("Banner")
        patterns.save(store)

        restored = AdPatternSet.from_store(store)

        assert store.get(REMOVED_AD_PATTERNS_KEY) == ["banner"]
        assert "banner" not in restored
        assert restored.removed_patterns() == ["banner"]

    def test_readd_restores_default(self):
        patterns = AdPatternSet()
        patterns.remove("banner")

        assert patterns.add("banner")
        assert patterns.removed_patterns() == []
        assert patterns.custom_patterns() == []

    def test_configured_patterns_not_custom(self):
        patterns = AdPatternSet()
        patterns.add_configured(["Cfg-Only", "  "])
        patterns.add("user-added")

        assert "cfg-only" in patterns
        assert patterns.custom_patterns() == ["user-added"]

    def test_configured_pattern_removed_by_user(self):
        store = InMemoryStore()
        patterns = AdPatternSet()
        patterns.add_configured(["cfg-only"])
        patterns.remove("cfg-only")
        patterns.save(store)

        restored = AdPatternSet.from_store(store)
        restored.add_configured(["cfg-only"])

        assert "cfg-only" not in restored

    def test_copy_keeps_origins(self):
        patterns = AdPatternSet()
        patterns.add_configured(["cfg-only"])
        patterns.remove("banner")
        clone = patterns.copy()
        clone.add("midroll")

        assert clone.custom_patterns() == ["midroll"]
        assert clone.removed_patterns() == ["banner"]
        assert patterns.custom_patterns() == []


class TestClassification:
    """Test substring classification."""

    def test_is_ad_url_case_insensitive(self):
        assert is_ad_url("https://cdn.example.com/ADS/seg.ts", ("/ads/",))

    def test_is_ad_url_no_match(self):
        assert not is_ad_url("https://cdn.example.com/show/seg1.ts", AdPatternSet().snapshot())

    def test_classify_uses_resolved_uri(self):
        """Test a relative URI is matched through its resolved form."""
        segment = Segment(
            duration=4.0,
            uri="seg.ts",
            resolved_uri="https://cdn.example.com/ads/seg.ts",
        )

        assert classify(segment, AdPatternSet())

    def test_classify_falls_back_to_uri(self):
        segment = Segment(duration=4.0, uri="https://cdn.example.com/promo/seg.ts")

        assert classify(segment, AdPatternSet())

    def test_classify_accepts_plain_iterable(self):
        segment = Segment(duration=4.0, uri="https://cdn.example.com/show/midroll1.ts")

        assert classify(segment, ["midroll"])
        assert not classify(segment, [])

    def test_custom_pattern_changes_classification(self):
        """Test adding a pattern makes matching segments ads."""
        patterns = AdPatternSet()
        segment = Segment(duration=4.0, uri="https://cdn.example.com/show/midroll1.ts")
        assert not classify(segment, patterns)

        patterns.add("MidRoll")

        assert classify(segment, patterns)

    def test_classify_all(self, five_segment_playlist):
        classified = SegmentClassifier().classify_all(parse_manifest(five_segment_playlist))

        assert [s.is_ad for s in classified.segments] == [False, True, False, True, False]
        assert classified.ad_count == 2
