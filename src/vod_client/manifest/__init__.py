"""
Manifest Ad-Filtering Package

Parses HLS media playlists, classifies segments against an ad pattern set
and rewrites the playlist without the ad segments.

Main Components:
    - ManifestParser: Playlist text → Playlist (header, segments, trailer)
    - SegmentClassifier: Substring-based ad classification
    - ManifestRewriter: Removal of ad segments with discontinuity repair
    - AdPatternSet: Owned, mutable ad pattern configuration
    - AdFilteringLoader: Fetch + filter for the player

Usage:
    >>> from vod_client.manifest import AdPatternSet, filter_manifest
    >>> patterns = AdPatternSet()
    >>> patterns.add("sponsor-break")
    >>> clean = filter_manifest(text, "https://cdn.example.com/index.m3u8", patterns)
"""

from .classifier import SegmentClassifier, classify, is_ad_url
from .loader import AdFilteringLoader, LoadedManifest
from .models import DISCONTINUITY_TAG, AdReport, Playlist, Segment
from .parser import ManifestParser, parse_manifest
from .patterns import (
    CUSTOM_AD_PATTERNS_KEY,
    REMOVED_AD_PATTERNS_KEY,
    DEFAULT_AD_KEYWORDS,
    DEFAULT_AD_PATTERNS,
    AdPatternSet,
)
from .rewriter import ManifestRewriter, detect_ads, filter_manifest

__all__ = [
    "Segment",
    "Playlist",
    "AdReport",
    "DISCONTINUITY_TAG",
    "ManifestParser",
    "parse_manifest",
    "SegmentClassifier",
    "classify",
    "is_ad_url",
    "ManifestRewriter",
    "filter_manifest",
    "detect_ads",
    "AdPatternSet",
    "CUSTOM_AD_PATTERNS_KEY",
    "REMOVED_AD_PATTERNS_KEY",
    "DEFAULT_AD_PATTERNS",
    "DEFAULT_AD_KEYWORDS",
    "AdFilteringLoader",
    "LoadedManifest",
]
