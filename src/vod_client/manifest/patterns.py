"""
Ad pattern configuration.

An ``AdPatternSet`` is an explicitly owned, mutable set of lower-cased
substrings. It is passed to every classification call instead of living in
module state; callers that want a process-wide set share one instance.
"""

import threading
from typing import Iterable, Iterator

from ..events import VodEvents
from ..log_config import get_context_logger
from ..storage import KeyValueStore


CUSTOM_AD_PATTERNS_KEY = "custom_ad_patterns"
REMOVED_AD_PATTERNS_KEY = "removed_ad_patterns"

DEFAULT_AD_PATTERNS: tuple[str, ...] = (
    "/ad/",
    "/ads/",
    "/advertisement/",
    "/advert/",
    "_ad_",
    "_ads_",
    "-ad-",
    "-ads-",
    "ad.ts",
    "ad.m3u8",
    "ads.ts",
    "ads.m3u8",
    "advert",
    "commercial",
    "/promo/",
)

DEFAULT_AD_KEYWORDS: tuple[str, ...] = (
    "advertisement",
    "commercial",
    "sponsored",
    "promo",
    "banner",
)


def normalize_pattern(pattern: str) -> str:
    """Normalize a pattern the way it is stored and compared."""
    return pattern.strip().lower()


class AdPatternSet:
    """
    Mutable set of ad substrings.

    Insertion order is kept for listing. Adding an existing pattern is a
    no-op; removal matches the normalized pattern exactly. Classification
    iterates over ``snapshot()``, so concurrent edits never affect a
    classification already in progress.

    Patterns come from three places: the built-in defaults, patterns
    configured in settings (``add_configured``) and patterns added by the
    user. Only user additions, plus removals of built-in or configured
    patterns, are persisted by ``save``.

    Examples:
        >>> patterns = AdPatternSet()
        >>> patterns.add("Sponsor-Break")
        True
        >>> "sponsor-break" in patterns
        True
        >>> patterns.add("sponsor-break")
        False
    """

    def __init__(
        self,
        patterns: Iterable[str] | None = None,
        include_defaults: bool = True,
    ):
        """
        Initialize the pattern set.

        Args:
            patterns: User patterns to add on top of the defaults
            include_defaults: Start from the built-in URL patterns and keywords
        """
        self.logger = get_context_logger("ad_pattern_set")
        self._lock = threading.Lock()
        self._patterns: dict[str, None] = {}
        self._defaults: frozenset[str] = frozenset()
        self._configured: set[str] = set()
        self._custom: dict[str, None] = {}
        self._removed: dict[str, None] = {}

        if include_defaults:
            for pattern in (*DEFAULT_AD_PATTERNS, *DEFAULT_AD_KEYWORDS):
                self._patterns[pattern] = None
            self._defaults = frozenset(self._patterns)

        for pattern in patterns or ():
            self.add(pattern)

    def _is_managed(self, pattern: str) -> bool:
        # Built-in or configured: present unless the user removed it
        return pattern in self._defaults or pattern in self._configured

    def add(self, pattern: str) -> bool:
        """
        Add a pattern.

        Re-adding a removed built-in or configured pattern restores it.

        Args:
            pattern: Substring to match (case-insensitive)

        Returns:
            bool: True if the set changed

        Raises:
            ValueError: If the pattern is empty after normalization
        """
        normalized = normalize_pattern(pattern)
        if not normalized:
            raise ValueError("Ad pattern must not be empty")

        with self._lock:
            if normalized in self._patterns:
                return False
            self._patterns[normalized] = None
            self._removed.pop(normalized, None)
            if not self._is_managed(normalized):
                self._custom[normalized] = None

        self.logger.debug(VodEvents.PATTERN_ADDED, pattern=normalized)
        return True

    def add_configured(self, patterns: Iterable[str]) -> None:
        """
        Add patterns from configuration.

        Configured patterns are not persisted as user patterns, so dropping
        them from the configuration removes them. A configured pattern the
        user removed earlier stays removed.
        """
        with self._lock:
            for pattern in patterns:
                normalized = normalize_pattern(pattern)
                if not normalized:
                    continue
                self._configured.add(normalized)
                if normalized not in self._removed:
                    self._patterns.setdefault(normalized, None)

    def remove(self, pattern: str) -> bool:
        """
        Remove a pattern.

        Args:
            pattern: Pattern to remove

        Returns:
            bool: True if the pattern was present
        """
        normalized = normalize_pattern(pattern)
        with self._lock:
            if normalized not in self._patterns:
                return False
            del self._patterns[normalized]
            self._custom.pop(normalized, None)
            if self._is_managed(normalized):
                self._removed[normalized] = None

        self.logger.debug(VodEvents.PATTERN_REMOVED, pattern=normalized)
        return True

    def snapshot(self) -> tuple[str, ...]:
        """Immutable view of the current patterns."""
        with self._lock:
            return tuple(self._patterns)

    def list_patterns(self) -> list[str]:
        return list(self.snapshot())

    def custom_patterns(self) -> list[str]:
        """Patterns added by the user, in insertion order."""
        with self._lock:
            return [p for p in self._patterns if p in self._custom]

    def removed_patterns(self) -> list[str]:
        """Built-in or configured patterns the user removed."""
        with self._lock:
            return list(self._removed)

    def copy(self) -> "AdPatternSet":
        clone = AdPatternSet(include_defaults=False)
        with self._lock:
            clone._patterns = dict(self._patterns)
            clone._defaults = self._defaults
            clone._configured = set(self._configured)
            clone._custom = dict(self._custom)
            clone._removed = dict(self._removed)
        return clone

    def __contains__(self, pattern: object) -> bool:
        if not isinstance(pattern, str):
            return False
        with self._lock:
            return normalize_pattern(pattern) in self._patterns

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)

    def __repr__(self) -> str:
        return f"AdPatternSet({len(self)} patterns)"

    # Persistence

    @classmethod
    def from_store(
        cls,
        store: KeyValueStore,
        key: str = CUSTOM_AD_PATTERNS_KEY,
        removed_key: str = REMOVED_AD_PATTERNS_KEY,
        include_defaults: bool = True,
    ) -> "AdPatternSet":
        """
        Build a pattern set from the defaults and the persisted user edits.

        Non-string entries in the stored lists are skipped.
        """
        patterns = cls(include_defaults=include_defaults)
        for pattern in _stored_patterns(store, removed_key):
            patterns._removed[pattern] = None
            patterns._patterns.pop(pattern, None)
        for pattern in _stored_patterns(store, key):
            patterns.add(pattern)
        return patterns

    def save(
        self,
        store: KeyValueStore,
        key: str = CUSTOM_AD_PATTERNS_KEY,
        removed_key: str = REMOVED_AD_PATTERNS_KEY,
    ) -> None:
        """Persist user-added patterns and removed built-in or configured ones."""
        store.set(key, self.custom_patterns())
        store.set(removed_key, self.removed_patterns())


def _stored_patterns(store: KeyValueStore, key: str) -> list[str]:
    stored = store.get(key) or []
    if not isinstance(stored, list):
        return []
    return [normalize_pattern(p) for p in stored if isinstance(p, str) and p.strip()]


__all__ = [
    "AdPatternSet",
    "CUSTOM_AD_PATTERNS_KEY",
    "REMOVED_AD_PATTERNS_KEY",
    "DEFAULT_AD_PATTERNS",
    "DEFAULT_AD_KEYWORDS",
    "normalize_pattern",
]
