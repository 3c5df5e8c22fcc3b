"""Source registry: the configured origins, ordered by priority."""

from typing import Any, Iterable

from pydantic import ValidationError

from ..exceptions import VodConfigError
from ..log_config import get_context_logger
from .models import OriginCandidate


class SourceRegistry:
    """
    Holds the configured origins.

    Examples:
        >>> registry = SourceRegistry.from_settings()
        >>> [c.id for c in registry.enabled()]
        ['alpha', 'beta']
    """

    def __init__(self, candidates: Iterable[OriginCandidate] = ()):
        self.logger = get_context_logger("source_registry")
        self._candidates: dict[str, OriginCandidate] = {}
        for candidate in candidates:
            self.register(candidate)

    def register(self, candidate: OriginCandidate) -> None:
        if candidate.id in self._candidates:
            raise VodConfigError(
                f"duplicate origin id '{candidate.id}'", config_key="origins"
            )
        self._candidates[candidate.id] = candidate

    def get(self, origin_id: str) -> OriginCandidate | None:
        return self._candidates.get(origin_id)

    def all(self) -> list[OriginCandidate]:
        return list(self._candidates.values())

    def enabled(self) -> list[OriginCandidate]:
        """Enabled origins by priority, then declaration order."""
        return sorted(
            (c for c in self._candidates.values() if c.enabled),
            key=lambda c: c.priority,
        )

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, origin_id: str) -> bool:
        return origin_id in self._candidates

    @classmethod
    def from_config(cls, entries: Iterable[dict[str, Any]]) -> "SourceRegistry":
        """
        Build a registry from raw origin dicts (the ``origins`` settings list).

        Raises:
            VodConfigError: If an entry is invalid or an id is repeated
        """
        candidates = []
        for index, entry in enumerate(entries):
            try:
                candidates.append(OriginCandidate.model_validate(entry))
            except ValidationError as e:
                raise VodConfigError(
                    f"invalid origin entry: {e.errors()[0]['msg']}",
                    config_key=f"origins[{index}]",
                ) from e
        registry = cls(candidates)
        registry.logger.debug(
            "Source registry loaded",
            origin_count=len(registry),
            enabled_count=len(registry.enabled()),
        )
        return registry

    @classmethod
    def from_settings(cls, settings: Any = None) -> "SourceRegistry":
        if settings is None:
            from ..settings import get_settings

            settings = get_settings()
        return cls.from_config(settings.origins)


__all__ = ["SourceRegistry"]
