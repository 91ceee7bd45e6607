"""
Pattern Catalog for Deckflow
============================

Read-only view over the presentation pattern data in config/patterns.py.

The catalog is injected into the selector and the flow optimizer so tests
can substitute a fixture catalog with different patterns, compatibility
links or fallbacks.

Usage:
    catalog = PatternCatalog.default()
    catalog.by_category(ContentType.NUMERICAL_DATA)
    catalog.is_compatible("steps", "timeline")  # True
"""

from functools import lru_cache
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from config.patterns import (
    FALLBACK_PATTERNS,
    PATTERN_COMPATIBILITY,
    PRESENTATION_PATTERNS,
)
from deckflow.models.content import ContentType
from deckflow.models.patterns import Pattern
from deckflow.utils.logger import setup_logger

logger = setup_logger(__name__)


class PatternCatalog:
    """
    Immutable pattern lookup with compatibility and fallback tables.

    Catalog order is meaningful: it breaks score ties in the selector.
    """

    def __init__(
        self,
        patterns: Sequence[Pattern],
        compatibility: Optional[Mapping[str, Iterable[str]]] = None,
        fallbacks: Optional[Mapping[ContentType, Iterable[str]]] = None
    ):
        self._patterns = tuple(patterns)
        self._by_id: Dict[str, Pattern] = {}
        self._index: Dict[str, int] = {}
        for position, pattern in enumerate(self._patterns):
            if pattern.id in self._by_id:
                raise ValueError(f"Duplicate pattern id in catalog: {pattern.id}")
            self._by_id[pattern.id] = pattern
            self._index[pattern.id] = position

        self._compatibility: Dict[str, FrozenSet[str]] = {
            pattern_id: frozenset(next_ids)
            for pattern_id, next_ids in (compatibility or {}).items()
        }
        self._fallbacks: Dict[ContentType, tuple] = {
            ContentType(content_type): tuple(ids)
            for content_type, ids in (fallbacks or {}).items()
        }

    @classmethod
    def default(cls) -> "PatternCatalog":
        """The built-in 25-pattern catalog."""
        return _default_catalog()

    # ===== Lookup =====

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, pattern_id: str) -> bool:
        return pattern_id in self._by_id

    def all(self) -> List[Pattern]:
        return list(self._patterns)

    def get(self, pattern_id: str) -> Optional[Pattern]:
        return self._by_id.get(pattern_id)

    def index_of(self, pattern_id: str) -> int:
        """Catalog position; unknown ids sort last."""
        return self._index.get(pattern_id, len(self._patterns))

    def by_category(self, content_type: ContentType) -> List[Pattern]:
        return [p for p in self._patterns if p.category == content_type]

    # ===== Flow tables =====

    def compatible_next(self, pattern_id: str) -> FrozenSet[str]:
        return self._compatibility.get(pattern_id, frozenset())

    def is_compatible(self, current_id: str, next_id: str) -> bool:
        return next_id in self.compatible_next(current_id)

    def fallbacks(self, content_type: ContentType) -> List[Pattern]:
        """Fallback patterns for a category, skipping ids missing from the catalog."""
        patterns = []
        for pattern_id in self._fallbacks.get(content_type, ()):
            pattern = self._by_id.get(pattern_id)
            if pattern is None:
                logger.warning(f"Fallback pattern '{pattern_id}' not found in catalog")
                continue
            patterns.append(pattern)
        return patterns


@lru_cache(maxsize=1)
def _default_catalog() -> PatternCatalog:
    patterns = [Pattern(**entry) for entry in PRESENTATION_PATTERNS]
    catalog = PatternCatalog(
        patterns,
        compatibility=PATTERN_COMPATIBILITY,
        fallbacks={ContentType(k): v for k, v in FALLBACK_PATTERNS.items()}
    )
    logger.debug(f"Loaded pattern catalog with {len(catalog)} patterns")
    return catalog
