"""
Flow Optimizer for Deckflow
===========================

Rewrites section-to-pattern mappings for the deck as a whole. Three passes
run in a fixed order:

1. Variety: a pattern used by more than ceil(N / VARIETY_DIVISOR) mappings
   is swapped out for the mapping's first alternative that is still below
   that cap.
2. Compatibility: when the next mapping's pattern is not a compatible
   follower of the current one, the next mapping swaps to its first
   alternative that is compatible, below the variety cap, and keeps any
   compatible link with its own successor intact.
3. Complexity: when mean complexity exceeds COMPLEXITY_CEILING, every
   mapping above COMPLEXITY_SWAP_THRESHOLD swaps to its first strictly
   simpler alternative that is below the variety cap and breaks no
   compatible neighbour link.

Every pass is a pure function from the old mapping list to a new one. A swap
only ever picks from the mapping's own alternatives; the previous selection
moves into the alternatives and confidence is recomputed from the stored
section scores.

The passes repeat as a round until a round makes no swap. Each swap lowers
(variety excess, incompatible links, total complexity) lexicographically,
so the rounds reach a fixed point and optimize(optimize(x)) == optimize(x).
"""

import math
from collections import Counter
from typing import Callable, List, Optional, Sequence, Tuple

from deckflow.core.pattern_catalog import PatternCatalog
from deckflow.core.pattern_selector import PatternSelector
from deckflow.models.patterns import Pattern, PatternMapping
from deckflow.models.pipeline_config import PipelineConfig
from deckflow.utils.logger import setup_logger

logger = setup_logger(__name__)

VARIETY_SUFFIX = "(adjusted for pattern variety)"
COMPATIBILITY_SUFFIX = "(adjusted for flow with previous section)"
COMPLEXITY_SUFFIX = "(simplified implementation)"

PassResult = Tuple[List[PatternMapping], int]


class FlowOptimizer:
    """Deck-level variety, compatibility and complexity balancing."""

    def __init__(
        self,
        catalog: Optional[PatternCatalog] = None,
        complexity_fn: Optional[Callable[[Pattern], int]] = None,
        config: Optional[PipelineConfig] = None
    ):
        self.catalog = catalog or PatternCatalog.default()
        self.complexity_fn = complexity_fn or PatternSelector.estimate_complexity
        self.config = config or PipelineConfig()

    def variety_cap(self, total: int) -> int:
        return math.ceil(total / self.config.variety_divisor)

    # =========================================================================
    # Entry point
    # =========================================================================

    def optimize(self, mappings: Sequence[PatternMapping]) -> List[PatternMapping]:
        """Run optimization rounds until no pass swaps anything."""
        current = list(mappings)
        if len(current) == 0:
            return current

        for round_number in range(1, self.config.max_optimization_rounds + 1):
            current, variety_swaps = self._variety_pass(current)
            current, compatibility_swaps = self._compatibility_pass(current)
            current, complexity_swaps = self._complexity_pass(current)

            swaps = variety_swaps + compatibility_swaps + complexity_swaps
            logger.debug(
                f"Optimization round {round_number}: variety={variety_swaps}, "
                f"compatibility={compatibility_swaps}, complexity={complexity_swaps}"
            )
            if swaps == 0:
                return current

        logger.warning(
            f"Flow optimization stopped after {self.config.max_optimization_rounds} rounds "
            f"without reaching a fixed point"
        )
        return current

    def enforce_variety(self, mappings: Sequence[PatternMapping]) -> List[PatternMapping]:
        return self._variety_pass(list(mappings))[0]

    def repair_compatibility(self, mappings: Sequence[PatternMapping]) -> List[PatternMapping]:
        return self._compatibility_pass(list(mappings))[0]

    def balance_complexity(self, mappings: Sequence[PatternMapping]) -> List[PatternMapping]:
        return self._complexity_pass(list(mappings))[0]

    # =========================================================================
    # Measurements
    # =========================================================================

    def usage(self, mappings: Sequence[PatternMapping]) -> Counter:
        return Counter(m.selected_pattern.id for m in mappings)

    def variety_excess(self, mappings: Sequence[PatternMapping]) -> int:
        cap = self.variety_cap(len(mappings))
        return sum(max(0, count - cap) for count in self.usage(mappings).values())

    def incompatible_links(self, mappings: Sequence[PatternMapping]) -> int:
        return sum(
            1 for current, following in zip(mappings, mappings[1:])
            if not self._compatible(current.selected_pattern, following.selected_pattern)
        )

    def mean_complexity(self, mappings: Sequence[PatternMapping]) -> float:
        if not mappings:
            return 0.0
        return sum(self.complexity_fn(m.selected_pattern) for m in mappings) / len(mappings)

    # =========================================================================
    # Passes
    # =========================================================================

    def _variety_pass(self, mappings: List[PatternMapping]) -> PassResult:
        cap = self.variety_cap(len(mappings))
        usage = self.usage(mappings)
        result: List[PatternMapping] = []
        swaps = 0

        for mapping in mappings:
            current_id = mapping.selected_pattern.id
            if usage[current_id] > cap:
                replacement = next(
                    (alt for alt in mapping.alternatives if usage[alt.id] < cap),
                    None
                )
                if replacement is not None:
                    usage[current_id] -= 1
                    usage[replacement.id] += 1
                    mapping = self._swap(mapping, replacement, VARIETY_SUFFIX)
                    swaps += 1
            result.append(mapping)

        return result, swaps

    def _compatibility_pass(self, mappings: List[PatternMapping]) -> PassResult:
        result = list(mappings)
        cap = self.variety_cap(len(result))
        usage = self.usage(result)
        swaps = 0

        for index in range(len(result) - 1):
            current = result[index].selected_pattern
            following = result[index + 1]
            if self._compatible(current, following.selected_pattern):
                continue

            successor = result[index + 2].selected_pattern if index + 2 < len(result) else None
            keep_successor_link = successor is not None and self._compatible(following.selected_pattern, successor)

            replacement = next(
                (
                    alt for alt in following.alternatives
                    if self._compatible(current, alt)
                    and usage[alt.id] < cap
                    and not (keep_successor_link and not self._compatible(alt, successor))
                ),
                None
            )
            if replacement is None:
                continue

            usage[following.selected_pattern.id] -= 1
            usage[replacement.id] += 1
            result[index + 1] = self._swap(following, replacement, COMPATIBILITY_SUFFIX)
            swaps += 1

        return result, swaps

    def _complexity_pass(self, mappings: List[PatternMapping]) -> PassResult:
        if self.mean_complexity(mappings) <= self.config.complexity_ceiling:
            return list(mappings), 0

        result = list(mappings)
        cap = self.variety_cap(len(result))
        usage = self.usage(result)
        swaps = 0

        for index, mapping in enumerate(result):
            complexity = self.complexity_fn(mapping.selected_pattern)
            if complexity <= self.config.complexity_swap_threshold:
                continue

            previous = result[index - 1].selected_pattern if index > 0 else None
            following = result[index + 1].selected_pattern if index + 1 < len(result) else None

            replacement = next(
                (
                    alt for alt in mapping.alternatives
                    if self.complexity_fn(alt) < complexity
                    and usage[alt.id] < cap
                    and self._keeps_links(previous, mapping.selected_pattern, alt, following)
                ),
                None
            )
            if replacement is None:
                continue

            usage[mapping.selected_pattern.id] -= 1
            usage[replacement.id] += 1
            result[index] = self._swap(mapping, replacement, COMPLEXITY_SUFFIX)
            swaps += 1

        return result, swaps

    # =========================================================================
    # Helpers
    # =========================================================================

    def _compatible(self, current: Pattern, following: Pattern) -> bool:
        return self.catalog.is_compatible(current.id, following.id)

    def _keeps_links(
        self,
        previous: Optional[Pattern],
        old: Pattern,
        new: Pattern,
        following: Optional[Pattern]
    ) -> bool:
        """A replacement must not break a link that is compatible today."""
        if previous is not None and self._compatible(previous, old) and not self._compatible(previous, new):
            return False
        if following is not None and self._compatible(old, following) and not self._compatible(new, following):
            return False
        return True

    def _swap(self, mapping: PatternMapping, replacement: Pattern, suffix: str) -> PatternMapping:
        """New mapping with `replacement` selected and the old pick demoted to an alternative."""
        scores = mapping.scores

        def rank_key(pattern: Pattern):
            return (-scores.get(pattern.id, float("-inf")), self.catalog.index_of(pattern.id))

        alternatives = [alt for alt in mapping.alternatives if alt.id != replacement.id]
        alternatives.append(mapping.selected_pattern)
        alternatives.sort(key=rank_key)

        confidence = mapping.confidence
        if replacement.id in scores:
            runner_up = scores.get(alternatives[0].id) if alternatives else None
            confidence = PatternSelector.compute_confidence(scores[replacement.id], runner_up)

        logger.debug(f"{mapping.section_id}: {mapping.selected_pattern.id} -> {replacement.id} {suffix}")

        return mapping.model_copy(update={
            "selected_pattern": replacement,
            "alternatives": alternatives,
            "confidence": confidence,
            "rationale": f"{mapping.rationale} {suffix}".strip(),
        })
