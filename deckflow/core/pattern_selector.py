"""
Pattern Selector for Deckflow
=============================

Scores catalog patterns against a classified document and its sections.

Score for a (pattern, text, content type) triple:

    effectiveness * W_effectiveness
  + [pattern.category == type] * CATEGORY_MATCH_BONUS * W_category_match
  + use_case_hits * USE_CASE_MATCH_BONUS * W_use_case_relevance
  - complexity * W_complexity
  + content-fit bonus (pattern-specific heuristics)

Document level: for every detected content type, rank that category's
patterns against the whole document, take the top N per type and
deduplicate. When a category has candidates but none scores positively its
fallback list is ranked instead.

Section level: rank every selected pattern against the section text using
the section's primary type. Rank 0 is selected, ranks 1..3 become
alternatives. Ties break by catalog order.
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from deckflow.core.content_classifier import ContentClassifier
from deckflow.core.pattern_catalog import PatternCatalog
from deckflow.models.content import ContentType, DocumentRecord, Section
from deckflow.models.patterns import (
    Pattern,
    PatternMapping,
    PatternReport,
    PresentationMapping,
    SelectionResult,
)
from deckflow.models.pipeline_config import PipelineConfig
from deckflow.utils.logger import setup_logger

logger = setup_logger(__name__)

FENCED_BLOCK = re.compile(r'```[\s\S]*?```')

# Pattern id -> (vocabulary regex, bonus per hit)
FIT_VOCABULARY: Dict[str, Tuple[re.Pattern, float]] = {
    "number-emphasis": (re.compile(r'\d+[%億万円]'), 2.0),
    "steps": (re.compile(r'ステップ|手順|段階|\bsteps?\b|\bprocedure\b'), 2.0),
    "timeline": (re.compile(r'時系列|タイムライン|履歴|\btimeline\b|\bhistory\b'), 2.0),
    "photo-visual": (re.compile(r'画像|写真|図|ビジュアル|\bphoto\b|\bimage\b|\bvisual\b'), 2.0),
    "storytelling": (re.compile(r'事例|ストーリー|体験|物語|\bstory\b|\bcase study\b'), 2.0),
    "checklist": (re.compile(r'チェック|確認|要件|項目|\bchecklist\b|\brequirements?\b'), 1.5),
}

COMPARISON_MARKERS = re.compile(r'\bvs\.?(?=\W|$)|\bversus\b|比較|対比')
COMPARISON_BONUS = 5.0
TABLE_BONUS = 3.0

RATIONALE_BY_TYPE = {
    ContentType.NUMERICAL_DATA: "section carries numeric data",
    ContentType.STRUCTURAL_RELATIONSHIP: "section describes structure or relationships",
    ContentType.TEMPORAL_FLOW: "section walks through steps or a sequence",
    ContentType.INFORMATION_ORGANIZATION: "section organizes information as lists or tables",
    ContentType.EMOTIONAL_EXPERIENTIAL: "section draws on cases or experiences",
}
GENERIC_RATIONALE = "general fit between the content and this presentation style"


class PatternSelector:
    """Scores patterns and builds per-section pattern mappings."""

    def __init__(
        self,
        catalog: Optional[PatternCatalog] = None,
        classifier: Optional[ContentClassifier] = None,
        config: Optional[PipelineConfig] = None
    ):
        self.config = config or PipelineConfig()
        self.catalog = catalog or PatternCatalog.default()
        self.classifier = classifier or ContentClassifier(config=self.config)

    # =========================================================================
    # Scoring
    # =========================================================================

    @staticmethod
    def estimate_complexity(pattern: Pattern) -> int:
        """Implementation complexity hint (derived from the template unless set explicitly)."""
        return pattern.complexity

    @staticmethod
    def use_case_hits(pattern: Pattern, lowered_text: str) -> List[str]:
        return [uc for uc in pattern.use_cases if uc.lower() in lowered_text]

    @staticmethod
    def content_fit(pattern: Pattern, lowered_text: str, code_block_count: int = 0) -> float:
        """Pattern-specific bonus from content actually present in the text."""
        if pattern.id == "comparison":
            return COMPARISON_BONUS if COMPARISON_MARKERS.search(lowered_text) else 0.0
        if pattern.id == "table":
            return TABLE_BONUS if code_block_count > 0 or "|" in lowered_text else 0.0
        if pattern.id in FIT_VOCABULARY:
            vocabulary, per_hit = FIT_VOCABULARY[pattern.id]
            return len(vocabulary.findall(lowered_text)) * per_hit
        return 0.0

    def score(
        self,
        pattern: Pattern,
        text: str,
        content_type: ContentType,
        code_block_count: int = 0
    ) -> float:
        cfg = self.config
        lowered = text.lower()

        score = pattern.effectiveness * cfg.weight_effectiveness
        if pattern.category == content_type:
            score += cfg.category_match_bonus * cfg.weight_category_match
        score += len(self.use_case_hits(pattern, lowered)) * cfg.use_case_match_bonus * cfg.weight_use_case_relevance
        score -= self.estimate_complexity(pattern) * cfg.weight_complexity
        score += self.content_fit(pattern, lowered, code_block_count)
        return score

    def rank(
        self,
        patterns: Sequence[Pattern],
        text: str,
        content_type: ContentType,
        code_block_count: int = 0
    ) -> List[Tuple[Pattern, float]]:
        """Patterns with scores, best first; catalog order breaks ties."""
        scored = [(p, self.score(p, text, content_type, code_block_count)) for p in patterns]
        scored.sort(key=lambda item: (-item[1], self.catalog.index_of(item[0].id)))
        return scored

    # =========================================================================
    # Document-level selection
    # =========================================================================

    def select_patterns(
        self,
        document_text: str,
        content_types: Sequence[ContentType],
        code_block_count: int = 0
    ) -> List[Pattern]:
        """Top patterns per content type, deduplicated in first-seen order."""
        selected: List[Pattern] = []
        seen = set()

        for content_type in content_types:
            candidates = self.catalog.by_category(content_type)
            if not candidates:
                logger.debug(f"No catalog patterns for {content_type.value}")
                continue

            ranked = self.rank(candidates, document_text, content_type, code_block_count)
            if not any(score > 0 for _, score in ranked):
                logger.info(f"No positive score for {content_type.value}, using fallback patterns")
                ranked = self.rank(self.catalog.fallbacks(content_type), document_text, content_type, code_block_count)

            for pattern, score in ranked[:self.config.patterns_per_type]:
                if pattern.id in seen:
                    continue
                seen.add(pattern.id)
                selected.append(pattern)
                logger.debug(f"Selected {pattern.id} for {content_type.value} (score={score:.2f})")

        return selected

    # =========================================================================
    # Section-level mapping
    # =========================================================================

    @staticmethod
    def compute_confidence(top_score: float, runner_up: Optional[float]) -> float:
        """Relative margin of the winner over the runner-up, in [0, 1]."""
        if runner_up is None:
            return 1.0
        if top_score <= 0:
            return 0.0
        margin = (top_score - runner_up) / top_score
        return round(max(0.0, min(1.0, margin)), 2)

    def build_rationale(self, section: Section, pattern: Pattern, section_type: ContentType) -> str:
        reasons = []
        if pattern.category == section_type:
            reasons.append(RATIONALE_BY_TYPE[section_type])

        hits = self.use_case_hits(pattern, section.text.lower())
        if hits:
            reasons.append(f"matches use cases: {', '.join(hits)}")

        if not reasons:
            reasons.append(GENERIC_RATIONALE)
        return "; ".join(reasons)

    def map_section(self, section: Section, selected: Sequence[Pattern]) -> Optional[PatternMapping]:
        """Mapping for one section, or None when nothing could be scored."""
        if not selected:
            return None

        section_type = self.classifier.primary_type(section.content)
        code_blocks = len(FENCED_BLOCK.findall(section.content))
        ranked = self.rank(selected, section.text, section_type, code_blocks)

        best, best_score = ranked[0]
        alternatives = ranked[1:1 + self.config.max_alternatives]
        runner_up = alternatives[0][1] if alternatives else None

        return PatternMapping(
            section_id=section.id,
            selected_pattern=best,
            rationale=self.build_rationale(section, best, section_type),
            alternatives=[pattern for pattern, _ in alternatives],
            confidence=self.compute_confidence(best_score, runner_up),
            scores={pattern.id: round(score, 4) for pattern, score in ranked[:1 + self.config.max_alternatives]}
        )

    def map_sections(
        self,
        sections: Sequence[Section],
        selected: Sequence[Pattern]
    ) -> Tuple[List[PatternMapping], List[str]]:
        """Mappings in document order, plus ids of sections left unmapped."""
        mappings: List[PatternMapping] = []
        unmapped: List[str] = []

        for section in sections:
            mapping = self.map_section(section, selected)
            if mapping is None:
                unmapped.append(section.id)
                continue
            logger.debug(
                f"{section.id} -> {mapping.selected_pattern.id} "
                f"(confidence={mapping.confidence}, alternatives={[p.id for p in mapping.alternatives]})"
            )
            mappings.append(mapping)

        return mappings, unmapped

    def select(self, document: DocumentRecord) -> SelectionResult:
        """Classify the document, pick patterns and map every section."""
        content_types = self.classifier.classify_document(document.sections)
        selected = self.select_patterns(document.text, content_types, document.metadata.code_block_count)
        mappings, unmapped = self.map_sections(document.sections, selected)

        logger.info(
            f"Pattern selection: {len(content_types)} content types, {len(selected)} patterns, "
            f"{len(mappings)}/{len(document.sections)} sections mapped"
        )

        return SelectionResult(
            mapping=PresentationMapping(
                content_types=content_types,
                selected_patterns=selected,
                pattern_mappings=mappings
            ),
            unmapped_section_ids=unmapped
        )

    # =========================================================================
    # Report
    # =========================================================================

    def build_report(self, mapping: PresentationMapping) -> PatternReport:
        """Summary, distribution, warnings and implementation notes for a selection."""
        mappings = mapping.pattern_mappings
        total = len(mappings)
        unique = len({m.selected_pattern.id for m in mappings})
        avg_confidence = sum(m.confidence for m in mappings) / total if total else 0.0

        usage: Dict[str, int] = {}
        for m in mappings:
            usage[m.selected_pattern.id] = usage.get(m.selected_pattern.id, 0) + 1

        warnings = []
        cap = -(-total // self.config.variety_divisor) if total else 0
        overused = [pattern_id for pattern_id, count in usage.items() if count > cap]
        if overused:
            warnings.append(f"Patterns used very often ({', '.join(overused)}); consider more variety.")

        low_confidence = [m for m in mappings if m.confidence < self.config.low_confidence_threshold]
        if low_confidence:
            warnings.append(f"{len(low_confidence)} sections have low pattern confidence; review the alternatives.")

        recommendations = []
        if any(m.selected_pattern.effectiveness >= 8 for m in mappings):
            recommendations.append("High-impact patterns were selected; expect a visually strong deck.")
        if len(mapping.content_types) >= 3:
            recommendations.append("Several content types detected; the deck has a balanced mix.")

        notes = []
        for m in mappings:
            pattern = m.selected_pattern
            template = pattern.template.lower()
            if "mermaid" in template:
                notes.append(f"{pattern.name}: needs a Mermaid diagram")
            if "grid" in template:
                notes.append(f"{pattern.name}: needs a CSS grid layout")
            if "![bg]" in template:
                notes.append(f"{pattern.name}: needs a background image")

        return PatternReport(
            summary=(
                f"Selected {unique} pattern types for {total} sections. "
                f"Average confidence: {avg_confidence * 100:.1f}%"
            ),
            content_type_distribution={
                content_type.value: sum(1 for m in mappings if m.selected_pattern.category == content_type)
                for content_type in mapping.content_types
            },
            pattern_effectiveness={m.selected_pattern.name: m.selected_pattern.effectiveness for m in mappings},
            recommendations=recommendations,
            warnings=warnings,
            implementation_notes=list(dict.fromkeys(notes))
        )
