"""
Content Classifier for Deckflow
===============================

Assigns content categories to documents and sections using two independent
signal families:

1. Keyword pass: for each category, count how many distinct keywords from
   its list appear in the text (case-insensitive substring). Reaching the
   keyword threshold adds the category.
2. Structural detectors: regex families that do not depend on the keyword
   lists (numbers and currency, diagram markers, step/phase/date markers,
   list/table/quote/code markers, narrative vocabulary). Each detector that
   crosses its own threshold adds one category.

The primary category of a single block is the first detector to fire in the
order numerical > structural > temporal > organizational > emotional, and
information-organization when none fires. A classified set is never empty.

The classifier is pure: no state is kept between calls and it never raises.

Usage:
    classifier = ContentClassifier()
    classifier.classify_types("売上は50%増加、KPIも達成")   # [NUMERICAL_DATA]
    classifier.primary_type("- item one\\n- item two")      # INFORMATION_ORGANIZATION
"""

import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict

from config.patterns import CONTENT_KEYWORDS
from deckflow.models.content import CONTENT_TYPE_ORDER, ContentType, Section
from deckflow.models.pipeline_config import PipelineConfig
from deckflow.utils.logger import setup_logger

logger = setup_logger(__name__)


class ClassifierKeywords(BaseModel):
    """Immutable keyword lists per content category."""
    model_config = ConfigDict(frozen=True)

    keywords: Dict[ContentType, Tuple[str, ...]]

    @classmethod
    def default(cls) -> "ClassifierKeywords":
        return cls.from_mapping(CONTENT_KEYWORDS)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> "ClassifierKeywords":
        return cls(keywords={
            ContentType(content_type): tuple(words)
            for content_type, words in mapping.items()
        })

    def for_type(self, content_type: ContentType) -> Tuple[str, ...]:
        return self.keywords.get(content_type, ())


class ContentClassifier:
    """
    Heuristic content-category classifier.

    Keyword tables are injected; the structural regex families below are
    part of the classifier itself.
    """

    # Numbers, currency and business metrics
    NUMERIC_PATTERNS = [
        re.compile(r'\d+[%％]'),
        re.compile(r'\d+(?:[万億千百十]|\s?(?:million|billion)\b)', re.IGNORECASE),
        re.compile(r'\d+:\d+'),
        re.compile(r'\$\d+|\d+円|\d+ドル'),
        re.compile(r'KPI|ROI|売上|利益|コスト', re.IGNORECASE),
    ]

    # Diagram markers
    STRUCTURAL_PATTERNS = [
        re.compile(r'```mermaid|\bgraph\b|\bflowchart\b|\bdiagrams?\b', re.IGNORECASE),
    ]

    # Step / phase / date / sequencing markers
    TEMPORAL_PATTERNS = [
        re.compile(r'\bstep\s*\d+|ステップ\d+', re.IGNORECASE),
        re.compile(r'\bphase\s*\d+|フェーズ\d+', re.IGNORECASE),
        re.compile(r'\d+年\d+月|\b\d+/\d+\b'),
        re.compile(r'\bbefore\b|\bafter\b|前|後|次に|その後', re.IGNORECASE),
    ]

    # Lists, tables, blockquotes and fenced code
    ORGANIZATIONAL_PATTERNS = [
        re.compile(r'^\s*[-*+]\s+', re.MULTILINE),
        re.compile(r'^\s*\d+\.\s+', re.MULTILINE),
        re.compile(r'^\s*\|.+\|', re.MULTILINE),
        re.compile(r'^\s*>\s+', re.MULTILINE),
        re.compile(r'^\s*```', re.MULTILINE),
    ]

    # Case study / testimonial vocabulary
    EMOTIONAL_PATTERNS = [
        re.compile(r'事例|ケース|体験|ストーリー|成功|失敗|感動'),
        re.compile(r'\bcase stud(?:y|ies)\b|\btestimonials?\b|\bsuccess stor(?:y|ies)\b', re.IGNORECASE),
    ]

    def __init__(
        self,
        keywords: Optional[ClassifierKeywords] = None,
        config: Optional[PipelineConfig] = None
    ):
        self.keywords = keywords or ClassifierKeywords.default()
        self.config = config or PipelineConfig()

        # (type, patterns, threshold) in detector priority order
        self._detectors: List[Tuple[ContentType, Sequence[re.Pattern], int]] = [
            (ContentType.NUMERICAL_DATA, self.NUMERIC_PATTERNS, self.config.numeric_signal_threshold),
            (ContentType.STRUCTURAL_RELATIONSHIP, self.STRUCTURAL_PATTERNS, 1),
            (ContentType.TEMPORAL_FLOW, self.TEMPORAL_PATTERNS, self.config.temporal_signal_threshold),
            (ContentType.INFORMATION_ORGANIZATION, self.ORGANIZATIONAL_PATTERNS, 1),
            (ContentType.EMOTIONAL_EXPERIENTIAL, self.EMOTIONAL_PATTERNS, 1),
        ]

    # =========================================================================
    # Keyword pass
    # =========================================================================

    def keyword_hits(self, text: Optional[str]) -> Dict[ContentType, List[str]]:
        """Distinct keywords found per category."""
        lowered = (text or "").lower()
        hits: Dict[ContentType, List[str]] = {}
        for content_type in CONTENT_TYPE_ORDER:
            seen: Set[str] = set()
            found = []
            for keyword in self.keywords.for_type(content_type):
                key = keyword.lower()
                if key in seen:
                    continue
                seen.add(key)
                if key in lowered:
                    found.append(keyword)
            hits[content_type] = found
        return hits

    def keyword_types(self, text: Optional[str]) -> Set[ContentType]:
        threshold = self.config.keyword_match_threshold
        return {
            content_type
            for content_type, found in self.keyword_hits(text).items()
            if len(found) >= threshold
        }

    # =========================================================================
    # Structural detectors
    # =========================================================================

    def signal_counts(self, text: Optional[str]) -> Dict[ContentType, int]:
        """Total regex matches per detector family."""
        text = text or ""
        return {
            content_type: sum(len(pattern.findall(text)) for pattern in patterns)
            for content_type, patterns, _ in self._detectors
        }

    def detect_signal(self, text: Optional[str]) -> Optional[ContentType]:
        """First detector to cross its threshold, in priority order, or None."""
        counts = self.signal_counts(text)
        for content_type, _, threshold in self._detectors:
            if counts[content_type] >= threshold:
                return content_type
        return None

    def primary_type(self, text: Optional[str]) -> ContentType:
        return self.detect_signal(text) or ContentType.INFORMATION_ORGANIZATION

    # =========================================================================
    # Classification
    # =========================================================================

    def classify_types(self, text: Optional[str]) -> List[ContentType]:
        """Content types exhibited by one block of text. Never empty."""
        found = self.keyword_types(text)
        signal = self.detect_signal(text)
        if signal is not None:
            found.add(signal)
        return self._ordered(found)

    def classify_document(self, sections: Sequence[Section]) -> List[ContentType]:
        """Union of section classifications. Never empty."""
        found: Set[ContentType] = set()
        for section in sections:
            found |= self.keyword_types(section.text)
            signal = self.detect_signal(section.content)
            if signal is not None:
                found.add(signal)

        result = self._ordered(found)
        logger.debug(f"Document classified as {[t.value for t in result]} from {len(sections)} sections")
        return result

    def classify_section(self, section: Section) -> Section:
        """Copy of the section with its primary content type set."""
        return section.model_copy(update={"content_type": self.primary_type(section.content)})

    def explain(self, text: Optional[str]) -> Dict[str, object]:
        """Signals behind a classification, for debugging and rationale text."""
        return {
            "keyword_hits": {t.value: hits for t, hits in self.keyword_hits(text).items() if hits},
            "signal_counts": {t.value: n for t, n in self.signal_counts(text).items() if n},
            "primary_type": self.primary_type(text).value,
            "types": [t.value for t in self.classify_types(text)],
        }

    @staticmethod
    def _ordered(found: Set[ContentType]) -> List[ContentType]:
        if not found:
            return [ContentType.INFORMATION_ORGANIZATION]
        return [t for t in CONTENT_TYPE_ORDER if t in found]
