"""
Idea Analysis for Deckflow
==========================

Stage 1 handler. Reads the idea/approach document and extracts:

- principles, from the "basic approach" section and from sections about
  improvement or communication
- which evaluation perspectives the document covers (technical, business,
  user experience)
- the evaluation criteria vocabulary the document uses
- the document's content type set

Source documents are usually Japanese; every marker list also carries the
English equivalent.
"""

from typing import List, Optional, Sequence, Tuple

from deckflow.core.content_classifier import ContentClassifier
from deckflow.models.content import DocumentRecord, Section
from deckflow.models.processing import (
    EvaluationCriteria,
    IdeaAnalysis,
    Principle,
    ThinkingFramework,
)
from deckflow.utils.logger import setup_logger

logger = setup_logger(__name__)


BASIC_SECTION_MARKERS = ("基本姿勢", "基本", "basic approach", "principles")
EVALUATION_SECTION_MARKERS = ("評価", "観点", "evaluation", "perspective")

# (markers in the basic approach section, principle)
BASIC_PRINCIPLES: List[Tuple[Tuple[str, ...], Principle]] = [
    (
        ("効率性", "実用性", "efficiency", "practical"),
        Principle(
            name="Efficiency and practicality",
            description="Prefer ideas that can be implemented and solve a real problem, weighing feasibility against return on investment",
            category="efficiency",
            importance=9
        ),
    ),
    (
        ("批判的思考", "批判", "critical thinking", "critique"),
        Principle(
            name="Critical thinking",
            description="Challenge each idea constructively and surface problems and constraints early",
            category="critical-thinking",
            importance=8
        ),
    ),
    (
        ("構造化", "ワークフロー", "structured", "workflow"),
        Principle(
            name="Structured approach",
            description="Break ideas down into implementable pieces through a staged, plan-driven workflow",
            category="structured-approach",
            importance=9
        ),
    ),
]

# (markers in any section title, principle)
TITLE_PRINCIPLES: List[Tuple[Tuple[str, ...], Principle]] = [
    (
        ("改善", "イテレーション", "improvement", "iteration"),
        Principle(
            name="Continuous improvement",
            description="Iterate on feedback and verify and adjust after implementation",
            category="structured-approach",
            importance=7
        ),
    ),
    (
        ("コミュニケーション", "communication"),
        Principle(
            name="Collaborative communication",
            description="Discuss actively with the team and explain at the level each stakeholder needs",
            category="structured-approach",
            importance=6
        ),
    ),
]

FRAMEWORK_MARKERS = {
    "technical": ("技術的側面", "技術", "technical"),
    "business": ("ビジネス的側面", "ビジネス", "business"),
    "user_experience": ("ユーザー体験", "ux", "user experience"),
}

# (markers, criterion label) per criteria group
CRITERIA_VOCABULARY = {
    "technical": [
        (("実現可能性", "feasibility"), "feasibility"),
        (("拡張性", "scalability"), "scalability"),
        (("保守性", "maintainability"), "maintainability"),
        (("パフォーマンス", "performance"), "performance"),
        (("技術スタック", "tech stack"), "tech stack fit"),
        (("セキュリティ", "security"), "security"),
    ],
    "business": [
        (("価値提供", "value proposition"), "value proposition"),
        (("差別化", "differentiation"), "differentiation"),
        (("実装コスト", "コスト", "cost"), "implementation cost"),
        (("リスク", "risk"), "risk management"),
        (("roi", "投資対効果"), "return on investment"),
        (("市場", "market"), "market fit"),
    ],
    "user_experience": [
        (("使いやすさ", "ユーザビリティ", "usability"), "usability"),
        (("アクセシビリティ", "accessibility"), "accessibility"),
        (("信頼性", "reliability"), "reliability"),
        (("学習コスト", "learning curve"), "learning cost"),
        (("直感的", "intuitive"), "intuitiveness"),
    ],
}


def _contains_any(text: str, markers: Sequence[str]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


class IdeaAnalyzer:
    """Extracts principles and evaluation criteria from the idea document."""

    def __init__(self, classifier: Optional[ContentClassifier] = None):
        self.classifier = classifier or ContentClassifier()

    def analyze(self, document: DocumentRecord) -> IdeaAnalysis:
        analysis = IdeaAnalysis(
            principles=self.extract_principles(document.sections),
            framework=self.extract_framework(document.sections),
            evaluation_criteria=self.extract_criteria(document.sections),
            content_types=self.classifier.classify_document(document.sections)
        )
        logger.info(
            f"Idea analysis: {len(analysis.principles)} principles, "
            f"framework complete={analysis.framework.is_complete}"
        )
        return analysis

    def extract_principles(self, sections: Sequence[Section]) -> List[Principle]:
        principles: List[Principle] = []

        basic = self._find_section(sections, BASIC_SECTION_MARKERS)
        if basic is not None:
            for markers, principle in BASIC_PRINCIPLES:
                if _contains_any(basic.content, markers):
                    principles.append(principle)

        for section in sections:
            for markers, principle in TITLE_PRINCIPLES:
                if _contains_any(section.title, markers) and principle not in principles:
                    principles.append(principle)

        return principles

    def extract_framework(self, sections: Sequence[Section]) -> ThinkingFramework:
        evaluation = self._find_section(sections, EVALUATION_SECTION_MARKERS)
        if evaluation is None:
            return ThinkingFramework()

        return ThinkingFramework(**{
            aspect: _contains_any(evaluation.content, markers)
            for aspect, markers in FRAMEWORK_MARKERS.items()
        })

    def extract_criteria(self, sections: Sequence[Section]) -> EvaluationCriteria:
        found = {group: [] for group in CRITERIA_VOCABULARY}

        for section in sections:
            for group, vocabulary in CRITERIA_VOCABULARY.items():
                for markers, label in vocabulary:
                    if label not in found[group] and _contains_any(section.content, markers):
                        found[group].append(label)

        return EvaluationCriteria(**found)

    @staticmethod
    def _find_section(sections: Sequence[Section], markers: Sequence[str]) -> Optional[Section]:
        for section in sections:
            if _contains_any(section.title, markers):
                return section
        return None
