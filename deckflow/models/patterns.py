"""
Pattern Models for Deckflow
===========================

Presentation patterns from the catalog and the section-to-pattern mappings
produced by the selector and rewritten by the flow optimizer.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from config.patterns import COMPLEXITY_HINTS
from deckflow.models.content import ContentType


def estimate_template_complexity(template: str) -> int:
    """Sum the weights of markup hints found in a Marp template (case-insensitive)."""
    lowered = template.lower()
    return sum(weight for hint, weight in COMPLEXITY_HINTS if hint in lowered)


class Pattern(BaseModel):
    """A reusable visual template for one content category. Immutable."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Catalog identifier, e.g. 'number-emphasis'")
    name: str = Field(..., description="Display name")
    category: ContentType = Field(..., description="Primary content category")
    description: str = Field("", description="When to use this pattern")
    use_cases: List[str] = Field(default_factory=list, description="Example use-case phrases")
    template: str = Field("", description="Marp implementation snippet")
    effectiveness: int = Field(..., ge=1, le=10, description="Higher is more persuasive")
    complexity: int = Field(0, ge=0, description="Implementation complexity hint, derived from the template when omitted")

    @model_validator(mode="before")
    @classmethod
    def _derive_complexity(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("complexity") is None:
            data = {**data, "complexity": estimate_template_complexity(data.get("template") or "")}
        return data


class PatternMapping(BaseModel):
    """
    Assignment of one selected pattern to one document section.

    `scores` keeps the section-level score of the selected pattern and every
    alternative so confidence can be recomputed after a swap.
    """
    section_id: str
    selected_pattern: Pattern
    rationale: str = ""
    alternatives: List[Pattern] = Field(default_factory=list)
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    scores: Dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _selected_not_in_alternatives(self) -> "PatternMapping":
        if any(alt.id == self.selected_pattern.id for alt in self.alternatives):
            raise ValueError(
                f"Selected pattern '{self.selected_pattern.id}' also listed as an alternative "
                f"for {self.section_id}"
            )
        return self


class PresentationMapping(BaseModel):
    """Stage 3 output: document content types, selected patterns and per-section mappings."""
    content_types: List[ContentType] = Field(default_factory=list)
    selected_patterns: List[Pattern] = Field(default_factory=list)
    pattern_mappings: List[PatternMapping] = Field(default_factory=list)

    def mapping_for(self, section_id: str) -> Optional[PatternMapping]:
        for mapping in self.pattern_mappings:
            if mapping.section_id == section_id:
                return mapping
        return None


class SelectionResult(BaseModel):
    """Selector output plus the sections that could not be mapped."""
    mapping: PresentationMapping
    unmapped_section_ids: List[str] = Field(default_factory=list)


class PatternReport(BaseModel):
    """Human-readable summary of a pattern selection."""
    summary: str
    content_type_distribution: Dict[str, int] = Field(default_factory=dict)
    pattern_effectiveness: Dict[str, int] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    implementation_notes: List[str] = Field(default_factory=list)
