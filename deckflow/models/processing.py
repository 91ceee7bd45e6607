"""
Processing Models for Deckflow
==============================

Status, issue and report records for the staged pipeline, plus the
immutable per-stage outputs accumulated in ProcessedContent.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from deckflow.models.content import ContentType, ProcessingStage, TOCItem
from deckflow.models.patterns import PresentationMapping
from deckflow.models.slides import SlideStructure


class ErrorCode(str, Enum):
    """Error kinds. Codes are stable; message text is not."""
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    INVALID_FILE_ORDER = "INVALID_FILE_ORDER"
    CORRUPTED_CONTENT = "CORRUPTED_CONTENT"
    ENCODING_ERROR = "ENCODING_ERROR"
    INVALID_MARKDOWN = "INVALID_MARKDOWN"
    MISSING_REQUIRED_ELEMENTS = "MISSING_REQUIRED_ELEMENTS"
    CONTENT_TOO_LONG = "CONTENT_TOO_LONG"
    PATTERN_SELECTION_FAILED = "PATTERN_SELECTION_FAILED"
    SEGMENTATION_FAILED = "SEGMENTATION_FAILED"
    EMISSION_FAILED = "EMISSION_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"


class ProcessingError(BaseModel):
    stage: ProcessingStage
    code: ErrorCode
    message: str
    context: Optional[Dict[str, Any]] = None
    recoverable: bool = Field(
        False,
        description="True when the stage still produced output despite the error"
    )


class ProcessingWarning(BaseModel):
    stage: ProcessingStage
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None


class ProcessingStatus(BaseModel):
    """Snapshot of a run, safe to hand to another thread."""
    current_stage: ProcessingStage = ProcessingStage.IDEA_ANALYSIS
    progress: int = Field(0, ge=0, le=100)
    errors: List[ProcessingError] = Field(default_factory=list)
    warnings: List[ProcessingWarning] = Field(default_factory=list)
    estimated_time_remaining: int = Field(0, ge=0, description="Seconds")
    completed: bool = False
    aborted: bool = False


class ValidationIssue(BaseModel):
    code: str
    message: str
    severity: Literal["error", "warning"] = "error"
    file: Optional[str] = None


class ValidationResult(BaseModel):
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


# ===== Stage 1: idea analysis =====

class Principle(BaseModel):
    name: str
    description: str
    category: Literal["efficiency", "critical-thinking", "structured-approach"]
    importance: int = Field(..., ge=1, le=10)


class EvaluationCriteria(BaseModel):
    technical: List[str] = Field(default_factory=list)
    business: List[str] = Field(default_factory=list)
    user_experience: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.technical or self.business or self.user_experience)


class ThinkingFramework(BaseModel):
    """Which evaluation perspectives the source document covers."""
    technical: bool = False
    business: bool = False
    user_experience: bool = False

    @property
    def is_complete(self) -> bool:
        return self.technical or self.business or self.user_experience


class IdeaAnalysis(BaseModel):
    principles: List[Principle] = Field(default_factory=list)
    framework: ThinkingFramework = Field(default_factory=ThinkingFramework)
    evaluation_criteria: EvaluationCriteria = Field(default_factory=EvaluationCriteria)
    content_types: List[ContentType] = Field(default_factory=list)


# ===== Stage 2: draft structure =====

class DiscussionScope(BaseModel):
    included: List[str] = Field(default_factory=list)
    excluded: List[str] = Field(default_factory=list)


class SectionRelationship(BaseModel):
    from_section: str
    to_section: str
    relationship: Literal["prerequisite", "builds-on", "contrasts-with", "supports"]


class OverviewStatement(BaseModel):
    section_id: str
    statement: str
    core_message: str
    generated: bool = False


class TimePhase(BaseModel):
    name: str
    minutes: int
    activities: List[str] = Field(default_factory=list)


class DraftStructure(BaseModel):
    title: str
    table_of_contents: List[TOCItem] = Field(default_factory=list)
    discussion_scope: DiscussionScope = Field(default_factory=DiscussionScope)
    summary: str = ""
    section_ids: List[str] = Field(default_factory=list)
    relationships: List[SectionRelationship] = Field(default_factory=list)
    overview_statements: List[OverviewStatement] = Field(default_factory=list)
    total_minutes: int = 80
    phases: List[TimePhase] = Field(default_factory=list)


class DraftValidation(BaseModel):
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    completeness: int = Field(0, ge=0, le=100)

    @property
    def is_valid(self) -> bool:
        return not self.issues


# ===== Stage 5: emission =====

class EmissionResult(BaseModel):
    format: str = "marp"
    content: str = ""
    slide_count: int = 0
    estimated_minutes: int = 0


# ===== Accumulated run content =====

class ProcessedContent(BaseModel):
    """
    Evolving record of a run. Each stage returns a new copy with its own
    output filled in; earlier outputs are never mutated.
    """
    run_id: str
    title: str = "Processed Content"
    created: datetime = Field(default_factory=datetime.now)
    last_completed_stage: Optional[ProcessingStage] = None
    idea_analysis: Optional[IdeaAnalysis] = None
    draft_structure: Optional[DraftStructure] = None
    presentation_mapping: Optional[PresentationMapping] = None
    slide_structure: Optional[SlideStructure] = None
    output: Optional[EmissionResult] = None


class ReportSummary(BaseModel):
    total_slides: int = 0
    total_minutes: int = 0
    principles_applied: int = 0
    patterns_used: int = 0
    processing_seconds: float = 0.0
    quality_score: int = Field(0, ge=0, le=100)


StageState = Literal["completed", "failed", "skipped"]


class ProcessingReport(BaseModel):
    summary: ReportSummary
    stages: Dict[str, StageState] = Field(default_factory=dict)
    errors: List[ProcessingError] = Field(default_factory=list)
    warnings: List[ProcessingWarning] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
