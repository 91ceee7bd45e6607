"""
Models Package for Deckflow

Pydantic models for documents, patterns, slides and pipeline processing state.
"""

from .content import (
    ContentType,
    CONTENT_TYPE_ORDER,
    ProcessingStage,
    Section,
    DocumentMetadata,
    TOCItem,
    DocumentRecord
)

from .patterns import (
    Pattern,
    PatternMapping,
    PresentationMapping,
    SelectionResult,
    PatternReport
)

from .slides import (
    LayoutPattern,
    SlideKind,
    ComplexityTier,
    LayoutDefinition,
    StyleDefinition,
    ContentSubsection,
    ContentAnalysis,
    SlideDefinition,
    SlideStructure
)

from .processing import (
    ErrorCode,
    ProcessingError,
    ProcessingWarning,
    ProcessingStatus,
    ValidationIssue,
    ValidationResult,
    Principle,
    EvaluationCriteria,
    ThinkingFramework,
    IdeaAnalysis,
    DiscussionScope,
    SectionRelationship,
    OverviewStatement,
    TimePhase,
    DraftStructure,
    DraftValidation,
    EmissionResult,
    ProcessedContent,
    ReportSummary,
    ProcessingReport
)

from .pipeline_config import PipelineConfig

__all__ = [
    # Documents
    'ContentType',
    'CONTENT_TYPE_ORDER',
    'ProcessingStage',
    'Section',
    'DocumentMetadata',
    'TOCItem',
    'DocumentRecord',

    # Patterns
    'Pattern',
    'PatternMapping',
    'PresentationMapping',
    'SelectionResult',
    'PatternReport',

    # Slides
    'LayoutPattern',
    'SlideKind',
    'ComplexityTier',
    'LayoutDefinition',
    'StyleDefinition',
    'ContentSubsection',
    'ContentAnalysis',
    'SlideDefinition',
    'SlideStructure',

    # Processing
    'ErrorCode',
    'ProcessingError',
    'ProcessingWarning',
    'ProcessingStatus',
    'ValidationIssue',
    'ValidationResult',
    'Principle',
    'EvaluationCriteria',
    'ThinkingFramework',
    'IdeaAnalysis',
    'DiscussionScope',
    'SectionRelationship',
    'OverviewStatement',
    'TimePhase',
    'DraftStructure',
    'DraftValidation',
    'EmissionResult',
    'ProcessedContent',
    'ReportSummary',
    'ProcessingReport',

    # Tuning
    'PipelineConfig'
]
