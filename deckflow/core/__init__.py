"""
Core Module for Deckflow

Classification, pattern selection, flow optimization, slide segmentation,
the stage handlers and the pipeline orchestrator.
"""

from .errors import PipelineError, MissingInputError, StageAbortedError, EmissionError
from .content_classifier import ContentClassifier, ClassifierKeywords
from .pattern_catalog import PatternCatalog
from .pattern_selector import PatternSelector
from .flow_optimizer import FlowOptimizer
from .slide_segmenter import SlideSegmenter
from .idea_analysis import IdeaAnalyzer
from .draft_structure import DraftStructureBuilder
from .pipeline import (
    PipelineOrchestrator,
    PipelineResult,
    StageOutcome,
    STAGE_SEQUENCE,
    quality_score
)

__all__ = [
    # Errors
    'PipelineError',
    'MissingInputError',
    'StageAbortedError',
    'EmissionError',

    # Classification and patterns
    'ContentClassifier',
    'ClassifierKeywords',
    'PatternCatalog',
    'PatternSelector',
    'FlowOptimizer',

    # Slides
    'SlideSegmenter',

    # Stage handlers
    'IdeaAnalyzer',
    'DraftStructureBuilder',

    # Orchestration
    'PipelineOrchestrator',
    'PipelineResult',
    'StageOutcome',
    'STAGE_SEQUENCE',
    'quality_score',
]
