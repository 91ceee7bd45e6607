"""
Pipeline Orchestrator for Deckflow
==================================

Runs the five stages in order over the five staged source documents:

    1. IDEA_ANALYSIS      principles and evaluation criteria
    2. DRAFT_STRUCTURE    presentation skeleton and its validation
    3. PATTERN_SELECTION  classify, score and optimize section patterns
    4. SLIDE_GENERATION   segment sections into slides
    5. FINAL_EMISSION     render the deck through the injected emitter

The run is a fold over STAGE_SEQUENCE. Each transition takes the previous
ProcessedContent and the stage's document and returns a StageOutcome: a new
ProcessedContent plus the errors and warnings it produced, and whether the
stage failed to produce what the next stage needs. Quality problems are
warnings; a fatal outcome or an unexpected exception aborts the run with
StageAbortedError after the error has been recorded.

Status is kept behind a lock so another thread can poll get_status() while
a run is in progress. Each orchestrator instance owns its own state; use
one instance per concurrent run.

Usage:
    orchestrator = PipelineOrchestrator()
    result = await orchestrator.run(documents)
    report = orchestrator.generate_report()
"""

import threading
import time
import uuid
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from deckflow.core.content_classifier import ContentClassifier
from deckflow.core.draft_structure import DraftStructureBuilder
from deckflow.core.errors import MissingInputError, PipelineError, StageAbortedError
from deckflow.core.flow_optimizer import FlowOptimizer
from deckflow.core.idea_analysis import IdeaAnalyzer
from deckflow.core.pattern_catalog import PatternCatalog
from deckflow.core.pattern_selector import PatternSelector
from deckflow.core.slide_segmenter import SlideSegmenter
from deckflow.models.content import DocumentRecord, ProcessingStage
from deckflow.models.pipeline_config import PipelineConfig
from deckflow.models.processing import (
    EmissionResult,
    ErrorCode,
    ProcessedContent,
    ProcessingError,
    ProcessingReport,
    ProcessingStatus,
    ProcessingWarning,
    ReportSummary,
    ValidationIssue,
    ValidationResult,
)
from deckflow.models.slides import SlideKind
from deckflow.services.marp_emitter import MarpEmitter, SlideEmitter
from deckflow.utils.logger import setup_logger

logger = setup_logger(__name__)


class StageOutcome(BaseModel):
    """Result of one stage transition."""
    content: ProcessedContent
    errors: List[ProcessingError] = Field(default_factory=list)
    warnings: List[ProcessingWarning] = Field(default_factory=list)
    fatal: bool = False


class PipelineResult(BaseModel):
    content: ProcessedContent
    output: EmissionResult
    status: ProcessingStatus


# (stage, progress when the stage starts, transition method name)
STAGE_SEQUENCE: List[Tuple[ProcessingStage, int, str]] = [
    (ProcessingStage.IDEA_ANALYSIS, 15, "_idea_analysis"),
    (ProcessingStage.DRAFT_STRUCTURE, 30, "_draft_structure"),
    (ProcessingStage.PATTERN_SELECTION, 50, "_pattern_selection"),
    (ProcessingStage.SLIDE_GENERATION, 70, "_slide_generation"),
    (ProcessingStage.FINAL_EMISSION, 85, "_final_emission"),
]

START_PROGRESS = 5
STAGE_COUNT = len(STAGE_SEQUENCE)
LONG_BODY_CHARACTERS = 800
MIN_DOCUMENT_CHARACTERS = 100

# Error code recorded when a stage raises unexpectedly
FAILURE_CODES: Dict[ProcessingStage, ErrorCode] = {
    ProcessingStage.IDEA_ANALYSIS: ErrorCode.VALIDATION_FAILED,
    ProcessingStage.DRAFT_STRUCTURE: ErrorCode.VALIDATION_FAILED,
    ProcessingStage.PATTERN_SELECTION: ErrorCode.PATTERN_SELECTION_FAILED,
    ProcessingStage.SLIDE_GENERATION: ErrorCode.SEGMENTATION_FAILED,
    ProcessingStage.FINAL_EMISSION: ErrorCode.EMISSION_FAILED,
}


def quality_score(
    error_count: int,
    warning_count: int,
    principle_count: int = 0,
    selected_pattern_count: int = 0
) -> int:
    """100 - 10 per error - 5 per warning, +5 each for rich principles and patterns, clamped."""
    score = 100 - error_count * 10 - warning_count * 5
    if principle_count > 3:
        score += 5
    if selected_pattern_count > 5:
        score += 5
    return max(0, min(100, score))


class PipelineOrchestrator:
    """Five-stage document-to-deck pipeline with pollable status."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        classifier: Optional[ContentClassifier] = None,
        selector: Optional[PatternSelector] = None,
        optimizer: Optional[FlowOptimizer] = None,
        segmenter: Optional[SlideSegmenter] = None,
        emitter: Optional[SlideEmitter] = None,
        idea_analyzer: Optional[IdeaAnalyzer] = None,
        draft_builder: Optional[DraftStructureBuilder] = None,
        catalog: Optional[PatternCatalog] = None
    ):
        self.config = config or PipelineConfig.from_settings()
        self.catalog = catalog or PatternCatalog.default()
        self.classifier = classifier or ContentClassifier(config=self.config)
        self.selector = selector or PatternSelector(self.catalog, self.classifier, self.config)
        self.optimizer = optimizer or FlowOptimizer(self.catalog, config=self.config)
        self.segmenter = segmenter or SlideSegmenter(self.config)
        self.emitter = emitter or MarpEmitter()
        self.idea_analyzer = idea_analyzer or IdeaAnalyzer(self.classifier)
        self.draft_builder = draft_builder or DraftStructureBuilder()

        self._lock = threading.Lock()
        self._status = ProcessingStatus()
        self._content: Optional[ProcessedContent] = None
        self._stage_states: Dict[ProcessingStage, str] = {}
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None

    # =========================================================================
    # Run
    # =========================================================================

    async def run(self, documents: Sequence[Optional[DocumentRecord]]) -> PipelineResult:
        """Run all five stages. Raises MissingInputError or StageAbortedError on abort."""
        self._reset()
        run_id = uuid.uuid4().hex
        logger.info(f"Starting pipeline run {run_id}")
        self._advance(ProcessingStage.IDEA_ANALYSIS, START_PROGRESS)

        self._check_inputs(documents)

        content = ProcessedContent(run_id=run_id)
        with self._lock:
            self._content = content

        for stage, progress, method_name in STAGE_SEQUENCE:
            self._advance(stage, progress)
            logger.info(f"Stage {stage.value}/{STAGE_COUNT}: {stage.name}")
            content = await self._run_stage(stage, getattr(self, method_name), content, documents[stage.value - 1])

        self._advance(ProcessingStage.FINAL_EMISSION, 100)
        with self._lock:
            self._status.completed = True
            self._finished_at = time.monotonic()

        logger.info(f"Pipeline run {run_id} completed")
        return PipelineResult(content=content, output=content.output, status=self.get_status())

    async def _run_stage(
        self,
        stage: ProcessingStage,
        transition,
        content: ProcessedContent,
        document: DocumentRecord
    ) -> ProcessedContent:
        try:
            outcome = await transition(content, document)
        except PipelineError as e:
            self._abort(stage, ProcessingError(
                stage=stage, code=e.code, message=e.message, context=e.context or None
            ))
            raise StageAbortedError(stage, e.code, e.message, e.context) from e
        except Exception as e:
            code = FAILURE_CODES[stage]
            message = f"{stage.name} failed: {e}"
            self._abort(stage, ProcessingError(stage=stage, code=code, message=message))
            raise StageAbortedError(stage, code, message) from e

        for warning in outcome.warnings:
            self._record_warning(warning)

        if outcome.fatal:
            errors = outcome.errors or [ProcessingError(
                stage=stage, code=FAILURE_CODES[stage], message=f"{stage.name} produced no usable output"
            )]
            for error in errors[:-1]:
                self._record_error(error)
            blocking = errors[-1]
            self._abort(stage, blocking)
            raise StageAbortedError(stage, blocking.code, blocking.message, blocking.context)

        for error in outcome.errors:
            self._record_error(error)

        with self._lock:
            self._stage_states[stage] = "completed"
            self._content = outcome.content
        return outcome.content

    def _check_inputs(self, documents: Sequence[Optional[DocumentRecord]]) -> None:
        """Abort before any stage runs when a slot is missing or out of order."""
        for stage in ProcessingStage:
            index = stage.value - 1
            document = documents[index] if index < len(documents) else None

            if document is None:
                code = ErrorCode.FILE_NOT_FOUND
                message = f"Input document for stage {stage.value} ({stage.name}) is missing"
            elif document.stage != stage:
                code = ErrorCode.INVALID_FILE_ORDER
                message = f"Slot {stage.value} holds the stage {document.stage.value} document {document.path}"
            else:
                continue

            self._abort(stage, ProcessingError(stage=stage, code=code, message=message))
            raise MissingInputError(stage, code, message)

    # =========================================================================
    # Stage transitions
    # =========================================================================

    async def _idea_analysis(self, content: ProcessedContent, document: DocumentRecord) -> StageOutcome:
        stage = ProcessingStage.IDEA_ANALYSIS
        analysis = self.idea_analyzer.analyze(document)

        warnings = []
        if not analysis.principles:
            warnings.append(self._warning(stage, "MISSING_PRINCIPLES", "No principles extracted from the idea document"))
        if not analysis.framework.is_complete:
            warnings.append(self._warning(stage, "INCOMPLETE_FRAMEWORK", "No evaluation perspective (technical, business, UX) found"))

        return StageOutcome(
            content=content.model_copy(update={"idea_analysis": analysis, "last_completed_stage": stage}),
            warnings=warnings
        )

    async def _draft_structure(self, content: ProcessedContent, document: DocumentRecord) -> StageOutcome:
        stage = ProcessingStage.DRAFT_STRUCTURE
        if not document.sections:
            return StageOutcome(content=content, fatal=True, errors=[ProcessingError(
                stage=stage,
                code=ErrorCode.MISSING_REQUIRED_ELEMENTS,
                message=f"Draft document {document.path} has no sections"
            )])

        structure = self.draft_builder.build(document)
        validation = self.draft_builder.validate(structure)

        errors = [
            ProcessingError(stage=stage, code=ErrorCode.MISSING_REQUIRED_ELEMENTS, message=issue, recoverable=True)
            for issue in validation.issues
        ]
        warnings = [
            self._warning(stage, "STRUCTURE_RECOMMENDATION", recommendation)
            for recommendation in validation.recommendations
        ]
        if validation.completeness < 80:
            warnings.append(self._warning(
                stage, "LOW_COMPLETENESS",
                f"Draft structure completeness is {validation.completeness}%",
                {"completeness": validation.completeness}
            ))

        return StageOutcome(
            content=content.model_copy(update={
                "title": structure.title,
                "draft_structure": structure,
                "last_completed_stage": stage,
            }),
            errors=errors,
            warnings=warnings
        )

    async def _pattern_selection(self, content: ProcessedContent, document: DocumentRecord) -> StageOutcome:
        stage = ProcessingStage.PATTERN_SELECTION
        result = self.selector.select(document)

        if not result.mapping.pattern_mappings:
            return StageOutcome(content=content, fatal=True, errors=[ProcessingError(
                stage=stage,
                code=ErrorCode.PATTERN_SELECTION_FAILED,
                message=f"No section of {document.path} could be mapped to a pattern",
                context={"sections": len(document.sections)}
            )])

        optimized = self.optimizer.optimize(result.mapping.pattern_mappings)
        mapping = result.mapping.model_copy(update={"pattern_mappings": optimized})

        warnings = [
            self._warning(stage, "UNMAPPED_SECTION", f"Section {section_id} has no pattern", {"section_id": section_id})
            for section_id in result.unmapped_section_ids
        ]
        report = self.selector.build_report(mapping)
        warnings.extend(self._warning(stage, "PATTERN_WARNING", text) for text in report.warnings)

        low_confidence = [m for m in optimized if m.confidence < self.config.low_confidence_threshold]
        if low_confidence:
            warnings.append(self._warning(
                stage, "LOW_CONFIDENCE_PATTERNS",
                f"{len(low_confidence)} pattern mappings have low confidence",
                {"section_ids": [m.section_id for m in low_confidence]}
            ))

        return StageOutcome(
            content=content.model_copy(update={"presentation_mapping": mapping, "last_completed_stage": stage}),
            warnings=warnings
        )

    async def _slide_generation(self, content: ProcessedContent, document: DocumentRecord) -> StageOutcome:
        stage = ProcessingStage.SLIDE_GENERATION
        if content.presentation_mapping is None:
            return StageOutcome(content=content, fatal=True, errors=[ProcessingError(
                stage=stage,
                code=ErrorCode.SEGMENTATION_FAILED,
                message="Presentation mapping is not available for slide generation"
            )])

        lookup = {m.section_id: m for m in content.presentation_mapping.pattern_mappings}
        structure = self.segmenter.build_structure(document, lookup)

        if not any(slide.kind != SlideKind.TITLE for slide in structure.slides):
            return StageOutcome(content=content, fatal=True, errors=[ProcessingError(
                stage=stage,
                code=ErrorCode.SEGMENTATION_FAILED,
                message=f"No slides generated from {document.path}",
                context={"sections": len(document.sections)}
            )])

        warnings = []
        long_slides = [
            slide for slide in structure.slides
            if any(len(sub.body) > LONG_BODY_CHARACTERS for sub in slide.sections)
        ]
        if long_slides:
            warnings.append(self._warning(
                stage, "LONG_SLIDES",
                f"{len(long_slides)} slides may be too long",
                {"slide_ids": [s.id for s in long_slides]}
            ))

        missing_overview = [slide for slide in structure.slides if not slide.has_overview]
        if missing_overview:
            warnings.append(self._warning(
                stage, "MISSING_OVERVIEW",
                f"{len(missing_overview)} slides are missing an overview statement",
                {"slide_ids": [s.id for s in missing_overview]}
            ))

        return StageOutcome(
            content=content.model_copy(update={"slide_structure": structure, "last_completed_stage": stage}),
            warnings=warnings
        )

    async def _final_emission(self, content: ProcessedContent, document: DocumentRecord) -> StageOutcome:
        stage = ProcessingStage.FINAL_EMISSION
        if content.slide_structure is None:
            return StageOutcome(content=content, fatal=True, errors=[ProcessingError(
                stage=stage,
                code=ErrorCode.EMISSION_FAILED,
                message="Slide structure is not available for emission"
            )])

        output = await self.emitter.emit(content.slide_structure)
        if output.slide_count == 0 or not output.content.strip():
            return StageOutcome(content=content, fatal=True, errors=[ProcessingError(
                stage=stage,
                code=ErrorCode.EMISSION_FAILED,
                message="Emitter produced no output"
            )])

        return StageOutcome(content=content.model_copy(update={"output": output, "last_completed_stage": stage}))

    # =========================================================================
    # Status
    # =========================================================================

    def get_status(self) -> ProcessingStatus:
        """Consistent snapshot of the current run."""
        with self._lock:
            snapshot = self._status.model_copy(deep=True)
        snapshot.estimated_time_remaining = self._estimate_remaining(snapshot)
        return snapshot

    def _estimate_remaining(self, status: ProcessingStatus) -> int:
        if status.completed or status.aborted:
            return 0
        per_stage = self.config.seconds_per_stage
        remaining_stages = STAGE_COUNT - status.current_stage.value
        current = (20 - status.progress % 20) / 20 * per_stage
        return round(current + remaining_stages * per_stage)

    def _reset(self) -> None:
        with self._lock:
            self._status = ProcessingStatus()
            self._content = None
            self._stage_states = {stage: "skipped" for stage in ProcessingStage}
            self._started_at = time.monotonic()
            self._finished_at = None

    def _advance(self, stage: ProcessingStage, progress: int) -> None:
        with self._lock:
            self._status.current_stage = stage
            self._status.progress = max(self._status.progress, progress)

    def _abort(self, stage: ProcessingStage, error: ProcessingError) -> None:
        self._record_error(error)
        with self._lock:
            self._status.current_stage = stage
            self._status.aborted = True
            self._stage_states[stage] = "failed"
            self._finished_at = time.monotonic()
        logger.error(f"Pipeline aborted at stage {stage.value} ({stage.name})")

    def _record_error(self, error: ProcessingError) -> None:
        logger.error(f"[{error.stage.name}] {error.code.value}: {error.message}")
        with self._lock:
            self._status.errors.append(error)

    def _record_warning(self, warning: ProcessingWarning) -> None:
        logger.warning(f"[{warning.stage.name}] {warning.code}: {warning.message}")
        with self._lock:
            self._status.warnings.append(warning)

    @staticmethod
    def _warning(stage: ProcessingStage, code: str, message: str, context: Optional[dict] = None) -> ProcessingWarning:
        return ProcessingWarning(stage=stage, code=code, message=message, context=context)

    # =========================================================================
    # Input validation, report and export
    # =========================================================================

    def validate_input(self, documents: Sequence[Optional[DocumentRecord]]) -> ValidationResult:
        """Check slot count, order and content without running anything."""
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        if len(documents) != STAGE_COUNT:
            errors.append(ValidationIssue(
                code=ErrorCode.FILE_NOT_FOUND.value,
                message=f"Expected {STAGE_COUNT} documents, got {len(documents)}"
            ))

        for stage in ProcessingStage:
            index = stage.value - 1
            if index >= len(documents):
                break
            document = documents[index]
            if document is None:
                errors.append(ValidationIssue(
                    code=ErrorCode.FILE_NOT_FOUND.value,
                    message=f"Document for stage {stage.value} is missing"
                ))
                continue
            if document.stage != stage:
                errors.append(ValidationIssue(
                    code=ErrorCode.INVALID_FILE_ORDER.value,
                    message=f"Document {document.path} is in slot {stage.value} but belongs to stage {document.stage.value}",
                    file=document.path
                ))
            text = document.raw_content.strip()
            if not text:
                errors.append(ValidationIssue(
                    code=ErrorCode.CORRUPTED_CONTENT.value,
                    message=f"Document {document.path} is empty",
                    file=document.path
                ))
            elif len(text) < MIN_DOCUMENT_CHARACTERS:
                warnings.append(ValidationIssue(
                    code="SHORT_CONTENT",
                    message=f"Document {document.path} is very short ({len(text)} characters)",
                    severity="warning",
                    file=document.path
                ))

        return ValidationResult(errors=errors, warnings=warnings)

    def generate_report(self) -> ProcessingReport:
        """Summary, stage states, issues and recommendations for the last run."""
        with self._lock:
            content = self._content
            status = self._status.model_copy(deep=True)
            stages = {stage.name.lower(): state for stage, state in self._stage_states.items()}
            started, finished = self._started_at, self._finished_at

        if content is None:
            raise PipelineError(None, ErrorCode.VALIDATION_FAILED, "No processed content; run the pipeline first")

        slides = content.slide_structure.slides if content.slide_structure else []
        total_minutes = content.slide_structure.total_minutes if content.slide_structure else 0
        principles = len(content.idea_analysis.principles) if content.idea_analysis else 0
        patterns = len(content.presentation_mapping.selected_patterns) if content.presentation_mapping else 0
        elapsed = ((finished or time.monotonic()) - started) if started is not None else 0.0

        cfg = self.config
        recommendations = []
        if status.errors:
            recommendations.append("Resolve the recorded errors before presenting")
        if len(status.warnings) > cfg.warning_recommendation_threshold:
            recommendations.append("Many warnings were recorded; review them to improve quality")
        if len(slides) > cfg.max_recommended_slides:
            recommendations.append(f"{len(slides)} slides is a lot; consider trimming content")
        if total_minutes > cfg.max_recommended_minutes:
            recommendations.append(f"Estimated {total_minutes} minutes; consider shortening the presentation")

        return ProcessingReport(
            summary=ReportSummary(
                total_slides=len(slides),
                total_minutes=total_minutes,
                principles_applied=principles,
                patterns_used=patterns,
                processing_seconds=round(elapsed, 3),
                quality_score=quality_score(len(status.errors), len(status.warnings), principles, patterns)
            ),
            stages=stages,
            errors=status.errors,
            warnings=status.warnings,
            recommendations=recommendations
        )

    def export_processed_content(self) -> Optional[ProcessedContent]:
        with self._lock:
            return self._content.model_copy(deep=True) if self._content is not None else None
