"""
Pipeline exceptions for Deckflow.

Stage handlers report quality problems as warnings and never raise for them.
These exceptions surface run-blocking failures to the caller after the
orchestrator has recorded them in the run status.
"""

from typing import Any, Dict, Optional

from deckflow.models.content import ProcessingStage
from deckflow.models.processing import ErrorCode


class PipelineError(Exception):
    """Base class for pipeline failures."""

    def __init__(
        self,
        stage: Optional[ProcessingStage],
        code: ErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        self.stage = stage
        self.code = code
        self.message = message
        self.context = context or {}
        stage_label = stage.name if stage is not None else "PIPELINE"
        super().__init__(f"[{stage_label}] {code.value}: {message}")


class MissingInputError(PipelineError):
    """A required stage document is missing or out of order."""
    pass


class StageAbortedError(PipelineError):
    """A stage could not produce the output the next stage needs."""
    pass


class EmissionError(PipelineError):
    """The downstream emitter failed to render the slide deck."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ProcessingStage.FINAL_EMISSION, ErrorCode.EMISSION_FAILED, message, context)
