"""
Document Loader for Deckflow

Reads the five staged source documents from an input directory and parses
them into DocumentRecords, one slot per stage.

Required files, in stage order:
    01_idea-approach-philosophy.md
    02_draft-creation-philosophy.md
    03_how-to-present-complete-guide.md
    04_marp-expression-complete-guide.md
    05_marp-to-html-guide.md

Missing files leave their slot as None; the orchestrator decides whether
that aborts the run.
"""

import asyncio
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

from config.settings import get_settings
from deckflow.core.errors import PipelineError
from deckflow.models.content import DocumentRecord, ProcessingStage
from deckflow.models.processing import ErrorCode, ValidationIssue, ValidationResult
from deckflow.services.markdown_parser import MarkdownParser
from deckflow.utils.logger import setup_logger

logger = setup_logger(__name__)

REQUIRED_FILES: Tuple[str, ...] = (
    "01_idea-approach-philosophy.md",
    "02_draft-creation-philosophy.md",
    "03_how-to-present-complete-guide.md",
    "04_marp-expression-complete-guide.md",
    "05_marp-to-html-guide.md",
)

STAGE_PREFIX = re.compile(r'^0([1-5])_')


def stage_from_filename(filename: str) -> Optional[ProcessingStage]:
    """Stage encoded in a `0N_` filename prefix, or None."""
    match = STAGE_PREFIX.match(Path(filename).name)
    return ProcessingStage(int(match.group(1))) if match else None


def expected_filename(stage: ProcessingStage) -> str:
    return REQUIRED_FILES[stage.value - 1]


class DocumentLoader:
    """Validates and loads the staged input directory."""

    def __init__(self, parser: Optional[MarkdownParser] = None, encoding: Optional[str] = None):
        self.parser = parser or MarkdownParser()
        self.encoding = encoding or get_settings().INPUT_ENCODING

    # ===== Validation =====

    def validate_directory(self, directory: Union[str, Path]) -> ValidationResult:
        directory = Path(directory)
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        if not directory.is_dir():
            errors.append(ValidationIssue(
                code=ErrorCode.FILE_NOT_FOUND.value,
                message=f"Cannot access directory {directory}"
            ))
            return ValidationResult(errors=errors, warnings=warnings)

        for filename in REQUIRED_FILES:
            path = directory / filename
            if not path.is_file():
                errors.append(ValidationIssue(
                    code=ErrorCode.FILE_NOT_FOUND.value,
                    message=f"Required file {filename} not found in {directory}",
                    file=filename
                ))
                continue

            try:
                content = path.read_bytes().decode(self.encoding)
            except UnicodeDecodeError as e:
                errors.append(ValidationIssue(
                    code=ErrorCode.ENCODING_ERROR.value,
                    message=f"File {filename} is not valid {self.encoding}: {e.reason}",
                    file=filename
                ))
                continue

            if not content.strip():
                errors.append(ValidationIssue(
                    code=ErrorCode.CORRUPTED_CONTENT.value,
                    message=f"File {filename} is empty",
                    file=filename
                ))
            elif "\x00" in content or "\ufffd" in content:
                errors.append(ValidationIssue(
                    code=ErrorCode.INVALID_MARKDOWN.value,
                    message=f"File {filename} contains NUL or replacement characters",
                    file=filename
                ))

        errors.extend(self._misordered_files(directory))
        return ValidationResult(errors=errors, warnings=warnings)

    def _misordered_files(self, directory: Path) -> List[ValidationIssue]:
        """Required documents present under another stage's prefix."""
        issues = []
        required_names = {name[3:]: stage for stage, name in enumerate(REQUIRED_FILES, 1)}

        for path in sorted(directory.glob("0[1-5]_*.md")):
            if path.name in REQUIRED_FILES:
                continue
            expected_stage = required_names.get(path.name[3:])
            if expected_stage is not None:
                issues.append(ValidationIssue(
                    code=ErrorCode.INVALID_FILE_ORDER.value,
                    message=f"File {path.name} belongs to stage {expected_stage}, not stage {path.name[1]}",
                    file=path.name
                ))
        return issues

    # ===== Loading =====

    async def load_directory(self, directory: Union[str, Path]) -> List[Optional[DocumentRecord]]:
        """Five slots in stage order; a missing file leaves its slot None."""
        directory = Path(directory)
        documents: List[Optional[DocumentRecord]] = []

        for stage in ProcessingStage:
            path = directory / expected_filename(stage)
            if not path.is_file():
                logger.warning(f"Missing input for stage {stage.value}: {path.name}")
                documents.append(None)
                continue
            documents.append(await self.load_file(path, stage))

        loaded = sum(1 for doc in documents if doc is not None)
        logger.info(f"Loaded {loaded}/{len(documents)} documents from {directory}")
        return documents

    async def load_file(self, path: Union[str, Path], stage: ProcessingStage) -> DocumentRecord:
        path = Path(path)
        loop = asyncio.get_running_loop()
        try:
            text = await loop.run_in_executor(None, self._read_text, path)
        except UnicodeDecodeError as e:
            raise PipelineError(
                stage, ErrorCode.ENCODING_ERROR,
                f"{path.name} is not valid {self.encoding}",
                {"path": str(path), "reason": e.reason}
            ) from e
        except OSError as e:
            raise PipelineError(
                stage, ErrorCode.FILE_NOT_FOUND,
                f"Failed to read {path.name}: {e}",
                {"path": str(path)}
            ) from e

        return self.parser.parse(text, str(path), stage)

    def _read_text(self, path: Path) -> str:
        return path.read_text(encoding=self.encoding)
