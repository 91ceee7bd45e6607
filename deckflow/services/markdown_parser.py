"""
Markdown Parser for Deckflow

Turns one source markdown file into a DocumentRecord: heading-delimited
sections (each tagged with its primary content type), the main title, an
optional author line, aggregate metadata and a table of contents tree.

Headings inside fenced code blocks are treated as code, not as section
boundaries.

Usage:
    parser = MarkdownParser()
    record = parser.parse(text, path="01_idea-approach-philosophy.md",
                          stage=ProcessingStage.IDEA_ANALYSIS)
"""

import math
import re
from typing import List, Optional

from deckflow.core.content_classifier import ContentClassifier
from deckflow.models.content import (
    DocumentMetadata,
    DocumentRecord,
    ProcessingStage,
    Section,
    TOCItem,
)
from deckflow.models.processing import ErrorCode, ValidationIssue, ValidationResult
from deckflow.utils.logger import setup_logger
from deckflow.utils.text_metrics import FENCE_LINE, count_code_blocks, count_words

logger = setup_logger(__name__)


class MarkdownParser:
    """Heading-based markdown parser."""

    HEADING = re.compile(r'^(#{1,6})\s+(.+)$')
    MAIN_TITLE = re.compile(r'^#\s+(.+)$')
    AUTHOR = re.compile(r'^\s*(?:author|by|作成者|著者)\s*[:：]\s*(.+)$', re.IGNORECASE | re.MULTILINE)
    IMAGE = re.compile(r'!\[.*?\]\(.*?\)')
    LINK = re.compile(r'\[.*?\]\(.*?\)')

    READING_WORDS_PER_MINUTE = 200
    MAX_SECTION_CHARACTERS = 5000
    MAX_DOCUMENT_WORDS = 10000
    MIN_SECTION_CHARACTERS = 10

    def __init__(self, classifier: Optional[ContentClassifier] = None):
        self.classifier = classifier or ContentClassifier()

    def parse(self, text: str, path: str, stage: ProcessingStage) -> DocumentRecord:
        lines = text.split("\n")
        sections = self.extract_sections(lines)

        record = DocumentRecord(
            path=path,
            stage=stage,
            title=self.extract_title(lines),
            author=self.extract_author(text),
            sections=sections,
            table_of_contents=self.build_table_of_contents(sections),
            metadata=self.extract_metadata(text, len(sections)),
            raw_content=text
        )
        logger.debug(f"Parsed {path}: {len(sections)} sections, {record.metadata.word_count} words")
        return record

    # ===== Structure =====

    def extract_sections(self, lines: List[str]) -> List[Section]:
        sections: List[Section] = []
        heading = None
        body: List[str] = []
        in_fence = False

        def close():
            if heading is None:
                return
            level, title = heading
            content = "\n".join(body).strip()
            sections.append(Section(
                id=f"section-{len(sections)}",
                ordinal=len(sections),
                title=title,
                level=level,
                content=content,
                content_type=self.classifier.primary_type(content),
                estimated_minutes=self.estimate_reading_minutes(content)
            ))

        for line in lines:
            if FENCE_LINE.match(line):
                in_fence = not in_fence
            match = None if in_fence else self.HEADING.match(line)
            if match:
                close()
                heading = (len(match.group(1)), match.group(2).strip())
                body = []
            elif heading is not None:
                body.append(line)

        close()
        return sections

    def extract_title(self, lines: List[str]) -> str:
        in_fence = False
        for line in lines:
            if FENCE_LINE.match(line):
                in_fence = not in_fence
                continue
            if not in_fence:
                match = self.MAIN_TITLE.match(line)
                if match:
                    return match.group(1).strip()
        return "Untitled Document"

    def extract_author(self, text: str) -> Optional[str]:
        match = self.AUTHOR.search(text)
        return match.group(1).strip() if match else None

    @staticmethod
    def build_table_of_contents(sections: List[Section]) -> List[TOCItem]:
        """Nest sections by heading level; `page` is the 1-based section position."""
        toc: List[TOCItem] = []
        stack: List[TOCItem] = []

        for index, section in enumerate(sections):
            item = TOCItem(title=section.title, level=section.level, page=index + 1)
            while stack and stack[-1].level >= section.level:
                stack.pop()
            if stack:
                stack[-1].children.append(item)
            else:
                toc.append(item)
            stack.append(item)

        return toc

    # ===== Metadata =====

    def estimate_reading_minutes(self, text: str) -> int:
        return math.ceil(count_words(text) / self.READING_WORDS_PER_MINUTE)

    def extract_metadata(self, text: str, heading_count: int) -> DocumentMetadata:
        return DocumentMetadata(
            word_count=count_words(text),
            estimated_reading_minutes=self.estimate_reading_minutes(text),
            heading_count=heading_count,
            code_block_count=count_code_blocks(text),
            image_count=len(self.IMAGE.findall(text)),
            link_count=len(self.LINK.findall(text))
        )

    # ===== Validation =====

    def validate(self, record: DocumentRecord) -> ValidationResult:
        """Structural checks; only a document with no sections is an error."""
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        if record.metadata.word_count > self.MAX_DOCUMENT_WORDS:
            warnings.append(ValidationIssue(
                code=ErrorCode.CONTENT_TOO_LONG.value,
                message=f"Content is too long ({record.metadata.word_count} words); consider splitting it",
                severity="warning",
                file=record.path
            ))

        previous_level = 0
        for section in record.sections:
            if len(section.content.strip()) < self.MIN_SECTION_CHARACTERS:
                warnings.append(ValidationIssue(
                    code=ErrorCode.MISSING_REQUIRED_ELEMENTS.value,
                    message=f"Section '{section.title}' has too little content",
                    severity="warning",
                    file=record.path
                ))
            if len(section.content) > self.MAX_SECTION_CHARACTERS:
                warnings.append(ValidationIssue(
                    code=ErrorCode.CONTENT_TOO_LONG.value,
                    message=f"Section '{section.title}' is too long; consider subsections",
                    severity="warning",
                    file=record.path
                ))
            if section.level > previous_level + 1:
                warnings.append(ValidationIssue(
                    code=ErrorCode.INVALID_MARKDOWN.value,
                    message=f"Section '{section.title}' skips heading levels ({previous_level} -> {section.level})",
                    severity="warning",
                    file=record.path
                ))
            previous_level = section.level

        if not record.sections:
            errors.append(ValidationIssue(
                code=ErrorCode.MISSING_REQUIRED_ELEMENTS.value,
                message="Document has no structured sections",
                file=record.path
            ))

        return ValidationResult(errors=errors, warnings=warnings)
