"""
Slide Segmenter for Deckflow
============================

Turns classified sections into slide definitions.

A section that fits on one slide becomes a single slide. A section that
needs splitting becomes an overview slide followed by detail slides, built
by greedily packing paragraphs until the next paragraph would make the
buffer itself need splitting. Fenced code blocks are never broken.

Splitting rule (any one is enough):
- more than MAX_LINES_PER_SLIDE non-empty lines
- more than MAX_CHARACTERS_PER_SLIDE characters
- at least one code block and more than CODE_BLOCK_LINE_LIMIT lines
- more than MAX_LONG_LINES lines longer than LONG_LINE_LENGTH
"""

import math
import re
from typing import Callable, Dict, List, Optional

from deckflow.models.content import ContentType, DocumentRecord, Section
from deckflow.models.patterns import PatternMapping
from deckflow.models.pipeline_config import PipelineConfig
from deckflow.models.slides import (
    ComplexityTier,
    ContentAnalysis,
    ContentSubsection,
    LayoutDefinition,
    LayoutPattern,
    SlideDefinition,
    SlideKind,
    SlideStructure,
    StyleDefinition,
)
from deckflow.utils.design_tokens import (
    PATTERN_CLASSES,
    build_layout,
    default_style,
    layout_for_pattern,
    style_for,
)
from deckflow.utils.logger import setup_logger
from deckflow.utils.text_metrics import (
    count_code_blocks,
    count_words,
    lines_outside_fences,
    non_empty_lines,
    split_paragraphs,
)

logger = setup_logger(__name__)

BOLD_PHRASE = re.compile(r'\*\*(.+?)\*\*')
SUB_HEADING = re.compile(r'^#{2,4}\s+(.+)$')
BULLET_ITEM = re.compile(r'^\s*[-*+]\s+(.+)$')
SENTENCE_END = re.compile(r'(?<=[。．！？.!?])\s*')
FENCED_BLOCK = re.compile(r'```[\s\S]*?```')

OVERVIEW_TEMPLATES: Dict[ContentType, str] = {
    ContentType.NUMERICAL_DATA: "Key figures and data behind {title}",
    ContentType.STRUCTURAL_RELATIONSHIP: "How the parts of {title} fit together",
    ContentType.TEMPORAL_FLOW: "The steps and sequence of {title}",
    ContentType.INFORMATION_ORGANIZATION: "The essential points of {title}, organized",
    ContentType.EMOTIONAL_EXPERIENTIAL: "Cases and experiences around {title}",
}

AGENDA_LIMIT = 5


class SlideSegmenter:
    """Section -> slides, with layout and styling hints for the emitter."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        style_factory: Optional[Callable[[Optional[ContentAnalysis]], StyleDefinition]] = None
    ):
        self.config = config or PipelineConfig()
        self.style_factory = style_factory or style_for

    # =========================================================================
    # Analysis
    # =========================================================================

    def analyze(self, text: str) -> ContentAnalysis:
        cfg = self.config
        lines = non_empty_lines(text)
        line_count = len(lines)
        character_count = len(text or "")
        code_blocks = count_code_blocks(text)
        long_lines = sum(1 for line in lines if len(line) > cfg.long_line_length)

        needs_split = (
            line_count > cfg.max_lines_per_slide
            or character_count > cfg.max_characters_per_slide
            or (code_blocks > 0 and line_count > cfg.code_block_line_limit)
            or long_lines > cfg.max_long_lines
        )

        points = 0
        if line_count > 15:
            points += 2
        if character_count > 600:
            points += 2
        if code_blocks > 1:
            points += 3

        if points >= 5:
            complexity = ComplexityTier.HIGH
        elif points >= 3:
            complexity = ComplexityTier.MEDIUM
        else:
            complexity = ComplexityTier.LOW

        return ContentAnalysis(
            line_count=line_count,
            character_count=character_count,
            code_block_count=code_blocks,
            long_line_count=long_lines,
            needs_split=needs_split,
            complexity=complexity
        )

    def estimate_minutes(self, text: str, minimum: int) -> int:
        words = count_words(text)
        return max(minimum, math.ceil(words / self.config.words_per_minute))

    # =========================================================================
    # Segmentation
    # =========================================================================

    def segment(
        self,
        section: Section,
        mapping: Optional[PatternMapping] = None,
        start_order: int = 1
    ) -> List[SlideDefinition]:
        """Slides for one section, numbered from `start_order`. Empty sections give []."""
        body = section.content.strip()
        if not body:
            logger.debug(f"{section.id} is empty, no slides")
            return []

        analysis = self.analyze(body)
        if not analysis.needs_split:
            return [self._single_slide(section, body, analysis, mapping, start_order)]

        slides = [self._overview_slide(section, body, start_order)]
        chunks = self._pack_paragraphs(split_paragraphs(body))
        for index, chunk in enumerate(chunks, 1):
            slides.append(self._detail_slide(section, chunk, index, mapping, start_order + index))

        logger.info(f"{section.id} split into {len(slides)} slides ({len(chunks)} detail)")
        return slides

    def _pack_paragraphs(self, paragraphs: List[str]) -> List[str]:
        chunks: List[str] = []
        buffer: List[str] = []

        for paragraph in paragraphs:
            candidate = buffer + [paragraph]
            if buffer and self.analyze("\n\n".join(candidate)).needs_split:
                chunks.append("\n\n".join(buffer))
                buffer = [paragraph]
            else:
                buffer = candidate

        if buffer:
            chunks.append("\n\n".join(buffer))
        return chunks

    # =========================================================================
    # Slide builders
    # =========================================================================

    def _single_slide(
        self,
        section: Section,
        body: str,
        analysis: ContentAnalysis,
        mapping: Optional[PatternMapping],
        order: int
    ) -> SlideDefinition:
        statement = self.overview_statement(section, body)
        rendered = self._render(section.title, statement, body, mapping)

        return SlideDefinition(
            id=f"slide-{section.id}",
            order=order,
            title=section.title,
            overview_statement=statement,
            kind=SlideKind.SINGLE,
            section_id=section.id,
            sections=[ContentSubsection(
                id=f"{section.id}-content",
                title=section.title,
                level=section.level,
                content_type=section.content_type,
                body=body,
                rendered=rendered,
                estimated_minutes=self.estimate_minutes(body, self.config.min_section_minutes)
            )],
            layout=self.choose_layout(analysis, mapping),
            styling=self.style_factory(analysis)
        )

    def _overview_slide(self, section: Section, body: str, order: int) -> SlideDefinition:
        items = self.overview_items(body)
        statement = f"The big picture and main points of {section.title}"
        item_text = "\n".join(f"- {item}" for item in items)
        rendered = f"## {section.title}: Overview\n\n**{statement}**\n\n### Key topics\n\n{item_text}".rstrip()

        return SlideDefinition(
            id=f"slide-{section.id}-overview",
            order=order,
            title=f"{section.title}: Overview",
            overview_statement=statement,
            kind=SlideKind.OVERVIEW,
            section_id=section.id,
            sections=[ContentSubsection(
                id=f"{section.id}-overview",
                title="Overview",
                level=section.level,
                content_type=section.content_type,
                body=item_text,
                rendered=rendered,
                estimated_minutes=self.estimate_minutes(item_text, self.config.min_fragment_minutes)
            )],
            layout=build_layout(LayoutPattern.STANDARD),
            styling=default_style()
        )

    def _detail_slide(
        self,
        section: Section,
        chunk: str,
        index: int,
        mapping: Optional[PatternMapping],
        order: int
    ) -> SlideDefinition:
        analysis = self.analyze(chunk)
        title = f"{section.title} ({index})"
        statement = f"Details of {section.title}, part {index}"

        return SlideDefinition(
            id=f"slide-{section.id}-{index}",
            order=order,
            title=title,
            overview_statement=statement,
            kind=SlideKind.DETAIL,
            section_id=section.id,
            sections=[ContentSubsection(
                id=f"{section.id}-part-{index}",
                title=title,
                level=section.level,
                content_type=section.content_type,
                body=chunk,
                rendered=self._render(title, "", chunk, mapping),
                estimated_minutes=self.estimate_minutes(chunk, self.config.min_fragment_minutes)
            )],
            layout=self.choose_layout(analysis, mapping),
            styling=self.style_factory(analysis)
        )

    def title_slide(self, document: DocumentRecord, order: int = 1) -> SlideDefinition:
        """Deck title slide with a short agenda of section titles."""
        titles = [s.title for s in document.sections if s.content.strip()]
        agenda = [f"- {title}" for title in titles[:AGENDA_LIMIT]]
        if len(titles) > AGENDA_LIMIT:
            agenda.append(f"- ... and {len(titles) - AGENDA_LIMIT} more sections")

        agenda_text = "\n".join(agenda)
        rendered = f"<!-- _class: title-slide -->\n\n# {document.title}"
        if document.author:
            rendered += f"\n\n{document.author}"
        if agenda_text:
            rendered += f"\n\n## Agenda\n\n{agenda_text}"

        return SlideDefinition(
            id="slide-title",
            order=order,
            title=document.title,
            overview_statement=f"Presentation overview: {document.title}",
            kind=SlideKind.TITLE,
            sections=[ContentSubsection(
                id="title-agenda",
                title="Agenda",
                body=agenda_text,
                rendered=rendered,
                estimated_minutes=self.config.min_fragment_minutes
            )],
            layout=build_layout(LayoutPattern.CENTER),
            styling=default_style()
        )

    def build_structure(
        self,
        document: DocumentRecord,
        mappings: Optional[Dict[str, PatternMapping]] = None
    ) -> SlideStructure:
        """Title slide plus every section's slides, numbered contiguously from 1."""
        mappings = mappings or {}
        slides = [self.title_slide(document)]

        for section in document.sections:
            slides.extend(self.segment(section, mappings.get(section.id), start_order=len(slides) + 1))

        slides = [slide.model_copy(update={"order": number}) for number, slide in enumerate(slides, 1)]
        logger.info(f"Built {len(slides)} slides for '{document.title}'")
        return SlideStructure(title=document.title, slides=slides)

    # =========================================================================
    # Layout and text helpers
    # =========================================================================

    def choose_layout(
        self,
        analysis: ContentAnalysis,
        mapping: Optional[PatternMapping] = None
    ) -> LayoutDefinition:
        if mapping is not None:
            return layout_for_pattern(mapping.selected_pattern.id)

        if analysis.needs_split:
            return build_layout(LayoutPattern.SPLIT)
        if analysis.complexity == ComplexityTier.HIGH:
            return build_layout(LayoutPattern.GRID)
        if analysis.complexity == ComplexityTier.LOW and analysis.line_count <= 3:
            return build_layout(LayoutPattern.CENTER)
        return build_layout(LayoutPattern.STANDARD)

    def overview_statement(self, section: Section, body: str) -> str:
        for phrase in BOLD_PHRASE.findall(body):
            if len(phrase.strip()) > 20:
                return phrase.strip()
        return OVERVIEW_TEMPLATES[section.content_type].format(title=section.title)

    def overview_items(self, body: str) -> List[str]:
        """Sub-headings, else bullet points, else leading sentences."""
        limit = self.config.overview_item_limit
        lines = lines_outside_fences(body)

        headings = [m.group(1).strip() for m in map(SUB_HEADING.match, lines) if m]
        if headings:
            return headings[:limit]

        bullets = [m.group(1).strip() for m in map(BULLET_ITEM.match, lines) if m]
        if bullets:
            return bullets[:limit]

        prose = FENCED_BLOCK.sub(" ", body)
        sentences = [s.strip() for s in SENTENCE_END.split(prose.replace("\n", " ")) if len(s.strip()) > 10]
        return sentences[:limit]

    def _render(
        self,
        title: str,
        statement: str,
        body: str,
        mapping: Optional[PatternMapping]
    ) -> str:
        parts = []
        if mapping is not None and mapping.selected_pattern.id in PATTERN_CLASSES:
            parts.append(f"<!-- _class: {PATTERN_CLASSES[mapping.selected_pattern.id]} -->")
        parts.append(f"## {title}")
        if statement:
            parts.append(f"**{statement}**")
        parts.append(body)
        return "\n\n".join(parts)
