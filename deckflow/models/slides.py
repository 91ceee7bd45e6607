"""
Slide Models for Deckflow
=========================

Slide definitions produced by the segmenter and consumed by the emitter,
including the per-slide layout and styling hints.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from deckflow.models.content import ContentType


class LayoutPattern(str, Enum):
    """Layout tags understood by the emitter."""
    STANDARD = "standard"
    SPLIT = "split"
    CENTER = "center"
    BACKGROUND = "background"
    GRID = "grid"
    TABLE = "table"
    FLOWCHART = "flowchart"
    ACCORDION = "accordion"
    TIMELINE = "timeline"
    CARD = "card"
    DASHBOARD = "dashboard"


class SlideKind(str, Enum):
    """Role of a slide within the deck."""
    TITLE = "title"
    SINGLE = "single"
    OVERVIEW = "overview"
    DETAIL = "detail"


class ComplexityTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class LayoutDefinition(BaseModel):
    pattern: LayoutPattern = LayoutPattern.STANDARD
    columns: int = 1
    rows: int = 1
    gap: str = "0"
    padding: str = "40px 60px"


class ColorScheme(BaseModel):
    primary: str
    secondary: str
    background: str
    text: str
    accent: str


class Typography(BaseModel):
    font_family: str
    font_size: str
    font_weight: str
    line_height: str


class Spacing(BaseModel):
    padding: str
    margin: str
    gap: str


class Effects(BaseModel):
    shadows: List[str] = Field(default_factory=list)
    borders: List[str] = Field(default_factory=list)
    border_radius: str = "0"


class StyleDefinition(BaseModel):
    """Small style record handed to the emitter with each slide."""
    colors: ColorScheme
    typography: Typography
    spacing: Spacing
    effects: Effects


class ContentSubsection(BaseModel):
    """
    One content block on a slide.

    `body` is the raw section text this block carries; `rendered` is the
    markdown the emitter writes, with generated headers and directives.
    """
    id: str
    title: str
    level: int = 1
    content_type: ContentType = ContentType.INFORMATION_ORGANIZATION
    body: str = ""
    rendered: str = ""
    estimated_minutes: int = Field(0, ge=0)


class ContentAnalysis(BaseModel):
    """Size measurements the segmenter uses to decide on splitting."""
    line_count: int
    character_count: int
    code_block_count: int
    long_line_count: int
    needs_split: bool
    complexity: ComplexityTier


class SlideDefinition(BaseModel):
    id: str
    order: int = Field(..., ge=1)
    title: str
    overview_statement: str = ""
    kind: SlideKind = SlideKind.SINGLE
    section_id: str = ""
    sections: List[ContentSubsection] = Field(..., min_length=1)
    layout: LayoutDefinition = Field(default_factory=LayoutDefinition)
    styling: StyleDefinition

    @property
    def has_overview(self) -> bool:
        """A usable overview statement is at least 10 characters."""
        return len(self.overview_statement.strip()) >= 10

    @property
    def estimated_minutes(self) -> int:
        return sum(sub.estimated_minutes for sub in self.sections)


class SlideStructure(BaseModel):
    """Stage 4 output: the ordered slide deck."""
    title: str = ""
    navigation: str = "linear"
    slides: List[SlideDefinition] = Field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return sum(slide.estimated_minutes for slide in self.slides)
