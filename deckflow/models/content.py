"""
Content Models for Deckflow
===========================

Parsed representation of the five staged source documents: content
categories, sections and per-document metadata.
"""

from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import BaseModel, Field


class ContentType(str, Enum):
    """Coarse category of information a block of text conveys."""
    NUMERICAL_DATA = "numerical-data"
    STRUCTURAL_RELATIONSHIP = "structural-relationship"
    TEMPORAL_FLOW = "temporal-flow"
    INFORMATION_ORGANIZATION = "information-organization"
    EMOTIONAL_EXPERIENTIAL = "emotional-experiential"


# Fixed order used whenever a set of content types is reported
CONTENT_TYPE_ORDER: List[ContentType] = list(ContentType)


class ProcessingStage(IntEnum):
    """The five sequential pipeline stages, one per source document."""
    IDEA_ANALYSIS = 1
    DRAFT_STRUCTURE = 2
    PATTERN_SELECTION = 3
    SLIDE_GENERATION = 4
    FINAL_EMISSION = 5


class Section(BaseModel):
    """One heading-delimited block of a source document."""
    id: str = Field(..., description="Stable identifier, e.g. 'section-0'")
    ordinal: int = Field(..., ge=0, description="Position within the document")
    title: str = Field(..., description="Heading text without the '#' markers")
    level: int = Field(1, ge=1, le=6, description="Markdown heading level")
    content: str = Field("", description="Raw body text under the heading")
    content_type: ContentType = Field(
        ContentType.INFORMATION_ORGANIZATION,
        description="Primary content category for this section"
    )
    estimated_minutes: int = Field(0, ge=0, description="Reading time estimate")

    @property
    def text(self) -> str:
        """Title and body joined, as used for keyword scoring."""
        return f"{self.title} {self.content}"


class DocumentMetadata(BaseModel):
    """Aggregate counts for a whole document."""
    word_count: int = 0
    estimated_reading_minutes: int = 0
    heading_count: int = 0
    code_block_count: int = 0
    image_count: int = 0
    link_count: int = 0


class TOCItem(BaseModel):
    """Table of contents entry built from the heading tree."""
    title: str
    level: int
    page: int
    children: List["TOCItem"] = Field(default_factory=list)


class DocumentRecord(BaseModel):
    """A parsed source document bound to one pipeline stage."""
    path: str = Field(..., description="Source file path")
    stage: ProcessingStage
    title: str = Field("Untitled Document")
    author: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)
    table_of_contents: List[TOCItem] = Field(default_factory=list)
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    raw_content: str = ""

    @property
    def text(self) -> str:
        """All section titles and bodies joined, used for document-level scoring."""
        return " ".join(section.text for section in self.sections)

    def get_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None


TOCItem.model_rebuild()
