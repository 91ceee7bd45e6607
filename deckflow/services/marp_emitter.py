"""
Marp Emitter for Deckflow

Renders a SlideStructure as one Marp markdown document: front matter, a
style block built from the design tokens, then one `---` separated block
per slide. Layout and styling come from the slide definitions; nothing is
re-classified here.
"""

import json
from typing import List, Protocol

from deckflow.core.errors import EmissionError
from deckflow.models.processing import EmissionResult
from deckflow.models.slides import SlideDefinition, SlideStructure
from deckflow.utils.design_tokens import BASE_FONT_SIZE, FONT_FAMILY, css_custom_properties, default_style
from deckflow.utils.logger import setup_logger

logger = setup_logger(__name__)

SLIDE_SEPARATOR = "\n---\n\n"

LAYOUT_CSS = """
section {
  font-family: %(font_family)s;
  font-size: %(font_size)spx;
  line-height: 1.6;
  color: var(--text-primary);
  padding: 40px 60px;
}

h1, h2, h3 {
  color: var(--primary-color);
  margin-bottom: 1rem;
}

h1 { font-size: 32px; }
h2 { font-size: 28px; }
h3 { font-size: 24px; }

.title-slide { text-align: center; padding: 60px 40px; }
.split-layout { display: flex; gap: 2rem; }
.center-layout { text-align: center; }
.grid-layout { display: grid; grid-template-columns: 1fr 1fr; gap: 1.5rem; }
.timeline-layout { border-left: 3px solid var(--primary-color); padding-left: 2rem; }
.steps-layout ol { counter-reset: step; }
.visual-layout { background-size: cover; color: #ffffff; text-shadow: 0 2px 4px rgba(0, 0, 0, 0.6); }
.story-layout blockquote { border-left: 4px solid var(--secondary-color); }
""".strip()


class SlideEmitter(Protocol):
    """Anything that can turn a slide structure into a final artifact."""

    async def emit(self, structure: SlideStructure) -> EmissionResult:
        ...


class MarpEmitter:
    """Default emitter producing Marp markdown."""

    def __init__(self, theme: str = "default", paginate: bool = True):
        self.theme = theme
        self.paginate = paginate
        self._default_typography = default_style().typography

    async def emit(self, structure: SlideStructure) -> EmissionResult:
        if not structure.slides:
            raise EmissionError("Slide structure has no slides to emit")

        blocks = [self.render_slide(slide) for slide in structure.slides]
        content = self.render_header(structure) + SLIDE_SEPARATOR.join(blocks) + "\n"

        logger.info(f"Emitted {len(blocks)} Marp slides ({len(content)} characters)")
        return EmissionResult(
            format="marp",
            content=content,
            slide_count=len(blocks),
            estimated_minutes=structure.total_minutes
        )

    def render_header(self, structure: SlideStructure) -> str:
        front_matter = [
            "---",
            "marp: true",
            f"theme: {self.theme}",
            f"paginate: {'true' if self.paginate else 'false'}",
        ]
        if structure.title:
            # JSON strings are valid YAML double-quoted scalars
            front_matter.append(f"title: {json.dumps(structure.title, ensure_ascii=False)}")
        front_matter.append("---")

        css = LAYOUT_CSS % {"font_family": FONT_FAMILY, "font_size": BASE_FONT_SIZE}
        return "\n".join(front_matter) + f"\n\n<style>\n{css_custom_properties()}\n\n{css}\n</style>\n\n"

    def render_slide(self, slide: SlideDefinition) -> str:
        parts: List[str] = []

        style = self._style_directive(slide)
        if style:
            parts.append(style)

        parts.extend(sub.rendered or sub.body for sub in slide.sections)
        return "\n\n".join(part for part in parts if part)

    def _style_directive(self, slide: SlideDefinition) -> str:
        """Scoped `_style` when the slide's typography or padding differs from the default."""
        typography = slide.styling.typography
        padding = slide.styling.spacing.padding
        if typography == self._default_typography and padding == "40px 60px":
            return ""
        return (
            f'<!-- _style: "padding: {padding}; font-size: {typography.font_size}; '
            f'line-height: {typography.line_height};" -->'
        )
