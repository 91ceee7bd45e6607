"""
Design tokens for Deckflow slides.

Default palette, typography and spacing, the grid geometry of each layout
tag, and the CSS custom properties written into the Marp header.
"""

from typing import Dict, Optional

from deckflow.models.slides import (
    ColorScheme,
    ComplexityTier,
    ContentAnalysis,
    Effects,
    LayoutDefinition,
    LayoutPattern,
    Spacing,
    StyleDefinition,
    Typography,
)

BASE_FONT_SIZE = 22
FONT_FAMILY = '"Hiragino Sans", "Yu Gothic", "Meiryo", sans-serif'

COLORS = {
    "primary": "#2c5aa0",
    "secondary": "#f39800",
    "background": "#ffffff",
    "text": "#333333",
    "accent": "#4ecdc4",
    "background_alt": "#f8f9fa",
    "border": "#e9ecef",
}

# columns, rows, gap
LAYOUT_GRIDS: Dict[LayoutPattern, tuple] = {
    LayoutPattern.STANDARD: (1, 1, "0"),
    LayoutPattern.SPLIT: (2, 1, "2rem"),
    LayoutPattern.CENTER: (1, 1, "0"),
    LayoutPattern.GRID: (2, 2, "1.5rem"),
    LayoutPattern.TABLE: (1, 1, "0"),
    LayoutPattern.TIMELINE: (1, 1, "0"),
    LayoutPattern.FLOWCHART: (1, 1, "0"),
    LayoutPattern.BACKGROUND: (1, 1, "0"),
    LayoutPattern.ACCORDION: (1, 1, "0"),
    LayoutPattern.CARD: (3, 2, "1rem"),
    LayoutPattern.DASHBOARD: (3, 2, "1rem"),
}

# Pattern id -> layout tag; anything not listed renders as standard
PATTERN_LAYOUTS: Dict[str, LayoutPattern] = {
    "comparison": LayoutPattern.SPLIT,
    "dashboard": LayoutPattern.GRID,
    "timeline": LayoutPattern.TIMELINE,
    "steps": LayoutPattern.FLOWCHART,
    "photo-visual": LayoutPattern.BACKGROUND,
    "table": LayoutPattern.TABLE,
    "number-emphasis": LayoutPattern.CENTER,
}

# Pattern id -> Marp class directive
PATTERN_CLASSES: Dict[str, str] = {
    "comparison": "split-layout",
    "number-emphasis": "center-layout",
    "dashboard": "grid-layout",
    "timeline": "timeline-layout",
    "steps": "steps-layout",
    "photo-visual": "visual-layout",
    "storytelling": "story-layout",
}


def build_layout(pattern: LayoutPattern) -> LayoutDefinition:
    columns, rows, gap = LAYOUT_GRIDS[pattern]
    return LayoutDefinition(
        pattern=pattern,
        columns=columns,
        rows=rows,
        gap=gap,
        padding="60px 40px" if pattern == LayoutPattern.CENTER else "40px 60px"
    )


def layout_for_pattern(pattern_id: str) -> LayoutDefinition:
    return build_layout(PATTERN_LAYOUTS.get(pattern_id, LayoutPattern.STANDARD))


def default_style() -> StyleDefinition:
    return StyleDefinition(
        colors=ColorScheme(
            primary=COLORS["primary"],
            secondary=COLORS["secondary"],
            background=COLORS["background"],
            text=COLORS["text"],
            accent=COLORS["accent"],
        ),
        typography=Typography(
            font_family=FONT_FAMILY,
            font_size=f"{BASE_FONT_SIZE}px",
            font_weight="400",
            line_height="1.6",
        ),
        spacing=Spacing(padding="40px 60px", margin="0", gap="1rem"),
        effects=Effects(
            shadows=["0 2px 4px rgba(0,0,0,0.1)"],
            borders=[f"1px solid {COLORS['border']}"],
            border_radius="4px",
        ),
    )


def style_for(analysis: Optional[ContentAnalysis]) -> StyleDefinition:
    """Default style tightened for dense content."""
    style = default_style()
    if analysis is None:
        return style

    typography = style.typography
    if analysis.complexity == ComplexityTier.HIGH:
        typography = typography.model_copy(update={"font_size": "20px", "line_height": "1.4"})
    elif analysis.line_count > 15:
        typography = typography.model_copy(update={"font_size": "21px", "line_height": "1.5"})

    spacing = style.spacing
    if analysis.needs_split:
        spacing = spacing.model_copy(update={"padding": "40px 60px 45px 60px"})

    return style.model_copy(update={"typography": typography, "spacing": spacing})


def css_custom_properties() -> str:
    """`:root` block with the palette as CSS variables."""
    lines = [":root {"]
    lines.append(f"  --primary-color: {COLORS['primary']};")
    lines.append(f"  --secondary-color: {COLORS['secondary']};")
    lines.append(f"  --accent-color: {COLORS['accent']};")
    lines.append(f"  --text-primary: {COLORS['text']};")
    lines.append(f"  --background: {COLORS['background']};")
    lines.append(f"  --background-alt: {COLORS['background_alt']};")
    lines.append(f"  --border: {COLORS['border']};")
    lines.append("}")
    return "\n".join(lines)
