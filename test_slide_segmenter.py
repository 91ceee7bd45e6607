"""
Test Suite for the Deckflow Slide Segmenter

Tests:
1. Short section becomes one slide
2. Long section with code splits into overview + detail slides within limits
3. Splitting keeps every paragraph, in order
4. Fenced code blocks are never broken
5. Empty section yields no slides
6. Deck structure is numbered contiguously from the title slide
7. Layout follows the pattern mapping
"""

import sys
sys.path.insert(0, '.')

from deckflow.core.pattern_catalog import PatternCatalog
from deckflow.core.slide_segmenter import SlideSegmenter
from deckflow.models.content import ContentType, DocumentRecord, ProcessingStage, Section
from deckflow.models.patterns import PatternMapping
from deckflow.models.slides import LayoutPattern, SlideKind
from deckflow.utils.text_metrics import FENCE_LINE, non_empty_lines, split_paragraphs

CODE_SAMPLE = "```python\ndef handler(event):\n\n    return event\n```"


def long_body():
    """Eleven two-line paragraphs plus two code blocks: 30 non-empty lines."""
    parts = [
        f"Paragraph {i} describes one part of the rollout.\nA second line adds a little more detail."
        for i in range(1, 12)
    ]
    parts.insert(3, CODE_SAMPLE)
    parts.insert(8, CODE_SAMPLE.replace("handler", "cleanup"))
    return "\n\n".join(parts)


def make_section(content, section_id="section-0", title="Rollout"):
    return Section(id=section_id, ordinal=0, title=title, content=content)


def test_single_slide():
    """Test 1: A section within every limit stays on one slide."""
    print("\n[TEST 1] Single Slide")
    print("-" * 50)

    segmenter = SlideSegmenter()
    section = make_section("A short introduction.\n\n- first point\n- second point")
    slides = segmenter.segment(section, start_order=4)

    assert len(slides) == 1
    slide = slides[0]
    assert slide.kind == SlideKind.SINGLE
    assert slide.id == "slide-section-0"
    assert slide.order == 4
    assert slide.sections[0].body == section.content
    assert slide.sections[0].estimated_minutes == 2
    assert slide.has_overview
    print(f"  ✓ {slide.id} order={slide.order} layout={slide.layout.pattern.value}")
    print(f"  ✓ Overview: {slide.overview_statement}")
    print("  ✓ TEST 1 PASSED!")


def test_long_section_splits():
    """Test 2: 30 lines with two code blocks give overview + details within limits."""
    print("\n[TEST 2] Long Section Split")
    print("-" * 50)

    segmenter = SlideSegmenter()
    body = long_body()
    assert len(non_empty_lines(body)) == 30

    analysis = segmenter.analyze(body)
    assert analysis.needs_split
    assert analysis.code_block_count == 2
    print(f"  ✓ Analysis: {analysis.line_count} lines, {analysis.character_count} chars, {analysis.complexity.value}")

    slides = segmenter.segment(make_section(body), start_order=1)
    assert slides[0].kind == SlideKind.OVERVIEW
    assert slides[0].id == "slide-section-0-overview"
    assert slides[0].title == "Rollout: Overview"
    assert slides[0].has_overview
    details = slides[1:]
    assert len(details) >= 1
    print(f"  ✓ 1 overview + {len(details)} detail slides")

    for index, slide in enumerate(details, 1):
        chunk = slide.sections[0].body
        assert slide.kind == SlideKind.DETAIL
        assert slide.id == f"slide-section-0-{index}"
        assert len(non_empty_lines(chunk)) <= 23, f"{slide.id} has too many lines"
        assert len(chunk) <= 800, f"{slide.id} has {len(chunk)} characters"
        assert not segmenter.analyze(chunk).needs_split
        print(f"  ✓ {slide.id}: {len(non_empty_lines(chunk))} lines, {len(chunk)} chars")

    assert [s.order for s in slides] == list(range(1, len(slides) + 1))
    print("  ✓ Orders contiguous from 1")
    print("  ✓ TEST 2 PASSED!")


def test_paragraphs_preserved():
    """Test 3: Detail bodies rejoined give back the original paragraphs."""
    print("\n[TEST 3] Paragraph Preservation")
    print("-" * 50)

    body = long_body()
    slides = SlideSegmenter().segment(make_section(body))
    rejoined = "\n\n".join(slide.sections[0].body for slide in slides[1:])

    assert split_paragraphs(rejoined) == split_paragraphs(body)
    print(f"  ✓ {len(split_paragraphs(body))} paragraphs preserved in order")
    print("  ✓ TEST 3 PASSED!")


def test_code_blocks_atomic():
    """Test 4: Every detail slide holds whole fences only."""
    print("\n[TEST 4] Atomic Code Blocks")
    print("-" * 50)

    slides = SlideSegmenter().segment(make_section(long_body()))
    fenced = 0
    for slide in slides[1:]:
        chunk = slide.sections[0].body
        fence_lines = [line for line in chunk.split("\n") if FENCE_LINE.match(line)]
        assert len(fence_lines) % 2 == 0, f"{slide.id} has an open fence"
        if CODE_SAMPLE in chunk or CODE_SAMPLE.replace("handler", "cleanup") in chunk:
            fenced += 1
    assert fenced == 2, f"Expected both code samples intact, found {fenced}"
    print("  ✓ Both code samples intact, blank line inside fence kept")
    print("  ✓ TEST 4 PASSED!")


def test_empty_section():
    """Test 5: Whitespace-only sections produce nothing."""
    print("\n[TEST 5] Empty Section")
    print("-" * 50)

    assert SlideSegmenter().segment(make_section("   \n\n  ")) == []
    print("  ✓ Empty section -> []")
    print("  ✓ TEST 5 PASSED!")


def test_build_structure():
    """Test 6: Title slide first, then every section's slides, numbered 1..N."""
    print("\n[TEST 6] Deck Structure")
    print("-" * 50)

    document = DocumentRecord(
        path="04_marp-expression-complete-guide.md",
        stage=ProcessingStage.SLIDE_GENERATION,
        title="Launch Plan",
        author="Dana",
        sections=[
            make_section("A short introduction to the plan.", "section-0", "Intro"),
            make_section("", "section-1", "Placeholder"),
            make_section(long_body(), "section-2", "Rollout"),
        ]
    )
    structure = SlideSegmenter().build_structure(document)

    assert structure.title == "Launch Plan"
    assert structure.slides[0].kind == SlideKind.TITLE
    assert structure.slides[0].layout.pattern == LayoutPattern.CENTER
    assert "Dana" in structure.slides[0].sections[0].rendered
    assert "- Placeholder" not in structure.slides[0].sections[0].body
    assert [s.order for s in structure.slides] == list(range(1, len(structure.slides) + 1))
    assert {s.section_id for s in structure.slides[1:]} == {"section-0", "section-2"}
    assert structure.total_minutes == sum(s.estimated_minutes for s in structure.slides)
    print(f"  ✓ {len(structure.slides)} slides, {structure.total_minutes} minutes")
    print("  ✓ TEST 6 PASSED!")


def test_layout_from_mapping():
    """Test 7: A mapped pattern decides layout and the rendered class directive."""
    print("\n[TEST 7] Layout From Mapping")
    print("-" * 50)

    catalog = PatternCatalog.default()
    mapping = PatternMapping(
        section_id="section-0",
        selected_pattern=catalog.get("steps"),
        alternatives=[catalog.get("timeline")],
        scores={"steps": 5.0, "timeline": 4.0}
    )
    section = make_section("Install it.\n\nThen configure it.").model_copy(
        update={"content_type": ContentType.TEMPORAL_FLOW}
    )
    plain = SlideSegmenter().segment(section)[0]
    mapped = SlideSegmenter().segment(section, mapping)[0]

    assert plain.layout.pattern == LayoutPattern.CENTER
    assert mapped.layout.pattern == LayoutPattern.FLOWCHART
    assert mapped.sections[0].rendered.startswith("<!-- _class: steps-layout -->")
    assert mapped.sections[0].content_type == ContentType.TEMPORAL_FLOW
    assert plain.overview_statement == "The steps and sequence of Rollout"
    print(f"  ✓ Unmapped layout {plain.layout.pattern.value}, mapped layout {mapped.layout.pattern.value}")
    print("  ✓ TEST 7 PASSED!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("DECKFLOW SLIDE SEGMENTER TEST SUITE")
    print("=" * 60)

    tests = [
        test_single_slide,
        test_long_section_splits,
        test_paragraphs_preserved,
        test_code_blocks_atomic,
        test_empty_section,
        test_build_structure,
        test_layout_from_mapping,
    ]

    results = []
    for number, test in enumerate(tests, 1):
        try:
            test()
            results.append(True)
        except Exception as e:
            print(f"  ✗ TEST {number} FAILED: {e}")
            results.append(False)

    print("\n" + "=" * 60)
    print(f"RESULTS: {sum(results)}/{len(results)} tests passed")
    print("=" * 60)
    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
