"""
Test Suite for Deckflow Pattern Selection

Tests:
1. Confidence stays in [0, 1]
2. Bullet-list section maps to an information-organization pattern
3. Revenue figures map to number emphasis
4. The selected pattern never appears among its alternatives
5. Fallback patterns when no candidate scores positively
6. Sections stay unmapped when nothing was selected
7. Pattern report summarizes the selection
"""

import sys
sys.path.insert(0, '.')

from deckflow.core.pattern_catalog import PatternCatalog
from deckflow.core.pattern_selector import PatternSelector
from deckflow.models.content import ContentType, DocumentRecord, ProcessingStage, Section
from deckflow.models.patterns import Pattern
from deckflow.models.pipeline_config import PipelineConfig

BULLET_TEXT = "- Fast setup\n- Small footprint\n- Clear output"
METRICS_TEXT = "売上は50%、利益は50%、KPIは50%、達成率は50%、成長率は50%を記録"


def make_document(*bodies):
    sections = [
        Section(id=f"section-{i}", ordinal=i, title=f"Part {i}", content=body)
        for i, body in enumerate(bodies)
    ]
    return DocumentRecord(path="03_how-to-present-complete-guide.md", stage=ProcessingStage.PATTERN_SELECTION, sections=sections)


def test_confidence_bounds():
    """Test 1: Confidence is the clamped relative margin over the runner-up."""
    print("\n[TEST 1] Confidence Bounds")
    print("-" * 50)

    assert PatternSelector.compute_confidence(5.0, None) == 1.0
    assert PatternSelector.compute_confidence(10.0, 5.0) == 0.5
    assert PatternSelector.compute_confidence(0.0, -1.0) == 0.0
    assert PatternSelector.compute_confidence(4.0, 6.0) == 0.0
    print("  ✓ Margin formula and clamping")

    result = PatternSelector().select(make_document(BULLET_TEXT, METRICS_TEXT, "Step 1 and Step 2 of the plan."))
    for mapping in result.mapping.pattern_mappings:
        assert 0.0 <= mapping.confidence <= 1.0, f"{mapping.section_id}: {mapping.confidence}"
    print(f"  ✓ {len(result.mapping.pattern_mappings)} mappings within [0, 1]")
    print("  ✓ TEST 1 PASSED!")


def test_bullet_list_mapping():
    """Test 2: A plain bullet list picks an information-organization pattern."""
    print("\n[TEST 2] Bullet List Mapping")
    print("-" * 50)

    result = PatternSelector().select(make_document(BULLET_TEXT))
    assert result.mapping.content_types == [ContentType.INFORMATION_ORGANIZATION]
    assert result.unmapped_section_ids == []

    mapping = result.mapping.mapping_for("section-0")
    assert mapping is not None
    assert mapping.selected_pattern.category == ContentType.INFORMATION_ORGANIZATION, \
        f"Got {mapping.selected_pattern.id} ({mapping.selected_pattern.category})"
    print(f"  ✓ section-0 -> {mapping.selected_pattern.id}")
    print(f"  ✓ Rationale: {mapping.rationale}")
    print("  ✓ TEST 2 PASSED!")


def test_numbers_map_to_emphasis():
    """Test 3: Percentages with revenue vocabulary pick number emphasis."""
    print("\n[TEST 3] Number Emphasis")
    print("-" * 50)

    selector = PatternSelector()
    result = selector.select(make_document(METRICS_TEXT))
    assert result.mapping.content_types == [ContentType.NUMERICAL_DATA]

    mapping = result.mapping.pattern_mappings[0]
    assert mapping.selected_pattern.id == "number-emphasis", f"Got {mapping.selected_pattern.id}"
    assert mapping.confidence > 0.5, f"Expected a clear winner, got {mapping.confidence}"
    assert "numeric data" in mapping.rationale
    print(f"  ✓ Top pick: {mapping.selected_pattern.id} (confidence={mapping.confidence})")

    ranked = selector.rank(selector.catalog.by_category(ContentType.NUMERICAL_DATA), METRICS_TEXT, ContentType.NUMERICAL_DATA)
    assert ranked[0][0].id == "number-emphasis"
    print(f"  ✓ Scores: {[(p.id, round(s, 2)) for p, s in ranked[:3]]}")
    print("  ✓ TEST 3 PASSED!")


def test_selected_not_in_alternatives():
    """Test 4: Alternatives exclude the selected pattern and are capped."""
    print("\n[TEST 4] Alternatives")
    print("-" * 50)

    config = PipelineConfig()
    result = PatternSelector(config=config).select(make_document(BULLET_TEXT, METRICS_TEXT))
    for mapping in result.mapping.pattern_mappings:
        alternative_ids = [p.id for p in mapping.alternatives]
        assert mapping.selected_pattern.id not in alternative_ids
        assert len(alternative_ids) <= config.max_alternatives
        assert set(mapping.scores) == {mapping.selected_pattern.id, *alternative_ids}
        print(f"  ✓ {mapping.section_id}: {mapping.selected_pattern.id} / {alternative_ids}")
    print("  ✓ TEST 4 PASSED!")


def test_fallback_patterns():
    """Test 5: A category with no positive score ranks its fallback list instead."""
    print("\n[TEST 5] Fallback Patterns")
    print("-" * 50)

    catalog = PatternCatalog(
        [
            Pattern(id="obscure", name="Obscure", category=ContentType.NUMERICAL_DATA, effectiveness=1, complexity=5),
            Pattern(id="plain", name="Plain", category=ContentType.INFORMATION_ORGANIZATION, effectiveness=5),
        ],
        fallbacks={ContentType.NUMERICAL_DATA: ["plain", "missing-id"]}
    )
    config = PipelineConfig(weight_effectiveness=0.0, weight_category_match=0.0)
    selector = PatternSelector(catalog=catalog, config=config)

    selected = selector.select_patterns("no vocabulary here", [ContentType.NUMERICAL_DATA])
    assert [p.id for p in selected] == ["plain"], f"Got {[p.id for p in selected]}"
    print("  ✓ Fallback 'plain' used; unknown fallback id skipped")

    selected = selector.select_patterns("no vocabulary here", [ContentType.TEMPORAL_FLOW])
    assert selected == []
    print("  ✓ Category without catalog patterns contributes nothing")
    print("  ✓ TEST 5 PASSED!")


def test_unmapped_sections():
    """Test 6: With no selected patterns every section is reported unmapped."""
    print("\n[TEST 6] Unmapped Sections")
    print("-" * 50)

    selector = PatternSelector()
    document = make_document(BULLET_TEXT, METRICS_TEXT)
    mappings, unmapped = selector.map_sections(document.sections, [])
    assert mappings == []
    assert unmapped == ["section-0", "section-1"]
    print(f"  ✓ Unmapped: {unmapped}")
    print("  ✓ TEST 6 PASSED!")


def test_pattern_report():
    """Test 7: The report counts patterns and flags low confidence."""
    print("\n[TEST 7] Pattern Report")
    print("-" * 50)

    selector = PatternSelector()
    result = selector.select(make_document(BULLET_TEXT, METRICS_TEXT))
    report = selector.build_report(result.mapping)

    assert report.summary.startswith("Selected 2 pattern types for 2 sections")
    assert report.pattern_effectiveness["Number Emphasis"] == 9
    assert report.content_type_distribution["numerical-data"] == 1
    print(f"  ✓ {report.summary}")
    print(f"  ✓ Recommendations: {report.recommendations}")
    print("  ✓ TEST 7 PASSED!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("DECKFLOW PATTERN SELECTION TEST SUITE")
    print("=" * 60)

    tests = [
        test_confidence_bounds,
        test_bullet_list_mapping,
        test_numbers_map_to_emphasis,
        test_selected_not_in_alternatives,
        test_fallback_patterns,
        test_unmapped_sections,
        test_pattern_report,
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
