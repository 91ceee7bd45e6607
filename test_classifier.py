"""
Test Suite for the Deckflow Content Classifier

Tests:
1. Classification is never empty
2. Plain bullet list classifies as information organization only
3. Percentages plus revenue vocabulary classify as numerical data
4. Detector priority (structural, temporal)
5. Injected keyword tables replace the defaults
6. Document classification is the ordered union of its sections
"""

import sys
sys.path.insert(0, '.')

from deckflow.core.content_classifier import ClassifierKeywords, ContentClassifier
from deckflow.models.content import ContentType, Section

BULLET_TEXT = "- Fast setup\n- Small footprint\n- Clear output"
METRICS_TEXT = "売上は50%、利益は50%、KPIは50%、達成率は50%、成長率は50%を記録"


def test_never_empty():
    """Test 1: Empty and neutral text still yields one content type."""
    print("\n[TEST 1] Never Empty")
    print("-" * 50)

    classifier = ContentClassifier()
    for text in ["", None, "plain words without any markers"]:
        types = classifier.classify_types(text)
        assert types == [ContentType.INFORMATION_ORGANIZATION], f"Unexpected types for {text!r}: {types}"
        print(f"  ✓ {text!r} -> {[t.value for t in types]}")

    assert classifier.classify_document([]) == [ContentType.INFORMATION_ORGANIZATION]
    print("  ✓ Document with no sections -> information-organization")
    print("  ✓ TEST 1 PASSED!")


def test_bullet_list_is_organization():
    """Test 2: A bare bullet list is information organization and nothing else."""
    print("\n[TEST 2] Bullet List")
    print("-" * 50)

    classifier = ContentClassifier()
    types = classifier.classify_types(BULLET_TEXT)
    assert types == [ContentType.INFORMATION_ORGANIZATION], f"Got {types}"
    assert classifier.primary_type(BULLET_TEXT) == ContentType.INFORMATION_ORGANIZATION
    print(f"  ✓ Types: {[t.value for t in types]}")

    explanation = classifier.explain(BULLET_TEXT)
    assert explanation["keyword_hits"] == {}, f"Unexpected keyword hits: {explanation['keyword_hits']}"
    assert explanation["signal_counts"] == {"information-organization": 3}
    print(f"  ✓ Signals: {explanation['signal_counts']}")
    print("  ✓ TEST 2 PASSED!")


def test_metrics_are_numerical():
    """Test 3: Five percentages with revenue and KPI vocabulary are numerical data."""
    print("\n[TEST 3] Numerical Data")
    print("-" * 50)

    classifier = ContentClassifier()
    counts = classifier.signal_counts(METRICS_TEXT)
    assert counts[ContentType.NUMERICAL_DATA] >= 3, f"Numeric signals too low: {counts}"
    print(f"  ✓ Numeric signals: {counts[ContentType.NUMERICAL_DATA]}")

    hits = classifier.keyword_hits(METRICS_TEXT)[ContentType.NUMERICAL_DATA]
    assert len(hits) >= 2, f"Expected numerical keywords, got {hits}"
    print(f"  ✓ Keyword hits: {hits}")

    types = classifier.classify_types(METRICS_TEXT)
    assert types == [ContentType.NUMERICAL_DATA], f"Got {types}"
    assert classifier.primary_type(METRICS_TEXT) == ContentType.NUMERICAL_DATA
    print(f"  ✓ Types: {[t.value for t in types]}")
    print("  ✓ TEST 3 PASSED!")


def test_detector_priority():
    """Test 4: Structural and temporal detectors fire on their markers."""
    print("\n[TEST 4] Detector Priority")
    print("-" * 50)

    classifier = ContentClassifier()

    diagram = "```mermaid\ngraph TD\n  A --> B\n```"
    assert classifier.primary_type(diagram) == ContentType.STRUCTURAL_RELATIONSHIP
    print("  ✓ Mermaid block -> structural-relationship (ahead of code-block organization)")

    steps = "Step 1: install the tool. Step 2: configure it."
    assert classifier.primary_type(steps) == ContentType.TEMPORAL_FLOW
    print("  ✓ Step markers -> temporal-flow")

    single_step = "Step 1 only."
    assert classifier.primary_type(single_step) == ContentType.INFORMATION_ORGANIZATION
    print("  ✓ One temporal signal stays below the threshold")
    print("  ✓ TEST 4 PASSED!")


def test_injected_keywords():
    """Test 5: Keyword tables are injectable."""
    print("\n[TEST 5] Injected Keywords")
    print("-" * 50)

    keywords = ClassifierKeywords.from_mapping({"emotional-experiential": ["alpha", "beta"]})
    classifier = ContentClassifier(keywords=keywords)

    assert classifier.keyword_types("Alpha and BETA together") == {ContentType.EMOTIONAL_EXPERIENTIAL}
    assert classifier.classify_types("alpha beta") == [ContentType.EMOTIONAL_EXPERIENTIAL]
    print("  ✓ Case-insensitive match on injected keywords")

    assert classifier.keyword_types("alpha alone") == set()
    print("  ✓ One distinct keyword is below the threshold")
    print("  ✓ TEST 5 PASSED!")


def test_document_union():
    """Test 6: Document types are the union of section types in fixed order."""
    print("\n[TEST 6] Document Union")
    print("-" * 50)

    classifier = ContentClassifier()
    sections = [
        Section(id="section-0", ordinal=0, title="Highlights", content=BULLET_TEXT),
        Section(id="section-1", ordinal=1, title="Results", content=METRICS_TEXT),
    ]
    types = classifier.classify_document(sections)
    assert types == [ContentType.NUMERICAL_DATA, ContentType.INFORMATION_ORGANIZATION], f"Got {types}"
    print(f"  ✓ Types: {[t.value for t in types]}")

    classified = classifier.classify_section(sections[1])
    assert classified.content_type == ContentType.NUMERICAL_DATA
    assert sections[1].content_type == ContentType.INFORMATION_ORGANIZATION
    print("  ✓ classify_section returns a copy")
    print("  ✓ TEST 6 PASSED!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("DECKFLOW CONTENT CLASSIFIER TEST SUITE")
    print("=" * 60)

    tests = [
        test_never_empty,
        test_bullet_list_is_organization,
        test_metrics_are_numerical,
        test_detector_priority,
        test_injected_keywords,
        test_document_union,
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
