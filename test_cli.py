"""
Test Suite for the Deckflow CLI

Tests:
1. Deck on stdout, status and warnings on stderr
2. --output writes the deck file and leaves stdout empty
3. Missing input directory exits with code 1
"""

import subprocess
import sys
import tempfile
from pathlib import Path
sys.path.insert(0, '.')

from deckflow.services.document_loader import REQUIRED_FILES

CLI = str(Path(__file__).parent / "tools" / "deckflow_cli.py")


def write_inputs(directory):
    for index, filename in enumerate(REQUIRED_FILES, 1):
        text = f"# Document {index}\n\n## Body\n\nContent for stage {index}.\n\n- first point\n- second point\n"
        (Path(directory) / filename).write_text(text, encoding="utf-8")


def run_cli(*args):
    return subprocess.run(
        [sys.executable, CLI, *args],
        capture_output=True,
        text=True,
        encoding="utf-8",
        timeout=120
    )


def test_deck_on_stdout():
    """Test 1: Redirecting stdout yields a clean Marp document."""
    print("\n[TEST 1] Deck On Stdout")
    print("-" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        write_inputs(tmp)
        completed = run_cli(tmp)

    assert completed.returncode == 0, completed.stderr
    assert completed.stdout.startswith("---\nmarp: true"), completed.stdout[:80]
    assert "\033[" not in completed.stdout
    print("  ✓ stdout starts with the front matter, no colour codes")

    assert "stage 5 (FINAL_EMISSION) 100% completed" in completed.stderr
    print("  ✓ Status line on stderr")
    print("  ✓ TEST 1 PASSED!")


def test_output_file():
    """Test 2: --output and --report keep stdout empty."""
    print("\n[TEST 2] Output File")
    print("-" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        write_inputs(tmp)
        target = Path(tmp) / "deck.md"
        completed = run_cli(tmp, "--output", str(target), "--report")

        assert completed.returncode == 0, completed.stderr
        assert target.read_text(encoding="utf-8").startswith("---\nmarp: true")
    assert completed.stdout == ""
    assert '"quality_score"' in completed.stderr
    print("  ✓ Deck written to file, report on stderr")
    print("  ✓ TEST 2 PASSED!")


def test_missing_directory():
    """Test 3: An unusable input directory fails without printing a deck."""
    print("\n[TEST 3] Missing Directory")
    print("-" * 50)

    completed = run_cli("/nonexistent/deckflow-input")
    assert completed.returncode == 1
    assert completed.stdout == ""
    assert "FILE_NOT_FOUND" in completed.stderr
    print("  ✓ Exit code 1, nothing on stdout")
    print("  ✓ TEST 3 PASSED!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("DECKFLOW CLI TEST SUITE")
    print("=" * 60)

    tests = [
        test_deck_on_stdout,
        test_output_file,
        test_missing_directory,
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
