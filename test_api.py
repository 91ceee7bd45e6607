"""
Test Suite for the Deckflow HTTP API

Tests:
1. Health check
2. Run lifecycle: start, status, report, output
3. Run with a missing input document fails and reports its issues
4. Unknown runs and directories return 404
5. Finished runs are evicted by age and by count
6. PORT from the environment sets the API port
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
sys.path.insert(0, '.')

from fastapi.testclient import TestClient

from config.settings import Settings
from deckflow.core.pipeline import PipelineOrchestrator
from deckflow.models.pipeline_config import PipelineConfig
from deckflow.services.document_loader import REQUIRED_FILES
from main import RunRecord, _runs, app, cleanup_finished_runs


def write_inputs(directory, skip=()):
    for index, filename in enumerate(REQUIRED_FILES, 1):
        if filename in skip:
            continue
        text = f"# Document {index}\n\n## Body\n\nContent for stage {index}.\n\n- first point\n- second point\n"
        (Path(directory) / filename).write_text(text, encoding="utf-8")


def test_health():
    """Test 1: /health reports the service and its settings."""
    print("\n[TEST 1] Health Check")
    print("-" * 50)

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["service"] == "deckflow"
    assert body["status"] in ("healthy", "disabled")
    assert "runs" in body
    print(f"  ✓ {body}")
    print("  ✓ TEST 1 PASSED!")


def test_run_lifecycle():
    """Test 2: A complete input directory runs to completion in the background."""
    print("\n[TEST 2] Run Lifecycle")
    print("-" * 50)

    with tempfile.TemporaryDirectory() as tmp, TestClient(app) as client:
        write_inputs(tmp)

        response = client.post("/runs", json={"input_dir": tmp})
        assert response.status_code == 202, response.text
        started = response.json()
        assert started["input_issues"] == []
        run_id = started["run_id"]
        print(f"  ✓ Accepted run {run_id}")

        status = client.get(f"/runs/{run_id}/status").json()
        assert status["state"] == "completed", status
        assert status["progress"] == 100
        assert status["completed"] is True
        assert status["error"] is None
        print(f"  ✓ Status: {status['state']} at {status['progress']}%")

        report = client.get(f"/runs/{run_id}/report")
        assert report.status_code == 200
        summary = report.json()["summary"]
        assert summary["total_slides"] >= 2
        assert 0 <= summary["quality_score"] <= 100
        print(f"  ✓ Report: {summary['total_slides']} slides, quality {summary['quality_score']}")

        output = client.get(f"/runs/{run_id}/output")
        assert output.status_code == 200
        assert output.text.startswith("---\nmarp: true")
        print(f"  ✓ Output: {len(output.text)} characters of Marp markdown")
    print("  ✓ TEST 2 PASSED!")


def test_run_with_missing_document():
    """Test 3: The run is accepted, then fails on the missing stage document."""
    print("\n[TEST 3] Missing Document")
    print("-" * 50)

    with tempfile.TemporaryDirectory() as tmp, TestClient(app) as client:
        write_inputs(tmp, skip=(REQUIRED_FILES[2],))

        response = client.post("/runs", json={"input_dir": tmp})
        assert response.status_code == 202
        started = response.json()
        assert [issue["code"] for issue in started["input_issues"]] == ["FILE_NOT_FOUND"]
        run_id = started["run_id"]

        status = client.get(f"/runs/{run_id}/status").json()
        assert status["state"] == "failed"
        assert status["aborted"] is True
        assert status["current_stage"] == 3
        assert "FILE_NOT_FOUND" in status["error"]
        print(f"  ✓ Failed at stage {status['current_stage']}: {status['error']}")

        assert client.get(f"/runs/{run_id}/report").status_code == 409
        assert client.get(f"/runs/{run_id}/output").status_code == 409
        print("  ✓ Report and output unavailable (409)")
    print("  ✓ TEST 3 PASSED!")


def test_not_found():
    """Test 4: Unknown run ids and input directories are 404s."""
    print("\n[TEST 4] Not Found")
    print("-" * 50)

    with TestClient(app) as client:
        assert client.get("/runs/does-not-exist/status").status_code == 404
        assert client.get("/runs/does-not-exist/output").status_code == 404
        response = client.post("/runs", json={"input_dir": "/nonexistent/deckflow-input"})
        assert response.status_code == 404
    print("  ✓ 404 for unknown run and missing directory")
    print("  ✓ TEST 4 PASSED!")


def make_record(run_id, state, minutes_ago=None):
    record = RunRecord(run_id, PipelineOrchestrator(PipelineConfig()))
    record.state = state
    if minutes_ago is not None:
        record.finished_at = datetime.now() - timedelta(minutes=minutes_ago)
    return record


def test_finished_run_eviction():
    """Test 5: Old finished runs go first; pending and running runs stay."""
    print("\n[TEST 5] Finished Run Eviction")
    print("-" * 50)

    saved = dict(_runs)
    _runs.clear()
    try:
        for record in [
            make_record("old", "completed", minutes_ago=120),
            make_record("recent", "failed", minutes_ago=5),
            make_record("running", "running"),
            make_record("pending", "pending"),
        ]:
            _runs[record.run_id] = record

        result = cleanup_finished_runs(max_age_minutes=60, max_runs=10)
        assert result["runs_evicted"] == 1
        assert set(_runs) == {"recent", "running", "pending"}
        print(f"  ✓ Expired by age: {result}")

        result = cleanup_finished_runs(max_age_minutes=60, max_runs=2)
        assert result["runs_evicted"] == 1
        assert set(_runs) == {"running", "pending"}
        print("  ✓ Oldest finished run evicted over the cap")

        result = cleanup_finished_runs(max_age_minutes=60, max_runs=1)
        assert result["runs_evicted"] == 0
        assert set(_runs) == {"running", "pending"}
        print("  ✓ Unfinished runs are never evicted")
    finally:
        _runs.clear()
        _runs.update(saved)
    print("  ✓ TEST 5 PASSED!")


def test_port_setting():
    """Test 6: PORT from the environment sets API_PORT."""
    print("\n[TEST 6] Port Setting")
    print("-" * 50)

    saved = {name: os.environ.pop(name, None) for name in ("PORT", "API_PORT")}
    try:
        assert Settings(_env_file=None).API_PORT == 8000
        os.environ["PORT"] = "9123"
        assert Settings(_env_file=None).API_PORT == 9123
        print("  ✓ PORT=9123 -> API_PORT 9123")

        del os.environ["PORT"]
        os.environ["API_PORT"] = "9124"
        assert Settings(_env_file=None).API_PORT == 9124
        print("  ✓ API_PORT still accepted")
    finally:
        for name, value in saved.items():
            os.environ.pop(name, None)
            if value is not None:
                os.environ[name] = value
    print("  ✓ TEST 6 PASSED!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("DECKFLOW API TEST SUITE")
    print("=" * 60)

    tests = [
        test_health,
        test_run_lifecycle,
        test_run_with_missing_document,
        test_not_found,
        test_finished_run_eviction,
        test_port_setting,
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
