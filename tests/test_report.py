"""Tests for the JSON report generator."""

import json
from datetime import datetime, timedelta, timezone

from bombe.core.models import EvaluatedCandidate, ScoringMode, SearchResult
from bombe.output.report import BombeReportGenerator


def _result():
    started = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return SearchResult(
        ciphertext="ABC",
        scoring=ScoringMode.EXTENDED,
        candidates=[
            EvaluatedCandidate(plaintext="THE", score=1.5, settings="KEY: AAA", key="AAA", rotors=["1", "2", "3"], reflector="B"),
            EvaluatedCandidate(plaintext="AND", score=2.5, settings="KEY: AAB", key="AAB", rotors=["1", "2", "3"], reflector="B"),
        ],
        keys_total=105456,
        keys_evaluated=105456,
        workers=2,
        started_at=started,
        finished_at=started + timedelta(seconds=3),
    )


def test_build():
    report = BombeReportGenerator().build(_result())
    assert report["report_metadata"]["tool"] == "bombe"
    assert report["summary"]["scoring"] == "extended"
    assert report["summary"]["duration_seconds"] == 3.0
    assert [c["rank"] for c in report["candidates"]] == [1, 2]
    assert report["candidates"][0]["plaintext"] == "THE"
    assert report["candidates"][0]["rotors"] == ["1", "2", "3"]


def test_generate_json(tmp_path):
    path = BombeReportGenerator().generate_json(_result(), tmp_path / "out" / "report.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["summary"]["keys_total"] == 105456
    assert data["candidates"][1]["key"] == "AAB"
