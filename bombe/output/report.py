"""
Bombe Report Generator
=======================

Writes search results to JSON reports for automated processing.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from bombe import __version__
from bombe.core.models import SearchResult


class BombeReportGenerator:
    """Serialises :class:`SearchResult` objects.

    Usage::

        reporter = BombeReportGenerator()
        reporter.generate_json(result, Path("report.json"))
    """

    def build(self, result: SearchResult) -> dict[str, Any]:
        """Report structure: metadata, search summary and ranked candidates."""
        return {
            "report_metadata": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "tool": "bombe",
                "version": __version__,
            },
            "summary": {
                "ciphertext": result.ciphertext,
                "crib": result.crib,
                "scoring": result.scoring.value,
                "strategy": result.strategy.value,
                "keys_total": result.keys_total,
                "keys_evaluated": result.keys_evaluated,
                "workers": result.workers,
                "timed_out": result.timed_out,
                "duration_seconds": result.elapsed_seconds,
            },
            "candidates": [
                {"rank": rank, **candidate.model_dump()}
                for rank, candidate in enumerate(result.candidates, start=1)
            ],
        }

    def to_json(self, result: SearchResult) -> str:
        return json.dumps(self.build(result), indent=2, ensure_ascii=False, default=str)

    def generate_json(self, result: SearchResult, output_path: Path) -> Path:
        """Write the JSON report to *output_path*, creating parent directories.

        Returns:
            Path to the generated JSON file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.to_json(result), encoding="utf-8")
        return output_path
