"""JSON report output."""

from __future__ import annotations

import json
import time
from pathlib import Path

from uicoverage.models.coverage import CoverageSummary

REPORT_VERSION = "1.0.0"
JSON_REPORT_NAME = "coverage-report.json"


def build_json_report(summary: CoverageSummary) -> dict:
    """Machine-readable view of a summary with camelCase top-level keys."""
    data = summary.model_dump(mode="json", by_alias=True)
    return {
        "summary": {
            "totalElements": summary.total_elements,
            "coveredElements": summary.covered_elements,
            "uncoveredElements": summary.uncovered_count,
            "coveragePercentage": summary.coverage_percentage,
            "threshold": summary.threshold,
            "thresholdMet": summary.threshold_met,
            "testFiles": len(summary.test_files),
        },
        "recommendations": summary.recommendations,
        "uncoveredElements": data["uncovered_elements"],
        "pages": [
            {
                "url": page.url,
                "totalElements": page.total_elements,
                "coveredElements": page.covered_elements,
                "coveragePercentage": page.coverage_percentage,
                "uncovered": [e.element.selector for e in page.elements if not e.covered],
            }
            for page in summary.pages
        ],
        "tests": data["tests"],
        "coverageByType": data["coverage_by_type"],
        "selectorAnalysis": {
            "totalSelectors": summary.selector_report.total_selectors,
            "matchedSelectors": summary.selector_report.matched_selectors,
            "unmatchedSelectors": summary.selector_report.unmatched_selectors,
            "mismatches": [
                {
                    "selector": m.test_selector.raw,
                    "kind": m.test_selector.kind.value,
                    "file": m.test_selector.file_path,
                    "line": m.test_selector.line_number,
                    "matchScore": m.match_score,
                    "reason": m.reason,
                }
                for m in summary.selector_report.mismatches
            ],
            "recommendations": summary.selector_report.recommendations,
        },
        "generatedAt": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "version": REPORT_VERSION,
    }


def generate_json_report(summary: CoverageSummary, output_path: Path) -> None:
    """Write a machine-readable JSON report."""
    report = build_json_report(summary)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
