"""LCOV output — one record per page, one line per element."""

from __future__ import annotations

import json
from pathlib import Path

from uicoverage.models.coverage import CoverageSummary

LCOV_NAME = "lcov.info"
LCOV_SUMMARY_NAME = "lcov-summary.json"
TEST_NAME = "ui-coverage"


def build_lcov(summary: CoverageSummary) -> str:
    lines = []
    for page in summary.pages:
        lines.append(f"TN:{TEST_NAME}")
        lines.append(f"SF:{page.url}")
        for number, entry in enumerate(page.elements, start=1):
            lines.append(f"DA:{number},{len(entry.covered_by)}")
        lines.append(f"LF:{page.total_elements}")
        lines.append(f"LH:{page.covered_elements}")
        lines.append("end_of_record")
    return "\n".join(lines) + "\n" if lines else ""


def build_lcov_summary(summary: CoverageSummary) -> dict:
    return {
        "lines": {
            "total": summary.total_elements,
            "covered": summary.covered_elements,
            "pct": summary.coverage_percentage,
        },
        "files": {
            page.url: {
                "total": page.total_elements,
                "covered": page.covered_elements,
                "pct": page.coverage_percentage,
            }
            for page in summary.pages
        },
    }


def generate_lcov_report(summary: CoverageSummary, output_dir: Path) -> list[Path]:
    """Write ``lcov.info`` plus its JSON summary sidecar; returns both paths."""
    lcov_path = output_dir / LCOV_NAME
    with open(lcov_path, "w") as f:
        f.write(build_lcov(summary))

    summary_path = output_dir / LCOV_SUMMARY_NAME
    with open(summary_path, "w") as f:
        json.dump(build_lcov_summary(summary), f, indent=2)
    return [lcov_path, summary_path]
