"""Configuration models for a coverage run."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

VALID_REPORT_FORMATS = {"console", "json", "html", "lcov", "all"}
VALID_PAGE_SCOPINGS = {"per_page", "pooled"}


class ViewportConfig(BaseModel):
    width: int = 1920
    height: int = 1080


class CoverageConfig(BaseModel):
    # Inputs
    test_patterns: list[str] = Field(
        default_factory=lambda: ["tests/**/*.spec.ts", "tests/**/test_*.py"]
    )
    page_urls: list[str] = Field(default_factory=list)
    element_snapshots: list[str] = Field(default_factory=list)

    # Verdict
    threshold: int = 80
    page_scoping: str = "per_page"

    # Filtering
    filter_preset: str = "comprehensive"
    filter_overrides: dict[str, Any] = Field(default_factory=dict)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["console"])
    output_path: str = "./coverage-report"
    verbose: bool = False

    # History
    persist_history: bool = False
    history_retention_runs: int = 20

    def resolved_formats(self) -> list[str]:
        if "all" in self.report_formats:
            return ["console", "json", "html", "lcov"]
        return [f for f in self.report_formats if f in VALID_REPORT_FORMATS]

    @classmethod
    def load(cls, path: str | Path) -> "CoverageConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
