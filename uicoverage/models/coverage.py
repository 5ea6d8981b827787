"""Match results, coverage summaries and the persisted coverage registry."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from uicoverage.models.elements import PageElement, TestSelector


class MatchResult(BaseModel):
    selector: TestSelector
    match_score: float = 0.0
    possible_matches: list[PageElement] = Field(default_factory=list)
    element_scores: list[float] = Field(default_factory=list)  # parallel to possible_matches
    matched: bool = False
    reason: str = ""

    def covered_elements(self, threshold: float = 0.5) -> list[PageElement]:
        return [
            el for el, score in zip(self.possible_matches, self.element_scores)
            if score > threshold
        ]


class SelectorMismatch(BaseModel):
    test_selector: TestSelector
    possible_matches: list[PageElement] = Field(default_factory=list)
    match_score: float = 0.0
    reason: str = ""


class SelectorAnalysisReport(BaseModel):
    total_selectors: int = 0
    matched_selectors: int = 0
    unmatched_selectors: int = 0
    mismatches: list[SelectorMismatch] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    results: list[MatchResult] = Field(default_factory=list)


class ElementCoverage(BaseModel):
    page_url: str
    element: PageElement
    covered: bool = False
    covered_by: list[str] = Field(default_factory=list)  # raw selectors
    test_files: list[str] = Field(default_factory=list)


class TypeCoverage(BaseModel):
    total: int = 0
    covered: int = 0
    percentage: int = 100


class PageCoverage(BaseModel):
    url: str
    total_elements: int = 0
    covered_elements: int = 0
    coverage_percentage: int = 100
    elements: list[ElementCoverage] = Field(default_factory=list)
    selector_report: Optional[SelectorAnalysisReport] = None


class TestFileCoverage(BaseModel):
    file_path: str
    selectors: int = 0
    matched_selectors: int = 0
    covered_elements: int = 0
    passed: int = 0
    failed: int = 0


class CoverageSummary(BaseModel):
    total_elements: int = 0
    covered_elements: int = 0
    uncovered_count: int = 0
    coverage_percentage: int = 100
    uncovered_elements: list[ElementCoverage] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    pages: list[PageCoverage] = Field(default_factory=list)
    tests: list[TestFileCoverage] = Field(default_factory=list)
    coverage_by_type: dict[str, TypeCoverage] = Field(default_factory=dict)
    selector_report: SelectorAnalysisReport = Field(default_factory=SelectorAnalysisReport)
    test_files: list[str] = Field(default_factory=list)
    threshold: int = 0
    threshold_met: bool = True


class UncoveredElementAdvice(BaseModel):
    page_url: str
    element: PageElement
    priority: str = "low"  # high, medium, low
    recommendation: str = ""
    suggested_test: str = ""


class DiscoveryRecord(BaseModel):
    url: str
    timestamp: str
    discovery_source: str = ""


class ElementRecord(BaseModel):
    selector: str
    type: str
    text: Optional[str] = None
    first_seen: str = ""
    last_seen: str = ""
    discovered_in: list[DiscoveryRecord] = Field(default_factory=list)
    covered_by: list[str] = Field(default_factory=list)  # test files


class RunHistoryEntry(BaseModel):
    timestamp: str
    coverage_percentage: int
    total_elements: int
    covered_elements: int


class CoverageRegistry(BaseModel):
    last_updated: str = ""
    records: dict[str, ElementRecord] = Field(default_factory=dict)
    history: list[RunHistoryEntry] = Field(default_factory=list)
