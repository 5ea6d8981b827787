"""Coverage aggregation — folds page elements and test selectors into one summary."""

from __future__ import annotations

import logging
import math
from typing import Iterable

from uicoverage.matching.selector_analyzer import SelectorAnalyzer
from uicoverage.models.config import VALID_PAGE_SCOPINGS
from uicoverage.models.coverage import (
    CoverageSummary,
    ElementCoverage,
    PageCoverage,
    SelectorAnalysisReport,
    TestFileCoverage,
    TypeCoverage,
)
from uicoverage.models.elements import PageElement, TestSelector
from uicoverage.url_utils import normalize_url

logger = logging.getLogger(__name__)

PASSED_STATUSES = {"passed", "pass"}
SKIPPED_STATUSES = {"skipped", "skip"}

ElementKey = tuple[str, str]


def coverage_percentage(covered: int, total: int) -> int:
    """Rounded percentage, half up. Nothing to cover counts as fully covered."""
    if total == 0:
        return 100
    return math.floor(covered * 100 / total + 0.5)


def _element_key(element: PageElement) -> ElementKey:
    return (element.selector, element.type)


def _selector_key(selector: TestSelector) -> tuple[str, str]:
    return (selector.raw, selector.kind.value)


def coverage_recommendations(percentage: int, by_type: dict[str, TypeCoverage]) -> list[str]:
    recs = []
    if percentage < 50:
        recs.append("Critical: Your test coverage is below 50%. Consider adding more E2E tests.")
    elif percentage < 75:
        recs.append("Warning: Test coverage is below 75%. Some interactive elements may not be tested.")
    elif percentage < 90:
        recs.append("Good: Test coverage is decent but there's room for improvement.")
    else:
        recs.append("Excellent: You have comprehensive test coverage!")

    for element_type, cov in by_type.items():
        if cov.total and cov.percentage < 50:
            recs.append(
                f"Low coverage for {element_type} elements ({cov.percentage}%). "
                "Consider adding tests for these."
            )
    return recs


class CoverageAggregator:
    """Collects discovery and selector feeds for one run and summarizes them.

    Elements are keyed by (page, selector, type), so feeding pages in any
    order, or feeding the same page twice, yields the same summary.
    """

    def __init__(self, page_scoping: str = "per_page", analyzer: SelectorAnalyzer | None = None):
        if page_scoping not in VALID_PAGE_SCOPINGS:
            raise ValueError(f"Unknown page scoping '{page_scoping}'")
        self.page_scoping = page_scoping
        self.analyzer = analyzer or SelectorAnalyzer()
        self._pages: dict[str, dict[ElementKey, PageElement]] = {}
        self._selectors: dict[tuple[str, str, str], TestSelector] = {}
        self._outcomes: dict[str, list[int]] = {}

    def add_page(self, url: str, elements: Iterable[PageElement]) -> None:
        page = self._pages.setdefault(normalize_url(url), {})
        for element in elements:
            page.setdefault(_element_key(element), element)

    def add_selectors(self, selectors: Iterable[TestSelector]) -> None:
        for selector in selectors:
            key = (selector.file_path, *_selector_key(selector))
            self._selectors.setdefault(key, selector)

    def record_test_result(self, file_path: str, status: str) -> None:
        counts = self._outcomes.setdefault(file_path, [0, 0])
        status = status.lower()
        if status in PASSED_STATUSES:
            counts[0] += 1
        elif status not in SKIPPED_STATUSES:
            counts[1] += 1

    def _unique_selectors(self) -> list[TestSelector]:
        unique: dict[tuple[str, str], TestSelector] = {}
        for key in sorted(self._selectors):
            selector = self._selectors[key]
            unique.setdefault(_selector_key(selector), selector)
        return [unique[k] for k in sorted(unique)]

    def summarize(self, threshold: int = 0) -> CoverageSummary:
        """Run selector analysis over every page and fold it into a CoverageSummary."""
        selectors = self._unique_selectors()
        pages: list[PageCoverage] = []
        all_elements: list[PageElement] = []
        by_type: dict[str, TypeCoverage] = {}
        covered_keys_by_raw: dict[tuple[str, str], set[tuple[str, ElementKey]]] = {}
        files_by_selector: dict[tuple[str, str], set[str]] = {}
        for selector in self._selectors.values():
            if selector.file_path:
                files_by_selector.setdefault(_selector_key(selector), set()).add(selector.file_path)

        for url in sorted(self._pages):
            elements = [self._pages[url][k] for k in sorted(self._pages[url])]
            all_elements.extend(elements)
            report = self.analyzer.analyze(selectors, elements)

            covered_by: dict[ElementKey, list[TestSelector]] = {}
            for result in report.results:
                for element in result.covered_elements():
                    covered_by.setdefault(_element_key(element), []).append(result.selector)
                    covered_keys_by_raw.setdefault(_selector_key(result.selector), set()).add(
                        (url, _element_key(element))
                    )

            entries = []
            for element in elements:
                selectors_hit = covered_by.get(_element_key(element), [])
                files = set()
                for selector in selectors_hit:
                    files |= files_by_selector.get(_selector_key(selector), set())
                entries.append(ElementCoverage(
                    page_url=url,
                    element=element,
                    covered=bool(selectors_hit),
                    covered_by=[s.raw for s in selectors_hit],
                    test_files=sorted(files),
                ))
                type_cov = by_type.setdefault(element.type, TypeCoverage())
                type_cov.total += 1
                if selectors_hit:
                    type_cov.covered += 1

            covered = sum(1 for e in entries if e.covered)
            pages.append(PageCoverage(
                url=url,
                total_elements=len(entries),
                covered_elements=covered,
                coverage_percentage=coverage_percentage(covered, len(entries)),
                elements=entries,
                selector_report=report if self.page_scoping == "per_page" else None,
            ))

        for type_cov in by_type.values():
            type_cov.percentage = coverage_percentage(type_cov.covered, type_cov.total)

        pooled: SelectorAnalysisReport = self.analyzer.analyze(selectors, all_elements)

        total = sum(p.total_elements for p in pages)
        covered_total = sum(p.covered_elements for p in pages)
        percentage = coverage_percentage(covered_total, total)
        uncovered = [e for p in pages for e in p.elements if not e.covered]

        summary = CoverageSummary(
            total_elements=total,
            covered_elements=covered_total,
            uncovered_count=len(uncovered),
            coverage_percentage=percentage,
            uncovered_elements=uncovered,
            recommendations=coverage_recommendations(percentage, by_type) + pooled.recommendations,
            pages=pages,
            tests=self._test_breakdown(pooled, covered_keys_by_raw),
            coverage_by_type=dict(sorted(by_type.items())),
            selector_report=pooled,
            test_files=sorted({s.file_path for s in self._selectors.values() if s.file_path}
                              | set(self._outcomes)),
            threshold=threshold,
            threshold_met=percentage >= threshold,
        )
        logger.info(
            "Coverage: %d/%d elements (%d%%) across %d pages, %d selectors",
            covered_total, total, percentage, len(pages), len(selectors),
        )
        return summary

    def _test_breakdown(
        self,
        pooled: SelectorAnalysisReport,
        covered_keys_by_raw: dict[tuple[str, str], set[tuple[str, ElementKey]]],
    ) -> list[TestFileCoverage]:
        matched = {_selector_key(r.selector) for r in pooled.results if r.matched}
        by_file: dict[str, set[tuple[str, str]]] = {}
        for selector in self._selectors.values():
            if selector.file_path:
                by_file.setdefault(selector.file_path, set()).add(_selector_key(selector))

        tests = []
        for file_path in sorted(set(by_file) | set(self._outcomes)):
            keys = by_file.get(file_path, set())
            covered: set[tuple[str, ElementKey]] = set()
            for key in keys:
                covered |= covered_keys_by_raw.get(key, set())
            passed, failed = self._outcomes.get(file_path, [0, 0])
            tests.append(TestFileCoverage(
                file_path=file_path,
                selectors=len(keys),
                matched_selectors=len(keys & matched),
                covered_elements=len(covered),
                passed=passed,
                failed=failed,
            ))
        return tests
