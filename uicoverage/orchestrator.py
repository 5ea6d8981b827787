"""Run orchestrator — drives one coverage run from test files to reports."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, Field
from rich.console import Console

from uicoverage.config_validator import validate_config
from uicoverage.coverage.aggregator import CoverageAggregator
from uicoverage.coverage.gap_analyzer import analyze_gaps
from uicoverage.coverage.registry import CoverageRegistryManager
from uicoverage.discovery.element_discoverer import discover_pages, load_element_snapshot
from uicoverage.filtering.element_filter import ElementFilter
from uicoverage.filtering.policy import policy_from_config
from uicoverage.models.config import CoverageConfig
from uicoverage.models.coverage import CoverageSummary, UncoveredElementAdvice
from uicoverage.models.elements import PageElement
from uicoverage.reporter.reporter import Reporter
from uicoverage.selectors.extractor import extract_selectors, find_test_files

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BELOW_THRESHOLD = 1
EXIT_ERROR = 2

DEFAULT_REGISTRY_PATH = Path(".ui-coverage") / "registry.json"


class RunOutcome(BaseModel):
    summary: CoverageSummary = Field(default_factory=CoverageSummary)
    reports: dict[str, str] = Field(default_factory=dict)
    report_errors: dict[str, str] = Field(default_factory=dict)
    gaps: list[UncoveredElementAdvice] = Field(default_factory=list)
    config_errors: list[str] = Field(default_factory=list)
    exit_code: int = EXIT_OK


class CoverageRun:
    """One coverage run, fed through begin / test-end / end lifecycle hooks.

    Calls made after ``on_end`` are logged and ignored.
    """

    def __init__(
        self,
        config: CoverageConfig,
        console: Console | None = None,
        registry_path: Path = DEFAULT_REGISTRY_PATH,
    ):
        self.config = config
        self.config_errors = validate_config(config)
        for error in self.config_errors:
            logger.error("Invalid configuration: %s", error)

        self.reporter = Reporter(config, console)
        self.registry_manager = CoverageRegistryManager(
            registry_path=registry_path,
            history_retention=config.history_retention_runs,
        )
        self._reset()

    def _reset(self) -> None:
        scoping = self.config.page_scoping if not self.config_errors else "per_page"
        self.aggregator = CoverageAggregator(page_scoping=scoping)
        self._pages: dict[str, list[PageElement]] = {}
        self._scanned: set[str] = set()
        self._outcome: RunOutcome | None = None

    @property
    def finished(self) -> bool:
        return self._outcome is not None

    def _scan(self, paths: Iterable[str | Path]) -> None:
        fresh = [p for p in map(Path, paths) if str(p) not in self._scanned]
        if not fresh:
            return
        self._scanned.update(str(p) for p in fresh)
        result = extract_selectors(fresh)
        self.aggregator.add_selectors(result.selectors)

    def on_begin(self, test_files: Iterable[str | Path]) -> None:
        """Reset run state and extract selectors from the suite's test files."""
        self._reset()
        files = list(test_files)
        logger.info("Coverage run started with %d test files", len(files))
        self._scan(files)

    def add_page_elements(self, url: str, elements: Iterable[PageElement]) -> None:
        if self.finished:
            logger.warning("Ignoring elements for %s: run already finished", url)
            return
        self._pages.setdefault(url, []).extend(elements)

    def on_test_end(self, file_path: str | Path, status: str) -> None:
        """Record a test outcome, scanning its file if it has not been seen yet."""
        if self.finished:
            logger.warning("Ignoring result for %s: run already finished", file_path)
            return
        self._scan([file_path])
        self.aggregator.record_test_result(str(Path(file_path)), status)

    def on_end(self) -> RunOutcome:
        """Filter, aggregate, report and compute the exit code."""
        if self._outcome is not None:
            logger.warning("Coverage run already finished; returning the previous outcome")
            return self._outcome

        if self.config_errors:
            self._outcome = RunOutcome(config_errors=self.config_errors, exit_code=EXIT_ERROR)
            return self._outcome

        policy = policy_from_config(
            self.config.filter_preset, self.config.filter_overrides, self.config.viewport,
        )
        element_filter = ElementFilter(policy)
        for url, elements in self._pages.items():
            result = element_filter.filter_elements(elements)
            if result.excluded_elements:
                logger.debug("%s: excluded %d elements %s", url, result.excluded_elements,
                             result.exclusion_reasons)
            self.aggregator.add_page(url, result.elements)

        summary = self.aggregator.summarize(self.config.threshold)
        reports = self.reporter.generate_reports(summary)

        if self.config.persist_history:
            registry = self.registry_manager.load()
            registry = self.registry_manager.update_from_summary(registry, summary)
            self.registry_manager.save(registry)

        exit_code = EXIT_OK if summary.threshold_met else EXIT_BELOW_THRESHOLD
        if exit_code != EXIT_OK:
            logger.warning(
                "Coverage %d%% is below threshold %d%%",
                summary.coverage_percentage, self.config.threshold,
            )

        self._outcome = RunOutcome(
            summary=summary,
            reports=reports.generated,
            report_errors=reports.errors,
            gaps=analyze_gaps(summary),
            exit_code=exit_code,
        )
        return self._outcome


def collect_pages(config: CoverageConfig) -> dict[str, list[PageElement]]:
    """Gather page elements from snapshot files, then from live discovery of page URLs."""
    pages: dict[str, list[PageElement]] = {}
    for snapshot in config.element_snapshots:
        for url, elements in load_element_snapshot(snapshot).items():
            pages.setdefault(url, []).extend(elements)

    if config.page_urls:
        logger.info("Discovering elements on %d pages", len(config.page_urls))
        discovered = asyncio.run(discover_pages(config.page_urls, config.viewport))
        for url, elements in discovered.items():
            pages.setdefault(url, []).extend(elements)
    return pages


def run_coverage(
    config: CoverageConfig,
    root: Path | None = None,
    console: Console | None = None,
    registry_path: Path = DEFAULT_REGISTRY_PATH,
) -> RunOutcome:
    """Static run: scan the configured test files against the configured pages."""
    run = CoverageRun(config, console=console, registry_path=registry_path)
    if run.config_errors:
        return run.on_end()

    run.on_begin(find_test_files(config.test_patterns, root or Path.cwd()))
    for url, elements in collect_pages(config).items():
        run.add_page_elements(url, elements)
    return run.on_end()
