"""Tests for reporter module — JSON, HTML, LCOV, console output and reporter orchestration."""

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.console import Console

from uicoverage.coverage.aggregator import CoverageAggregator
from uicoverage.models.config import CoverageConfig
from uicoverage.models.elements import PageElement
from uicoverage.reporter.console_report import print_console_report
from uicoverage.reporter.html_report import generate_html_report
from uicoverage.reporter.json_report import REPORT_VERSION, build_json_report, generate_json_report
from uicoverage.reporter.lcov_report import build_lcov, build_lcov_summary, generate_lcov_report
from uicoverage.reporter.reporter import Reporter

LOGIN = "https://example.com/login"


# ============================================================================
# Helpers
# ============================================================================


@pytest.fixture
def summary(submit_button, email_input, forgot_link, css_selector, test_id_selector, role_selector):
    agg = CoverageAggregator()
    agg.add_page(LOGIN, [submit_button, email_input, forgot_link])
    agg.add_selectors([css_selector, test_id_selector, role_selector])
    return agg.summarize(80)


def _recording_console() -> Console:
    return Console(record=True, width=160, force_terminal=False)


def _make_config(tmp_path: Path, formats) -> CoverageConfig:
    return CoverageConfig(report_formats=formats, output_path=str(tmp_path / "out"))


# ============================================================================
# JSON
# ============================================================================


class TestJsonReport:
    """Tests for the machine-readable report."""

    def test_summary_block(self, summary):
        report = build_json_report(summary)
        assert report["summary"] == {
            "totalElements": 3,
            "coveredElements": 2,
            "uncoveredElements": 1,
            "coveragePercentage": 67,
            "threshold": 80,
            "thresholdMet": False,
            "testFiles": 2,
        }
        assert report["version"] == REPORT_VERSION
        assert report["generatedAt"].endswith("Z")

    def test_pages_and_uncovered(self, summary):
        report = build_json_report(summary)
        assert report["pages"] == [{
            "url": LOGIN,
            "totalElements": 3,
            "coveredElements": 2,
            "coveragePercentage": 67,
            "uncovered": ["a.forgot-password"],
        }]
        assert [e["element"]["selector"] for e in report["uncoveredElements"]] == ["a.forgot-password"]

    def test_selector_analysis(self, summary):
        analysis = build_json_report(summary)["selectorAnalysis"]
        assert analysis["totalSelectors"] == 3
        assert analysis["matchedSelectors"] == 2
        assert analysis["unmatchedSelectors"] == 1
        mismatch = analysis["mismatches"][0]
        assert mismatch["selector"] == "role=navigation"
        assert mismatch["kind"] == "role"
        assert mismatch["file"] == "tests/nav.spec.ts"

    def test_generated_at_is_utc(self, summary):
        stamp = datetime.strptime(build_json_report(summary)["generatedAt"], "%Y-%m-%dT%H:%M:%SZ")
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        assert abs((now - stamp).total_seconds()) < 120

    def test_written_file_is_valid_json(self, summary, tmp_path):
        path = tmp_path / "report.json"
        generate_json_report(summary, path)
        data = json.loads(path.read_text())
        assert data["coverageByType"]["link"]["percentage"] == 0


# ============================================================================
# HTML
# ============================================================================


class TestHtmlReport:
    """Tests for the self-contained HTML page."""

    def test_contains_stats_and_pages(self, summary, tmp_path):
        path = tmp_path / "index.html"
        generate_html_report(summary, path)
        content = path.read_text()
        assert "<!DOCTYPE html>" in content
        assert "67%" in content
        assert "Threshold 80% not met" in content
        assert "/login" in content
        assert "UNCOVERED" in content
        assert "role=navigation" in content

    def test_escapes_element_text(self, tmp_path):
        agg = CoverageAggregator()
        agg.add_page(LOGIN, [PageElement(selector="button.x", type="button", text="<script>alert(1)</script>")])
        path = tmp_path / "index.html"
        generate_html_report(agg.summarize(), path)
        content = path.read_text()
        assert "<script>alert(1)</script>" not in content
        assert "&lt;script&gt;" in content

    def test_empty_summary(self, tmp_path):
        path = tmp_path / "index.html"
        generate_html_report(CoverageAggregator().summarize(), path)
        assert "100%" in path.read_text()


# ============================================================================
# LCOV
# ============================================================================


class TestLcovReport:
    """Tests for the LCOV tracefile and its summary."""

    def test_tracefile_lines(self, summary):
        assert build_lcov(summary) == (
            "TN:ui-coverage\n"
            f"SF:{LOGIN}\n"
            "DA:1,1\n"
            "DA:2,1\n"
            "DA:3,0\n"
            "LF:3\n"
            "LH:2\n"
            "end_of_record\n"
        )

    def test_empty_summary_is_empty_tracefile(self):
        assert build_lcov(CoverageAggregator().summarize()) == ""

    def test_summary_sidecar(self, summary):
        data = build_lcov_summary(summary)
        assert data["lines"] == {"total": 3, "covered": 2, "pct": 67}
        assert data["files"][LOGIN]["pct"] == 67

    def test_generate_writes_both_files(self, summary, tmp_path):
        paths = generate_lcov_report(summary, tmp_path)
        assert [p.name for p in paths] == ["lcov.info", "lcov-summary.json"]
        assert all(p.exists() for p in paths)


# ============================================================================
# Console
# ============================================================================


class TestConsoleReport:
    """Tests for the rich terminal output."""

    def test_prints_tables_and_verdict(self, summary):
        console = _recording_console()
        print_console_report(summary, console)
        text = console.export_text()
        assert "UI Coverage Report" in text
        assert "Coverage by Type" in text
        assert "/login" in text
        assert "a.forgot-password" in text
        assert "Coverage 67% is below threshold 80%" in text

    def test_limits_uncovered_per_type(self):
        agg = CoverageAggregator()
        agg.add_page(LOGIN, [PageElement(selector=f"a.link-{i}", type="link") for i in range(7)])
        console = _recording_console()
        print_console_report(agg.summarize(), console)
        text = console.export_text()
        assert "a.link-4" in text
        assert "a.link-5" not in text
        assert "... and 2 more" in text

    def test_threshold_met_line(self):
        console = _recording_console()
        print_console_report(CoverageAggregator().summarize(0), console)
        assert "Coverage 100% meets threshold 0%" in console.export_text()


# ============================================================================
# Reporter orchestration
# ============================================================================


class TestReporter:
    """Tests for format selection and failure isolation."""

    def test_all_formats(self, summary, tmp_path):
        reporter = Reporter(_make_config(tmp_path, ["all"]), console=_recording_console())
        outcome = reporter.generate_reports(summary)
        assert set(outcome.generated) == {"console", "json", "html", "lcov"}
        assert outcome.errors == {}
        out = tmp_path / "out"
        assert (out / "coverage-report.json").exists()
        assert (out / "index.html").exists()
        assert (out / "lcov.info").exists()
        assert (out / "lcov-summary.json").exists()
        assert outcome.generated["lcov"] == str(out / "lcov.info")

    def test_console_only_creates_no_directory(self, summary, tmp_path):
        reporter = Reporter(_make_config(tmp_path, ["console"]), console=_recording_console())
        outcome = reporter.generate_reports(summary)
        assert outcome.generated == {"console": "stdout"}
        assert not (tmp_path / "out").exists()

    def test_explicit_output_dir(self, summary, tmp_path):
        reporter = Reporter(_make_config(tmp_path, ["json"]))
        outcome = reporter.generate_reports(summary, output_dir=tmp_path / "elsewhere")
        assert outcome.generated["json"] == str(tmp_path / "elsewhere" / "coverage-report.json")

    def test_unusable_output_dir_is_reported(self, summary, tmp_path):
        blocker = tmp_path / "out"
        blocker.write_text("not a directory")
        reporter = Reporter(_make_config(tmp_path, ["console", "json", "lcov"]), console=_recording_console())
        outcome = reporter.generate_reports(summary)
        assert outcome.generated == {"console": "stdout"}
        assert set(outcome.errors) == {"json", "lcov"}

    def test_one_failing_emitter_does_not_stop_others(self, summary, tmp_path):
        out = tmp_path / "out"
        (out / "index.html").mkdir(parents=True)
        reporter = Reporter(_make_config(tmp_path, ["json", "html"]))
        outcome = reporter.generate_reports(summary)
        assert "json" in outcome.generated
        assert "html" in outcome.errors

    def test_unexpected_emitter_error_does_not_stop_others(self, summary, tmp_path):
        reporter = Reporter(_make_config(tmp_path, ["json", "html", "lcov"]))
        with patch("uicoverage.reporter.reporter.generate_json_report", side_effect=ValueError("bad value")):
            outcome = reporter.generate_reports(summary)
        assert outcome.errors == {"json": "bad value"}
        assert set(outcome.generated) == {"html", "lcov"}
        assert (tmp_path / "out" / "index.html").exists()
