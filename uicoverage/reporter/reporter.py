"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field
from rich.console import Console

from uicoverage.models.config import CoverageConfig
from uicoverage.models.coverage import CoverageSummary

from .console_report import print_console_report
from .html_report import HTML_REPORT_NAME, generate_html_report
from .json_report import JSON_REPORT_NAME, generate_json_report
from .lcov_report import LCOV_NAME, generate_lcov_report

logger = logging.getLogger(__name__)


class ReportOutcome(BaseModel):
    generated: dict[str, str] = Field(default_factory=dict)  # format -> file path
    errors: dict[str, str] = Field(default_factory=dict)  # format -> error message


class Reporter:
    """Generates the configured report formats from a coverage summary."""

    def __init__(self, config: CoverageConfig, console: Console | None = None):
        self.config = config
        self.console = console or Console()

    def generate_reports(self, summary: CoverageSummary, output_dir: Path | None = None) -> ReportOutcome:
        """Generate all configured report formats.

        A failing file emitter is logged and recorded; the other formats still run.
        """
        out_dir = Path(output_dir or self.config.output_path)
        outcome = ReportOutcome()
        formats = self.config.resolved_formats()
        logger.debug("Report formats %s, output directory %s", formats, out_dir)

        if "console" in formats:
            print_console_report(summary, self.console)
            outcome.generated["console"] = "stdout"

        file_formats = [f for f in formats if f != "console"]
        if not file_formats:
            return outcome

        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create report directory %s: %s", out_dir, e)
            for fmt in file_formats:
                outcome.errors[fmt] = str(e)
            return outcome

        for fmt in file_formats:
            try:
                if fmt == "json":
                    path = out_dir / JSON_REPORT_NAME
                    generate_json_report(summary, path)
                elif fmt == "html":
                    path = out_dir / HTML_REPORT_NAME
                    generate_html_report(summary, path)
                else:
                    generate_lcov_report(summary, out_dir)
                    path = out_dir / LCOV_NAME
            except Exception as e:
                logger.error("Failed to write %s report: %s", fmt, e)
                outcome.errors[fmt] = str(e)
                continue
            outcome.generated[fmt] = str(path)
            logger.info("%s report: %s", fmt.upper(), path)

        return outcome
