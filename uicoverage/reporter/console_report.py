"""Console report — rich tables on the terminal."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from uicoverage.models.coverage import CoverageSummary
from uicoverage.url_utils import page_path

UNCOVERED_PER_TYPE = 5


def _pct_style(pct: int) -> str:
    if pct >= 90:
        return "green"
    if pct >= 75:
        return "yellow"
    return "red"


def print_console_report(summary: CoverageSummary, console: Console | None = None) -> None:
    """Print summary, per-type, per-page and uncovered-element tables."""
    console = console or Console()
    style = _pct_style(summary.coverage_percentage)

    console.print("\n[bold]UI Coverage Report[/bold]")
    table = Table(title="Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total elements", str(summary.total_elements))
    table.add_row("Covered", f"[green]{summary.covered_elements}[/green]")
    table.add_row("Uncovered", f"[red]{summary.uncovered_count}[/red]")
    table.add_row("Coverage", f"[{style}]{summary.coverage_percentage}%[/{style}]")
    table.add_row("Test files", str(len(summary.test_files)))
    table.add_row(
        "Selectors matched",
        f"{summary.selector_report.matched_selectors}/{summary.selector_report.total_selectors}",
    )
    console.print(table)

    if summary.coverage_by_type:
        by_type = Table(title="Coverage by Type")
        by_type.add_column("Type")
        by_type.add_column("Covered", justify="right")
        by_type.add_column("Coverage", justify="right")
        for element_type, cov in summary.coverage_by_type.items():
            s = _pct_style(cov.percentage)
            by_type.add_row(element_type, f"{cov.covered}/{cov.total}", f"[{s}]{cov.percentage}%[/{s}]")
        console.print(by_type)

    if summary.pages:
        pages = Table(title="Pages")
        pages.add_column("Page")
        pages.add_column("Covered", justify="right")
        pages.add_column("Coverage", justify="right")
        for page in summary.pages:
            s = _pct_style(page.coverage_percentage)
            pages.add_row(
                page_path(page.url),
                f"{page.covered_elements}/{page.total_elements}",
                f"[{s}]{page.coverage_percentage}%[/{s}]",
            )
        console.print(pages)

    if summary.uncovered_elements:
        console.print(f"\n[bold red]Uncovered elements ({summary.uncovered_count})[/bold red]")
        grouped: dict[str, list] = {}
        for entry in summary.uncovered_elements:
            grouped.setdefault(entry.element.type, []).append(entry)
        for element_type, entries in sorted(grouped.items()):
            console.print(f"  [bold]{element_type}[/bold] ({len(entries)})")
            for entry in entries[:UNCOVERED_PER_TYPE]:
                console.print(f"    - {entry.element.selector} {entry.element.describe()}", markup=False)
            if len(entries) > UNCOVERED_PER_TYPE:
                console.print(f"    ... and {len(entries) - UNCOVERED_PER_TYPE} more")

    if summary.recommendations:
        console.print("\n[bold]Recommendations[/bold]")
        for rec in summary.recommendations:
            console.print(f"  - {rec}", markup=False)

    if summary.threshold_met:
        console.print(
            f"\n[green]Coverage {summary.coverage_percentage}% meets threshold {summary.threshold}%[/green]"
        )
    else:
        console.print(
            f"\n[red]Coverage {summary.coverage_percentage}% is below threshold {summary.threshold}%[/red]"
        )
