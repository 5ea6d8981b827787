"""CLI entry point for ui-coverage."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from uicoverage.config_validator import validate_config
from uicoverage.filtering.element_filter import format_number
from uicoverage.filtering.policy import PRESETS
from uicoverage.models.config import CoverageConfig
from uicoverage.orchestrator import EXIT_ERROR, run_coverage

console = Console()

DEFAULT_CONFIG = "ui-coverage.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(path: str) -> CoverageConfig:
    try:
        return CoverageConfig.load(path)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {path}[/red]")
        console.print("Run 'ui-coverage init' to create a default config.")
        sys.exit(EXIT_ERROR)
    except ValueError as e:
        console.print(f"[red]Invalid config file {path}: {e}[/red]")
        sys.exit(EXIT_ERROR)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Measure how much of a web UI an end-to-end test suite touches."""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--elements", "-e", multiple=True, help="Element snapshot JSON file (repeatable)")
@click.option("--url", "-u", multiple=True, help="Page URL to discover live (repeatable)")
@click.option("--threshold", "-t", type=int, default=None, help="Override the coverage threshold")
@click.option("--format", "-f", "formats", multiple=True, help="Report format (repeatable)")
@click.option("--root", default=".", help="Directory the test patterns are resolved against")
def run(config: str, elements: tuple[str, ...], url: tuple[str, ...],
        threshold: int | None, formats: tuple[str, ...], root: str) -> None:
    """Match test selectors against page elements and report coverage."""
    if Path(config).exists():
        cfg = _load_config(config)
    elif elements or url:
        cfg = CoverageConfig()
    else:
        cfg = _load_config(config)

    cfg.element_snapshots.extend(elements)
    cfg.page_urls.extend(url)
    if threshold is not None:
        cfg.threshold = threshold
    if formats:
        cfg.report_formats = list(formats)

    try:
        outcome = run_coverage(cfg, root=Path(root), console=console)
    except Exception as e:
        logging.getLogger(__name__).debug("Coverage run failed", exc_info=True)
        console.print(f"[red]Coverage run failed: {e}[/red]")
        sys.exit(EXIT_ERROR)

    if outcome.config_errors:
        console.print(f"[red]Configuration has {len(outcome.config_errors)} errors:[/red]")
        for error in outcome.config_errors:
            console.print(f"  - {error}", markup=False)
        sys.exit(outcome.exit_code)

    for fmt, path in outcome.reports.items():
        if fmt != "console":
            console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")
    for fmt, error in outcome.report_errors.items():
        console.print(f"  [red]{fmt.upper()} report failed: {error}[/red]")

    high = [g for g in outcome.gaps if g.priority == "high"]
    if high:
        console.print(f"\n[yellow]{len(high)} high-priority elements are untested:[/yellow]")
        for gap in high[:5]:
            console.print(f"  - {gap.recommendation}", markup=False)

    sys.exit(outcome.exit_code)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def validate(config: str) -> None:
    """Validate a config file."""
    cfg = _load_config(config)
    errors = validate_config(cfg)
    if errors:
        console.print(f"[red]Validation failed with {len(errors)} errors:[/red]")
        for e in errors:
            console.print(f"  - {e}", markup=False)
        sys.exit(EXIT_ERROR)
    console.print(f"[green]Config is valid:[/green] {config}")


@cli.command()
def presets() -> None:
    """List the built-in filter presets."""
    table = Table(title="Filter Presets")
    table.add_column("Preset", style="bold")
    table.add_column("Types")
    table.add_column("Min visibility", justify="right")
    table.add_column("Disabled")
    table.add_column("Outside viewport")
    for name, factory in PRESETS.items():
        policy = factory()
        table.add_row(
            name,
            ", ".join(policy.include_types),
            format_number(policy.min_visibility),
            "yes" if policy.include_disabled else "no",
            "yes" if policy.include_outside_viewport else "no",
        )
    console.print(table)


@cli.command()
@click.option("--path", "-p", default=DEFAULT_CONFIG, help="Where to write the config")
def init(path: str) -> None:
    """Create a default config file."""
    config_path = Path(path)
    if config_path.exists():
        console.print(f"[yellow]{config_path} already exists[/yellow]")
        return

    CoverageConfig().save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nAdd element snapshots or page URLs, then run:")
    console.print("  [blue]ui-coverage run[/blue]")


if __name__ == "__main__":
    cli()
