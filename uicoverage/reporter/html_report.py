"""HTML report generator — produces a self-contained coverage page."""

from __future__ import annotations

import html
import logging
import time
from pathlib import Path

from uicoverage.models.coverage import CoverageSummary, PageCoverage
from uicoverage.url_utils import page_path

logger = logging.getLogger(__name__)

HTML_REPORT_NAME = "index.html"


def _pct_class(pct: int) -> str:
    if pct >= 90:
        return "good"
    if pct >= 75:
        return "warn"
    return "bad"


def _build_page_section(page: PageCoverage) -> str:
    rows = ""
    for entry in page.elements:
        el = entry.element
        status = "covered" if entry.covered else "uncovered"
        by = ", ".join(entry.covered_by) if entry.covered_by else "&mdash;"
        if entry.covered_by:
            by = html.escape(by)
        rows += (
            f'<tr class="{status}"><td><code>{html.escape(el.selector)}</code></td>'
            f"<td>{html.escape(el.type)}</td><td>{html.escape(el.text or '')}</td>"
            f'<td><span class="badge {status}">{status.upper()}</span></td><td>{by}</td></tr>'
        )

    return f'''
    <div class="page-card">
      <h3>{html.escape(page_path(page.url))} <span class="pct {_pct_class(page.coverage_percentage)}">{page.coverage_percentage}%</span></h3>
      <p class="meta">{html.escape(page.url)} &middot; {page.covered_elements}/{page.total_elements} elements covered</p>
      <table>
        <thead><tr><th>Selector</th><th>Type</th><th>Text</th><th>Status</th><th>Covered by</th></tr></thead>
        <tbody>{rows}</tbody>
      </table>
    </div>
    '''


def generate_html_report(summary: CoverageSummary, output_path: Path) -> None:
    """Generate a self-contained HTML coverage report."""
    type_rows = "".join(
        f"<tr><td>{html.escape(t)}</td><td>{c.covered}/{c.total}</td>"
        f'<td class="{_pct_class(c.percentage)}">{c.percentage}%</td></tr>'
        for t, c in summary.coverage_by_type.items()
    )

    recs = "".join(f"<li>{html.escape(r)}</li>" for r in summary.recommendations)
    rec_section = f'<div class="recs"><h2>Recommendations</h2><ul>{recs}</ul></div>' if recs else ""

    mismatch_rows = "".join(
        f"<tr><td><code>{html.escape(m.test_selector.raw)}</code></td>"
        f"<td>{html.escape(m.test_selector.kind.value)}</td>"
        f"<td>{html.escape(m.test_selector.file_path)}:{m.test_selector.line_number}</td>"
        f"<td>{html.escape(m.reason)}</td></tr>"
        for m in summary.selector_report.mismatches
    )
    mismatch_section = ""
    if mismatch_rows:
        mismatch_section = f'''
  <h2>Unmatched selectors ({summary.selector_report.unmatched_selectors})</h2>
  <table>
    <thead><tr><th>Selector</th><th>Kind</th><th>Location</th><th>Reason</th></tr></thead>
    <tbody>{mismatch_rows}</tbody>
  </table>'''

    page_sections = "".join(_build_page_section(p) for p in summary.pages)
    verdict = "met" if summary.threshold_met else "not met"
    overall = _pct_class(summary.coverage_percentage)

    report_html = f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>UI Coverage Report</title>
<style>
  :root {{ --good: #22c55e; --warn: #eab308; --bad: #ef4444; --bg: #f8fafc; --card: white; --border: #e2e8f0; --text: #1e293b; --muted: #64748b; }}
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--text); line-height: 1.6; padding: 1.5rem; }}
  .container {{ max-width: 1400px; margin: 0 auto; }}
  h1 {{ font-size: 1.8rem; margin-bottom: 0.3rem; }}
  h2 {{ font-size: 1.1rem; margin: 1.5rem 0 0.6rem; }}
  .meta {{ color: var(--muted); margin-bottom: 1rem; font-size: 0.9rem; }}
  .summary {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(140px, 1fr)); gap: 0.8rem; margin-bottom: 1.5rem; }}
  .stat {{ background: var(--card); border-radius: 8px; padding: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); text-align: center; }}
  .stat .value {{ font-size: 1.8rem; font-weight: 700; }}
  .stat .label {{ font-size: 0.8rem; color: var(--muted); }}
  .good {{ color: var(--good); }}
  .warn {{ color: var(--warn); }}
  .bad {{ color: var(--bad); }}
  table {{ width: 100%; border-collapse: collapse; background: var(--card); font-size: 0.85rem; }}
  th, td {{ text-align: left; padding: 0.4rem 0.6rem; border-bottom: 1px solid var(--border); }}
  code {{ background: #f1f5f9; padding: 0.1rem 0.3rem; border-radius: 3px; font-size: 0.8rem; }}
  .badge {{ display: inline-block; padding: 0.15rem 0.55rem; border-radius: 9999px; font-size: 0.7rem; font-weight: 600; }}
  .badge.covered {{ background: #dcfce7; color: #166534; }}
  .badge.uncovered {{ background: #fecaca; color: #991b1b; }}
  .page-card {{ background: var(--card); border-radius: 8px; padding: 1rem; margin-bottom: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); }}
  .page-card h3 {{ font-size: 1rem; }}
  .pct {{ float: right; }}
  .recs {{ background: var(--card); border-radius: 8px; padding: 1rem; border-left: 4px solid #6366f1; }}
  .recs ul {{ margin-left: 1.2rem; font-size: 0.9rem; }}
</style>
</head>
<body>
<div class="container">
  <h1>UI Coverage Report</h1>
  <p class="meta">Generated {html.escape(time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()))} &middot; Threshold {summary.threshold}% {verdict}</p>

  <div class="summary">
    <div class="stat"><div class="value {overall}">{summary.coverage_percentage}%</div><div class="label">Coverage</div></div>
    <div class="stat"><div class="value">{summary.total_elements}</div><div class="label">Elements</div></div>
    <div class="stat"><div class="value good">{summary.covered_elements}</div><div class="label">Covered</div></div>
    <div class="stat"><div class="value bad">{summary.uncovered_count}</div><div class="label">Uncovered</div></div>
    <div class="stat"><div class="value">{len(summary.test_files)}</div><div class="label">Test Files</div></div>
  </div>

  {rec_section}

  <h2>Coverage by type</h2>
  <table>
    <thead><tr><th>Type</th><th>Covered</th><th>Coverage</th></tr></thead>
    <tbody>{type_rows}</tbody>
  </table>
  {mismatch_section}

  <h2>Pages</h2>
  {page_sections}
</div>
</body>
</html>'''

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report_html)
    logger.debug("Wrote HTML report with %d pages", len(summary.pages))
