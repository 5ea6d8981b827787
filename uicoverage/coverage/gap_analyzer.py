"""Coverage gap analyzer — ranks uncovered elements and suggests tests for them."""

from __future__ import annotations

import logging
import re

from uicoverage.models.coverage import CoverageSummary, ElementCoverage, UncoveredElementAdvice
from uicoverage.models.elements import ElementType, PageElement

logger = logging.getLogger(__name__)

CRITICAL_BUTTON_WORDS = ("submit", "save", "delete")
CREDENTIAL_ID_WORDS = ("email", "password", "login")

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def _slug(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", value.lower()).strip("_")
    return slug[:40] or "element"


def _snippet(name: str, action: str, comment: str) -> str:
    return f"def test_{_slug(name)}(page: Page):\n    {action}\n    # {comment}\n"


def _quote(selector: str) -> str:
    return selector.replace("\\", "\\\\").replace('"', '\\"')


def advise(entry: ElementCoverage) -> UncoveredElementAdvice:
    """Build the recommendation and suggested test for one uncovered element."""
    el: PageElement = entry.element
    selector = _quote(el.selector)
    text = (el.text or "").strip()
    element_id = el.attribute("id") or ""
    label = text or el.selector

    if el.type == ElementType.BUTTON.value and any(w in text.lower() for w in CRITICAL_BUTTON_WORDS):
        priority = "high"
        recommendation = (
            f'Critical button "{text}" is not tested. '
            "This could lead to major functionality issues."
        )
        suggested = _snippet(f"{text} button", f'page.click("{selector}")',
                             "Add assertions for expected behavior")
    elif el.type == ElementType.INPUT.value and any(w in element_id.lower() for w in CREDENTIAL_ID_WORDS):
        priority = "high"
        recommendation = (
            f'Critical input field "{element_id}" is not tested. '
            "Authentication and user data are at risk."
        )
        suggested = _snippet(f"fill {element_id}", f'page.fill("{selector}", "test-value")',
                             "Add validation assertions")
    elif "data-testid" in el.selector:
        priority = "medium"
        recommendation = (
            f'Element with test ID "{el.selector}" is not covered '
            "despite being explicitly marked for testing."
        )
        suggested = _snippet(f"interact {el.selector}", f'page.click("{selector}")',
                             "Add expected behavior assertions")
    elif el.type == ElementType.BUTTON.value:
        priority = "medium"
        recommendation = f'Button "{label}" is not tested. User interactions may not work as expected.'
        suggested = _snippet(f"click {label}", f'page.click("{selector}")', "Verify button action")
    elif el.type == ElementType.LINK.value:
        priority = "medium"
        recommendation = f'Link "{label}" is not tested. Navigation may be broken.'
        suggested = _snippet(f"navigate {label}", f'page.click("{selector}")', "Verify navigation")
    else:
        priority = "low"
        recommendation = f'Interactive element "{el.selector}" is not tested. Consider adding test coverage.'
        suggested = _snippet(f"interact {el.selector}", f'page.click("{selector}")',
                             "Add appropriate assertions")

    return UncoveredElementAdvice(
        page_url=entry.page_url,
        element=el,
        priority=priority,
        recommendation=recommendation,
        suggested_test=suggested,
    )


def analyze_gaps(summary: CoverageSummary) -> list[UncoveredElementAdvice]:
    """Rank every uncovered element of a summary, high priority first."""
    advice = [advise(entry) for entry in summary.uncovered_elements]
    advice.sort(key=lambda a: PRIORITY_ORDER[a.priority])

    high = sum(1 for a in advice if a.priority == "high")
    logger.info("Gap analysis: %d uncovered elements, %d high priority", len(advice), high)
    return advice
