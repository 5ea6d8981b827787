"""Selector analysis — scores test selectors against discovered page elements."""

from __future__ import annotations

import logging
from collections import Counter

from uicoverage.models.coverage import MatchResult, SelectorAnalysisReport, SelectorMismatch
from uicoverage.models.elements import ElementType, PageElement, SelectorKind, TestSelector

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.5

TYPE_WEIGHT = 0.3
TEXT_WEIGHT = 0.4
ATTRIBUTE_WEIGHT = 0.3

SIMILARITY_ATTRIBUTES = ("id", "class", "type", "name", "role")

VERBOSE_HINT = "Run tests with --verbose to see detailed selector vs element comparisons"


def is_match(score: float) -> bool:
    """A selector is matched only when its score is strictly above the threshold."""
    return score > MATCH_THRESHOLD


def is_candidate(selector: TestSelector, element: PageElement) -> bool:
    """Coarse, kind-specific shortlist test. Missing element fields never qualify."""
    normalized = selector.normalized
    kind = selector.kind

    if kind is SelectorKind.TEST_ID:
        return "data-testid" in element.selector or (bool(normalized) and normalized in element.selector)

    if kind is SelectorKind.TEXT:
        if not element.text or not normalized:
            return False
        text = element.text.lower()
        value = normalized.lower()
        return value in text or text in value

    if kind is SelectorKind.CSS:
        if element.selector == normalized:
            return True
        for field in (element.text, element.attribute("class"), element.attribute("id")):
            if field and field in normalized:
                return True
        return False

    if kind is SelectorKind.ROLE:
        return element.role is not None and element.role == normalized

    if kind is SelectorKind.PLACEHOLDER:
        return bool(normalized) and "placeholder" in element.selector and normalized in element.selector

    if kind is SelectorKind.LABEL:
        if not element.accessible_name or not normalized:
            return False
        return normalized.lower() in element.accessible_name.lower()

    return False


def _type_compatible(kind: SelectorKind, element: PageElement) -> bool:
    if kind is SelectorKind.TEST_ID:
        return "data-testid" in element.selector
    if kind is SelectorKind.TEXT:
        return bool(element.text)
    if kind is SelectorKind.CSS:
        return True
    if kind is SelectorKind.ROLE:
        return bool(element.role)
    if kind is SelectorKind.PLACEHOLDER:
        return element.type in (ElementType.INPUT.value, ElementType.TEXTAREA.value)
    return False


def _has_attribute_similarity(raw: str, element: PageElement) -> bool:
    for name in SIMILARITY_ATTRIBUTES:
        value = element.attribute(name)
        if value and value in raw:
            return True
    return False


def score_candidate(selector: TestSelector, element: PageElement) -> float:
    """Confidence in [0, 1] that the selector refers to this element."""
    if element.selector == selector.raw:
        return 1.0

    score = 0.0
    if _type_compatible(selector.kind, element):
        score += TYPE_WEIGHT
    if element.text and element.text.lower() in selector.raw.lower():
        score += TEXT_WEIGHT
    if _has_attribute_similarity(selector.raw, element):
        score += ATTRIBUTE_WEIGHT
    return min(round(score, 6), 1.0)


class SelectorAnalyzer:
    """Explains which test selectors match page elements and which do not."""

    def match(self, selector: TestSelector, elements: list[PageElement]) -> MatchResult:
        candidates = [el for el in elements if is_candidate(selector, el)]
        scores = [score_candidate(selector, el) for el in candidates]
        best = max(scores, default=0.0)
        matched = is_match(best)
        return MatchResult(
            selector=selector,
            match_score=best,
            possible_matches=candidates,
            element_scores=scores,
            matched=matched,
            reason="" if matched else self.mismatch_reason(selector, elements),
        )

    def analyze(
        self, test_selectors: list[TestSelector], page_elements: list[PageElement]
    ) -> SelectorAnalysisReport:
        """Match every selector against the page and summarize the mismatches."""
        results: list[MatchResult] = []
        mismatches: list[SelectorMismatch] = []

        for selector in test_selectors:
            result = self.match(selector, page_elements)
            results.append(result)
            if not result.matched:
                mismatches.append(SelectorMismatch(
                    test_selector=selector,
                    possible_matches=result.possible_matches,
                    match_score=result.match_score,
                    reason=result.reason,
                ))

        matched = len(results) - len(mismatches)
        logger.debug(
            "Selector analysis: %d/%d selectors matched against %d elements",
            matched, len(results), len(page_elements),
        )
        return SelectorAnalysisReport(
            total_selectors=len(test_selectors),
            matched_selectors=matched,
            unmatched_selectors=len(mismatches),
            mismatches=mismatches,
            recommendations=self.recommendations(mismatches),
            results=results,
        )

    def mismatch_reason(self, selector: TestSelector, elements: list[PageElement]) -> str:
        raw = selector.raw
        kind = selector.kind

        if kind is SelectorKind.TEST_ID:
            if any("data-testid" in el.selector for el in elements):
                return f"Test ID '{raw}' not found. Elements have different test IDs."
            return "No elements on page have test IDs. Consider adding data-testid attributes."

        if kind is SelectorKind.TEXT:
            texts = ", ".join(el.text for el in elements if el.text)
            return f"Text selector '{raw}' not found. Current page text: {texts}"

        if kind is SelectorKind.CSS:
            return (
                f"CSS selector '{raw}' matches no elements. "
                "Check if selector syntax is correct or if elements exist."
            )

        if kind is SelectorKind.ROLE:
            roles = list(dict.fromkeys(el.role for el in elements if el.role))
            return f"Role '{raw}' not found. Available roles: {', '.join(roles)}"

        return f"Selector '{raw}' of type '{kind.value}' matches no elements on the page."

    def recommendations(self, mismatches: list[SelectorMismatch]) -> list[str]:
        counts = Counter(m.test_selector.kind for m in mismatches)
        recs = []

        if counts[SelectorKind.TEST_ID]:
            recs.append("Add data-testid attributes to interactive elements for more reliable testing")
            recs.append(
                f"{counts[SelectorKind.TEST_ID]} test ID selectors are failing - "
                "verify test IDs match actual elements"
            )

        if counts[SelectorKind.TEXT]:
            recs.append(
                f"{counts[SelectorKind.TEXT]} text-based selectors are failing - "
                "text content may have changed"
            )
            recs.append("Consider using test IDs instead of text selectors for better stability")

        if counts[SelectorKind.CSS]:
            recs.append(
                f"{counts[SelectorKind.CSS]} CSS selectors are failing - DOM structure may have changed"
            )
            recs.append("Review CSS selectors and update them to match current DOM structure")

        if len(mismatches) > 10:
            recs.append(
                f"Large number of failing selectors ({len(mismatches)}) - "
                "consider comprehensive test review"
            )

        recs.append(VERBOSE_HINT)
        return recs
