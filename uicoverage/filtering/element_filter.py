"""Element filtering — narrows discovered elements to the ones coverage should count.

Each element runs through a fixed sequence of checks and the first failing
check is recorded as its exclusion reason:

 1. type allow-list            7. visibility threshold
 2. type deny-list             8. hidden state (reported as visibility)
 3. selector allow-list        9. disabled state
 4. selector deny-list        10. minimum size (only with a bounding box)
 5. attribute allow/deny-list 11. viewport containment
 6. text allow/deny-list      12. custom predicate

The input sequence is never modified; included elements keep their order.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, Optional

from uicoverage.filtering.policy import PRESETS, merge_policy, preset_policy, validate_policy
from uicoverage.models.elements import ALL_ELEMENT_TYPES, ElementType, PageElement
from uicoverage.models.filter_policy import (
    AttributeFilter,
    ExclusionKind,
    ExclusionReason,
    FilteringResult,
    FilterPolicy,
    FilterValidation,
    TextPattern,
)

logger = logging.getLogger(__name__)

# Below this visibility an element counts as hidden.
HIDDEN_EPSILON = 0.01

_ATTR_SELECTOR = re.compile(r"^\[\s*([^\s~^$*|=\]]+)\s*(?:([~^$*]?=)\s*(.*?))?\s*\]$")


def format_number(value: float) -> str:
    """Render 80.0 as ``80`` and 0.05 as ``0.05``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def matches_selector(element: PageElement, selector: str) -> bool:
    """Approximate test of a simple selector pattern against element metadata.

    Supports ``#id``, ``.class``, ``[attr]``, ``[attr=value]`` (plus ``*=``,
    ``^=``, ``$=``, ``~=``), bare tag names, and otherwise substring search in
    the element's candidate selectors. Malformed patterns match nothing.
    """
    selector = selector.strip()
    if not selector:
        return False

    if selector.startswith("#"):
        return len(selector) > 1 and element.attribute("id") == selector[1:]

    if selector.startswith("."):
        return len(selector) > 1 and selector[1:] in element.class_list()

    if selector.startswith("["):
        m = _ATTR_SELECTOR.match(selector)
        if not m:
            return False
        name, op, value = m.group(1), m.group(2), m.group(3)
        actual = element.attribute(name)
        if op is None:
            return actual is not None
        if actual is None:
            return False
        value = _strip_quotes(value or "")
        if op == "=":
            return actual == value
        if op == "*=":
            return bool(value) and value in actual
        if op == "^=":
            return bool(value) and actual.startswith(value)
        if op == "$=":
            return bool(value) and actual.endswith(value)
        return value in actual.split()  # ~=

    if element.tag_name and element.tag_name.lower() == selector.lower():
        return True

    return any(selector in candidate for candidate in element.candidate_selectors())


def matches_attribute_filter(element: PageElement, attr_filter: AttributeFilter) -> bool:
    value = element.attribute(attr_filter.name)

    if attr_filter.exists is not None:
        return (value is not None) == attr_filter.exists

    if value is None:
        return False

    if attr_filter.value is not None:
        return value == attr_filter.value

    if attr_filter.pattern is not None:
        return attr_filter.pattern.matches(value)

    return True


def _matches_text(element: PageElement, patterns: list[TextPattern]) -> bool:
    if element.text is None:
        return False
    return any(p.matches(element.text) for p in patterns)


class ElementFilter:
    """Applies a FilterPolicy to discovered elements."""

    def __init__(self, policy: FilterPolicy | None = None, **overrides: Any):
        policy = policy or FilterPolicy()
        if overrides:
            policy = merge_policy(policy, overrides)
        self._policy = policy

    @property
    def policy(self) -> FilterPolicy:
        return self._policy.model_copy(deep=True)

    def filter_elements(self, elements: Iterable[PageElement]) -> FilteringResult:
        """Filter elements and return the included subset with an exclusion ledger."""
        included: list[PageElement] = []
        reasons: dict[str, int] = {}
        exclusions: list[tuple[int, ExclusionReason]] = []
        total = 0

        for index, element in enumerate(elements):
            total += 1
            reason = self.exclusion_reason(element)
            if reason is None:
                included.append(element)
                continue
            key = reason.key()
            reasons[key] = reasons.get(key, 0) + 1
            exclusions.append((index, reason))

        logger.debug(
            "Filtered %d elements: %d included, %d excluded",
            total, len(included), total - len(included),
        )
        return FilteringResult(
            elements=included,
            total_elements=total,
            included_elements=len(included),
            excluded_elements=total - len(included),
            exclusion_reasons=reasons,
            exclusions=exclusions,
        )

    def exclusion_reason(self, element: PageElement) -> Optional[ExclusionReason]:
        """Return the first failing check for an element, or None if it is included."""
        p = self._policy

        if p.include_types and element.type not in p.include_types:
            return ExclusionReason(kind=ExclusionKind.TYPE_NOT_INCLUDED, detail=element.type)

        if element.type in p.exclude_types:
            return ExclusionReason(kind=ExclusionKind.TYPE_EXCLUDED, detail=element.type)

        if p.include_selectors and not any(matches_selector(element, s) for s in p.include_selectors):
            return ExclusionReason(kind=ExclusionKind.NO_MATCHING_INCLUDE_SELECTOR)

        if any(matches_selector(element, s) for s in p.exclude_selectors):
            return ExclusionReason(kind=ExclusionKind.MATCHES_EXCLUDE_SELECTOR)

        if p.include_attributes and not any(
            matches_attribute_filter(element, f) for f in p.include_attributes
        ):
            return ExclusionReason(kind=ExclusionKind.NO_MATCHING_INCLUDE_ATTRIBUTES)

        if any(matches_attribute_filter(element, f) for f in p.exclude_attributes):
            return ExclusionReason(kind=ExclusionKind.MATCHES_EXCLUDE_ATTRIBUTES)

        if p.include_text_patterns and not _matches_text(element, p.include_text_patterns):
            return ExclusionReason(kind=ExclusionKind.NO_MATCHING_INCLUDE_TEXT_PATTERN)

        if _matches_text(element, p.exclude_text_patterns):
            return ExclusionReason(kind=ExclusionKind.MATCHES_EXCLUDE_TEXT_PATTERN)

        if not p.include_hidden:
            hidden = element.visibility < HIDDEN_EPSILON or element.is_marked_hidden()
            if element.visibility < p.min_visibility or hidden:
                return ExclusionReason(
                    kind=ExclusionKind.INSUFFICIENT_VISIBILITY,
                    detail=format_number(element.visibility),
                )

        if not p.include_disabled and element.disabled:
            return ExclusionReason(kind=ExclusionKind.ELEMENT_DISABLED)

        box = element.bounding_box
        if box is not None and (box.width < p.min_size.width or box.height < p.min_size.height):
            return ExclusionReason(
                kind=ExclusionKind.INSUFFICIENT_SIZE,
                detail=f"{format_number(box.width)}x{format_number(box.height)}",
            )

        if not p.include_outside_viewport and not self._in_viewport(element):
            return ExclusionReason(kind=ExclusionKind.OUTSIDE_VIEWPORT)

        if p.custom_filter is not None and not self._run_custom_filter(element):
            return ExclusionReason(kind=ExclusionKind.CUSTOM_FILTER_EXCLUDED)

        return None

    def _in_viewport(self, element: PageElement) -> bool:
        box = element.bounding_box
        if box is None:
            return False
        vp = self._policy.viewport
        return (
            box.x >= 0
            and box.y >= 0
            and box.x + box.width <= vp.width
            and box.y + box.height <= vp.height
        )

    def _run_custom_filter(self, element: PageElement) -> bool:
        try:
            return bool(self._policy.custom_filter(element))
        except Exception as e:
            logger.warning("Custom filter raised for %s: %s", element.selector, e)
            return False

    # -- configuration -----------------------------------------------------

    def update_config(self, **fields: Any) -> None:
        """Override policy fields; fields not given keep their current value."""
        self._policy = merge_policy(self._policy, fields)

    def include_type(self, element_type: str | ElementType) -> None:
        value = element_type.value if isinstance(element_type, ElementType) else element_type
        if value not in self._policy.include_types:
            self.update_config(include_types=[*self._policy.include_types, value])

    def exclude_type(self, element_type: str | ElementType) -> None:
        value = element_type.value if isinstance(element_type, ElementType) else element_type
        if value not in self._policy.exclude_types:
            self.update_config(exclude_types=[*self._policy.exclude_types, value])

    def include_selector(self, selector: str) -> None:
        if selector not in self._policy.include_selectors:
            self.update_config(include_selectors=[*self._policy.include_selectors, selector])

    def exclude_selector(self, selector: str) -> None:
        if selector not in self._policy.exclude_selectors:
            self.update_config(exclude_selectors=[*self._policy.exclude_selectors, selector])

    def validate_config(self) -> FilterValidation:
        errors = validate_policy(self._policy)
        return FilterValidation(valid=not errors, errors=errors)

    def export_config(self) -> str:
        """Serialize the policy to JSON. A custom predicate is not serializable and is omitted."""
        return self._policy.model_dump_json(indent=2)

    def get_stats(self) -> dict[str, Any]:
        p = self._policy
        recommendations = []

        if not p.include_types:
            recommendations.append("No element types included - every type passes the type check")
        if p.min_visibility > 0.8:
            recommendations.append("High visibility threshold may exclude partially hidden elements")
        if p.min_size.width > 50 or p.min_size.height > 50:
            recommendations.append("Large minimum size may exclude small but important elements")
        if not p.include_disabled and ElementType.INPUT.value in p.include_types:
            recommendations.append("Excluding disabled inputs may miss form validation scenarios")

        impact = "moderate"
        if len(p.include_types) < 3:
            impact = "high"
        elif len(p.include_types) > len(ALL_ELEMENT_TYPES) * 0.8:
            impact = "low"

        return {"estimated_impact": impact, "recommendations": recommendations}

    @classmethod
    def from_preset(cls, name: str) -> "ElementFilter":
        return cls(preset_policy(name))

    @classmethod
    def from_config_string(cls, config: str) -> "ElementFilter":
        """Build a filter from exported JSON, a preset name, or fall back to defaults."""
        try:
            data = json.loads(config)
        except json.JSONDecodeError:
            data = None

        if isinstance(data, dict):
            return cls(FilterPolicy(**data))

        name = config.strip().strip('"').lower()
        if name in PRESETS:
            return cls.from_preset(name)

        logger.warning("Unrecognized filter config '%s'; using default policy", config[:60])
        return cls()
