"""Filter policy presets, merging and validation."""

from __future__ import annotations

import logging
from typing import Any, Callable

from uicoverage.models.elements import ElementType
from uicoverage.models.filter_policy import FilterPolicy, SizeThreshold

logger = logging.getLogger(__name__)

# Every FilterPolicy field; an override replaces the base value only when the
# override sets the field explicitly.
POLICY_FIELDS = (
    "include_types",
    "exclude_types",
    "include_selectors",
    "exclude_selectors",
    "include_attributes",
    "exclude_attributes",
    "include_text_patterns",
    "exclude_text_patterns",
    "min_visibility",
    "min_size",
    "include_hidden",
    "include_disabled",
    "include_outside_viewport",
    "viewport",
    "custom_filter",
)


def _comprehensive() -> FilterPolicy:
    return FilterPolicy(
        include_types=[t.value for t in ElementType],
        include_hidden=False,
        include_disabled=True,
        include_outside_viewport=True,
        min_visibility=0.1,
    )


def _essential() -> FilterPolicy:
    return FilterPolicy(
        include_types=[
            ElementType.BUTTON, ElementType.INPUT, ElementType.SELECT,
            ElementType.LINK, ElementType.CHECKBOX, ElementType.RADIO,
        ],
        include_hidden=False,
        include_disabled=False,
        include_outside_viewport=False,
        min_visibility=0.5,
    )


def _minimal() -> FilterPolicy:
    return FilterPolicy(
        include_types=[ElementType.BUTTON, ElementType.INPUT, ElementType.LINK],
        include_hidden=False,
        include_disabled=False,
        include_outside_viewport=False,
        min_visibility=0.8,
        min_size=SizeThreshold(width=10, height=10),
    )


def _forms() -> FilterPolicy:
    return FilterPolicy(
        include_types=[
            ElementType.INPUT, ElementType.SELECT, ElementType.TEXTAREA,
            ElementType.CHECKBOX, ElementType.RADIO, ElementType.BUTTON,
        ],
        include_selectors=["form", '[data-testid*="form"]', '[id*="form"]'],
        include_hidden=False,
        include_disabled=True,
        include_outside_viewport=False,
        min_visibility=0.3,
    )


def _navigation() -> FilterPolicy:
    return FilterPolicy(
        include_types=[ElementType.LINK, ElementType.BUTTON],
        include_selectors=["nav", '[role="navigation"]', '[aria-label*="menu"]'],
        include_hidden=False,
        include_disabled=False,
        include_outside_viewport=True,
        min_visibility=0.2,
    )


PRESETS: dict[str, Callable[[], FilterPolicy]] = {
    "comprehensive": _comprehensive,
    "essential": _essential,
    "minimal": _minimal,
    "forms": _forms,
    "navigation": _navigation,
}


def preset_policy(name: str) -> FilterPolicy:
    key = name.strip().lower()
    if key not in PRESETS:
        raise ValueError(f"Unknown filter preset '{name}'. Valid presets: {', '.join(PRESETS)}")
    return PRESETS[key]()


def merge_policy(base: FilterPolicy, override: FilterPolicy | dict[str, Any]) -> FilterPolicy:
    """Combine a base policy with an override, field by field.

    Fields explicitly set on the override replace the base value (lists are
    replaced, not concatenated); unset fields keep the base value.
    """
    if isinstance(override, dict):
        override = FilterPolicy(**override)
    merged: dict[str, Any] = {}
    for name in POLICY_FIELDS:
        source = override if name in override.model_fields_set else base
        merged[name] = getattr(source, name)
    return FilterPolicy(**merged)


def validate_policy(policy: FilterPolicy) -> list[str]:
    """Validate a policy and return a list of error messages."""
    errors = []

    conflicting = [t for t in policy.include_types if t in policy.exclude_types]
    if conflicting:
        errors.append(f"Conflicting element types: {', '.join(conflicting)}")

    if not 0 <= policy.min_visibility <= 1:
        errors.append(f"min_visibility must be between 0 and 1, got {policy.min_visibility}")

    if policy.min_size.width < 0 or policy.min_size.height < 0:
        errors.append(
            f"min_size dimensions must not be negative, got "
            f"{policy.min_size.width}x{policy.min_size.height}"
        )

    for pattern in policy.include_text_patterns + policy.exclude_text_patterns:
        if not pattern.is_valid:
            errors.append(f"Invalid regex pattern '{pattern.pattern}': {pattern.error}")

    for attr_filter in policy.include_attributes + policy.exclude_attributes:
        if not attr_filter.name:
            errors.append("Attribute filter is missing a name")
        if attr_filter.exists is None and attr_filter.value is None and attr_filter.pattern is None:
            errors.append(
                f"Attribute filter '{attr_filter.name}' needs one of exists, value or pattern"
            )
        if attr_filter.pattern is not None and not attr_filter.pattern.is_valid:
            errors.append(
                f"Invalid regex pattern '{attr_filter.pattern.pattern}' for attribute "
                f"'{attr_filter.name}': {attr_filter.pattern.error}"
            )

    if errors:
        logger.debug("Filter policy validation found %d errors", len(errors))
    return errors


def policy_from_config(preset: str, overrides: dict[str, Any] | None = None,
                       viewport: Any = None) -> FilterPolicy:
    """Resolve a run's policy: the named preset, the run viewport, then explicit overrides."""
    policy = preset_policy(preset)
    if viewport is not None:
        policy = merge_policy(policy, {"viewport": {"width": viewport.width, "height": viewport.height}})
    if overrides:
        policy = merge_policy(policy, overrides)
    return policy
