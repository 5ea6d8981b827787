"""Run configuration validation."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from uicoverage.filtering.policy import POLICY_FIELDS, PRESETS, policy_from_config, validate_policy
from uicoverage.models.config import VALID_PAGE_SCOPINGS, VALID_REPORT_FORMATS, CoverageConfig

logger = logging.getLogger(__name__)


def validate_config(config: CoverageConfig) -> list[str]:
    """Validate a run configuration and return a list of error messages."""
    errors = []

    for fmt in config.report_formats:
        if fmt not in VALID_REPORT_FORMATS:
            errors.append(
                f"Unknown report format '{fmt}'. Valid formats: {', '.join(sorted(VALID_REPORT_FORMATS))}"
            )

    if not 0 <= config.threshold <= 100:
        errors.append(f"threshold must be between 0 and 100, got {config.threshold}")

    if config.page_scoping not in VALID_PAGE_SCOPINGS:
        errors.append(
            f"Unknown page scoping '{config.page_scoping}'. "
            f"Valid values: {', '.join(sorted(VALID_PAGE_SCOPINGS))}"
        )

    if config.history_retention_runs < 1:
        errors.append(f"history_retention_runs must be at least 1, got {config.history_retention_runs}")

    if config.viewport.width <= 0 or config.viewport.height <= 0:
        errors.append(
            f"viewport dimensions must be positive, got {config.viewport.width}x{config.viewport.height}"
        )

    unknown = [k for k in config.filter_overrides if k not in POLICY_FIELDS]
    for key in unknown:
        errors.append(f"Unknown filter override '{key}'")

    if config.filter_preset.strip().lower() not in PRESETS:
        errors.append(
            f"Unknown filter preset '{config.filter_preset}'. Valid presets: {', '.join(PRESETS)}"
        )
    else:
        try:
            policy = policy_from_config(config.filter_preset, config.filter_overrides, config.viewport)
        except ValidationError as e:
            errors.append(f"Invalid filter overrides: {e.error_count()} validation errors")
            for err in e.errors():
                loc = ".".join(str(p) for p in err["loc"])
                errors.append(f"  filter_overrides.{loc}: {err['msg']}")
        else:
            errors.extend(validate_policy(policy))

    if errors:
        logger.debug("Config validation found %d errors", len(errors))
    return errors
