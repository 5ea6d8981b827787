"""Coverage registry — persists element coverage across runs."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from uicoverage.models.coverage import (
    CoverageRegistry,
    CoverageSummary,
    DiscoveryRecord,
    ElementRecord,
    RunHistoryEntry,
)
from uicoverage.url_utils import page_id_from_url

logger = logging.getLogger(__name__)


def record_key(page_url: str, selector: str, element_type: str) -> str:
    return f"{page_id_from_url(page_url)}:{element_type}:{selector}"


class CoverageRegistryManager:
    """Manages the coverage registry JSON file."""

    def __init__(self, registry_path: Path, history_retention: int = 20):
        self.path = Path(registry_path)
        self.history_retention = history_retention

    def load(self) -> CoverageRegistry:
        """Load registry from disk, or create a new one."""
        if self.path.exists():
            try:
                with open(self.path) as f:
                    data = json.load(f)
                return CoverageRegistry(**data)
            except (OSError, ValueError, TypeError) as e:
                logger.warning("Failed to load registry: %s. Creating new.", e)
        return CoverageRegistry()

    def save(self, registry: CoverageRegistry) -> None:
        """Persist registry to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        registry.last_updated = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
        with open(self.path, "w") as f:
            json.dump(registry.model_dump(), f, indent=2)
        logger.debug("Saved coverage registry to %s", self.path)

    def update_from_summary(self, registry: CoverageRegistry, summary: CoverageSummary) -> CoverageRegistry:
        """Fold one run's element coverage into the registry."""
        now = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

        for page in summary.pages:
            for entry in page.elements:
                el = entry.element
                key = record_key(page.url, el.selector, el.type)
                record = registry.records.get(key)
                if record is None:
                    record = ElementRecord(
                        selector=el.selector, type=el.type, text=el.text, first_seen=now,
                    )
                    registry.records[key] = record

                record.last_seen = now
                record.text = el.text or record.text
                if not any(d.url == page.url for d in record.discovered_in):
                    record.discovered_in.append(DiscoveryRecord(
                        url=page.url, timestamp=now, discovery_source=el.discovery_source,
                    ))
                for test_file in entry.test_files:
                    if test_file not in record.covered_by:
                        record.covered_by.append(test_file)

        registry.history.append(RunHistoryEntry(
            timestamp=now,
            coverage_percentage=summary.coverage_percentage,
            total_elements=summary.total_elements,
            covered_elements=summary.covered_elements,
        ))
        # Trim history
        if len(registry.history) > self.history_retention:
            registry.history = registry.history[-self.history_retention:]

        logger.debug("Registry now tracks %d elements", len(registry.records))
        return registry

    def clear(self) -> None:
        """Delete the registry file if present."""
        if self.path.exists():
            self.path.unlink()
            logger.info("Cleared coverage registry at %s", self.path)
