"""Tests for configuration models and run configuration validation."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from uicoverage.config_validator import validate_config
from uicoverage.models.config import CoverageConfig, ViewportConfig


class TestViewportConfig:
    """Tests for ViewportConfig model."""

    def test_default_values(self):
        """Default viewport is a 1920x1080 desktop."""
        config = ViewportConfig()
        assert config.width == 1920
        assert config.height == 1080

    def test_serialization(self):
        config = ViewportConfig(width=768, height=1024)
        assert config.model_dump() == {"width": 768, "height": 1024}


class TestCoverageConfig:
    """Tests for CoverageConfig model."""

    def test_default_values(self):
        """Test CoverageConfig has correct default values."""
        config = CoverageConfig()
        assert config.test_patterns == ["tests/**/*.spec.ts", "tests/**/test_*.py"]
        assert config.page_urls == []
        assert config.element_snapshots == []
        assert config.threshold == 80
        assert config.page_scoping == "per_page"
        assert config.filter_preset == "comprehensive"
        assert config.filter_overrides == {}
        assert config.report_formats == ["console"]
        assert config.persist_history is False
        assert config.history_retention_runs == 20

    def test_resolved_formats_all(self):
        config = CoverageConfig(report_formats=["all"])
        assert config.resolved_formats() == ["console", "json", "html", "lcov"]

    def test_resolved_formats_drops_unknown(self):
        config = CoverageConfig(report_formats=["json", "pdf", "lcov"])
        assert config.resolved_formats() == ["json", "lcov"]

    def test_invalid_type_rejected(self):
        with pytest.raises(ValidationError):
            CoverageConfig(threshold="lots")

    def test_save_and_load(self, tmp_path: Path):
        """Test config round trip through a JSON file."""
        path = tmp_path / "nested" / "ui-coverage.json"
        config = CoverageConfig(
            page_urls=["https://example.com"],
            threshold=65,
            filter_overrides={"min_visibility": 0.5},
            viewport=ViewportConfig(width=1280, height=720),
        )
        config.save(path)
        loaded = CoverageConfig.load(path)
        assert loaded == config
        assert json.loads(path.read_text())["viewport"] == {"width": 1280, "height": 720}

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            CoverageConfig.load(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            CoverageConfig.load(path)


class TestValidateConfig:
    """Tests for run configuration validation."""

    def test_default_config_is_valid(self):
        assert validate_config(CoverageConfig()) == []

    def test_unknown_format(self):
        errors = validate_config(CoverageConfig(report_formats=["console", "pdf"]))
        assert errors == ["Unknown report format 'pdf'. Valid formats: all, console, html, json, lcov"]

    @pytest.mark.parametrize("threshold", [-1, 101])
    def test_threshold_range(self, threshold):
        errors = validate_config(CoverageConfig(threshold=threshold))
        assert errors == [f"threshold must be between 0 and 100, got {threshold}"]

    @pytest.mark.parametrize("threshold", [0, 100])
    def test_threshold_bounds_accepted(self, threshold):
        assert validate_config(CoverageConfig(threshold=threshold)) == []

    def test_unknown_page_scoping(self):
        errors = validate_config(CoverageConfig(page_scoping="global"))
        assert errors[0].startswith("Unknown page scoping 'global'")

    def test_history_retention(self):
        errors = validate_config(CoverageConfig(history_retention_runs=0))
        assert errors == ["history_retention_runs must be at least 1, got 0"]

    def test_viewport_must_be_positive(self):
        errors = validate_config(CoverageConfig(viewport=ViewportConfig(width=0, height=720)))
        assert errors == ["viewport dimensions must be positive, got 0x720"]

    def test_unknown_preset(self):
        errors = validate_config(CoverageConfig(filter_preset="everything"))
        assert errors[0].startswith("Unknown filter preset 'everything'")

    def test_preset_name_is_case_insensitive(self):
        assert validate_config(CoverageConfig(filter_preset=" Essential ")) == []

    def test_unknown_override_key(self):
        errors = validate_config(CoverageConfig(filter_overrides={"min_opacity": 0.5}))
        assert errors == ["Unknown filter override 'min_opacity'"]

    def test_override_of_wrong_type(self):
        errors = validate_config(CoverageConfig(filter_overrides={"min_visibility": "high"}))
        assert errors[0] == "Invalid filter overrides: 1 validation errors"
        assert errors[1].startswith("  filter_overrides.min_visibility:")

    def test_override_policy_problems_are_reported(self):
        errors = validate_config(CoverageConfig(filter_overrides={
            "min_visibility": 1.5,
            "include_types": ["button"],
            "exclude_types": ["button"],
            "exclude_text_patterns": ["(unclosed"],
        }))
        assert "Conflicting element types: button" in errors
        assert "min_visibility must be between 0 and 1, got 1.5" in errors
        assert any(e.startswith("Invalid regex pattern '(unclosed'") for e in errors)

    def test_collects_every_error(self):
        config = CoverageConfig(report_formats=["pdf"], threshold=200, history_retention_runs=0)
        assert len(validate_config(config)) == 3
