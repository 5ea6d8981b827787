"""Tests for the ui-coverage command line."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from uicoverage import cli as cli_module
from uicoverage.cli import cli
from uicoverage.models.config import CoverageConfig


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(cli_module.console, "width", 200)


class TestInit:

    def test_creates_default_config(self, runner, tmp_path):
        path = tmp_path / "ui-coverage.json"
        result = runner.invoke(cli, ["init", "--path", str(path)])
        assert result.exit_code == 0
        assert CoverageConfig.load(path) == CoverageConfig()

    def test_existing_file_is_kept(self, runner, tmp_path):
        path = tmp_path / "ui-coverage.json"
        path.write_text('{"threshold": 10}')
        result = runner.invoke(cli, ["init", "-p", str(path)])
        assert result.exit_code == 0
        assert "already exists" in result.output
        assert json.loads(path.read_text()) == {"threshold": 10}


class TestValidate:

    def test_valid_config(self, runner, tmp_path):
        path = tmp_path / "ui-coverage.json"
        CoverageConfig().save(path)
        result = runner.invoke(cli, ["validate", "-c", str(path)])
        assert result.exit_code == 0
        assert "Config is valid" in result.output

    def test_invalid_config(self, runner, tmp_path):
        path = tmp_path / "ui-coverage.json"
        CoverageConfig(threshold=120, report_formats=["pdf"]).save(path)
        result = runner.invoke(cli, ["validate", "-c", str(path)])
        assert result.exit_code == 2
        assert "Validation failed with 2 errors" in result.output

    def test_missing_config(self, runner, tmp_path):
        result = runner.invoke(cli, ["validate", "-c", str(tmp_path / "nope.json")])
        assert result.exit_code == 2
        assert "Config file not found" in result.output

    def test_malformed_config(self, runner, tmp_path):
        path = tmp_path / "ui-coverage.json"
        path.write_text("{broken")
        result = runner.invoke(cli, ["validate", "-c", str(path)])
        assert result.exit_code == 2
        assert "Invalid config file" in result.output


class TestPresets:

    def test_lists_every_preset(self, runner):
        result = runner.invoke(cli, ["presets"])
        assert result.exit_code == 0
        for name in ("comprehensive", "essential", "minimal", "forms", "navigation"):
            assert name in result.output


class TestRun:

    def test_run_with_snapshot(self, runner, tmp_path, test_project, snapshot_file):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, [
                "run", "-e", str(snapshot_file), "--root", str(test_project),
                "-f", "json", "-t", "50",
            ])
            assert result.exit_code == 0, result.output
            assert "JSON report" in result.output
            assert "high-priority elements are untested" in result.output
            report = json.loads(Path("coverage-report/coverage-report.json").read_text())
            assert report["summary"]["coveragePercentage"] == 75

    def test_run_below_threshold(self, runner, tmp_path, test_project, snapshot_file):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, [
                "run", "-e", str(snapshot_file), "--root", str(test_project),
                "-f", "json", "--threshold", "90",
            ])
            assert result.exit_code == 1

    def test_run_uses_config_file(self, runner, tmp_path, test_project, snapshot_file):
        config_path = tmp_path / "ui-coverage.json"
        CoverageConfig(
            element_snapshots=[str(snapshot_file)],
            threshold=75,
            report_formats=["lcov"],
            output_path=str(tmp_path / "reports"),
        ).save(config_path)
        result = runner.invoke(cli, ["run", "-c", str(config_path), "--root", str(test_project)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "reports" / "lcov.info").exists()

    def test_run_without_config_or_inputs(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, ["run"])
            assert result.exit_code == 2
            assert "Config file not found" in result.output

    def test_run_with_invalid_format(self, runner, tmp_path, snapshot_file):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, ["run", "-e", str(snapshot_file), "-f", "pdf"])
            assert result.exit_code == 2
            assert "Unknown report format 'pdf'" in result.output

    def test_run_with_missing_snapshot(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, ["run", "-e", str(tmp_path / "missing.json"), "-f", "json"])
            assert result.exit_code == 2
            assert "Coverage run failed" in result.output
