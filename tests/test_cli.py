"""Tests for CLI commands using Click's testing utilities."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from lifepulse import __version__
from lifepulse.cli import lifepulse as cli
from lifepulse.errors import StageFailureError
from lifepulse.pipeline import PipelineOrchestrator

from conftest import make_record

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    """Create a Click test runner isolated from any user config."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LIFEPULSE_CACHE__ENABLED", raising=False)
    monkeypatch.delenv("LIFEPULSE_DEBUG", raising=False)
    # Keep INFO records off the captured output
    monkeypatch.setenv("LIFEPULSE_LOGGING__LEVEL", "WARNING")
    return CliRunner()


@pytest.fixture
def manifest(tmp_path: Path) -> Path:
    """Manifest of valid records only."""
    records = [
        make_record("diary.txt", content="Happy day with friends", hours=9),
        make_record("export.json", mime_type="application/json", content='{"owner": "me"}', hours=20),
    ]
    path = tmp_path / "uploads.json"
    path.write_text(json.dumps(records))
    return path


# =============================================================================
# Version Tests
# =============================================================================


class TestVersion:
    """Tests for version reporting."""

    def test_version_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"])

        assert result.exit_code == 0
        assert f"lifepulse {__version__}" in result.output

    def test_version_option(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("analyze", "config", "version"):
            assert command in result.output


# =============================================================================
# Analyze Command Tests
# =============================================================================


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_json_output(self, runner: CliRunner, manifest: Path) -> None:
        result = runner.invoke(cli, ["analyze", str(manifest), "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["data_summary"]["total_files"] == 2
        assert payload["data_summary"]["valid_points"] == 2
        assert payload["analysis_kind"] == "complete"
        assert "recommendations" in payload

    def test_kind_option(self, runner: CliRunner, manifest: Path) -> None:
        result = runner.invoke(cli, ["analyze", str(manifest), "--json", "--kind", "quick"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["cache_key"].startswith("quick_")

    def test_table_output(self, runner: CliRunner, manifest: Path) -> None:
        result = runner.invoke(cli, ["analyze", str(manifest), "--report"])

        assert result.exit_code == 0, result.output
        assert "Analysis Summary" in result.output
        assert "Valid points" in result.output
        assert "Analysis complete" in result.output
        assert "normalizing" in result.output

    def test_records_object_manifest(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"records": [make_record("a.txt", content="note")]}))

        result = runner.invoke(cli, ["analyze", str(path), "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["data_summary"]["valid_points"] == 1

    @pytest.mark.parametrize("content", ["not json", '{"records": 3}', '"text"'])
    def test_bad_manifest(self, runner: CliRunner, tmp_path: Path, content: str) -> None:
        path = tmp_path / "bad.json"
        path.write_text(content)

        result = runner.invoke(cli, ["analyze", str(path)])

        assert result.exit_code == 2

    def test_missing_manifest(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["analyze", str(tmp_path / "missing.json")])
        assert result.exit_code == 2

    def test_pipeline_failure_exits_nonzero(self, runner: CliRunner, manifest: Path) -> None:
        with patch.object(
            PipelineOrchestrator,
            "run_analysis",
            side_effect=StageFailureError("Stage 'emotional' failed: boom", "emotional"),
        ):
            result = runner.invoke(cli, ["analyze", str(manifest)])

        assert result.exit_code == 1
        assert "Analysis failed" in result.output


# =============================================================================
# Config Command Tests
# =============================================================================


class TestConfigCommand:
    """Tests for the config command."""

    def test_shows_settings(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0
        assert "pipeline.max_concurrent_files" in result.output
        assert "cache.capacity" in result.output

    def test_custom_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("cache:\n  capacity: 42\n")

        result = runner.invoke(cli, ["--config", str(path), "config"])

        assert result.exit_code == 0
        assert "42" in result.output


# =============================================================================
# Logging Level Tests
# =============================================================================


class TestLogLevel:
    """Tests for how the CLI picks the log level."""

    def test_config_file_level_applies(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("LIFEPULSE_LOGGING__LEVEL")
        path = tmp_path / "custom.yaml"
        path.write_text("logging:\n  level: error\n")

        result = runner.invoke(cli, ["--config", str(path), "config"])

        assert result.exit_code == 0
        assert logging.getLogger("lifepulse").level == logging.ERROR

    def test_env_level_applies(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0
        assert logging.getLogger("lifepulse").level == logging.WARNING

    def test_configured_debug_applies(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("debug: true\n")

        runner.invoke(cli, ["--config", str(path), "config"])

        assert logging.getLogger("lifepulse").level == logging.DEBUG

    def test_verbose_flag_overrides_config(self, runner: CliRunner) -> None:
        runner.invoke(cli, ["--verbose", "config"])
        assert logging.getLogger("lifepulse").level == logging.INFO
