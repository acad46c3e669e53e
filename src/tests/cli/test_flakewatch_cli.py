"""Tests for the flakewatch CLI."""

import json

import pytest
from click.testing import CliRunner
from rich.console import Console
from datetime import datetime, timedelta, timezone

from conftest import build_records
from flakewatch.cli.app import main
from flakewatch.cli.renderer import ReportRenderer
from flakewatch.models.flakiness_models import TestStatus

P = TestStatus.PASSED
F = TestStatus.FAILED


@pytest.fixture
def store_file(tmp_path):
    """JSON store with recent history for one project."""
    start = datetime.now(timezone.utc) - timedelta(days=2)
    records = build_records([P] * 10, test_id="stable", start=start) + build_records(
        [P, F] * 4, test_id="racy", test_name="checkout [flaky]", start=start
    )
    data = {
        "tests": [
            {"id": "racy", "name": "checkout [flaky]", "type": "e2e", "config": {"retries": 1}},
        ],
        "records": [
            {"project_id": "proj-1", **r.model_dump(mode="json")} for r in records
        ],
    }
    path = tmp_path / "store.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def runner():
    return CliRunner()


class TestAnalyzeCommand:
    """Tests for `flakewatch analyze`."""

    def test_analyze_json(self, runner, store_file):
        result = runner.invoke(
            main, ["--store", str(store_file), "analyze", "proj-1", "--json"]
        )

        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["project_id"] == "proj-1"
        assert report["total_tests"] == 2
        assert [t["test_id"] for t in report["flaky_tests"]] == ["racy"]
        assert report["flaky_tests"][0]["flakiness_score"] == 70
        assert report["overall_health"] == "CRITICAL"

    def test_analyze_table(self, runner, store_file):
        renderer = ReportRenderer(Console(width=200))
        result = runner.invoke(
            main,
            ["--store", str(store_file), "analyze", "proj-1"],
            obj={"renderer": renderer},
        )

        assert result.exit_code == 0, result.output
        assert "Flakiness Report" in result.output
        assert "CRITICAL" in result.output
        assert "checkout [flaky]" in result.output

    def test_analyze_threshold_option(self, runner, store_file):
        result = runner.invoke(
            main,
            ["--store", str(store_file), "analyze", "proj-1", "--threshold", "90", "--json"],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["flaky_tests"] == []

    def test_analyze_rejects_out_of_range_threshold(self, runner, store_file):
        result = runner.invoke(
            main, ["--store", str(store_file), "analyze", "proj-1", "--threshold", "150"]
        )
        assert result.exit_code == 2

    def test_analyze_missing_store_file(self, runner, tmp_path):
        result = runner.invoke(
            main, ["--store", str(tmp_path / "nope.json"), "analyze", "proj-1"]
        )

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestQuarantineCommands:
    """Tests for quarantine, unquarantine and status."""

    def test_quarantine_and_status(self, runner, store_file):
        result = runner.invoke(main, ["--store", str(store_file), "quarantine", "racy"])

        assert result.exit_code == 0, result.output
        assert "Test racy quarantined successfully" in result.output

        data = json.loads(store_file.read_text(encoding="utf-8"))
        test = data["tests"][0]
        assert test["enabled"] is False
        assert test["config"]["quarantined"] is True
        assert test["config"]["retries"] == 1
        assert "quarantinedAt" in test["config"]

        status = runner.invoke(main, ["--store", str(store_file), "status", "racy"])
        assert status.exit_code == 0, status.output
        assert "QUARANTINED" in status.output

    def test_unquarantine(self, runner, store_file):
        runner.invoke(main, ["--store", str(store_file), "quarantine", "racy"])
        result = runner.invoke(main, ["--store", str(store_file), "unquarantine", "racy"])

        assert result.exit_code == 0, result.output
        assert "Test racy unquarantined successfully" in result.output

        test = json.loads(store_file.read_text(encoding="utf-8"))["tests"][0]
        assert test["enabled"] is True
        assert test["config"] == {"retries": 1}

    @pytest.mark.parametrize("command", ["quarantine", "unquarantine", "status"])
    def test_unknown_test_exits_with_error(self, runner, store_file, command):
        result = runner.invoke(main, ["--store", str(store_file), command, "missing"])

        assert result.exit_code == 1
        assert "Test not found: missing" in result.output
