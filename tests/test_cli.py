from __future__ import annotations

import json
import os
import tempfile

import pytest
from typer.testing import CliRunner

from leaveplan.cli import app

runner = CliRunner()


def _write_config(data: object) -> str:
    """Write a JSON config to a temp file and return its path."""
    fd, path = tempfile.mkstemp(suffix=".json")
    with os.fdopen(fd, "w") as f:
        json.dump(data, f)
    return path


class TestOptimizeCommand:
    def test_optimize_basic(self) -> None:
        result = runner.invoke(
            app, ["optimize", "--budget", "10", "--year", "2025", "--no-calendar"]
        )
        assert result.exit_code == 0
        assert "LEAVE DAY OPTIMIZER" in result.output
        assert "RECOMMENDED PLAN" in result.output
        assert "Calendar View" not in result.output

    def test_optimize_json_output(self) -> None:
        result = runner.invoke(app, ["optimize", "--budget", "15", "--year", "2025", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["year"] == 2025
        assert data["leave_budget"] == 15
        assert data["policy"] == "default"
        assert data["leave_days_used"] <= 15
        assert data["efficiency"] > 1
        assert len(data["periods"]) >= 1
        starts = [p["start_date"] for p in data["periods"]]
        assert starts == sorted(starts)

    def test_optimize_with_calendar(self) -> None:
        result = runner.invoke(app, ["optimize", "--budget", "5", "--year", "2025", "--calendar"])
        assert result.exit_code == 0
        assert "Calendar View" in result.output

    def test_optimize_policy(self) -> None:
        result = runner.invoke(
            app,
            ["optimize", "--budget", "5", "--year", "2025", "--policy", "long", "--json"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["policy"] == "long"

    def test_optimize_invalid_policy(self) -> None:
        result = runner.invoke(app, ["optimize", "--budget", "5", "--policy", "bogus"])
        assert result.exit_code == 1
        assert "Invalid policy" in result.output

    def test_optimize_no_country(self) -> None:
        result = runner.invoke(
            app,
            [
                "optimize",
                "--budget",
                "5",
                "--year",
                "2025",
                "--country",
                "none",
                "--holiday",
                "2025-12-25",
                "--no-calendar",
            ],
        )
        assert result.exit_code == 0
        assert "Public holidays:   1" in result.output

    def test_optimize_no_country_any_case(self) -> None:
        result = runner.invoke(
            app,
            ["optimize", "--budget", "5", "--year", "2025", "--country", "NONE", "--json"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["holidays"] == []

    def test_optimize_custom_holiday(self) -> None:
        result = runner.invoke(
            app,
            [
                "optimize",
                "--budget",
                "5",
                "--year",
                "2025",
                "--holiday",
                "2025-03-17",
                "--no-calendar",
            ],
        )
        assert result.exit_code == 0
        # 11 US holidays + 1 custom = 12
        assert "Public holidays:   12" in result.output

    def test_optimize_invalid_holiday_date(self) -> None:
        result = runner.invoke(
            app, ["optimize", "--budget", "5", "--year", "2025", "--holiday", "17/03/2025"]
        )
        assert result.exit_code != 0

    def test_optimize_invalid_country(self) -> None:
        result = runner.invoke(app, ["optimize", "--budget", "5", "--country", "zz"])
        assert result.exit_code == 1
        assert "Unknown country preset" in result.output

    def test_optimize_budget_required(self) -> None:
        result = runner.invoke(app, ["optimize"])
        assert result.exit_code == 1
        assert "--budget is required" in result.output

    def test_optimize_negative_budget(self) -> None:
        result = runner.invoke(app, ["optimize", "--budget=-3", "--year", "2025"])
        assert result.exit_code == 1
        assert "cannot be negative" in result.output

    def test_optimize_zero_budget(self) -> None:
        result = runner.invoke(app, ["optimize", "--budget", "0", "--year", "2025", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["periods"] == []
        assert data["leave_days_used"] == 0
        assert data["efficiency"] == 0

    def test_optimize_max_consecutive(self) -> None:
        result = runner.invoke(
            app,
            ["optimize", "--budget", "15", "--year", "2025", "--max-consecutive", "4", "--json"],
        )
        assert result.exit_code == 0
        for p in json.loads(result.output)["periods"]:
            assert p["total_days"] <= 4


class TestOptimizeConfig:
    def test_config_supplies_options(self) -> None:
        path = _write_config(
            {"year": 2026, "budget": 8, "country": "de", "policy": "short"}
        )
        try:
            result = runner.invoke(app, ["optimize", "--config", path, "--json"])
            assert result.exit_code == 0
            data = json.loads(result.output)
            assert data["year"] == 2026
            assert data["leave_budget"] == 8
            assert data["policy"] == "short"
            assert any(h["name"] == "Neujahrstag" for h in data["holidays"])
        finally:
            os.unlink(path)

    def test_flags_override_config(self) -> None:
        path = _write_config({"year": 2026, "budget": 8})
        try:
            result = runner.invoke(
                app, ["optimize", "--config", path, "--year", "2025", "--budget", "3", "--json"]
            )
            assert result.exit_code == 0
            data = json.loads(result.output)
            assert data["year"] == 2025
            assert data["leave_budget"] == 3
        finally:
            os.unlink(path)

    def test_config_custom_holidays(self) -> None:
        path = _write_config(
            {"year": 2025, "budget": 5, "country": "none", "holidays": ["2025-12-25"]}
        )
        try:
            result = runner.invoke(app, ["optimize", "--config", path, "--json"])
            assert result.exit_code == 0
            data = json.loads(result.output)
            assert [h["date"] for h in data["holidays"]] == ["2025-12-25"]
        finally:
            os.unlink(path)

    def test_config_file_not_found(self) -> None:
        result = runner.invoke(app, ["optimize", "--config", "/nonexistent/config.json"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_config_invalid_json(self) -> None:
        fd, path = tempfile.mkstemp(suffix=".json")
        with os.fdopen(fd, "w") as f:
            f.write("not json{{{")
        try:
            result = runner.invoke(app, ["optimize", "--config", path])
            assert result.exit_code == 1
            assert "Invalid JSON" in result.output
        finally:
            os.unlink(path)

    def test_config_not_an_object(self) -> None:
        path = _write_config([1, 2, 3])
        try:
            result = runner.invoke(app, ["optimize", "--config", path])
            assert result.exit_code == 1
            assert "JSON object" in result.output
        finally:
            os.unlink(path)

    def test_config_bad_budget(self) -> None:
        path = _write_config({"budget": "lots"})
        try:
            result = runner.invoke(app, ["optimize", "--config", path])
            assert result.exit_code == 1
            assert "must be an integer" in result.output
        finally:
            os.unlink(path)

    @pytest.mark.parametrize(
        "settings",
        [
            {"budget": 2.5},
            {"budget": True},
            {"budget": 5, "year": 2025.0},
            {"budget": 5, "max_bridge_days": "3"},
        ],
    )
    def test_config_rejects_non_integers(self, settings: dict[str, object]) -> None:
        path = _write_config(settings)
        try:
            result = runner.invoke(app, ["optimize", "--config", path, "--json"])
            assert result.exit_code == 1
            assert "must be an integer" in result.output
        finally:
            os.unlink(path)


class TestYearValidation:
    @pytest.mark.parametrize(
        "args",
        [
            ["optimize", "--budget", "5", "--year", "0"],
            ["optimize", "--budget", "5", "--year", "10000"],
            ["opportunities", "--year", "10000"],
            ["opportunities", "--year", "0"],
            ["holidays", "--year", "0"],
            ["holidays", "--year", "10000"],
        ],
    )
    def test_out_of_range_year(self, args: list[str]) -> None:
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "outside" in result.output


class TestOpportunitiesCommand:
    def test_text_output(self) -> None:
        result = runner.invoke(app, ["opportunities", "--year", "2025"])
        assert result.exit_code == 0
        assert "Bridge opportunities" in result.output
        assert "leave ->" in result.output

    def test_json_output(self) -> None:
        result = runner.invoke(
            app,
            [
                "opportunities",
                "--year",
                "2025",
                "--country",
                "none",
                "--holiday",
                "2025-12-25",
                "--json",
            ],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data
        assert data[0]["start_date"] == "2025-12-25"
        assert data[0]["end_date"] == "2025-12-28"
        assert all(o["efficiency"] > 1 for o in data)

    def test_none_found(self) -> None:
        result = runner.invoke(
            app,
            ["opportunities", "--year", "2025", "--country", "none", "--max-bridge", "1"],
        )
        assert result.exit_code == 0
        assert "(none)" in result.output

    def test_invalid_max_bridge(self) -> None:
        result = runner.invoke(app, ["opportunities", "--max-bridge", "0"])
        assert result.exit_code == 1


class TestHolidaysCommand:
    def test_holidays_default(self) -> None:
        result = runner.invoke(app, ["holidays", "--year", "2025"])
        assert result.exit_code == 0
        assert "United States federal holidays" in result.output
        assert "New Year" in result.output
        assert "Christmas" in result.output

    def test_holidays_other_region(self) -> None:
        result = runner.invoke(app, ["holidays", "--country", "DE", "--year", "2025"])
        assert result.exit_code == 0
        assert "Germany" in result.output
        assert "Neujahrstag" in result.output

    def test_holidays_invalid_country(self) -> None:
        result = runner.invoke(app, ["holidays", "--country", "zz"])
        assert result.exit_code == 1
        assert "Unknown country preset" in result.output
