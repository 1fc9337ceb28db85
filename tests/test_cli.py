"""Tests for CLI commands."""

from __future__ import annotations

import json
from datetime import date, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from wellness.cli import app

runner = CliRunner()


@pytest.fixture
def invoke(tmp_path: Path):
    """Run the CLI against a temporary state file and an absent config."""
    base = ["--state", str(tmp_path / "state.json"), "--config", str(tmp_path / "config.yaml")]

    def _invoke(*args: str):
        return runner.invoke(app, [*base, *args])

    return _invoke


class TestMainCommands:
    """Tests for top-level behavior."""

    def test_help(self):
        """Test that --help works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "period" in result.output.lower()

    def test_invalid_config(self, tmp_path: Path):
        config = tmp_path / "config.yaml"
        config.write_text("cycle:\n  stats_method: median\n")
        result = runner.invoke(
            app, ["--state", str(tmp_path / "s.json"), "--config", str(config), "stats"]
        )
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_output_format_from_config(self, invoke, tmp_path: Path):
        (tmp_path / "config.yaml").write_text("defaults:\n  output_format: json\n")
        result = invoke("phase", "show", "--date", "2024-01-03")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["command"] == "phase show"
        assert data["data"]["phase"] == "Follicular"

    def test_invalid_date(self, invoke):
        result = invoke("phase", "show", "--date", "2024-13-40")
        assert result.exit_code == 1
        assert "Invalid date" in result.output


class TestPeriodCommands:
    """Tests for period and phase subcommands."""

    def test_start_and_phase(self, invoke):
        result = invoke("period", "start", "--date", "2024-01-01")
        assert result.exit_code == 0
        assert "Logged period start" in result.output

        result = invoke("phase", "show", "--date", "2024-01-03", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["data"]["phase"] == "Menstrual"
        assert data["data"]["cycle_day"] == 3

    def test_duplicate_start(self, invoke):
        invoke("period", "start", "--date", "2024-01-01")
        result = invoke("period", "start", "--date", "2024-01-01")
        assert result.exit_code == 0
        assert "already logged" in result.output

    def test_end_without_start_fails(self, invoke):
        result = invoke("period", "end", "--date", "2024-01-05")
        assert result.exit_code == 1

    def test_list_and_predict(self, invoke):
        for day in ("2024-01-01", "2024-01-29", "2024-02-26"):
            invoke("period", "start", "--date", day)

        result = invoke("period", "list", "--json")
        data = json.loads(result.stdout)["data"]
        assert data["avg_cycle_length"] == 28
        assert len(data["periods"]) == 3
        assert data["periods"][0]["end"] == "2024-01-06"

        result = invoke("period", "predict", "--json")
        assert json.loads(result.stdout)["data"]["next_period"] == "2024-03-25"

    def test_predict_without_history(self, invoke):
        result = invoke("period", "predict")
        assert result.exit_code == 1
        assert "No period start logged" in result.output

    def test_calendar(self, invoke):
        invoke("period", "start", "--date", "2024-01-01")
        result = invoke("phase", "calendar", "--start", "2024-01-12", "--days", "3", "--json")
        days = json.loads(result.stdout)["data"]["days"]
        assert [d["phase"] for d in days] == ["Follicular", "Follicular", "Ovulation"]


class TestWeightCommands:
    """Tests for weight subcommands."""

    def test_add_out_of_range(self, invoke):
        result = invoke("weight", "add", "10")
        assert result.exit_code == 1
        assert "between 20 and 400" in result.output

    def test_add_and_list(self, invoke):
        result = invoke("weight", "add", "64.5", "--json")
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["weight_kg"] == 64.5

        result = invoke("weight", "list", "--json")
        entries = json.loads(result.stdout)["data"]["entries"]
        assert [e["weight_kg"] for e in entries] == [64.5]

    def test_list_days_window(self, invoke):
        old = (date.today() - timedelta(days=10)).isoformat()
        invoke("weight", "add", "66", "--date", old)
        invoke("weight", "add", "64.5")

        result = invoke("weight", "list", "-n", "5", "--json")
        assert result.exit_code == 0
        entries = json.loads(result.stdout)["data"]["entries"]
        assert [e["weight_kg"] for e in entries] == [64.5]


class TestFoodCommands:
    """Tests for food subcommands."""

    def test_add_list_and_library(self, invoke):
        result = invoke("food", "add", "Oats", "--calories", "150", "--protein", "5", "--date", "2024-03-20")
        assert result.exit_code == 0

        # Re-log from the library without nutrient values
        result = invoke("food", "add", "oats", "--date", "2024-03-20", "--json")
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["totals"]["calories"] == 300

        result = invoke("food", "library", "--json")
        assert [f["name"] for f in json.loads(result.stdout)["data"]["foods"]] == ["Oats"]

    def test_unknown_food_needs_calories(self, invoke):
        result = invoke("food", "add", "Mystery")
        assert result.exit_code == 1
        assert "not in the food library" in result.output

    def test_remove(self, invoke):
        result = invoke("food", "add", "Eggs", "--calories", "140", "--date", "2024-03-20", "--json")
        entry_id = json.loads(result.stdout)["data"]["id"]

        result = invoke("food", "remove", entry_id, "--date", "2024-03-20")
        assert result.exit_code == 0

        result = invoke("food", "list", "--date", "2024-03-20", "--json")
        assert json.loads(result.stdout)["data"]["entries"] == []

    def test_remove_unknown(self, invoke):
        result = invoke("food", "remove", "nope", "--date", "2024-03-20")
        assert result.exit_code == 1


class TestTdeeCommands:
    """Tests for tdee and stats commands."""

    def test_estimate_defaults(self, invoke):
        """Default profile with no cycle history is Follicular."""
        result = invoke("tdee", "estimate", "--date", "2024-03-20", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["bmr"] == 1465
        assert data["tdee"] == 2270
        assert data["phase"] == "Follicular"
        assert data["method"] == "katch_mcardle"

    def test_target_range(self, invoke):
        invoke("period", "start", "--date", "2024-03-01")
        result = invoke("tdee", "target", "--date", "2024-03-20", "--days", "2", "--json")
        targets = json.loads(result.stdout)["data"]["targets"]
        assert len(targets) == 2
        assert targets[0]["phase"] == "Luteal"
        assert targets[0]["target_calories"] == 2119

    def test_stats(self, invoke):
        invoke("food", "add", "Oats", "--calories", "150", "--carbs", "27", "--fiber", "4", "--date", "2024-03-20")
        invoke("workout", "add", "run", "--minutes", "30", "--calories", "300", "--date", "2024-03-20")
        invoke("steps", "set", "8000", "--date", "2024-03-20")
        result = invoke("stats", "--date", "2024-03-20", "--json")
        data = json.loads(result.stdout)["data"]
        assert data["calories"] == 150
        assert data["net_carbs"] == 23
        assert data["calories_burned"] == 300
        assert data["steps"] == 8000


class TestMiscCommands:
    """Tests for profile, water, symptom and theme commands."""

    def test_profile_update(self, invoke):
        result = invoke("profile", "update", "--height", "170", "--calorie-goal", "1800")
        assert result.exit_code == 0

        result = invoke("profile", "show", "--json")
        data = json.loads(result.stdout)["data"]
        assert data["height_cm"] == 170
        assert data["daily_calorie_goal"] == 1800

    def test_profile_update_invalid(self, invoke):
        result = invoke("profile", "update", "--body-fat", "150")
        assert result.exit_code == 1

    def test_infinite_height_leaves_store_usable(self, invoke):
        result = invoke("profile", "update", "--height", "inf", "--no-body-fat")
        assert result.exit_code == 1
        assert "Invalid profile values" in result.output

        result = invoke("profile", "show", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["height_cm"] == 165.0
        assert data["body_fat_pct"] == 22.0

    def test_water(self, invoke):
        invoke("water", "add", "250")
        result = invoke("water", "add", "500")
        assert result.exit_code == 0
        assert "750" in result.output

    def test_symptoms(self, invoke):
        invoke("symptom", "add", "cramps", "--date", "2024-03-20")
        result = invoke("symptom", "add", "Cramps", "--date", "2024-03-20")
        assert "already logged" in result.output
        result = invoke("symptom", "list", "--date", "2024-03-20")
        assert "cramps" in result.output

    def test_theme_toggle(self, invoke):
        result = invoke("theme", "toggle")
        assert "dark" in result.output
        result = invoke("theme", "toggle")
        assert "light" in result.output

    def test_state_persisted(self, invoke, tmp_path: Path):
        invoke("period", "start", "--date", "2024-01-01")
        saved = json.loads((tmp_path / "state.json").read_text())
        assert saved["cycle"]["events"] == [{"date": "2024-01-01", "type": "start"}]
