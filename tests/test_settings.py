"""Tests for YAML configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from wellness.config import ConfigValidationError, Settings
from wellness.cycle.phase import Phase


class TestSettingsLoad:
    """Tests for Settings.load and from_dict."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        settings = Settings.load(tmp_path / "missing.yaml")
        assert settings.cycle.default_cycle_length == 29
        assert settings.metabolic.luteal_surcharge == 150
        assert settings.validation.max_weight_kg == 400

    def test_overrides(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text(
            "storage:\n"
            "  path: ~/elsewhere/state.json\n"
            "cycle:\n"
            "  stats_method: recency_weighted\n"
            "  menstrual_cap_days: 6\n"
            "metabolic:\n"
            "  luteal_surcharge: 120\n"
            "  phase_modifiers:\n"
            "    Luteal: 1.05\n"
        )
        settings = Settings.load(config)

        assert settings.storage.path == Path.home() / "elsewhere" / "state.json"
        assert settings.cycle.stats_method == "recency_weighted"
        assert settings.cycle.menstrual_cap_days == 6
        assert settings.metabolic.luteal_surcharge == 120
        assert settings.metabolic.phase_modifiers["luteal"] == 1.05
        assert settings.metabolic.phase_modifiers["follicular"] == 0.97

    def test_empty_file(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("")
        assert Settings.load(config).cycle.min_events == 3

    def test_yaml_error(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("cycle: [unclosed\n")
        with pytest.raises(ConfigValidationError, match="YAML parse error"):
            Settings.load(config)

    def test_non_mapping(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("- just\n- a list\n")
        with pytest.raises(ConfigValidationError):
            Settings.load(config)

    def test_bad_value_type(self) -> None:
        with pytest.raises(ConfigValidationError, match="Invalid config value"):
            Settings.from_dict({"cycle": {"min_events": "three"}})


class TestSettingsValidate:
    """Tests for cross-field validation."""

    def test_collects_every_error(self) -> None:
        with pytest.raises(ConfigValidationError) as excinfo:
            Settings.from_dict({
                "cycle": {"stats_method": "median", "min_cycle_days": 60},
                "validation": {"min_weight_kg": 500},
            })
        message = str(excinfo.value)
        assert "stats_method" in message
        assert "min_cycle_days" in message
        assert "min_weight_kg" in message

    def test_unknown_phase_modifier(self) -> None:
        with pytest.raises(ConfigValidationError, match="unknown phases"):
            Settings.from_dict({"metabolic": {"phase_modifiers": {"winter": 1.1}}})

    def test_negative_factor(self) -> None:
        with pytest.raises(ConfigValidationError, match="deficit_factor"):
            Settings.from_dict({"metabolic": {"deficit_factor": 0}})


class TestSettingsRoundTrip:
    """Tests for Settings.save."""

    def test_save_and_load(self, tmp_path: Path) -> None:
        settings = Settings()
        settings.cycle.recency_decay = 0.5
        settings.validation.min_weight_kg = 30
        config = tmp_path / "nested" / "config.yaml"

        settings.save(config)
        loaded = Settings.load(config)

        assert loaded.cycle.recency_decay == 0.5
        assert loaded.validation.min_weight_kg == 30
        assert loaded.metabolic.phase_modifiers == settings.metabolic.phase_modifiers

    def test_modifiers_by_phase(self) -> None:
        modifiers = Settings().metabolic.modifiers_by_phase()
        assert modifiers[Phase.LUTEAL] == 1.03
        assert set(modifiers) == set(Phase)
