"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from wellness.cycle.phase import Phase


class ConfigValidationError(ValueError):
    """Raised when config.yaml fails validation."""


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".wellness"


def _default_state_path() -> Path:
    """Return the default state file path."""
    return _default_config_dir() / "state.json"


def _default_phase_modifiers() -> dict[str, float]:
    return {
        "menstrual": 1.0,
        "follicular": 0.97,
        "ovulation": 1.0,
        "luteal": 1.03,
    }


@dataclass
class StorageConfig:
    """State file configuration."""

    path: Path = field(default_factory=_default_state_path)


@dataclass
class CycleConfig:
    """Cycle engine tuning."""

    min_cycle_days: int = 15  # exclusive
    max_cycle_days: int = 50  # exclusive
    default_cycle_length: int = 29
    default_period_days: int = 5
    menstrual_cap_days: int = 7
    min_events: int = 3
    stats_method: str = "simple"  # "simple" or "recency_weighted"
    recency_decay: float = 0.8


@dataclass
class MetabolicConfig:
    """Metabolic estimator constants."""

    luteal_surcharge: int = 150
    mifflin_adjustment: float = 0.85
    deficit_factor: float = 0.85
    phase_adjustment_factor: float = 1.0
    phase_modifiers: dict[str, float] = field(default_factory=_default_phase_modifiers)

    def modifiers_by_phase(self) -> dict[Phase, float]:
        """Phase modifiers keyed by Phase."""
        return {
            phase: float(self.phase_modifiers.get(phase.value.lower(), 1.0))
            for phase in Phase
        }


@dataclass
class ValidationConfig:
    """Accepted ranges for logged values."""

    min_weight_kg: float = 20.0
    max_weight_kg: float = 400.0


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json"


@dataclass
class Settings:
    """Main application settings."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    cycle: CycleConfig = field(default_factory=CycleConfig)
    metabolic: MetabolicConfig = field(default_factory=MetabolicConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.wellness/config.yaml

        Returns:
            Settings instance

        Raises:
            ConfigValidationError: If the YAML is malformed or values are invalid
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigValidationError(
                    f"YAML parse error in {config_path}: {exc}"
                ) from exc

        if not isinstance(data, dict):
            raise ConfigValidationError(f"{config_path} must contain a mapping")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """Build settings from a parsed YAML mapping and validate them."""
        settings = cls()

        try:
            # Parse storage config
            if "storage" in data:
                storage_data = data["storage"] or {}
                if "path" in storage_data:
                    settings.storage.path = Path(storage_data["path"]).expanduser()

            # Parse cycle config
            if "cycle" in data:
                cycle_data = data["cycle"] or {}
                for key in (
                    "min_cycle_days",
                    "max_cycle_days",
                    "default_cycle_length",
                    "default_period_days",
                    "menstrual_cap_days",
                    "min_events",
                ):
                    if key in cycle_data:
                        setattr(settings.cycle, key, int(cycle_data[key]))
                if "stats_method" in cycle_data:
                    settings.cycle.stats_method = str(cycle_data["stats_method"])
                if "recency_decay" in cycle_data:
                    settings.cycle.recency_decay = float(cycle_data["recency_decay"])

            # Parse metabolic config
            if "metabolic" in data:
                met_data = data["metabolic"] or {}
                if "luteal_surcharge" in met_data:
                    settings.metabolic.luteal_surcharge = int(met_data["luteal_surcharge"])
                for key in ("mifflin_adjustment", "deficit_factor", "phase_adjustment_factor"):
                    if key in met_data:
                        setattr(settings.metabolic, key, float(met_data[key]))
                if "phase_modifiers" in met_data:
                    modifiers = _default_phase_modifiers()
                    for phase, value in (met_data["phase_modifiers"] or {}).items():
                        modifiers[str(phase).lower()] = float(value)
                    settings.metabolic.phase_modifiers = modifiers

            # Parse validation ranges
            if "validation" in data:
                val_data = data["validation"] or {}
                if "min_weight_kg" in val_data:
                    settings.validation.min_weight_kg = float(val_data["min_weight_kg"])
                if "max_weight_kg" in val_data:
                    settings.validation.max_weight_kg = float(val_data["max_weight_kg"])

            # Parse defaults
            if "defaults" in data:
                def_data = data["defaults"] or {}
                if "output_format" in def_data:
                    settings.defaults.output_format = def_data["output_format"]
        except (TypeError, ValueError, AttributeError) as exc:
            raise ConfigValidationError(f"Invalid config value: {exc}") from exc

        settings.validate()
        return settings

    def validate(self) -> None:
        """Check cross-field constraints.

        Raises:
            ConfigValidationError: Listing every problem found
        """
        errors: list[str] = []
        cycle = self.cycle

        if cycle.min_cycle_days >= cycle.max_cycle_days:
            errors.append("cycle.min_cycle_days must be below cycle.max_cycle_days")
        if not (cycle.min_cycle_days < cycle.default_cycle_length < cycle.max_cycle_days):
            errors.append("cycle.default_cycle_length must lie inside the accepted window")
        if cycle.default_period_days < 1:
            errors.append("cycle.default_period_days must be at least 1")
        if cycle.menstrual_cap_days < 1:
            errors.append("cycle.menstrual_cap_days must be at least 1")
        if cycle.stats_method not in ("simple", "recency_weighted"):
            errors.append(
                f"cycle.stats_method must be 'simple' or 'recency_weighted', got '{cycle.stats_method}'"
            )
        if not (0.0 < cycle.recency_decay <= 1.0):
            errors.append("cycle.recency_decay must be in (0, 1]")

        met = self.metabolic
        if met.luteal_surcharge < 0:
            errors.append("metabolic.luteal_surcharge must not be negative")
        for key in ("mifflin_adjustment", "deficit_factor", "phase_adjustment_factor"):
            if getattr(met, key) <= 0:
                errors.append(f"metabolic.{key} must be positive")
        unknown = set(met.phase_modifiers) - {p.value.lower() for p in Phase}
        if unknown:
            errors.append(f"metabolic.phase_modifiers has unknown phases: {sorted(unknown)}")

        if self.validation.min_weight_kg >= self.validation.max_weight_kg:
            errors.append("validation.min_weight_kg must be below validation.max_weight_kg")

        if self.defaults.output_format not in ("table", "json"):
            errors.append(
                f"defaults.output_format must be 'table' or 'json', got '{self.defaults.output_format}'"
            )

        if errors:
            raise ConfigValidationError(
                f"config has {len(errors)} validation error(s):\n"
                + "\n".join(f"  - {e}" for e in errors)
            )

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.wellness/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "storage": {
                "path": str(self.storage.path),
            },
            "cycle": {
                "min_cycle_days": self.cycle.min_cycle_days,
                "max_cycle_days": self.cycle.max_cycle_days,
                "default_cycle_length": self.cycle.default_cycle_length,
                "default_period_days": self.cycle.default_period_days,
                "menstrual_cap_days": self.cycle.menstrual_cap_days,
                "min_events": self.cycle.min_events,
                "stats_method": self.cycle.stats_method,
                "recency_decay": self.cycle.recency_decay,
            },
            "metabolic": {
                "luteal_surcharge": self.metabolic.luteal_surcharge,
                "mifflin_adjustment": self.metabolic.mifflin_adjustment,
                "deficit_factor": self.metabolic.deficit_factor,
                "phase_adjustment_factor": self.metabolic.phase_adjustment_factor,
                "phase_modifiers": dict(self.metabolic.phase_modifiers),
            },
            "validation": {
                "min_weight_kg": self.validation.min_weight_kg,
                "max_weight_kg": self.validation.max_weight_kg,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
