"""In-memory application state owned by the StateStore."""

from __future__ import annotations

from dataclasses import dataclass, field

from wellness.cycle.events import CycleEvent
from wellness.cycle.stats import DEFAULT_CYCLE_LENGTH, DEFAULT_PERIOD_DURATION
from wellness.tracking.models import DailyLogs, FoodPreset, Preferences, Profile

STATE_VERSION = 1


@dataclass
class AppState:
    """Everything that is persisted as one blob."""

    profile: Profile = field(default_factory=Profile)
    logs: DailyLogs = field(default_factory=DailyLogs)
    cycle_events: list[CycleEvent] = field(default_factory=list)
    avg_cycle_length: int = DEFAULT_CYCLE_LENGTH
    avg_period_duration: int = DEFAULT_PERIOD_DURATION
    library: list[FoodPreset] = field(default_factory=list)
    preferences: Preferences = field(default_factory=Preferences)
    version: int = STATE_VERSION


def factory_defaults() -> AppState:
    """Fresh state used on first run and after corruption."""
    return AppState()
