"""Data models for profile, daily logs and the food library."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from wellness.metabolic.estimator import ActivityLevel

DEFAULT_AGE = 30

VALID_THEMES = ("light", "dark")


@dataclass
class Goals:
    """Daily intake targets."""

    daily_calories: int = 2000
    protein: float = 130  # g
    carbs: float = 200  # g
    fat: float = 60  # g
    fiber: float = 25  # g
    water: int = 2500  # ml


@dataclass
class Profile:
    """Single-user profile used by the metabolic estimator."""

    name: str = "Me"
    dob: Optional[date] = date(2000, 1, 1)
    age: Optional[int] = None  # used when dob is unknown
    height_cm: float = 165.0
    weight_kg: float = 65.0
    body_fat_pct: Optional[float] = 22.0  # None selects Mifflin-St Jeor
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    goals: Goals = field(default_factory=Goals)

    def __post_init__(self) -> None:
        if self.body_fat_pct is not None and not (0 <= self.body_fat_pct < 100):
            raise ValueError(
                f"body_fat_pct must be in [0, 100), got {self.body_fat_pct}"
            )
        if not math.isfinite(self.height_cm) or self.height_cm <= 0:
            raise ValueError(f"height_cm must be positive, got {self.height_cm}")
        if not math.isfinite(self.weight_kg) or self.weight_kg <= 0:
            raise ValueError(f"weight_kg must be positive, got {self.weight_kg}")
        if not isinstance(self.activity_level, ActivityLevel):
            self.activity_level = ActivityLevel.parse(self.activity_level)

    def age_on(self, day: date) -> int:
        """Age in whole years on the given day."""
        if self.dob is None:
            return self.age if self.age is not None else DEFAULT_AGE
        years = day.year - self.dob.year
        if (day.month, day.day) < (self.dob.month, self.dob.day):
            years -= 1
        return years


@dataclass
class NutritionEntry:
    """A single food log entry."""

    id: str
    name: str
    calories: int
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0


@dataclass
class WorkoutEntry:
    """A single workout log entry."""

    id: str
    type: str
    duration_minutes: float = 0.0
    intensity: str = "moderate"
    calories_burned: float = 0.0


@dataclass
class FoodPreset:
    """Library item offered for quick re-logging."""

    name: str
    calories: int
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0

    @classmethod
    def from_entry(cls, entry: NutritionEntry) -> "FoodPreset":
        return cls(
            name=entry.name,
            calories=entry.calories,
            protein=entry.protein,
            carbs=entry.carbs,
            fat=entry.fat,
            fiber=entry.fiber,
        )


@dataclass
class DailyLogs:
    """Date-keyed log maps. Lists accumulate; scalars are replaced or summed."""

    nutrition: dict[date, list[NutritionEntry]] = field(default_factory=dict)
    workouts: dict[date, list[WorkoutEntry]] = field(default_factory=dict)
    weight: dict[date, float] = field(default_factory=dict)
    water: dict[date, int] = field(default_factory=dict)
    steps: dict[date, int] = field(default_factory=dict)
    symptoms: dict[date, list[str]] = field(default_factory=dict)


@dataclass
class Preferences:
    """Presentation settings persisted with the state."""

    theme: str = "light"
    notifications: bool = True

    def __post_init__(self) -> None:
        if self.theme not in VALID_THEMES:
            raise ValueError(f"theme must be one of {VALID_THEMES}, got '{self.theme}'")
