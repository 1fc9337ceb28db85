"""Daily logging models and aggregation.

Key components:
- Profile and goals used by the metabolic estimator
- Food, workout, weight, water, steps and symptom log models
- Daily totals (macros, net carbs, calories burned)
"""

from __future__ import annotations

from wellness.tracking.aggregate import DailyTotals, daily_totals
from wellness.tracking.models import (
    DailyLogs,
    FoodPreset,
    Goals,
    NutritionEntry,
    Preferences,
    Profile,
    WorkoutEntry,
)

__all__ = [
    "DailyLogs",
    "DailyTotals",
    "FoodPreset",
    "Goals",
    "NutritionEntry",
    "Preferences",
    "Profile",
    "WorkoutEntry",
    "daily_totals",
]
