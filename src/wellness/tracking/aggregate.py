"""Daily totals over the nutrition and workout logs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping, Sequence

from wellness.tracking.models import NutritionEntry, WorkoutEntry


@dataclass
class DailyTotals:
    """Summed intake and burn for one date."""

    date: date
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    calories_burned: float = 0.0

    @property
    def net_carbs(self) -> float:
        """Carbs minus fiber (insulin load), never negative."""
        return max(self.carbs - self.fiber, 0.0)

    @property
    def net_calories(self) -> float:
        return self.calories - self.calories_burned

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "calories": self.calories,
            "protein": round(self.protein, 1),
            "carbs": round(self.carbs, 1),
            "fat": round(self.fat, 1),
            "fiber": round(self.fiber, 1),
            "net_carbs": round(self.net_carbs, 1),
            "calories_burned": self.calories_burned,
        }


def daily_totals(
    day: date,
    nutrition: Mapping[date, Sequence[NutritionEntry]],
    workouts: Mapping[date, Sequence[WorkoutEntry]],
) -> DailyTotals:
    """Sum a day's food and workout entries.

    Args:
        day: Date to aggregate
        nutrition: Date-keyed food entries
        workouts: Date-keyed workout entries

    Returns:
        DailyTotals (all zeros when nothing was logged)
    """
    totals = DailyTotals(date=day)

    for item in nutrition.get(day, ()):
        totals.calories += item.calories or 0
        totals.protein += item.protein or 0
        totals.carbs += item.carbs or 0
        totals.fat += item.fat or 0
        totals.fiber += item.fiber or 0

    for workout in workouts.get(day, ()):
        totals.calories_burned += workout.calories_burned or 0

    return totals
