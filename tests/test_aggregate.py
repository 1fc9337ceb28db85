"""Tests for daily totals."""

from __future__ import annotations

from datetime import date

import pytest

from wellness.tracking.aggregate import DailyTotals, daily_totals
from wellness.tracking.models import NutritionEntry, WorkoutEntry

DAY = date(2024, 3, 20)


class TestDailyTotals:
    """Tests for daily_totals."""

    def test_sums_food_and_workouts(self) -> None:
        nutrition = {
            DAY: [
                NutritionEntry("a", "Oats", 150, protein=5, carbs=27, fat=3, fiber=4),
                NutritionEntry("b", "Eggs", 140, protein=12, carbs=1, fat=10),
            ]
        }
        workouts = {DAY: [WorkoutEntry("w", "run", 30, calories_burned=300)]}

        totals = daily_totals(DAY, nutrition, workouts)

        assert totals.calories == 290
        assert totals.protein == pytest.approx(17)
        assert totals.carbs == pytest.approx(28)
        assert totals.fat == pytest.approx(13)
        assert totals.fiber == pytest.approx(4)
        assert totals.net_carbs == pytest.approx(24)
        assert totals.calories_burned == 300
        assert totals.net_calories == -10

    def test_empty_day_is_zero(self) -> None:
        totals = daily_totals(DAY, {}, {})
        assert totals == DailyTotals(date=DAY)
        assert totals.net_carbs == 0

    def test_other_days_ignored(self) -> None:
        nutrition = {date(2024, 3, 19): [NutritionEntry("a", "Pizza", 800)]}
        assert daily_totals(DAY, nutrition, {}).calories == 0

    def test_net_carbs_never_negative(self) -> None:
        """Fiber above carbs clamps net carbs at zero."""
        totals = DailyTotals(date=DAY, carbs=5, fiber=8)
        assert totals.net_carbs == 0

    def test_to_dict(self) -> None:
        totals = DailyTotals(date=DAY, calories=500, carbs=40.04, fiber=10)
        data = totals.to_dict()
        assert data["date"] == "2024-03-20"
        assert data["carbs"] == 40.0
        assert data["net_carbs"] == 30.0
