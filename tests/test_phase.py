"""Tests for menstrual phase resolution."""

from __future__ import annotations

from datetime import date

import pytest

from wellness.cycle.events import CycleEvent, EventKind, EventLog
from wellness.cycle.phase import (
    Phase,
    cycle_day_for_date,
    phase_calendar,
    phase_for_cycle_day,
    phase_for_date,
    predict_next_period,
)


@pytest.fixture
def single_start() -> EventLog:
    """One open period that started on 2024-01-01."""
    log = EventLog()
    log.log_start(date(2024, 1, 1))
    return log


@pytest.fixture
def closed_period() -> EventLog:
    log = EventLog()
    log.log_start(date(2024, 1, 1))
    log.log_end(date(2024, 1, 5))
    return log


class TestPhaseForCycleDay:
    """Tests for the cycle day to phase boundaries."""

    @pytest.mark.parametrize(
        "cycle_day,expected",
        [
            (1, Phase.MENSTRUAL),
            (5, Phase.MENSTRUAL),
            (6, Phase.FOLLICULAR),
            (13, Phase.FOLLICULAR),
            (14, Phase.OVULATION),
            (17, Phase.OVULATION),
            (18, Phase.LUTEAL),
            (35, Phase.LUTEAL),
        ],
    )
    def test_boundaries(self, cycle_day: int, expected: Phase) -> None:
        assert phase_for_cycle_day(cycle_day) is expected


class TestCycleDay:
    """Tests for cycle_day_for_date."""

    def test_start_is_day_one(self, single_start: EventLog) -> None:
        assert cycle_day_for_date(date(2024, 1, 1), single_start) == 1

    def test_projects_forward(self, single_start: EventLog) -> None:
        """Day 30 wraps to day 1 of the next projected cycle."""
        assert cycle_day_for_date(date(2024, 1, 29), single_start, 29) == 29
        assert cycle_day_for_date(date(2024, 1, 30), single_start, 29) == 1

    def test_before_history(self, single_start: EventLog) -> None:
        assert cycle_day_for_date(date(2023, 12, 31), single_start) is None

    def test_accepts_plain_event_list(self) -> None:
        events = [CycleEvent(date(2024, 1, 1), EventKind.START)]
        assert cycle_day_for_date(date(2024, 1, 10), events) == 10


class TestPhaseForDate:
    """Tests for phase_for_date."""

    def test_no_history_is_follicular(self) -> None:
        assert phase_for_date(date(2024, 1, 1), EventLog()) is Phase.FOLLICULAR

    def test_before_first_start_is_follicular(self, single_start: EventLog) -> None:
        assert phase_for_date(date(2023, 12, 20), single_start) is Phase.FOLLICULAR

    def test_start_day_is_menstrual(self, single_start: EventLog) -> None:
        assert phase_for_date(date(2024, 1, 1), single_start) is Phase.MENSTRUAL

    def test_open_period_menstrual_up_to_cap(self, single_start: EventLog) -> None:
        """An unclosed period stays Menstrual for 7 days after its start."""
        assert phase_for_date(date(2024, 1, 8), single_start) is Phase.MENSTRUAL
        assert phase_for_date(date(2024, 1, 9), single_start) is Phase.FOLLICULAR

    def test_closed_period_uses_cycle_day(self, closed_period: EventLog) -> None:
        assert phase_for_date(date(2024, 1, 5), closed_period) is Phase.MENSTRUAL
        assert phase_for_date(date(2024, 1, 7), closed_period) is Phase.FOLLICULAR

    def test_ovulation_and_luteal(self, closed_period: EventLog) -> None:
        assert phase_for_date(date(2024, 1, 14), closed_period) is Phase.OVULATION
        assert phase_for_date(date(2024, 1, 17), closed_period) is Phase.OVULATION
        assert phase_for_date(date(2024, 1, 18), closed_period) is Phase.LUTEAL
        assert phase_for_date(date(2024, 1, 29), closed_period) is Phase.LUTEAL

    def test_projected_cycle_wraps(self, closed_period: EventLog) -> None:
        """Dates past the average length are projected into the next cycle."""
        assert phase_for_date(date(2024, 1, 30), closed_period, 29) is Phase.MENSTRUAL
        assert phase_for_date(date(2024, 2, 12), closed_period, 29) is Phase.OVULATION

    def test_wraps_with_28_day_average(self, single_start: EventLog) -> None:
        assert phase_for_date(date(2024, 1, 1), single_start, 28) is Phase.MENSTRUAL
        assert phase_for_date(date(2024, 1, 15), single_start, 28) is Phase.OVULATION
        assert phase_for_date(date(2024, 1, 29), single_start, 28) is Phase.MENSTRUAL

    def test_average_length_changes_projection(self, closed_period: EventLog) -> None:
        assert phase_for_date(date(2024, 1, 30), closed_period, 35) is Phase.LUTEAL

    def test_custom_cap(self, single_start: EventLog) -> None:
        assert phase_for_date(date(2024, 1, 7), single_start, menstrual_cap_days=5) is Phase.FOLLICULAR


class TestPrediction:
    """Tests for predict_next_period and phase_calendar."""

    def test_next_period(self, single_start: EventLog) -> None:
        assert predict_next_period(single_start, 29) == date(2024, 1, 30)
        assert predict_next_period(single_start, 31) == date(2024, 2, 1)

    def test_no_history(self) -> None:
        assert predict_next_period(EventLog()) is None

    def test_calendar(self, closed_period: EventLog) -> None:
        calendar = phase_calendar(date(2024, 1, 12), 3, closed_period)
        assert calendar == [
            (date(2024, 1, 12), Phase.FOLLICULAR),
            (date(2024, 1, 13), Phase.FOLLICULAR),
            (date(2024, 1, 14), Phase.OVULATION),
        ]
