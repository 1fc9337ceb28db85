"""Menstrual phase resolution for any date, past or future.

The resolver anchors on the most recent period start on or before the query
date and assumes perfect periodicity at the learned average length, so dates
far beyond the last logged start wrap into projected cycles:

    days_since_start = (date - last_start) + 1
    cycle_day = ((days_since_start - 1) mod avg_cycle_length) + 1

Cycle days map to phases with fixed boundaries (Luteal absorbs every day
after the ovulation window). A period that was never closed keeps the date
Menstrual for at most ``MENSTRUAL_CAP_DAYS`` after its start.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

from wellness.cycle.events import CycleEvent, EventLog
from wellness.cycle.stats import DEFAULT_CYCLE_LENGTH


class Phase(Enum):
    """Menstrual cycle phase."""
    MENSTRUAL = "Menstrual"
    FOLLICULAR = "Follicular"
    OVULATION = "Ovulation"
    LUTEAL = "Luteal"


# Last cycle day of each phase (inclusive); Luteal runs to the cycle end
MENSTRUAL_LAST_DAY = 5
FOLLICULAR_LAST_DAY = 13
OVULATION_LAST_DAY = 17

MENSTRUAL_CAP_DAYS = 7


def _as_log(events: EventLog | Iterable[CycleEvent]) -> EventLog:
    return events if isinstance(events, EventLog) else EventLog(list(events))


def phase_for_cycle_day(cycle_day: int) -> Phase:
    """Map a 1-indexed cycle day to its phase."""
    if cycle_day <= MENSTRUAL_LAST_DAY:
        return Phase.MENSTRUAL
    if cycle_day <= FOLLICULAR_LAST_DAY:
        return Phase.FOLLICULAR
    if cycle_day <= OVULATION_LAST_DAY:
        return Phase.OVULATION
    return Phase.LUTEAL


def cycle_day_for_date(
    target: date,
    events: EventLog | Iterable[CycleEvent],
    avg_cycle_length: int = DEFAULT_CYCLE_LENGTH,
) -> Optional[int]:
    """Return the (possibly projected) cycle day for a date.

    Args:
        target: Date to resolve
        events: Event log or events in ascending order
        avg_cycle_length: Learned average cycle length in days

    Returns:
        1-indexed cycle day, or None with no start on or before ``target``
    """
    log = _as_log(events)
    last_start = log.last_start(on_or_before=target)
    if last_start is None:
        return None

    length = avg_cycle_length if avg_cycle_length and avg_cycle_length > 0 else DEFAULT_CYCLE_LENGTH
    days_since_start = (target - last_start).days + 1
    return ((days_since_start - 1) % length) + 1


def phase_for_date(
    target: date,
    events: EventLog | Iterable[CycleEvent],
    avg_cycle_length: int = DEFAULT_CYCLE_LENGTH,
    menstrual_cap_days: int = MENSTRUAL_CAP_DAYS,
) -> Phase:
    """Resolve the menstrual phase active on a date.

    Args:
        target: Date to resolve
        events: Event log or events in ascending order
        avg_cycle_length: Learned average cycle length in days
        menstrual_cap_days: Days an unclosed period keeps counting as Menstrual

    Returns:
        Phase for the date. Follicular when there is no period history yet.
    """
    log = _as_log(events)

    latest = log.latest_on_or_before(target)
    if latest is not None and latest.is_start:
        if (target - latest.date).days <= menstrual_cap_days:
            return Phase.MENSTRUAL

    cycle_day = cycle_day_for_date(target, log, avg_cycle_length)
    if cycle_day is None:
        return Phase.FOLLICULAR
    return phase_for_cycle_day(cycle_day)


def predict_next_period(
    events: EventLog | Iterable[CycleEvent],
    avg_cycle_length: int = DEFAULT_CYCLE_LENGTH,
) -> Optional[date]:
    """Latest logged start plus the average cycle length."""
    last_start = _as_log(events).last_start()
    if last_start is None:
        return None
    return last_start + timedelta(days=avg_cycle_length)


def phase_calendar(
    start: date,
    days: int,
    events: EventLog | Iterable[CycleEvent],
    avg_cycle_length: int = DEFAULT_CYCLE_LENGTH,
    menstrual_cap_days: int = MENSTRUAL_CAP_DAYS,
) -> list[tuple[date, Phase]]:
    """Phases for ``days`` consecutive dates beginning at ``start``."""
    log = _as_log(events)
    return [
        (
            start + timedelta(days=offset),
            phase_for_date(start + timedelta(days=offset), log, avg_cycle_length, menstrual_cap_days),
        )
        for offset in range(days)
    ]
