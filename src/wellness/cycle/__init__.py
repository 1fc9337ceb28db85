"""Menstrual cycle engine.

This module maintains the sparse period start/end event log, learns an
average cycle length from it, and resolves the phase for any date by
projecting the latest cycle forward at that average length.

Key components:
- EventLog with idempotent starts, auto-closed open periods, guarded ends
- Cycle statistics with outlier rejection (simple or recency-weighted mean)
- Phase resolver (Menstrual / Follicular / Ovulation / Luteal)
"""

from __future__ import annotations

from wellness.cycle.events import CycleEvent, EventKind, EventLog, Period
from wellness.cycle.phase import (
    Phase,
    cycle_day_for_date,
    phase_calendar,
    phase_for_date,
    predict_next_period,
)
from wellness.cycle.stats import CycleStatistics, recompute

__all__ = [
    "CycleEvent",
    "CycleStatistics",
    "EventKind",
    "EventLog",
    "Period",
    "Phase",
    "cycle_day_for_date",
    "phase_calendar",
    "phase_for_date",
    "predict_next_period",
    "recompute",
]
