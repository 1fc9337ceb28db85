"""Average cycle length and period duration from the event log.

Cycle length samples are the day gaps between consecutive period starts.
Samples outside the plausible window (exclusive bounds, 15 and 50 days by
default) are dropped before averaging, so a forgotten month or a
double-logged start does not skew the estimate.

Two averaging methods are supported:
- ``simple``: arithmetic mean of the accepted samples (default)
- ``recency_weighted``: the i-th most recent sample is weighted by decay**i
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from wellness.cycle.events import CycleEvent, Period

DEFAULT_CYCLE_LENGTH = 29
DEFAULT_PERIOD_DURATION = 5

# Exclusive bounds for an accepted cycle length sample
MIN_CYCLE_DAYS = 15
MAX_CYCLE_DAYS = 50

# Minimum number of events before the average is re-estimated
MIN_EVENTS = 3

# Accepted period span (end - start) in days
MIN_PERIOD_SPAN = 1
MAX_PERIOD_SPAN = 10

VALID_METHODS = ("simple", "recency_weighted")


@dataclass
class CycleStatistics:
    """Derived cycle statistics. Never persisted except for the averages."""

    avg_cycle_length: int = DEFAULT_CYCLE_LENGTH
    avg_period_duration: int = DEFAULT_PERIOD_DURATION
    cycles_used: int = 0
    lengths: list[int] = field(default_factory=list)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (28.5 -> 29)."""
    return math.floor(value + 0.5)


def cycle_lengths(
    events: Iterable[CycleEvent],
    min_days: int = MIN_CYCLE_DAYS,
    max_days: int = MAX_CYCLE_DAYS,
) -> list[int]:
    """Accepted start-to-next-start gaps, oldest first.

    Args:
        events: Events in ascending date order
        min_days: Exclusive lower bound for a sample
        max_days: Exclusive upper bound for a sample

    Returns:
        List of day deltas within (min_days, max_days)
    """
    starts = [e.date for e in events if e.is_start]
    lengths = []
    for current, following in zip(starts, starts[1:]):
        days = (following - current).days
        if min_days < days < max_days:
            lengths.append(days)
    return lengths


def average_length(lengths: list[int], method: str = "simple", decay: float = 0.8) -> float:
    """Average a list of cycle lengths.

    Args:
        lengths: Samples, oldest first
        method: "simple" or "recency_weighted"
        decay: Per-step weight multiplier for older samples (weighted method)

    Returns:
        Mean length in days (unrounded)
    """
    if not lengths:
        raise ValueError("average_length requires at least one sample")
    if method not in VALID_METHODS:
        raise ValueError(f"method must be one of {VALID_METHODS}, got '{method}'")

    if method == "simple":
        return sum(lengths) / len(lengths)

    weights = [decay**age for age in range(len(lengths) - 1, -1, -1)]
    return sum(w * x for w, x in zip(weights, lengths)) / sum(weights)


def period_durations(periods: Iterable[Period]) -> list[int]:
    """Spans of closed periods that look like real bleeding windows."""
    spans = []
    for period in periods:
        span = period.duration_days
        if span is not None and MIN_PERIOD_SPAN <= span <= MAX_PERIOD_SPAN:
            spans.append(span)
    return spans


def recompute(
    events: list[CycleEvent],
    previous: Optional[CycleStatistics] = None,
    periods: Optional[list[Period]] = None,
    min_days: int = MIN_CYCLE_DAYS,
    max_days: int = MAX_CYCLE_DAYS,
    min_events: int = MIN_EVENTS,
    method: str = "simple",
    decay: float = 0.8,
) -> CycleStatistics:
    """Re-estimate cycle statistics after an event log change.

    With fewer than ``min_events`` events, or no accepted samples, the
    previous averages are retained.

    Args:
        events: Event log in ascending date order
        previous: Statistics to fall back on (defaults if None)
        periods: Start/end pairs for the duration estimate
        min_days: Exclusive lower bound for a cycle length sample
        max_days: Exclusive upper bound for a cycle length sample
        min_events: Events required before re-estimating
        method: Averaging method for cycle lengths
        decay: Recency decay for the weighted method

    Returns:
        New CycleStatistics instance
    """
    base = previous or CycleStatistics()
    if len(events) < min_events:
        return replace(base, lengths=list(base.lengths))

    lengths = cycle_lengths(events, min_days, max_days)
    stats = replace(base, lengths=lengths, cycles_used=len(lengths))

    if lengths:
        stats.avg_cycle_length = round_half_up(average_length(lengths, method, decay))

    durations = period_durations(periods or [])
    if durations:
        stats.avg_period_duration = round_half_up(sum(durations) / len(durations))

    return stats
