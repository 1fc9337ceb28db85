"""Event log of period start/end markers.

The log is a sparse, sorted sequence of ``CycleEvent`` records. Everything the
cycle engine infers (average cycle length, phase, next period) is derived from
it, so the two mutation paths below keep it sorted and free of duplicate
``(date, kind)`` pairs.

Auto-close: when a new start arrives while the latest event is a start that is
still open, an end is synthesized ``default_period_days`` after the open start,
provided that end falls strictly before the new start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterator, Optional

logger = logging.getLogger("wellness.cycle.events")

DEFAULT_PERIOD_DAYS = 5


class EventKind(Enum):
    """Type of a cycle marker."""
    START = "start"
    END = "end"


@dataclass(frozen=True)
class CycleEvent:
    """A single period start or end marker."""

    date: date
    kind: EventKind

    @property
    def is_start(self) -> bool:
        return self.kind is EventKind.START

    @property
    def is_end(self) -> bool:
        return self.kind is EventKind.END


@dataclass(frozen=True)
class Period:
    """A start marker paired with its closing end (None while open)."""

    start: date
    end: Optional[date] = None

    @property
    def duration_days(self) -> Optional[int]:
        if self.end is None:
            return None
        return (self.end - self.start).days


class EventLog:
    """Sorted, append-only log of cycle events.

    Args:
        events: Initial events in any order
        default_period_days: Length used when synthesizing a closing end
    """

    def __init__(
        self,
        events: Optional[list[CycleEvent]] = None,
        default_period_days: int = DEFAULT_PERIOD_DAYS,
    ):
        self.default_period_days = default_period_days
        self._events: list[CycleEvent] = list(events or [])
        self._sort()

    def __iter__(self) -> Iterator[CycleEvent]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __getitem__(self, index: int) -> CycleEvent:
        return self._events[index]

    @property
    def events(self) -> list[CycleEvent]:
        """Copy of the events in ascending date order."""
        return list(self._events)

    def _sort(self) -> None:
        # Stable sort keeps insertion order for same-day start/end pairs
        self._events.sort(key=lambda e: e.date)

    def has(self, on: date, kind: EventKind) -> bool:
        return any(e.date == on and e.kind is kind for e in self._events)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def log_start(self, on: date) -> bool:
        """Record a period start.

        Returns:
            True if the log changed, False for a duplicate start
        """
        if self.has(on, EventKind.START):
            return False

        self._close_open_period(on)
        self._events.append(CycleEvent(on, EventKind.START))
        self._sort()
        logger.debug("Logged period start on %s", on)
        return True

    def log_end(self, on: date) -> bool:
        """Record a period end against the nearest open start.

        The end is only accepted when a start on or before ``on`` exists whose
        successor is missing or is another start (i.e. not already closed).

        Returns:
            True if the log changed, False if ignored
        """
        if self.has(on, EventKind.END):
            return False

        target = None
        for i in range(len(self._events) - 1, -1, -1):
            event = self._events[i]
            if event.is_start and event.date <= on:
                successor = self._events[i + 1] if i + 1 < len(self._events) else None
                if successor is None or successor.is_start:
                    target = event
                    break

        if target is None:
            logger.warning("Ignoring period end on %s: no open period start before it", on)
            return False

        self._events.append(CycleEvent(on, EventKind.END))
        self._sort()
        logger.debug("Logged period end on %s (start %s)", on, target.date)
        return True

    def _close_open_period(self, new_start: date) -> None:
        if not self._events:
            return

        last = self._events[-1]
        if last.is_start and last.date < new_start:
            synthetic_end = last.date + timedelta(days=self.default_period_days)
            if synthetic_end < new_start:
                self._events.append(CycleEvent(synthetic_end, EventKind.END))
                logger.info(
                    "Auto-closed period started %s with synthetic end %s",
                    last.date,
                    synthetic_end,
                )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def starts(self) -> list[date]:
        return [e.date for e in self._events if e.is_start]

    def last_start(self, on_or_before: Optional[date] = None) -> Optional[date]:
        """Most recent start date, optionally bounded by a date."""
        for event in reversed(self._events):
            if event.is_start and (on_or_before is None or event.date <= on_or_before):
                return event.date
        return None

    def latest_on_or_before(self, on: date) -> Optional[CycleEvent]:
        latest = None
        for event in self._events:
            if event.date > on:
                break
            latest = event
        return latest

    def open_start(self) -> Optional[date]:
        """Start date of the trailing period if it has not been closed."""
        if self._events and self._events[-1].is_start:
            return self._events[-1].date
        return None

    def periods(self) -> list[Period]:
        """Pair each start with the end that immediately follows it."""
        result = []
        for i, event in enumerate(self._events):
            if not event.is_start:
                continue
            successor = self._events[i + 1] if i + 1 < len(self._events) else None
            end = successor.date if successor is not None and successor.is_end else None
            result.append(Period(start=event.date, end=end))
        return result
