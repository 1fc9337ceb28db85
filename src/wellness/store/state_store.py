"""The single mutation gateway for profile, cycle and daily log data.

A ``StateStore`` owns one ``AppState``. Every mutating call validates its
input (invalid input is a silent no-op that returns False/None), applies the
change, recomputes cycle statistics where relevant, saves synchronously and
then emits exactly one ``state_changed(reason, snapshot)`` notification to
every subscriber.

Persistence failures never lose in-memory state: the failure is logged,
remembered in ``last_save_error`` and reported through the snapshot's
``warnings``.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any, Callable, Optional

from wellness.config.settings import Settings
from wellness.cycle.events import CycleEvent, EventKind, EventLog
from wellness.cycle.phase import (
    Phase,
    cycle_day_for_date,
    phase_calendar,
    phase_for_date,
    predict_next_period,
)
from wellness.cycle.stats import CycleStatistics, recompute
from wellness.metabolic.estimator import (
    ActivityLevel,
    MetabolicEstimate,
    deficit_target,
    estimate,
)
from wellness.store.serialization import deserialize_state, serialize_state
from wellness.store.state import AppState, factory_defaults
from wellness.store.storage import StateFile
from wellness.tracking.aggregate import DailyTotals, daily_totals
from wellness.tracking.models import FoodPreset, NutritionEntry, Profile, WorkoutEntry

logger = logging.getLogger("wellness.store.state_store")

Subscriber = Callable[[str, "StateSnapshot"], None]


@dataclass
class StateSnapshot:
    """Plain-data view of derived state handed to subscribers."""

    reason: str
    date: date
    theme: str
    profile: Profile
    totals: DailyTotals
    weight_kg: float
    water_ml: int
    steps: int
    phase: Phase
    cycle_day: Optional[int]
    bmr: int
    tdee: int
    next_period: Optional[date]
    library: list[FoodPreset] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "reason": self.reason,
            "theme": self.theme,
            "profile": {
                "name": self.profile.name,
                "height_cm": self.profile.height_cm,
                "weight_kg": self.profile.weight_kg,
                "body_fat_pct": self.profile.body_fat_pct,
                "activity_level": self.profile.activity_level.value,
                "daily_calorie_goal": self.profile.goals.daily_calories,
            },
            "today": {
                "date": self.date.isoformat(),
                "weight_kg": self.weight_kg,
                "water_ml": self.water_ml,
                "steps": self.steps,
                "totals": self.totals.to_dict(),
            },
            "calculated": {
                "bmr": self.bmr,
                "tdee": self.tdee,
                "phase": self.phase.value,
                "cycle_day": self.cycle_day,
                "next_period": self.next_period.isoformat() if self.next_period else None,
            },
            "library": [p.name for p in self.library],
            "warnings": list(self.warnings),
        }


def _finite_number(value: Any) -> Optional[float]:
    """Parse a user-supplied number; None if missing, non-numeric or not finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class StateStore:
    """Owns the application state and is the only way to change it.

    Args:
        state_file: Where the serialized state lives
        settings: Engine configuration (defaults if None)
        today: Clock used for "today" (injectable for tests)
    """

    def __init__(
        self,
        state_file: StateFile,
        settings: Optional[Settings] = None,
        today: Callable[[], date] = date.today,
    ):
        self.state_file = state_file
        self.settings = settings or Settings()
        self._today = today
        self.state: AppState = factory_defaults()
        self.last_save_error: Optional[str] = None
        self._subscribers: list[Subscriber] = []
        self._pending_warnings: list[str] = []
        self._events = EventLog(default_period_days=self.settings.cycle.default_period_days)
        self._stats = CycleStatistics(
            avg_cycle_length=self.settings.cycle.default_cycle_length,
        )

    @classmethod
    def open(
        cls,
        state_file: StateFile,
        settings: Optional[Settings] = None,
        today: Callable[[], date] = date.today,
    ) -> "StateStore":
        """Construct a store and load its persisted state."""
        store = cls(state_file, settings, today)
        store.load()
        return store

    @property
    def today(self) -> date:
        return self._today()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> AppState:
        """Load, validate and migrate persisted state.

        Unreadable or corrupt state falls back to factory defaults.
        """
        try:
            data = self.state_file.read()
        except (OSError, ValueError) as exc:
            logger.error(
                "State file %s is unreadable, restoring factory defaults: %s",
                self.state_file.path,
                exc,
            )
            data = None

        cfg = self.settings.cycle
        if data is None:
            self.state = self._factory_state()
        else:
            try:
                self.state = deserialize_state(
                    data,
                    avg_cycle_length=cfg.default_cycle_length,
                    avg_period_duration=cfg.default_period_days,
                )
            except (ValueError, OverflowError) as exc:
                logger.error("State record is corrupt, restoring factory defaults: %s", exc)
                self.state = self._factory_state()

        self._events = EventLog(
            self.state.cycle_events,
            default_period_days=self.settings.cycle.default_period_days,
        )
        self._stats = CycleStatistics(
            avg_cycle_length=self.state.avg_cycle_length,
            avg_period_duration=self.state.avg_period_duration,
        )
        self._recompute_cycle()
        logger.debug(
            "Loaded state: %d cycle events, avg cycle %d days",
            len(self._events),
            self.state.avg_cycle_length,
        )
        return self.state

    def _factory_state(self) -> AppState:
        state = factory_defaults()
        state.avg_cycle_length = self.settings.cycle.default_cycle_length
        state.avg_period_duration = self.settings.cycle.default_period_days
        return state

    def save(self) -> bool:
        """Write the state synchronously.

        Returns:
            True on success. On failure the in-memory state is kept and the
            error is recorded in ``last_save_error``.
        """
        self.state.cycle_events = self._events.events
        try:
            self.state_file.write(serialize_state(self.state))
        except OSError as exc:
            self.last_save_error = f"Could not save data: {exc}"
            logger.warning("Saving state to %s failed: %s", self.state_file.path, exc)
            return False
        self.last_save_error = None
        return True

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a state-changed callback.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, reason: str) -> None:
        snapshot = self.snapshot(reason)
        for callback in list(self._subscribers):
            callback(reason, snapshot)

    def _commit(self, reason: str) -> None:
        if not self.save():
            self._pending_warnings.append(self.last_save_error or "Could not save data")
        self._notify(reason)

    # ------------------------------------------------------------------
    # Cycle mutations
    # ------------------------------------------------------------------

    def _recompute_cycle(self) -> None:
        cfg = self.settings.cycle
        self._stats = recompute(
            self._events.events,
            previous=self._stats,
            periods=self._events.periods(),
            min_days=cfg.min_cycle_days,
            max_days=cfg.max_cycle_days,
            min_events=cfg.min_events,
            method=cfg.stats_method,
            decay=cfg.recency_decay,
        )
        self.state.avg_cycle_length = self._stats.avg_cycle_length
        self.state.avg_period_duration = self._stats.avg_period_duration
        self.state.cycle_events = self._events.events

    def log_period_start(self, day: date) -> bool:
        """Record a period start (idempotent, auto-closes an open period)."""
        if not self._events.log_start(day):
            return False
        self._recompute_cycle()
        self._commit("PERIOD_START_LOGGED")
        return True

    def log_period_end(self, day: date) -> bool:
        """Record a period end against the nearest open start.

        An end with no open start to close is ignored. Subscribers still
        receive a ``PERIOD_END_IGNORED`` notification carrying a warning.
        """
        if self._events.has(day, EventKind.END):
            return False
        if not self._events.log_end(day):
            self._pending_warnings.append(
                f"No open period before {day.isoformat()} to close; end not recorded"
            )
            self._notify("PERIOD_END_IGNORED")
            return False
        self._recompute_cycle()
        self._commit("PERIOD_END_LOGGED")
        return True

    # ------------------------------------------------------------------
    # Profile mutations
    # ------------------------------------------------------------------

    def set_weight(self, day: date, value: Any) -> bool:
        """Log a weight reading; updates the profile baseline when ``day`` is today."""
        weight = _finite_number(value)
        limits = self.settings.validation
        if weight is None or not (limits.min_weight_kg <= weight <= limits.max_weight_kg):
            logger.debug("Rejected weight %r for %s", value, day)
            return False

        self.state.logs.weight[day] = weight
        if day == self.today:
            self.state.profile.weight_kg = weight
        self._commit("WEIGHT_UPDATED")
        return True

    def set_calorie_goal(self, value: Any) -> bool:
        goal = _finite_number(value)
        if goal is None or goal <= 0:
            return False
        self.state.profile.goals.daily_calories = int(goal)
        self._commit("GOAL_UPDATED")
        return True

    def update_profile(
        self,
        name: Optional[str] = None,
        dob: Optional[date] = None,
        height_cm: Optional[float] = None,
        body_fat_pct: Optional[float] = None,
        activity_level: Optional[str] = None,
        clear_body_fat: bool = False,
    ) -> bool:
        """Update slowly-changing profile attributes.

        ``clear_body_fat`` drops the body-fat percentage, which switches the
        metabolic estimate to Mifflin-St Jeor.
        """
        profile = self.state.profile
        changes: dict[str, Any] = {}
        if name is not None and name.strip():
            changes["name"] = name.strip()
        if dob is not None:
            changes["dob"] = dob
        if height_cm is not None:
            height = _finite_number(height_cm)
            if height is None or height <= 0:
                return False
            changes["height_cm"] = height
        if clear_body_fat:
            changes["body_fat_pct"] = None
        elif body_fat_pct is not None:
            body_fat = _finite_number(body_fat_pct)
            if body_fat is None:
                return False
            changes["body_fat_pct"] = body_fat
        if activity_level is not None:
            try:
                changes["activity_level"] = ActivityLevel(activity_level.lower())
            except ValueError:
                return False

        if not changes:
            return False
        try:
            self.state.profile = replace(profile, **changes)
        except ValueError as exc:
            logger.debug("Rejected profile update %s: %s", changes, exc)
            return False
        self._commit("PROFILE_UPDATED")
        return True

    def toggle_theme(self) -> str:
        prefs = self.state.preferences
        prefs.theme = "dark" if prefs.theme == "light" else "light"
        self._commit("THEME_CHANGED")
        return prefs.theme

    # ------------------------------------------------------------------
    # Daily log mutations
    # ------------------------------------------------------------------

    def log_food(
        self,
        day: date,
        name: str,
        calories: Any,
        protein: Any = 0,
        carbs: Any = 0,
        fat: Any = 0,
        fiber: Any = 0,
    ) -> Optional[NutritionEntry]:
        """Append a food entry and add it to the library if the name is new.

        Returns:
            The created entry, or None if the input was rejected
        """
        if not name or not name.strip():
            return None
        values = [_finite_number(v) for v in (calories, protein, carbs, fat, fiber or 0)]
        if any(v is None or v < 0 for v in values):
            logger.debug("Rejected food entry %r on %s", name, day)
            return None
        cals, p, c, f, fib = values

        entry = NutritionEntry(
            id=uuid.uuid4().hex[:12],
            name=name.strip(),
            calories=int(cals),
            protein=p,
            carbs=c,
            fat=f,
            fiber=fib,
        )
        self.state.logs.nutrition.setdefault(day, []).append(entry)

        library = self.state.library
        if not any(item.name.lower() == entry.name.lower() for item in library):
            library.append(FoodPreset.from_entry(entry))
            library.sort(key=lambda item: item.name.lower())

        self._commit("FOOD_LOGGED")
        return entry

    def remove_food(self, day: date, entry_id: str) -> bool:
        entries = self.state.logs.nutrition.get(day)
        if not entries:
            return False
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) == len(entries):
            return False
        self.state.logs.nutrition[day] = remaining
        self._commit("FOOD_REMOVED")
        return True

    def log_workout(
        self,
        day: date,
        type: str,
        duration_minutes: Any,
        intensity: str = "moderate",
        calories_burned: Any = 0,
    ) -> Optional[WorkoutEntry]:
        """Append a workout entry.

        Returns:
            The created entry, or None if the input was rejected
        """
        duration = _finite_number(duration_minutes)
        burned = _finite_number(calories_burned)
        if not type or duration is None or duration < 0 or burned is None or burned < 0:
            return None

        entry = WorkoutEntry(
            id=uuid.uuid4().hex[:12],
            type=type,
            duration_minutes=duration,
            intensity=intensity,
            calories_burned=burned,
        )
        self.state.logs.workouts.setdefault(day, []).append(entry)
        self._commit("WORKOUT_LOGGED")
        return entry

    def add_water(self, amount: Any, day: Optional[date] = None) -> bool:
        """Add to the cumulative water volume (ml) for today."""
        ml = _finite_number(amount)
        if ml is None or ml <= 0:
            return False
        day = day or self.today
        water = self.state.logs.water
        water[day] = water.get(day, 0) + int(ml)
        self._commit("WATER_ADDED")
        return True

    def set_steps(self, day: date, count: Any) -> bool:
        """Record an externally measured step count (replaces the day's value)."""
        steps = _finite_number(count)
        if steps is None or steps < 0:
            return False
        self.state.logs.steps[day] = int(steps)
        self._commit("STEPS_UPDATED")
        return True

    def log_symptom(self, day: date, symptom: str) -> bool:
        if not symptom or not symptom.strip():
            return False
        symptoms = self.state.logs.symptoms.setdefault(day, [])
        if any(s.lower() == symptom.strip().lower() for s in symptoms):
            return False
        symptoms.append(symptom.strip())
        self._commit("SYMPTOM_LOGGED")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def events(self) -> list[CycleEvent]:
        return self._events.events

    @property
    def event_log(self) -> EventLog:
        return self._events

    @property
    def cycle_statistics(self) -> CycleStatistics:
        return self._stats

    def get_phase_for_date(self, day: date) -> Phase:
        return phase_for_date(
            day,
            self._events,
            self.state.avg_cycle_length,
            self.settings.cycle.menstrual_cap_days,
        )

    def get_cycle_day(self, day: date) -> Optional[int]:
        return cycle_day_for_date(day, self._events, self.state.avg_cycle_length)

    def predict_next_period(self) -> Optional[date]:
        return predict_next_period(self._events, self.state.avg_cycle_length)

    def get_phase_calendar(self, start: date, days: int) -> list[tuple[date, Phase]]:
        return phase_calendar(
            start,
            days,
            self._events,
            self.state.avg_cycle_length,
            self.settings.cycle.menstrual_cap_days,
        )

    def weight_on(self, day: date) -> float:
        """Logged weight for the day, else the latest earlier reading, else the profile."""
        weights = self.state.logs.weight
        if day in weights:
            return weights[day]
        earlier = [d for d in weights if d < day]
        if earlier:
            return weights[max(earlier)]
        return self.state.profile.weight_kg

    def get_daily_stats(self, day: date) -> DailyTotals:
        return daily_totals(day, self.state.logs.nutrition, self.state.logs.workouts)

    def get_metabolic_estimate(self, day: date) -> MetabolicEstimate:
        return estimate(
            self.state.profile,
            self.weight_on(day),
            self.get_phase_for_date(day),
            on=day,
            luteal_surcharge=self.settings.metabolic.luteal_surcharge,
            mifflin_adjustment=self.settings.metabolic.mifflin_adjustment,
        )

    def get_deficit_target(self, day: date) -> int:
        met = self.settings.metabolic
        return deficit_target(
            self.get_metabolic_estimate(day),
            phase_modifiers=met.modifiers_by_phase(),
            phase_adjustment_factor=met.phase_adjustment_factor,
            deficit_factor=met.deficit_factor,
        )

    def history(self, days: int, end: Optional[date] = None) -> list[date]:
        """The ``days`` dates ending at ``end`` (today by default), oldest first."""
        end = end or self.today
        return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

    def snapshot(self, reason: str = "SNAPSHOT") -> StateSnapshot:
        """Derived state for today. Drains pending warnings."""
        today = self.today
        logs = self.state.logs
        metabolic = self.get_metabolic_estimate(today)
        warnings, self._pending_warnings = self._pending_warnings, []

        return StateSnapshot(
            reason=reason,
            date=today,
            theme=self.state.preferences.theme,
            profile=replace(self.state.profile, goals=replace(self.state.profile.goals)),
            totals=self.get_daily_stats(today),
            weight_kg=metabolic.weight_kg,
            water_ml=logs.water.get(today, 0),
            steps=logs.steps.get(today, 0),
            phase=metabolic.phase,
            cycle_day=self.get_cycle_day(today),
            bmr=metabolic.bmr,
            tdee=metabolic.tdee,
            next_period=self.predict_next_period(),
            library=list(self.state.library),
            warnings=warnings,
        )
