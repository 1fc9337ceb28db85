"""Serialization utilities for AppState round-trip.

The persisted record keeps the camelCase layout of the first storage
format:

    profile{name, dob, age, height, weight, bodyFat, activityLevel, goals{...}}
    logs{nutrition, workouts, weight, water, steps, symptoms}
    cycle{events[{date, type}], avgLength, avgDuration}
    library[...]
    settings{theme, notifications}

Loading is tolerant: missing sections are filled with defaults and malformed
individual records are dropped with a warning, so one bad entry never costs
the rest of the history. Legacy short keys (``cals``, ``p``, ``c``, ``f``,
``burn``) are accepted and rewritten on the next save.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Callable, Optional, TypeVar

from wellness.cycle.events import CycleEvent, EventKind
from wellness.metabolic.estimator import ActivityLevel
from wellness.cycle.stats import DEFAULT_CYCLE_LENGTH, DEFAULT_PERIOD_DURATION
from wellness.store.state import STATE_VERSION, AppState
from wellness.tracking.models import (
    DailyLogs,
    FoodPreset,
    Goals,
    NutritionEntry,
    Preferences,
    Profile,
    WorkoutEntry,
)

logger = logging.getLogger("wellness.store.serialization")

T = TypeVar("T")


# ----------------------------------------------------------------------------
# Serialize
# ----------------------------------------------------------------------------


def _entry_to_dict(entry: NutritionEntry | FoodPreset) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if isinstance(entry, NutritionEntry):
        data["id"] = entry.id
    data.update(
        {
            "name": entry.name,
            "calories": entry.calories,
            "protein": entry.protein,
            "carbs": entry.carbs,
            "fat": entry.fat,
            "fiber": entry.fiber,
        }
    )
    return data


def _workout_to_dict(entry: WorkoutEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "type": entry.type,
        "durationMinutes": entry.duration_minutes,
        "intensity": entry.intensity,
        "caloriesBurned": entry.calories_burned,
    }


def _by_date(mapping: dict[date, T], convert: Callable[[T], Any]) -> dict[str, Any]:
    return {day.isoformat(): convert(value) for day, value in sorted(mapping.items())}


def serialize_state(state: AppState) -> dict[str, Any]:
    """Convert AppState to a JSON-serializable dict.

    Args:
        state: The state to serialize

    Returns:
        Dictionary compatible with deserialize_state()
    """
    profile = state.profile
    goals = profile.goals
    logs = state.logs

    return {
        "version": state.version,
        "profile": {
            "name": profile.name,
            "dob": profile.dob.isoformat() if profile.dob else None,
            "age": profile.age,
            "height": profile.height_cm,
            "weight": profile.weight_kg,
            "bodyFat": profile.body_fat_pct,
            "activityLevel": profile.activity_level.value,
            "goals": {
                "dailyCalories": goals.daily_calories,
                "protein": goals.protein,
                "carbs": goals.carbs,
                "fat": goals.fat,
                "fiber": goals.fiber,
                "water": goals.water,
            },
        },
        "logs": {
            "nutrition": _by_date(logs.nutrition, lambda items: [_entry_to_dict(i) for i in items]),
            "workouts": _by_date(logs.workouts, lambda items: [_workout_to_dict(i) for i in items]),
            "weight": _by_date(logs.weight, float),
            "water": _by_date(logs.water, int),
            "steps": _by_date(logs.steps, int),
            "symptoms": _by_date(logs.symptoms, list),
        },
        "cycle": {
            "events": [
                {"date": e.date.isoformat(), "type": e.kind.value}
                for e in state.cycle_events
            ],
            "avgLength": state.avg_cycle_length,
            "avgDuration": state.avg_period_duration,
        },
        "library": [_entry_to_dict(p) for p in state.library],
        "settings": {
            "theme": state.preferences.theme,
            "notifications": state.preferences.notifications,
        },
    }


# ----------------------------------------------------------------------------
# Deserialize
# ----------------------------------------------------------------------------


def _parse_date(value: Any) -> Optional[date]:
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        return None


def _finite(value: Any) -> float:
    """Parse a stored number, rejecting NaN and infinities."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number {value!r}")
    return number


def _num(data: dict[str, Any], *keys: str, default: float = 0.0) -> float:
    """First present key parsed as a finite float (accepts legacy aliases)."""
    for key in keys:
        if key in data and data[key] is not None and data[key] != "":
            return _finite(data[key])
    return default


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if isinstance(value, dict):
        return value
    if value is not None:
        logger.warning("Ignoring malformed '%s' section (expected a mapping)", key)
    return {}


def _load_by_date(
    raw: Any,
    name: str,
    convert: Callable[[Any], T],
) -> dict[date, T]:
    result: dict[date, T] = {}
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("Ignoring malformed logs.%s (expected a mapping)", name)
        return result
    for key, value in raw.items():
        day = _parse_date(key)
        if day is None:
            logger.warning("Dropping logs.%s entry with bad date key %r", name, key)
            continue
        try:
            result[day] = convert(value)
        except (KeyError, TypeError, ValueError, OverflowError, AttributeError) as exc:
            logger.warning("Dropping logs.%s[%s]: %s", name, key, exc)
    return result


def _nutrition_entry(data: dict[str, Any]) -> NutritionEntry:
    return NutritionEntry(
        id=str(data.get("id", "")),
        name=str(data["name"]),
        calories=int(_num(data, "calories", "cals")),
        protein=_num(data, "protein", "p"),
        carbs=_num(data, "carbs", "c"),
        fat=_num(data, "fat", "f"),
        fiber=_num(data, "fiber"),
    )


def _workout_entry(data: dict[str, Any]) -> WorkoutEntry:
    return WorkoutEntry(
        id=str(data.get("id", "")),
        type=str(data.get("type", "workout")),
        duration_minutes=_num(data, "durationMinutes", "duration"),
        intensity=str(data.get("intensity", "moderate")),
        calories_burned=_num(data, "caloriesBurned", "burn"),
    )


def _list_of(convert: Callable[[dict[str, Any]], T]) -> Callable[[Any], list[T]]:
    def _convert(items: Any) -> list[T]:
        if not isinstance(items, list):
            raise ValueError("expected a list")
        return [convert(item) for item in items]

    return _convert


def _symptoms(items: Any) -> list[str]:
    if not isinstance(items, list):
        raise ValueError("expected a list")
    return [str(s) for s in items]


def _deserialize_profile(data: dict[str, Any]) -> Profile:
    default = Profile()
    goals_data = _section(data, "goals")
    default_goals = Goals()

    try:
        goals = Goals(
            daily_calories=int(_num(goals_data, "dailyCalories", default=default_goals.daily_calories)),
            protein=_num(goals_data, "protein", default=default_goals.protein),
            carbs=_num(goals_data, "carbs", default=default_goals.carbs),
            fat=_num(goals_data, "fat", default=default_goals.fat),
            # fiber was added after the first release; 0 means "never set"
            fiber=_num(goals_data, "fiber", default=default_goals.fiber) or default_goals.fiber,
            water=int(_num(goals_data, "water", default=default_goals.water)),
        )
    except (TypeError, ValueError, OverflowError) as exc:
        logger.warning("Resetting malformed goals: %s", exc)
        goals = default_goals

    dob = default.dob
    if "dob" in data:
        dob = _parse_date(data["dob"]) if data["dob"] else None

    try:
        body_fat = data.get("bodyFat", default.body_fat_pct)
        return Profile(
            name=str(data.get("name", default.name)),
            dob=dob,
            age=int(_finite(data["age"])) if data.get("age") is not None else None,
            height_cm=_num(data, "height", default=default.height_cm),
            weight_kg=_num(data, "weight", default=default.weight_kg),
            body_fat_pct=_finite(body_fat) if body_fat not in (None, "") else None,
            activity_level=ActivityLevel.parse(data.get("activityLevel", default.activity_level.value)),
            goals=goals,
        )
    except (TypeError, ValueError, OverflowError) as exc:
        logger.warning("Resetting malformed profile: %s", exc)
        default.goals = goals
        return default


def _deserialize_events(raw: Any) -> list[CycleEvent]:
    events: list[CycleEvent] = []
    seen: set[tuple[date, EventKind]] = set()
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict):
            logger.warning("Dropping malformed cycle event %r", item)
            continue
        day = _parse_date(item.get("date"))
        try:
            kind = EventKind(str(item.get("type", "")).lower())
        except ValueError:
            kind = None
        if day is None or kind is None:
            logger.warning("Dropping malformed cycle event %r", item)
            continue
        if (day, kind) in seen:
            continue
        seen.add((day, kind))
        events.append(CycleEvent(day, kind))
    events.sort(key=lambda e: e.date)
    return events


def _deserialize_library(raw: Any) -> list[FoodPreset]:
    library: list[FoodPreset] = []
    names: set[str] = set()
    for item in raw if isinstance(raw, list) else []:
        try:
            entry = _nutrition_entry(item)
        except (KeyError, TypeError, ValueError, OverflowError, AttributeError) as exc:
            logger.warning("Dropping malformed library item %r: %s", item, exc)
            continue
        if entry.name.lower() in names:
            continue
        names.add(entry.name.lower())
        library.append(FoodPreset.from_entry(entry))
    library.sort(key=lambda p: p.name.lower())
    return library


def deserialize_state(
    data: Any,
    avg_cycle_length: int = DEFAULT_CYCLE_LENGTH,
    avg_period_duration: int = DEFAULT_PERIOD_DURATION,
) -> AppState:
    """Convert a parsed JSON record back into AppState.

    Missing optional sections are filled with defaults.

    Args:
        data: Parsed JSON (must be a mapping)
        avg_cycle_length: Used when the record has no usable cycle average
        avg_period_duration: Used when the record has no usable period average

    Returns:
        AppState reconstructed from the data

    Raises:
        ValueError: If ``data`` is not a mapping at all
    """
    if not isinstance(data, dict):
        raise ValueError(f"state record must be a mapping, got {type(data).__name__}")

    state = AppState()
    state.profile = _deserialize_profile(_section(data, "profile"))

    logs_data = _section(data, "logs")
    state.logs = DailyLogs(
        nutrition=_load_by_date(logs_data.get("nutrition"), "nutrition", _list_of(_nutrition_entry)),
        workouts=_load_by_date(logs_data.get("workouts"), "workouts", _list_of(_workout_entry)),
        weight=_load_by_date(logs_data.get("weight"), "weight", _finite),
        water=_load_by_date(logs_data.get("water"), "water", lambda v: int(_finite(v))),
        steps=_load_by_date(logs_data.get("steps"), "steps", lambda v: int(_finite(v))),
        symptoms=_load_by_date(logs_data.get("symptoms"), "symptoms", _symptoms),
    )

    cycle_data = _section(data, "cycle")
    state.cycle_events = _deserialize_events(cycle_data.get("events"))
    try:
        state.avg_cycle_length = int(_num(cycle_data, "avgLength", default=avg_cycle_length))
        state.avg_period_duration = int(
            _num(cycle_data, "avgDuration", default=avg_period_duration)
        )
    except (TypeError, ValueError, OverflowError):
        logger.warning("Resetting malformed cycle averages")
        state.avg_cycle_length = avg_cycle_length
        state.avg_period_duration = avg_period_duration

    state.library = _deserialize_library(data.get("library"))

    settings_data = _section(data, "settings")
    try:
        state.preferences = Preferences(
            theme=str(settings_data.get("theme", "light")),
            notifications=bool(settings_data.get("notifications", True)),
        )
    except ValueError as exc:
        logger.warning("Resetting malformed settings: %s", exc)

    state.version = STATE_VERSION
    return state
