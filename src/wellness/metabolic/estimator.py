"""Basal and total daily energy expenditure estimates.

Calculates BMR and TDEE for a given day from body composition, activity
level and the menstrual phase active on that day.

Katch-McArdle is the primary equation since it works from lean body mass
rather than total weight. When no body-fat percentage is known, the
Mifflin-St Jeor equation (female constant) is used instead, reduced by a
flat 15%.

    lbm  = weight * (1 - body_fat / 100)
    bmr  = 370 + 21.6 * lbm
    tdee = floor(bmr * activity_multiplier) + luteal_surcharge
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Optional

from wellness.cycle.phase import Phase

if TYPE_CHECKING:
    from wellness.tracking.models import Profile


class ActivityLevel(Enum):
    """Activity level multipliers for TDEE calculation."""
    SEDENTARY = "sedentary"          # Little or no exercise
    LIGHT = "light"                  # Light exercise 1-3 days/week
    MODERATE = "moderate"            # Moderate exercise 3-5 days/week
    ACTIVE = "active"                # Hard exercise 6-7 days/week
    ATHLETE = "athlete"              # Twice-daily training, physical job

    @classmethod
    def parse(cls, value: object) -> "ActivityLevel":
        """Parse a stored value, falling back to MODERATE."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.MODERATE


class Method(Enum):
    """BMR equation used for an estimate."""
    KATCH_MCARDLE = "katch_mcardle"
    MIFFLIN_ST_JEOR = "mifflin_st_jeor"


ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.ATHLETE: 1.9,
}

# Thermic effect of progesterone during the luteal phase (kcal/day)
LUTEAL_SURCHARGE = 150

# Flat reduction applied to the Mifflin-St Jeor result
MIFFLIN_ADJUSTMENT = 0.85

# Deficit target sits 15% below phase-adjusted maintenance
DEFICIT_FACTOR = 0.85

PHASE_MODIFIERS = {
    Phase.MENSTRUAL: 1.0,
    Phase.FOLLICULAR: 0.97,
    Phase.OVULATION: 1.0,
    Phase.LUTEAL: 1.03,
}


@dataclass
class MetabolicEstimate:
    """BMR/TDEE for one day."""

    bmr: int                    # Basal Metabolic Rate
    tdee: int                   # Total Daily Energy Expenditure
    method: Method
    phase: Phase
    multiplier: float
    phase_surcharge: int
    weight_kg: float
    lbm_kg: Optional[float] = None  # only for Katch-McArdle


def lean_body_mass(weight_kg: float, body_fat_pct: float) -> float:
    """Weight minus estimated fat mass."""
    return weight_kg * (1 - body_fat_pct / 100)


def katch_mcardle_bmr(lbm_kg: float) -> float:
    """Calculate BMR from lean body mass (Katch-McArdle)."""
    return 370 + 21.6 * lbm_kg


def mifflin_st_jeor_bmr(
    weight_kg: float,
    height_cm: float,
    age: int,
    adjustment: float = MIFFLIN_ADJUSTMENT,
) -> float:
    """Calculate BMR with the female Mifflin-St Jeor equation.

    Args:
        weight_kg: Weight in kilograms
        height_cm: Height in centimeters
        age: Age in years
        adjustment: Multiplier applied to the raw result

    Returns:
        Adjusted BMR in calories per day
    """
    bmr = (10 * weight_kg) + (6.25 * height_cm) - (5 * age) - 161
    return bmr * adjustment


def activity_multiplier(level: ActivityLevel | str | None) -> float:
    """Multiplier for an activity level; moderate when unrecognized."""
    return ACTIVITY_MULTIPLIERS[ActivityLevel.parse(level)]


def calculate_tdee(bmr: int, multiplier: float, surcharge: int = 0) -> int:
    """Apply the activity multiplier (floored) and the phase surcharge."""
    return math.floor(bmr * multiplier) + surcharge


def estimate(
    profile: Profile,
    weight_kg: float,
    phase: Phase,
    on: Optional[date] = None,
    luteal_surcharge: int = LUTEAL_SURCHARGE,
    mifflin_adjustment: float = MIFFLIN_ADJUSTMENT,
) -> MetabolicEstimate:
    """Estimate BMR and TDEE for one day.

    Args:
        profile: User profile (body fat, height, age, activity level)
        weight_kg: Weight for the day (logged or profile baseline)
        phase: Menstrual phase active on the day
        on: Day the estimate is for (for age with Mifflin-St Jeor)
        luteal_surcharge: kcal/day added in the luteal phase
        mifflin_adjustment: Reduction applied in Mifflin-St Jeor mode

    Returns:
        MetabolicEstimate with integer bmr and tdee
    """
    multiplier = activity_multiplier(profile.activity_level)
    surcharge = luteal_surcharge if phase is Phase.LUTEAL else 0

    lbm = None
    if profile.body_fat_pct is not None:
        lbm = lean_body_mass(weight_kg, profile.body_fat_pct)
        raw_bmr = katch_mcardle_bmr(lbm)
        method = Method.KATCH_MCARDLE
    else:
        raw_bmr = mifflin_st_jeor_bmr(
            weight_kg, profile.height_cm, profile.age_on(on or date.today()), mifflin_adjustment
        )
        method = Method.MIFFLIN_ST_JEOR

    bmr = math.floor(raw_bmr + 0.5)

    return MetabolicEstimate(
        bmr=bmr,
        tdee=calculate_tdee(bmr, multiplier, surcharge),
        method=method,
        phase=phase,
        multiplier=multiplier,
        phase_surcharge=surcharge,
        weight_kg=weight_kg,
        lbm_kg=lbm,
    )


def deficit_target(
    result: MetabolicEstimate,
    phase_modifiers: Optional[dict[Phase, float]] = None,
    phase_adjustment_factor: float = 1.0,
    deficit_factor: float = DEFICIT_FACTOR,
) -> int:
    """Calorie target 15% below phase-adjusted maintenance.

    Args:
        result: Estimate for the day
        phase_modifiers: Per-phase metabolic modifier (defaults above)
        phase_adjustment_factor: User-level scaling on top of the modifier
        deficit_factor: Fraction of adjusted maintenance to target

    Returns:
        Target calories (rounded)
    """
    modifiers = phase_modifiers or PHASE_MODIFIERS
    modifier = modifiers.get(result.phase, 1.0)
    return math.floor(result.tdee * modifier * phase_adjustment_factor * deficit_factor + 0.5)
