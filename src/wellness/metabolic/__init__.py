"""Metabolic estimation (BMR, TDEE and phase-aware calorie targets)."""

from __future__ import annotations

from wellness.metabolic.estimator import (
    ACTIVITY_MULTIPLIERS,
    ActivityLevel,
    MetabolicEstimate,
    Method,
    deficit_target,
    estimate,
)

__all__ = [
    "ACTIVITY_MULTIPLIERS",
    "ActivityLevel",
    "MetabolicEstimate",
    "Method",
    "deficit_target",
    "estimate",
]
