"""Unit conversion helpers for calculator inputs."""

from __future__ import annotations

import math
from enum import Enum


KG_PER_LB = 0.453592
LB_PER_KG = 2.20462
CM_PER_IN = 2.54
IN_PER_CM = 0.393701
IN_PER_FT = 12


class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"

    @classmethod
    def parse(cls, value: object) -> "UnitSystem | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return None


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ties upward (22.85 -> 22.9) instead of Python's banker's rounding."""
    factor = 10 ** digits
    scaled = value * factor
    if not math.isfinite(scaled):
        # Too large for the requested precision to mean anything.
        return value
    return math.floor(scaled + 0.5) / factor


def weight_to_kg(value: float, from_system: UnitSystem) -> float:
    if from_system == UnitSystem.METRIC:
        return value
    return value * KG_PER_LB


def weight_to_lb(value: float, from_system: UnitSystem) -> float:
    if from_system == UnitSystem.IMPERIAL:
        return value
    return value * LB_PER_KG


def height_to_cm(feet: float, inches: float) -> float:
    return (feet * IN_PER_FT + inches) * CM_PER_IN


def cm_to_feet_inches(cm: float) -> tuple[int, float]:
    # Inches are not carried into feet after rounding: 182.8 cm gives (5, 12.0).
    total_inches = cm * IN_PER_CM
    feet = int(math.floor(total_inches / IN_PER_FT))
    inches = round_half_up(total_inches % IN_PER_FT, 1)
    return feet, inches


def display_weight(value: float) -> float:
    return round_half_up(value, 1)


def display_height_cm(value: float) -> int:
    return int(round_half_up(value))
