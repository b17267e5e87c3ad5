from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum

from utils.units import (
    IN_PER_CM,
    UnitSystem,
    cm_to_feet_inches,
    display_height_cm,
    display_weight,
    height_to_cm,
    weight_to_kg,
    weight_to_lb,
)


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    EXTRA = "extra"


MAX_AGE = 120
MAX_INCHES_EXCLUSIVE = 12.0


@dataclass
class RawInputState:
    """What the user typed, in the unit system they currently see.

    weight is kg under metric and lb under imperial. Only one height
    representation is live: height_cm under metric, height_ft/height_in
    under imperial.
    """

    weight: float | None = None
    height_cm: float | None = None
    height_ft: float | None = None
    height_in: float | None = None
    unit_system: UnitSystem = UnitSystem.METRIC
    age: int | None = None
    gender: Gender = Gender.MALE
    activity_level: ActivityLevel = ActivityLevel.SEDENTARY

    def copy(self) -> "RawInputState":
        return replace(self)


@dataclass(frozen=True)
class CanonicalValues:
    weight_kg: float | None = None
    height_cm: float | None = None

    @property
    def complete(self) -> bool:
        return self.weight_kg is not None and self.height_cm is not None


def canonical_weight_kg(state: RawInputState) -> float | None:
    if state.weight is None:
        return None
    return weight_to_kg(state.weight, state.unit_system)


def canonical_height_cm(state: RawInputState) -> float | None:
    if state.unit_system == UnitSystem.METRIC:
        height = state.height_cm
    else:
        if state.height_ft is None and state.height_in is None:
            return None
        height = height_to_cm(state.height_ft or 0, state.height_in or 0)
    if not height or not math.isfinite(height):
        return None
    return height


def canonicalize(state: RawInputState) -> CanonicalValues:
    """Derive kilograms and centimetres at full precision from raw input."""
    return CanonicalValues(
        weight_kg=canonical_weight_kg(state),
        height_cm=canonical_height_cm(state),
    )


def _display_or_none(weight: float) -> float | None:
    # A conversion that overflows leaves the field empty rather than holding inf.
    if not math.isfinite(weight):
        return None
    return display_weight(weight)


def convert_state(state: RawInputState, target: UnitSystem) -> RawInputState:
    """Re-seed raw input in ``target`` units after a unit toggle.

    Converted values are rounded for display (weight to 0.1, centimetres to
    whole numbers, inches to 0.1). The height representation of the system
    being left is cleared.
    """
    converted = state.copy()
    if target == state.unit_system:
        return converted
    converted.unit_system = target

    if target == UnitSystem.IMPERIAL:
        if state.weight is not None:
            converted.weight = _display_or_none(weight_to_lb(state.weight, UnitSystem.METRIC))
        if state.height_cm is not None and math.isfinite(state.height_cm * IN_PER_CM):
            feet, inches = cm_to_feet_inches(state.height_cm)
            converted.height_ft = float(feet)
            converted.height_in = inches
        else:
            converted.height_ft = None
            converted.height_in = None
        converted.height_cm = None
        return converted

    if state.weight is not None:
        converted.weight = _display_or_none(weight_to_kg(state.weight, UnitSystem.IMPERIAL))
    feet = state.height_ft or 0
    inches = state.height_in or 0
    total_cm = height_to_cm(feet, inches)
    if (feet > 0 or inches > 0) and math.isfinite(total_cm):
        converted.height_cm = float(display_height_cm(total_cm))
    else:
        converted.height_cm = None
    converted.height_ft = None
    converted.height_in = None
    return converted
