"""Health metric formulas over canonical (kg / cm) values."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from services.calculator_state import ActivityLevel, CanonicalValues, Gender, RawInputState
from utils.i18n import Translator
from utils.units import round_half_up


ACTIVITY_FACTORS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.EXTRA: 1.9,
}


class BmiCategory(str, Enum):
    # Values double as the label keys handed to the translator.
    UNDERWEIGHT = "underweight"
    NORMAL = "normalWeight"
    OVERWEIGHT = "overweight"
    OBESE = "obesity"


@dataclass(frozen=True)
class BmiResult:
    bmi: float
    category: BmiCategory

    def to_payload(self, translate: Translator) -> dict:
        return {
            "bmi": self.bmi,
            "category": self.category.value,
            "category_label": translate(self.category.value),
        }


@dataclass(frozen=True)
class TdeeResult:
    tdee: int
    bmr: float
    activity_factor: float

    def to_payload(self, translate: Translator) -> dict:
        return {
            "tdee": self.tdee,
            "bmr": self.bmr,
            "activity_factor": self.activity_factor,
            "unit_label": translate("kcalPerDay"),
        }


def classify_bmi(bmi: float) -> BmiCategory:
    if bmi < 18.5:
        return BmiCategory.UNDERWEIGHT
    if bmi < 25:
        return BmiCategory.NORMAL
    if bmi < 30:
        return BmiCategory.OVERWEIGHT
    return BmiCategory.OBESE


def calculate_bmi(weight_kg: float | None, height_cm: float | None) -> BmiResult | None:
    if weight_kg is None or height_cm is None or height_cm == 0:
        return None
    height_m = height_cm / 100
    height_m_squared = height_m * height_m
    # Heights small enough to underflow count as zero height.
    if height_m_squared == 0:
        return None
    raw_bmi = weight_kg / height_m_squared
    if not math.isfinite(raw_bmi):
        return None
    bmi = round_half_up(raw_bmi, 1)
    return BmiResult(bmi=bmi, category=classify_bmi(bmi))


def calculate_bmr(weight_kg: float, height_cm: float, age: int, gender: Gender) -> float:
    """Mifflin-St Jeor basal metabolic rate in kcal/day."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == Gender.MALE:
        return base + 5
    return base - 161


def calculate_tdee(
    weight_kg: float | None,
    height_cm: float | None,
    age: int | None,
    gender: Gender,
    activity_level: ActivityLevel,
) -> TdeeResult | None:
    if age is None or weight_kg is None or height_cm is None:
        return None
    bmr = calculate_bmr(weight_kg, height_cm, age, gender)
    factor = ACTIVITY_FACTORS[activity_level]
    if not math.isfinite(bmr * factor):
        return None
    return TdeeResult(tdee=int(round_half_up(bmr * factor)), bmr=bmr, activity_factor=factor)


def bmi_formula(canonical: CanonicalValues, state: RawInputState) -> BmiResult | None:
    return calculate_bmi(canonical.weight_kg, canonical.height_cm)


def tdee_formula(canonical: CanonicalValues, state: RawInputState) -> TdeeResult | None:
    return calculate_tdee(
        canonical.weight_kg,
        canonical.height_cm,
        state.age,
        state.gender,
        state.activity_level,
    )
