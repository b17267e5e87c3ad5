from __future__ import annotations

import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.calculator_state import ActivityLevel, Gender  # noqa: E402
from services.metric_engine import (  # noqa: E402
    ACTIVITY_FACTORS,
    BmiCategory,
    calculate_bmi,
    calculate_bmr,
    calculate_tdee,
    classify_bmi,
)


def test_bmi_example_is_normal_weight():
    result = calculate_bmi(70, 175)
    assert result is not None
    assert result.bmi == 22.9
    assert result.category is BmiCategory.NORMAL
    assert result.category.value == "normalWeight"


@pytest.mark.parametrize(
    "weight_kg,expected",
    [
        (18.4, BmiCategory.UNDERWEIGHT),
        (18.5, BmiCategory.NORMAL),
        (24.9, BmiCategory.NORMAL),
        (25.0, BmiCategory.OVERWEIGHT),
        (29.9, BmiCategory.OVERWEIGHT),
        (30.0, BmiCategory.OBESE),
    ],
)
def test_bmi_category_boundaries(weight_kg, expected):
    # At 100 cm the BMI equals the weight in kilograms.
    result = calculate_bmi(weight_kg, 100)
    assert result.bmi == weight_kg
    assert result.category is expected


def test_category_uses_rounded_bmi():
    assert classify_bmi(24.95) is BmiCategory.NORMAL
    assert calculate_bmi(24.96, 100).category is BmiCategory.OVERWEIGHT


def test_bmi_absent_without_weight_or_height():
    assert calculate_bmi(None, 175) is None
    assert calculate_bmi(70, None) is None


def test_bmi_zero_height_is_absent_not_an_error():
    assert calculate_bmi(70, 0) is None


def test_tdee_example_male_moderate():
    result = calculate_tdee(80, 180, 30, Gender.MALE, ActivityLevel.MODERATE)
    assert result is not None
    assert result.bmr == 1780
    assert result.tdee == 2759
    assert result.activity_factor == 1.55


def test_tdee_female_offset():
    assert calculate_bmr(80, 180, 30, Gender.FEMALE) == 1614
    result = calculate_tdee(80, 180, 30, Gender.FEMALE, ActivityLevel.SEDENTARY)
    assert result.tdee == 1937


def test_tdee_absent_when_any_input_missing():
    assert calculate_tdee(None, 180, 30, Gender.MALE, ActivityLevel.LIGHT) is None
    assert calculate_tdee(80, None, 30, Gender.MALE, ActivityLevel.LIGHT) is None
    assert calculate_tdee(80, 180, None, Gender.MALE, ActivityLevel.LIGHT) is None


def test_activity_factors_cover_every_level():
    assert set(ACTIVITY_FACTORS) == set(ActivityLevel)
    assert ACTIVITY_FACTORS[ActivityLevel.SEDENTARY] == 1.2
    assert ACTIVITY_FACTORS[ActivityLevel.LIGHT] == 1.375
    assert ACTIVITY_FACTORS[ActivityLevel.ACTIVE] == 1.725
    assert ACTIVITY_FACTORS[ActivityLevel.EXTRA] == 1.9


def test_result_payload_uses_translated_label():
    payload = calculate_bmi(70, 175).to_payload(lambda key: f"<{key}>")
    assert payload == {"bmi": 22.9, "category": "normalWeight", "category_label": "<normalWeight>"}


def test_bmi_absent_when_height_squared_underflows():
    assert calculate_bmi(70, 1e-201) is None
    assert calculate_bmi(70, 1e-160) is None


def test_tdee_absent_when_result_overflows():
    assert calculate_tdee(1e308, 180, 30, Gender.MALE, ActivityLevel.EXTRA) is None
