from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from config import settings
from services.calculator_state import (
    MAX_AGE,
    MAX_INCHES_EXCLUSIVE,
    ActivityLevel,
    CanonicalValues,
    Gender,
    RawInputState,
    canonicalize,
    convert_state,
)
from services.metric_engine import BmiResult, TdeeResult, bmi_formula, tdee_formula
from services.persistence_service import load_state, save_state
from services.storage_service import SlotStorage
from utils.i18n import Translator, get_translator
from utils.numeric_input import InputRejected, parse_integer_input, parse_numeric_input
from utils.units import UnitSystem

logger = logging.getLogger(__name__)

CalculatorResult = BmiResult | TdeeResult
Formula = Callable[[CanonicalValues, RawInputState], CalculatorResult | None]

MEASUREMENT_FIELDS = ("weight", "height_cm", "height_ft", "height_in", "unit_system")
BODY_PARAMETER_FIELDS = ("age", "gender", "activity_level")


class CalculatorError(Exception):
    """Raised for unknown calculators or fields a calculator does not have."""


@dataclass(frozen=True)
class CalculatorSpec:
    kind: str
    title_key: str
    storage_key: str
    formula: Formula
    parameter_fields: tuple[str, ...] = ()

    @property
    def fields(self) -> tuple[str, ...]:
        return MEASUREMENT_FIELDS + self.parameter_fields

    @property
    def with_parameters(self) -> bool:
        return bool(self.parameter_fields)


class CalculatorSession:
    """Input state, derived values and result for one calculator instance.

    Every accepted input event mutates the raw state, recomputes the result
    and saves the raw state before returning, so callers never observe a
    half-applied event. Rejected input leaves everything untouched.
    """

    def __init__(self, spec: CalculatorSpec, storage: SlotStorage, state: RawInputState | None = None):
        self.spec = spec
        self.storage = storage
        if state is None:
            state = load_state(storage, spec.storage_key, with_parameters=spec.with_parameters)
        self._state = state
        self._result: CalculatorResult | None = None
        self._recompute()

    @property
    def state(self) -> RawInputState:
        return self._state.copy()

    @property
    def canonical(self) -> CanonicalValues:
        return canonicalize(self._state)

    @property
    def result(self) -> CalculatorResult | None:
        return self._result

    def _evaluate(self, state: RawInputState) -> CalculatorResult | None:
        return self.spec.formula(canonicalize(state), state)

    def _recompute(self) -> CalculatorResult | None:
        self._result = self._evaluate(self._state)
        return self._result

    def _commit(self, state: RawInputState) -> None:
        # Evaluate the candidate first; state and result change together or not at all.
        result = self._evaluate(state)
        self._state = state
        self._result = result
        save_state(self.storage, self.spec.storage_key, self._state, with_parameters=self.spec.with_parameters)

    def _require_field(self, name: str) -> None:
        if name not in self.spec.fields:
            raise CalculatorError(f"Calculator `{self.spec.kind}` has no field `{name}`")

    def _set_measurement(self, name: str, value: Any, live_in: UnitSystem | None = None) -> bool:
        self._require_field(name)
        if live_in is not None and self._state.unit_system != live_in:
            logger.debug("Rejected %s while %s units are active", name, self._state.unit_system.value)
            return False
        try:
            number = parse_numeric_input(value)
        except InputRejected as exc:
            logger.debug("Rejected %s input: %s", name, exc)
            return False
        if name == "height_in" and number is not None and number >= MAX_INCHES_EXCLUSIVE:
            return False
        updated = self._state.copy()
        setattr(updated, name, number)
        self._commit(updated)
        return True

    def set_weight(self, value: Any) -> bool:
        return self._set_measurement("weight", value)

    def set_height_cm(self, value: Any) -> bool:
        return self._set_measurement("height_cm", value, live_in=UnitSystem.METRIC)

    def set_height_ft(self, value: Any) -> bool:
        return self._set_measurement("height_ft", value, live_in=UnitSystem.IMPERIAL)

    def set_height_in(self, value: Any) -> bool:
        return self._set_measurement("height_in", value, live_in=UnitSystem.IMPERIAL)

    def set_age(self, value: Any) -> bool:
        self._require_field("age")
        try:
            age = parse_integer_input(value, minimum=1, maximum=MAX_AGE)
        except InputRejected as exc:
            logger.debug("Rejected age input: %s", exc)
            return False
        updated = self._state.copy()
        updated.age = age
        self._commit(updated)
        return True

    def set_gender(self, value: Any) -> bool:
        self._require_field("gender")
        try:
            gender = Gender(value)
        except ValueError:
            return False
        updated = self._state.copy()
        updated.gender = gender
        self._commit(updated)
        return True

    def set_activity_level(self, value: Any) -> bool:
        self._require_field("activity_level")
        try:
            level = ActivityLevel(value)
        except ValueError:
            return False
        updated = self._state.copy()
        updated.activity_level = level
        self._commit(updated)
        return True

    def set_unit_system(self, target: Any) -> bool:
        system = UnitSystem.parse(target)
        if system is None:
            return False
        if system == self._state.unit_system:
            return True
        self._commit(convert_state(self._state, system))
        return True

    def toggle_units(self) -> UnitSystem:
        if self._state.unit_system == UnitSystem.METRIC:
            target = UnitSystem.IMPERIAL
        else:
            target = UnitSystem.METRIC
        self.set_unit_system(target)
        return self._state.unit_system

    def set_field(self, name: str, value: Any) -> bool:
        setters = {
            "weight": self.set_weight,
            "height_cm": self.set_height_cm,
            "height_ft": self.set_height_ft,
            "height_in": self.set_height_in,
            "unit_system": self.set_unit_system,
            "age": self.set_age,
            "gender": self.set_gender,
            "activity_level": self.set_activity_level,
        }
        setter = setters.get(name)
        if setter is None:
            raise CalculatorError(f"Unknown field `{name}`")
        self._require_field(name)
        return setter(value)

    def submit(self) -> CalculatorResult | None:
        """Manual recompute; shares the reactive path so both always agree."""
        return self._recompute()

    def snapshot(self, translate: Translator | None = None) -> dict[str, Any]:
        translate = translate or get_translator()
        state = self._state
        canonical = self.canonical
        inputs: dict[str, Any] = {
            "weight": state.weight,
            "height_cm": state.height_cm,
            "height_ft": state.height_ft,
            "height_in": state.height_in,
        }
        if "age" in self.spec.parameter_fields:
            inputs["age"] = state.age
        if "gender" in self.spec.parameter_fields:
            inputs["gender"] = state.gender.value
        if "activity_level" in self.spec.parameter_fields:
            inputs["activity_level"] = state.activity_level.value
        result = self._result
        return {
            "kind": self.spec.kind,
            "title": translate(self.spec.title_key),
            "unit_system": state.unit_system.value,
            "unit_label": translate(state.unit_system.value),
            "inputs": inputs,
            "canonical": {"weight_kg": canonical.weight_kg, "height_cm": canonical.height_cm},
            "status": "ready" if result is not None else "incomplete",
            "result": result.to_payload(translate) if result is not None else None,
            "prompt": None if result is not None else translate("fillAllFields"),
        }


class CalculatorRegistry:
    def __init__(self):
        self._specs: dict[str, CalculatorSpec] = {}

    def register(self, spec: CalculatorSpec) -> None:
        if spec.kind in self._specs:
            raise ValueError(f"Calculator already registered: {spec.kind}")
        for other in self._specs.values():
            if other.storage_key == spec.storage_key:
                raise ValueError(f"Storage key `{spec.storage_key}` is already used by `{other.kind}`")
        self._specs[spec.kind] = spec

    def list_specs(self) -> list[CalculatorSpec]:
        return sorted(self._specs.values(), key=lambda s: s.kind)

    def get_spec(self, kind: str) -> CalculatorSpec:
        spec = self._specs.get(kind)
        if spec is None:
            raise CalculatorError(f"Unknown calculator: {kind}")
        return spec

    def open_session(self, kind: str, storage: SlotStorage) -> CalculatorSession:
        return CalculatorSession(self.get_spec(kind), storage)


def build_default_registry() -> CalculatorRegistry:
    registry = CalculatorRegistry()
    registry.register(
        CalculatorSpec(
            kind="bmi",
            title_key="bmiCalculatorTitle",
            storage_key=settings.BMI_STORAGE_KEY,
            formula=bmi_formula,
        )
    )
    registry.register(
        CalculatorSpec(
            kind="tdee",
            title_key="tdeeCalculatorTitle",
            storage_key=settings.TDEE_STORAGE_KEY,
            formula=tdee_formula,
            parameter_fields=BODY_PARAMETER_FIELDS,
        )
    )
    return registry


calculator_registry = build_default_registry()
