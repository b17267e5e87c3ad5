"""Reads and writes calculator input state to a storage slot.

Records are JSON objects using the field names the browser client has
always written (``weight``, ``heightCm``, ``heightFt``, ``heightIn``,
``unitSystem`` and, for the energy calculator, ``age``, ``gender`` and
``activityLevel``). Loading is forgiving: a missing slot, unparsable JSON
or an invalid field only resets what is broken, never the whole load.
Saving never raises.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from services.calculator_state import MAX_AGE, ActivityLevel, Gender, RawInputState
from services.storage_service import SlotStorage
from utils.numeric_input import InputRejected, parse_integer_input, parse_numeric_input
from utils.units import UnitSystem

logger = logging.getLogger(__name__)

# Older clients wrote these names before the record layout was unified.
LEGACY_FIELD_NAMES = {
    "unitSystem": "units",
    "heightCm": "height",
}


def _json_dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=True)


def _field(record: dict, name: str) -> Any:
    if name in record:
        return record[name]
    legacy = LEGACY_FIELD_NAMES.get(name)
    if legacy and legacy in record:
        return record[legacy]
    return None


def _load_number(record: dict, name: str, key: str) -> float | None:
    raw = _field(record, name)
    if raw is None or raw == "":
        return None
    # Toggled values may exceed the typed-input ceiling, so only finiteness is enforced here.
    try:
        return parse_numeric_input(raw, maximum=math.inf)
    except InputRejected as e:
        logger.warning(f"Ignoring invalid {name!r} in slot {key!r}: {e}")
        return None


def _load_age(record: dict, key: str) -> int | None:
    raw = _field(record, "age")
    if raw is None or raw == "":
        return None
    try:
        return parse_integer_input(raw, minimum=1, maximum=MAX_AGE)
    except InputRejected as e:
        logger.warning(f"Ignoring invalid 'age' in slot {key!r}: {e}")
        return None


def _load_enum(record: dict, name: str, enum_cls, default, key: str):
    raw = _field(record, name)
    if raw is None:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name!r} in slot {key!r}: {raw!r}")
        return default


def state_from_record(record: dict, *, key: str = "", with_parameters: bool = False) -> RawInputState:
    state = RawInputState(
        weight=_load_number(record, "weight", key),
        height_cm=_load_number(record, "heightCm", key),
        height_ft=_load_number(record, "heightFt", key),
        height_in=_load_number(record, "heightIn", key),
        # Anything other than an explicit "imperial" restores as metric.
        unit_system=UnitSystem.IMPERIAL if _field(record, "unitSystem") == "imperial" else UnitSystem.METRIC,
    )
    # Only the height representation of the restored unit system is live.
    if state.unit_system == UnitSystem.METRIC:
        state.height_ft = None
        state.height_in = None
    else:
        state.height_cm = None
    if with_parameters:
        state.age = _load_age(record, key)
        state.gender = _load_enum(record, "gender", Gender, Gender.MALE, key)
        state.activity_level = _load_enum(
            record, "activityLevel", ActivityLevel, ActivityLevel.SEDENTARY, key
        )
    return state


def state_to_record(state: RawInputState, *, with_parameters: bool = False) -> dict[str, Any]:
    record: dict[str, Any] = {
        "weight": state.weight,
        "heightCm": state.height_cm,
        "heightFt": state.height_ft,
        "heightIn": state.height_in,
        "unitSystem": state.unit_system.value,
    }
    if with_parameters:
        record["age"] = state.age
        record["gender"] = state.gender.value
        record["activityLevel"] = state.activity_level.value
    return record


def load_state(storage: SlotStorage, key: str, *, with_parameters: bool = False) -> RawInputState:
    try:
        serialized = storage.read(key)
    except Exception as e:
        logger.warning(f"Could not read calculator state from slot {key!r}: {e}")
        return RawInputState()
    if serialized is None:
        return RawInputState()
    try:
        record = json.loads(serialized)
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not parse calculator state in slot {key!r}: {e}")
        return RawInputState()
    if not isinstance(record, dict):
        logger.warning(f"Calculator state in slot {key!r} is not an object, using defaults")
        return RawInputState()
    return state_from_record(record, key=key, with_parameters=with_parameters)


def save_state(
    storage: SlotStorage,
    key: str,
    state: RawInputState,
    *,
    with_parameters: bool = False,
) -> bool:
    try:
        storage.write(key, _json_dump(state_to_record(state, with_parameters=with_parameters)))
        return True
    except Exception as e:
        logger.warning(f"Could not save calculator state to slot {key!r}: {e}")
        return False
