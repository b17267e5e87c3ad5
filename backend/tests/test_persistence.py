from __future__ import annotations

import json
import sys
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from db.database import Base  # noqa: E402
from db import models  # noqa: E402,F401
from services.calculator_state import ActivityLevel, Gender, RawInputState  # noqa: E402
from services.persistence_service import load_state, save_state, state_to_record  # noqa: E402
from services.storage_service import InMemorySlotStorage, SlotStorage, SqlSlotStorage  # noqa: E402
from utils.units import UnitSystem  # noqa: E402


KEY = "tdeeCalculatorState"


def _sql_storage() -> SqlSlotStorage:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return SqlSlotStorage(sessionmaker(autocommit=False, autoflush=False, bind=engine))


def _full_state() -> RawInputState:
    return RawInputState(
        weight=176.4,
        height_cm=None,
        height_ft=5.0,
        height_in=10.5,
        unit_system=UnitSystem.IMPERIAL,
        age=42,
        gender=Gender.FEMALE,
        activity_level=ActivityLevel.ACTIVE,
    )


def test_round_trip_reproduces_every_field():
    storage = InMemorySlotStorage()
    state = _full_state()
    assert save_state(storage, KEY, state, with_parameters=True) is True
    assert load_state(storage, KEY, with_parameters=True) == state


def test_round_trip_through_sql_storage_with_overwrite():
    storage = _sql_storage()
    assert isinstance(storage, SlotStorage)
    save_state(storage, KEY, RawInputState(weight=70.0), with_parameters=True)
    state = _full_state()
    save_state(storage, KEY, state, with_parameters=True)
    assert load_state(storage, KEY, with_parameters=True) == state
    assert storage.read("missing") is None


def test_record_layout_uses_client_field_names():
    record = state_to_record(_full_state(), with_parameters=True)
    assert record == {
        "weight": 176.4,
        "heightCm": None,
        "heightFt": 5.0,
        "heightIn": 10.5,
        "unitSystem": "imperial",
        "age": 42,
        "gender": "female",
        "activityLevel": "active",
    }
    assert set(state_to_record(_full_state())) == {"weight", "heightCm", "heightFt", "heightIn", "unitSystem"}


def test_missing_slot_gives_defaults():
    assert load_state(InMemorySlotStorage(), KEY, with_parameters=True) == RawInputState()


def test_corrupt_or_non_object_records_give_defaults():
    for raw in ("{not json", "[1, 2]", "null", "42"):
        storage = InMemorySlotStorage({KEY: raw})
        assert load_state(storage, KEY, with_parameters=True) == RawInputState()


def test_partial_record_fills_missing_fields_with_defaults():
    storage = InMemorySlotStorage({KEY: json.dumps({"weight": 70, "age": 30})})
    state = load_state(storage, KEY, with_parameters=True)
    assert state.weight == 70.0
    assert state.age == 30
    assert state.height_cm is None
    assert state.unit_system is UnitSystem.METRIC
    assert state.gender is Gender.MALE
    assert state.activity_level is ActivityLevel.SEDENTARY


def test_invalid_fields_fall_back_individually():
    raw = (
        '{"weight": -5, "heightCm": NaN, "heightFt": "abc", "heightIn": true,'
        ' "unitSystem": "kelvin", "age": 200, "gender": "other", "activityLevel": "couch"}'
    )
    state = load_state(InMemorySlotStorage({KEY: raw}), KEY, with_parameters=True)
    assert state == RawInputState()


def test_legacy_field_names_are_honoured():
    raw = json.dumps({"weight": 80, "height": 180, "units": "metric", "age": 30, "activityLevel": "moderate"})
    state = load_state(InMemorySlotStorage({KEY: raw}), KEY, with_parameters=True)
    assert state.height_cm == 180.0
    assert state.unit_system is UnitSystem.METRIC
    assert state.activity_level is ActivityLevel.MODERATE

    legacy_imperial = json.dumps({"units": "imperial", "heightFt": 6})
    state = load_state(InMemorySlotStorage({KEY: legacy_imperial}), KEY)
    assert state.unit_system is UnitSystem.IMPERIAL
    assert state.height_ft == 6.0


def test_only_the_active_height_representation_is_restored():
    raw = json.dumps({"heightCm": 175, "heightFt": 5, "heightIn": 9, "unitSystem": "metric"})
    state = load_state(InMemorySlotStorage({KEY: raw}), KEY)
    assert state.height_cm == 175.0
    assert state.height_ft is None and state.height_in is None

    raw = json.dumps({"heightCm": 175, "heightFt": 5, "heightIn": 9, "unitSystem": "imperial"})
    state = load_state(InMemorySlotStorage({KEY: raw}), KEY)
    assert state.height_cm is None
    assert (state.height_ft, state.height_in) == (5.0, 9.0)


def test_body_parameters_ignored_without_parameters_flag():
    raw = json.dumps({"weight": 80, "age": 30, "gender": "female"})
    state = load_state(InMemorySlotStorage({KEY: raw}), KEY)
    assert state.age is None
    assert state.gender is Gender.MALE


class _BrokenStorage:
    def read(self, key: str) -> str | None:
        raise OSError("storage unavailable")

    def write(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


def test_storage_errors_are_swallowed():
    storage = _BrokenStorage()
    assert load_state(storage, KEY, with_parameters=True) == RawInputState()
    assert save_state(storage, KEY, _full_state(), with_parameters=True) is False
