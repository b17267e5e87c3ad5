import threading
from collections import defaultdict
from typing import Literal, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from db.database import SessionLocal
from services.calculator_service import CalculatorError, calculator_registry
from services.storage_service import SlotStorage, SqlSlotStorage
from utils.i18n import get_translator

router = APIRouter(prefix="/calculators", tags=["calculators"])

# One input event at a time per calculator instance.
_SESSION_LOCKS: dict[str, threading.Lock] = defaultdict(threading.Lock)


class FieldUpdate(BaseModel):
    value: Optional[Union[str, float]] = None


class UnitSystemUpdate(BaseModel):
    unit_system: Literal["metric", "imperial"]


class CalculatorSummary(BaseModel):
    kind: str
    title: str
    storage_key: str
    fields: list[str]


def get_slot_storage() -> SlotStorage:
    return SqlSlotStorage(SessionLocal)


def _lock_for(kind: str) -> threading.Lock:
    try:
        calculator_registry.get_spec(kind)
    except CalculatorError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _SESSION_LOCKS[kind]


def _open(kind: str, storage: SlotStorage):
    return calculator_registry.open_session(kind, storage)


@router.get("", response_model=list[CalculatorSummary])
def list_calculators(lang: Optional[str] = Query(default=None)):
    translate = get_translator(lang)
    return [
        CalculatorSummary(
            kind=spec.kind,
            title=translate(spec.title_key),
            storage_key=spec.storage_key,
            fields=list(spec.fields),
        )
        for spec in calculator_registry.list_specs()
    ]


@router.get("/{kind}")
def get_calculator(
    kind: str,
    lang: Optional[str] = Query(default=None),
    storage: SlotStorage = Depends(get_slot_storage),
):
    with _lock_for(kind):
        session = _open(kind, storage)
        return session.snapshot(get_translator(lang))


@router.put("/{kind}/fields/{field}")
def update_field(
    kind: str,
    field: str,
    req: FieldUpdate,
    lang: Optional[str] = Query(default=None),
    storage: SlotStorage = Depends(get_slot_storage),
):
    with _lock_for(kind):
        session = _open(kind, storage)
        try:
            accepted = session.set_field(field, req.value)
        except CalculatorError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        body = session.snapshot(get_translator(lang))
    body["accepted"] = accepted
    return body


@router.post("/{kind}/units")
def set_units(
    kind: str,
    req: UnitSystemUpdate,
    lang: Optional[str] = Query(default=None),
    storage: SlotStorage = Depends(get_slot_storage),
):
    with _lock_for(kind):
        session = _open(kind, storage)
        session.set_unit_system(req.unit_system)
        return session.snapshot(get_translator(lang))


@router.post("/{kind}/toggle-units")
def toggle_units(
    kind: str,
    lang: Optional[str] = Query(default=None),
    storage: SlotStorage = Depends(get_slot_storage),
):
    with _lock_for(kind):
        session = _open(kind, storage)
        session.toggle_units()
        return session.snapshot(get_translator(lang))


@router.post("/{kind}/submit")
def submit(
    kind: str,
    lang: Optional[str] = Query(default=None),
    storage: SlotStorage = Depends(get_slot_storage),
):
    with _lock_for(kind):
        session = _open(kind, storage)
        session.submit()
        return session.snapshot(get_translator(lang))
