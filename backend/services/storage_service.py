from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol, runtime_checkable

from sqlalchemy.orm import Session

from db.models import StorageSlot


@runtime_checkable
class SlotStorage(Protocol):
    """Durable key -> string slots.

    ``InMemorySlotStorage`` keeps slots in a dict for tests and embedding.
    ``SqlSlotStorage`` writes them to the local SQLite database.
    """

    def read(self, key: str) -> str | None:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class InMemorySlotStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._slots: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._slots.get(key)

    def write(self, key: str, value: str) -> None:
        self._slots[key] = value


class SqlSlotStorage:
    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def read(self, key: str) -> str | None:
        db = self._session_factory()
        try:
            row = db.get(StorageSlot, key)
            return row.value if row is not None else None
        finally:
            db.close()

    def write(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            row = db.get(StorageSlot, key)
            if row is None:
                db.add(StorageSlot(key=key, value=value))
            else:
                row.value = value
                row.updated_at = datetime.utcnow()
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
