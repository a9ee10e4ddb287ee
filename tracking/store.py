"""
In-process symptom log with whole-collection persistence.

The store owns the authoritative list of records. The persistence slot is a
passive mirror: every successful mutation rewrites the full collection, and on
any disagreement the in-memory state is what gets written.
"""
from __future__ import annotations

import json
import logging
import threading
from typing import Any, List, Mapping, Optional, Protocol, Union

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tracking.aggregation import unique_symptom_names
from tracking.errors import NotFoundError, PersistenceError
from tracking.symptom_schema import (
    SymptomRecord,
    new_record_id,
    validate_symptom_input,
)

logger = logging.getLogger(__name__)

DEFAULT_SLOT_KEY = "healthwise_symptoms"

_records_adapter = TypeAdapter(List[SymptomRecord])

RawInput = Union[Mapping[str, Any], BaseModel]


class PersistenceSlot(Protocol):
    """A single durable location holding the serialised collection."""

    def read(self) -> Optional[str]:
        ...

    def write(self, payload: str) -> None:
        ...


class InMemorySlot:
    """Slot kept in a Python attribute; used for tests and ephemeral sessions."""

    def __init__(self, payload: Optional[str] = None) -> None:
        self.payload = payload
        self.writes = 0

    def read(self) -> Optional[str]:
        return self.payload

    def write(self, payload: str) -> None:
        self.payload = payload
        self.writes += 1


def dump_records(records: List[SymptomRecord]) -> str:
    return json.dumps([r.to_storage() for r in records])


def parse_records(payload: str) -> List[SymptomRecord]:
    """Parse a persisted payload, raising ``PersistenceError`` if it is unusable."""
    try:
        records = _records_adapter.validate_json(payload)
    except PydanticValidationError as exc:
        raise PersistenceError(f"Persisted symptom data is corrupt: {exc.error_count()} error(s)") from exc
    seen: set[str] = set()
    for record in records:
        if record.id in seen:
            raise PersistenceError(f"Persisted symptom data has duplicate id {record.id!r}")
        seen.add(record.id)
    return records


class SymptomStore:
    """CRUD over the symptom log, mirrored to a ``PersistenceSlot``."""

    def __init__(self, slot: PersistenceSlot) -> None:
        self._slot = slot
        self._records: List[SymptomRecord] = []
        self._lock = threading.Lock()
        self.last_write_error: Optional[PersistenceError] = None

    # ---------- lifecycle ------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory collection with the persisted one.

        A missing payload means an empty log. An unreadable slot or a corrupt
        payload is logged and also yields an empty log; nothing is raised.
        """
        with self._lock:
            try:
                payload = self._slot.read()
                records = parse_records(payload) if payload else []
            except PersistenceError as exc:
                logger.warning("Discarding persisted symptom log: %s", exc)
                records = []
            except Exception:
                logger.exception("Failed to read persisted symptom log; starting empty")
                records = []
            self._records = records
            logger.info("Loaded %d symptom record(s)", len(records))

    # ---------- queries --------------------------------------------------

    def list_records(self) -> List[SymptomRecord]:
        return list(self._records)

    def get(self, record_id: str) -> SymptomRecord:
        return self._records[self._index_of(record_id)]

    def symptom_names(self) -> List[str]:
        return unique_symptom_names(self._records)

    def recent_first(self) -> List[SymptomRecord]:
        """Records with the latest date first; same-day entries keep collection order."""
        return sorted(self._records, key=lambda r: r.date, reverse=True)

    # ---------- mutations ------------------------------------------------

    def create(self, raw: RawInput) -> SymptomRecord:
        data = validate_symptom_input(raw)
        with self._lock:
            record = SymptomRecord.from_input(data, new_record_id())
            self._records.append(record)
            self._persist()
        logger.debug("Created symptom record %s", record.id)
        return record

    def update(self, record_id: str, raw: RawInput) -> SymptomRecord:
        with self._lock:
            index = self._index_of(record_id)
            data = validate_symptom_input(raw)
            record = SymptomRecord.from_input(data, record_id)
            self._records[index] = record
            self._persist()
        logger.debug("Updated symptom record %s", record_id)
        return record

    def delete(self, record_id: str) -> None:
        with self._lock:
            index = self._index_of(record_id)
            del self._records[index]
            self._persist()
        logger.debug("Deleted symptom record %s", record_id)

    # ---------- internals ------------------------------------------------

    def _index_of(self, record_id: str) -> int:
        for i, record in enumerate(self._records):
            if record.id == record_id:
                return i
        raise NotFoundError(record_id)

    def _persist(self) -> None:
        try:
            self._slot.write(dump_records(self._records))
        except PersistenceError as exc:
            self.last_write_error = exc
            logger.warning("Symptom log not saved, keeping in-memory changes: %s", exc)
        except Exception as exc:
            self.last_write_error = PersistenceError(str(exc))
            self.last_write_error.__cause__ = exc
            logger.exception("Symptom log not saved, keeping in-memory changes")
        else:
            self.last_write_error = None
