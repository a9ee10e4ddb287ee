"""Symptom log model, store and derived chart views."""

from .aggregation import frequency_ranking, intensity_series, unique_symptom_names  # noqa: F401
from .errors import NotFoundError, PersistenceError, TrackingError, ValidationError  # noqa: F401
from .store import InMemorySlot, PersistenceSlot, SymptomStore  # noqa: F401
from .symptom_schema import SymptomInput, SymptomRecord, validate_symptom_input  # noqa: F401

__all__ = [
    "SymptomRecord",
    "SymptomInput",
    "validate_symptom_input",
    "SymptomStore",
    "PersistenceSlot",
    "InMemorySlot",
    "intensity_series",
    "frequency_ranking",
    "unique_symptom_names",
    "TrackingError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
]
