"""Chart-ready views derived from a snapshot of the symptom log.

All functions are pure: they never mutate their input and return the same
result for the same snapshot.
"""
from __future__ import annotations

import datetime as dt
from typing import Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field

from tracking.symptom_schema import SymptomRecord

__all__ = [
    "IntensityPoint",
    "SymptomFrequency",
    "intensity_series",
    "frequency_ranking",
    "unique_symptom_names",
]

TOP_FREQUENCIES = 10


class IntensityPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    intensity: int


class SymptomFrequency(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symptom_name: str = Field(alias="symptomName")
    count: int


def intensity_series(records: Iterable[SymptomRecord], symptom_name: str) -> List[IntensityPoint]:
    """Intensity over time for one symptom, oldest first.

    Matching is exact and case-sensitive. Each record becomes one point;
    entries on the same day stay in collection order.
    """
    matching = [r for r in records if r.symptom_name == symptom_name]
    matching.sort(key=lambda r: r.date)
    return [IntensityPoint(date=r.date, intensity=r.intensity) for r in matching]


def frequency_ranking(records: Iterable[SymptomRecord], limit: int = TOP_FREQUENCIES) -> List[SymptomFrequency]:
    """Most frequently logged symptom names, ties in first-seen order."""
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")
    counts: Dict[str, int] = {}
    for record in records:
        counts[record.symptom_name] = counts.get(record.symptom_name, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [SymptomFrequency(symptom_name=name, count=count) for name, count in ranked[:limit]]


def unique_symptom_names(records: Iterable[SymptomRecord]) -> List[str]:
    return list(dict.fromkeys(r.symptom_name for r in records))
