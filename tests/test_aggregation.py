import sys
from datetime import date
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from tracking.aggregation import frequency_ranking, intensity_series, unique_symptom_names
from tracking.symptom_schema import SymptomRecord


def _rec(i, name, day, intensity, time=None):
    return SymptomRecord(id=str(i), symptomName=name, date=day, intensity=intensity, time=time)


def _scenario():
    return [
        _rec(1, "Headache", "2024-07-01", 3),
        _rec(2, "Headache", "2024-07-03", 7),
        _rec(3, "Cough", "2024-07-02", 5),
    ]


def test_intensity_series_scenario():
    points = intensity_series(_scenario(), "Headache")
    assert [(p.date, p.intensity) for p in points] == [
        (date(2024, 7, 1), 3),
        (date(2024, 7, 3), 7),
    ]


def test_frequency_ranking_scenario():
    ranking = frequency_ranking(_scenario())
    assert [(f.symptom_name, f.count) for f in ranking] == [("Headache", 2), ("Cough", 1)]
    assert ranking[0].model_dump(by_alias=True) == {"symptomName": "Headache", "count": 2}


def test_series_sorts_out_of_order_records():
    records = [
        _rec(1, "Nausea", "2024-07-05", 2),
        _rec(2, "Nausea", "2024-06-30", 9),
        _rec(3, "Nausea", "2024-07-01", 4),
    ]
    assert [p.intensity for p in intensity_series(records, "Nausea")] == [9, 4, 2]


def test_same_day_entries_keep_collection_order():
    records = [
        _rec(1, "Fatigue", "2024-07-02", 6, time="20:00"),
        _rec(2, "Fatigue", "2024-07-01", 1),
        _rec(3, "Fatigue", "2024-07-02", 3, time="07:00"),
    ]
    assert [p.intensity for p in intensity_series(records, "Fatigue")] == [1, 6, 3]


def test_series_match_is_exact():
    records = [
        _rec(1, "Headache", "2024-07-01", 3),
        _rec(2, "headache", "2024-07-02", 4),
        _rec(3, "Headache ", "2024-07-03", 5),
    ]
    assert [p.intensity for p in intensity_series(records, "Headache")] == [3]
    assert intensity_series(records, "Migraine") == []


def test_ranking_ties_in_first_seen_order():
    records = [
        _rec(1, "Cough", "2024-07-01", 1),
        _rec(2, "Fever", "2024-07-01", 1),
        _rec(3, "Rash", "2024-07-01", 1),
        _rec(4, "Rash", "2024-07-02", 1),
        _rec(5, "Fever", "2024-07-02", 1),
    ]
    assert [f.symptom_name for f in frequency_ranking(records)] == ["Fever", "Rash", "Cough"]


def test_ranking_truncates_to_top_ten():
    records = []
    for i in range(12):
        for j in range(i + 1):
            records.append(_rec(f"{i}-{j}", f"Symptom {i:02d}", "2024-07-01", 1))
    ranking = frequency_ranking(records)
    assert len(ranking) == 10
    assert ranking[0].symptom_name == "Symptom 11"
    assert ranking[-1].symptom_name == "Symptom 02"
    assert len(frequency_ranking(records, limit=3)) == 3


def test_aggregations_are_repeatable_and_pure():
    records = _scenario()
    snapshot = list(records)
    assert intensity_series(records, "Headache") == intensity_series(records, "Headache")
    assert frequency_ranking(records) == frequency_ranking(records)
    assert records == snapshot


def test_unique_names_first_seen():
    assert unique_symptom_names(_scenario()) == ["Headache", "Cough"]
    assert unique_symptom_names([]) == []


@pytest.mark.parametrize("limit", [0, -1])
def test_ranking_rejects_non_positive_limit(limit):
    with pytest.raises(ValueError):
        frequency_ranking(_scenario(), limit=limit)
