import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from db import repository as repo
from tracking.store import SymptomStore


@pytest.fixture(autouse=True)
def temp_db(tmp_path, monkeypatch):
    # Use a temporary database for isolation
    monkeypatch.setenv("HEALTH_DB_PATH", str(tmp_path / "health.db"))


def test_slot_starts_empty():
    assert repo.SqlSlot("healthwise_symptoms").read() is None


def test_slot_write_then_read_overwrites():
    slot = repo.SqlSlot("healthwise_symptoms")
    slot.write("[]")
    slot.write('[{"id": "1"}]')
    assert slot.read() == '[{"id": "1"}]'
    assert repo.SqlSlot("other").read() is None


def test_slot_key_from_env(monkeypatch):
    monkeypatch.setenv("SYMPTOM_SLOT_KEY", "custom_key")
    assert repo.SqlSlot().key == "custom_key"


def test_store_round_trip_through_database():
    store = SymptomStore(repo.SqlSlot())
    store.load()
    store.create({"symptomName": "Nausea", "date": "2024-07-01", "intensity": 4, "triggers": "Coffee"})
    store.create({"symptomName": "Cough", "date": "2024-07-02", "time": "22:10", "intensity": 2})

    reloaded = SymptomStore(repo.SqlSlot())
    reloaded.load()
    assert sorted(reloaded.list_records(), key=lambda r: r.id) == sorted(store.list_records(), key=lambda r: r.id)


def test_chat_history_is_ordered_per_user():
    repo.save_chat_message("u1", "user", "I have a headache")
    repo.save_chat_message("u2", "user", "My knee hurts")
    saved = repo.save_chat_message("u1", "bot", "It could be dehydration.")

    history = repo.get_chat_history("u1")
    assert [(m.role, m.text) for m in history] == [
        ("user", "I have a headache"),
        ("bot", "It could be dehydration."),
    ]
    assert history[-1].id == saved.id
    assert [m.text for m in repo.get_chat_history("u2")] == ["My knee hurts"]
    assert repo.get_chat_history("nobody") == []
