import pytest

from conftest import make_entry
from hivetracker import store
from hivetracker.config import settings


def test_missing_file_is_empty_store():
    assert store.list_entries() == []


def test_add_and_list_newest_first():
    older = store.add_entry(make_entry(3, day=0))
    newer = store.add_entry(make_entry(7, day=5))
    assert [e.id for e in store.list_entries()] == [newer.id, older.id]
    assert settings.storage.path.exists()


def test_list_sorts_by_timestamp_not_insert_order():
    newer = store.add_entry(make_entry(7, day=5))
    older = store.add_entry(make_entry(3, day=0))
    assert [e.id for e in store.list_entries()] == [newer.id, older.id]


def test_duplicate_id_rejected():
    entry = store.add_entry(make_entry(3))
    with pytest.raises(ValueError):
        store.add_entry(make_entry(4, id=entry.id))


def test_get_and_delete():
    entry = store.add_entry(make_entry(3, triggers="Dairy"))
    assert store.get_entry(entry.id).triggers == "Dairy"
    assert store.delete_entry(entry.id) is True
    assert store.get_entry(entry.id) is None
    assert store.delete_entry(entry.id) is False


def test_weather_survives_persistence():
    entry = store.add_entry(make_entry(6, weather=(29.5, 70)))
    loaded = store.get_entry(entry.id)
    assert loaded.weather.temp == 29.5
    assert loaded.weather.humidity == 70


def test_clear_entries():
    store.add_entry(make_entry(3, day=0))
    store.add_entry(make_entry(4, day=1))
    assert store.clear_entries() == 2
    assert store.list_entries() == []


def test_import_merges_by_id():
    existing = store.add_entry(make_entry(3, day=1))
    fresh = make_entry(5, day=3)
    imported = store.import_entries([make_entry(9, id=existing.id, day=2), fresh, fresh])
    assert imported == 1
    entries = store.list_entries()
    assert [e.id for e in entries] == [fresh.id, existing.id]
    # The stored copy wins over the imported duplicate.
    assert entries[1].severity == 3


def test_corrupt_file_raises_store_error():
    settings.storage.path.write_text("{not json")
    with pytest.raises(store.StoreError):
        store.list_entries()
