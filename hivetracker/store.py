"""Entry store: CRUD + JSON file persistence."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ValidationError

from hivetracker.analysis.models import Entry
from hivetracker.config import settings

log = logging.getLogger(__name__)


class StoreError(Exception):
    """The entry file exists but cannot be read."""


class EntryStore(BaseModel):
    entries: list[Entry] = []


def _store_path() -> Path:
    return settings.storage.path


def _sort_newest_first(entries: list[Entry]) -> list[Entry]:
    return sorted(entries, key=lambda e: e.timestamp, reverse=True)


# ── Persistence ──


def _load_store() -> EntryStore:
    path = _store_path()
    if not path.exists():
        return EntryStore()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return EntryStore.model_validate(raw)
    except (json.JSONDecodeError, ValidationError) as e:
        raise StoreError(f"Could not read entry store {path}: {e}") from e


def _save_store(store: EntryStore) -> None:
    path = _store_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = store.model_dump(mode="json", by_alias=True, exclude_none=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def list_entries() -> list[Entry]:
    return _sort_newest_first(_load_store().entries)


def get_entry(entry_id: str) -> Entry | None:
    for e in _load_store().entries:
        if e.id == entry_id:
            return e
    return None


def add_entry(entry: Entry) -> Entry:
    store = _load_store()
    if any(e.id == entry.id for e in store.entries):
        raise ValueError(f"Entry {entry.id} already exists")
    store.entries.insert(0, entry)
    _save_store(store)
    log.info("Added entry %s (severity %d)", entry.id, entry.severity)
    return entry


def delete_entry(entry_id: str) -> bool:
    store = _load_store()
    original_len = len(store.entries)
    store.entries = [e for e in store.entries if e.id != entry_id]
    if len(store.entries) == original_len:
        return False
    _save_store(store)
    return True


def clear_entries() -> int:
    store = _load_store()
    removed = len(store.entries)
    _save_store(EntryStore())
    log.info("Cleared %d entries", removed)
    return removed


def import_entries(entries: Iterable[Entry]) -> int:
    """Merge imported entries, skipping ids already present. Returns count added."""
    store = _load_store()
    seen = {e.id for e in store.entries}
    new_entries: list[Entry] = []
    for e in entries:
        if e.id in seen:
            continue
        seen.add(e.id)
        new_entries.append(e)
    store.entries = _sort_newest_first(new_entries + store.entries)
    _save_store(store)
    log.info("Imported %d new entries (%d total)", len(new_entries), len(store.entries))
    return len(new_entries)
