import json
from datetime import date

import pytest

from conftest import make_entry
from hivetracker.export import (
    CSV_COLUMNS,
    ExportError,
    ImportFormatError,
    backup_filename,
    csv_filename,
    export_csv,
    export_json,
    parse_backup,
)


def test_filenames():
    assert backup_filename(date(2024, 5, 2)) == "hivetracker-backup-2024-05-02.json"
    assert csv_filename(date(2024, 5, 2)) == "hive-log-report-2024-05-02.csv"


def test_csv_has_bom_header_and_rows():
    entries = [
        make_entry(7, location=["Arm", "Legs"], triggers="Stress, Heat", notes='said "itchy"'),
    ]
    content = export_csv(entries)
    assert content.startswith("\ufeff")
    lines = content.lstrip("\ufeff").splitlines()
    assert lines[0] == ",".join(CSV_COLUMNS)
    assert lines[1].startswith("2024-03-01,09:00,7,Arm; Legs,")
    assert '"Stress, Heat"' in lines[1]
    assert '"said ""itchy"""' in lines[1]


def test_csv_without_entries():
    with pytest.raises(ExportError, match="No data"):
        export_csv([])


def test_json_backup_uses_camel_case():
    entry = make_entry(4, weather=(22, 55))
    entry.weather.pollen_level = "high"
    data = json.loads(export_json([entry]))
    assert data[0]["weather"]["pollenLevel"] == "high"
    assert "notes" not in data[0]


def test_backup_round_trip():
    entries = [make_entry(4, triggers="Dairy", day=0), make_entry(8, weather=(30, 70), day=1)]
    assert parse_backup(export_json(entries)) == entries


def test_parse_browser_backup():
    text = json.dumps([
        {
            "id": "a1",
            "timestamp": "2024-01-10T18:30:00.000Z",
            "severity": 6,
            "location": ["Torso", "Chest"],
            "triggers": "Sweat",
            "weather": {"temp": 31, "humidity": 72, "pollenLevel": "low"},
        }
    ])
    (entry,) = parse_backup(text)
    assert entry.id == "a1"
    assert entry.weather.pollen_level == "low"
    assert entry.timestamp.tzinfo is not None


@pytest.mark.parametrize("text", ['{"entries": []}', "not json", '[{"severity": 99}]'])
def test_parse_backup_rejects_bad_input(text):
    with pytest.raises(ImportFormatError):
        parse_backup(text)


def test_parse_backup_rejects_non_utf8_bytes():
    with pytest.raises(ImportFormatError, match="Failed to read file"):
        parse_backup(b"\xff\xfe[]")


def test_parse_backup_accepts_bytes():
    entries = [make_entry(4, triggers="Dairy")]
    assert parse_backup(export_json(entries).encode("utf-8")) == entries
