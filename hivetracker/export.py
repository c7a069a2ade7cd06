"""Backup (JSON) and spreadsheet (CSV) export, and backup import."""

import json
import logging
from collections.abc import Sequence
from datetime import date

import pandas as pd
from pydantic import TypeAdapter, ValidationError

from hivetracker.analysis.models import Entry

log = logging.getLogger(__name__)

CSV_COLUMNS = ["Date", "Time", "Severity (1-10)", "Affected Areas", "Triggers", "Notes"]

# Excel only detects UTF-8 with a byte order mark.
_BOM = "\ufeff"

_entry_list = TypeAdapter(list[Entry])


class ExportError(Exception):
    pass


class ImportFormatError(ValueError):
    pass


def backup_filename(today: date | None = None) -> str:
    return f"hivetracker-backup-{(today or date.today()).isoformat()}.json"


def csv_filename(today: date | None = None) -> str:
    return f"hive-log-report-{(today or date.today()).isoformat()}.csv"


def export_json(entries: Sequence[Entry]) -> str:
    data = _entry_list.dump_python(list(entries), mode="json", by_alias=True, exclude_none=True)
    return json.dumps(data, indent=2, ensure_ascii=False)


def export_csv(entries: Sequence[Entry]) -> str:
    if not entries:
        raise ExportError("No data to export.")
    rows = [
        [
            e.timestamp.strftime("%Y-%m-%d"),
            e.timestamp.strftime("%H:%M"),
            e.severity,
            "; ".join(e.location),
            e.triggers or "",
            e.notes or "",
        ]
        for e in entries
    ]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    return _BOM + df.to_csv(index=False, lineterminator="\n")


def parse_backup(text: str | bytes) -> list[Entry]:
    """Parse a JSON backup file into entries.

    Raises ImportFormatError if the payload is not UTF-8 or not a JSON array of
    valid entries.
    """
    try:
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        raw = json.loads(text.lstrip(_BOM))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ImportFormatError(
            "Failed to read file. Make sure it's a valid JSON backup file."
        ) from e
    if not isinstance(raw, list):
        raise ImportFormatError(
            "Invalid data format. Please use a .json backup file exported from this app."
        )
    try:
        entries = _entry_list.validate_python(raw)
    except ValidationError as e:
        raise ImportFormatError(f"Backup contains invalid entries: {e.error_count()} error(s)") from e
    log.info("Parsed backup with %d entries", len(entries))
    return entries
