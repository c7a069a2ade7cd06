import json
from collections.abc import Sequence
from typing import Any

from hivetracker.analysis.models import Entry

SYSTEM_PROMPT = """\
You are a dermatology medical analyst reviewing a patient's chronic hives (urticaria) log.
Provide objective insights based strictly on the provided JSON data. Do not diagnose.

Each log has: "date" (ISO timestamp), "sev" (severity 1-10), "loc" (comma-separated
body areas), "trig" (comma-separated suspected triggers) and, when recorded,
"temp" (°C) and "humidity" (%).

Return **JSON only** (no markdown fences) with exactly these keys:
  - "commonTriggers": list of up to 3 trigger names, most frequent first
  - "severityTrend": one or two sentences on how severity is changing over time
  - "potentialPatterns": one or two sentences on body area / trigger correlations
  - "advice": one practical recommendation
  - "environmentInsights": a sentence on weather correlation, or null if there is none
"""


def summarize_entry(entry: Entry) -> dict[str, Any]:
    """Compact representation of one entry to keep the prompt small."""
    item: dict[str, Any] = {
        "date": entry.timestamp.isoformat(),
        "sev": entry.severity,
        "loc": ",".join(entry.location),
        "trig": entry.triggers,
    }
    if entry.weather is not None:
        item["temp"] = entry.weather.temp
        item["humidity"] = entry.weather.humidity
    return item


def build_user_message(entries: Sequence[Entry], limit: int) -> str:
    """Serialize the most recent `limit` entries for the analysis request."""
    recent = sorted(entries, key=lambda e: e.timestamp, reverse=True)[:limit]
    context = [summarize_entry(e) for e in recent]
    return (
        "Analyze these patient hive logs and identify patterns. Return ONLY JSON.\n"
        f"Logs: {json.dumps(context)}"
    )
