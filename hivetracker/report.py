"""Doctor report and chart aggregates computed directly from entries."""

from collections.abc import Sequence
from datetime import date, datetime

import numpy as np
from pydantic import BaseModel

from hivetracker.analysis.models import AnalysisResult, CamelModel, Entry

REPORT_TITLE = "Chronic Urticaria Patient Report"
DISCLAIMER = (
    "This report was created by the patient using HiveTracker. It is intended to "
    "assist medical professionals in identifying urticaria patterns and is not a "
    "clinical diagnosis."
)


class Summary(CamelModel):
    total_entries: int
    average_severity: float
    top_locations: list[str]


class TimelinePoint(BaseModel):
    timestamp: datetime
    severity: int


class LocationCount(BaseModel):
    name: str
    value: int


class ReportRow(CamelModel):
    timestamp: datetime
    severity: int
    band: str
    locations: str
    triggers: str
    notes: str | None = None


class DoctorReport(CamelModel):
    title: str = REPORT_TITLE
    generated_on: date
    summary: Summary
    analysis: AnalysisResult | None = None
    history: list[ReportRow]
    disclaimer: str = DISCLAIMER


def severity_band(severity: int) -> str:
    if severity >= 8:
        return "high"
    if severity >= 5:
        return "medium"
    return "low"


def location_breakdown(entries: Sequence[Entry]) -> list[LocationCount]:
    counts: dict[str, int] = {}
    for e in entries:
        for loc in e.location:
            counts[loc] = counts.get(loc, 0) + 1
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [LocationCount(name=name, value=value) for name, value in ranked]


def severity_timeline(entries: Sequence[Entry]) -> list[TimelinePoint]:
    ordered = sorted(entries, key=lambda e: e.timestamp)
    return [TimelinePoint(timestamp=e.timestamp, severity=e.severity) for e in ordered]


def summarize(entries: Sequence[Entry]) -> Summary:
    if entries:
        avg = round(float(np.mean([e.severity for e in entries])), 1)
    else:
        avg = 0.0
    top = [lc.name for lc in location_breakdown(entries)[:3]]
    return Summary(total_entries=len(entries), average_severity=avg, top_locations=top)


def build_report(
    entries: Sequence[Entry],
    analysis: AnalysisResult | None = None,
    today: date | None = None,
) -> DoctorReport:
    history = [
        ReportRow(
            timestamp=e.timestamp,
            severity=e.severity,
            band=severity_band(e.severity),
            locations=", ".join(e.location),
            triggers=e.triggers,
            notes=e.notes,
        )
        for e in entries
    ]
    return DoctorReport(
        generated_on=today or date.today(),
        summary=summarize(entries),
        analysis=analysis,
        history=history,
    )
