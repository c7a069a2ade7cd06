"""Local heuristic pattern analysis.

Runs entirely in-process over the logged entries: trigger frequency ranking,
split-window severity trend, location x trigger co-occurrence and weather
correlation, combined into one AnalysisResult. Pure and deterministic; the
input list is never mutated.
"""

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from hivetracker.analysis import register
from hivetracker.analysis.models import AnalysisResult, Entry

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisThresholds:
    top_triggers: int = 3
    trend_delta: float = 1.0
    min_pattern_count: int = 2
    min_weather_entries: int = 3
    humidity_pct: float = 65.0
    humidity_delta: float = 1.5
    heat_c: float = 28.0
    heat_delta: float = 1.0
    high_severity: float = 7.0
    report_volume: int = 10


DEFAULT_THRESHOLDS = AnalysisThresholds()

NO_DATA = "No data logged."
NO_DATA_ADVICE = "Log your first entry to see patterns."

TREND_UP = (
    "We've detected a significant increase in recent severity levels. "
    "This may indicate a new or cumulative trigger exposure."
)
TREND_DOWN = (
    "Positive trend identified: Your most recent breakouts are showing "
    "lower intensity than earlier logs."
)
TREND_STABLE = (
    "Your breakout intensity has remained relatively consistent "
    "throughout your tracking period."
)

PATTERN_NONE = (
    "Patterns often emerge over time. Currently, your breakouts appear "
    "to be distributed across multiple variables."
)
PATTERN_FOUND = (
    "Strong correlation found: Breakouts on your {location} frequently occur "
    "alongside exposure to {trigger}. Consider avoiding contact in this area."
)

HUMIDITY_INSIGHT = (
    "Breakouts logged on humid days (above {threshold:g}% humidity) average "
    "{high:.1f}/10 versus {low:.1f}/10 in drier conditions."
)
HEAT_INSIGHT = (
    "Hot weather (above {threshold:g}°C) coincides with more intense breakouts, "
    "averaging {avg:.1f}/10."
)

ADVICE_DEFAULT = (
    "Maintain consistent logging. For hives lasting more than 6 weeks, bring "
    "this report to an immunologist to discuss Chronic Spontaneous Urticaria (CSU)."
)
ADVICE_VOLUME = (
    "You have a solid history logged. Export the doctor report and share it "
    "with your clinician at your next appointment."
)
ADVICE_ENVIRONMENT = (
    "Your breakouts appear sensitive to weather. Keep rooms cool, consider a "
    "dehumidifier, and avoid prolonged heat exposure on humid days."
)
ADVICE_SEVERE = (
    "Recent breakouts are consistently severe. Talk to your physician about a "
    "referral to an allergist or dermatologist to discuss specialty treatment "
    "options such as biologics."
)


def normalize_triggers(text: str) -> list[str]:
    """Split a comma-separated trigger field into lowercase, trimmed phrases.

    Empty tokens (stray or doubled commas) are dropped. Repeats are kept so
    every mention counts toward frequency.
    """
    if not text:
        return []
    return [t for t in (part.strip().lower() for part in text.split(",")) if t]


def _capitalize(phrase: str) -> str:
    return phrase[:1].upper() + phrase[1:]


def _mean(values: Sequence[int]) -> float:
    # Zero-guarded divisor: an empty window averages to 0.
    return sum(values) / (len(values) or 1)


def empty_result() -> AnalysisResult:
    return AnalysisResult(
        common_triggers=[],
        severity_trend=NO_DATA,
        potential_patterns=NO_DATA,
        advice=NO_DATA_ADVICE,
    )


def rank_triggers(
    per_entry: Sequence[list[str]], limit: int = DEFAULT_THRESHOLDS.top_triggers
) -> list[str]:
    """Most frequent phrases first; ties keep first-seen order."""
    counts: Counter[str] = Counter()
    for triggers in per_entry:
        counts.update(triggers)
    # Counter preserves insertion order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [_capitalize(phrase) for phrase, _count in ranked[:limit]]


def severity_windows(entries: Sequence[Entry]) -> tuple[float, float]:
    """Return (start_avg, end_avg) over the chronological halves of the log."""
    ordered = sorted(entries, key=lambda e: e.timestamp)
    mid = len(ordered) // 2
    start_avg = _mean([e.severity for e in ordered[:mid]])
    end_avg = _mean([e.severity for e in ordered[mid:]])
    return start_avg, end_avg


def classify_trend(
    start_avg: float,
    end_avg: float,
    n: int,
    thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS,
) -> str:
    if n < 2:
        # No earlier window to compare against.
        return TREND_STABLE
    if end_avg > start_avg + thresholds.trend_delta:
        return TREND_UP
    if end_avg < start_avg - thresholds.trend_delta:
        return TREND_DOWN
    return TREND_STABLE


def strongest_pattern(
    entries: Sequence[Entry],
    per_entry: Sequence[list[str]],
) -> tuple[str, str, int]:
    """Find the (location, trigger) pair that co-occurs most often.

    Each (entry, distinct location, trigger token) adds one to its cell.
    The first cell to reach the maximum wins ties.
    """
    cells: dict[str, dict[str, int]] = {}
    for entry, triggers in zip(entries, per_entry):
        for loc in dict.fromkeys(entry.location):
            row = cells.setdefault(loc, {})
            for trig in triggers:
                row[trig] = row.get(trig, 0) + 1

    best_loc, best_trig, max_count = "", "", 0
    for loc, row in cells.items():
        for trig, count in row.items():
            if count > max_count:
                best_loc, best_trig, max_count = loc, trig, count
    return best_loc, best_trig, max_count


def describe_pattern(
    location: str,
    trigger: str,
    count: int,
    thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS,
) -> str:
    if count >= thresholds.min_pattern_count:
        return PATTERN_FOUND.format(location=location, trigger=_capitalize(trigger))
    return PATTERN_NONE


def environment_insights(
    entries: Sequence[Entry],
    end_avg: float,
    thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS,
) -> str | None:
    """Describe humidity / heat correlations, or None when nothing stands out."""
    with_weather = [e for e in entries if e.weather is not None]
    if len(with_weather) < thresholds.min_weather_entries:
        return None

    sentences: list[str] = []

    humid = [e.severity for e in with_weather if e.weather.humidity > thresholds.humidity_pct]
    dry = [e.severity for e in with_weather if e.weather.humidity <= thresholds.humidity_pct]
    if humid and _mean(humid) > _mean(dry) + thresholds.humidity_delta:
        sentences.append(
            HUMIDITY_INSIGHT.format(
                threshold=thresholds.humidity_pct, high=_mean(humid), low=_mean(dry)
            )
        )

    hot = [e.severity for e in with_weather if e.weather.temp > thresholds.heat_c]
    if hot and _mean(hot) > end_avg + thresholds.heat_delta:
        sentences.append(HEAT_INSIGHT.format(threshold=thresholds.heat_c, avg=_mean(hot)))

    return " ".join(sentences) if sentences else None


def choose_advice(
    n: int,
    end_avg: float,
    env_insight: str | None,
    thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS,
) -> str:
    if end_avg > thresholds.high_severity:
        return ADVICE_SEVERE
    if env_insight is not None:
        return ADVICE_ENVIRONMENT
    if n > thresholds.report_volume:
        return ADVICE_VOLUME
    return ADVICE_DEFAULT


def analyze_entries(
    entries: Sequence[Entry],
    thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS,
) -> AnalysisResult:
    """Compute the full heuristic analysis for a log of entries."""
    if not entries:
        return empty_result()

    entries = list(entries)
    per_entry = [normalize_triggers(e.triggers) for e in entries]

    common = rank_triggers(per_entry, thresholds.top_triggers)

    start_avg, end_avg = severity_windows(entries)
    trend = classify_trend(start_avg, end_avg, len(entries), thresholds)

    loc, trig, count = strongest_pattern(entries, per_entry)
    patterns = describe_pattern(loc, trig, count, thresholds)

    env = environment_insights(entries, end_avg, thresholds)
    advice = choose_advice(len(entries), end_avg, env, thresholds)

    log.debug(
        "Local analysis: n=%d start_avg=%.2f end_avg=%.2f strongest=%s/%s x%d",
        len(entries), start_avg, end_avg, loc, trig, count,
    )
    return AnalysisResult(
        common_triggers=common,
        severity_trend=trend,
        potential_patterns=patterns,
        advice=advice,
        environment_insights=env,
    )


@register("local")
class LocalHeuristicEngine:
    """On-device engine; needs no network or credentials."""

    name = "local"

    def __init__(self, thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds

    async def analyze(self, entries: Sequence[Entry]) -> AnalysisResult:
        return analyze_entries(entries, self.thresholds)
