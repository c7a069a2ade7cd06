"""Shared fixtures: isolated entry store and a local-only engine configuration."""

from datetime import datetime, timedelta, timezone

import pytest

from hivetracker.analysis.models import Entry, Weather
from hivetracker.config import settings

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_entry(severity, location=("Torso",), triggers="", day=0, weather=None, **kwargs):
    """Build an entry `day` days after BASE_TIME. `weather` is (temp, humidity)."""
    if weather is not None:
        weather = Weather(temp=weather[0], humidity=weather[1])
    return Entry(
        timestamp=BASE_TIME + timedelta(days=day),
        severity=severity,
        location=list(location),
        triggers=triggers,
        weather=weather,
        **kwargs,
    )


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings.storage, "path", tmp_path / "entries.json")
    monkeypatch.setattr(settings.analysis, "engine", "local")
    monkeypatch.setattr(settings.azure_openai, "endpoint", "")
    monkeypatch.setattr(settings.azure_openai, "api_key", "")
    yield
