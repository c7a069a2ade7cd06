import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both snake_case and the camelCase keys of browser backups."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Weather(CamelModel):
    temp: float  # °C
    humidity: float = Field(ge=0, le=100)
    pollen_level: str | None = None
    condition: str | None = None


class Entry(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime
    severity: int = Field(ge=1, le=10)
    location: list[str] = []
    triggers: str = ""
    notes: str | None = None
    weather: Weather | None = None
    images: list[str] | None = None

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # Naive and aware datetimes cannot be compared; treat naive as UTC.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("location")
    @classmethod
    def _distinct_locations(cls, v: list[str]) -> list[str]:
        # Body areas form a set; keep first-seen order.
        return list(dict.fromkeys(v))


class AnalysisResult(CamelModel):
    common_triggers: list[str]  # at most 3, most frequent first
    severity_trend: str
    potential_patterns: str
    advice: str
    environment_insights: str | None = None  # None when no weather correlation was found
