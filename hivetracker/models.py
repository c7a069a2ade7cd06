from pydantic import BaseModel, Field

from hivetracker.analysis.models import AnalysisResult, CamelModel, Entry

BODY_AREAS = [
    "Head",
    "Neck",
    "Shoulder",
    "Arm",
    "Torso",
    "Chest",
    "Thighs",
    "Legs",
    "Feet",
]

COMMON_TRIGGERS = [
    "Stress", "Heat", "Cold", "Dairy", "Seafood", "Alcohol",
    "Detergent", "Sweat", "Pressure", "Medication",
]


class EntryIn(Entry):
    """Entry as submitted through the API: at least one body area is required."""

    location: list[str] = Field(min_length=1)


class AnalysisRequest(BaseModel):
    engine: str | None = None


class AnalysisResponse(CamelModel):
    result: AnalysisResult
    engine: str
    confidence: int
    ready: bool
    entry_count: int
    elapsed_s: float = 0.0


class ImportResponse(BaseModel):
    imported: int
    total: int


class SetEngineRequest(BaseModel):
    engine: str
