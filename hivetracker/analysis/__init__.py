import importlib
import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from hivetracker.analysis.models import AnalysisResult, Entry
from hivetracker.config import settings

log = logging.getLogger(__name__)

# Below this many entries the UI keeps the analysis button disabled.
MIN_ENTRIES_FOR_ANALYSIS = 3

# Entries needed for a 100% confidence reading.
CONFIDENCE_FULL_AT = 15


class AnalysisEngine(Protocol):
    name: str

    async def analyze(self, entries: Sequence[Entry]) -> AnalysisResult: ...


_REGISTRY: dict[str, Callable[[], AnalysisEngine]] = {}

# Engine modules, imported at bottom to auto-register
_MODULES = [
    "hivetracker.analysis.local",
    "hivetracker.analysis.remote",
]


def register(name: str):
    """Decorator to register an analysis engine factory."""

    def decorator(factory):
        _REGISTRY[name] = factory
        return factory

    return decorator


def available_engines() -> list[str]:
    return sorted(_REGISTRY)


def resolve_engine_name(name: str | None = None) -> str:
    """Map a requested engine name (or the configured default) to a registered one."""
    name = (name or settings.analysis.engine).lower()
    if name == "auto":
        return "remote" if settings.azure_openai.configured else "local"
    if name not in _REGISTRY:
        raise ValueError(
            f"Unknown analysis engine: {name}. "
            f"Available: auto, {', '.join(available_engines())}"
        )
    return name


def get_engine(name: str | None = None) -> AnalysisEngine:
    return _REGISTRY[resolve_engine_name(name)]()


def confidence_score(n_entries: int) -> int:
    """Cosmetic 0-100 confidence shown next to the analysis."""
    return min(round(n_entries / CONFIDENCE_FULL_AT * 100), 100)


async def run_analysis(
    entries: Sequence[Entry], engine: str | None = None
) -> tuple[AnalysisResult, str]:
    """Analyze entries with the selected engine.

    Returns the result and the name of the engine that actually produced it
    (a remote engine that fell back reports "local").
    """
    impl = get_engine(engine)
    log.info("Running analysis: engine=%s entries=%d", impl.name, len(entries))
    result = await impl.analyze(entries)
    used = getattr(impl, "last_used", impl.name)
    return result, used


# Auto-import modules to trigger @register decorators
for _mod in _MODULES:
    importlib.import_module(_mod)
