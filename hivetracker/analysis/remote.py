"""LLM-backed analysis with automatic fallback to the local engine."""

import asyncio
import json
import logging
import re
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from hivetracker import llm
from hivetracker.analysis import register
from hivetracker.analysis.local import analyze_entries, empty_result
from hivetracker.analysis.models import AnalysisResult, Entry
from hivetracker.config import settings
from hivetracker.prompts import SYSTEM_PROMPT, build_user_message

log = logging.getLogger(__name__)


def parse_llm_json(text: str) -> dict[str, Any]:
    """Leniently parse a JSON object from LLM output."""
    text = text.strip()
    # Try raw JSON
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None
    if data is None:
        # Try extracting from code fences, then the first { ... } block
        for pattern in (r"```(?:json)?\s*\n?(.*?)\n?```", r"\{.*\}"):
            m = re.search(pattern, text, re.DOTALL)
            if not m:
                continue
            try:
                data = json.loads(m.group(1) if m.groups() else m.group())
                break
            except json.JSONDecodeError:
                continue
    if not isinstance(data, dict):
        raise ValueError(f"Could not parse JSON object from LLM output: {text[:200]}")
    return data


def to_result(data: dict[str, Any]) -> AnalysisResult:
    """Validate model output and hold it to the same shape the local engine produces."""
    result = AnalysisResult.model_validate(data)
    triggers = [t.strip() for t in result.common_triggers if t and t.strip()][:3]
    env = (result.environment_insights or "").strip() or None
    return result.model_copy(update={"common_triggers": triggers, "environment_insights": env})


@register("remote")
class RemoteEngine:
    """Delegates to Azure OpenAI; any failure yields the local result instead."""

    name = "remote"

    def __init__(self, max_entries: int | None = None, timeout_s: float | None = None):
        self.max_entries = max_entries or settings.analysis.remote_max_entries
        self.timeout_s = timeout_s or settings.azure_openai.timeout_s
        self.last_used = self.name

    async def _ask(self, entries: Sequence[Entry]) -> AnalysisResult:
        message = build_user_message(entries, self.max_entries)
        raw = await asyncio.wait_for(
            llm.chat_json(SYSTEM_PROMPT, message), timeout=self.timeout_s
        )
        return to_result(parse_llm_json(raw))

    async def analyze(self, entries: Sequence[Entry]) -> AnalysisResult:
        if not entries:
            self.last_used = "local"
            return empty_result()
        try:
            result = await self._ask(entries)
        except (ValueError, ValidationError) as e:
            log.warning("Remote analysis returned unusable output, falling back to local engine: %s", e)
        except asyncio.TimeoutError:
            log.warning("Remote analysis timed out after %.1fs, falling back to local engine", self.timeout_s)
        except Exception as e:
            # Auth, rate limit, network and configuration errors all end here.
            log.warning("Remote analysis failed, falling back to local engine: %s", e)
        else:
            self.last_used = self.name
            return result
        self.last_used = "local"
        return analyze_entries(entries)
