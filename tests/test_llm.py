from types import SimpleNamespace

import pytest

from hivetracker import llm
from hivetracker.config import settings


class FakeCompletions:
    def __init__(self, content, finish_reason="stop"):
        self.content = content
        self.finish_reason = finish_reason
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=self.finish_reason)])


def _install(monkeypatch, completions):
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(llm, "get_client", lambda: client)


@pytest.mark.parametrize(
    "deployment, expected",
    [("gpt-4o-mini", False), ("gpt-5-mini", True), ("o3-mini-2025", True), ("gpt-4.1", False)],
)
def test_needs_max_completion_tokens(deployment, expected):
    assert llm._needs_max_completion_tokens(deployment) is expected


def test_get_client_requires_configuration():
    with pytest.raises(RuntimeError):
        llm.get_client()


@pytest.mark.asyncio
async def test_chat_json_classic_model(monkeypatch):
    completions = FakeCompletions('{"advice": "x"}')
    _install(monkeypatch, completions)
    monkeypatch.setattr(settings.azure_openai, "deployment", "gpt-4o-mini")
    assert await llm.chat_json("sys", "user") == '{"advice": "x"}'
    assert completions.kwargs["max_tokens"] == 1024
    assert completions.kwargs["temperature"] == 0.0
    assert completions.kwargs["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_chat_json_newer_model(monkeypatch):
    completions = FakeCompletions(None, finish_reason="length")
    _install(monkeypatch, completions)
    monkeypatch.setattr(settings.azure_openai, "deployment", "gpt-5-mini")
    assert await llm.chat_json("sys", "user", max_tokens=256) == ""
    assert completions.kwargs["max_completion_tokens"] == 256
    assert "temperature" not in completions.kwargs
