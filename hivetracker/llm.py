import logging

from openai import AsyncAzureOpenAI

from hivetracker.config import settings

log = logging.getLogger(__name__)

_client: AsyncAzureOpenAI | None = None

# Models that require max_completion_tokens instead of max_tokens.
_USES_MAX_COMPLETION_TOKENS = {"gpt-5", "gpt-5-mini", "gpt-5-nano", "gpt-5.1", "gpt-5.2",
                                "o1", "o1-mini", "o1-pro", "o3", "o3-mini", "o4-mini",
                                "model-router"}


def _needs_max_completion_tokens(deployment: str) -> bool:
    """Check if a deployment uses the newer max_completion_tokens parameter."""
    d = deployment.lower()
    for prefix in _USES_MAX_COMPLETION_TOKENS:
        if d == prefix or d.startswith(prefix + "-"):
            return True
    return False


def is_configured() -> bool:
    return settings.azure_openai.configured


def get_client() -> AsyncAzureOpenAI:
    global _client
    if _client is None:
        cfg = settings.azure_openai
        if not cfg.configured:
            raise RuntimeError("Azure OpenAI is not configured")
        _client = AsyncAzureOpenAI(
            azure_endpoint=cfg.endpoint,
            api_key=cfg.api_key,
            api_version=cfg.api_version,
            timeout=cfg.timeout_s,
            max_retries=0,
        )
    return _client


async def chat_json(system_prompt: str, user_message: str, max_tokens: int = 1024) -> str:
    """Send a JSON-mode chat completion request and return the raw text."""
    client = get_client()
    deployment = settings.azure_openai.deployment

    kwargs: dict = {
        "model": deployment,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ],
        "response_format": {"type": "json_object"},
    }

    if _needs_max_completion_tokens(deployment):
        # gpt-5 / o-series: max_completion_tokens, no temperature control
        kwargs["max_completion_tokens"] = max_tokens
    else:
        kwargs["max_tokens"] = max_tokens
        kwargs["temperature"] = 0.0

    resp = await client.chat.completions.create(**kwargs)
    choice = resp.choices[0]
    if choice.finish_reason == "length":
        log.warning("LLM response truncated at %d tokens", max_tokens)
    return choice.message.content or ""
