from types import SimpleNamespace

import pytest

from moodtrip.services.llm_client import LLMClient
from moodtrip.services.personalization.exceptions import UpstreamUnavailable


class _FailingCompletions:
    async def create(self, **kwargs):
        raise RuntimeError("rate limited")


class _Messages:
    def __init__(self):
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return SimpleNamespace(content=[SimpleNamespace(text="  from claude  ")])


async def test_unconfigured_client_raises_upstream_unavailable():
    client = LLMClient(openai_api_key="", anthropic_api_key="")

    assert not client.configured
    with pytest.raises(UpstreamUnavailable, match="No LLM provider configured"):
        await client.complete("sys", "hi")


async def test_falls_back_to_anthropic_when_openai_fails():
    client = LLMClient(openai_api_key="", anthropic_api_key="")
    messages = _Messages()
    client._openai = SimpleNamespace(chat=SimpleNamespace(completions=_FailingCompletions()))
    client._anthropic = SimpleNamespace(messages=messages)

    text = await client.complete("sys", "hi", max_tokens=50, temperature=0.3, json_mode=True)

    assert text == "from claude"
    assert messages.kwargs["system"] == "sys"
    assert messages.kwargs["messages"] == [{"role": "user", "content": "hi"}]
    assert messages.kwargs["max_tokens"] == 50


async def test_all_providers_failing_is_reported():
    client = LLMClient(openai_api_key="", anthropic_api_key="")
    client._openai = SimpleNamespace(chat=SimpleNamespace(completions=_FailingCompletions()))

    with pytest.raises(UpstreamUnavailable, match="All LLM providers failed"):
        await client.complete("sys", "hi")
