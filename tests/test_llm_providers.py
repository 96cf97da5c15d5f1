"""
Tests for the LLM provider wrappers.

Providers are constructed with dummy keys (no request is made at
construction time) and their API clients are replaced with fakes, so
these tests never touch the network.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from matchflow.config import EngineConfig
from matchflow.score.llm_providers import (
    SYSTEM_PROMPT,
    GeminiProvider,
    OpenAIProvider,
    ProviderError,
    build_provider,
)


class _FakeCompletions:
    def __init__(self, content=None, error=None) -> None:
        self.content = content
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai(completions: _FakeCompletions) -> OpenAIProvider:
    provider = OpenAIProvider("sk-test", "gpt-4o-mini", timeout=3)
    provider.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return provider


def test_build_provider_without_keys_returns_none() -> None:
    config = EngineConfig()
    assert build_provider("gemini", config) is None
    assert build_provider("openai", config) is None


def test_build_provider_none_and_unknown() -> None:
    config = EngineConfig(openai_api_key="sk-test")
    assert build_provider("none", config) is None
    assert build_provider(None, config) is None
    assert build_provider("claude", config) is None


def test_build_provider_openai_with_key() -> None:
    provider = build_provider("OpenAI", EngineConfig(openai_api_key="sk-test", openai_model="gpt-4o"))
    assert isinstance(provider, OpenAIProvider)
    assert provider.model == "gpt-4o"


def test_openai_request_shape() -> None:
    completions = _FakeCompletions(content='{"nicheMatch": 80}')
    assert _openai(completions).complete("score this") == '{"nicheMatch": 80}'
    assert completions.kwargs["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert completions.kwargs["messages"][1]["content"] == "score this"
    assert completions.kwargs["response_format"] == {"type": "json_object"}
    assert completions.kwargs["temperature"] == 0.3


def test_openai_errors_become_provider_errors() -> None:
    with pytest.raises(ProviderError):
        _openai(_FakeCompletions(error=ConnectionError("reset"))).complete("x")
    with pytest.raises(ProviderError):
        _openai(_FakeCompletions(content="")).complete("x")


def test_gemini_request_shape_and_errors() -> None:
    calls = []

    class FakeModel:
        def __init__(self, text=None, error=None) -> None:
            self.text = text
            self.error = error

        def generate_content(self, prompt, **kwargs):
            calls.append((prompt, kwargs))
            if self.error:
                raise self.error
            return SimpleNamespace(text=self.text)

    provider = GeminiProvider("g-test", timeout=4)
    provider.model = FakeModel(text='{"nicheMatch": 70}')
    assert provider.complete("score this") == '{"nicheMatch": 70}'
    prompt, kwargs = calls[0]
    assert prompt == "score this"
    assert kwargs["generation_config"]["response_mime_type"] == "application/json"
    assert kwargs["request_options"] == {"timeout": 4}

    provider.model = FakeModel(error=TimeoutError("deadline exceeded"))
    with pytest.raises(ProviderError):
        provider.complete("x")
    provider.model = FakeModel(text="")
    with pytest.raises(ProviderError):
        provider.complete("x")
