"""Tests for YAML and environment configuration loading."""

from __future__ import annotations

import pytest

from matchflow.config import EngineConfig, load_config

_ENV_VARS = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "OPENAI_API_KEY",
    "GEMINI_MODEL",
    "OPENAI_MODEL",
    "MATCHFLOW_PRIMARY_PROVIDER",
    "MATCHFLOW_SECONDARY_PROVIDER",
    "MATCHFLOW_CONCEPT_GRAPH",
    "MATCHFLOW_PROVIDER_TIMEOUT",
    "MATCHFLOW_BATCH_CONCURRENCY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.setattr("matchflow.config.load_dotenv", lambda *a, **k: False)


def test_defaults() -> None:
    config = load_config()
    assert config == EngineConfig()
    assert config.primary_provider == "gemini"
    assert config.secondary_provider == "openai"
    assert config.gemini_api_key is None


def test_yaml_values(tmp_path) -> None:
    path = tmp_path / "matchflow.yaml"
    path.write_text(
        "primary_provider: openai\nsecondary_provider: none\nprovider_timeout: 5\npage_size: 20\n",
        encoding="utf-8",
    )
    config = load_config(str(path))
    assert config.primary_provider == "openai"
    assert config.secondary_provider == "none"
    assert config.provider_timeout == 5
    assert config.page_size == 20


def test_yaml_ignores_api_keys_and_unknown_keys(tmp_path, caplog) -> None:
    path = tmp_path / "matchflow.yaml"
    path.write_text("openai_api_key: sk-in-file\ncolour: blue\n", encoding="utf-8")
    with caplog.at_level("WARNING", logger="matchflow.config"):
        config = load_config(str(path))
    assert config.openai_api_key is None
    assert "openai_api_key" in caplog.text
    assert "colour" in caplog.text


def test_yaml_must_be_mapping(tmp_path) -> None:
    path = tmp_path / "matchflow.yaml"
    path.write_text("- gemini\n- openai\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_environment_overrides_yaml(tmp_path, monkeypatch) -> None:
    path = tmp_path / "matchflow.yaml"
    path.write_text("batch_concurrency: 2\nopenai_model: gpt-4o\n", encoding="utf-8")
    monkeypatch.setenv("MATCHFLOW_BATCH_CONCURRENCY", "8")
    monkeypatch.setenv("MATCHFLOW_PROVIDER_TIMEOUT", "7.5")
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    monkeypatch.setenv("OPENAI_API_KEY", " sk-real ")
    config = load_config(str(path))
    assert config.batch_concurrency == 8
    assert config.provider_timeout == 7.5
    assert config.openai_model == "gpt-4o"
    assert config.gemini_api_key == "g-key"
    assert config.openai_api_key == "sk-real"


def test_placeholder_keys_are_treated_as_missing(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "your_openai_api_key_here")
    monkeypatch.setenv("GEMINI_API_KEY", "  ")
    config = load_config()
    assert config.openai_api_key is None
    assert config.gemini_api_key is None


def test_use_env_false_skips_environment(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-real")
    assert load_config(use_env=False).openai_api_key is None


@pytest.mark.parametrize(
    "kwargs",
    [{"provider_timeout": 0}, {"batch_concurrency": 0}, {"page_size": 0}, {"top_matches_limit": -1}],
)
def test_invalid_values(kwargs) -> None:
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)
