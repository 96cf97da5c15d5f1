"""
Engine configuration.

Settings come from an optional YAML file and are then overridden by
environment variables (a local ``.env`` file is loaded first via
python-dotenv).  API keys are only ever read from the environment.

Recognised environment variables:

* ``GEMINI_API_KEY`` / ``GOOGLE_API_KEY`` and ``GEMINI_MODEL``
* ``OPENAI_API_KEY`` and ``OPENAI_MODEL``
* ``MATCHFLOW_PRIMARY_PROVIDER`` / ``MATCHFLOW_SECONDARY_PROVIDER``
  (``gemini``, ``openai`` or ``none``)
* ``MATCHFLOW_PROVIDER_TIMEOUT`` (seconds)
* ``MATCHFLOW_BATCH_CONCURRENCY``
* ``MATCHFLOW_CONCEPT_GRAPH`` (path to a YAML concept graph)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml  # type: ignore
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Values copied from example .env files rather than real keys.
PLACEHOLDER_KEYS = {
    "your_openai_api_key_here",
    "your_gemini_api_key_here",
    "your-key",
    "changeme",
}


@dataclass
class EngineConfig:
    """Runtime settings for scoring and ranking."""

    primary_provider: str = "gemini"
    secondary_provider: str = "openai"
    gemini_model: str = "gemini-1.5-pro"
    openai_model: str = "gpt-4o-mini"
    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    provider_timeout: float = 20.0
    temperature: float = 0.3
    batch_concurrency: int = 5
    concept_graph: Optional[str] = None
    extend_concept_graph: bool = True
    page_size: int = 50
    top_matches_limit: int = 10

    def __post_init__(self) -> None:
        if self.provider_timeout <= 0:
            raise ValueError(f"provider_timeout must be positive, got {self.provider_timeout}")
        if self.batch_concurrency < 1:
            raise ValueError(f"batch_concurrency must be at least 1, got {self.batch_concurrency}")
        if self.page_size < 1 or self.top_matches_limit < 0:
            raise ValueError("page_size must be >= 1 and top_matches_limit >= 0")


def _api_key(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value and value.strip() and value.strip() not in PLACEHOLDER_KEYS:
            return value.strip()
    return None


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {
        "gemini_api_key": _api_key("GEMINI_API_KEY", "GOOGLE_API_KEY"),
        "openai_api_key": _api_key("OPENAI_API_KEY"),
    }
    string_vars = {
        "GEMINI_MODEL": "gemini_model",
        "OPENAI_MODEL": "openai_model",
        "MATCHFLOW_PRIMARY_PROVIDER": "primary_provider",
        "MATCHFLOW_SECONDARY_PROVIDER": "secondary_provider",
        "MATCHFLOW_CONCEPT_GRAPH": "concept_graph",
    }
    for env_name, attr in string_vars.items():
        value = os.getenv(env_name)
        if value:
            overrides[attr] = value
    timeout = os.getenv("MATCHFLOW_PROVIDER_TIMEOUT")
    if timeout:
        overrides["provider_timeout"] = float(timeout)
    concurrency = os.getenv("MATCHFLOW_BATCH_CONCURRENCY")
    if concurrency:
        overrides["batch_concurrency"] = int(concurrency)
    return overrides


def load_config(config_path: Optional[str] = None, *, use_env: bool = True) -> EngineConfig:
    """Build an :class:`EngineConfig` from YAML and the environment.

    Args:
        config_path: Optional YAML file whose top-level keys match the
            :class:`EngineConfig` fields.  Unknown keys are ignored with a
            warning.
        use_env: Apply ``.env`` and environment overrides.

    Returns:
        The resolved configuration.
    """
    values: Dict[str, Any] = {}
    if config_path:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        known = {f.name for f in fields(EngineConfig)}
        for key, value in data.items():
            if key.endswith("_api_key"):
                logger.warning("Ignoring %s in %s; API keys are read from the environment", key, config_path)
            elif key in known:
                values[key] = value
            else:
                logger.warning("Ignoring unknown config key '%s' in %s", key, config_path)
    if use_env:
        load_dotenv()
        for key, value in _env_overrides().items():
            if value is not None:
                values[key] = value
    return EngineConfig(**values)
