"""
LLM provider abstractions.

Scoring code talks to generative models through a single method,
:meth:`LLMProvider.complete`, which takes a text prompt and returns the
model's text completion.  Concrete implementations are provided for
Google Gemini (``google-generativeai``) and OpenAI (``openai``); either
can serve as the primary or the secondary tier of the scoring chain
without touching scoring logic.

Providers raise :class:`ProviderError` for anything that goes wrong on
the wire (network errors, timeouts, empty responses).  They do not
parse or validate the completion; that is the scorer's job.

The default Gemini model is ``gemini-1.5-pro`` and the default OpenAI
model is ``gpt-4o-mini``.  Set ``GEMINI_MODEL`` / ``OPENAI_MODEL`` (or
the config file) to use a different model.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..config import EngineConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert influencer marketing analyst. Analyze the match between "
    "a creator and a campaign, providing scores and insights. "
    "Always respond with valid JSON only."
)


class ProviderError(RuntimeError):
    """Raised when a provider call fails."""


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name = "provider"

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Return the model's completion for ``prompt``.

        Raises:
            ProviderError: On any transport or provider-side failure.
        """
        raise NotImplementedError


class GeminiProvider(LLMProvider):
    """Provider that uses Google Generative AI (Gemini) via google-generativeai."""

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-pro",
        *,
        timeout: float = 20.0,
        temperature: float = 0.3,
    ) -> None:
        try:
            import google.generativeai as genai  # type: ignore
        except ImportError as exc:
            raise RuntimeError(
                "google-generativeai package is required for GeminiProvider. Install it via pip."
            ) from exc
        if not api_key:
            raise ValueError("GEMINI_API_KEY/GOOGLE_API_KEY not provided")
        self.genai = genai
        self.model_name = model
        self.timeout = timeout
        self.temperature = temperature
        self.genai.configure(api_key=api_key)
        try:
            self.model = self.genai.GenerativeModel(self.model_name)
        except Exception as exc:  # noqa: BLE001
            raise RuntimeError(f"Failed to load Gemini model {self.model_name}: {exc}") from exc

    def complete(self, prompt: str) -> str:
        logger.debug("Sending prompt to Gemini: %s", prompt[:200])
        try:
            response = self.model.generate_content(
                prompt,
                generation_config={
                    "response_mime_type": "application/json",
                    "temperature": self.temperature,
                },
                request_options={"timeout": self.timeout},
            )
            content = response.text
        except Exception as exc:  # noqa: BLE001
            raise ProviderError(f"Gemini API call failed: {exc}") from exc
        if not content:
            raise ProviderError("Gemini returned an empty response")
        return content


class OpenAIProvider(LLMProvider):
    """Provider that uses the OpenAI chat completions API."""

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        *,
        timeout: float = 20.0,
        temperature: float = 0.3,
    ) -> None:
        try:
            import openai  # type: ignore
        except ImportError as exc:
            raise RuntimeError(
                "openai package is required for OpenAIProvider. Install it via pip."
            ) from exc
        if not api_key:
            raise ValueError("OPENAI_API_KEY not provided")
        self.model = model
        self.temperature = temperature
        self.client = openai.OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def complete(self, prompt: str) -> str:
        logger.debug("Sending prompt to OpenAI: %s", prompt[:200])
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content
        except Exception as exc:  # noqa: BLE001
            raise ProviderError(f"OpenAI API call failed: {exc}") from exc
        if not content:
            raise ProviderError("OpenAI returned an empty response")
        return content


def build_provider(name: Optional[str], config: EngineConfig) -> Optional[LLMProvider]:
    """Return a configured provider for ``name`` or ``None``.

    ``name`` is ``"gemini"``, ``"openai"`` or ``"none"``.  A provider that
    cannot be initialised (missing API key or package) is logged and
    reported as absent, so the scoring chain simply has one tier fewer.
    """
    pref = (name or "none").lower()
    try:
        if pref == "gemini":
            return GeminiProvider(
                config.gemini_api_key,
                config.gemini_model,
                timeout=config.provider_timeout,
                temperature=config.temperature,
            )
        if pref == "openai":
            return OpenAIProvider(
                config.openai_api_key,
                config.openai_model,
                timeout=config.provider_timeout,
                temperature=config.temperature,
            )
    except (RuntimeError, ValueError) as exc:
        logger.warning("Provider %s unavailable: %s", pref, exc)
        return None
    if pref != "none":
        logger.warning("Unknown provider '%s'; skipping tier", name)
    return None
