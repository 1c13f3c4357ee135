"""Clients for the generative text service.

Two interchangeable services expose the same `generate_text` call:

- `GeminiService` (google-generativeai), the default.
- `OpenAIService` (Chat Completions over `requests`).

Every call is a single request. Callers decide what to do with a failure;
nothing here retries.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol

import requests
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_API_KEY = "GEMINI_API_KEY"
ENV_OPENAI_API_KEY = "OPENAI_API_KEY"
ENV_PROVIDER = "PLANNER_LLM_PROVIDER"
ENV_MODEL = "PLANNER_MODEL"

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_OPENAI_MODEL = "gpt-4.1"

_OPENAI_URL = "https://api.openai.com/v1/chat/completions"
_REQUEST_TIMEOUT = 300  # seconds


class TextGenerator(Protocol):
    """Anything that turns a prompt into response text."""

    def generate_text(
        self,
        prompt: str,
        *,
        response_mime_type: str | None = None,
        temperature: float | None = None,
    ) -> str: ...


# Lazy import for google-generativeai - only loaded when GeminiClient is used
genai = None


def _ensure_google_imports() -> None:
    global genai
    if genai is None:
        import google.generativeai as _genai

        genai = _genai


class GeminiClient:
    """Wrapper for google-generativeai client."""

    def __init__(self, api_key: str, model: str) -> None:
        _ensure_google_imports()
        genai.configure(api_key=api_key)
        self._model = genai.GenerativeModel(model)

    def generate_text(
        self,
        prompt: str,
        *,
        response_mime_type: str | None = None,
        temperature: float | None = None,
    ) -> str:
        """Generate text using google-generativeai."""
        generation_config: dict[str, Any] = {}
        if temperature is not None:
            generation_config["temperature"] = temperature
        if response_mime_type:
            generation_config["response_mime_type"] = response_mime_type

        response = self._model.generate_content(
            prompt,
            generation_config=generation_config if generation_config else None,
            request_options={"timeout": _REQUEST_TIMEOUT},
        )

        # Handle cases where response might be filtered or blocked
        if not response.candidates or not response.candidates[0].content:
            finish_reason = response.candidates[0].finish_reason if response.candidates else "unknown"
            raise ValueError(
                f"Gemini response was filtered or blocked. Finish reason: {finish_reason}."
            )

        try:
            return response.text
        except ValueError as e:
            # If text accessor fails, try to get text from parts
            if response.candidates[0].content.parts:
                return "".join(
                    part.text
                    for part in response.candidates[0].content.parts
                    if hasattr(part, "text")
                )
            raise ValueError(
                f"Gemini response has no text content. "
                f"Finish reason: {response.candidates[0].finish_reason}. "
                f"Original error: {e}"
            ) from e


@dataclass
class GeminiConfig:
    """Runtime configuration for the Gemini client."""

    api_key: str
    model: str = DEFAULT_GEMINI_MODEL


class GeminiService:
    """Small, reusable wrapper around the Gemini client.

    Centralises how we talk to Gemini so that API keys are always read
    from `.env` and every flow asks for JSON in the same way.
    """

    def __init__(self, config: GeminiConfig) -> None:
        self._config = config
        self._client = GeminiClient(api_key=config.api_key, model=config.model)

    @property
    def config(self) -> GeminiConfig:
        return self._config

    def generate_text(
        self,
        prompt: str,
        *,
        response_mime_type: str | None = None,
        temperature: float | None = None,
    ) -> str:
        """Generate a single text response from Gemini.

        Parameters:
        - `response_mime_type`: e.g. "application/json" for structured output.
        - `temperature`: use `0.0` for deterministic structured output.
        """
        logger.debug("Gemini request (%d chars, model=%s)", len(prompt), self._config.model)
        return self._client.generate_text(
            prompt,
            response_mime_type=response_mime_type,
            temperature=temperature,
        )


class OpenAIService:
    """Client for OpenAI Chat Completions, one POST per call."""

    def __init__(self, api_key: str, model: str = DEFAULT_OPENAI_MODEL) -> None:
        self._api_key = api_key
        self._model = model

    def generate_text(
        self,
        prompt: str,
        *,
        response_mime_type: str | None = None,
        temperature: float | None = None,
    ) -> str:
        """Call Chat Completions API and return the message content."""
        data: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.0 if temperature is None else temperature,
        }
        if response_mime_type == "application/json":
            data["response_format"] = {"type": "json_object"}

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        logger.debug("OpenAI request (%d chars, model=%s)", len(prompt), self._model)
        resp = requests.post(_OPENAI_URL, headers=headers, json=data, timeout=_REQUEST_TIMEOUT)
        resp.raise_for_status()
        return resp.json()["choices"][0]["message"]["content"]


def load_default_gemini_service() -> GeminiService:
    """Construct a `GeminiService` using configuration from the app `.env`."""
    load_dotenv()
    api_key = os.getenv(ENV_API_KEY)
    if not api_key:
        msg = f"Environment variable {ENV_API_KEY} is required for Gemini access."
        raise RuntimeError(msg)
    return GeminiService(GeminiConfig(api_key=api_key, model=os.getenv(ENV_MODEL, DEFAULT_GEMINI_MODEL)))


def load_default_openai_service() -> OpenAIService:
    """Construct an `OpenAIService` from `OPENAI_API_KEY`."""
    load_dotenv()
    api_key = os.getenv(ENV_OPENAI_API_KEY)
    if not api_key:
        raise RuntimeError(f"{ENV_OPENAI_API_KEY} is required.")
    return OpenAIService(api_key=api_key, model=os.getenv(ENV_MODEL, DEFAULT_OPENAI_MODEL))


def load_default_service() -> TextGenerator:
    """Construct the service named by `PLANNER_LLM_PROVIDER` (gemini or openai)."""
    load_dotenv()
    provider = os.getenv(ENV_PROVIDER, "gemini").strip().lower()
    if provider == "openai":
        return load_default_openai_service()
    if provider != "gemini":
        raise RuntimeError(f"Unknown {ENV_PROVIDER} '{provider}', expected 'gemini' or 'openai'.")
    return load_default_gemini_service()
