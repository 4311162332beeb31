"""Translation providers."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from glassinterp.common import get_logger
from glassinterp.errors import TranslationError

TRANSLATION_PROMPT = """Role: Professional Translator.
Task: Translate the following text from {source} to {target}.
Source Text: "{text}"

Rules:
1. Output ONLY the translated text.
2. Do not include notes, markdown code blocks, or explanations.
3. Maintain the original tone and style."""


class TranslationProvider:
    """Abstract text translation provider."""

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        """Translate text between two human-readable language names.

        Raises:
            TranslationError: The provider could not produce a translation.
        """
        raise NotImplementedError


class MockTranslationProvider(TranslationProvider):
    """Mock provider tagging the text with its target language."""

    def __init__(self, latency_seconds: float = 0.05) -> None:
        self.latency_seconds = latency_seconds
        self.call_count = 0

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        self.call_count += 1
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)
        return f"[Translated to {target_language}] {text}"


class OpenAICompatibleTranslationProvider(TranslationProvider):
    """Translation via an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self.logger = get_logger("openai_translation_provider")

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": TRANSLATION_PROMPT.format(
                        source=source_language, target=target_language, text=text
                    ),
                }
            ],
            "temperature": self.temperature,
            "stream": False,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.endpoint}/chat/completions",
                    headers=headers,
                    json=payload,
                )
                response.raise_for_status()
                result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TranslationError(f"Translation request failed: {e}") from e

        choice = (result.get("choices") or [{}])[0]
        content = (choice.get("message") or {}).get("content") or ""
        if not content.strip():
            raise TranslationError("Translation response was empty")

        return content.strip()


class GatewayTranslationProvider(TranslationProvider):
    """Translation via the companion app AI gateway (``POST /translate``)."""

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.endpoint}/translate",
                    headers=headers,
                    json={
                        "text": text,
                        "sourceLang": source_language,
                        "targetLang": target_language,
                    },
                )
                response.raise_for_status()
                result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TranslationError(f"Gateway translation failed: {e}") from e

        translated = result.get("translatedText") if isinstance(result, dict) else None
        if not translated:
            raise TranslationError("Gateway response has no translatedText")

        return translated
