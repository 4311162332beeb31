"""Translator adapter used by the pipeline."""

from __future__ import annotations

from glassinterp.common import get_logger
from glassinterp.errors import TranslationError
from glassinterp.translation.providers import TranslationProvider


class Translator:
    """Stateless translation adapter.

    Trivial input short-circuits to an empty string without calling the
    provider. A provider failure never propagates: the original text comes
    back behind an error marker so live captions keep flowing.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        min_chars: int = 2,
        error_marker: str = "[Error]",
    ) -> None:
        self._provider = provider
        self.min_chars = min_chars
        self.error_marker = error_marker
        self.logger = get_logger("translator")

    @property
    def provider(self) -> TranslationProvider:
        return self._provider

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        if not text or len(text) < self.min_chars:
            return ""

        try:
            translated = await self._provider.translate(text, source_language, target_language)
            if not translated or not translated.strip():
                raise TranslationError("Provider returned an empty translation")
            return translated
        except Exception as e:
            self.logger.error(
                "translation_failed",
                error=str(e),
                source=source_language,
                target=target_language,
            )
            return f"{self.error_marker} {text}"
