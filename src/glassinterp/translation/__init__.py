"""Text translation for finalized utterances."""

from glassinterp.translation.providers import (
    GatewayTranslationProvider,
    MockTranslationProvider,
    OpenAICompatibleTranslationProvider,
    TranslationProvider,
)
from glassinterp.translation.translator import Translator

__all__ = [
    "GatewayTranslationProvider",
    "MockTranslationProvider",
    "OpenAICompatibleTranslationProvider",
    "TranslationProvider",
    "Translator",
]
