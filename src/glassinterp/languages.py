"""Language name to engine locale mapping."""

from __future__ import annotations

DEFAULT_LANGUAGE_CODE = "en-US"

LANGUAGE_CODES: dict[str, str] = {
    "English": "en-US",
    "Vietnamese": "vi-VN",
    "Spanish": "es-ES",
    "Japanese": "ja-JP",
    "Korean": "ko-KR",
    "Chinese": "zh-CN",
    "French": "fr-FR",
    "German": "de-DE",
}


def get_lang_code(name: str) -> str:
    """Map a human-readable language name to a locale code.

    Unknown names fall back to ``en-US``.
    """
    return LANGUAGE_CODES.get(name, DEFAULT_LANGUAGE_CODE)


def base_language(code: str) -> str:
    """Return the base language of a locale code (``vi-VN`` -> ``vi``)."""
    return code.split("-")[0].lower()


def supported_languages() -> list[str]:
    return list(LANGUAGE_CODES)
