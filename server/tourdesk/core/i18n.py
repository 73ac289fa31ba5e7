"""Supported content languages and translation fallback rules."""

from typing import Iterable, Optional, Protocol, TypeVar

LANGUAGES: tuple[str, ...] = ("en", "zh", "ru", "ko", "ja", "fr", "it", "es", "id")
DEFAULT_LANGUAGE = "en"

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "zh": "Chinese (Simplified)",
    "ru": "Russian",
    "ko": "Korean",
    "ja": "Japanese",
    "fr": "French",
    "it": "Italian",
    "es": "Spanish",
    "id": "Indonesian",
}


class _HasLanguage(Protocol):
    language: str


T = TypeVar("T", bound=_HasLanguage)


def is_valid_language(code: Optional[str]) -> bool:
    return code in LANGUAGES


def normalize_language(code: Optional[str]) -> str:
    """Return `code` if supported, else the default language."""
    if code and code.lower() in LANGUAGES:
        return code.lower()
    return DEFAULT_LANGUAGE


def resolve_translation(
    translations: Iterable[T],
    lang: str,
    fallback: str = DEFAULT_LANGUAGE,
) -> Optional[T]:
    """
    Pick the translation to display for `lang`.

    Order: exact language, then the fallback language, then whatever
    translation exists first. Returns None when there are no translations.
    """
    items = list(translations)
    if not items:
        return None

    for item in items:
        if item.language == lang:
            return item

    for item in items:
        if item.language == fallback:
            return item

    return items[0]
