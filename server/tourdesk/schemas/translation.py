"""AI translation schemas."""

from typing import Any, List, Optional, Union
from uuid import UUID

from pydantic import Field, field_validator

from ..core.i18n import DEFAULT_LANGUAGE, LANGUAGES
from .common import CamelModel


def _default_targets() -> List[str]:
    return [language for language in LANGUAGES if language != DEFAULT_LANGUAGE]


class TranslateContentRequest(CamelModel):
    """Translate either a plain text field or a block's JSON content."""

    text: Optional[str] = None
    field_name: Optional[str] = None
    block_id: Optional[UUID] = None
    content: Optional[dict[str, Any]] = None
    target_languages: List[str] = Field(default_factory=_default_targets)
    save_to_database: bool = False

    @field_validator("target_languages")
    @classmethod
    def validate_languages(cls, v: List[str]) -> List[str]:
        unknown = [language for language in v if language not in LANGUAGES]
        if unknown:
            raise ValueError(f"Unsupported languages: {', '.join(unknown)}")
        return v


class TranslateContentResponse(CamelModel):
    success: bool = True
    translations: dict[str, Union[str, dict[str, Any]]]
    translated_languages: List[str]
    saved_to_database: bool


class SourceText(CamelModel):
    key: str = Field(..., min_length=1)
    en: str


class TranslateTextsRequest(CamelModel):
    """Batch of UI strings keyed by translation key."""

    texts: List[SourceText] = Field(..., min_length=1)
    target_languages: List[str] = Field(default_factory=_default_targets)

    @field_validator("target_languages")
    @classmethod
    def validate_languages(cls, v: List[str]) -> List[str]:
        unknown = [language for language in v if language not in LANGUAGES]
        if unknown:
            raise ValueError(f"Unsupported languages: {', '.join(unknown)}")
        return v


class TranslateTextsResponse(CamelModel):
    success: bool = True
    translations: dict[str, dict[str, str]]
