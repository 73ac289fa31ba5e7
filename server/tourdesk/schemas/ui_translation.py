"""UI string translation schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from .common import CamelModel


class LanguageValues(CamelModel):
    """One optional value per supported language; `id` is Indonesian."""

    en: Optional[str] = None
    zh: Optional[str] = None
    ru: Optional[str] = None
    ko: Optional[str] = None
    ja: Optional[str] = None
    fr: Optional[str] = None
    it: Optional[str] = None
    es: Optional[str] = None
    id: Optional[str] = None


class UITranslation(LanguageValues):
    """UI translation response schema; the row id is `rowId` to keep `id` for Indonesian."""

    row_id: UUID
    translation_key: str
    category: str
    en: str
    updated_at: datetime


class CreateUITranslationRequest(LanguageValues):
    translation_key: str = Field(..., min_length=1, max_length=255)
    category: str = Field("general", min_length=1, max_length=64)
    en: str = Field(..., min_length=1)


class UpdateUITranslationRequest(LanguageValues):
    translation_key: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=64)


class BulkUpdateItem(UpdateUITranslationRequest):
    row_id: UUID


class BulkUpdateUITranslationsRequest(CamelModel):
    items: list[BulkUpdateItem] = Field(..., min_length=1)


class UIDictionary(CamelModel):
    language: str
    translations: dict[str, str]
