"""Translated UI strings."""

import logging
import re
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.i18n import DEFAULT_LANGUAGE, LANGUAGES
from ..models.ui_translation import LANGUAGE_COLUMNS, UITranslation
from ..schemas.ui_translation import (
    BulkUpdateUITranslationsRequest,
    CreateUITranslationRequest,
    UITranslation as UITranslationView,
    UpdateUITranslationRequest,
)

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    """Lower-case and replace whitespace runs with underscores."""
    return re.sub(r"\s+", "_", key.strip().lower())


def build_ui_translation(row: UITranslation) -> UITranslationView:
    values = {language: row.value_for(language) for language in LANGUAGES}
    return UITranslationView(
        row_id=row.id,
        translation_key=row.translation_key,
        category=row.category,
        updated_at=row.updated_at,
        **values,
    )


class UITranslationService:
    """Service for UI translation rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_translations(self, category: Optional[str] = None) -> list[UITranslation]:
        stmt = select(UITranslation)
        if category:
            stmt = stmt.where(UITranslation.category == category)
        stmt = stmt.order_by(UITranslation.category, UITranslation.translation_key)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_dictionary(self, lang: str) -> dict[str, str]:
        """Every key in `lang`, using the English value where a translation is missing."""
        result = await self.db.execute(select(UITranslation))
        dictionary = {}
        for row in result.scalars().all():
            value = row.value_for(lang) if lang in LANGUAGE_COLUMNS else None
            dictionary[row.translation_key] = value or row.value_for(DEFAULT_LANGUAGE)
        return dictionary

    async def get_or_raise(self, row_id: UUID) -> UITranslation:
        row = await self.db.get(UITranslation, row_id)
        if row is None:
            raise NotFoundError(resource_type="translation", resource_id=str(row_id))
        return row

    async def _ensure_unique_key(self, key: str, exclude_id: Optional[UUID] = None) -> None:
        stmt = select(UITranslation.id).where(UITranslation.translation_key == key)
        if exclude_id is not None:
            stmt = stmt.where(UITranslation.id != exclude_id)
        existing = await self.db.scalar(stmt)
        if existing is not None:
            raise ConflictError(
                detail=f"Translation key '{key}' already exists",
                conflicting_resource={"id": str(existing), "translationKey": key},
            )

    def _apply(self, row: UITranslation, values: dict[str, Any]) -> None:
        for language, column in LANGUAGE_COLUMNS.items():
            if language not in values:
                continue
            value = values[language]
            if language == DEFAULT_LANGUAGE and not value:
                raise ValidationError(detail="The English value is required")
            setattr(row, column, value or None)

    async def create_translation(self, request: CreateUITranslationRequest) -> UITranslation:
        """
        Create a translation row.

        Raises:
            ConflictError: If the normalized key already exists
        """
        key = normalize_key(request.translation_key)
        if not key:
            raise ValidationError(detail="Translation key cannot be empty")
        await self._ensure_unique_key(key)

        row = UITranslation(translation_key=key, category=request.category.strip(), en=request.en)
        self._apply(row, request.model_dump(include=set(LANGUAGES)))
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)

        logger.info("UI translation created", extra={"key": key, "category": row.category})
        return row

    async def _update_row(self, row: UITranslation, request: UpdateUITranslationRequest) -> None:
        changes = request.model_dump(exclude_unset=True)
        if changes.get("translation_key"):
            key = normalize_key(changes["translation_key"])
            await self._ensure_unique_key(key, exclude_id=row.id)
            row.translation_key = key
        if changes.get("category"):
            row.category = changes["category"].strip()
        self._apply(row, {k: v for k, v in changes.items() if k in LANGUAGE_COLUMNS})

    async def update_translation(self, row_id: UUID, request: UpdateUITranslationRequest) -> UITranslation:
        row = await self.get_or_raise(row_id)
        await self._update_row(row, request)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("UI translation updated", extra={"key": row.translation_key})
        return row

    async def bulk_update(self, request: BulkUpdateUITranslationsRequest) -> list[UITranslation]:
        """Apply several row updates in one transaction."""
        rows = []
        for item in request.items:
            row = await self.get_or_raise(item.row_id)
            await self._update_row(row, item)
            rows.append(row)
        await self.db.commit()
        for row in rows:
            await self.db.refresh(row)
        logger.info("UI translations bulk updated", extra={"count": len(rows)})
        return rows

    async def delete_translation(self, row_id: UUID) -> None:
        row = await self.get_or_raise(row_id)
        key = row.translation_key
        await self.db.delete(row)
        await self.db.commit()
        logger.info("UI translation deleted", extra={"key": key})
