"""Tour categories and special labels."""

import logging
import re
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.taxonomy import (
    DEFAULT_LABEL_BACKGROUND,
    DEFAULT_LABEL_TEXT,
    SpecialLabel,
    TourCategory,
    tour_category_assignments,
    tour_special_label_assignments,
)
from ..schemas.taxonomy import (
    CreateCategoryRequest,
    CreateLabelRequest,
    UpdateCategoryRequest,
    UpdateLabelRequest,
)

logger = logging.getLogger(__name__)

TaxonomyModel = Union[type[TourCategory], type[SpecialLabel]]


def slugify(value: str) -> str:
    """Lower-case and collapse whitespace runs into single hyphens."""
    return re.sub(r"\s+", "-", value.strip().lower())


class TaxonomyService:
    """Service for categories and special labels."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _next_order(self, model: TaxonomyModel) -> int:
        current = await self.db.scalar(select(func.max(model.order)))
        return (current if current is not None else -1) + 1

    async def _ensure_unique_slug(self, model: TaxonomyModel, slug: str, exclude_id: Optional[UUID] = None) -> None:
        stmt = select(model.id).where(model.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        existing = await self.db.scalar(stmt)
        if existing is not None:
            raise ConflictError(
                detail=f"Slug '{slug}' is already in use",
                conflicting_resource={"id": str(existing), "slug": slug},
            )

    @staticmethod
    def _clean_slug(raw: Optional[str], fallback: str) -> str:
        slug = slugify(raw or fallback)
        if not slug:
            raise ValidationError(detail="Slug cannot be empty")
        return slug

    # Categories

    async def list_categories(self) -> list[TourCategory]:
        result = await self.db.execute(select(TourCategory).order_by(TourCategory.order, TourCategory.name))
        return list(result.scalars().all())

    async def get_category_or_raise(self, category_id: UUID) -> TourCategory:
        category = await self.db.get(TourCategory, category_id)
        if category is None:
            raise NotFoundError(resource_type="category", resource_id=str(category_id))
        return category

    async def create_category(self, request: CreateCategoryRequest) -> TourCategory:
        """
        Create a category at the end of the list.

        Raises:
            ConflictError: If the slug is taken
        """
        slug = self._clean_slug(request.slug, request.name)
        await self._ensure_unique_slug(TourCategory, slug)

        category = TourCategory(
            name=request.name.strip(),
            slug=slug,
            description=request.description,
            icon=request.icon,
            order=await self._next_order(TourCategory),
        )
        self.db.add(category)
        await self.db.commit()
        await self.db.refresh(category)

        logger.info("Category created", extra={"category_id": str(category.id), "slug": slug})
        return category

    async def update_category(self, category_id: UUID, request: UpdateCategoryRequest) -> TourCategory:
        category = await self.get_category_or_raise(category_id)
        changes = {
            k: v for k, v in request.model_dump(exclude_unset=True).items()
            if v is not None or k in ("description", "icon")
        }
        if "slug" in changes:
            changes["slug"] = self._clean_slug(changes["slug"], category.name)
            await self._ensure_unique_slug(TourCategory, changes["slug"], exclude_id=category_id)
        for field, value in changes.items():
            setattr(category, field, value)

        await self.db.commit()
        await self.db.refresh(category)
        logger.info("Category updated", extra={"category_id": str(category_id), "fields": sorted(changes)})
        return category

    async def delete_category(self, category_id: UUID) -> None:
        await self.get_category_or_raise(category_id)
        await self.db.execute(
            delete(tour_category_assignments).where(tour_category_assignments.c.category_id == category_id)
        )
        await self.db.execute(delete(TourCategory).where(TourCategory.id == category_id))
        await self.db.commit()
        self.db.expire_all()
        logger.info("Category deleted", extra={"category_id": str(category_id)})

    # Special labels

    async def list_labels(self) -> list[SpecialLabel]:
        result = await self.db.execute(select(SpecialLabel).order_by(SpecialLabel.order, SpecialLabel.name))
        return list(result.scalars().all())

    async def get_label_or_raise(self, label_id: UUID) -> SpecialLabel:
        label = await self.db.get(SpecialLabel, label_id)
        if label is None:
            raise NotFoundError(resource_type="special label", resource_id=str(label_id))
        return label

    async def create_label(self, request: CreateLabelRequest) -> SpecialLabel:
        """
        Create a special label at the end of the list.

        Raises:
            ConflictError: If the slug is taken
        """
        slug = self._clean_slug(request.slug, request.name)
        await self._ensure_unique_slug(SpecialLabel, slug)

        label = SpecialLabel(
            name=request.name.strip(),
            slug=slug,
            background_color=request.background_color or DEFAULT_LABEL_BACKGROUND,
            text_color=request.text_color or DEFAULT_LABEL_TEXT,
            order=await self._next_order(SpecialLabel),
        )
        self.db.add(label)
        await self.db.commit()
        await self.db.refresh(label)

        logger.info("Special label created", extra={"label_id": str(label.id), "slug": slug})
        return label

    async def update_label(self, label_id: UUID, request: UpdateLabelRequest) -> SpecialLabel:
        label = await self.get_label_or_raise(label_id)
        changes = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}
        if "slug" in changes:
            changes["slug"] = self._clean_slug(changes["slug"], label.name)
            await self._ensure_unique_slug(SpecialLabel, changes["slug"], exclude_id=label_id)
        for field, value in changes.items():
            setattr(label, field, value)

        await self.db.commit()
        await self.db.refresh(label)
        logger.info("Special label updated", extra={"label_id": str(label_id), "fields": sorted(changes)})
        return label

    async def delete_label(self, label_id: UUID) -> None:
        await self.get_label_or_raise(label_id)
        await self.db.execute(
            delete(tour_special_label_assignments).where(tour_special_label_assignments.c.label_id == label_id)
        )
        await self.db.execute(delete(SpecialLabel).where(SpecialLabel.id == label_id))
        await self.db.commit()
        self.db.expire_all()
        logger.info("Special label deleted", extra={"label_id": str(label_id)})
