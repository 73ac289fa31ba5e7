"""Static content pages."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.i18n import DEFAULT_LANGUAGE, is_valid_language, resolve_translation
from ..models.page import StaticPage, StaticPageStatus, StaticPageTranslation
from ..schemas.page import (
    CreatePageRequest,
    PageTitle,
    PublicPage,
    UpdatePageRequest,
    UpsertPageTranslationRequest,
)

logger = logging.getLogger(__name__)


class PageService:
    """Service for static page operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _reload(self, page_id: UUID) -> StaticPage:
        self.db.expire_all()
        result = await self.db.execute(select(StaticPage).where(StaticPage.id == page_id))
        return result.scalar_one()

    async def get_page_by_slug(self, slug: str) -> Optional[StaticPage]:
        result = await self.db.execute(select(StaticPage).where(StaticPage.slug == slug))
        return result.scalar_one_or_none()

    async def get_page_or_raise(self, page_id: UUID) -> StaticPage:
        result = await self.db.execute(select(StaticPage).where(StaticPage.id == page_id))
        page = result.scalar_one_or_none()
        if page is None:
            raise NotFoundError(resource_type="page", resource_id=str(page_id))
        return page

    async def get_public_page(self, slug: str, lang: str) -> PublicPage:
        """
        Published page in `lang`, falling back to English.

        Raises:
            NotFoundError: If no published page has this slug or it has no translation
        """
        page = await self.get_page_by_slug(slug)
        if page is None or page.status != StaticPageStatus.PUBLISHED:
            raise NotFoundError(resource_type="page", resource_id=slug)

        translation = resolve_translation(page.translations, lang)
        if translation is None:
            logger.warning("Published page has no translations", extra={"slug": slug})
            raise NotFoundError(resource_type="page", resource_id=slug)

        return PublicPage(
            id=page.id,
            slug=page.slug,
            page_type=page.page_type,
            icon=page.icon,
            language=translation.language,
            title=translation.title,
            content=translation.content or {},
            meta_title=translation.meta_title,
            meta_description=translation.meta_description,
        )

    async def get_page_titles(self, lang: str) -> list[PageTitle]:
        """Navigation entries for published pages, in display order."""
        result = await self.db.execute(
            select(StaticPage)
            .where(StaticPage.status == StaticPageStatus.PUBLISHED.value)
            .order_by(StaticPage.order, StaticPage.slug)
        )
        titles = []
        for page in result.scalars().all():
            translation = resolve_translation(page.translations, lang)
            titles.append(PageTitle(slug=page.slug, title=translation.title if translation else page.slug, icon=page.icon))
        return titles

    async def list_pages(self) -> list[StaticPage]:
        result = await self.db.execute(select(StaticPage).order_by(StaticPage.order, StaticPage.slug))
        return list(result.scalars().all())

    async def create_page(self, request: CreatePageRequest) -> StaticPage:
        """
        Create a draft page with an English translation.

        Raises:
            ConflictError: If the slug is taken
        """
        existing = await self.get_page_by_slug(request.slug)
        if existing:
            raise ConflictError(
                detail=f"Page with slug '{request.slug}' already exists",
                conflicting_resource={"id": str(existing.id), "slug": existing.slug},
            )

        max_order = await self.db.scalar(select(func.max(StaticPage.order)))
        page = StaticPage(
            slug=request.slug,
            status=StaticPageStatus.DRAFT.value,
            page_type=request.page_type.value,
            icon=request.icon,
            order=(max_order if max_order is not None else -1) + 1,
            translations=[
                StaticPageTranslation(language=DEFAULT_LANGUAGE, title=request.title, content={})
            ],
        )
        self.db.add(page)
        await self.db.commit()
        page_id = page.id

        logger.info("Page created", extra={"page_id": str(page_id), "slug": request.slug})
        return await self._reload(page_id)

    async def update_page(self, page_id: UUID, request: UpdatePageRequest) -> StaticPage:
        page = await self.get_page_or_raise(page_id)
        changes = request.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field != "icon":
                continue
            setattr(page, field, value.value if hasattr(value, "value") else value)

        await self.db.commit()
        logger.info("Page updated", extra={"page_id": str(page_id), "fields": sorted(changes)})
        return await self._reload(page_id)

    async def upsert_translation(
        self,
        page_id: UUID,
        language: str,
        request: UpsertPageTranslationRequest,
    ) -> StaticPage:
        """
        Create or replace one language of a page.

        Raises:
            ValidationError: If the language is not supported
        """
        if not is_valid_language(language):
            raise ValidationError(detail=f"Unsupported language '{language}'")

        page = await self.get_page_or_raise(page_id)
        translation = next((t for t in page.translations if t.language == language), None)
        if translation is None:
            page.translations.append(
                StaticPageTranslation(
                    language=language,
                    title=request.title,
                    content=dict(request.content),
                    meta_title=request.meta_title,
                    meta_description=request.meta_description,
                )
            )
        else:
            translation.title = request.title
            translation.content = dict(request.content)
            translation.meta_title = request.meta_title
            translation.meta_description = request.meta_description

        await self.db.commit()
        logger.info("Page translation saved", extra={"page_id": str(page_id), "language": language})
        return await self._reload(page_id)

    async def delete_page(self, page_id: UUID) -> None:
        await self.get_page_or_raise(page_id)
        await self.db.execute(delete(StaticPageTranslation).where(StaticPageTranslation.page_id == page_id))
        await self.db.execute(delete(StaticPage).where(StaticPage.id == page_id))
        await self.db.commit()
        self.db.expire_all()
        logger.info("Page deleted", extra={"page_id": str(page_id)})
