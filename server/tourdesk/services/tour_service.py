"""Tour service for storefront read operations."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..core.i18n import DEFAULT_LANGUAGE, resolve_translation
from ..models.block import BlockType, TourBlock
from ..models.package import TourPackage
from ..models.taxonomy import TourCategory
from ..models.tour import Tour, TourStatus
from ..models.upsell import Upsell, UpsellStatus
from ..schemas.taxonomy import Category, SpecialLabel
from ..schemas.tour import (
    PackageUpsellView,
    PackageView,
    TourBlockView,
    TourDetail,
    TourSummary,
    UpsellView,
)
from .pricing_service import public_pricing_config

logger = logging.getLogger(__name__)

SECTION_TOGGLES = (
    "description_enabled",
    "images_enabled",
    "packages_enabled",
    "itinerary_enabled",
    "video_enabled",
    "google_reviews_enabled",
    "safety_info_enabled",
    "need_help_enabled",
)


def hero_block(tour: Tour) -> Optional[TourBlock]:
    return next((b for b in tour.blocks if b.block_type == BlockType.HERO), None)


def resolve_tour_title(tour: Tour, lang: str = DEFAULT_LANGUAGE) -> str:
    """Hero block title in `lang` (English fallback), else the slug."""
    block = hero_block(tour)
    if block is not None:
        translation = resolve_translation(block.translations, lang)
        if translation is not None and translation.title:
            return translation.title
    return tour.slug


def tour_sections(tour: Tour) -> dict[str, bool]:
    return {name: getattr(tour, name) for name in SECTION_TOGGLES}


def _resolve_block(block: TourBlock, lang: str) -> TourBlockView:
    translation = resolve_translation(block.translations, lang)
    return TourBlockView(
        id=block.id,
        block_type=block.block_type,
        order=block.order,
        config=block.config or {},
        title=translation.title if translation else None,
        content=(translation.content or {}) if translation else {},
    )


def _resolve_upsell(upsell: Upsell, lang: str) -> UpsellView:
    translation = resolve_translation(upsell.translations, lang)
    return UpsellView(
        id=upsell.id,
        pricing_type=upsell.pricing_type,
        retail_price=upsell.retail_price,
        currency=upsell.currency,
        max_quantity=upsell.max_quantity,
        title=translation.title if translation else "",
        description=translation.description if translation else None,
    )


def _package_view(package: TourPackage) -> PackageView:
    return PackageView(
        id=package.id,
        title=package.title,
        description=package.description,
        pricing_type=package.pricing_type,
        pricing_config=public_pricing_config(package.pricing_config) or {},
        included_items=package.included_items or [],
        calendar_enabled=package.calendar_enabled,
        calendar_config=package.calendar_config or {},
        pickup_enabled=package.pickup_enabled,
        upsells=[
            PackageUpsellView(
                id=u.id,
                title=u.title,
                description=u.description,
                price=u.price,
                pricing_type=u.pricing_type,
            )
            for u in package.upsells
            if u.enabled
        ],
    )


def build_tour_summary(tour: Tour, lang: str) -> TourSummary:
    """Tour card resolved to `lang`."""
    block = hero_block(tour)
    hero = resolve_translation(block.translations, lang) if block else None
    return TourSummary(
        id=tour.id,
        slug=tour.slug,
        tour_number=tour.tour_number,
        title=resolve_tour_title(tour, lang),
        hero_content=(hero.content or {}) if hero else {},
        pricing_engine=tour.pricing_engine,
        pricing=public_pricing_config(tour.pricing.config) if tour.pricing else None,
        hero_background_image=tour.hero_background_image,
        featured_images=tour.featured_images or [],
        tags=tour.tags or [],
        categories=[Category.model_validate(c) for c in tour.categories],
        special_labels=[SpecialLabel.model_validate(label) for label in tour.special_labels],
    )


def build_tour_detail(tour: Tour, lang: str) -> TourDetail:
    """Tour page resolved to `lang`: enabled blocks, active upsells, enabled packages."""
    summary = build_tour_summary(tour, lang)
    return TourDetail(
        **summary.model_dump(),
        meta=tour.meta or {},
        main_media=tour.main_media,
        additional_photos=tour.additional_photos or [],
        video_embed_code=tour.video_embed_code,
        video_section_title=tour.video_section_title,
        google_reviews=tour.google_reviews or [],
        google_rating=tour.google_rating,
        google_review_count=tour.google_review_count,
        itinerary_title=tour.itinerary_title,
        itinerary_images=tour.itinerary_images or [],
        sections=tour_sections(tour),
        blocks=[_resolve_block(b, lang) for b in sorted(tour.blocks, key=lambda b: b.order) if b.enabled],
        upsells=[
            _resolve_upsell(u, lang)
            for u in sorted(tour.upsells, key=lambda u: u.order)
            if u.status == UpsellStatus.ACTIVE
        ],
        packages=[_package_view(p) for p in sorted(tour.packages, key=lambda p: p.order) if p.enabled],
    )


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_tour_by_id(self, tour_id: UUID) -> Optional[Tour]:
        """
        Get tour by ID.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = select(Tour).where(Tour.id == tour_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_slug(self, slug: str) -> Optional[Tour]:
        stmt = select(Tour).where(Tour.slug == slug)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_id_or_raise(self, tour_id: UUID) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id)
        if not tour:
            logger.warning(
                "Tour not found",
                extra={"tour_id": str(tour_id)}
            )
            raise NotFoundError(
                resource_type="tour",
                resource_id=str(tour_id)
            )
        return tour

    async def get_published_tour_or_raise(self, tour_id: UUID) -> Tour:
        tour = await self.get_tour_by_id(tour_id)
        if not tour or tour.status != TourStatus.PUBLISHED:
            raise NotFoundError(resource_type="tour", resource_id=str(tour_id))
        return tour

    async def get_published_tour_by_slug_or_raise(self, slug: str) -> Tour:
        """
        Get a published tour by slug.

        Raises:
            NotFoundError: If the slug is unknown or the tour is not published
        """
        tour = await self.get_tour_by_slug(slug)
        if not tour or tour.status != TourStatus.PUBLISHED:
            logger.info("Published tour not found", extra={"slug": slug})
            raise NotFoundError(resource_type="tour", resource_id=slug)
        return tour

    async def list_published_tours(self, category_slug: Optional[str] = None) -> list[Tour]:
        """Published tours, newest first, optionally limited to one category."""
        stmt = select(Tour).where(Tour.status == TourStatus.PUBLISHED.value)
        if category_slug:
            stmt = stmt.where(Tour.categories.any(TourCategory.slug == category_slug))
        stmt = stmt.order_by(Tour.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
