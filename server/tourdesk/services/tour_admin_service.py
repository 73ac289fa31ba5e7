"""Back-office tour editing: tours, blocks, pricing, upsells, packages and assignments."""

import logging
import re
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.availability import TourAvailability
from ..models.block import BlockType, TourBlock, TourBlockTranslation
from ..models.booking import Booking
from ..models.package import PackageUpsell, TourPackage
from ..models.taxonomy import (
    SpecialLabel,
    TourCategory,
    tour_category_assignments,
    tour_special_label_assignments,
)
from ..models.tour import PricingEngine, Tour, TourPricing, TourStatus
from ..models.upsell import Upsell, UpsellTranslation
from ..schemas.tour import (
    AdminBlock,
    AdminPackage,
    AdminPackageUpsell,
    AdminTour,
    AdminUpsell,
    BlockTranslation,
    BlockTranslationInput,
    CreateBlockRequest,
    CreateTourRequest,
    CreateUpsellRequest,
    PackageInput,
    ReorderBlocksRequest,
    ReplacePackagesRequest,
    TourAssignmentsRequest,
    UpdateBlockRequest,
    UpdateTourRequest,
    UpdateUpsellRequest,
    UpsellTranslation as UpsellTranslationView,
    UpsellTranslationInput,
)
from .pricing_service import default_pricing_config
from .tour_service import tour_sections

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
NEW_ID_PREFIX = "new-"

# Block types created with every new tour, in page order
DEFAULT_BLOCKS: tuple[tuple[BlockType, bool], ...] = (
    (BlockType.HERO, True),
    (BlockType.HIGHLIGHTS, True),
    (BlockType.INCLUDED_EXCLUDED, True),
    (BlockType.ITINERARY, True),
    (BlockType.WHAT_TO_BRING, True),
    (BlockType.SAFETY_INFO, True),
    (BlockType.TERMS, True),
    (BlockType.MAP, True),
    (BlockType.REVIEWS, True),
    (BlockType.AVAILABILITY_SELECTOR, True),
    (BlockType.PRICING_SELECTOR, True),
    (BlockType.UPSELLS, False),
)


def title_from_slug(slug: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def default_block_translation(block_type: BlockType, slug: str) -> tuple[str, dict[str, Any]]:
    """English title and content a new block starts with."""
    defaults: dict[BlockType, tuple[str, dict[str, Any]]] = {
        BlockType.HERO: (
            title_from_slug(slug),
            {
                "subtitle": "",
                "imageUrl": "",
                "images": [],
                "location": "",
                "duration": "",
                "rating": 0,
                "reviewCount": 0,
                "badges": [],
            },
        ),
        BlockType.HIGHLIGHTS: ("Highlights", {"items": [], "columns": 2}),
        BlockType.INCLUDED_EXCLUDED: ("What's Included", {"included": [], "excluded": []}),
        BlockType.ITINERARY: ("Itinerary", {"items": []}),
        BlockType.WHAT_TO_BRING: ("What to Bring", {"items": [], "note": ""}),
        BlockType.SAFETY_INFO: ("Safety Information", {"items": [], "warnings": [], "restrictions": []}),
        BlockType.TERMS: ("Terms & Conditions", {"sections": [], "cancellationPolicy": "", "refundPolicy": ""}),
        BlockType.MAP: ("Meeting Point", {"latitude": 0, "longitude": 0, "address": "", "meetingPoint": ""}),
        BlockType.REVIEWS: ("Customer Reviews", {"reviews": [], "averageRating": 0, "totalReviews": 0}),
        BlockType.AVAILABILITY_SELECTOR: ("Select Date", {}),
        BlockType.PRICING_SELECTOR: ("Select Options", {}),
        BlockType.UPSELLS: ("Enhance Your Experience", {}),
    }
    return defaults.get(block_type, ("", {}))


def _is_new_id(value: Optional[str]) -> bool:
    return value is None or value.startswith(NEW_ID_PREFIX)


def _parse_id(value: str, field: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError(detail=f"Invalid {field} id '{value}'")


def build_admin_tour(tour: Tour) -> AdminTour:
    """Full back-office view of a tour."""
    return AdminTour(
        id=tour.id,
        tour_number=tour.tour_number,
        slug=tour.slug,
        status=tour.status,
        pricing_engine=tour.pricing_engine,
        meta=tour.meta or {},
        tags=tour.tags or [],
        hero_background_image=tour.hero_background_image,
        featured_images=tour.featured_images or [],
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
        pricing=tour.pricing.config if tour.pricing else None,
        blocks=[build_admin_block(b) for b in sorted(tour.blocks, key=lambda b: b.order)],
        upsells=[build_admin_upsell(u) for u in sorted(tour.upsells, key=lambda u: u.order)],
        packages=[build_admin_package(p) for p in sorted(tour.packages, key=lambda p: p.order)],
        category_ids=[c.id for c in tour.categories],
        label_ids=[label.id for label in tour.special_labels],
        created_at=tour.created_at,
        updated_at=tour.updated_at,
    )


def build_admin_block(block: TourBlock) -> AdminBlock:
    return AdminBlock(
        id=block.id,
        block_type=block.block_type,
        order=block.order,
        enabled=block.enabled,
        config=block.config or {},
        translations=[
            BlockTranslation(language=t.language, title=t.title, content=t.content or {})
            for t in sorted(block.translations, key=lambda t: t.language)
        ],
    )


def build_admin_upsell(upsell: Upsell) -> AdminUpsell:
    return AdminUpsell(
        id=upsell.id,
        pricing_type=upsell.pricing_type,
        retail_price=upsell.retail_price,
        net_price=upsell.net_price,
        currency=upsell.currency,
        max_quantity=upsell.max_quantity,
        status=upsell.status,
        order=upsell.order,
        translations=[
            UpsellTranslationView(language=t.language, title=t.title, description=t.description)
            for t in sorted(upsell.translations, key=lambda t: t.language)
        ],
    )


def build_admin_package(package: TourPackage) -> AdminPackage:
    return AdminPackage(
        id=package.id,
        title=package.title,
        description=package.description,
        pricing_type=package.pricing_type,
        pricing_config=package.pricing_config or {},
        included_items=package.included_items or [],
        calendar_enabled=package.calendar_enabled,
        calendar_config=package.calendar_config or {},
        pickup_enabled=package.pickup_enabled,
        order=package.order,
        enabled=package.enabled,
        upsells=[
            AdminPackageUpsell(
                id=u.id,
                title=u.title,
                description=u.description,
                price=u.price,
                pricing_type=u.pricing_type,
                order=u.order,
                enabled=u.enabled,
            )
            for u in sorted(package.upsells, key=lambda u: u.order)
        ],
    )


class TourAdminService:
    """Service for back-office tour operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _reload(self, tour_id: UUID) -> Tour:
        """Fresh copy of a tour with all eager collections reloaded."""
        self.db.expire_all()
        result = await self.db.execute(select(Tour).where(Tour.id == tour_id))
        return result.scalar_one()

    async def get_tour_by_ref(self, ref: str) -> Optional[Tour]:
        """Look a tour up by UUID or by its tour number."""
        if UUID_PATTERN.match(ref):
            stmt = select(Tour).where(Tour.id == UUID(ref))
        else:
            stmt = select(Tour).where(Tour.tour_number == ref)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_ref_or_raise(self, ref: str) -> Tour:
        """
        Get tour by UUID or tour number or raise NotFoundError.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_ref(ref)
        if not tour:
            logger.warning("Tour not found", extra={"tour_ref": ref})
            raise NotFoundError(resource_type="tour", resource_id=ref)
        return tour

    async def _slug_taken(self, slug: str, exclude_id: Optional[UUID] = None) -> Optional[Tour]:
        stmt = select(Tour).where(Tour.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Tour.id != exclude_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _next_tour_number(self) -> str:
        result = await self.db.execute(select(Tour.tour_number))
        numbers = [int(n) for n in result.scalars().all() if n and n.isdigit()]
        return str(max(numbers, default=0) + 1).zfill(3)

    async def list_tours(self) -> list[tuple[Tour, int]]:
        """All tours, newest first, with their booking counts."""
        counts = (
            select(Booking.tour_id, func.count(Booking.id).label("booking_count"))
            .group_by(Booking.tour_id)
            .subquery()
        )
        stmt = (
            select(Tour, func.coalesce(counts.c.booking_count, 0))
            .outerjoin(counts, counts.c.tour_id == Tour.id)
            .order_by(Tour.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [(row[0], int(row[1])) for row in result.all()]

    async def create_tour(self, request: CreateTourRequest) -> Tour:
        """
        Create a draft tour with the default blocks and pricing.

        Args:
            request: Tour creation request

        Returns:
            Created tour entity

        Raises:
            ConflictError: If tour with same slug already exists
        """
        existing = await self._slug_taken(request.slug)
        if existing:
            logger.warning(
                "Tour creation failed - slug already exists",
                extra={"slug": request.slug, "existing_tour_id": str(existing.id)}
            )
            raise ConflictError(
                detail=f"Tour with slug '{request.slug}' already exists",
                conflicting_resource={"id": str(existing.id), "slug": existing.slug},
            )

        tour = Tour(
            tour_number=await self._next_tour_number(),
            slug=request.slug,
            status=TourStatus.DRAFT.value,
            pricing_engine=request.pricing_engine.value,
            meta={},
            tags=[],
        )
        for order, (block_type, enabled) in enumerate(DEFAULT_BLOCKS, start=1):
            title, content = default_block_translation(block_type, request.slug)
            tour.blocks.append(
                TourBlock(
                    block_type=block_type.value,
                    order=order,
                    enabled=enabled,
                    config={},
                    translations=[TourBlockTranslation(language="en", title=title, content=content)],
                )
            )
        tour.pricing = TourPricing(config=default_pricing_config(request.pricing_engine))

        self.db.add(tour)
        await self.db.commit()

        logger.info(
            "Tour created successfully",
            extra={
                "tour_id": str(tour.id),
                "tour_number": tour.tour_number,
                "slug": tour.slug,
                "pricing_engine": tour.pricing_engine,
            }
        )
        return await self._reload(tour.id)

    async def update_tour(self, tour: Tour, request: UpdateTourRequest) -> Tour:
        """
        Write the fields present in the request.

        Changing the pricing engine without sending a pricing config resets
        the pricing to the new engine's defaults.
        """
        tour_id = tour.id
        changes = request.model_dump(exclude_unset=True)
        pricing = changes.pop("pricing", None)

        if "slug" in changes and changes["slug"] != tour.slug:
            existing = await self._slug_taken(changes["slug"], exclude_id=tour_id)
            if existing:
                raise ConflictError(
                    detail=f"Tour with slug '{changes['slug']}' already exists",
                    conflicting_resource={"id": str(existing.id), "slug": existing.slug},
                )

        engine_changed = "pricing_engine" in changes and changes["pricing_engine"] != tour.pricing_engine
        for field, value in changes.items():
            if field in ("status", "pricing_engine") and value is not None:
                value = value.value if hasattr(value, "value") else value
            setattr(tour, field, value)

        if pricing is not None:
            self._set_pricing(tour, pricing)
        elif engine_changed:
            self._set_pricing(tour, default_pricing_config(tour.pricing_engine))

        await self.db.commit()
        logger.info(
            "Tour updated",
            extra={"tour_id": str(tour_id), "fields": sorted(changes.keys()), "pricing_updated": pricing is not None}
        )
        return await self._reload(tour_id)

    def _set_pricing(self, tour: Tour, config: dict[str, Any]) -> None:
        engine = config.get("type")
        if engine not in {e.value for e in PricingEngine}:
            raise ValidationError(detail="Pricing config must have a valid 'type'", errors={"type": engine})
        if engine != tour.pricing_engine:
            raise ValidationError(
                detail=f"Pricing type '{engine}' does not match the tour's engine '{tour.pricing_engine}'"
            )
        if tour.pricing is None:
            tour.pricing = TourPricing(config=dict(config))
        else:
            tour.pricing.config = dict(config)

    async def update_pricing(self, tour: Tour, config: dict[str, Any]) -> Tour:
        tour_id = tour.id
        self._set_pricing(tour, config)
        await self.db.commit()
        logger.info("Tour pricing updated", extra={"tour_id": str(tour_id), "type": config.get("type")})
        return await self._reload(tour_id)

    async def delete_tour(self, tour: Tour) -> None:
        """
        Delete a tour and everything that belongs to it.

        Raises:
            ConflictError: If bookings reference the tour
        """
        tour_id = tour.id
        booking_count = await self.db.scalar(select(func.count(Booking.id)).where(Booking.tour_id == tour_id))
        if booking_count:
            raise ConflictError(
                detail=f"Tour has {booking_count} bookings and cannot be deleted; archive it instead",
                conflicting_resource={"id": str(tour_id), "booking_count": booking_count},
            )

        block_ids = select(TourBlock.id).where(TourBlock.tour_id == tour_id)
        upsell_ids = select(Upsell.id).where(Upsell.tour_id == tour_id)
        package_ids = select(TourPackage.id).where(TourPackage.tour_id == tour_id)

        await self.db.execute(delete(TourBlockTranslation).where(TourBlockTranslation.block_id.in_(block_ids)))
        await self.db.execute(delete(TourBlock).where(TourBlock.tour_id == tour_id))
        await self.db.execute(delete(UpsellTranslation).where(UpsellTranslation.upsell_id.in_(upsell_ids)))
        await self.db.execute(delete(Upsell).where(Upsell.tour_id == tour_id))
        await self.db.execute(delete(PackageUpsell).where(PackageUpsell.package_id.in_(package_ids)))
        await self.db.execute(delete(TourPackage).where(TourPackage.tour_id == tour_id))
        await self.db.execute(delete(TourPricing).where(TourPricing.tour_id == tour_id))
        await self.db.execute(delete(TourAvailability).where(TourAvailability.tour_id == tour_id))
        await self.db.execute(delete(tour_category_assignments).where(tour_category_assignments.c.tour_id == tour_id))
        await self.db.execute(
            delete(tour_special_label_assignments).where(tour_special_label_assignments.c.tour_id == tour_id)
        )
        await self.db.execute(delete(Tour).where(Tour.id == tour_id))
        await self.db.commit()
        self.db.expunge_all()

        logger.info("Tour deleted", extra={"tour_id": str(tour_id)})

    async def duplicate_tour(self, tour: Tour) -> Tour:
        """Copy a tour as a new draft with a `-copy` slug."""
        source_id = tour.id
        slug = f"{tour.slug}-copy"
        suffix = 2
        while await self._slug_taken(slug):
            slug = f"{tour.slug}-copy-{suffix}"
            suffix += 1

        copy = Tour(
            tour_number=await self._next_tour_number(),
            slug=slug,
            status=TourStatus.DRAFT.value,
            pricing_engine=tour.pricing_engine,
            meta=dict(tour.meta or {}),
            tags=list(tour.tags or []),
            hero_background_image=tour.hero_background_image,
            featured_images=list(tour.featured_images or []),
            main_media=dict(tour.main_media) if tour.main_media else None,
            additional_photos=list(tour.additional_photos or []),
            video_embed_code=tour.video_embed_code,
            video_section_title=tour.video_section_title,
            google_reviews=list(tour.google_reviews or []),
            google_rating=tour.google_rating,
            google_review_count=tour.google_review_count,
            itinerary_title=tour.itinerary_title,
            itinerary_images=list(tour.itinerary_images or []),
            **tour_sections(tour),
        )
        copy.blocks = [
            TourBlock(
                block_type=b.block_type,
                order=b.order,
                enabled=b.enabled,
                config=dict(b.config or {}),
                translations=[
                    TourBlockTranslation(language=t.language, title=t.title, content=dict(t.content or {}))
                    for t in b.translations
                ],
            )
            for b in tour.blocks
        ]
        if tour.pricing:
            copy.pricing = TourPricing(config=dict(tour.pricing.config))
        copy.upsells = [
            Upsell(
                pricing_type=u.pricing_type,
                retail_price=u.retail_price,
                net_price=u.net_price,
                currency=u.currency,
                max_quantity=u.max_quantity,
                status=u.status,
                order=u.order,
                translations=[
                    UpsellTranslation(language=t.language, title=t.title, description=t.description)
                    for t in u.translations
                ],
            )
            for u in tour.upsells
        ]
        copy.packages = [
            TourPackage(
                title=p.title,
                description=p.description,
                pricing_type=p.pricing_type,
                pricing_config=dict(p.pricing_config or {}),
                included_items=list(p.included_items or []),
                calendar_enabled=p.calendar_enabled,
                calendar_config=dict(p.calendar_config or {}),
                pickup_enabled=p.pickup_enabled,
                order=p.order,
                enabled=p.enabled,
                upsells=[
                    PackageUpsell(
                        title=pu.title,
                        description=pu.description,
                        price=pu.price,
                        pricing_type=pu.pricing_type,
                        order=pu.order,
                        enabled=pu.enabled,
                    )
                    for pu in p.upsells
                ],
            )
            for p in tour.packages
        ]
        copy.categories = list(tour.categories)
        copy.special_labels = list(tour.special_labels)

        self.db.add(copy)
        await self.db.commit()

        logger.info(
            "Tour duplicated",
            extra={"source_tour_id": str(source_id), "tour_id": str(copy.id), "slug": slug}
        )
        return await self._reload(copy.id)

    # Blocks

    def _upsert_block_translations(self, block: TourBlock, inputs: list[BlockTranslationInput]) -> None:
        by_language = {t.language: t for t in block.translations}
        for item in inputs:
            current = by_language.get(item.language)
            if current is None:
                block.translations.append(
                    TourBlockTranslation(language=item.language, title=item.title, content=dict(item.content))
                )
            else:
                current.title = item.title
                current.content = dict(item.content)

    def _find_block(self, tour: Tour, block_id: UUID) -> TourBlock:
        block = next((b for b in tour.blocks if b.id == block_id), None)
        if block is None:
            raise NotFoundError(resource_type="block", resource_id=str(block_id))
        return block

    async def create_block(self, tour: Tour, request: CreateBlockRequest) -> TourBlock:
        tour_id = tour.id
        block = TourBlock(
            tour_id=tour_id,
            block_type=request.block_type.value,
            order=max((b.order for b in tour.blocks), default=0) + 1,
            enabled=request.enabled,
            config=dict(request.config),
            translations=[],
        )
        self._upsert_block_translations(block, request.translations)
        self.db.add(block)
        await self.db.commit()
        block_id = block.id

        logger.info(
            "Block created",
            extra={"tour_id": str(tour_id), "block_id": str(block_id), "block_type": request.block_type.value}
        )
        tour = await self._reload(tour_id)
        return self._find_block(tour, block_id)

    async def update_block(self, tour: Tour, block_id: UUID, request: UpdateBlockRequest) -> TourBlock:
        tour_id = tour.id
        block = self._find_block(tour, block_id)
        if request.enabled is not None:
            block.enabled = request.enabled
        if request.order is not None:
            block.order = request.order
        if request.config is not None:
            block.config = dict(request.config)
        if request.translations is not None:
            self._upsert_block_translations(block, request.translations)

        await self.db.commit()
        logger.info("Block updated", extra={"tour_id": str(tour_id), "block_id": str(block_id)})
        tour = await self._reload(tour_id)
        return self._find_block(tour, block_id)

    async def delete_block(self, tour: Tour, block_id: UUID) -> None:
        self._find_block(tour, block_id)
        await self.db.execute(delete(TourBlockTranslation).where(TourBlockTranslation.block_id == block_id))
        await self.db.execute(delete(TourBlock).where(TourBlock.id == block_id))
        await self.db.commit()
        logger.info("Block deleted", extra={"tour_id": str(tour.id), "block_id": str(block_id)})

    async def reorder_blocks(self, tour: Tour, request: ReorderBlocksRequest) -> Tour:
        """
        Renumber blocks 1..n in the given order.

        Raises:
            ValidationError: If the ids are not exactly the tour's blocks
        """
        tour_id = tour.id
        current = {b.id: b for b in tour.blocks}
        if len(request.block_ids) != len(set(request.block_ids)) or set(request.block_ids) != set(current):
            raise ValidationError(detail="blockIds must list every block of the tour exactly once")

        for order, block_id in enumerate(request.block_ids, start=1):
            current[block_id].order = order

        await self.db.commit()
        logger.info("Blocks reordered", extra={"tour_id": str(tour_id), "count": len(request.block_ids)})
        return await self._reload(tour_id)

    # Upsells

    def _find_upsell(self, tour: Tour, upsell_id: UUID) -> Upsell:
        upsell = next((u for u in tour.upsells if u.id == upsell_id), None)
        if upsell is None:
            raise NotFoundError(resource_type="upsell", resource_id=str(upsell_id))
        return upsell

    def _upsert_upsell_translations(self, upsell: Upsell, inputs: list[UpsellTranslationInput]) -> None:
        by_language = {t.language: t for t in upsell.translations}
        for item in inputs:
            current = by_language.get(item.language)
            if current is None:
                upsell.translations.append(
                    UpsellTranslation(language=item.language, title=item.title, description=item.description)
                )
            else:
                current.title = item.title
                current.description = item.description

    async def create_upsell(self, tour: Tour, request: CreateUpsellRequest) -> Upsell:
        tour_id = tour.id
        upsell = Upsell(
            tour_id=tour_id,
            pricing_type=request.pricing_type.value,
            retail_price=request.retail_price,
            net_price=request.net_price,
            currency=request.currency.upper(),
            max_quantity=request.max_quantity,
            status=request.status.value,
            order=max((u.order for u in tour.upsells), default=-1) + 1,
            translations=[],
        )
        self._upsert_upsell_translations(upsell, request.translations)
        self.db.add(upsell)
        await self.db.commit()
        upsell_id = upsell.id

        logger.info("Upsell created", extra={"tour_id": str(tour_id), "upsell_id": str(upsell_id)})
        tour = await self._reload(tour_id)
        return self._find_upsell(tour, upsell_id)

    async def update_upsell(self, tour: Tour, upsell_id: UUID, request: UpdateUpsellRequest) -> Upsell:
        tour_id = tour.id
        upsell = self._find_upsell(tour, upsell_id)
        changes = request.model_dump(exclude_unset=True, exclude={"translations"})
        for field, value in changes.items():
            if field in ("pricing_type", "status") and value is not None:
                value = value.value if hasattr(value, "value") else value
            if field == "currency" and value:
                value = value.upper()
            setattr(upsell, field, value)
        if request.translations is not None:
            self._upsert_upsell_translations(upsell, request.translations)

        await self.db.commit()
        logger.info("Upsell updated", extra={"tour_id": str(tour_id), "upsell_id": str(upsell_id)})
        tour = await self._reload(tour_id)
        return self._find_upsell(tour, upsell_id)

    async def delete_upsell(self, tour: Tour, upsell_id: UUID) -> None:
        self._find_upsell(tour, upsell_id)
        await self.db.execute(delete(UpsellTranslation).where(UpsellTranslation.upsell_id == upsell_id))
        await self.db.execute(delete(Upsell).where(Upsell.id == upsell_id))
        await self.db.commit()
        logger.info("Upsell deleted", extra={"tour_id": str(tour.id), "upsell_id": str(upsell_id)})

    # Packages

    def _apply_package(self, package: TourPackage, item: PackageInput) -> None:
        package.title = item.title
        package.description = item.description
        package.pricing_type = item.pricing_type.value
        package.pricing_config = dict(item.pricing_config)
        package.included_items = list(item.included_items)
        package.calendar_enabled = item.calendar_enabled
        package.calendar_config = dict(item.calendar_config)
        package.pickup_enabled = item.pickup_enabled
        package.order = item.order
        package.enabled = item.enabled

        existing = {str(u.id): u for u in package.upsells}
        keep: list[PackageUpsell] = []
        for upsell_input in item.upsells:
            if _is_new_id(upsell_input.id):
                upsell = PackageUpsell()
            else:
                upsell = existing.get(str(_parse_id(upsell_input.id, "package upsell")))
                if upsell is None:
                    raise NotFoundError(resource_type="package upsell", resource_id=upsell_input.id)
            upsell.title = upsell_input.title
            upsell.description = upsell_input.description
            upsell.price = upsell_input.price
            upsell.pricing_type = upsell_input.pricing_type
            upsell.order = upsell_input.order
            upsell.enabled = upsell_input.enabled
            keep.append(upsell)
        # delete-orphan removes upsells missing from the payload
        package.upsells = keep

    async def replace_packages(self, tour: Tour, request: ReplacePackagesRequest) -> Tour:
        """
        Bulk save of a tour's packages.

        Ids prefixed with `new-` (or absent) are inserted, known ids are
        updated and packages missing from the payload are deleted.
        """
        tour_id = tour.id
        existing = {p.id: p for p in tour.packages}
        keep_ids: set[UUID] = set()

        for item in request.packages:
            if _is_new_id(item.id):
                package = TourPackage(tour_id=tour_id, upsells=[])
                self._apply_package(package, item)
                self.db.add(package)
                continue

            package_id = _parse_id(item.id, "package")
            package = existing.get(package_id)
            if package is None:
                raise NotFoundError(resource_type="package", resource_id=item.id)
            self._apply_package(package, item)
            keep_ids.add(package_id)

        removed = [package_id for package_id in existing if package_id not in keep_ids]
        if removed:
            await self.db.execute(delete(PackageUpsell).where(PackageUpsell.package_id.in_(removed)))
            await self.db.execute(delete(TourPackage).where(TourPackage.id.in_(removed)))

        await self.db.commit()
        logger.info(
            "Packages saved",
            extra={"tour_id": str(tour_id), "count": len(request.packages), "removed": len(removed)}
        )
        return await self._reload(tour_id)

    # Categories and labels

    async def set_assignments(self, tour: Tour, request: TourAssignmentsRequest) -> Tour:
        """
        Replace the tour's categories and special labels.

        Raises:
            ValidationError: If an id does not exist
        """
        tour_id = tour.id
        categories: list[TourCategory] = []
        labels: list[SpecialLabel] = []
        if request.category_ids:
            result = await self.db.execute(select(TourCategory).where(TourCategory.id.in_(request.category_ids)))
            categories = list(result.scalars().all())
        if request.label_ids:
            result = await self.db.execute(select(SpecialLabel).where(SpecialLabel.id.in_(request.label_ids)))
            labels = list(result.scalars().all())

        if len(categories) != len(set(request.category_ids)) or len(labels) != len(set(request.label_ids)):
            raise ValidationError(detail="Unknown category or label id")

        tour.categories = categories
        tour.special_labels = labels
        await self.db.commit()

        logger.info(
            "Tour assignments updated",
            extra={"tour_id": str(tour_id), "categories": len(categories), "labels": len(labels)}
        )
        return await self._reload(tour_id)
