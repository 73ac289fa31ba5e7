"""Tour-related Pydantic schemas."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import Field

from ..models.block import BlockType
from ..models.package import PackagePricingType
from ..models.tour import PricingEngine, TourStatus
from ..models.upsell import UpsellPricingType, UpsellStatus
from .common import CamelModel
from .taxonomy import Category, SpecialLabel

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


# Storefront views

class TourBlockView(CamelModel):
    """A block resolved to one language."""

    id: UUID
    block_type: BlockType
    order: int
    config: dict[str, Any] = Field(default_factory=dict)
    title: Optional[str] = None
    content: dict[str, Any] = Field(default_factory=dict)


class UpsellView(CamelModel):
    id: UUID
    pricing_type: UpsellPricingType
    retail_price: float
    currency: str
    max_quantity: Optional[int] = None
    title: str
    description: Optional[str] = None


class PackageUpsellView(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    price: float
    pricing_type: str


class PackageView(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    pricing_type: PackagePricingType
    pricing_config: dict[str, Any]
    included_items: List[Any]
    calendar_enabled: bool
    calendar_config: dict[str, Any]
    pickup_enabled: bool
    upsells: List[PackageUpsellView] = Field(default_factory=list)


class TourSummary(CamelModel):
    """Tour card on the listing page."""

    id: UUID = Field(..., description="Unique tour ID")
    slug: str = Field(..., description="URL-friendly slug")
    tour_number: str
    title: str = Field(..., description="Hero title in the requested language")
    hero_content: dict[str, Any] = Field(default_factory=dict)
    pricing_engine: PricingEngine
    pricing: Optional[dict[str, Any]] = None
    hero_background_image: Optional[str] = None
    featured_images: List[Any] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)
    special_labels: List[SpecialLabel] = Field(default_factory=list)


class TourDetail(TourSummary):
    """Everything the tour page needs."""

    meta: dict[str, Any] = Field(default_factory=dict)
    main_media: Optional[dict[str, Any]] = None
    additional_photos: List[Any] = Field(default_factory=list)
    video_embed_code: Optional[str] = None
    video_section_title: Optional[str] = None
    google_reviews: List[Any] = Field(default_factory=list)
    google_rating: Optional[float] = None
    google_review_count: Optional[int] = None
    itinerary_title: Optional[str] = None
    itinerary_images: List[Any] = Field(default_factory=list)
    sections: dict[str, bool] = Field(default_factory=dict, description="Section visibility toggles")
    blocks: List[TourBlockView] = Field(default_factory=list)
    upsells: List[UpsellView] = Field(default_factory=list)
    packages: List[PackageView] = Field(default_factory=list)


# Back-office requests

class BlockTranslationInput(CamelModel):
    language: str = Field(..., min_length=2, max_length=5)
    title: Optional[str] = Field(None, max_length=500)
    content: dict[str, Any] = Field(default_factory=dict)


class UpsellTranslationInput(CamelModel):
    language: str = Field(..., min_length=2, max_length=5)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class CreateTourRequest(CamelModel):
    """Request schema for creating a tour."""

    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN, description="URL-friendly slug")
    pricing_engine: PricingEngine = Field(PricingEngine.FLAT_PER_PERSON, description="How the tour is priced")


class UpdateTourRequest(CamelModel):
    """Partial tour update; only fields present in the body are written."""

    slug: Optional[str] = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    status: Optional[TourStatus] = None
    pricing_engine: Optional[PricingEngine] = None
    meta: Optional[dict[str, Any]] = None
    tags: Optional[List[str]] = None
    hero_background_image: Optional[str] = None
    featured_images: Optional[List[Any]] = None
    main_media: Optional[dict[str, Any]] = None
    additional_photos: Optional[List[Any]] = None
    video_embed_code: Optional[str] = None
    video_section_title: Optional[str] = None
    google_reviews: Optional[List[Any]] = None
    google_rating: Optional[float] = Field(None, ge=0, le=5)
    google_review_count: Optional[int] = Field(None, ge=0)
    itinerary_title: Optional[str] = None
    itinerary_images: Optional[List[Any]] = None
    description_enabled: Optional[bool] = None
    images_enabled: Optional[bool] = None
    packages_enabled: Optional[bool] = None
    itinerary_enabled: Optional[bool] = None
    video_enabled: Optional[bool] = None
    google_reviews_enabled: Optional[bool] = None
    safety_info_enabled: Optional[bool] = None
    need_help_enabled: Optional[bool] = None
    pricing: Optional[dict[str, Any]] = Field(None, description="Replaces the pricing config when present")


class UpdatePricingRequest(CamelModel):
    config: dict[str, Any]


class CreateBlockRequest(CamelModel):
    block_type: BlockType
    enabled: bool = True
    config: dict[str, Any] = Field(default_factory=dict)
    translations: List[BlockTranslationInput] = Field(default_factory=list)


class UpdateBlockRequest(CamelModel):
    enabled: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)
    config: Optional[dict[str, Any]] = None
    translations: Optional[List[BlockTranslationInput]] = None


class ReorderBlocksRequest(CamelModel):
    block_ids: List[UUID] = Field(..., min_length=1, description="Block ids in their new order")


class CreateUpsellRequest(CamelModel):
    pricing_type: UpsellPricingType = UpsellPricingType.PER_BOOKING
    retail_price: float = Field(0, ge=0)
    net_price: float = Field(0, ge=0)
    currency: str = Field("THB", min_length=3, max_length=3)
    max_quantity: Optional[int] = Field(None, ge=1)
    status: UpsellStatus = UpsellStatus.ACTIVE
    translations: List[UpsellTranslationInput] = Field(..., min_length=1)


class UpdateUpsellRequest(CamelModel):
    pricing_type: Optional[UpsellPricingType] = None
    retail_price: Optional[float] = Field(None, ge=0)
    net_price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    max_quantity: Optional[int] = Field(None, ge=1)
    status: Optional[UpsellStatus] = None
    order: Optional[int] = Field(None, ge=0)
    translations: Optional[List[UpsellTranslationInput]] = None


class PackageUpsellInput(CamelModel):
    id: Optional[str] = Field(None, description="Existing id, or a 'new-' prefixed placeholder")
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(0, ge=0)
    pricing_type: str = Field("per_booking", pattern=r"^(per_booking|per_person)$")
    order: int = 0
    enabled: bool = True


class PackageInput(CamelModel):
    id: Optional[str] = Field(None, description="Existing id, or a 'new-' prefixed placeholder")
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    pricing_type: PackagePricingType = PackagePricingType.PER_PERSON
    pricing_config: dict[str, Any] = Field(default_factory=dict)
    included_items: List[Any] = Field(default_factory=list)
    calendar_enabled: bool = False
    calendar_config: dict[str, Any] = Field(default_factory=dict)
    pickup_enabled: bool = False
    order: int = 0
    enabled: bool = True
    upsells: List[PackageUpsellInput] = Field(default_factory=list)


class ReplacePackagesRequest(CamelModel):
    packages: List[PackageInput]


class TourAssignmentsRequest(CamelModel):
    category_ids: List[UUID] = Field(default_factory=list)
    label_ids: List[UUID] = Field(default_factory=list)


# Back-office views

class BlockTranslation(CamelModel):
    language: str
    title: Optional[str] = None
    content: dict[str, Any] = Field(default_factory=dict)


class AdminBlock(CamelModel):
    id: UUID
    block_type: BlockType
    order: int
    enabled: bool
    config: dict[str, Any]
    translations: List[BlockTranslation]


class UpsellTranslation(CamelModel):
    language: str
    title: str
    description: Optional[str] = None


class AdminUpsell(CamelModel):
    id: UUID
    pricing_type: UpsellPricingType
    retail_price: float
    net_price: float
    currency: str
    max_quantity: Optional[int] = None
    status: UpsellStatus
    order: int
    translations: List[UpsellTranslation]


class AdminPackageUpsell(PackageUpsellView):
    order: int
    enabled: bool


class AdminPackage(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    pricing_type: PackagePricingType
    pricing_config: dict[str, Any]
    included_items: List[Any]
    calendar_enabled: bool
    calendar_config: dict[str, Any]
    pickup_enabled: bool
    order: int
    enabled: bool
    upsells: List[AdminPackageUpsell]


class AdminTourSummary(CamelModel):
    id: UUID
    tour_number: str
    slug: str
    status: TourStatus
    pricing_engine: PricingEngine
    title: str
    booking_count: int = 0
    created_at: datetime
    updated_at: datetime


class AdminTour(CamelModel):
    """Full editable tour."""

    id: UUID
    tour_number: str
    slug: str
    status: TourStatus
    pricing_engine: PricingEngine
    meta: dict[str, Any]
    tags: List[str]
    hero_background_image: Optional[str] = None
    featured_images: List[Any]
    main_media: Optional[dict[str, Any]] = None
    additional_photos: List[Any]
    video_embed_code: Optional[str] = None
    video_section_title: Optional[str] = None
    google_reviews: List[Any]
    google_rating: Optional[float] = None
    google_review_count: Optional[int] = None
    itinerary_title: Optional[str] = None
    itinerary_images: List[Any]
    sections: dict[str, bool]
    pricing: Optional[dict[str, Any]] = None
    blocks: List[AdminBlock]
    upsells: List[AdminUpsell]
    packages: List[AdminPackage]
    category_ids: List[UUID]
    label_ids: List[UUID]
    created_at: datetime
    updated_at: datetime
