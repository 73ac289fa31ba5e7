"""Tour and tour pricing model definitions."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import expression

from ..core.database import Base, JSONDocument, utcnow

if TYPE_CHECKING:
    from .block import TourBlock
    from .package import TourPackage
    from .taxonomy import SpecialLabel, TourCategory
    from .upsell import Upsell


class TourStatus(str, Enum):
    """Tour publication status."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class PricingEngine(str, Enum):
    """How the base price of a tour is computed."""
    FLAT_PER_PERSON = "flat_per_person"
    ADULT_CHILD = "adult_child"
    SEAT_BASED = "seat_based"


def _section_toggle() -> Any:
    return mapped_column(Boolean, nullable=False, default=True, server_default=expression.true())


class Tour(Base):
    """Tour entity representing a bookable experience."""

    __tablename__ = "tours"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)

    # Human-friendly sequential number, e.g. "007"
    tour_number: Mapped[str] = mapped_column(String(10), nullable=False, unique=True, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TourStatus.DRAFT.value, index=True
    )
    pricing_engine: Mapped[str] = mapped_column(String(32), nullable=False)
    meta: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    tags: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)

    # Media
    hero_background_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    featured_images: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    main_media: Mapped[dict | None] = mapped_column(JSONDocument, nullable=True)
    additional_photos: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    video_embed_code: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_section_title: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Google reviews shown on the tour page
    google_reviews: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    google_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    google_review_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    itinerary_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    itinerary_images: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)

    # Section toggles
    description_enabled: Mapped[bool] = _section_toggle()
    images_enabled: Mapped[bool] = _section_toggle()
    packages_enabled: Mapped[bool] = _section_toggle()
    itinerary_enabled: Mapped[bool] = _section_toggle()
    video_enabled: Mapped[bool] = _section_toggle()
    google_reviews_enabled: Mapped[bool] = _section_toggle()
    safety_info_enabled: Mapped[bool] = _section_toggle()
    need_help_enabled: Mapped[bool] = _section_toggle()

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    # Relationships
    blocks: Mapped[list["TourBlock"]] = relationship(
        "TourBlock",
        back_populates="tour",
        cascade="all, delete-orphan",
        order_by="TourBlock.order",
        lazy="selectin",
    )
    pricing: Mapped["TourPricing | None"] = relationship(
        "TourPricing",
        back_populates="tour",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )
    upsells: Mapped[list["Upsell"]] = relationship(
        "Upsell",
        back_populates="tour",
        cascade="all, delete-orphan",
        order_by="Upsell.order",
        lazy="selectin",
    )
    packages: Mapped[list["TourPackage"]] = relationship(
        "TourPackage",
        back_populates="tour",
        cascade="all, delete-orphan",
        order_by="TourPackage.order",
        lazy="selectin",
    )
    categories: Mapped[list["TourCategory"]] = relationship(
        "TourCategory",
        secondary="tour_category_assignments",
        order_by="TourCategory.order",
        lazy="selectin",
    )
    special_labels: Mapped[list["SpecialLabel"]] = relationship(
        "SpecialLabel",
        secondary="tour_special_label_assignments",
        order_by="SpecialLabel.order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, tour_number='{self.tour_number}', slug='{self.slug}', status={self.status})>"


class TourPricing(Base):
    """Pricing configuration of a tour; the config shape depends on the pricing engine."""

    __tablename__ = "tour_pricing"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    tour_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    config: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    tour: Mapped["Tour"] = relationship("Tour", back_populates="pricing")

    def __repr__(self) -> str:
        return f"<TourPricing(tour_id={self.tour_id}, type={self.config.get('type')})>"
