"""Tour content blocks and their translations."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import expression

from ..core.database import Base, JSONDocument, utcnow

if TYPE_CHECKING:
    from .tour import Tour


class BlockType(str, Enum):
    """Named section of a tour page."""
    HERO = "hero"
    HIGHLIGHTS = "highlights"
    PRICING_SELECTOR = "pricing_selector"
    AVAILABILITY_SELECTOR = "availability_selector"
    ITINERARY = "itinerary"
    INCLUDED_EXCLUDED = "included_excluded"
    WHAT_TO_BRING = "what_to_bring"
    SAFETY_INFO = "safety_info"
    MAP = "map"
    REVIEWS = "reviews"
    UPSELLS = "upsells"
    TERMS = "terms"


class TourBlock(Base):
    """A content section of a tour page, ordered within the tour."""

    __tablename__ = "tour_blocks"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    tour_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    block_type: Mapped[str] = mapped_column(String(32), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    # Layout options that are not language specific
    config: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    tour: Mapped["Tour"] = relationship("Tour", back_populates="blocks")
    translations: Mapped[list["TourBlockTranslation"]] = relationship(
        "TourBlockTranslation",
        back_populates="block",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<TourBlock(id={self.id}, tour_id={self.tour_id}, type={self.block_type}, order={self.order})>"


class TourBlockTranslation(Base):
    """Per-language title and JSON content of a block."""

    __tablename__ = "tour_block_translations"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    block_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("tour_blocks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    language: Mapped[str] = mapped_column(String(5), nullable=False)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    content: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("block_id", "language", name="uq_block_translation_language"),
    )

    block: Mapped["TourBlock"] = relationship("TourBlock", back_populates="translations")

    def __repr__(self) -> str:
        return f"<TourBlockTranslation(block_id={self.block_id}, language='{self.language}')>"
