"""Upsell (optional paid add-on) model definitions."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, utcnow

if TYPE_CHECKING:
    from .tour import Tour


class UpsellPricingType(str, Enum):
    """How an upsell unit price is multiplied."""
    PER_PERSON = "per_person"
    PER_BOOKING = "per_booking"
    FLAT = "flat"


class UpsellStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Upsell(Base):
    """Optional add-on offered with a tour."""

    __tablename__ = "upsells"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    tour_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pricing_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UpsellPricingType.PER_BOOKING.value
    )
    retail_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    net_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="THB")
    max_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UpsellStatus.ACTIVE.value, index=True
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("retail_price >= 0", name="ck_upsell_retail_non_negative"),
        CheckConstraint("net_price >= 0", name="ck_upsell_net_non_negative"),
    )

    tour: Mapped["Tour"] = relationship("Tour", back_populates="upsells")
    translations: Mapped[list["UpsellTranslation"]] = relationship(
        "UpsellTranslation",
        back_populates="upsell",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Upsell(id={self.id}, tour_id={self.tour_id}, pricing_type={self.pricing_type})>"


class UpsellTranslation(Base):
    """Per-language title and description of an upsell."""

    __tablename__ = "upsell_translations"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    upsell_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("upsells.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    language: Mapped[str] = mapped_column(String(5), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("upsell_id", "language", name="uq_upsell_translation_language"),
    )

    upsell: Mapped["Upsell"] = relationship("Upsell", back_populates="translations")
