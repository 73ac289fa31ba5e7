"""Tour package model definitions."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import expression

from ..core.database import Base, JSONDocument, utcnow

if TYPE_CHECKING:
    from .tour import Tour


class PackagePricingType(str, Enum):
    PER_PERSON = "per_person"
    ADULT_CHILD = "adult_child"
    PER_SEAT = "per_seat"
    PER_TICKET = "per_ticket"


class TourPackage(Base):
    """A named variant of a tour with its own pricing, inclusions and calendar rules."""

    __tablename__ = "tour_packages"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    tour_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    pricing_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PackagePricingType.PER_PERSON.value
    )
    pricing_config: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    included_items: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    calendar_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    # weekend_only, allowed_days, blocked_dates, time_slots
    calendar_config: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    pickup_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    tour: Mapped["Tour"] = relationship("Tour", back_populates="packages")
    upsells: Mapped[list["PackageUpsell"]] = relationship(
        "PackageUpsell",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="PackageUpsell.order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<TourPackage(id={self.id}, tour_id={self.tour_id}, title='{self.title}')>"


class PackageUpsell(Base):
    """Add-on offered only with a specific package."""

    __tablename__ = "package_upsells"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    package_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("tour_packages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    pricing_type: Mapped[str] = mapped_column(String(20), nullable=False, default="per_booking")
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )

    package: Mapped["TourPackage"] = relationship("TourPackage", back_populates="upsells")
