"""Booking and booking line item model definitions."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, JSONDocument, utcnow


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    PENDING = "pending"
    PENDING_PAYMENT = "pending_payment"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Status groups used by reporting
PAID_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)
OPEN_STATUSES = (BookingStatus.PENDING.value, BookingStatus.PENDING_PAYMENT.value)


class BookingItemType(str, Enum):
    TOUR = "tour"
    UPSELL = "upsell"


class Booking(Base):
    """Booking entity: a customer's order for one tour date."""

    __tablename__ = "bookings"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    reference: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)

    tour_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("tours.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    availability_id: Mapped[UUID | None] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("tour_availability.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    booking_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Customer details
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    customer_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    customer_nationality: Mapped[str | None] = mapped_column(String(64), nullable=True)

    total_retail: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    total_net: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="THB")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING.value, index=True
    )
    language: Mapped[str] = mapped_column(String(5), nullable=False, default="en")
    voucher_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("total_retail >= 0", name="ck_booking_total_retail_non_negative"),
        CheckConstraint("total_net >= 0", name="ck_booking_total_net_non_negative"),
        CheckConstraint("length(reference) > 0", name="ck_booking_reference_not_empty"),
    )

    items: Mapped[list["BookingItem"]] = relationship(
        "BookingItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def profit(self) -> float:
        return round(self.total_retail - self.total_net, 2)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, reference='{self.reference}', tour_id={self.tour_id}, "
            f"status={self.status}, total_retail={self.total_retail})>"
        )


class BookingItem(Base):
    """Line item of a booking with price snapshots taken at booking time."""

    __tablename__ = "booking_items"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    booking_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_type: Mapped[str] = mapped_column(String(10), nullable=False)
    item_id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), nullable=False)
    item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    retail_price_snapshot: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    net_price_snapshot: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    subtotal_retail: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    subtotal_net: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    # Price breakdown and pax details
    item_metadata: Mapped[dict | None] = mapped_column("metadata", JSONDocument, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_booking_item_quantity_positive"),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="items")
