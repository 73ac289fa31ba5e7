"""Booking-related Pydantic schemas."""

import re
from datetime import date, datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from ..models.booking import BookingItemType, BookingStatus
from .common import CamelModel

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class PaxSelection(CamelModel):
    """Guest counts; `total` is used by flat pricing when adult/child are absent."""

    adult: int = Field(0, ge=0)
    child: int = Field(0, ge=0)
    total: int = Field(0, ge=0)


class SeatSelection(CamelModel):
    type: str = Field(..., min_length=1, description="Seat type as configured in the tour pricing")
    qty: int = Field(..., ge=0)


class TourSelection(CamelModel):
    pax: Optional[PaxSelection] = None
    seat: Optional[SeatSelection] = None


class UpsellSelection(CamelModel):
    upsell_id: UUID
    quantity: int = Field(1, ge=1)


class BookingSelection(CamelModel):
    """What the customer picked. Prices are recomputed from stored pricing."""

    tour: TourSelection
    upsells: List[UpsellSelection] = Field(default_factory=list)


class PriceBreakdownItem(CamelModel):
    label: str
    quantity: int
    unit_retail_price: float
    unit_net_price: float
    total_retail: float
    total_net: float


class TourQuote(CamelModel):
    """Priced tour selection."""

    breakdown: List[PriceBreakdownItem]
    adults: int
    children: int
    pax: int
    seat_type: Optional[str] = None
    total_retail: float
    total_net: float
    currency: str


class UpsellQuote(CamelModel):
    upsell_id: UUID
    title: str
    pricing_type: str
    quantity: int
    unit_retail_price: float
    unit_net_price: float
    total_retail: float
    total_net: float


class CreateBookingRequest(CamelModel):
    """Request schema for creating a booking."""

    tour_id: UUID = Field(..., description="Tour being booked")
    availability_id: Optional[UUID] = Field(None, description="Availability slot, when the tour uses slots")
    booking_date: date = Field(..., description="Tour date (YYYY-MM-DD)")
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: str = Field(..., max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=64)
    customer_nationality: Optional[str] = Field(None, max_length=64)
    language: str = Field("en", max_length=5)
    selection: BookingSelection
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("customer_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Customer name is required")
        return v

    @field_validator("customer_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email format")
        return v


class BookingItem(CamelModel):
    id: UUID
    item_type: BookingItemType
    item_id: UUID
    item_name: str
    quantity: int
    retail_price_snapshot: float
    subtotal_retail: float
    metadata: Optional[dict[str, Any]] = None


class AdminBookingItem(BookingItem):
    net_price_snapshot: float
    subtotal_net: float


class Booking(CamelModel):
    """Booking response schema."""

    id: UUID = Field(..., description="Unique booking ID")
    reference: str = Field(..., description="Human-readable booking reference")
    tour_id: UUID
    availability_id: Optional[UUID] = None
    booking_date: date
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    customer_nationality: Optional[str] = None
    total_retail: float
    currency: str
    status: BookingStatus
    language: str
    created_at: datetime
    items: List[BookingItem] = Field(default_factory=list)


class CreateBookingResponse(CamelModel):
    booking: Booking
    voucher_token: str = Field(..., description="Secret token that unlocks the voucher page")


class Voucher(CamelModel):
    """Booking as shown on the customer's voucher."""

    booking: Booking
    tour_slug: str
    tour_title: str
    time_slot: Optional[str] = None


class AdminBooking(Booking):
    """Booking with back-office only fields."""

    items: List[AdminBookingItem] = Field(default_factory=list)
    total_net: float
    profit: float
    notes: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    tour_slug: Optional[str] = None
    tour_number: Optional[str] = None
    updated_at: datetime


class UpdateBookingRequest(CamelModel):
    status: Optional[BookingStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)


class BookingFilters(CamelModel):
    status: Optional[BookingStatus] = None
    tour_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: Optional[str] = None
    limit: int = Field(50, ge=1, le=200)
    offset: int = Field(0, ge=0)
