"""Booking service for business logic operations."""

import logging
import secrets
import string
from datetime import datetime, time, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, SlotUnavailableError, ValidationError
from ..core.i18n import normalize_language, resolve_translation
from ..core.observability import metrics_collector
from ..models.availability import TourAvailability
from ..models.booking import (
    PAID_STATUSES,
    Booking,
    BookingItem,
    BookingItemType,
    BookingStatus,
)
from ..models.tour import Tour
from ..models.upsell import UpsellStatus
from ..schemas.booking import (
    AdminBooking,
    AdminBookingItem,
    Booking as BookingView,
    BookingFilters,
    BookingItem as BookingItemView,
    CreateBookingRequest,
    TourQuote,
    UpdateBookingRequest,
)
from .availability_service import AvailabilityService
from .pricing_service import grand_totals, money, price_tour_selection, price_upsell, upsell_multiplier
from .tour_service import TourService, resolve_tour_title

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "TD"


def booked_pax(booking: Booking) -> int:
    """Places a booking occupies in its slot: the quantity of its tour items."""
    return sum(item.quantity for item in booking.items if item.item_type == BookingItemType.TOUR)


NET_METADATA_KEYS = frozenset({"unitNetPrice", "totalNet"})


def _public_metadata(metadata: Optional[dict]) -> Optional[dict]:
    if not metadata:
        return metadata
    public = dict(metadata)
    if isinstance(public.get("breakdown"), list):
        public["breakdown"] = [
            {k: v for k, v in line.items() if k not in NET_METADATA_KEYS}
            for line in public["breakdown"]
        ]
    return public


def _item_fields(item: BookingItem) -> dict:
    return {
        "id": item.id,
        "item_type": item.item_type,
        "item_id": item.item_id,
        "item_name": item.item_name,
        "quantity": item.quantity,
        "retail_price_snapshot": item.retail_price_snapshot,
        "subtotal_retail": item.subtotal_retail,
    }


def _booking_fields(booking: Booking) -> dict:
    return {
        "id": booking.id,
        "reference": booking.reference,
        "tour_id": booking.tour_id,
        "availability_id": booking.availability_id,
        "booking_date": booking.booking_date,
        "customer_name": booking.customer_name,
        "customer_email": booking.customer_email,
        "customer_phone": booking.customer_phone,
        "customer_nationality": booking.customer_nationality,
        "total_retail": booking.total_retail,
        "currency": booking.currency,
        "status": booking.status,
        "language": booking.language,
        "created_at": booking.created_at,
    }


def build_booking(booking: Booking) -> BookingView:
    """Customer-facing view without net prices or internal notes."""
    return BookingView(
        **_booking_fields(booking),
        items=[
            BookingItemView(**_item_fields(item), metadata=_public_metadata(item.item_metadata))
            for item in booking.items
        ],
    )


def build_admin_booking(
    booking: Booking,
    tour_slug: Optional[str] = None,
    tour_number: Optional[str] = None,
) -> AdminBooking:
    return AdminBooking(
        **_booking_fields(booking),
        items=[
            AdminBookingItem(
                **_item_fields(item),
                metadata=item.item_metadata,
                net_price_snapshot=item.net_price_snapshot,
                subtotal_net=item.subtotal_net,
            )
            for item in booking.items
        ],
        total_net=booking.total_net,
        profit=booking.profit,
        notes=booking.notes,
        stripe_payment_intent_id=booking.stripe_payment_intent_id,
        tour_slug=tour_slug,
        tour_number=tour_number,
        updated_at=booking.updated_at,
    )


class BookingService:
    """Service for booking-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)
        self.availability_service = AvailabilityService(db)

    def _generate_booking_code(self, length: int = 8) -> str:
        """Generate a random booking confirmation code."""
        alphabet = string.ascii_uppercase + string.digits
        return ''.join(secrets.choice(alphabet) for _ in range(length))

    async def _generate_reference(self) -> str:
        while True:
            reference = f"{REFERENCE_PREFIX}-{self._generate_booking_code()}"
            exists = await self.db.execute(select(Booking.id).where(Booking.reference == reference))
            if exists.scalar_one_or_none() is None:
                return reference

    async def _check_slot(self, tour: Tour, request: CreateBookingRequest, pax: int) -> Optional[TourAvailability]:
        if request.availability_id is None:
            return None

        slot = await self.availability_service.get_slot_by_id(request.availability_id)
        if slot is None or slot.tour_id != tour.id:
            raise ValidationError(
                detail="The selected availability slot does not belong to this tour",
                errors={"availabilityId": str(request.availability_id)},
            )
        if slot.date != request.booking_date:
            raise ValidationError(
                detail="The booking date does not match the selected availability slot",
                errors={"bookingDate": request.booking_date.isoformat()},
            )
        if not slot.enabled or slot.capacity - slot.booked < pax:
            logger.warning(
                "Booking rejected - slot has insufficient capacity",
                extra={
                    "slot_id": str(slot.id),
                    "requested": pax,
                    "capacity": slot.capacity,
                    "booked": slot.booked,
                    "enabled": slot.enabled,
                }
            )
            raise SlotUnavailableError(
                requested=pax,
                remaining=max(slot.capacity - slot.booked, 0) if slot.enabled else 0,
                slot_id=str(slot.id),
            )
        return slot

    def _tour_item(self, tour: Tour, quote: TourQuote, lang: str) -> BookingItem:
        unit_retail = money(quote.total_retail / quote.pax) if quote.pax else quote.total_retail
        unit_net = money(quote.total_net / quote.pax) if quote.pax else quote.total_net
        return BookingItem(
            item_type=BookingItemType.TOUR.value,
            item_id=tour.id,
            item_name=resolve_tour_title(tour, lang),
            quantity=max(quote.pax, 1),
            retail_price_snapshot=unit_retail,
            net_price_snapshot=unit_net,
            subtotal_retail=quote.total_retail,
            subtotal_net=quote.total_net,
            item_metadata={
                "adults": quote.adults,
                "children": quote.children,
                "seatType": quote.seat_type,
                "breakdown": [line.model_dump(by_alias=True) for line in quote.breakdown],
            },
        )

    async def create_booking(self, request: CreateBookingRequest) -> Booking:
        """
        Create a booking awaiting payment.

        Totals are computed from the tour's stored pricing and upsells, never
        taken from the client.

        Args:
            request: Booking creation request

        Returns:
            Created booking with its items

        Raises:
            NotFoundError: If the tour does not exist or is not published
            ValidationError: If the selection or slot is invalid
            SlotUnavailableError: If the slot cannot take the guests
        """
        tour = await self.tour_service.get_published_tour_or_raise(request.tour_id)
        lang = normalize_language(request.language)

        if tour.pricing is None:
            raise ValidationError(detail="This tour has no pricing configured")

        quote = price_tour_selection(tour.pricing.config, request.selection.tour)
        slot = await self._check_slot(tour, request, quote.pax)

        items = [self._tour_item(tour, quote, lang)]
        upsell_totals = []
        upsells_by_id = {u.id: u for u in tour.upsells if u.status == UpsellStatus.ACTIVE}
        for selected in request.selection.upsells:
            upsell = upsells_by_id.get(selected.upsell_id)
            if upsell is None:
                raise ValidationError(
                    detail=f"Upsell {selected.upsell_id} is not available for this tour",
                    errors={"upsellId": str(selected.upsell_id)},
                )
            total_retail, total_net = price_upsell(
                upsell.pricing_type,
                upsell.retail_price,
                upsell.net_price,
                selected.quantity,
                quote.pax,
                upsell.max_quantity,
            )
            upsell_totals.append((total_retail, total_net))
            translation = resolve_translation(upsell.translations, lang)
            items.append(
                BookingItem(
                    item_type=BookingItemType.UPSELL.value,
                    item_id=upsell.id,
                    item_name=translation.title if translation else "Add-on",
                    quantity=selected.quantity,
                    retail_price_snapshot=money(upsell.retail_price),
                    net_price_snapshot=money(upsell.net_price),
                    subtotal_retail=total_retail,
                    subtotal_net=total_net,
                    item_metadata={
                        "pricingType": upsell.pricing_type,
                        "units": upsell_multiplier(upsell.pricing_type, selected.quantity, quote.pax),
                    },
                )
            )

        total_retail, total_net = grand_totals(quote, upsell_totals)

        booking = Booking(
            reference=await self._generate_reference(),
            tour_id=tour.id,
            availability_id=slot.id if slot else None,
            booking_date=request.booking_date,
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            customer_phone=request.customer_phone,
            customer_nationality=request.customer_nationality,
            total_retail=total_retail,
            total_net=total_net,
            currency=quote.currency,
            status=BookingStatus.PENDING_PAYMENT.value,
            language=lang,
            voucher_token=secrets.token_urlsafe(24),
            notes=request.notes,
            items=items,
        )

        self.db.add(booking)
        await self.db.commit()

        metrics_collector.record_booking_created(str(tour.id))
        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": str(booking.id),
                "reference": booking.reference,
                "tour_id": str(tour.id),
                "availability_id": str(slot.id) if slot else None,
                "pax": quote.pax,
                "total_retail": total_retail,
                "currency": quote.currency,
            }
        )

        return await self.get_booking_by_id_or_raise(booking.id)

    async def get_booking_by_id(self, booking_id: UUID) -> Optional[Booking]:
        stmt = select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_by_id_or_raise(self, booking_id: UUID) -> Booking:
        """
        Get booking by ID or raise NotFoundError.

        Raises:
            NotFoundError: If booking not found
        """
        booking = await self.get_booking_by_id(booking_id)
        if not booking:
            logger.warning(
                "Booking not found",
                extra={"booking_id": str(booking_id)}
            )
            raise NotFoundError(
                resource_type="booking",
                resource_id=str(booking_id)
            )
        return booking

    async def get_booking_by_payment_intent(self, payment_intent_id: str) -> Optional[Booking]:
        result = await self.db.execute(
            select(Booking).where(Booking.stripe_payment_intent_id == payment_intent_id)
        )
        return result.scalar_one_or_none()

    async def get_voucher(self, booking_id: UUID, token: str) -> tuple[Booking, Tour, Optional[TourAvailability]]:
        """
        Booking, tour and slot for the voucher page.

        Raises:
            NotFoundError: If the booking does not exist or the token does not match
        """
        booking = await self.get_booking_by_id(booking_id)
        if booking is None or not secrets.compare_digest(booking.voucher_token.encode(), token.encode()):
            logger.warning("Voucher lookup failed", extra={"booking_id": str(booking_id)})
            raise NotFoundError(resource_type="voucher", resource_id=str(booking_id))

        tour = await self.tour_service.get_tour_by_id_or_raise(booking.tour_id)
        slot = None
        if booking.availability_id:
            slot = await self.availability_service.get_slot_by_id(booking.availability_id)
        return booking, tour, slot

    async def list_bookings(self, filters: BookingFilters) -> tuple[list[tuple[Booking, str, str]], int]:
        """
        Filtered, newest-first page of bookings with their tour slug and number.

        Returns:
            (rows, total) where each row is (booking, tour_slug, tour_number)
        """
        conditions = []
        if filters.status is not None:
            conditions.append(Booking.status == filters.status.value)
        if filters.tour_id is not None:
            conditions.append(Booking.tour_id == filters.tour_id)
        if filters.start_date is not None:
            conditions.append(Booking.created_at >= datetime.combine(filters.start_date, time.min, tzinfo=timezone.utc))
        if filters.end_date is not None:
            end = datetime.combine(filters.end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
            conditions.append(Booking.created_at < end)
        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            conditions.append(
                or_(
                    Booking.customer_name.ilike(pattern),
                    Booking.customer_email.ilike(pattern),
                    Booking.reference.ilike(pattern),
                )
            )

        total = await self.db.scalar(select(func.count(Booking.id)).where(*conditions))

        stmt = (
            select(Booking, Tour.slug, Tour.tour_number)
            .join(Tour, Tour.id == Booking.tour_id)
            .where(*conditions)
            .order_by(Booking.created_at.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        result = await self.db.execute(stmt)
        rows = [(row[0], row[1], row[2]) for row in result.all()]
        return rows, total or 0

    async def transition_status(self, booking: Booking, new_status: BookingStatus, source: str) -> Booking:
        """
        Move a booking to `new_status`, keeping the slot's booked count in step.

        Entering a paid status takes the places and leaving one gives them
        back, whatever the other status is. Does not commit.
        """
        old_status = booking.status
        if old_status == new_status.value:
            return booking

        pax = booked_pax(booking)
        was_paid = old_status in PAID_STATUSES
        is_paid = new_status.value in PAID_STATUSES
        if booking.availability_id and pax:
            if is_paid and not was_paid:
                await self.availability_service.increment_booked(booking.availability_id, pax)
            elif was_paid and not is_paid:
                await self.availability_service.increment_booked(booking.availability_id, -pax)

        booking.status = new_status.value

        if new_status == BookingStatus.CONFIRMED:
            metrics_collector.record_booking_confirmed()
        elif new_status == BookingStatus.CANCELLED:
            metrics_collector.record_booking_cancelled(source)

        logger.info(
            "Booking status changed",
            extra={
                "booking_id": str(booking.id),
                "reference": booking.reference,
                "from_status": old_status,
                "to_status": new_status.value,
                "source": source,
            }
        )
        return booking

    async def update_booking(self, booking_id: UUID, request: UpdateBookingRequest) -> Booking:
        """Back-office status and notes change."""
        booking = await self.get_booking_by_id_or_raise(booking_id)

        if request.status is not None:
            await self.transition_status(booking, request.status, source="admin")
        if "notes" in request.model_fields_set:
            booking.notes = request.notes

        await self.db.commit()
        return await self.get_booking_by_id_or_raise(booking_id)

    async def delete_booking(self, booking_id: UUID) -> None:
        """Delete a booking and its items, releasing its places if it was paid."""
        booking = await self.get_booking_by_id_or_raise(booking_id)

        pax = booked_pax(booking)
        if booking.availability_id and pax and booking.status in PAID_STATUSES:
            await self.availability_service.increment_booked(booking.availability_id, -pax)

        await self.db.execute(delete(BookingItem).where(BookingItem.booking_id == booking_id))
        await self.db.execute(delete(Booking).where(Booking.id == booking_id))
        await self.db.commit()

        logger.info(
            "Booking deleted",
            extra={"booking_id": str(booking_id), "reference": booking.reference}
        )
