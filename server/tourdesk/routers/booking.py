"""Booking router for checkout and voucher lookup."""

import logging
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..core.i18n import normalize_language
from ..schemas.booking import CreateBookingRequest, CreateBookingResponse, Voucher
from ..services.booking_service import BookingService, build_booking
from ..services.tour_service import resolve_tour_title

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/bookings", tags=["bookings"])


@router.post("", response_model=CreateBookingResponse, status_code=201)
async def create_booking(
    request: CreateBookingRequest,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """
    Create a booking awaiting payment.

    Prices are recomputed from the tour's pricing; client totals are never trusted.
    The returned voucher token is the only way to open the voucher later.
    """
    booking_service = BookingService(db)

    try:
        booking = await booking_service.create_booking(request)
        response_data = CreateBookingResponse(booking=build_booking(booking), voucher_token=booking.voucher_token)

        return JSONResponse(
            status_code=201,
            content=response_data.model_dump(mode="json", by_alias=True),
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking creation",
            extra={
                "tour_id": str(request.tour_id),
                "availability_id": str(request.availability_id) if request.availability_id else None,
                "booking_date": request.booking_date.isoformat(),
                "error": str(e),
            },
            exc_info=True,
        )
        raise InternalServerError() from e


@router.get("/{booking_id}/voucher", response_model=Voucher)
async def get_voucher(
    booking_id: UUID,
    token: str = Query(..., min_length=1, description="Voucher token returned at checkout"),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Voucher for a booking; an unknown booking and a wrong token both give 404."""
    booking_service = BookingService(db)

    try:
        booking, tour, slot = await booking_service.get_voucher(booking_id, token)
        response_data = Voucher(
            booking=build_booking(booking),
            tour_slug=tour.slug,
            tour_title=resolve_tour_title(tour, normalize_language(booking.language)),
            time_slot=slot.time_slot if slot else None,
        )

        logger.info("Voucher retrieved", extra={"booking_id": str(booking_id), "reference": booking.reference})
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in voucher retrieval",
            extra={"booking_id": str(booking_id), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e
