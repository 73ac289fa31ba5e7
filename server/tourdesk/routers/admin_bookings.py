"""Back-office booking router."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, StaffUser
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.admin import AdminUser
from ..models.booking import BookingStatus
from ..schemas.booking import AdminBooking, BookingFilters, UpdateBookingRequest
from ..schemas.common import Page, SuccessResponse
from ..services.booking_service import BookingService, build_admin_booking

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/bookings", tags=["admin-bookings"])


@router.get("", response_model=Page[AdminBooking])
async def list_bookings(
    status: Optional[BookingStatus] = Query(None),
    tour_id: Optional[UUID] = Query(None, alias="tourId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None, description="Matches customer name, email or reference"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Newest-first page of bookings with filters."""
    filters = BookingFilters(
        status=status,
        tour_id=tour_id,
        start_date=start_date,
        end_date=end_date,
        search=search,
        limit=limit,
        offset=offset,
    )
    try:
        rows, total = await BookingService(db).list_bookings(filters)
        page = Page[AdminBooking](
            items=[build_admin_booking(booking, slug, number) for booking, slug, number in rows],
            total=total,
            limit=limit,
            offset=offset,
        )
        return JSONResponse(status_code=200, content=page.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error listing bookings", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/{booking_id}", response_model=AdminBooking)
async def get_booking(
    booking_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    booking_service = BookingService(db)
    try:
        booking = await booking_service.get_booking_by_id_or_raise(booking_id)
        tour = await booking_service.tour_service.get_tour_by_id(booking.tour_id)
        response_data = build_admin_booking(
            booking,
            tour.slug if tour else None,
            tour.tour_number if tour else None,
        )
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking retrieval",
            extra={"booking_id": str(booking_id), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e


@router.patch("/{booking_id}", response_model=AdminBooking)
async def update_booking(
    booking_id: UUID,
    request: UpdateBookingRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """
    Change status and/or notes.

    Confirming takes places from the booking's slot; cancelling a paid booking
    gives them back.
    """
    booking_service = BookingService(db)
    try:
        booking = await booking_service.update_booking(booking_id, request)
        tour = await booking_service.tour_service.get_tour_by_id(booking.tour_id)

        logger.info(
            "Booking updated by staff",
            extra={
                "booking_id": str(booking_id),
                "status": booking.status,
                "admin_id": str(admin.id),
            }
        )
        response_data = build_admin_booking(
            booking,
            tour.slug if tour else None,
            tour.tour_number if tour else None,
        )
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking update",
            extra={"booking_id": str(booking_id), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e


@router.delete("/{booking_id}", response_model=SuccessResponse)
async def delete_booking(
    booking_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        await BookingService(db).delete_booking(booking_id)
        return JSONResponse(status_code=200, content=SuccessResponse().model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking deletion",
            extra={"booking_id": str(booking_id), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e
