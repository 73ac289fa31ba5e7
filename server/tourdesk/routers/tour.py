"""Public tour catalogue router."""

import logging
from datetime import date, timedelta
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.dependencies import DatabaseSession
from ..core.exceptions import InternalServerError, ProblemDetailsException, ValidationError
from ..core.i18n import normalize_language
from ..schemas.availability import AvailabilityCheck, AvailabilitySlot
from ..schemas.tour import TourDetail, TourSummary
from ..services.availability_service import AvailabilityService
from ..services.tour_service import TourService, build_tour_detail, build_tour_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/tours", tags=["tours"])

DEFAULT_AVAILABILITY_DAYS = 90


@router.get("", response_model=List[TourSummary])
async def list_tours(
    lang: Optional[str] = Query(None, description="Content language"),
    category: Optional[str] = Query(None, description="Category slug"),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """List published tours, newest first."""
    language = normalize_language(lang)
    try:
        tours = await TourService(db).list_published_tours(category_slug=category)
        content = [build_tour_summary(tour, language).model_dump(mode="json", by_alias=True) for tour in tours]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error listing tours", extra={"category": category, "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/{slug}", response_model=TourDetail)
async def get_tour(
    slug: str,
    lang: Optional[str] = Query(None, description="Content language"),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Published tour with its blocks, upsells and packages resolved to one language."""
    language = normalize_language(lang)
    try:
        tour = await TourService(db).get_published_tour_by_slug_or_raise(slug)
        response_data = build_tour_detail(tour, language)
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error loading tour", extra={"slug": slug, "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/{tour_id}/availability", response_model=List[AvailabilitySlot])
async def get_availability(
    tour_id: UUID,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Enabled slots of a published tour; defaults to the next 90 days."""
    start = start_date or utcnow().date()
    end = end_date or start + timedelta(days=DEFAULT_AVAILABILITY_DAYS)
    try:
        if end < start:
            raise ValidationError(detail="endDate must not be before startDate")

        await TourService(db).get_published_tour_or_raise(tour_id)
        slots = await AvailabilityService(db).get_availability(tour_id, start, end)
        content = [AvailabilitySlot.model_validate(slot).model_dump(mode="json", by_alias=True) for slot in slots]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error loading availability", extra={"tour_id": str(tour_id), "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/{tour_id}/availability/check", response_model=AvailabilityCheck)
async def check_availability(
    tour_id: UUID,
    slot_date: date = Query(..., alias="date"),
    time_slot: Optional[str] = Query(None, alias="timeSlot"),
    quantity: int = Query(1, ge=1),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Whether the slot on `date` / `timeSlot` can take `quantity` more guests."""
    try:
        await TourService(db).get_published_tour_or_raise(tour_id)
        check = await AvailabilityService(db).check_slot_availability(tour_id, slot_date, time_slot, quantity)
        return JSONResponse(status_code=200, content=check.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error checking availability",
            extra={"tour_id": str(tour_id), "date": slot_date.isoformat(), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e
