"""Back-office analytics router."""

import logging
from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import utcnow
from ..core.dependencies import DatabaseSession, StaffUser
from ..core.exceptions import InternalServerError, ProblemDetailsException, ValidationError
from ..models.admin import AdminUser
from ..schemas.analytics import (
    ActiveVisitors,
    BookingAnalytics,
    CountryVisits,
    DashboardSummary,
    HourlyVisits,
    PageVisits,
    Share,
    TrendPeriod,
    VisitorStats,
    VisitorSummary,
    VisitorTrendPoint,
)
from ..services.analytics_service import DEFAULT_TREND_DAYS, AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/analytics", tags=["admin-analytics"])

START_DATE = Query(..., alias="startDate")
END_DATE = Query(..., alias="endDate")
LIMIT = Query(10, ge=1, le=100)


def _dump(data) -> JSONResponse:
    if isinstance(data, list):
        content = [item.model_dump(mode="json", by_alias=True) for item in data]
    else:
        content = data.model_dump(mode="json", by_alias=True)
    return JSONResponse(status_code=200, content=content)


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError(detail="endDate must not be before startDate")


async def _run(action: str, call):
    try:
        return _dump(await call)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(f"Unexpected error in {action}", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/bookings", response_model=BookingAnalytics)
async def booking_analytics(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Dashboard figures for bookings created in the range; defaults to the last 30 days."""
    end = end_date or utcnow().date()
    start = start_date or end - timedelta(days=DEFAULT_TREND_DAYS)
    _check_range(start, end)
    return await _run("booking analytics", AnalyticsService(db).get_booking_analytics(start, end))


@router.get("/bookings/summary", response_model=DashboardSummary)
async def booking_summary(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    return await _run("booking summary", AnalyticsService(db).get_dashboard_summary())


@router.get("/visitors/summary", response_model=VisitorSummary)
async def visitor_summary(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Today, 7 day, 30 day and year-to-date visits with change against the previous period."""
    return await _run("visitor summary", AnalyticsService(db).get_visitor_summary())


@router.get("/visitors/stats", response_model=VisitorStats)
async def visitor_stats(
    start_date: date = START_DATE,
    end_date: date = END_DATE,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    _check_range(start_date, end_date)
    return await _run("visitor stats", AnalyticsService(db).get_visitor_stats(start_date, end_date))


@router.get("/visitors/trend", response_model=List[VisitorTrendPoint])
async def visitor_trend(
    period: TrendPeriod = Query(TrendPeriod.DAY),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Daily points for a range, or 12 weeks / 12 months / 24 months of buckets."""
    if start_date and end_date:
        _check_range(start_date, end_date)
    return await _run("visitor trend", AnalyticsService(db).get_visitor_trend(period, start_date, end_date))


@router.get("/visitors/countries", response_model=List[CountryVisits])
async def visitors_by_country(
    start_date: date = START_DATE,
    end_date: date = END_DATE,
    limit: int = LIMIT,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    _check_range(start_date, end_date)
    return await _run("country breakdown", AnalyticsService(db).get_visitors_by_country(start_date, end_date, limit))


@router.get("/visitors/pages", response_model=List[PageVisits])
async def top_pages(
    start_date: date = START_DATE,
    end_date: date = END_DATE,
    limit: int = LIMIT,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    _check_range(start_date, end_date)
    return await _run("top pages", AnalyticsService(db).get_top_pages(start_date, end_date, limit))


@router.get("/visitors/devices", response_model=List[Share])
async def device_breakdown(
    start_date: date = START_DATE,
    end_date: date = END_DATE,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    _check_range(start_date, end_date)
    return await _run("device breakdown", AnalyticsService(db).get_device_breakdown(start_date, end_date))


@router.get("/visitors/browsers", response_model=List[Share])
async def browser_breakdown(
    start_date: date = START_DATE,
    end_date: date = END_DATE,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    _check_range(start_date, end_date)
    return await _run("browser breakdown", AnalyticsService(db).get_browser_breakdown(start_date, end_date))


@router.get("/visitors/sources", response_model=List[Share])
async def traffic_sources(
    start_date: date = START_DATE,
    end_date: date = END_DATE,
    limit: int = LIMIT,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Referrer domains; visits without an external referrer count as `Direct`."""
    _check_range(start_date, end_date)
    return await _run("traffic sources", AnalyticsService(db).get_traffic_sources(start_date, end_date, limit))


@router.get("/visitors/hourly", response_model=List[HourlyVisits])
async def hourly_distribution(
    start_date: date = START_DATE,
    end_date: date = END_DATE,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    _check_range(start_date, end_date)
    return await _run("hourly distribution", AnalyticsService(db).get_hourly_distribution(start_date, end_date))


@router.get("/visitors/live", response_model=ActiveVisitors)
async def live_visitors(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Sessions seen within the active-visitor window."""
    window = settings.active_visitor_window_minutes
    try:
        count = await AnalyticsService(db).get_active_visitors(window)
        return _dump(ActiveVisitors(count=count, window_minutes=window))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error counting live visitors", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e
