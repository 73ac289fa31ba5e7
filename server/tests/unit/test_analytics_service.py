"""Unit tests for dashboard analytics."""

from collections import Counter
from datetime import date, datetime, timedelta, timezone

import pytest

from tourdesk.core.database import utcnow
from tourdesk.models import ActiveSession, BookingStatus, PageVisit
from tourdesk.schemas.analytics import TrendPeriod
from tourdesk.schemas.booking import CreateBookingRequest, UpdateBookingRequest
from tourdesk.services.analytics_service import (
    AnalyticsService,
    month_start,
    months_before,
    percent_change,
    shares,
    week_start,
)
from tourdesk.services.booking_service import BookingService

# A Wednesday
DAY = date(2030, 7, 10)


def at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, 0, tzinfo=timezone.utc)


def visit(created_at: datetime, session_id: str, **fields) -> PageVisit:
    values = {
        "page_path": "/",
        "visitor_ip_hash": "0" * 16,
        "device_type": "desktop",
        "browser": "Chrome",
        "operating_system": "Windows",
    }
    values.update(fields)
    return PageVisit(session_id=session_id, created_at=created_at, **values)


def test_percent_change():
    assert percent_change(15, 10) == 50
    assert percent_change(5, 10) == -50
    assert percent_change(3, 0) == 100
    assert percent_change(0, 0) == 0
    assert percent_change(9, 8) == 13
    assert percent_change(7, 8) == -12


def test_calendar_helpers():
    assert week_start(DAY) == date(2030, 7, 8)
    assert month_start(DAY) == date(2030, 7, 1)
    assert months_before(DAY, 7) == date(2029, 12, 1)
    assert months_before(date(2030, 1, 31), 1) == date(2029, 12, 1)


def test_shares():
    result = shares(Counter({"desktop": 3, "mobile": 1}))
    assert [(s.name, s.visit_count, s.percentage) for s in result] == [("desktop", 3, 75.0), ("mobile", 1, 25.0)]
    assert shares(Counter()) == []
    assert len(shares(Counter({"a": 2, "b": 1, "c": 1}), limit=1)) == 1


@pytest.mark.asyncio
async def test_booking_figures(test_session, booking_payload, published_tour):
    bookings = BookingService(test_session)
    paid = await bookings.create_booking(CreateBookingRequest.model_validate(booking_payload))
    cancelled = await bookings.create_booking(CreateBookingRequest.model_validate(booking_payload))
    await bookings.create_booking(CreateBookingRequest.model_validate(booking_payload))
    await bookings.update_booking(paid.id, UpdateBookingRequest(status=BookingStatus.CONFIRMED))
    await bookings.update_booking(cancelled.id, UpdateBookingRequest(status=BookingStatus.CANCELLED))

    today = utcnow().date()
    service = AnalyticsService(test_session)

    stats = await service.get_dashboard_stats(today - timedelta(days=1), today + timedelta(days=1))
    assert stats.total_bookings == 3
    assert stats.confirmed_bookings == 1
    assert stats.pending_bookings == 1
    assert stats.cancelled_bookings == 1
    assert stats.total_revenue == 3 * 3400
    assert stats.total_profit == 3 * 1160

    profit = await service.get_profit_by_tour(today - timedelta(days=1), today + timedelta(days=1))
    assert len(profit) == 1
    assert profit[0].tour_slug == "phi-phi-island"
    assert profit[0].booking_count == 1
    assert profit[0].total_profit == 1160

    top = await service.get_top_tours(today - timedelta(days=1), today + timedelta(days=1))
    assert top[0].total_revenue == 3400

    statuses = {s.status: s.count for s in await service.get_bookings_by_status()}
    assert statuses == {"cancelled": 1, "confirmed": 1, "pending_payment": 1}

    summary = await service.get_dashboard_summary(today)
    assert summary.today_bookings == 3
    assert summary.week_bookings == 3
    assert summary.pending_bookings == 1
    assert summary.avg_order_value == 3400

    activity = await service.get_recent_activity()
    assert len(activity) == 3
    assert {a.type.value for a in activity} == {"booking_created", "booking_confirmed", "booking_cancelled"}


@pytest.mark.asyncio
async def test_booking_figures_outside_range_are_empty(test_session, booking_payload):
    await BookingService(test_session).create_booking(CreateBookingRequest.model_validate(booking_payload))
    service = AnalyticsService(test_session)

    stats = await service.get_dashboard_stats(date(2020, 1, 1), date(2020, 1, 31))

    assert stats.total_bookings == 0
    assert stats.total_revenue == 0
    assert await service.get_daily_revenue(date(2020, 1, 1), date(2020, 1, 31)) == []


@pytest.mark.asyncio
async def test_visitor_figures(test_session):
    test_session.add_all([
        visit(at(DAY, 9), "a", page_path="/tours/phi-phi-island", country_code="TH", country_name="Thailand"),
        visit(at(DAY, 9), "a", page_path="/", country_code="TH", country_name="Thailand"),
        visit(at(DAY, 15), "b", device_type="mobile", browser="Safari", referrer_domain="www.google.com"),
        visit(at(DAY - timedelta(days=1), 20), "c", device_type="mobile"),
        # outside the queried range
        visit(at(DAY - timedelta(days=40)), "d"),
    ])
    await test_session.commit()
    service = AnalyticsService(test_session)
    start, end = DAY - timedelta(days=1), DAY

    stats = await service.get_visitor_stats(start, end)
    assert (stats.total_visits, stats.unique_sessions, stats.unique_countries) == (4, 3, 1)

    daily = await service.get_daily_visitors(start, end)
    assert [(p.date, p.total_visits, p.unique_sessions) for p in daily] == [(start, 1, 1), (DAY, 3, 2)]

    countries = await service.get_visitors_by_country(start, end)
    assert countries[0].country_code == "TH"
    assert countries[0].visit_count == 2
    assert countries[0].unique_visitors == 1

    pages = await service.get_top_pages(start, end)
    assert pages[0].page_path == "/"
    assert pages[0].visit_count == 3

    devices = {s.name: s.percentage for s in await service.get_device_breakdown(start, end)}
    assert devices == {"desktop": 50.0, "mobile": 50.0}

    sources = await service.get_traffic_sources(start, end)
    assert [(s.name, s.visit_count) for s in sources] == [("Direct", 3), ("www.google.com", 1)]

    hourly = await service.get_hourly_distribution(start, end)
    assert len(hourly) == 24
    assert hourly[9].visit_count == 2
    assert hourly[20].visit_count == 1
    assert sum(h.visit_count for h in hourly) == 4


@pytest.mark.asyncio
async def test_weekly_and_monthly_trends(test_session):
    test_session.add_all([
        visit(at(DAY), "a"),
        visit(at(date(2030, 7, 8)), "b"),
        visit(at(date(2030, 7, 3)), "c"),
        visit(at(date(2030, 5, 20)), "d"),
    ])
    await test_session.commit()
    service = AnalyticsService(test_session)

    weekly = await service.get_weekly_visitors(weeks=2, today=DAY)
    assert [(p.date, p.total_visits) for p in weekly] == [(date(2030, 7, 1), 1), (date(2030, 7, 8), 2)]

    monthly = await service.get_monthly_visitors(months=3, today=DAY)
    assert [(p.date, p.total_visits) for p in monthly] == [(date(2030, 5, 1), 1), (date(2030, 7, 1), 3)]

    daily = await service.get_visitor_trend(TrendPeriod.DAY, date(2030, 7, 8), DAY)
    assert sum(p.total_visits for p in daily) == 2


@pytest.mark.asyncio
async def test_visitor_summary_changes(test_session):
    test_session.add_all([
        visit(at(DAY), "a"),
        visit(at(DAY), "b"),
        visit(at(DAY - timedelta(days=1)), "c"),
    ])
    await test_session.commit()

    summary = await AnalyticsService(test_session).get_visitor_summary(DAY)

    assert summary.today_visits == 2
    assert summary.today_unique_visitors == 2
    assert summary.today_change == 100
    assert summary.week_unique_visitors == 3
    assert summary.week_change == 100
    assert summary.year_visits == 3


@pytest.mark.asyncio
async def test_active_visitors_window(test_session):
    now = utcnow()
    test_session.add_all([
        ActiveSession(session_id="fresh", page_path="/", last_seen=now - timedelta(minutes=1)),
        ActiveSession(session_id="stale", page_path="/", last_seen=now - timedelta(minutes=30)),
    ])
    await test_session.commit()
    service = AnalyticsService(test_session)

    assert await service.get_active_visitors() == 1
    assert await service.get_active_visitors(window_minutes=60) == 2
