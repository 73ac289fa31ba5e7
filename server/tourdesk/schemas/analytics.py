"""Admin analytics schemas."""

import datetime as dt
from enum import Enum
from uuid import UUID

from .common import CamelModel


class DashboardStats(CamelModel):
    total_bookings: int
    total_revenue: float
    total_profit: float
    confirmed_bookings: int
    pending_bookings: int
    cancelled_bookings: int


class TourProfit(CamelModel):
    tour_id: UUID
    tour_slug: str
    total_revenue: float
    total_net: float
    total_profit: float
    booking_count: int


class DailyRevenue(CamelModel):
    date: dt.date
    revenue: float
    profit: float


class TopTour(CamelModel):
    tour_id: UUID
    tour_slug: str
    booking_count: int
    total_revenue: float
    total_profit: float


class StatusCount(CamelModel):
    status: str
    count: int


class ActivityType(str, Enum):
    BOOKING_CREATED = "booking_created"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"


class Activity(CamelModel):
    id: UUID
    type: ActivityType
    message: str
    timestamp: dt.datetime


class DashboardSummary(CamelModel):
    today_bookings: int
    today_revenue: float
    week_bookings: int
    week_revenue: float
    month_bookings: int
    month_revenue: float
    pending_bookings: int
    avg_order_value: float


class VisitorStats(CamelModel):
    total_visits: int
    unique_sessions: int
    unique_countries: int


class VisitorTrendPoint(CamelModel):
    """Visits for one bucket; `date` is the day, the week's Monday or the month's first day."""

    date: dt.date
    total_visits: int
    unique_sessions: int


class CountryVisits(CamelModel):
    country_code: str
    country_name: str
    visit_count: int
    unique_visitors: int


class PageVisits(CamelModel):
    page_path: str
    visit_count: int
    unique_visitors: int


class Share(CamelModel):
    """One bucket of a breakdown with its percentage of all visits."""

    name: str
    visit_count: int
    percentage: float


class HourlyVisits(CamelModel):
    hour: int
    visit_count: int


class ActiveVisitors(CamelModel):
    count: int
    window_minutes: int


class VisitorSummary(CamelModel):
    today_visits: int
    today_unique_visitors: int
    week_visits: int
    week_unique_visitors: int
    month_visits: int
    month_unique_visitors: int
    year_visits: int
    year_unique_visitors: int
    today_change: int
    week_change: int
    month_change: int


class TrendPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class BookingAnalytics(CamelModel):
    """Everything the admin dashboard shows for one date range."""

    stats: DashboardStats
    summary: DashboardSummary
    profit_by_tour: list[TourProfit]
    daily_revenue: list[DailyRevenue]
    top_tours: list[TopTour]
    bookings_by_status: list[StatusCount]
    recent_activity: list[Activity]
