"""Dashboard analytics over bookings and page visits."""

import logging
import math
from collections import Counter, defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import utcnow
from ..models.analytics import ActiveSession, PageVisit
from ..models.booking import OPEN_STATUSES, PAID_STATUSES, Booking, BookingStatus
from ..models.tour import Tour
from ..schemas.analytics import (
    Activity,
    ActivityType,
    BookingAnalytics,
    CountryVisits,
    DailyRevenue,
    DashboardStats,
    DashboardSummary,
    HourlyVisits,
    PageVisits,
    Share,
    StatusCount,
    TopTour,
    TourProfit,
    TrendPeriod,
    VisitorStats,
    VisitorSummary,
    VisitorTrendPoint,
)
from .pricing_service import money

logger = logging.getLogger(__name__)

DEFAULT_TREND_DAYS = 30
TOP_TOURS_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10


def day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Half-open UTC interval covering every day from `start` to `end` inclusive."""
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


def percent_change(current: int, previous: int) -> int:
    if previous == 0:
        return 100 if current > 0 else 0
    # halves round up, so -12.5 gives -12
    return math.floor((current - previous) / previous * 100 + 0.5)


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def month_start(day: date) -> date:
    return day.replace(day=1)


def months_before(day: date, months: int) -> date:
    """First day of the month `months` months before `day`."""
    index = day.year * 12 + (day.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def shares(counts: Counter, limit: Optional[int] = None) -> list[Share]:
    """Sort buckets by count and attach their percentage of the total."""
    total = sum(counts.values())
    return [
        Share(name=name, visit_count=count, percentage=round(count / total * 100, 1) if total else 0.0)
        for name, count in counts.most_common(limit)
    ]


class AnalyticsService:
    """Service computing admin dashboard figures."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Bookings

    async def _bookings_between(self, start: date, end: date, statuses: Optional[tuple[str, ...]] = None):
        lower, upper = day_bounds(start, end)
        stmt = (
            select(Booking.tour_id, Booking.total_retail, Booking.total_net, Booking.status, Booking.created_at, Tour.slug)
            .join(Tour, Tour.id == Booking.tour_id)
            .where(Booking.created_at >= lower, Booking.created_at < upper)
            .order_by(Booking.created_at)
        )
        if statuses:
            stmt = stmt.where(Booking.status.in_(statuses))
        result = await self.db.execute(stmt)
        return result.all()

    async def get_dashboard_stats(self, start: date, end: date) -> DashboardStats:
        rows = await self._bookings_between(start, end)
        revenue = sum(row.total_retail for row in rows)
        net = sum(row.total_net for row in rows)
        return DashboardStats(
            total_bookings=len(rows),
            total_revenue=money(revenue),
            total_profit=money(revenue - net),
            confirmed_bookings=sum(1 for row in rows if row.status in PAID_STATUSES),
            pending_bookings=sum(1 for row in rows if row.status in OPEN_STATUSES),
            cancelled_bookings=sum(1 for row in rows if row.status == BookingStatus.CANCELLED.value),
        )

    async def _tour_totals(self, start: date, end: date) -> list[TourProfit]:
        totals: dict = {}
        for row in await self._bookings_between(start, end, PAID_STATUSES):
            entry = totals.setdefault(row.tour_id, {"slug": row.slug, "retail": 0.0, "net": 0.0, "count": 0})
            entry["retail"] += row.total_retail
            entry["net"] += row.total_net
            entry["count"] += 1
        return [
            TourProfit(
                tour_id=tour_id,
                tour_slug=entry["slug"],
                total_revenue=money(entry["retail"]),
                total_net=money(entry["net"]),
                total_profit=money(entry["retail"] - entry["net"]),
                booking_count=entry["count"],
            )
            for tour_id, entry in totals.items()
        ]

    async def get_profit_by_tour(self, start: date, end: date) -> list[TourProfit]:
        """Paid bookings grouped per tour, most profitable first."""
        return sorted(await self._tour_totals(start, end), key=lambda t: t.total_profit, reverse=True)

    async def get_top_tours(self, start: date, end: date, limit: int = TOP_TOURS_LIMIT) -> list[TopTour]:
        ranked = sorted(await self._tour_totals(start, end), key=lambda t: t.total_revenue, reverse=True)
        return [
            TopTour(
                tour_id=t.tour_id,
                tour_slug=t.tour_slug,
                booking_count=t.booking_count,
                total_revenue=t.total_revenue,
                total_profit=t.total_profit,
            )
            for t in ranked[:limit]
        ]

    async def get_daily_revenue(self, start: date, end: date) -> list[DailyRevenue]:
        revenue: dict[date, float] = defaultdict(float)
        profit: dict[date, float] = defaultdict(float)
        for row in await self._bookings_between(start, end, PAID_STATUSES):
            day = row.created_at.date()
            revenue[day] += row.total_retail
            profit[day] += row.total_retail - row.total_net
        return [DailyRevenue(date=day, revenue=money(revenue[day]), profit=money(profit[day])) for day in sorted(revenue)]

    async def get_bookings_by_status(self, start: Optional[date] = None, end: Optional[date] = None) -> list[StatusCount]:
        stmt = select(Booking.status, func.count(Booking.id)).group_by(Booking.status).order_by(Booking.status)
        if start is not None:
            stmt = stmt.where(Booking.created_at >= day_bounds(start, start)[0])
        if end is not None:
            stmt = stmt.where(Booking.created_at < day_bounds(end, end)[1])
        result = await self.db.execute(stmt)
        return [StatusCount(status=status, count=count) for status, count in result.all()]

    async def get_recent_activity(self, limit: int = RECENT_ACTIVITY_LIMIT) -> list[Activity]:
        """Latest booking changes phrased for the dashboard feed."""
        result = await self.db.execute(
            select(Booking.id, Booking.reference, Booking.customer_name, Booking.status, Booking.updated_at)
            .order_by(Booking.updated_at.desc())
            .limit(limit)
        )
        activity = []
        for row in result.all():
            if row.status in PAID_STATUSES:
                kind, message = ActivityType.BOOKING_CONFIRMED, f"Booking {row.reference} confirmed"
            elif row.status == BookingStatus.CANCELLED.value:
                kind, message = ActivityType.BOOKING_CANCELLED, f"Booking {row.reference} cancelled"
            else:
                kind, message = ActivityType.BOOKING_CREATED, f"New booking {row.reference} by {row.customer_name}"
            activity.append(Activity(id=row.id, type=kind, message=message, timestamp=row.updated_at))
        return activity

    async def get_dashboard_summary(self, today: Optional[date] = None) -> DashboardSummary:
        """Rolling today / 7 day / 30 day booking counts and revenue."""
        today = today or utcnow().date()
        week_ago = today - timedelta(days=7)
        rows = await self._bookings_between(today - timedelta(days=30), today)

        summary = dict.fromkeys(
            ("today_bookings", "week_bookings", "month_bookings", "pending_bookings"), 0
        )
        today_revenue = week_revenue = month_revenue = paid_revenue = 0.0
        paid_count = 0
        for row in rows:
            day = row.created_at.date()
            summary["month_bookings"] += 1
            month_revenue += row.total_retail
            if day == today:
                summary["today_bookings"] += 1
                today_revenue += row.total_retail
            if day >= week_ago:
                summary["week_bookings"] += 1
                week_revenue += row.total_retail
            if row.status in OPEN_STATUSES:
                summary["pending_bookings"] += 1
            if row.status in PAID_STATUSES:
                paid_revenue += row.total_retail
                paid_count += 1

        return DashboardSummary(
            today_revenue=money(today_revenue),
            week_revenue=money(week_revenue),
            month_revenue=money(month_revenue),
            avg_order_value=money(paid_revenue / paid_count) if paid_count else 0.0,
            **summary,
        )

    async def get_booking_analytics(self, start: date, end: date) -> BookingAnalytics:
        return BookingAnalytics(
            stats=await self.get_dashboard_stats(start, end),
            summary=await self.get_dashboard_summary(),
            profit_by_tour=await self.get_profit_by_tour(start, end),
            daily_revenue=await self.get_daily_revenue(start, end),
            top_tours=await self.get_top_tours(start, end),
            bookings_by_status=await self.get_bookings_by_status(start, end),
            recent_activity=await self.get_recent_activity(),
        )

    # Visitors

    def _visit_window(self, start: date, end: date):
        lower, upper = day_bounds(start, end)
        return (PageVisit.created_at >= lower, PageVisit.created_at < upper)

    async def get_visitor_stats(self, start: date, end: date) -> VisitorStats:
        result = await self.db.execute(
            select(
                func.count(PageVisit.id),
                func.count(distinct(PageVisit.session_id)),
                func.count(distinct(PageVisit.country_code)),
            ).where(*self._visit_window(start, end))
        )
        visits, sessions, countries = result.one()
        return VisitorStats(total_visits=visits, unique_sessions=sessions, unique_countries=countries)

    async def _visits(self, start: date, end: date, *columns):
        result = await self.db.execute(select(*columns).where(*self._visit_window(start, end)))
        return result.all()

    @staticmethod
    def _trend(rows, bucket) -> list[VisitorTrendPoint]:
        visits: Counter = Counter()
        sessions: dict[date, set] = defaultdict(set)
        for created_at, session_id in rows:
            key = bucket(created_at.date())
            visits[key] += 1
            sessions[key].add(session_id)
        return [
            VisitorTrendPoint(date=key, total_visits=visits[key], unique_sessions=len(sessions[key]))
            for key in sorted(visits)
        ]

    async def get_daily_visitors(self, start: date, end: date) -> list[VisitorTrendPoint]:
        rows = await self._visits(start, end, PageVisit.created_at, PageVisit.session_id)
        return self._trend(rows, lambda day: day)

    async def get_weekly_visitors(self, weeks: int = 12, today: Optional[date] = None) -> list[VisitorTrendPoint]:
        """Visits bucketed by the Monday of their week."""
        today = today or utcnow().date()
        rows = await self._visits(today - timedelta(days=weeks * 7), today, PageVisit.created_at, PageVisit.session_id)
        return self._trend(rows, week_start)

    async def get_monthly_visitors(self, months: int = 12, today: Optional[date] = None) -> list[VisitorTrendPoint]:
        """Visits bucketed by the first day of their month."""
        today = today or utcnow().date()
        rows = await self._visits(months_before(today, months), today, PageVisit.created_at, PageVisit.session_id)
        return self._trend(rows, month_start)

    async def get_visitor_trend(
        self,
        period: TrendPeriod,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[VisitorTrendPoint]:
        if period == TrendPeriod.WEEK:
            return await self.get_weekly_visitors(12)
        if period == TrendPeriod.MONTH:
            return await self.get_monthly_visitors(12)
        if period == TrendPeriod.YEAR:
            return await self.get_monthly_visitors(24)
        if start is None or end is None:
            end = utcnow().date()
            start = end - timedelta(days=DEFAULT_TREND_DAYS)
        return await self.get_daily_visitors(start, end)

    async def get_visitors_by_country(self, start: date, end: date, limit: int = 10) -> list[CountryVisits]:
        rows = await self._visits(start, end, PageVisit.country_code, PageVisit.country_name, PageVisit.session_id)
        visits: Counter = Counter()
        sessions: dict[tuple, set] = defaultdict(set)
        for code, name, session_id in rows:
            key = (code or "XX", name or "Unknown")
            visits[key] += 1
            sessions[key].add(session_id)
        return [
            CountryVisits(country_code=code, country_name=name, visit_count=count, unique_visitors=len(sessions[(code, name)]))
            for (code, name), count in visits.most_common(limit)
        ]

    async def get_top_pages(self, start: date, end: date, limit: int = 10) -> list[PageVisits]:
        rows = await self._visits(start, end, PageVisit.page_path, PageVisit.session_id)
        visits: Counter = Counter()
        sessions: dict[str, set] = defaultdict(set)
        for path, session_id in rows:
            visits[path] += 1
            sessions[path].add(session_id)
        return [
            PageVisits(page_path=path, visit_count=count, unique_visitors=len(sessions[path]))
            for path, count in visits.most_common(limit)
        ]

    async def get_device_breakdown(self, start: date, end: date) -> list[Share]:
        rows = await self._visits(start, end, PageVisit.device_type)
        return shares(Counter(device or "unknown" for (device,) in rows))

    async def get_browser_breakdown(self, start: date, end: date) -> list[Share]:
        rows = await self._visits(start, end, PageVisit.browser)
        return shares(Counter(browser or "Unknown" for (browser,) in rows))

    async def get_traffic_sources(self, start: date, end: date, limit: int = 10) -> list[Share]:
        rows = await self._visits(start, end, PageVisit.referrer_domain)
        return shares(Counter(domain or "Direct" for (domain,) in rows), limit)

    async def get_hourly_distribution(self, start: date, end: date) -> list[HourlyVisits]:
        """Visits per UTC hour of day, always 24 entries."""
        rows = await self._visits(start, end, PageVisit.created_at)
        counts = Counter(created_at.hour for (created_at,) in rows)
        return [HourlyVisits(hour=hour, visit_count=counts.get(hour, 0)) for hour in range(24)]

    async def get_active_visitors(self, window_minutes: Optional[int] = None) -> int:
        window = window_minutes or settings.active_visitor_window_minutes
        cutoff = utcnow() - timedelta(minutes=window)
        count = await self.db.scalar(
            select(func.count(ActiveSession.session_id)).where(ActiveSession.last_seen >= cutoff)
        )
        return count or 0

    async def get_visitor_summary(self, today: Optional[date] = None) -> VisitorSummary:
        """Visit totals for rolling periods, with unique-session change against the previous period."""
        today = today or utcnow().date()
        week_from = today - timedelta(days=6)
        month_from = today - timedelta(days=29)

        today_stats = await self.get_visitor_stats(today, today)
        yesterday_stats = await self.get_visitor_stats(today - timedelta(days=1), today - timedelta(days=1))
        week_stats = await self.get_visitor_stats(week_from, today)
        last_week_stats = await self.get_visitor_stats(week_from - timedelta(days=7), week_from - timedelta(days=1))
        month_stats = await self.get_visitor_stats(month_from, today)
        last_month_stats = await self.get_visitor_stats(month_from - timedelta(days=30), month_from - timedelta(days=1))
        year_stats = await self.get_visitor_stats(date(today.year, 1, 1), today)

        return VisitorSummary(
            today_visits=today_stats.total_visits,
            today_unique_visitors=today_stats.unique_sessions,
            week_visits=week_stats.total_visits,
            week_unique_visitors=week_stats.unique_sessions,
            month_visits=month_stats.total_visits,
            month_unique_visitors=month_stats.unique_sessions,
            year_visits=year_stats.total_visits,
            year_unique_visitors=year_stats.unique_sessions,
            today_change=percent_change(today_stats.unique_sessions, yesterday_stats.unique_sessions),
            week_change=percent_change(week_stats.unique_sessions, last_week_stats.unique_sessions),
            month_change=percent_change(month_stats.unique_sessions, last_month_stats.unique_sessions),
        )
