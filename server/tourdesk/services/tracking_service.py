"""Storefront visitor tracking."""

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import utcnow
from ..core.exceptions import ValidationError
from ..core.observability import metrics_collector
from ..models.analytics import ActiveSession, PageVisit
from ..schemas.tracking import TrackingEvent, TrackingEventType

logger = logging.getLogger(__name__)

MAX_USER_AGENT_LENGTH = 500
MAX_LANGUAGE_LENGTH = 10

MOBILE_MARKERS = ("mobile", "android", "iphone", "ipod", "blackberry", "windows phone")
TABLET_MARKERS = ("tablet", "ipad", "playbook", "silk")
PRIVATE_PREFIXES = ("192.168.", "10.", "172.")
LOCAL_ADDRESSES = ("127.0.0.1", "::1")


@dataclass(frozen=True)
class ClientInfo:
    device_type: str
    browser: str
    operating_system: str


@dataclass(frozen=True)
class GeoInfo:
    country_code: str
    country_name: str
    city: str


LOCAL_GEO = GeoInfo(country_code="XX", country_name="Local", city="Local")


def detect_browser(ua: str) -> str:
    if "edg/" in ua:
        return "Edge"
    if "chrome" in ua and "edg" not in ua:
        return "Chrome"
    if "safari" in ua and "chrome" not in ua:
        return "Safari"
    if "firefox" in ua:
        return "Firefox"
    if "opera" in ua or "opr" in ua:
        return "Opera"
    if "msie" in ua or "trident" in ua:
        return "IE"
    return "Unknown"


def detect_operating_system(ua: str) -> str:
    if "windows" in ua:
        return "Windows"
    if "mac os" in ua or "macos" in ua:
        return "macOS"
    if "linux" in ua and "android" not in ua:
        return "Linux"
    if "android" in ua:
        return "Android"
    if "iphone" in ua or "ipad" in ua:
        return "iOS"
    return "Unknown"


def parse_user_agent(user_agent: str) -> ClientInfo:
    """Classify a user agent string. Checks run in a fixed order; the first match wins."""
    ua = user_agent.lower()
    if any(marker in ua for marker in MOBILE_MARKERS):
        device_type = "mobile"
    elif any(marker in ua for marker in TABLET_MARKERS):
        device_type = "tablet"
    else:
        device_type = "desktop"
    return ClientInfo(
        device_type=device_type,
        browser=detect_browser(ua),
        operating_system=detect_operating_system(ua),
    )


def site_host(site_url: str) -> str:
    return urlparse(site_url).hostname or site_url


def referrer_domain(referrer: Optional[str], site_url: str) -> Optional[str]:
    """Host of an external referrer; None for internal or unparseable referrers."""
    if not referrer:
        return None
    try:
        host = urlparse(referrer).hostname
    except ValueError:
        return None
    if not host or host == site_host(site_url):
        return None
    return host


def hash_ip(ip: str) -> str:
    """Anonymize an IP: zero the last IPv4 octet, sha256, keep 16 hex chars."""
    parts = ip.split(".")
    if len(parts) == 4:
        parts[3] = "0"
    return hashlib.sha256(".".join(parts).encode()).hexdigest()[:16]


def is_local_ip(ip: str) -> bool:
    return ip in LOCAL_ADDRESSES or ip.startswith(PRIVATE_PREFIXES)


def resolve_geo(ip: str) -> Optional[GeoInfo]:
    """Geolocation is only resolved for local addresses; public lookups are not performed."""
    return LOCAL_GEO if is_local_ip(ip) else None


class TrackingService:
    """Service recording page views and session heartbeats."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _touch_session(
        self,
        session_id: str,
        page_path: str,
        geo: Optional[GeoInfo],
        device_type: str,
    ) -> None:
        session = await self.db.get(ActiveSession, session_id)
        if session is None:
            session = ActiveSession(session_id=session_id)
            self.db.add(session)
        session.page_path = page_path
        session.country_code = geo.country_code if geo else None
        session.country_name = geo.country_name if geo else None
        session.device_type = device_type
        session.last_seen = utcnow()

    async def track(self, event: TrackingEvent, client_ip: str, header_user_agent: Optional[str]) -> TrackingEventType:
        """
        Record a tracking beacon.

        Heartbeats only refresh the active session; page views also insert a visit.

        Raises:
            ValidationError: If the page path or session id is missing
        """
        if not event.page_path or not event.session_id:
            raise ValidationError(detail="Missing required fields: pagePath and sessionId")

        user_agent = event.user_agent or header_user_agent or ""
        client = parse_user_agent(user_agent)
        geo = resolve_geo(client_ip)

        await self._touch_session(event.session_id, event.page_path, geo, client.device_type)

        if event.type == TrackingEventType.PAGEVIEW:
            visit = PageVisit(
                page_path=event.page_path,
                session_id=event.session_id,
                visitor_ip_hash=hash_ip(client_ip),
                country_code=geo.country_code if geo else None,
                country_name=geo.country_name if geo else None,
                city=geo.city if geo else None,
                device_type=client.device_type,
                browser=client.browser,
                operating_system=client.operating_system,
                referrer=event.referrer or None,
                referrer_domain=referrer_domain(event.referrer, settings.site_url),
                user_agent=user_agent[:MAX_USER_AGENT_LENGTH],
                screen_width=event.screen_width,
                screen_height=event.screen_height,
                language=event.language[:MAX_LANGUAGE_LENGTH] if event.language else None,
            )
            self.db.add(visit)

        await self.db.commit()

        if event.type == TrackingEventType.PAGEVIEW:
            metrics_collector.record_page_view(client.device_type)
            logger.debug(
                "Page view recorded",
                extra={"page_path": event.page_path, "device_type": client.device_type},
            )
        return event.type
