"""FastAPI routers package."""

from .admin_analytics import router as admin_analytics_router
from .admin_bookings import router as admin_bookings_router
from .admin_pages import router as admin_pages_router
from .admin_settings import router as admin_settings_router
from .admin_taxonomy import router as admin_taxonomy_router
from .admin_tours import router as admin_tours_router
from .admin_translations import router as admin_translations_router
from .admin_uploads import router as admin_uploads_router
from .booking import router as booking_router
from .content import router as content_router
from .health import router as health_router
from .metrics import router as metrics_router
from .payment import router as payment_router
from .tour import router as tour_router
from .tracking import router as tracking_router

__all__ = [
    "admin_analytics_router",
    "admin_bookings_router",
    "admin_pages_router",
    "admin_settings_router",
    "admin_taxonomy_router",
    "admin_tours_router",
    "admin_translations_router",
    "admin_uploads_router",
    "booking_router",
    "content_router",
    "health_router",
    "metrics_router",
    "payment_router",
    "tour_router",
    "tracking_router",
]
