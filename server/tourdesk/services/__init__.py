"""Service layer package."""

from .analytics_service import AnalyticsService
from .availability_service import AvailabilityService
from .booking_service import BookingService
from .page_service import PageService
from .payment_service import PaymentGateway, PaymentService
from .settings_service import SiteSettingsService, StaffService
from .storage_service import StorageClient, StorageService
from .taxonomy_service import TaxonomyService
from .tour_admin_service import TourAdminService
from .tour_service import TourService
from .tracking_service import TrackingService
from .translation_service import TranslationClient, TranslationService
from .ui_translation_service import UITranslationService

__all__ = [
    "AnalyticsService",
    "AvailabilityService",
    "BookingService",
    "PageService",
    "PaymentGateway",
    "PaymentService",
    "SiteSettingsService",
    "StaffService",
    "StorageClient",
    "StorageService",
    "TaxonomyService",
    "TourAdminService",
    "TourService",
    "TrackingService",
    "TranslationClient",
    "TranslationService",
    "UITranslationService",
]
