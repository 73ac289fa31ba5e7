"""Models module exporting all database models."""

from .admin import AdminRole, AdminUser, SiteSetting
from .analytics import ActiveSession, PageVisit
from .availability import DEFAULT_SLOT_CAPACITY, TourAvailability
from .block import BlockType, TourBlock, TourBlockTranslation
from .booking import Booking, BookingItem, BookingItemType, BookingStatus
from .package import PackagePricingType, PackageUpsell, TourPackage
from .page import StaticPage, StaticPageStatus, StaticPageTranslation, StaticPageType
from .taxonomy import SpecialLabel, TourCategory, tour_category_assignments, tour_special_label_assignments
from .tour import PricingEngine, Tour, TourPricing, TourStatus
from .ui_translation import UITranslation
from .upsell import Upsell, UpsellPricingType, UpsellStatus, UpsellTranslation

__all__ = [
    # Catalog
    "Tour",
    "TourStatus",
    "PricingEngine",
    "TourPricing",
    "TourBlock",
    "TourBlockTranslation",
    "BlockType",
    "Upsell",
    "UpsellTranslation",
    "UpsellPricingType",
    "UpsellStatus",
    "TourPackage",
    "PackageUpsell",
    "PackagePricingType",
    "TourCategory",
    "SpecialLabel",
    "tour_category_assignments",
    "tour_special_label_assignments",

    # Availability and bookings
    "TourAvailability",
    "DEFAULT_SLOT_CAPACITY",
    "Booking",
    "BookingItem",
    "BookingItemType",
    "BookingStatus",

    # Content
    "StaticPage",
    "StaticPageTranslation",
    "StaticPageStatus",
    "StaticPageType",
    "UITranslation",

    # Analytics
    "PageVisit",
    "ActiveSession",

    # Back office
    "AdminUser",
    "AdminRole",
    "SiteSetting",
]
