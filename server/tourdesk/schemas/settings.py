"""Site settings, Stripe settings and staff schemas."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import Field, field_validator

from ..models.admin import AdminRole
from .booking import EMAIL_PATTERN
from .common import CamelModel


class BrandingSettings(CamelModel):
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None


class GeneralSettings(CamelModel):
    site_name: str = "Tour Booking"
    site_description: str = "Book amazing tours and experiences"


class ContactSettings(CamelModel):
    email: str = ""
    phone: str = ""
    address: str = ""


class SiteSettings(CamelModel):
    """Public site settings."""

    branding: BrandingSettings
    general: GeneralSettings
    contact: ContactSettings


class StripePaymentMethods(CamelModel):
    card: bool = True
    google_pay: bool = True
    apple_pay: bool = True
    promptpay: bool = True


class StripeSettings(CamelModel):
    """Stored Stripe configuration; secrets are masked when returned by the API."""

    mode: Literal["test", "live"] = "test"
    test_publishable_key: str = ""
    test_secret_key: str = ""
    live_publishable_key: str = ""
    live_secret_key: str = ""
    webhook_secret: str = ""
    payment_methods: StripePaymentMethods = Field(default_factory=StripePaymentMethods)


class UpdateStripeSettingsRequest(CamelModel):
    mode: Optional[Literal["test", "live"]] = None
    test_publishable_key: Optional[str] = None
    test_secret_key: Optional[str] = None
    live_publishable_key: Optional[str] = None
    live_secret_key: Optional[str] = None
    webhook_secret: Optional[str] = None
    payment_methods: Optional[StripePaymentMethods] = None


class StaffMember(CamelModel):
    id: UUID
    email: str
    role: AdminRole
    created_at: datetime


class CreateStaffRequest(CamelModel):
    id: UUID = Field(..., description="User id issued by the identity provider")
    email: str = Field(..., max_length=255)
    role: AdminRole = AdminRole.OPERATOR

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email format")
        return v


class UpdateStaffRequest(CamelModel):
    role: AdminRole
