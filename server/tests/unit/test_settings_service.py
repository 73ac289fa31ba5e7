"""Unit tests for site settings and staff management."""

from uuid import uuid4

import pydantic
import pytest

from tourdesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from tourdesk.models import AdminRole
from tourdesk.schemas.settings import CreateStaffRequest
from tourdesk.services.settings_service import SiteSettingsService, StaffService


@pytest.mark.asyncio
async def test_defaults_without_stored_settings(test_session):
    site = await SiteSettingsService(test_session).get_site_settings()

    assert site.general.site_name == "Tour Booking"
    assert site.branding.logo_url is None
    assert site.contact.email == ""


@pytest.mark.asyncio
async def test_update_section_merges(test_session):
    service = SiteSettingsService(test_session)

    await service.update_section("general", {"site_name": "Andaman Trips"})
    general = await service.update_section("general", {"siteDescription": "Island tours from Phuket"})

    assert general.site_name == "Andaman Trips"
    assert general.site_description == "Island tours from Phuket"
    assert (await service.get_value("general"))["site_name"] == "Andaman Trips"


@pytest.mark.asyncio
async def test_update_unknown_section(test_session):
    with pytest.raises(NotFoundError):
        await SiteSettingsService(test_session).update_section("stripe", {"mode": "live"})


@pytest.mark.asyncio
async def test_update_section_validates_payload(test_session):
    with pytest.raises(pydantic.ValidationError):
        await SiteSettingsService(test_session).update_section("general", {"site_name": ["not", "a", "string"]})


@pytest.mark.asyncio
async def test_add_staff(test_session, admin_user):
    service = StaffService(test_session)

    member = await service.add_staff(CreateStaffRequest(id=uuid4(), email="  Guide@Example.com "))

    assert member.email == "guide@example.com"
    assert member.role == AdminRole.OPERATOR.value
    assert [s.email for s in await service.list_staff()] == ["owner@example.com", "guide@example.com"]


@pytest.mark.asyncio
async def test_add_staff_duplicates(test_session, admin_user):
    service = StaffService(test_session)

    with pytest.raises(ConflictError):
        await service.add_staff(CreateStaffRequest(id=uuid4(), email="owner@example.com"))
    with pytest.raises(ConflictError):
        await service.add_staff(CreateStaffRequest(id=admin_user.id, email="other@example.com"))


def test_staff_email_is_validated():
    with pytest.raises(pydantic.ValidationError):
        CreateStaffRequest(id=uuid4(), email="not-an-email")


@pytest.mark.asyncio
async def test_change_role(test_session, admin_user, operator_user):
    service = StaffService(test_session)

    promoted = await service.change_role(operator_user.id, AdminRole.ADMIN.value, acting_user_id=admin_user.id)
    assert promoted.role == "admin"

    with pytest.raises(ValidationError):
        await service.change_role(admin_user.id, AdminRole.OPERATOR.value, acting_user_id=admin_user.id)


@pytest.mark.asyncio
async def test_remove_staff(test_session, admin_user, operator_user):
    service = StaffService(test_session)

    with pytest.raises(ValidationError):
        await service.remove_staff(admin_user.id, acting_user_id=admin_user.id)

    await service.remove_staff(operator_user.id, acting_user_id=admin_user.id)
    assert [s.id for s in await service.list_staff()] == [admin_user.id]

    with pytest.raises(NotFoundError):
        await service.remove_staff(uuid4(), acting_user_id=admin_user.id)
