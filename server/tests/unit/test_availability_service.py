"""Unit tests for availability slots."""

from datetime import date, timedelta

import pytest
import pytest_asyncio

from tourdesk.core.exceptions import ConflictError, NotFoundError
from tourdesk.schemas.availability import BulkCreateSlotsRequest, CreateSlotRequest, UpdateSlotRequest
from tourdesk.schemas.tour import CreateTourRequest
from tourdesk.services.availability_service import AvailabilityService
from tourdesk.services.tour_admin_service import TourAdminService

# A Monday
START = date(2030, 7, 1)


@pytest_asyncio.fixture
async def tour_id(test_session):
    tour = await TourAdminService(test_session).create_tour(CreateTourRequest(slug="krabi-four-islands"))
    return tour.id


@pytest.mark.asyncio
async def test_duplicate_slot_conflicts(test_session, tour_id):
    service = AvailabilityService(test_session)
    await service.create_slot(tour_id, CreateSlotRequest(date=START, time_slot="09:00"))

    with pytest.raises(ConflictError):
        await service.create_slot(tour_id, CreateSlotRequest(date=START, time_slot="09:00"))

    # same day, different time is fine
    other = await service.create_slot(tour_id, CreateSlotRequest(date=START, time_slot="14:00"))
    assert other.capacity == 20


@pytest.mark.asyncio
async def test_bulk_create_skips_existing(test_session, tour_id):
    service = AvailabilityService(test_session)
    await service.create_slot(tour_id, CreateSlotRequest(date=START, time_slot="09:00"))

    result = await service.bulk_create_slots(
        tour_id,
        BulkCreateSlotsRequest(
            start_date=START,
            end_date=START + timedelta(days=2),
            time_slots=["09:00", "14:00"],
            capacity=12,
        ),
    )

    assert result.created == 5
    assert result.skipped == 1
    slots = await service.list_slots(tour_id)
    assert len(slots) == 6
    assert [(s.date, s.time_slot) for s in slots[:2]] == [(START, "09:00"), (START, "14:00")]


@pytest.mark.asyncio
async def test_bulk_create_weekdays_and_all_day(test_session, tour_id):
    service = AvailabilityService(test_session)

    result = await service.bulk_create_slots(
        tour_id,
        BulkCreateSlotsRequest(start_date=START, end_date=START + timedelta(days=13), weekdays=[6, 7]),
    )

    assert result.created == 4
    slots = await service.list_slots(tour_id)
    assert all(s.time_slot is None for s in slots)
    assert {s.date.isoweekday() for s in slots} == {6, 7}


def test_bulk_request_rejects_reversed_range():
    with pytest.raises(ValueError):
        BulkCreateSlotsRequest(start_date=START, end_date=START - timedelta(days=1))

    with pytest.raises(ValueError):
        BulkCreateSlotsRequest(start_date=START, end_date=START, time_slots=["25:00"])


@pytest.mark.asyncio
async def test_check_slot_availability(test_session, tour_id):
    service = AvailabilityService(test_session)
    slot = await service.create_slot(tour_id, CreateSlotRequest(date=START, time_slot="09:00", capacity=4))
    await service.increment_booked(slot.id, 3)
    await test_session.commit()

    check = await service.check_slot_availability(tour_id, START, "09:00", requested=1)
    assert check.available is True
    assert check.remaining == 1
    assert check.slot_id == slot.id

    check = await service.check_slot_availability(tour_id, START, "09:00", requested=2)
    assert check.available is False

    missing = await service.check_slot_availability(tour_id, START, "18:00")
    assert missing.available is False
    assert missing.remaining == 0
    assert missing.slot_id is None


@pytest.mark.asyncio
async def test_capacity_cannot_drop_below_booked(test_session, tour_id):
    service = AvailabilityService(test_session)
    slot = await service.create_slot(tour_id, CreateSlotRequest(date=START, time_slot="09:00", capacity=10))
    await service.increment_booked(slot.id, 6)
    await test_session.commit()

    with pytest.raises(ConflictError):
        await service.update_slot(tour_id, slot.id, UpdateSlotRequest(capacity=5))

    updated = await service.update_slot(tour_id, slot.id, UpdateSlotRequest(capacity=6, enabled=False))
    assert updated.capacity == 6
    assert updated.enabled is False


@pytest.mark.asyncio
async def test_disabled_slots_hidden_from_storefront(test_session, tour_id):
    service = AvailabilityService(test_session)
    first = await service.create_slot(tour_id, CreateSlotRequest(date=START, time_slot="09:00"))
    await service.create_slot(tour_id, CreateSlotRequest(date=START + timedelta(days=1), time_slot="09:00"))
    await service.update_slot(tour_id, first.id, UpdateSlotRequest(enabled=False))

    visible = await service.get_availability(tour_id, START, START + timedelta(days=7))

    assert [s.date for s in visible] == [START + timedelta(days=1)]


@pytest.mark.asyncio
async def test_slot_of_another_tour_is_not_found(test_session, tour_id):
    service = AvailabilityService(test_session)
    other = await TourAdminService(test_session).create_tour(CreateTourRequest(slug="railay-beach"))
    other_id = other.id
    slot = await service.create_slot(other_id, CreateSlotRequest(date=START))

    with pytest.raises(NotFoundError):
        await service.delete_slot(tour_id, slot.id)

    await service.delete_slot(other_id, slot.id)
    assert await service.get_slot_by_id(slot.id) is None
