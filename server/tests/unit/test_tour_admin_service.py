"""Unit tests for back-office tour editing."""

import pytest

from tourdesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from tourdesk.models import BlockType, PricingEngine, TourStatus
from tourdesk.schemas.booking import CreateBookingRequest
from tourdesk.schemas.tour import (
    CreateBlockRequest,
    CreateTourRequest,
    CreateUpsellRequest,
    ReorderBlocksRequest,
    ReplacePackagesRequest,
    UpdateBlockRequest,
    UpdateTourRequest,
    UpdateUpsellRequest,
)
from tourdesk.services.booking_service import BookingService
from tourdesk.services.tour_admin_service import TourAdminService, build_admin_tour, title_from_slug


@pytest.mark.asyncio
async def test_create_tour_starts_as_draft_with_defaults(test_session):
    service = TourAdminService(test_session)

    tour = await service.create_tour(CreateTourRequest(slug="similan-islands"))

    assert tour.tour_number == "001"
    assert tour.status == TourStatus.DRAFT.value
    assert tour.pricing_engine == PricingEngine.FLAT_PER_PERSON.value
    assert tour.pricing.config["type"] == "flat_per_person"

    blocks = sorted(tour.blocks, key=lambda b: b.order)
    assert blocks[0].block_type == BlockType.HERO.value
    assert blocks[0].translations[0].title == "Similan Islands"
    upsells_block = next(b for b in blocks if b.block_type == BlockType.UPSELLS.value)
    assert upsells_block.enabled is False

    second = await service.create_tour(CreateTourRequest(slug="khao-sok", pricing_engine=PricingEngine.SEAT_BASED))
    assert second.tour_number == "002"
    assert second.pricing.config["type"] == "seat_based"


@pytest.mark.asyncio
async def test_create_tour_duplicate_slug(test_session):
    service = TourAdminService(test_session)
    await service.create_tour(CreateTourRequest(slug="similan-islands"))

    with pytest.raises(ConflictError) as exc_info:
        await service.create_tour(CreateTourRequest(slug="similan-islands"))
    assert exc_info.value.problem_details["status"] == 409


def test_title_from_slug():
    assert title_from_slug("james-bond-island") == "James Bond Island"


@pytest.mark.asyncio
async def test_get_tour_by_ref_accepts_id_or_number(test_session, published_tour):
    service = TourAdminService(test_session)

    by_id = await service.get_tour_by_ref(str(published_tour["tour_id"]))
    by_number = await service.get_tour_by_ref(published_tour["tour_number"])

    assert by_id.id == by_number.id == published_tour["tour_id"]
    with pytest.raises(NotFoundError):
        await service.get_tour_by_ref_or_raise("999")


@pytest.mark.asyncio
async def test_update_tour_writes_only_sent_fields(test_session, published_tour):
    service = TourAdminService(test_session)
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])

    updated = await service.update_tour(tour, UpdateTourRequest(google_rating=4.8, video_enabled=False))

    assert updated.google_rating == 4.8
    assert updated.video_enabled is False
    assert updated.tags == ["island"]
    assert updated.status == TourStatus.PUBLISHED.value


@pytest.mark.asyncio
async def test_pricing_type_must_match_engine(test_session, published_tour):
    service = TourAdminService(test_session)
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])

    with pytest.raises(ValidationError):
        await service.update_pricing(tour, {"type": "seat_based", "seats": []})

    with pytest.raises(ValidationError):
        await service.update_pricing(tour, {"retail_price": 10})


@pytest.mark.asyncio
async def test_changing_engine_resets_pricing(test_session, published_tour):
    service = TourAdminService(test_session)
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])

    updated = await service.update_tour(tour, UpdateTourRequest(pricing_engine=PricingEngine.ADULT_CHILD))

    assert updated.pricing_engine == "adult_child"
    assert updated.pricing.config["type"] == "adult_child"


@pytest.mark.asyncio
async def test_update_slug_conflict(test_session, published_tour):
    service = TourAdminService(test_session)
    other = await service.create_tour(CreateTourRequest(slug="khao-sok"))

    with pytest.raises(ConflictError):
        await service.update_tour(other, UpdateTourRequest(slug=published_tour["slug"]))


@pytest.mark.asyncio
async def test_list_tours_counts_bookings(test_session, booking_payload, published_tour):
    service = TourAdminService(test_session)
    await service.create_tour(CreateTourRequest(slug="khao-sok"))
    await BookingService(test_session).create_booking(CreateBookingRequest.model_validate(booking_payload))

    counts = {tour.slug: count for tour, count in await service.list_tours()}

    assert counts == {"phi-phi-island": 1, "khao-sok": 0}


@pytest.mark.asyncio
async def test_delete_tour_with_bookings_is_refused(test_session, booking_payload, published_tour):
    service = TourAdminService(test_session)
    await BookingService(test_session).create_booking(CreateBookingRequest.model_validate(booking_payload))
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])

    with pytest.raises(ConflictError):
        await service.delete_tour(tour)


@pytest.mark.asyncio
async def test_delete_tour_removes_children(test_session, published_tour):
    service = TourAdminService(test_session)
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])

    await service.delete_tour(tour)

    assert await service.get_tour_by_ref(str(published_tour["tour_id"])) is None


@pytest.mark.asyncio
async def test_duplicate_tour(test_session, published_tour):
    service = TourAdminService(test_session)
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    block_count = len(tour.blocks)

    copy = await service.duplicate_tour(tour)

    assert copy.slug == "phi-phi-island-copy"
    assert copy.status == TourStatus.DRAFT.value
    assert copy.tour_number == "002"
    assert len(copy.blocks) == block_count
    assert copy.pricing.config["retail_price"] == 1500
    assert copy.upsells[0].translations

    source = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    second = await service.duplicate_tour(source)
    assert second.slug == "phi-phi-island-copy-2"


@pytest.mark.asyncio
async def test_block_lifecycle(test_session, published_tour):
    service = TourAdminService(test_session)
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    last_order = max(b.order for b in tour.blocks)

    block = await service.create_block(
        tour,
        CreateBlockRequest(
            block_type=BlockType.HIGHLIGHTS,
            translations=[{"language": "en", "title": "Why go", "content": {"items": ["Maya Bay"]}}],
        ),
    )
    assert block.order == last_order + 1
    block_id = block.id

    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    block = await service.update_block(
        tour,
        block_id,
        UpdateBlockRequest(
            enabled=False,
            translations=[{"language": "de", "title": "Warum", "content": {"items": ["Maya Bay"]}}],
        ),
    )
    assert block.enabled is False
    assert {t.language for t in block.translations} == {"en", "de"}

    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    await service.delete_block(tour, block_id)
    test_session.expire_all()
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    assert block_id not in {b.id for b in tour.blocks}


@pytest.mark.asyncio
async def test_reorder_blocks(test_session, published_tour):
    service = TourAdminService(test_session)
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    reversed_ids = [b.id for b in sorted(tour.blocks, key=lambda b: b.order, reverse=True)]

    tour = await service.reorder_blocks(tour, ReorderBlocksRequest(block_ids=reversed_ids))

    assert [b.id for b in sorted(tour.blocks, key=lambda b: b.order)] == reversed_ids

    with pytest.raises(ValidationError):
        await service.reorder_blocks(tour, ReorderBlocksRequest(block_ids=reversed_ids[:2]))


@pytest.mark.asyncio
async def test_upsell_lifecycle(test_session, published_tour):
    service = TourAdminService(test_session)
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])

    upsell = await service.create_upsell(
        tour,
        CreateUpsellRequest(
            retail_price=500,
            net_price=300,
            currency="thb",
            max_quantity=2,
            translations=[{"language": "en", "title": "Private longtail boat"}],
        ),
    )
    upsell_id = upsell.id
    assert upsell.currency == "THB"
    assert upsell.order == 1

    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    upsell = await service.update_upsell(tour, upsell_id, UpdateUpsellRequest(retail_price=650, status="inactive"))
    assert upsell.retail_price == 650
    assert upsell.status == "inactive"
    assert upsell.net_price == 300

    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    await service.delete_upsell(tour, upsell_id)
    test_session.expire_all()
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])
    assert [u.id for u in tour.upsells] == [published_tour["upsell_id"]]


@pytest.mark.asyncio
async def test_replace_packages(test_session, published_tour):
    service = TourAdminService(test_session)
    tour = await service.get_tour_by_ref_or_raise(published_tour["tour_number"])

    tour = await service.replace_packages(
        tour,
        ReplacePackagesRequest.model_validate({
            "packages": [
                {
                    "id": "new-1",
                    "title": "Speedboat",
                    "upsells": [{"id": "new-a", "title": "Snorkel set", "price": 100}],
                },
                {"title": "Big boat", "order": 1},
            ]
        }),
    )
    assert sorted(p.title for p in tour.packages) == ["Big boat", "Speedboat"]
    speedboat = next(p for p in tour.packages if p.title == "Speedboat")

    tour = await service.replace_packages(
        tour,
        ReplacePackagesRequest.model_validate({
            "packages": [{"id": str(speedboat.id), "title": "Speedboat deluxe", "upsells": []}]
        }),
    )
    assert [p.title for p in tour.packages] == ["Speedboat deluxe"]
    assert tour.packages[0].id == speedboat.id
    assert tour.packages[0].upsells == []


@pytest.mark.asyncio
async def test_admin_view_includes_net_pricing(test_session, published_tour):
    tour = await TourAdminService(test_session).get_tour_by_ref_or_raise(published_tour["tour_number"])

    view = build_admin_tour(tour).model_dump(by_alias=True)

    assert view["tourNumber"] == published_tour["tour_number"]
    assert view["pricing"]["net_price"] == 1000
    assert view["upsells"][0]["netPrice"] == 120
