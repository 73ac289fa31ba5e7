"""Back-office tour router: tours, blocks, upsells, packages, availability and AI translation."""

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, StaffUser
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.admin import AdminUser
from ..schemas.availability import (
    AvailabilitySlot,
    BulkCreateSlotsRequest,
    BulkCreateSlotsResult,
    CreateSlotRequest,
    UpdateSlotRequest,
)
from ..schemas.common import SuccessResponse
from ..schemas.tour import (
    AdminBlock,
    AdminTour,
    AdminTourSummary,
    AdminUpsell,
    CreateBlockRequest,
    CreateTourRequest,
    CreateUpsellRequest,
    ReorderBlocksRequest,
    ReplacePackagesRequest,
    TourAssignmentsRequest,
    UpdateBlockRequest,
    UpdatePricingRequest,
    UpdateTourRequest,
    UpdateUpsellRequest,
)
from ..schemas.translation import TranslateContentRequest, TranslateContentResponse
from ..services.availability_service import AvailabilityService
from ..services.tour_admin_service import (
    TourAdminService,
    build_admin_block,
    build_admin_tour,
    build_admin_upsell,
)
from ..services.tour_service import resolve_tour_title
from ..services.translation_service import TranslationClient, TranslationService, get_translation_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/tours", tags=["admin-tours"])

TRANSLATION_CLIENT_DEPENDENCY = Depends(get_translation_client)


def _json(model, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=model.model_dump(mode="json", by_alias=True))


def _unexpected(action: str, tour_ref: Optional[str], e: Exception) -> InternalServerError:
    logger.error(
        f"Unexpected error in {action}",
        extra={"tour_ref": tour_ref, "error": str(e)},
        exc_info=True,
    )
    return InternalServerError()


# Tours

@router.get("", response_model=List[AdminTourSummary])
async def list_tours(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Every tour including drafts, with booking counts."""
    try:
        rows = await TourAdminService(db).list_tours()
        content = [
            AdminTourSummary(
                id=tour.id,
                tour_number=tour.tour_number,
                slug=tour.slug,
                status=tour.status,
                pricing_engine=tour.pricing_engine,
                title=resolve_tour_title(tour),
                booking_count=count,
                created_at=tour.created_at,
                updated_at=tour.updated_at,
            ).model_dump(mode="json", by_alias=True)
            for tour, count in rows
        ]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("tour listing", None, e) from e


@router.post("", response_model=AdminTour, status_code=201)
async def create_tour(
    request: CreateTourRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Create a draft tour with default pricing and starter blocks."""
    try:
        tour = await TourAdminService(db).create_tour(request)
        return _json(build_admin_tour(tour), status_code=201)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("tour creation", request.slug, e) from e


@router.get("/{tour_ref}", response_model=AdminTour)
async def get_tour(
    tour_ref: str,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Tour by id or tour number."""
    try:
        tour = await TourAdminService(db).get_tour_by_ref_or_raise(tour_ref)
        return _json(build_admin_tour(tour))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("tour retrieval", tour_ref, e) from e


@router.patch("/{tour_ref}", response_model=AdminTour)
async def update_tour(
    tour_ref: str,
    request: UpdateTourRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        tour = await service.update_tour(tour, request)
        return _json(build_admin_tour(tour))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("tour update", tour_ref, e) from e


@router.put("/{tour_ref}/pricing", response_model=AdminTour)
async def update_pricing(
    tour_ref: str,
    request: UpdatePricingRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Replace the pricing config; its type must match the tour's pricing engine."""
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        tour = await service.update_pricing(tour, request.config)
        return _json(build_admin_tour(tour))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("pricing update", tour_ref, e) from e


@router.delete("/{tour_ref}", response_model=SuccessResponse)
async def delete_tour(
    tour_ref: str,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Delete a tour with no bookings."""
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        await service.delete_tour(tour)
        return _json(SuccessResponse())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("tour deletion", tour_ref, e) from e


@router.post("/{tour_ref}/duplicate", response_model=AdminTour, status_code=201)
async def duplicate_tour(
    tour_ref: str,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Copy a tour with its content as a new draft."""
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        copy = await service.duplicate_tour(tour)
        return _json(build_admin_tour(copy), status_code=201)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("tour duplication", tour_ref, e) from e


@router.put("/{tour_ref}/assignments", response_model=AdminTour)
async def set_assignments(
    tour_ref: str,
    request: TourAssignmentsRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Replace the tour's categories and special labels."""
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        tour = await service.set_assignments(tour, request)
        return _json(build_admin_tour(tour))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("tour assignment", tour_ref, e) from e


# Blocks

@router.post("/{tour_ref}/blocks", response_model=AdminBlock, status_code=201)
async def create_block(
    tour_ref: str,
    request: CreateBlockRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        block = await service.create_block(tour, request)
        return _json(build_admin_block(block), status_code=201)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("block creation", tour_ref, e) from e


@router.put("/{tour_ref}/blocks/order", response_model=AdminTour)
async def reorder_blocks(
    tour_ref: str,
    request: ReorderBlocksRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        tour = await service.reorder_blocks(tour, request)
        return _json(build_admin_tour(tour))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("block reordering", tour_ref, e) from e


@router.patch("/{tour_ref}/blocks/{block_id}", response_model=AdminBlock)
async def update_block(
    tour_ref: str,
    block_id: UUID,
    request: UpdateBlockRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        block = await service.update_block(tour, block_id, request)
        return _json(build_admin_block(block))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("block update", tour_ref, e) from e


@router.delete("/{tour_ref}/blocks/{block_id}", response_model=SuccessResponse)
async def delete_block(
    tour_ref: str,
    block_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        await service.delete_block(tour, block_id)
        return _json(SuccessResponse())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("block deletion", tour_ref, e) from e


# Upsells

@router.post("/{tour_ref}/upsells", response_model=AdminUpsell, status_code=201)
async def create_upsell(
    tour_ref: str,
    request: CreateUpsellRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        upsell = await service.create_upsell(tour, request)
        return _json(build_admin_upsell(upsell), status_code=201)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("upsell creation", tour_ref, e) from e


@router.patch("/{tour_ref}/upsells/{upsell_id}", response_model=AdminUpsell)
async def update_upsell(
    tour_ref: str,
    upsell_id: UUID,
    request: UpdateUpsellRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        upsell = await service.update_upsell(tour, upsell_id, request)
        return _json(build_admin_upsell(upsell))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("upsell update", tour_ref, e) from e


@router.delete("/{tour_ref}/upsells/{upsell_id}", response_model=SuccessResponse)
async def delete_upsell(
    tour_ref: str,
    upsell_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        await service.delete_upsell(tour, upsell_id)
        return _json(SuccessResponse())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("upsell deletion", tour_ref, e) from e


# Packages

@router.put("/{tour_ref}/packages", response_model=AdminTour)
async def replace_packages(
    tour_ref: str,
    request: ReplacePackagesRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """
    Save the full package list.

    Packages with a `new-` id are created, known ids are updated and packages
    missing from the list are deleted.
    """
    service = TourAdminService(db)
    try:
        tour = await service.get_tour_by_ref_or_raise(tour_ref)
        tour = await service.replace_packages(tour, request)
        return _json(build_admin_tour(tour))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("package update", tour_ref, e) from e


# Availability

@router.get("/{tour_ref}/availability", response_model=List[AvailabilitySlot])
async def list_slots(
    tour_ref: str,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """All slots of the tour, including disabled ones."""
    try:
        tour = await TourAdminService(db).get_tour_by_ref_or_raise(tour_ref)
        slots = await AvailabilityService(db).list_slots(tour.id, start_date, end_date)
        content = [AvailabilitySlot.model_validate(slot).model_dump(mode="json", by_alias=True) for slot in slots]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("slot listing", tour_ref, e) from e


@router.post("/{tour_ref}/availability", response_model=AvailabilitySlot, status_code=201)
async def create_slot(
    tour_ref: str,
    request: CreateSlotRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        tour = await TourAdminService(db).get_tour_by_ref_or_raise(tour_ref)
        slot = await AvailabilityService(db).create_slot(tour.id, request)
        return _json(AvailabilitySlot.model_validate(slot), status_code=201)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("slot creation", tour_ref, e) from e


@router.post("/{tour_ref}/availability/bulk", response_model=BulkCreateSlotsResult)
async def bulk_create_slots(
    tour_ref: str,
    request: BulkCreateSlotsRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Create slots for every matching day in a date range; existing slots are skipped."""
    try:
        tour = await TourAdminService(db).get_tour_by_ref_or_raise(tour_ref)
        result = await AvailabilityService(db).bulk_create_slots(tour.id, request)
        return _json(result)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("bulk slot creation", tour_ref, e) from e


@router.patch("/{tour_ref}/availability/{slot_id}", response_model=AvailabilitySlot)
async def update_slot(
    tour_ref: str,
    slot_id: UUID,
    request: UpdateSlotRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        tour = await TourAdminService(db).get_tour_by_ref_or_raise(tour_ref)
        slot = await AvailabilityService(db).update_slot(tour.id, slot_id, request)
        return _json(AvailabilitySlot.model_validate(slot))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("slot update", tour_ref, e) from e


@router.delete("/{tour_ref}/availability/{slot_id}", response_model=SuccessResponse)
async def delete_slot(
    tour_ref: str,
    slot_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        tour = await TourAdminService(db).get_tour_by_ref_or_raise(tour_ref)
        await AvailabilityService(db).delete_slot(tour.id, slot_id)
        return _json(SuccessResponse())

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("slot deletion", tour_ref, e) from e


# AI translation

@router.post("/{tour_ref}/translate", response_model=TranslateContentResponse)
async def translate_content(
    tour_ref: str,
    request: TranslateContentRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
    client: Optional[TranslationClient] = TRANSLATION_CLIENT_DEPENDENCY,
) -> JSONResponse:
    """Translate a text field or block content from English, optionally saving into the block."""
    try:
        tour = await TourAdminService(db).get_tour_by_ref_or_raise(tour_ref)
        result = await TranslationService(db, client).translate_tour_content(tour, request)
        return _json(result)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("tour translation", tour_ref, e) from e
