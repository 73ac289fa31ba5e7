"""Availability slot service: capacity checks and slot administration."""

import logging
from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError
from ..models.availability import TourAvailability
from ..schemas.availability import (
    AvailabilityCheck,
    BulkCreateSlotsRequest,
    BulkCreateSlotsResult,
    CreateSlotRequest,
    UpdateSlotRequest,
)

logger = logging.getLogger(__name__)


def _time_slot_clause(time_slot: Optional[str]):
    if time_slot is None:
        return TourAvailability.time_slot.is_(None)
    return TourAvailability.time_slot == time_slot


class AvailabilityService:
    """Service for availability slot operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_availability(self, tour_id: UUID, start: date, end: date) -> list[TourAvailability]:
        """Enabled slots of a tour between `start` and `end` inclusive, by date then time."""
        stmt = (
            select(TourAvailability)
            .where(
                TourAvailability.tour_id == tour_id,
                TourAvailability.enabled.is_(True),
                TourAvailability.date >= start,
                TourAvailability.date <= end,
            )
            .order_by(TourAvailability.date, TourAvailability.time_slot)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_slots(
        self,
        tour_id: UUID,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[TourAvailability]:
        """All slots of a tour, including disabled ones."""
        stmt = select(TourAvailability).where(TourAvailability.tour_id == tour_id)
        if start is not None:
            stmt = stmt.where(TourAvailability.date >= start)
        if end is not None:
            stmt = stmt.where(TourAvailability.date <= end)
        stmt = stmt.order_by(TourAvailability.date, TourAvailability.time_slot)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_slot(self, tour_id: UUID, slot_date: date, time_slot: Optional[str]) -> Optional[TourAvailability]:
        stmt = select(TourAvailability).where(
            TourAvailability.tour_id == tour_id,
            TourAvailability.date == slot_date,
            _time_slot_clause(time_slot),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_slot_by_id(self, slot_id: UUID) -> Optional[TourAvailability]:
        result = await self.db.execute(select(TourAvailability).where(TourAvailability.id == slot_id))
        return result.scalar_one_or_none()

    async def get_slot_by_id_or_raise(self, slot_id: UUID) -> TourAvailability:
        slot = await self.get_slot_by_id(slot_id)
        if not slot:
            logger.warning("Availability slot not found", extra={"slot_id": str(slot_id)})
            raise NotFoundError(resource_type="availability slot", resource_id=str(slot_id))
        return slot

    async def check_slot_availability(
        self,
        tour_id: UUID,
        slot_date: date,
        time_slot: Optional[str] = None,
        requested: int = 1,
    ) -> AvailabilityCheck:
        """
        Check whether a slot can take `requested` more guests.

        A missing or disabled slot is reported as unavailable with nothing remaining.
        """
        slot = await self.find_slot(tour_id, slot_date, time_slot)
        if slot is None or not slot.enabled:
            return AvailabilityCheck(available=False, remaining=0)

        remaining = slot.capacity - slot.booked
        return AvailabilityCheck(
            available=remaining >= requested,
            remaining=max(remaining, 0),
            slot_id=slot.id,
        )

    async def create_slot(self, tour_id: UUID, request: CreateSlotRequest) -> TourAvailability:
        """
        Create a single slot.

        Raises:
            ConflictError: If the tour already has a slot on that date and time
        """
        existing = await self.find_slot(tour_id, request.date, request.time_slot)
        if existing:
            raise ConflictError(
                detail=f"A slot already exists on {request.date.isoformat()} at {request.time_slot or 'all day'}",
                conflicting_resource={"id": str(existing.id)},
            )

        slot = TourAvailability(
            tour_id=tour_id,
            date=request.date,
            time_slot=request.time_slot,
            capacity=request.capacity,
            booked=0,
            enabled=True,
        )
        self.db.add(slot)
        await self.db.commit()
        await self.db.refresh(slot)

        logger.info(
            "Availability slot created",
            extra={
                "slot_id": str(slot.id),
                "tour_id": str(tour_id),
                "date": request.date.isoformat(),
                "time_slot": request.time_slot,
                "capacity": request.capacity,
            }
        )
        return slot

    async def bulk_create_slots(self, tour_id: UUID, request: BulkCreateSlotsRequest) -> BulkCreateSlotsResult:
        """Create slots for every day in the range, skipping ones that already exist."""
        time_slots: list[Optional[str]] = list(request.time_slots) or [None]
        existing = {
            (slot.date, slot.time_slot)
            for slot in await self.list_slots(tour_id, request.start_date, request.end_date)
        }

        created = skipped = 0
        day = request.start_date
        while day <= request.end_date:
            if request.weekdays and day.isoweekday() not in request.weekdays:
                day += timedelta(days=1)
                continue
            for time_slot in time_slots:
                if (day, time_slot) in existing:
                    skipped += 1
                    continue
                self.db.add(
                    TourAvailability(
                        tour_id=tour_id,
                        date=day,
                        time_slot=time_slot,
                        capacity=request.capacity,
                        booked=0,
                        enabled=True,
                    )
                )
                created += 1
            day += timedelta(days=1)

        await self.db.commit()

        logger.info(
            "Availability slots bulk created",
            extra={"tour_id": str(tour_id), "created_count": created, "skipped_count": skipped}
        )
        return BulkCreateSlotsResult(created=created, skipped=skipped)

    async def update_slot(self, tour_id: UUID, slot_id: UUID, request: UpdateSlotRequest) -> TourAvailability:
        """
        Change capacity and/or enabled flag of a slot.

        Raises:
            NotFoundError: If the slot does not exist for this tour
            ConflictError: If the new capacity is below the booked count
        """
        slot = await self.get_slot_by_id_or_raise(slot_id)
        if slot.tour_id != tour_id:
            raise NotFoundError(resource_type="availability slot", resource_id=str(slot_id))

        if request.capacity is not None:
            if request.capacity < slot.booked:
                raise ConflictError(
                    detail=f"Capacity cannot be lower than the {slot.booked} places already booked",
                    conflicting_resource={"id": str(slot.id), "booked": slot.booked},
                )
            slot.capacity = request.capacity
        if request.enabled is not None:
            slot.enabled = request.enabled

        await self.db.commit()
        await self.db.refresh(slot)

        logger.info(
            "Availability slot updated",
            extra={"slot_id": str(slot.id), "capacity": slot.capacity, "enabled": slot.enabled}
        )
        return slot

    async def delete_slot(self, tour_id: UUID, slot_id: UUID) -> None:
        slot = await self.get_slot_by_id_or_raise(slot_id)
        if slot.tour_id != tour_id:
            raise NotFoundError(resource_type="availability slot", resource_id=str(slot_id))

        await self.db.delete(slot)
        await self.db.commit()
        logger.info("Availability slot deleted", extra={"slot_id": str(slot_id), "tour_id": str(tour_id)})

    async def increment_booked(self, slot_id: UUID, count: int) -> Optional[TourAvailability]:
        """
        Add `count` to the booked counter in a single UPDATE.

        Does not commit; the caller owns the transaction.
        """
        await self.db.execute(
            update(TourAvailability)
            .where(TourAvailability.id == slot_id)
            .values(booked=TourAvailability.booked + count)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(
            select(TourAvailability)
            .where(TourAvailability.id == slot_id)
            .execution_options(populate_existing=True)
        )
        slot = result.scalar_one_or_none()
        if slot is not None and slot.booked > slot.capacity:
            logger.warning(
                "Availability slot overbooked",
                extra={"slot_id": str(slot_id), "booked": slot.booked, "capacity": slot.capacity}
            )
        return slot
