"""Availability slot schemas."""

import datetime as dt
import re
from typing import List, Optional
from uuid import UUID

from pydantic import Field, model_validator

from .common import CamelModel

TIME_SLOT_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class AvailabilitySlot(CamelModel):
    """Availability slot response schema."""

    id: UUID
    tour_id: UUID
    date: dt.date
    time_slot: Optional[str] = Field(None, description="Start time HH:MM, null for all-day tours")
    capacity: int
    booked: int
    remaining: int
    enabled: bool


class AvailabilityCheck(CamelModel):
    available: bool
    remaining: int
    slot_id: Optional[UUID] = None


class CreateSlotRequest(CamelModel):
    date: dt.date
    time_slot: Optional[str] = Field(None, pattern=TIME_SLOT_PATTERN)
    capacity: int = Field(20, ge=0, le=10000)


class UpdateSlotRequest(CamelModel):
    capacity: Optional[int] = Field(None, ge=0, le=10000)
    enabled: Optional[bool] = None


class BulkCreateSlotsRequest(CamelModel):
    """Create one slot per day (and per time slot) over an inclusive date range."""

    start_date: dt.date
    end_date: dt.date
    time_slots: List[str] = Field(default_factory=list)
    capacity: int = Field(20, ge=0, le=10000)
    weekdays: Optional[List[int]] = Field(None, description="Restrict to these ISO weekdays, 1=Monday .. 7=Sunday")

    @model_validator(mode="after")
    def check_range(self) -> "BulkCreateSlotsRequest":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        if (self.end_date - self.start_date).days > 366:
            raise ValueError("Date range cannot exceed one year")
        for slot in self.time_slots:
            if not re.match(TIME_SLOT_PATTERN, slot):
                raise ValueError(f"Invalid time slot '{slot}', expected HH:MM")
        for weekday in self.weekdays or []:
            if weekday < 1 or weekday > 7:
                raise ValueError("weekdays must be between 1 and 7")
        return self


class BulkCreateSlotsResult(CamelModel):
    created: int
    skipped: int
