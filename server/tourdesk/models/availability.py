"""Availability slot model definition."""

import datetime as dt
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import expression

from ..core.database import Base, utcnow

DEFAULT_SLOT_CAPACITY = 20


class TourAvailability(Base):
    """A bookable (date, time slot) of a tour with a capacity and a booked count."""

    __tablename__ = "tour_availability"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    tour_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    # "HH:MM"; NULL for all-day tours
    time_slot: Mapped[str | None] = mapped_column(String(5), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_SLOT_CAPACITY)
    booked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("tour_id", "date", "time_slot", name="uq_availability_tour_date_slot"),
        CheckConstraint("capacity >= 0", name="ck_availability_capacity_non_negative"),
        CheckConstraint("booked >= 0", name="ck_availability_booked_non_negative"),
    )

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.booked, 0)

    def __repr__(self) -> str:
        return (
            f"<TourAvailability(id={self.id}, tour_id={self.tour_id}, date={self.date}, "
            f"time_slot={self.time_slot}, booked={self.booked}/{self.capacity})>"
        )
