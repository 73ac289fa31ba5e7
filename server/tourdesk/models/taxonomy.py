"""Tour categories, special labels and their tour assignments."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, utcnow

DEFAULT_LABEL_BACKGROUND = "#f97316"
DEFAULT_LABEL_TEXT = "#ffffff"


tour_category_assignments = Table(
    "tour_category_assignments",
    Base.metadata,
    Column("tour_id", PgUUID(as_uuid=True), ForeignKey("tours.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", PgUUID(as_uuid=True), ForeignKey("tour_categories.id", ondelete="CASCADE"), primary_key=True),
)

tour_special_label_assignments = Table(
    "tour_special_label_assignments",
    Base.metadata,
    Column("tour_id", PgUUID(as_uuid=True), ForeignKey("tours.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", PgUUID(as_uuid=True), ForeignKey("special_labels.id", ondelete="CASCADE"), primary_key=True),
)


class TourCategory(Base):
    """Storefront category used to group tours."""

    __tablename__ = "tour_categories"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<TourCategory(id={self.id}, slug='{self.slug}')>"


class SpecialLabel(Base):
    """Corner badge shown on tour cards, e.g. "Best seller"."""

    __tablename__ = "special_labels"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    background_color: Mapped[str] = mapped_column(String(16), nullable=False, default=DEFAULT_LABEL_BACKGROUND)
    text_color: Mapped[str] = mapped_column(String(16), nullable=False, default=DEFAULT_LABEL_TEXT)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<SpecialLabel(id={self.id}, slug='{self.slug}')>"
