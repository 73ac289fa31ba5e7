"""Static content page model definitions."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, JSONDocument, utcnow


class StaticPageStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class StaticPageType(str, Enum):
    CONTENT = "content"
    FORM = "form"
    ACCORDION = "accordion"
    LISTING = "listing"


class StaticPage(Base):
    """Editable content page such as About, FAQ or Contact."""

    __tablename__ = "static_pages"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=StaticPageStatus.DRAFT.value)
    page_type: Mapped[str] = mapped_column(String(20), nullable=False, default=StaticPageType.CONTENT.value)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    translations: Mapped[list["StaticPageTranslation"]] = relationship(
        "StaticPageTranslation",
        back_populates="page",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<StaticPage(id={self.id}, slug='{self.slug}', status={self.status})>"


class StaticPageTranslation(Base):
    """Per-language title, content and SEO fields of a page."""

    __tablename__ = "static_page_translations"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    page_id: Mapped[UUID] = mapped_column(
        PgUUID(as_uuid=True),
        ForeignKey("static_pages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    language: Mapped[str] = mapped_column(String(5), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    meta_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("page_id", "language", name="uq_page_translation_language"),
    )

    page: Mapped["StaticPage"] = relationship("StaticPage", back_populates="translations")
