"""UI string translation table: one row per key, one column per language."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, utcnow

# Indonesian ("id") cannot share a name with the primary key column
LANGUAGE_COLUMNS: dict[str, str] = {
    "en": "en",
    "zh": "zh",
    "ru": "ru",
    "ko": "ko",
    "ja": "ja",
    "fr": "fr",
    "it": "it",
    "es": "es",
    "id": "id_lang",
}


class UITranslation(Base):
    """Translated UI string identified by a normalized key."""

    __tablename__ = "ui_translations"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    translation_key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="general", index=True)

    en: Mapped[str] = mapped_column(Text, nullable=False)
    zh: Mapped[str | None] = mapped_column(Text, nullable=True)
    ru: Mapped[str | None] = mapped_column(Text, nullable=True)
    ko: Mapped[str | None] = mapped_column(Text, nullable=True)
    ja: Mapped[str | None] = mapped_column(Text, nullable=True)
    fr: Mapped[str | None] = mapped_column(Text, nullable=True)
    it: Mapped[str | None] = mapped_column(Text, nullable=True)
    es: Mapped[str | None] = mapped_column(Text, nullable=True)
    id_lang: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    def value_for(self, language: str) -> str | None:
        return getattr(self, LANGUAGE_COLUMNS[language])

    def __repr__(self) -> str:
        return f"<UITranslation(key='{self.translation_key}', category='{self.category}')>"
