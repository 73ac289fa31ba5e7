"""Visitor analytics events."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, utcnow


class PageVisit(Base):
    """One storefront page view."""

    __tablename__ = "page_visits"

    id: Mapped[UUID] = mapped_column(PgUUID(as_uuid=True), primary_key=True, default=uuid4)
    page_path: Mapped[str] = mapped_column(String(1024), nullable=False, index=True)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    visitor_ip_hash: Mapped[str] = mapped_column(String(16), nullable=False)

    country_code: Mapped[str | None] = mapped_column(String(2), nullable=True)
    country_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)

    device_type: Mapped[str] = mapped_column(String(16), nullable=False, default="desktop")
    browser: Mapped[str] = mapped_column(String(32), nullable=False, default="Unknown")
    operating_system: Mapped[str] = mapped_column(String(32), nullable=False, default="Unknown")
    referrer: Mapped[str | None] = mapped_column(Text, nullable=True)
    referrer_domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    screen_width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    screen_height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    language: Mapped[str | None] = mapped_column(String(10), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True
    )

    def __repr__(self) -> str:
        return f"<PageVisit(page_path='{self.page_path}', session_id='{self.session_id}')>"


class ActiveSession(Base):
    """Last known position of a browsing session, refreshed by heartbeats."""

    __tablename__ = "active_sessions"

    session_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    page_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    country_code: Mapped[str | None] = mapped_column(String(2), nullable=True)
    country_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    device_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    last_seen: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
