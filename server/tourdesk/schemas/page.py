"""Static page schemas."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import Field

from ..models.page import StaticPageStatus, StaticPageType
from .common import CamelModel
from .tour import SLUG_PATTERN


class PageTranslation(CamelModel):
    language: str
    title: str
    content: dict[str, Any] = Field(default_factory=dict)
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class PublicPage(CamelModel):
    """Published page resolved to one language."""

    id: UUID
    slug: str
    page_type: StaticPageType
    icon: Optional[str] = None
    language: str = Field(..., description="Language actually served after fallback")
    title: str
    content: dict[str, Any]
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class PageTitle(CamelModel):
    slug: str
    title: str
    icon: Optional[str] = None


class AdminPage(CamelModel):
    id: UUID
    slug: str
    status: StaticPageStatus
    page_type: StaticPageType
    icon: Optional[str] = None
    order: int
    translations: List[PageTranslation] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class CreatePageRequest(CamelModel):
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    page_type: StaticPageType = StaticPageType.CONTENT
    icon: Optional[str] = Field(None, max_length=64)
    title: str = Field(..., min_length=1, max_length=255, description="English title")


class UpdatePageRequest(CamelModel):
    status: Optional[StaticPageStatus] = None
    page_type: Optional[StaticPageType] = None
    icon: Optional[str] = Field(None, max_length=64)
    order: Optional[int] = Field(None, ge=0)


class UpsertPageTranslationRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: dict[str, Any] = Field(default_factory=dict)
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = None
