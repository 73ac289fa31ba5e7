"""Category and special label schemas."""

from typing import Optional
from uuid import UUID

from pydantic import Field

from .common import CamelModel

COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class Category(CamelModel):
    """Category response schema."""

    id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    icon: Optional[str] = None
    order: int


class CreateCategoryRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255, description="Derived from the name when omitted")
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=64)


class UpdateCategoryRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=64)
    order: Optional[int] = Field(None, ge=0)


class SpecialLabel(CamelModel):
    """Special label response schema."""

    id: UUID
    name: str
    slug: str
    background_color: str
    text_color: str
    order: int


class CreateLabelRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    background_color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    text_color: Optional[str] = Field(None, pattern=COLOR_PATTERN)


class UpdateLabelRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    background_color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    text_color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    order: Optional[int] = Field(None, ge=0)
