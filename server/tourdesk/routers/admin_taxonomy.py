"""Back-office categories and special labels."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, StaffUser
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.admin import AdminUser
from ..schemas.common import SuccessResponse
from ..schemas.taxonomy import (
    Category,
    CreateCategoryRequest,
    CreateLabelRequest,
    SpecialLabel,
    UpdateCategoryRequest,
    UpdateLabelRequest,
)
from ..services.taxonomy_service import TaxonomyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin-taxonomy"])


def _unexpected(action: str, e: Exception, **extra) -> InternalServerError:
    logger.error(f"Unexpected error in {action}", extra={**extra, "error": str(e)}, exc_info=True)
    return InternalServerError()


@router.get("/categories", response_model=List[Category])
async def list_categories(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        categories = await TaxonomyService(db).list_categories()
        content = [Category.model_validate(c).model_dump(mode="json", by_alias=True) for c in categories]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("category listing", e) from e


@router.post("/categories", response_model=Category, status_code=201)
async def create_category(
    request: CreateCategoryRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Create a category; the slug is derived from the name when omitted."""
    try:
        category = await TaxonomyService(db).create_category(request)
        response_data = Category.model_validate(category)
        return JSONResponse(status_code=201, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("category creation", e, name=request.name) from e


@router.patch("/categories/{category_id}", response_model=Category)
async def update_category(
    category_id: UUID,
    request: UpdateCategoryRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        category = await TaxonomyService(db).update_category(category_id, request)
        response_data = Category.model_validate(category)
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("category update", e, category_id=str(category_id)) from e


@router.delete("/categories/{category_id}", response_model=SuccessResponse)
async def delete_category(
    category_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Delete a category; tours keep existing without it."""
    try:
        await TaxonomyService(db).delete_category(category_id)
        return JSONResponse(status_code=200, content=SuccessResponse().model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("category deletion", e, category_id=str(category_id)) from e


@router.get("/labels", response_model=List[SpecialLabel])
async def list_labels(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        labels = await TaxonomyService(db).list_labels()
        content = [SpecialLabel.model_validate(label).model_dump(mode="json", by_alias=True) for label in labels]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("label listing", e) from e


@router.post("/labels", response_model=SpecialLabel, status_code=201)
async def create_label(
    request: CreateLabelRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        label = await TaxonomyService(db).create_label(request)
        response_data = SpecialLabel.model_validate(label)
        return JSONResponse(status_code=201, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("label creation", e, name=request.name) from e


@router.patch("/labels/{label_id}", response_model=SpecialLabel)
async def update_label(
    label_id: UUID,
    request: UpdateLabelRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        label = await TaxonomyService(db).update_label(label_id, request)
        response_data = SpecialLabel.model_validate(label)
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("label update", e, label_id=str(label_id)) from e


@router.delete("/labels/{label_id}", response_model=SuccessResponse)
async def delete_label(
    label_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        await TaxonomyService(db).delete_label(label_id)
        return JSONResponse(status_code=200, content=SuccessResponse().model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _unexpected("label deletion", e, label_id=str(label_id)) from e
