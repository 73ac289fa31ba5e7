"""Back-office static page router."""

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
from ..schemas.page import AdminPage, CreatePageRequest, UpdatePageRequest, UpsertPageTranslationRequest
from ..services.page_service import PageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/pages", tags=["admin-pages"])


def _page_response(page, status_code: int = 200) -> JSONResponse:
    response_data = AdminPage.model_validate(page)
    return JSONResponse(status_code=status_code, content=response_data.model_dump(mode="json", by_alias=True))


@router.get("", response_model=List[AdminPage])
async def list_pages(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """All pages, drafts included, with every translation."""
    try:
        pages = await PageService(db).list_pages()
        content = [AdminPage.model_validate(p).model_dump(mode="json", by_alias=True) for p in pages]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error listing pages", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.post("", response_model=AdminPage, status_code=201)
async def create_page(
    request: CreatePageRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        page = await PageService(db).create_page(request)
        return _page_response(page, status_code=201)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error creating page", extra={"slug": request.slug, "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/{page_id}", response_model=AdminPage)
async def get_page(
    page_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        return _page_response(await PageService(db).get_page_or_raise(page_id))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error loading page", extra={"page_id": str(page_id), "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.patch("/{page_id}", response_model=AdminPage)
async def update_page(
    page_id: UUID,
    request: UpdatePageRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Change status, type, icon or order."""
    try:
        return _page_response(await PageService(db).update_page(page_id, request))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error updating page", extra={"page_id": str(page_id), "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.put("/{page_id}/translations/{lang}", response_model=AdminPage)
async def upsert_page_translation(
    page_id: UUID,
    lang: str,
    request: UpsertPageTranslationRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        page = await PageService(db).upsert_translation(page_id, lang, request)
        return _page_response(page)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error saving page translation",
            extra={"page_id": str(page_id), "language": lang, "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e


@router.delete("/{page_id}", response_model=SuccessResponse)
async def delete_page(
    page_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        await PageService(db).delete_page(page_id)
        return JSONResponse(status_code=200, content=SuccessResponse().model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error deleting page", extra={"page_id": str(page_id), "error": str(e)}, exc_info=True)
        raise InternalServerError() from e
