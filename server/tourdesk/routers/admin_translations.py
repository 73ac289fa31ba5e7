"""Back-office UI string translations."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, StaffUser
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.admin import AdminUser
from ..schemas.common import SuccessResponse
from ..schemas.translation import TranslateTextsRequest, TranslateTextsResponse
from ..schemas.ui_translation import (
    BulkUpdateUITranslationsRequest,
    CreateUITranslationRequest,
    UITranslation,
    UpdateUITranslationRequest,
)
from ..services.translation_service import TranslationClient, TranslationService, get_translation_client
from ..services.ui_translation_service import UITranslationService, build_ui_translation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/translations", tags=["admin-translations"])

TRANSLATION_CLIENT_DEPENDENCY = Depends(get_translation_client)


def _rows_response(rows) -> JSONResponse:
    content = [build_ui_translation(row).model_dump(mode="json", by_alias=True) for row in rows]
    return JSONResponse(status_code=200, content=content)


@router.get("", response_model=List[UITranslation])
async def list_translations(
    category: Optional[str] = Query(None),
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        return _rows_response(await UITranslationService(db).list_translations(category))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error listing UI translations", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.post("", response_model=UITranslation, status_code=201)
async def create_translation(
    request: CreateUITranslationRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Add a UI string; the key is lower-cased with whitespace replaced by underscores."""
    try:
        row = await UITranslationService(db).create_translation(request)
        return JSONResponse(status_code=201, content=build_ui_translation(row).model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error creating UI translation",
            extra={"translation_key": request.translation_key, "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e


@router.put("", response_model=List[UITranslation])
async def bulk_update_translations(
    request: BulkUpdateUITranslationsRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Apply several row updates in one transaction."""
    try:
        return _rows_response(await UITranslationService(db).bulk_update(request))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in bulk UI translation update",
            extra={"count": len(request.items), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e


@router.post("/translate", response_model=TranslateTextsResponse)
async def translate_texts(
    request: TranslateTextsRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
    client: Optional[TranslationClient] = TRANSLATION_CLIENT_DEPENDENCY,
) -> JSONResponse:
    """
    Machine-translate English UI strings.

    Nothing is saved; the editor reviews the result and saves it with a bulk update.
    """
    try:
        response_data = await TranslationService(db, client).translate_texts(request)
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error translating UI strings", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.patch("/{row_id}", response_model=UITranslation)
async def update_translation(
    row_id: UUID,
    request: UpdateUITranslationRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        row = await UITranslationService(db).update_translation(row_id, request)
        return JSONResponse(status_code=200, content=build_ui_translation(row).model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error updating UI translation",
            extra={"row_id": str(row_id), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e


@router.delete("/{row_id}", response_model=SuccessResponse)
async def delete_translation(
    row_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        await UITranslationService(db).delete_translation(row_id)
        return JSONResponse(status_code=200, content=SuccessResponse().model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error deleting UI translation",
            extra={"row_id": str(row_id), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e
