"""Public content router: static pages, categories, labels, UI strings and site settings."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..core.i18n import normalize_language
from ..schemas.page import PageTitle, PublicPage
from ..schemas.settings import SiteSettings
from ..schemas.taxonomy import Category, SpecialLabel
from ..schemas.ui_translation import UIDictionary
from ..services.page_service import PageService
from ..services.settings_service import SiteSettingsService
from ..services.taxonomy_service import TaxonomyService
from ..services.ui_translation_service import UITranslationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["content"])


@router.get("/pages", response_model=List[PageTitle])
async def list_page_titles(
    lang: Optional[str] = Query(None),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Navigation entries for published pages."""
    try:
        titles = await PageService(db).get_page_titles(normalize_language(lang))
        return JSONResponse(status_code=200, content=[t.model_dump(mode="json", by_alias=True) for t in titles])

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error listing pages", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/pages/{slug}", response_model=PublicPage)
async def get_page(
    slug: str,
    lang: Optional[str] = Query(None),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    try:
        page = await PageService(db).get_public_page(slug, normalize_language(lang))
        return JSONResponse(status_code=200, content=page.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error loading page", extra={"slug": slug, "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/categories", response_model=List[Category])
async def list_categories(db: AsyncSession = DatabaseSession) -> JSONResponse:
    try:
        categories = await TaxonomyService(db).list_categories()
        content = [Category.model_validate(c).model_dump(mode="json", by_alias=True) for c in categories]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error listing categories", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/labels", response_model=List[SpecialLabel])
async def list_labels(db: AsyncSession = DatabaseSession) -> JSONResponse:
    try:
        labels = await TaxonomyService(db).list_labels()
        content = [SpecialLabel.model_validate(label).model_dump(mode="json", by_alias=True) for label in labels]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error listing labels", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/translations", response_model=UIDictionary)
async def get_ui_translations(
    lang: Optional[str] = Query(None),
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """All UI strings in one language; missing translations fall back to English."""
    language = normalize_language(lang)
    try:
        translations = await UITranslationService(db).get_dictionary(language)
        response_data = UIDictionary(language=language, translations=translations)
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error loading UI translations", extra={"lang": language, "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/settings", response_model=SiteSettings)
async def get_site_settings(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """Branding, general and contact settings for the storefront."""
    try:
        site_settings = await SiteSettingsService(db).get_site_settings()
        return JSONResponse(status_code=200, content=site_settings.model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error loading site settings", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e
