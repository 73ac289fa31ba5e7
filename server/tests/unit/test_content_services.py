"""Unit tests for UI translations, static pages and taxonomy."""

from uuid import uuid4

import pytest

from tourdesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from tourdesk.models import StaticPageStatus
from tourdesk.schemas.page import CreatePageRequest, UpdatePageRequest, UpsertPageTranslationRequest
from tourdesk.schemas.taxonomy import (
    CreateCategoryRequest,
    CreateLabelRequest,
    UpdateCategoryRequest,
)
from tourdesk.schemas.ui_translation import (
    BulkUpdateUITranslationsRequest,
    CreateUITranslationRequest,
    UpdateUITranslationRequest,
)
from tourdesk.services.page_service import PageService
from tourdesk.services.taxonomy_service import TaxonomyService, slugify
from tourdesk.services.ui_translation_service import (
    UITranslationService,
    build_ui_translation,
    normalize_key,
)


def test_normalize_key():
    assert normalize_key("  Book   Now ") == "book_now"


@pytest.mark.asyncio
async def test_ui_translation_lifecycle(test_session):
    service = UITranslationService(test_session)

    row = await service.create_translation(
        CreateUITranslationRequest(translation_key="Book Now", category="buttons", en="Book now", id="Pesan sekarang")
    )
    assert row.translation_key == "book_now"

    view = build_ui_translation(row).model_dump(by_alias=True)
    assert view["rowId"] == row.id
    assert view["id"] == "Pesan sekarang"
    assert view["fr"] is None

    with pytest.raises(ConflictError):
        await service.create_translation(CreateUITranslationRequest(translation_key="book now", en="Book"))

    updated = await service.update_translation(row.id, UpdateUITranslationRequest(fr="Réserver"))
    assert updated.fr == "Réserver"
    assert updated.en == "Book now"

    with pytest.raises(ValidationError):
        await service.update_translation(row.id, UpdateUITranslationRequest(en=""))

    await service.delete_translation(row.id)
    assert await service.list_translations() == []


@pytest.mark.asyncio
async def test_dictionary_falls_back_to_english(test_session):
    service = UITranslationService(test_session)
    await service.create_translation(CreateUITranslationRequest(translation_key="from", en="From", fr="À partir de"))
    await service.create_translation(CreateUITranslationRequest(translation_key="per_person", en="per person"))

    assert await service.get_dictionary("fr") == {"from": "À partir de", "per_person": "per person"}
    assert await service.get_dictionary("xx") == {"from": "From", "per_person": "per person"}


@pytest.mark.asyncio
async def test_bulk_update_and_category_filter(test_session):
    service = UITranslationService(test_session)
    first = await service.create_translation(CreateUITranslationRequest(translation_key="a", category="nav", en="A"))
    second = await service.create_translation(CreateUITranslationRequest(translation_key="b", en="B"))

    rows = await service.bulk_update(
        BulkUpdateUITranslationsRequest.model_validate({
            "items": [
                {"rowId": str(first.id), "ja": "エー"},
                {"rowId": str(second.id), "translationKey": "b renamed"},
            ]
        })
    )

    assert [r.translation_key for r in rows] == ["a", "b_renamed"]
    assert rows[0].ja == "エー"
    assert [r.translation_key for r in await service.list_translations("nav")] == ["a"]

    with pytest.raises(NotFoundError):
        await service.update_translation(uuid4(), UpdateUITranslationRequest(fr="x"))


@pytest.mark.asyncio
async def test_page_lifecycle(test_session):
    service = PageService(test_session)

    page = await service.create_page(CreatePageRequest(slug="faq", title="Frequently asked questions"))
    page_id = page.id
    assert page.status == StaticPageStatus.DRAFT.value
    assert [t.language for t in page.translations] == ["en"]

    with pytest.raises(ConflictError):
        await service.create_page(CreatePageRequest(slug="faq", title="Again"))

    # drafts are not public
    with pytest.raises(NotFoundError):
        await service.get_public_page("faq", "en")

    await service.update_page(page_id, UpdatePageRequest(status=StaticPageStatus.PUBLISHED))
    await service.upsert_translation(page_id, "fr", UpsertPageTranslationRequest(title="Questions fréquentes"))

    french = await service.get_public_page("faq", "fr")
    assert french.title == "Questions fréquentes"
    assert french.language == "fr"

    fallback = await service.get_public_page("faq", "ja")
    assert fallback.language == "en"

    titles = await service.get_page_titles("fr")
    assert [(t.slug, t.title) for t in titles] == [("faq", "Questions fréquentes")]

    with pytest.raises(ValidationError):
        await service.upsert_translation(page_id, "de", UpsertPageTranslationRequest(title="Fragen"))

    await service.delete_page(page_id)
    assert await service.get_page_by_slug("faq") is None


@pytest.mark.asyncio
async def test_categories(test_session):
    service = TaxonomyService(test_session)

    islands = await service.create_category(CreateCategoryRequest(name="Island Hopping"))
    diving = await service.create_category(CreateCategoryRequest(name="Diving", slug="scuba"))

    assert islands.slug == "island-hopping"
    assert (islands.order, diving.order) == (0, 1)

    with pytest.raises(ConflictError):
        await service.create_category(CreateCategoryRequest(name="island   hopping"))
    with pytest.raises(ConflictError):
        await service.update_category(diving.id, UpdateCategoryRequest(slug="island-hopping"))

    updated = await service.update_category(diving.id, UpdateCategoryRequest(name="Scuba Diving", icon="fish"))
    assert (updated.name, updated.slug, updated.icon) == ("Scuba Diving", "scuba", "fish")

    await service.delete_category(islands.id)
    assert [c.slug for c in await service.list_categories()] == ["scuba"]


@pytest.mark.asyncio
async def test_labels(test_session):
    service = TaxonomyService(test_session)

    label = await service.create_label(CreateLabelRequest(name="Best Seller"))

    assert label.slug == "best-seller"
    assert label.background_color == "#f97316"
    assert label.text_color == "#ffffff"

    await service.delete_label(label.id)
    with pytest.raises(NotFoundError):
        await service.get_label_or_raise(label.id)


def test_slugify():
    assert slugify("  Sunset  Cruise ") == "sunset-cruise"
