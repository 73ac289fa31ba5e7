"""Unit tests for machine translation."""

from uuid import uuid4

import pytest

from tourdesk.core.exceptions import NotFoundError, ServiceUnavailableError, ValidationError
from tourdesk.models import BlockType
from tourdesk.schemas.translation import TranslateContentRequest, TranslateTextsRequest
from tourdesk.services.tour_admin_service import TourAdminService
from tourdesk.services.translation_service import TranslationService, strip_code_fences


async def load_tour(test_session, published_tour):
    test_session.expire_all()
    return await TourAdminService(test_session).get_tour_by_ref_or_raise(published_tour["tour_number"])


def block_of(tour, block_type: BlockType):
    return next(b for b in tour.blocks if b.block_type == block_type.value)


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'


@pytest.mark.asyncio
async def test_without_client_is_unavailable(test_session, published_tour):
    tour = await load_tour(test_session, published_tour)

    with pytest.raises(ServiceUnavailableError) as exc_info:
        await TranslationService(test_session, None).translate_tour_content(
            tour, TranslateContentRequest(text="Island hopping")
        )
    assert exc_info.value.problem_details["status"] == 503


@pytest.mark.asyncio
async def test_translate_text(test_session, published_tour, translation_client):
    tour = await load_tour(test_session, published_tour)

    response = await TranslationService(test_session, translation_client).translate_tour_content(
        tour, TranslateContentRequest(text="Island hopping", field_name="title", target_languages=["fr", "es", "en"])
    )

    assert response.translations == {
        "en": "Island hopping",
        "fr": "[French] Island hopping",
        "es": "[Spanish] Island hopping",
    }
    assert response.translated_languages == ["fr", "es"]
    assert response.saved_to_database is False
    assert len(translation_client.prompts) == 2


@pytest.mark.asyncio
async def test_failed_languages_are_skipped(test_session, published_tour, translation_client):
    translation_client.failing_languages.add("Japanese")
    translation_client.garbled_languages.add("Korean")
    tour = await load_tour(test_session, published_tour)

    response = await TranslationService(test_session, translation_client).translate_tour_content(
        tour,
        TranslateContentRequest(content={"items": ["Maya Bay"]}, target_languages=["ja", "ko", "it"]),
    )

    assert response.translated_languages == ["it"]
    assert response.translations["it"] == {"items": ["[Italian] Maya Bay"]}


@pytest.mark.asyncio
async def test_requires_targets_and_source(test_session, published_tour, translation_client):
    tour = await load_tour(test_session, published_tour)
    service = TranslationService(test_session, translation_client)

    with pytest.raises(ValidationError):
        await service.translate_tour_content(tour, TranslateContentRequest(text="Hi", target_languages=["en"]))
    with pytest.raises(ValidationError):
        await service.translate_tour_content(tour, TranslateContentRequest(target_languages=["fr"]))


def test_unknown_target_language_rejected():
    with pytest.raises(ValueError):
        TranslateContentRequest(text="Hi", target_languages=["de"])


@pytest.mark.asyncio
async def test_save_json_content_to_block(test_session, published_tour, translation_client):
    tour = await load_tour(test_session, published_tour)
    block_id = block_of(tour, BlockType.HIGHLIGHTS).id

    response = await TranslationService(test_session, translation_client).translate_tour_content(
        tour,
        TranslateContentRequest(
            content={"items": ["Maya Bay", "Viking Cave"], "columns": 2},
            block_id=block_id,
            target_languages=["fr"],
            save_to_database=True,
        ),
    )
    assert response.saved_to_database is True

    tour = await load_tour(test_session, published_tour)
    translations = {t.language: t for t in block_of(tour, BlockType.HIGHLIGHTS).translations}
    assert translations["fr"].content == {"items": ["[French] Maya Bay", "[French] Viking Cave"], "columns": 2}
    # English source is left alone
    assert translations["en"].content == {"items": [], "columns": 2}


@pytest.mark.asyncio
async def test_save_text_updates_block_title(test_session, published_tour, translation_client):
    tour = await load_tour(test_session, published_tour)
    block_id = block_of(tour, BlockType.HERO).id

    await TranslationService(test_session, translation_client).translate_tour_content(
        tour,
        TranslateContentRequest(text="Phi Phi Island", block_id=block_id, target_languages=["es"], save_to_database=True),
    )

    tour = await load_tour(test_session, published_tour)
    translations = {t.language: t for t in block_of(tour, BlockType.HERO).translations}
    assert translations["es"].title == "[Spanish] Phi Phi Island"


@pytest.mark.asyncio
async def test_save_to_unknown_block(test_session, published_tour, translation_client):
    tour = await load_tour(test_session, published_tour)

    with pytest.raises(NotFoundError):
        await TranslationService(test_session, translation_client).translate_tour_content(
            tour,
            TranslateContentRequest(text="Hi", block_id=uuid4(), target_languages=["fr"], save_to_database=True),
        )


@pytest.mark.asyncio
async def test_translate_texts(test_session, translation_client):
    translation_client.failing_languages.add("Russian")

    response = await TranslationService(test_session, translation_client).translate_texts(
        TranslateTextsRequest(
            texts=[{"key": "book_now", "en": "Book now"}, {"key": "from", "en": "From"}],
            target_languages=["fr", "ru", "zh"],
        )
    )

    assert response.translations == {
        "fr": {"book_now": "[French] Book now", "from": "[French] From"},
        "zh": {"book_now": "[Chinese (Simplified)] Book now", "from": "[Chinese (Simplified)] From"},
    }
