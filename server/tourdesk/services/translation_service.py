"""Machine translation of tour content and UI strings through the OpenAI API."""

import json
import logging
import re
from typing import Any, Optional, Union

import openai
from openai import AsyncOpenAI
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import NotFoundError, ServiceUnavailableError, ValidationError
from ..core.i18n import DEFAULT_LANGUAGE, LANGUAGE_NAMES
from ..core.observability import metrics_collector
from ..models.block import TourBlockTranslation
from ..models.tour import Tour
from ..schemas.translation import (
    TranslateContentRequest,
    TranslateContentResponse,
    TranslateTextsRequest,
    TranslateTextsResponse,
)

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
CONTENT_MAX_TOKENS = 4000
TEXTS_MAX_TOKENS = 2000

CODE_FENCE = re.compile(r"```(?:json)?\n?|\n?```")

CONTENT_SYSTEM_PROMPT = (
    "You are a professional translator specializing in travel and tourism content localization."
)
TEXTS_SYSTEM_PROMPT = (
    "You are a professional translator specializing in UI/UX text localization. "
    "Always return valid JSON only."
)

JSON_CONTENT_PROMPT = """Translate the following tour content JSON from English to {language}.

Rules:
1. Translate all text values (titles, descriptions, items in arrays)
2. Keep the JSON structure exactly the same
3. Do not translate URLs, image paths or technical keys
4. Keep numbers, dates and times in their original format
5. Keep a professional but friendly tone for tourists
6. Return only valid JSON

Input JSON:
{source}"""

TEXT_PROMPT = """Translate the following text from English to {language}.

Rules:
1. Keep the translation natural and suitable for tourism marketing
2. Keep a professional but friendly tone for tourists
3. Keep proper nouns and brand names as they are where appropriate
4. Return only the translated text, without quotes or explanation

Text:
{source}"""

UI_TEXTS_PROMPT = """Translate the following UI strings from English to {language}.

Rules:
1. Keep translations concise and natural for buttons, labels and short messages
2. Keep the tone and formality of the English text
3. Do not add or remove keys
4. Return only a JSON object with exactly the same keys

Input JSON:
{source}"""


def strip_code_fences(text: str) -> str:
    return CODE_FENCE.sub("", text).strip()


class TranslationClient:
    """Chat completions wrapper; returns the raw reply text."""

    def __init__(self, api_key: str, model: str):
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def complete(self, system_prompt: str, prompt: str, max_tokens: int) -> Optional[str]:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            temperature=TEMPERATURE,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content if response.choices else None


def get_translation_client() -> Optional[TranslationClient]:
    """None when no API key is configured."""
    if not settings.openai_api_key:
        return None
    return TranslationClient(settings.openai_api_key, settings.openai_model)


class TranslationService:
    """Service translating English source content into the other storefront languages."""

    def __init__(self, db: AsyncSession, client: Optional[TranslationClient]):
        self.db = db
        self.client = client

    def _require_client(self) -> TranslationClient:
        if self.client is None:
            raise ServiceUnavailableError(service="openai", detail="OpenAI API key is not configured")
        return self.client

    @staticmethod
    def _targets(languages: list[str]) -> list[str]:
        targets = [language for language in dict.fromkeys(languages) if language != DEFAULT_LANGUAGE]
        if not targets:
            raise ValidationError(detail="No target languages specified")
        return targets

    async def _translate_one(
        self,
        client: TranslationClient,
        language: str,
        system_prompt: str,
        prompt: str,
        max_tokens: int,
        as_json: bool,
    ) -> Optional[Union[str, dict[str, Any]]]:
        """Translate into one language; failures are logged and yield None."""
        try:
            reply = await client.complete(system_prompt, prompt, max_tokens)
        except openai.OpenAIError as e:
            logger.warning("Translation request failed", extra={"language": language, "error": str(e)})
            metrics_collector.record_translation(language, "failed")
            return None

        if not reply:
            metrics_collector.record_translation(language, "empty")
            return None
        if not as_json:
            metrics_collector.record_translation(language, "translated")
            return reply.strip()

        try:
            parsed = json.loads(strip_code_fences(reply))
        except json.JSONDecodeError:
            logger.warning("Translation reply is not valid JSON", extra={"language": language})
            metrics_collector.record_translation(language, "invalid")
            return None
        if not isinstance(parsed, dict):
            metrics_collector.record_translation(language, "invalid")
            return None
        metrics_collector.record_translation(language, "translated")
        return parsed

    async def translate_tour_content(self, tour: Tour, request: TranslateContentRequest) -> TranslateContentResponse:
        """
        Translate a text field or JSON block content of a tour.

        With `save_to_database` and a `block_id` the results are written to the
        block's translations: JSON replaces the content, text replaces the title.

        Raises:
            ServiceUnavailableError: If no API key is configured
            ValidationError: If there are no target languages or nothing to translate
            NotFoundError: If the block does not belong to the tour
        """
        client = self._require_client()
        targets = self._targets(request.target_languages)

        if request.text:
            source: Union[str, dict[str, Any]] = request.text
            as_json = False
        elif request.content:
            source = request.content
            as_json = True
        else:
            raise ValidationError(detail="Either text or content is required")

        block = None
        if request.save_to_database and request.block_id:
            block = next((b for b in tour.blocks if b.id == request.block_id), None)
            if block is None:
                raise NotFoundError(resource_type="block", resource_id=str(request.block_id))

        translations: dict[str, Union[str, dict[str, Any]]] = {DEFAULT_LANGUAGE: source}
        for language in targets:
            template = JSON_CONTENT_PROMPT if as_json else TEXT_PROMPT
            prompt = template.format(
                language=LANGUAGE_NAMES[language],
                source=json.dumps(source, indent=2, ensure_ascii=False) if as_json else source,
            )
            result = await self._translate_one(
                client, language, CONTENT_SYSTEM_PROMPT, prompt, CONTENT_MAX_TOKENS, as_json
            )
            if result is not None:
                translations[language] = result

        translated = [language for language in translations if language != DEFAULT_LANGUAGE]

        if block is not None:
            existing = {t.language: t for t in block.translations}
            for language in translated:
                row = existing.get(language)
                if row is None:
                    row = TourBlockTranslation(block_id=block.id, language=language, content={})
                    self.db.add(row)
                if as_json:
                    row.content = translations[language]
                else:
                    row.title = translations[language]
            await self.db.commit()

        logger.info(
            "Tour content translated",
            extra={
                "tour_id": str(tour.id),
                "field_name": request.field_name,
                "languages": translated,
                "saved": block is not None,
            },
        )
        return TranslateContentResponse(
            translations=translations,
            translated_languages=translated,
            saved_to_database=block is not None,
        )

    async def translate_texts(self, request: TranslateTextsRequest) -> TranslateTextsResponse:
        """
        Translate a batch of UI strings; the reply for each language must keep the keys.

        Raises:
            ServiceUnavailableError: If no API key is configured
            ValidationError: If there are no target languages
        """
        client = self._require_client()
        targets = self._targets(request.target_languages)
        source = {item.key: item.en for item in request.texts}

        translations: dict[str, dict[str, str]] = {}
        for language in targets:
            prompt = UI_TEXTS_PROMPT.format(
                language=LANGUAGE_NAMES[language],
                source=json.dumps(source, indent=2, ensure_ascii=False),
            )
            result = await self._translate_one(
                client, language, TEXTS_SYSTEM_PROMPT, prompt, TEXTS_MAX_TOKENS, as_json=True
            )
            if result is not None:
                translations[language] = {key: str(result[key]) for key in source if key in result}

        logger.info("UI texts translated", extra={"keys": len(source), "languages": sorted(translations)})
        return TranslateTextsResponse(translations=translations)
