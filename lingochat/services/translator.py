"""
Translator - Best-effort text translation through the Google Translate v2 API

Every public call degrades to the input text on failure; nothing raises.
"""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from lingochat.models.chat import BASE_LANGUAGE, Language
from lingochat.models.config import AppConfig

logger = logging.getLogger(__name__)


class TranslationError(Exception):
    """Raised internally when the translation API gives no usable answer"""


class Translator:
    """Translation adapter holding one HTTP session for the lifetime of a request"""

    def __init__(self, config: AppConfig):
        self.api_key = config.translate_api_key
        self.endpoint = config.translate.endpoint
        self.timeout_seconds = config.translate.timeout_seconds
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Release the HTTP session; later calls open a new one"""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def translate(self, text: str, language: str | Language | None) -> str:
        """Translate text into `language`; identity when it resolves to English"""
        target = Language.resolve(language)
        if target is BASE_LANGUAGE:
            return text
        return await self._translate_or_fallback(text, target)

    async def to_working_language(self, text: str, source_language: str | Language | None) -> str:
        """Translate text written in `source_language` into English"""
        source = Language.resolve(source_language)
        if source is BASE_LANGUAGE:
            return text
        return await self._translate_or_fallback(text, BASE_LANGUAGE, source)

    async def _translate_or_fallback(self, text: str, target: Language, source: Language | None = None) -> str:
        if not text.strip():
            return text

        try:
            translated = await self._request_translation(text.strip(), target, source)
        except Exception as e:
            logger.warning("[Translator] Falling back to original text (%s): %s", target.value, e)
            return text

        # The API trims surrounding whitespace, which matters for stream chunks
        leading = text[: len(text) - len(text.lstrip())]
        trailing = text[len(text.rstrip()):]
        return f"{leading}{translated}{trailing}"

    async def _request_translation(self, text: str, target: Language, source: Language | None) -> str:
        if not self.api_key:
            raise TranslationError("Translate API key not configured")

        payload: dict[str, Any] = {"q": text, "target": target.value, "format": "text"}
        if source is not None:
            payload["source"] = source.value

        session = self._get_session()
        async with session.post(self.endpoint, params={"key": self.api_key}, json=payload) as response:
            if response.status != 200:
                error_text = await response.text()
                raise TranslationError(f"Translate API error ({response.status}): {error_text[:200]}")
            data = await response.json()

        translations = (data.get("data") or {}).get("translations") or []
        if not translations or "translatedText" not in translations[0]:
            raise TranslationError("No translation in response")
        return translations[0]["translatedText"]
