# SPDX-License-Identifier: Apache-2.0
"""LibreTranslate translation backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from subtitle_translator.translators._http import (
    DEFAULT_TIMEOUT,
    NETWORK_ERRORS,
    raise_for_status,
    read_json,
)
from subtitle_translator.translators.base import (
    ConfigurationError,
    NetworkError,
    ParseError,
    UnsupportedLanguageError,
    is_auto,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LanguageInfo:
    """A language advertised by a LibreTranslate instance."""

    code: str
    name: str


class LibreTranslateTranslator:
    """LibreTranslate translation backend.

    Sends one request per text to a LibreTranslate instance (public or
    self-hosted). The instance's ``/languages`` list is fetched on first use
    and used to reject unsupported language codes before translating.

    Attributes:
        name: Backend identifier ("libretranslate").
    """

    SERVICE_NAME = "LibreTranslate"

    def __init__(
        self,
        api_url: str,
        api_key: str | None = None,
        session: aiohttp.ClientSession | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
    ) -> None:
        """Initialize LibreTranslateTranslator.

        Args:
            api_url: Base URL of the instance (e.g. "http://127.0.0.1:5000").
            api_key: API key, required by some public instances.
            session: Shared aiohttp session (created lazily if None).
            timeout: Request timeout for a lazily created session.

        Raises:
            ConfigurationError: If the URL is not provided.
        """
        if not api_url:
            raise ConfigurationError("LibreTranslate URL is required")

        self._api_url = api_url.rstrip("/")
        self._api_key = api_key or None
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout or DEFAULT_TIMEOUT
        self._languages: list[LanguageInfo] | None = None

    @property
    def name(self) -> str:
        """Return backend name."""
        return "libretranslate"

    async def __aenter__(self) -> LibreTranslateTranslator:
        await self._ensure_session()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def get_languages(self) -> list[LanguageInfo]:
        """Fetch (once) the languages supported by the instance.

        Returns:
            Supported languages.

        Raises:
            TranslatorError: If the language list cannot be retrieved.
        """
        if self._languages is not None:
            return self._languages

        session = await self._ensure_session()
        try:
            async with session.get(f"{self._api_url}/languages") as response:
                await raise_for_status(response, self.SERVICE_NAME)
                data = await read_json(response, self.SERVICE_NAME)
        except NETWORK_ERRORS as e:
            raise NetworkError(f"{self.SERVICE_NAME} request failed: {e}") from e

        try:
            languages = [LanguageInfo(code=item["code"], name=item.get("name", "")) for item in data]
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"{self.SERVICE_NAME} returned a malformed language list") from e

        logger.info(
            "Available LibreTranslate languages: %s",
            ", ".join(sorted(lang.code for lang in languages)),
        )
        self._languages = languages
        return languages

    async def _validate_languages(self, source_lang: Optional[str], target_lang: str) -> None:
        codes = {lang.code.lower() for lang in await self.get_languages()}
        if target_lang.lower() not in codes:
            raise UnsupportedLanguageError(self.name, target_lang)
        if source_lang is not None and not is_auto(source_lang) and source_lang.lower() not in codes:
            raise UnsupportedLanguageError(self.name, source_lang)

    async def translate(
        self,
        text: str,
        source_lang: Optional[str],
        target_lang: str,
    ) -> str:
        """Translate a single text using LibreTranslate.

        Args:
            text: Text to translate.
            source_lang: Source language code, or None/"auto".
            target_lang: Target language code.

        Returns:
            Translated text.

        Raises:
            TranslatorError: On translation failure.
        """
        # Early return for empty or whitespace-only text
        if not text or not text.strip():
            return text

        await self._validate_languages(source_lang, target_lang)
        session = await self._ensure_session()

        payload: dict[str, str] = {
            "q": text,
            "source": "auto" if source_lang is None or is_auto(source_lang) else source_lang.lower(),
            "target": target_lang.lower(),
            "format": "text",
        }
        if self._api_key:
            payload["api_key"] = self._api_key

        logger.debug("LibreTranslate request: %d chars", len(text))
        try:
            async with session.post(f"{self._api_url}/translate", json=payload) as response:
                await raise_for_status(response, self.SERVICE_NAME)
                data = await read_json(response, self.SERVICE_NAME)
        except NETWORK_ERRORS as e:
            raise NetworkError(f"{self.SERVICE_NAME} request failed: {e}") from e

        translated = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(translated, str):
            raise ParseError(f"{self.SERVICE_NAME} response has no 'translatedText'")
        return translated

    async def translate_batch(
        self,
        texts: list[str],
        source_lang: Optional[str],
        target_lang: str,
    ) -> list[str]:
        """Translate texts one request at a time, in order."""
        results: list[str] = []
        for text in texts:
            results.append(await self.translate(text, source_lang, target_lang))
        return results

    async def close(self) -> None:
        """Close the HTTP session if this backend created it."""
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None
