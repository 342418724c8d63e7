# SPDX-License-Identifier: Apache-2.0
"""DeepL translation backend."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

import aiohttp

from subtitle_translator.translators._http import (
    DEFAULT_TIMEOUT,
    NETWORK_ERRORS,
    raise_for_status,
    read_json,
)
from subtitle_translator.translators.base import (
    ArrayLengthMismatchError,
    ConfigurationError,
    NetworkError,
    ParseError,
    QuotaExceededError,
    is_auto,
)

logger = logging.getLogger(__name__)


class DeepLTranslator:
    """DeepL translation backend.

    This backend uses DeepL API for high-quality translation.
    Requires an API key; keys ending in ``:fx`` belong to the free plan and
    are routed to the free endpoint, all others to the pro endpoint.

    Supports batch translation with multiple text parameters in a single request.

    Attributes:
        name: Backend identifier ("deepl").
    """

    SERVICE_NAME = "DeepL"
    FREE_API_URL = "https://api-free.deepl.com/v2"
    PRO_API_URL = "https://api.deepl.com/v2"
    MAX_TEXTS_PER_REQUEST = 50
    MAX_REQUEST_SIZE = 128 * 1024  # 128KB

    def __init__(
        self,
        api_key: str,
        api_url: str | None = None,
        session: aiohttp.ClientSession | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
    ) -> None:
        """Initialize DeepLTranslator.

        Args:
            api_key: DeepL API key.
            api_url: Base API URL (default: chosen from the key type).
            session: Shared aiohttp session (created lazily if None).
            timeout: Request timeout for a lazily created session.

        Raises:
            ConfigurationError: If API key is not provided.
        """
        if not api_key:
            raise ConfigurationError("DeepL API key is required")

        self._api_key = api_key
        self._api_url = (api_url or self.base_url_for_key(api_key)).rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout or DEFAULT_TIMEOUT

    @classmethod
    def base_url_for_key(cls, api_key: str) -> str:
        """Select the free or pro endpoint from the key shape."""
        return cls.FREE_API_URL if api_key.endswith(":fx") else cls.PRO_API_URL

    @property
    def name(self) -> str:
        """Return backend name."""
        return "deepl"

    async def __aenter__(self) -> DeepLTranslator:
        """Enter async context manager."""
        await self._ensure_session()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists.

        Returns:
            Active aiohttp session.
        """
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def translate(
        self,
        text: str,
        source_lang: Optional[str],
        target_lang: str,
    ) -> str:
        """Translate a single text using DeepL.

        Args:
            text: Text to translate.
            source_lang: Source language code, or None/"auto".
            target_lang: Target language code ("en", "de").

        Returns:
            Translated text.

        Raises:
            TranslatorError: On translation failure.
        """
        # Early return for empty or whitespace-only text
        if not text or not text.strip():
            return text

        results = await self.translate_batch([text], source_lang, target_lang)
        return results[0]

    async def translate_batch(
        self,
        texts: list[str],
        source_lang: Optional[str],
        target_lang: str,
    ) -> list[str]:
        """Translate several subtitle texts with as few requests as possible.

        Blank texts are copied through and never sent. The rest are grouped
        into requests of at most ``MAX_TEXTS_PER_REQUEST`` texts and
        ``MAX_REQUEST_SIZE`` bytes.

        Returns:
            Translations in input order.

        Raises:
            TranslatorError: On translation failure.
        """
        results = list(texts)
        pending = [(i, text) for i, text in enumerate(texts) if text.strip()]

        for group in self._request_groups(pending):
            translated = await self._translate_chunk(
                [text for _, text in group], source_lang, target_lang
            )
            for (i, _), text in zip(group, translated):
                results[i] = text

        return results

    def _request_groups(
        self, pending: list[tuple[int, str]]
    ) -> Iterator[list[tuple[int, str]]]:
        group: list[tuple[int, str]] = []
        group_bytes = 0
        for item in pending:
            size = len(item[1].encode("utf-8"))
            if group and (
                len(group) == self.MAX_TEXTS_PER_REQUEST
                or group_bytes + size > self.MAX_REQUEST_SIZE
            ):
                yield group
                group, group_bytes = [], 0
            group.append(item)
            group_bytes += size
        if group:
            yield group

    async def _translate_chunk(
        self,
        texts: list[str],
        source_lang: Optional[str],
        target_lang: str,
    ) -> list[str]:
        """Translate a chunk of texts.

        Args:
            texts: List of texts to translate.
            source_lang: Source language code.
            target_lang: Target language code.

        Returns:
            List of translated texts.

        Raises:
            TranslatorError: On translation failure.
        """
        session = await self._ensure_session()

        # Build request parameters with multiple 'text' entries
        params: list[tuple[str, str]] = [("text", t) for t in texts]
        params.append(("target_lang", target_lang.upper()))

        # Omit source_lang to let DeepL auto-detect
        if not is_auto(source_lang):
            params.append(("source_lang", str(source_lang).upper()))

        headers = {"Authorization": f"DeepL-Auth-Key {self._api_key}"}
        logger.debug("DeepL request: %d text(s)", len(texts))

        try:
            async with session.post(
                f"{self._api_url}/translate", data=params, headers=headers
            ) as response:
                if response.status == 456:
                    raise QuotaExceededError("DeepL character quota exceeded")
                await raise_for_status(response, self.SERVICE_NAME)
                data = await read_json(response, self.SERVICE_NAME)
        except NETWORK_ERRORS as e:
            raise NetworkError(f"DeepL request failed: {e}") from e

        try:
            translations = [t["text"] for t in data["translations"]]
        except (KeyError, TypeError) as e:
            raise ParseError("DeepL response has no 'translations' array") from e

        # Validate response length matches input
        if len(translations) != len(texts):
            raise ArrayLengthMismatchError(expected=len(texts), actual=len(translations))
        return translations

    async def close(self) -> None:
        """Close the HTTP session if this backend created it."""
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None
