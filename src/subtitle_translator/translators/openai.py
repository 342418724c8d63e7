# SPDX-License-Identifier: Apache-2.0
"""OpenAI GPT translation backend."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Optional

from subtitle_translator.translators.base import (
    ArrayLengthMismatchError,
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    ParseError,
    RateLimitError,
    ServerError,
    TranslationError,
    is_auto,
    parse_retry_after,
)

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


# Language code to full name mapping for prompts
LANGUAGE_NAMES = {
    "en": "English",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "ja": "Japanese",
}

DEFAULT_SYSTEM_PROMPT = (
    "You are a professional subtitle translator. Translate each subtitle "
    "accurately and concisely, preserving meaning and tone. Tokens of the form "
    "⟦NAME_0⟧ are placeholders: copy them unchanged and keep them next to the "
    "words they belong to. Respond with a JSON object of the form "
    '{"translations": ["..."]} containing one translation per input, in order.'
)


class OpenAITranslator:
    """OpenAI GPT translation backend.

    Sends one chat completion per batch in JSON mode and validates the
    assistant message as ``{"translations": [...]}``. Malformed content is
    reported as ParseError rather than crashing the caller.

    Attributes:
        name: Backend identifier ("openai").
    """

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        system_prompt: str | None = None,
        base_url: str | None = None,
        timeout: float = 60.0,
    ) -> None:
        """Initialize OpenAITranslator.

        Args:
            api_key: OpenAI API key.
            model: Model to use. Priority: argument > OPENAI_MODEL env > default.
            system_prompt: Custom system prompt for translation.
            base_url: Alternative OpenAI-compatible endpoint.
            timeout: Request timeout in seconds.

        Raises:
            ConfigurationError: If API key is not provided.
            ImportError: If openai package is not installed.
        """
        if not api_key:
            raise ConfigurationError("OpenAI API key is required")

        # Lazy import openai and pydantic
        try:
            from openai import AsyncOpenAI as _AsyncOpenAI

            self._AsyncOpenAI = _AsyncOpenAI
        except ImportError:
            raise ImportError(
                "openai is required for OpenAI backend. "
                "Install with: pip install subtitle-translator[openai]"
            ) from None

        from pydantic import BaseModel as _BaseModel

        class TranslationPayload(_BaseModel):
            translations: list[str]

        self._TranslationPayload = TranslationPayload

        self._api_key = api_key
        env_model = os.environ.get("OPENAI_MODEL")
        self._model = model or env_model or self.DEFAULT_MODEL
        self._system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        self._base_url = base_url
        self._timeout = timeout
        self._client: AsyncOpenAI | None = None

    @property
    def name(self) -> str:
        """Return backend name."""
        return "openai"

    def _ensure_client(self) -> AsyncOpenAI:
        """Ensure OpenAI client exists.

        SDK-level retries are disabled; retry and fallback happen in the
        pipeline.

        Returns:
            Active OpenAI async client.
        """
        if self._client is None:
            self._client = self._AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    def _get_language_name(self, lang_code: Optional[str]) -> str:
        """Convert language code to full name.

        Args:
            lang_code: Language code (e.g., "en", "de"), or None/"auto".

        Returns:
            Full language name.
        """
        if lang_code is None or is_auto(lang_code):
            return "the source language"
        return LANGUAGE_NAMES.get(lang_code.lower(), lang_code)

    async def translate(
        self,
        text: str,
        source_lang: Optional[str],
        target_lang: str,
    ) -> str:
        """Translate a single text using OpenAI.

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

        results = await self.translate_batch([text], source_lang, target_lang)
        return results[0]

    async def translate_batch(
        self,
        texts: list[str],
        source_lang: Optional[str],
        target_lang: str,
    ) -> list[str]:
        """Translate multiple texts with a single chat completion.

        Args:
            texts: List of texts to translate.
            source_lang: Source language code.
            target_lang: Target language code.

        Returns:
            List of translated texts (same order and length as input).

        Raises:
            TranslatorError: On translation failure.
        """
        results = list(texts)
        pending = [i for i, text in enumerate(texts) if text.strip()]
        if not pending:
            return results

        translated = await self._request_translations(
            [texts[i] for i in pending], source_lang, target_lang
        )
        for i, text in zip(pending, translated):
            results[i] = text
        return results

    def _build_user_message(
        self,
        texts: list[str],
        source_lang: Optional[str],
        target_lang: str,
    ) -> str:
        source_name = self._get_language_name(source_lang)
        target_name = self._get_language_name(target_lang)

        user_content = (
            f"Translate the following {len(texts)} subtitle(s) from {source_name} "
            f"to {target_name}. Return exactly {len(texts)} translations "
            f"in the same order.\n\nSubtitles to translate:\n"
        )
        for i, text in enumerate(texts, 1):
            user_content += f"{i}. {text}\n"
        return user_content

    async def _request_translations(
        self,
        texts: list[str],
        source_lang: Optional[str],
        target_lang: str,
    ) -> list[str]:
        """Run the chat completion and parse its JSON content.

        Args:
            texts: List of non-empty texts to translate.
            source_lang: Source language code.
            target_lang: Target language code.

        Returns:
            List of translated texts.

        Raises:
            TranslatorError: On translation failure.
        """
        from openai import OpenAIError

        client = self._ensure_client()
        logger.debug("OpenAI request: %d text(s) with model %s", len(texts), self._model)

        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": self._system_prompt},
                    {
                        "role": "user",
                        "content": self._build_user_message(texts, source_lang, target_lang),
                    },
                ],
                response_format={"type": "json_object"},
                temperature=0.3,
            )
        except OpenAIError as e:
            self._handle_openai_error(e)
            raise  # Should not reach here

        translations = self._parse_content(response)
        if len(translations) != len(texts):
            raise ArrayLengthMismatchError(expected=len(texts), actual=len(translations))
        return translations

    def _parse_content(self, response: Any) -> list[str]:
        """Extract the translations array from a chat completion.

        Raises:
            ParseError: If the assistant content is missing or malformed.
        """
        from pydantic import ValidationError

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise ParseError("OpenAI response has no message content") from e
        if not content:
            raise ParseError("OpenAI returned empty response")

        try:
            payload = self._TranslationPayload.model_validate_json(content)
        except ValidationError as e:
            raise ParseError(f"OpenAI response is not a translations object: {e}") from e
        return list(payload.translations)

    def _handle_openai_error(self, error: Any) -> None:
        """Map OpenAI SDK errors onto the translator error taxonomy.

        Args:
            error: The caught exception.

        Raises:
            AuthenticationError: On 401/403.
            RateLimitError: On 429, with the server's Retry-After hint.
            ConfigurationError: When the model is unavailable.
            ServerError: On 5xx.
            NetworkError: On connection failures and timeouts.
            TranslationError: On other API errors.
        """
        import openai

        if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
            raise AuthenticationError("Invalid OpenAI API key") from error
        if isinstance(error, openai.RateLimitError):
            retry_after = parse_retry_after(error.response.headers.get("retry-after"))
            raise RateLimitError(
                "OpenAI rate limit exceeded", retry_after=retry_after
            ) from error
        if isinstance(error, openai.NotFoundError):
            # NotFoundError is raised when model is not found
            raise ConfigurationError(
                f"Model '{self._model}' is not available. "
                f"Set OPENAI_MODEL environment variable to use a different model."
            ) from error
        if isinstance(error, openai.APIStatusError) and error.status_code >= 500:
            raise ServerError(
                f"OpenAI server error (status {error.status_code})",
                status=error.status_code,
            ) from error
        if isinstance(error, openai.APIConnectionError):
            raise NetworkError(f"OpenAI request failed: {error}") from error

        raise TranslationError(f"OpenAI API error: {error}") from error

    async def close(self) -> None:
        """Close the OpenAI client."""
        if self._client:
            await self._client.close()
            self._client = None
