# SPDX-License-Identifier: Apache-2.0
"""Base classes and protocols for translation backends."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Protocol, runtime_checkable


class TranslatorError(Exception):
    """Base exception for translator module."""

    pass


class ConfigurationError(TranslatorError):
    """Configuration error (missing API key, invalid parameters, etc.).

    This error type is NOT retryable - fix the configuration first.
    """

    pass


class UnsupportedLanguageError(ConfigurationError):
    """The backend does not support a requested language."""

    def __init__(self, service: str, language: str) -> None:
        super().__init__(f"{service} does not support language '{language}'")
        self.service = service
        self.language = language


class AuthenticationError(TranslatorError):
    """The backend rejected the credentials (HTTP 401/403)."""

    pass


class TranslationError(TranslatorError):
    """Error during translation (API call failure, rate limit, etc.).

    This error type is potentially retryable.
    """

    pass


class RateLimitError(TranslationError):
    """The backend asked us to slow down (HTTP 429).

    Attributes:
        retry_after: Seconds to wait before retrying, if the backend said so.
    """

    def __init__(self, message: str, retry_after: Optional[float] = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class ServerError(TranslationError):
    """The backend failed with a 5xx status."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


class NetworkError(TranslationError):
    """Connection-level failure (DNS, refused connection, timeout)."""

    pass


class QuotaExceededError(TranslationError):
    """The account's character quota is used up."""

    pass


class ParseError(TranslationError):
    """The backend answered successfully but the payload is malformed."""

    pass


class ArrayLengthMismatchError(ParseError):
    """Backend returned a different number of translations than requested."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Expected {expected} translations but got {actual}")
        self.expected = expected
        self.actual = actual


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header value.

    Accepts delay-seconds or an HTTP date.

    Args:
        value: Raw header value.

    Returns:
        Seconds to wait (never negative), or None if absent or unparseable.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def is_auto(source_lang: Optional[str]) -> bool:
    """Check whether the source language requests auto-detection."""
    return source_lang is None or source_lang.lower() == "auto"


@runtime_checkable
class TranslatorBackend(Protocol):
    """Protocol definition for translation backends.

    All translator implementations must conform to this protocol.
    Backends treat placeholder tokens as opaque text.
    """

    @property
    def name(self) -> str:
        """Backend name ("libretranslate", "deepl", "openai")."""
        ...

    async def translate(
        self,
        text: str,
        source_lang: Optional[str],
        target_lang: str,
    ) -> str:
        """Translate a single text.

        Args:
            text: Text to translate.
            source_lang: Source language code, or None/"auto" to auto-detect.
            target_lang: Target language code ("en", "de").

        Returns:
            Translated text.

        Raises:
            TranslatorError: On translation failure.
        """
        ...

    async def translate_batch(
        self,
        texts: list[str],
        source_lang: Optional[str],
        target_lang: str,
    ) -> list[str]:
        """Translate multiple texts in batch.

        Args:
            texts: List of texts to translate.
            source_lang: Source language code.
            target_lang: Target language code.

        Returns:
            List of translated texts (same order and length as input).

        Raises:
            TranslatorError: On translation failure.
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
