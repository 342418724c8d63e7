# SPDX-License-Identifier: Apache-2.0
"""Retry and fallback across translation backends.

A segment is offered to each configured backend in order. Rate limits are
waited out and retried on the same backend a bounded number of times; any
other failure moves on to the next backend. Only when every backend has
failed does the caller see an error.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from subtitle_translator.pipeline.errors import TranslationFailedError
from subtitle_translator.translators.base import (
    ConfigurationError,
    NetworkError,
    RateLimitError,
    ServerError,
    TranslatorBackend,
    TranslatorError,
)

logger = logging.getLogger(__name__)

# Called with (service name, seconds to wait) before a rate-limit wait.
RateLimitListener = Callable[[str, float], None]


@dataclass
class RetryPolicy:
    """Retry limits for a single backend.

    Attributes:
        max_rate_limit_retries: Same-backend retries after HTTP 429.
        default_retry_after: Wait in seconds when no Retry-After is given.
        max_retry_after: Upper bound on a single wait (None = no bound).
        transient_retries: Same-backend retries after server or network errors.
        retry_delay: Base delay for transient retries (doubled per attempt).
    """

    max_rate_limit_retries: int = 1
    default_retry_after: float = 30.0
    max_retry_after: Optional[float] = 300.0
    transient_retries: int = 0
    retry_delay: float = 1.0


@dataclass(frozen=True)
class FallbackOutcome:
    """Successful translation of one segment.

    Attributes:
        text: Backend output.
        service: Name of the backend that produced it.
        api_calls: Backend invocations made, including failed ones.
        attempted_services: Backends tried, in order.
    """

    text: str
    service: str
    api_calls: int
    attempted_services: tuple[str, ...]


class FallbackTranslator:
    """Drives one segment through retry and fallback."""

    def __init__(
        self,
        translators: Sequence[TranslatorBackend],
        policy: Optional[RetryPolicy] = None,
        on_rate_limited: Optional[RateLimitListener] = None,
    ) -> None:
        self._translators = list(translators)
        self._policy = policy or RetryPolicy()
        self._on_rate_limited = on_rate_limited

    @property
    def services(self) -> list[str]:
        """Backend names in fallback order."""
        return [t.name for t in self._translators]

    def _rate_limit_delay(self, error: RateLimitError) -> float:
        delay = error.retry_after
        if delay is None:
            delay = self._policy.default_retry_after
        if self._policy.max_retry_after is not None:
            delay = min(delay, self._policy.max_retry_after)
        return delay

    async def translate(
        self,
        text: str,
        source_lang: Optional[str],
        target_lang: str,
        segment_index: Optional[int] = None,
    ) -> FallbackOutcome:
        """Translate text with the first backend that succeeds.

        Args:
            text: Protected text.
            source_lang: Source language code, or None for auto-detection.
            target_lang: Target language code.
            segment_index: Subtitle index, for error context.

        Returns:
            FallbackOutcome describing the successful attempt.

        Raises:
            TranslationFailedError: If no backend is configured or all failed.
        """
        if not self._translators:
            raise TranslationFailedError(
                "No translation service is configured",
                cause=ConfigurationError("No translation service is configured"),
                segment_index=segment_index,
            )

        api_calls = 0
        attempted: list[str] = []
        last_error: Optional[TranslatorError] = None

        for translator in self._translators:
            attempted.append(translator.name)
            rate_limit_retries = 0
            transient_retries = 0

            while True:
                api_calls += 1
                try:
                    translated = await translator.translate(text, source_lang, target_lang)
                except RateLimitError as e:
                    last_error = e
                    if rate_limit_retries >= self._policy.max_rate_limit_retries:
                        logger.warning(
                            "%s still rate limited after %d retries",
                            translator.name,
                            rate_limit_retries,
                        )
                        break
                    rate_limit_retries += 1
                    delay = self._rate_limit_delay(e)
                    logger.warning("%s rate limited, waiting %.1fs", translator.name, delay)
                    if self._on_rate_limited is not None:
                        self._on_rate_limited(translator.name, delay)
                    await asyncio.sleep(delay)
                except (ServerError, NetworkError) as e:
                    last_error = e
                    if transient_retries >= self._policy.transient_retries:
                        break
                    delay = self._policy.retry_delay * (2**transient_retries)
                    transient_retries += 1
                    logger.info(
                        "%s failed (%s), retrying in %.1fs", translator.name, e, delay
                    )
                    await asyncio.sleep(delay)
                except TranslatorError as e:
                    last_error = e
                    break
                else:
                    return FallbackOutcome(
                        text=translated,
                        service=translator.name,
                        api_calls=api_calls,
                        attempted_services=tuple(attempted),
                    )

            logger.warning("Translation with %s failed: %s", translator.name, last_error)

        raise TranslationFailedError(
            f"All translation services failed ({', '.join(attempted)})",
            attempted_services=attempted,
            cause=last_error,
            segment_index=segment_index,
        )
