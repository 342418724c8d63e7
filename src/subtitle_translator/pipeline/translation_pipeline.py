# SPDX-License-Identifier: Apache-2.0
"""Translation pipeline implementation."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional, Sequence

from subtitle_translator.core.cache import SegmentCache
from subtitle_translator.core.glossary import GlossaryMatcher
from subtitle_translator.core.models import (
    Glossary,
    SubtitleEntry,
    Subtitles,
    TranslationResult,
    TranslationStats,
)
from subtitle_translator.core.text_protector import TextProtector
from subtitle_translator.pipeline.errors import ResultNotAvailableError
from subtitle_translator.pipeline.fallback import FallbackTranslator, RetryPolicy
from subtitle_translator.pipeline.progress import ProgressCallback, TranslationProgress
from subtitle_translator.translators.base import TranslatorBackend
from subtitle_translator.translators.factory import ServiceConfig, create_translators

logger = logging.getLogger(__name__)

STAGE = "translate"


@dataclass
class PipelineConfig:
    """Translation pipeline configuration."""

    # Rate limiting (HTTP 429)
    max_rate_limit_retries: int = 1
    default_retry_after: float = 30.0
    max_retry_after: Optional[float] = 300.0

    # Server and network errors: same-backend retries before falling back
    transient_retries: int = 0
    retry_delay: float = 1.0

    # Copy entries untouched when source and target language are equal
    skip_same_language: bool = True

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_rate_limit_retries=self.max_rate_limit_retries,
            default_retry_after=self.default_retry_after,
            max_retry_after=self.max_retry_after,
            transient_retries=self.transient_retries,
            retry_delay=self.retry_delay,
        )


class TranslationPipeline:
    """Subtitle translation pipeline.

    Segments are translated one after another: cache lookup, placeholder
    protection, glossary protection, backend call with retry/fallback,
    restoration, cache store. Successful segments are cached as they
    complete, so retrying a failed run only pays for the remaining ones.

    The cache and the last result belong to the pipeline instance.
    """

    def __init__(
        self,
        translators: Sequence[TranslatorBackend],
        config: PipelineConfig | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Initialize TranslationPipeline.

        Args:
            translators: Backends in fallback order (primary first).
            config: Retry and behaviour settings.
            progress_callback: Optional callback mirroring progress events.
        """
        self._translators = list(translators)
        self._config = config or PipelineConfig()
        self._progress_callback = progress_callback
        self._protector = TextProtector()
        self._matcher = GlossaryMatcher(None)
        self._cache = SegmentCache()
        self._last_result: TranslationResult | None = None
        self._last_stats: TranslationStats | None = None

    @classmethod
    def from_service_config(
        cls,
        service_config: ServiceConfig,
        config: PipelineConfig | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> TranslationPipeline:
        """Build a pipeline whose fallback chain follows a ServiceConfig."""
        return cls(create_translators(service_config), config, progress_callback)

    @property
    def services(self) -> list[str]:
        """Backend names in fallback order."""
        return [t.name for t in self._translators]

    async def __aenter__(self) -> TranslationPipeline:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close all backends."""
        for translator in self._translators:
            await translator.close()

    # Glossary and cache management

    def set_glossary(self, glossary: Optional[Glossary]) -> None:
        """Activate a glossary, replacing the previous one (None disables)."""
        self._matcher = GlossaryMatcher(glossary)

    def get_glossary(self) -> Optional[Glossary]:
        return self._matcher.glossary

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_size(self) -> int:
        return self._cache.size()

    # Results

    def get_translation_result(self) -> TranslationResult:
        """Return the result of the last successful translate() run.

        Raises:
            ResultNotAvailableError: If no run has completed yet.
        """
        if self._last_result is None:
            raise ResultNotAvailableError("No translation result available")
        return self._last_result

    def get_last_stats(self) -> TranslationStats:
        """Return statistics of the last successful translate() run.

        Raises:
            ResultNotAvailableError: If no run has completed yet.
        """
        if self._last_stats is None:
            raise ResultNotAvailableError("No translation statistics available")
        return self._last_stats

    # Translation

    async def translate(
        self,
        subtitles: Subtitles,
        target_lang: str,
    ) -> AsyncIterator[TranslationProgress]:
        """Translate subtitles, yielding progress updates.

        The work runs in a separate task and reports through a queue.
        Closing the iterator early or cancelling the consumer cancels the
        work; the segment in flight is not cached. Iterate again by calling
        translate() again.

        Args:
            subtitles: Source subtitles.
            target_lang: Target language code.

        Yields:
            Progress from 0.0 to 1.0, non-decreasing.

        Raises:
            TranslationFailedError: If a segment cannot be translated by any backend.
        """
        queue: asyncio.Queue[TranslationProgress | None] = asyncio.Queue()
        worker = asyncio.create_task(self._run(subtitles, target_lang, queue))
        try:
            while True:
                progress = await queue.get()
                if progress is None:
                    break
                yield progress
            await worker
        finally:
            if not worker.done():
                worker.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await worker

    async def translate_all(self, subtitles: Subtitles, target_lang: str) -> TranslationResult:
        """Run translate() to completion and return the result."""
        async for _ in self.translate(subtitles, target_lang):
            pass
        return self.get_translation_result()

    async def _run(
        self,
        subtitles: Subtitles,
        target_lang: str,
        queue: asyncio.Queue[TranslationProgress | None],
    ) -> None:
        try:
            await self._translate_entries(subtitles, target_lang, queue.put_nowait)
        finally:
            queue.put_nowait(None)

    async def _translate_entries(
        self,
        subtitles: Subtitles,
        target_lang: str,
        emit: Callable[[TranslationProgress], None],
    ) -> None:
        started = time.monotonic()
        source_lang = subtitles.language
        entries = subtitles.entries
        total = len(entries)
        processed = 0

        def report(message: str, percentage: float | None = None) -> None:
            if percentage is None:
                percentage = processed / total if total else 0.0
            emit(TranslationProgress(percentage, message))
            self._notify(processed, total, message)

        def on_rate_limited(service: str, delay: float) -> None:
            report(f"Rate limited by {service}, waiting {delay:.0f}s...")

        controller = FallbackTranslator(
            self._translators,
            self._config.retry_policy(),
            on_rate_limited=on_rate_limited,
        )
        primary = self._translators[0].name if self._translators else None

        same_language = (
            self._config.skip_same_language
            and source_lang is not None
            and source_lang.lower() == target_lang.lower()
        )
        if same_language:
            logger.info("Source and target language are both %s; copying entries", target_lang)

        report("Starting translation...", 0.0)

        translated_entries: list[SubtitleEntry] = []
        cached_segments = 0
        api_calls = 0
        total_characters = 0
        fallbacks_used: list[str] = []

        for entry in entries:
            text = entry.text
            if same_language or not text.strip():
                translated = text
            else:
                cached = self._cache.get(text, target_lang)
                if cached is not None:
                    logger.debug("Cache hit for subtitle %d", entry.index)
                    cached_segments += 1
                    translated = cached
                else:
                    protected = self._protector.protect(text)
                    protected = self._matcher.protect(protected, source_lang, target_lang)
                    outcome = await controller.translate(
                        protected.text, source_lang, target_lang, segment_index=entry.index
                    )
                    api_calls += outcome.api_calls
                    total_characters += len(protected.text)
                    if outcome.service != primary and outcome.service not in fallbacks_used:
                        fallbacks_used.append(outcome.service)

                    translated = self._protector.restore(outcome.text, protected.placeholders)
                    self._cache.put(text, target_lang, translated)

            translated_entries.append(entry.with_text(translated))
            processed += 1
            report(f"Translated {processed}/{total} segments")

        self._last_result = TranslationResult(language=target_lang, entries=translated_entries)
        self._last_stats = TranslationStats(
            total_segments=total,
            cached_segments=cached_segments,
            api_calls=api_calls,
            total_characters=total_characters,
            duration_ms=int((time.monotonic() - started) * 1000),
            service_used=primary,
            fallbacks_used=tuple(fallbacks_used),
        )
        logger.info(
            "Translated %d segments (%d cached, %d API calls) in %d ms",
            total,
            cached_segments,
            api_calls,
            self._last_stats.duration_ms,
        )
        report("Translation complete", 1.0)

    def _notify(self, current: int, total: int, message: str = "") -> None:
        if self._progress_callback is None:
            return
        self._progress_callback(STAGE, current, total, message)
