# SPDX-License-Identifier: Apache-2.0
"""Core subtitle models and text processing."""

from .cache import SegmentCache, make_cache_key
from .glossary import GlossaryMatcher
from .models import (
    Glossary,
    GlossaryEntry,
    SubtitleEntry,
    Subtitles,
    TranslationResult,
    TranslationService,
    TranslationStats,
)
from .text_protector import (
    Placeholder,
    ProtectedText,
    TextProtector,
)

__all__ = [
    "Glossary",
    "GlossaryEntry",
    "GlossaryMatcher",
    "Placeholder",
    "ProtectedText",
    "SegmentCache",
    "SubtitleEntry",
    "Subtitles",
    "TextProtector",
    "TranslationResult",
    "TranslationService",
    "TranslationStats",
    "make_cache_key",
]
