# SPDX-License-Identifier: Apache-2.0
"""Data models for subtitle translation.

This module defines the subtitle, glossary and result records that flow
through the translation pipeline, together with their JSON-friendly
dictionary representations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class TranslationService(str, Enum):
    """Identifiers of the supported translation backends."""

    LIBRETRANSLATE = "libretranslate"
    DEEPL = "deepl"
    OPENAI = "openai"

    @property
    def display_name(self) -> str:
        """Human readable backend name."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_string(cls, value: str) -> Optional[TranslationService]:
        """Look up a service by identifier (case-insensitive).

        Args:
            value: Service identifier such as "deepl".

        Returns:
            Matching service, or None if unknown.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_DISPLAY_NAMES: dict[TranslationService, str] = {
    TranslationService.LIBRETRANSLATE: "LibreTranslate",
    TranslationService.DEEPL: "DeepL",
    TranslationService.OPENAI: "OpenAI",
}


@dataclass(frozen=True)
class SubtitleEntry:
    """A single timed subtitle line.

    Attributes:
        index: 1-based position in the subtitle sequence.
        start_time: Start time in milliseconds.
        end_time: End time in milliseconds (strictly after start_time).
        text: Subtitle text, possibly containing markup.
    """

    index: int
    start_time: int
    end_time: int
    text: str

    def __post_init__(self) -> None:
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Subtitle {self.index}: start_time ({self.start_time}) "
                f"must be before end_time ({self.end_time})"
            )

    def with_text(self, text: str) -> SubtitleEntry:
        """Return a copy carrying the same timing and a new text."""
        return SubtitleEntry(
            index=self.index,
            start_time=self.start_time,
            end_time=self.end_time,
            text=text,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubtitleEntry:
        return cls(
            index=int(data["index"]),
            start_time=int(data["start_time"]),
            end_time=int(data["end_time"]),
            text=data["text"],
        )


@dataclass
class Subtitles:
    """Ordered subtitle entries in a declared source language.

    Attributes:
        entries: Subtitle entries in display order.
        language: Source language code, or None for auto-detection.
    """

    entries: list[SubtitleEntry] = field(default_factory=list)
    language: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subtitles:
        return cls(
            entries=[SubtitleEntry.from_dict(e) for e in data.get("entries", [])],
            language=data.get("language"),
        )


@dataclass(frozen=True)
class GlossaryEntry:
    """A source term that must be rendered as a fixed target term.

    Attributes:
        source_term: Term as it appears in source text.
        target_term: Term to emit in the translation.
        case_sensitive: Match the source term case-sensitively.
        whole_word: Only match at word boundaries.
    """

    source_term: str
    target_term: str
    case_sensitive: bool = True
    whole_word: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_term": self.source_term,
            "target_term": self.target_term,
            "case_sensitive": self.case_sensitive,
            "whole_word": self.whole_word,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GlossaryEntry:
        return cls(
            source_term=data["source_term"],
            target_term=data["target_term"],
            case_sensitive=data.get("case_sensitive", True),
            whole_word=data.get("whole_word", False),
        )


@dataclass
class Glossary:
    """Terminology for one language pair.

    Attributes:
        name: Glossary name.
        source_language: Source language code.
        target_language: Target language code.
        entries: Glossary entries; list order breaks ties between equal-length terms.
    """

    name: str
    source_language: str
    target_language: str
    entries: list[GlossaryEntry] = field(default_factory=list)

    def applies_to(self, source_lang: Optional[str], target_lang: str) -> bool:
        """Check whether this glossary matches the translation direction."""
        return (
            self.source_language == source_lang
            and self.target_language == target_lang
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "source_language": self.source_language,
            "target_language": self.target_language,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Glossary:
        return cls(
            name=data["name"],
            source_language=data["source_language"],
            target_language=data["target_language"],
            entries=[GlossaryEntry.from_dict(e) for e in data.get("entries", [])],
        )


@dataclass
class TranslationResult:
    """Translated subtitles.

    Entries keep the timing of the source entries index for index.
    """

    language: str
    entries: list[SubtitleEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "entries": [entry.to_dict() for entry in self.entries],
        }


@dataclass(frozen=True)
class TranslationStats:
    """Statistics about one translate() run.

    Attributes:
        total_segments: Number of subtitle entries processed.
        cached_segments: Entries served from the cache.
        api_calls: Backend invocations, including failed ones.
        total_characters: Characters of protected text sent to backends.
        duration_ms: Wall-clock duration of the run.
        service_used: Primary backend of the fallback chain.
        fallbacks_used: Backends that produced results after the primary failed.
    """

    total_segments: int = 0
    cached_segments: int = 0
    api_calls: int = 0
    total_characters: int = 0
    duration_ms: int = 0
    service_used: Optional[str] = None
    fallbacks_used: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_segments": self.total_segments,
            "cached_segments": self.cached_segments,
            "api_calls": self.api_calls,
            "total_characters": self.total_characters,
            "duration_ms": self.duration_ms,
            "service_used": self.service_used,
            "fallbacks_used": list(self.fallbacks_used),
        }
