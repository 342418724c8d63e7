# SPDX-License-Identifier: Apache-2.0
"""Glossary term protection.

Glossary source terms are replaced with ``⟦GLOSS_n⟧`` placeholders that
restore to the configured target term, so the backend never sees them.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from subtitle_translator.core.models import Glossary, GlossaryEntry
from subtitle_translator.core.text_protector import (
    PLACEHOLDER_PATTERN,
    Placeholder,
    ProtectedText,
    make_token,
)

logger = logging.getLogger(__name__)

GLOSSARY_KIND = "GLOSS"

# Group name for placeholders already in the text; they are never rewritten.
_SKIP_GROUP = "skip"


def _entry_pattern(entry: GlossaryEntry) -> str:
    pattern = re.escape(entry.source_term)
    if entry.whole_word:
        pattern = rf"\b{pattern}\b"
    if not entry.case_sensitive:
        pattern = f"(?i:{pattern})"
    return pattern


class GlossaryMatcher:
    """Protects glossary terms for one glossary.

    Longer terms win over shorter ones they overlap; equal-length terms are
    resolved in glossary order. Matching honours each entry's
    ``case_sensitive`` and ``whole_word`` flags.
    """

    def __init__(self, glossary: Optional[Glossary]) -> None:
        self._glossary = glossary
        self._entries: list[GlossaryEntry] = []
        self._regex: Optional[re.Pattern[str]] = None

        if glossary is None:
            return

        # Stable sort keeps list order for ties.
        self._entries = sorted(
            (e for e in glossary.entries if e.source_term),
            key=lambda e: len(e.source_term),
            reverse=True,
        )
        if not self._entries:
            return

        alternatives = [f"(?P<{_SKIP_GROUP}>{PLACEHOLDER_PATTERN.pattern})"]
        alternatives.extend(
            f"(?P<g{i}>{_entry_pattern(entry)})" for i, entry in enumerate(self._entries)
        )
        self._regex = re.compile("|".join(alternatives))

    @property
    def glossary(self) -> Optional[Glossary]:
        return self._glossary

    def is_active(self, source_lang: Optional[str], target_lang: str) -> bool:
        """Check whether the glossary applies to this translation direction."""
        return (
            self._glossary is not None
            and self._regex is not None
            and self._glossary.applies_to(source_lang, target_lang)
        )

    def protect(
        self,
        protected: ProtectedText,
        source_lang: Optional[str],
        target_lang: str,
    ) -> ProtectedText:
        """Replace glossary terms with placeholders.

        The input is returned untouched when the glossary's language pair
        does not match (source_lang, target_lang).

        Args:
            protected: Text already processed by TextProtector.
            source_lang: Source language code of the translation.
            target_lang: Target language code of the translation.

        Returns:
            ProtectedText with glossary placeholders appended to the table.
        """
        if self._regex is None or not self.is_active(source_lang, target_lang):
            return protected

        placeholders = list(protected.placeholders)
        index = protected.count(GLOSSARY_KIND)

        def _substitute(match: re.Match[str]) -> str:
            nonlocal index
            group = match.lastgroup
            if group == _SKIP_GROUP or group is None:
                return match.group(0)
            entry = self._entries[int(group[1:])]
            token = make_token(GLOSSARY_KIND, index)
            index += 1
            placeholders.append(Placeholder(GLOSSARY_KIND, token, entry.target_term))
            return token

        text = self._regex.sub(_substitute, protected.text)
        if len(placeholders) > len(protected.placeholders):
            logger.debug(
                "Glossary %r protected %d term(s)",
                self._glossary.name if self._glossary else "",
                len(placeholders) - len(protected.placeholders),
            )
        return ProtectedText(text, placeholders)
