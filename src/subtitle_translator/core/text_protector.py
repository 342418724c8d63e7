# SPDX-License-Identifier: Apache-2.0
"""Placeholder protection for subtitle markup.

Formatting tags, line breaks and music markers are swapped for opaque
``⟦KIND_n⟧`` tokens before text is sent to a translation backend and swapped
back afterwards. Each occurrence gets its own token, so restoration does not
depend on where the backend moves it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

logger = logging.getLogger(__name__)

PLACEHOLDER_OPEN = "⟦"
PLACEHOLDER_CLOSE = "⟧"

# Matches any placeholder token already present in a text.
PLACEHOLDER_PATTERN = re.compile(f"{PLACEHOLDER_OPEN}[A-Z_]+(?:_\\d+)?{PLACEHOLDER_CLOSE}")

# Any token; a line-break token also takes the spaces and tabs around it.
_TOKEN_REGEX = re.compile(
    f"(?P<nl>[ \\t]*(?P<nl_token>{PLACEHOLDER_OPEN}NL(?:_\\d+)?{PLACEHOLDER_CLOSE})[ \\t]*)"
    f"|(?P<token>{PLACEHOLDER_PATTERN.pattern})"
)

# (kind, pattern) in priority order; first alternative wins at a position.
_SPAN_PATTERNS: list[tuple[str, str]] = [
    # Token-shaped text already in the source is carried through verbatim.
    ("LITERAL", PLACEHOLDER_PATTERN.pattern),
    ("ITALIC_O", r"<i>"),
    ("ITALIC_C", r"</i>"),
    ("BOLD_O", r"<b>"),
    ("BOLD_C", r"</b>"),
    ("UNDERLINE_O", r"<u>"),
    ("UNDERLINE_C", r"</u>"),
    ("FONT_O", r"<font\b[^>]*>"),
    ("FONT_C", r"</font>"),
    ("ASS", r"\{\\[^}]*\}"),
    ("MUSIC", r"[♪♫]"),
    ("NL", r"[ \t]*\r?\n[ \t]*"),
]

_SPAN_REGEX = re.compile(
    "|".join(f"(?P<{kind}>{pattern})" for kind, pattern in _SPAN_PATTERNS),
    re.IGNORECASE,
)


def make_token(kind: str, index: int | None = None) -> str:
    """Build a placeholder token.

    Args:
        kind: Placeholder kind, e.g. "ITALIC_O".
        index: Occurrence index, or None for singleton kinds.

    Returns:
        Token such as "⟦ITALIC_O_0⟧".
    """
    if index is None:
        return f"{PLACEHOLDER_OPEN}{kind}{PLACEHOLDER_CLOSE}"
    return f"{PLACEHOLDER_OPEN}{kind}_{index}{PLACEHOLDER_CLOSE}"


@dataclass(frozen=True)
class Placeholder:
    """One protected span.

    Attributes:
        kind: Placeholder kind ("ITALIC_O", "NL", "GLOSS", ...).
        token: Token substituted into the text.
        replacement: Text written back in place of the token.
    """

    kind: str
    token: str
    replacement: str


@dataclass
class ProtectedText:
    """Text with protected spans replaced by placeholder tokens."""

    text: str
    placeholders: list[Placeholder] = field(default_factory=list)

    def count(self, kind: str) -> int:
        """Number of placeholders of the given kind."""
        return sum(1 for p in self.placeholders if p.kind == kind)


class TextProtector:
    """Reversible placeholder codec for subtitle text."""

    def protect(self, text: str) -> ProtectedText:
        """Replace protected spans with indexed placeholder tokens.

        Text without protected spans is returned unchanged.

        Args:
            text: Source subtitle text.

        Returns:
            ProtectedText holding the substituted text and restore table.
        """
        placeholders: list[Placeholder] = []
        counters: dict[str, int] = {}

        def _substitute(match: re.Match[str]) -> str:
            kind = match.lastgroup
            if kind is None:
                return match.group(0)
            index = counters.get(kind, 0)
            counters[kind] = index + 1
            token = make_token(kind, index)
            placeholders.append(Placeholder(kind, token, match.group(0)))
            return token

        protected = _SPAN_REGEX.sub(_substitute, text)
        return ProtectedText(protected, placeholders)

    def restore(self, text: str, placeholders: Iterable[Placeholder]) -> str:
        """Write protected spans back into translated text.

        Tokens are replaced in a single pass, so restored spans are never
        scanned again. Missing tokens are logged and skipped; duplicated
        tokens beyond the first are left verbatim.

        Args:
            text: Backend output containing placeholder tokens.
            placeholders: Restore table from protect() or the glossary matcher.

        Returns:
            Restored text.
        """
        table = {p.token: p for p in placeholders}
        if not table:
            return text
        restored: set[str] = set()

        def _substitute(match: re.Match[str]) -> str:
            token = match.group("nl_token") or match.group("token")
            placeholder = table.get(token)
            if placeholder is None:
                return match.group(0)
            if token in restored:
                logger.warning(
                    "Placeholder %s duplicated in translation; extra copies kept", token
                )
                return match.group(0)
            restored.add(token)
            return placeholder.replacement

        result = _TOKEN_REGEX.sub(_substitute, text)
        for token, placeholder in table.items():
            if token not in restored:
                logger.warning(
                    "Placeholder %s missing from translation; span %r lost",
                    token,
                    placeholder.replacement,
                )
        return result
