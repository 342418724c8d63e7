# SPDX-License-Identifier: Apache-2.0
"""In-memory cache of translated segments."""

from __future__ import annotations

import hashlib
import threading
import unicodedata
from typing import Optional

CacheKey = tuple[str, str]


def make_cache_key(text: str, target_lang: str) -> CacheKey:
    """Derive the cache key for a segment.

    The text is NFC-normalised and hashed; the language code is lower-cased.

    Args:
        text: Source segment text.
        target_lang: Target language code.

    Returns:
        (text digest, target language) tuple.
    """
    normalized = unicodedata.normalize("NFC", text)
    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()
    return digest, target_lang.lower()


class SegmentCache:
    """Memoizes translations by (source text, target language).

    The cache is unbounded and lives as long as its owner. It is not keyed by
    backend: switching target language or clearing the cache are the only
    ways to force a re-translation.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, str] = {}
        self._lock = threading.Lock()

    def get(self, text: str, target_lang: str) -> Optional[str]:
        """Return the cached translation, or None on a miss."""
        key = make_cache_key(text, target_lang)
        with self._lock:
            return self._entries.get(key)

    def put(self, text: str, target_lang: str, translated: str) -> None:
        """Store a translation."""
        key = make_cache_key(text, target_lang)
        with self._lock:
            self._entries[key] = translated

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:
            return False
        text, target_lang = item
        return self.get(text, target_lang) is not None
