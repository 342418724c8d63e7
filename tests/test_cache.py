# SPDX-License-Identifier: Apache-2.0
"""Tests for the segment cache."""

from __future__ import annotations

import threading
import unicodedata

from subtitle_translator.core.cache import SegmentCache, make_cache_key


class TestCacheKey:
    def test_language_is_lowercased(self) -> None:
        assert make_cache_key("Hello", "DE") == make_cache_key("Hello", "de")

    def test_nfc_equivalent_texts_share_key(self) -> None:
        decomposed = unicodedata.normalize("NFD", "Café")
        assert decomposed != "Café"
        assert make_cache_key(decomposed, "de") == make_cache_key("Café", "de")

    def test_different_texts_differ(self) -> None:
        assert make_cache_key("Hello", "de") != make_cache_key("Hello!", "de")

    def test_digest_is_sha256_hex(self) -> None:
        digest, lang = make_cache_key("Hello", "de")
        assert len(digest) == 64
        assert lang == "de"


class TestSegmentCache:
    """Tests for SegmentCache."""

    def test_miss_returns_none(self) -> None:
        assert SegmentCache().get("Hello", "de") is None

    def test_put_then_get(self) -> None:
        cache = SegmentCache()
        cache.put("Hello", "de", "Hallo")
        assert cache.get("Hello", "de") == "Hallo"
        assert cache.get("Hello", "fr") is None

    def test_overwrite_keeps_size(self) -> None:
        cache = SegmentCache()
        cache.put("Hello", "de", "Hallo")
        cache.put("Hello", "DE", "Servus")
        assert cache.size() == 1
        assert cache.get("Hello", "de") == "Servus"

    def test_contains_and_len(self) -> None:
        cache = SegmentCache()
        cache.put("Hello", "de", "Hallo")
        assert ("Hello", "de") in cache
        assert ("Hello", "fr") not in cache
        assert "Hello" not in cache
        assert len(cache) == 1

    def test_clear(self) -> None:
        cache = SegmentCache()
        cache.put("a", "de", "A")
        cache.put("b", "de", "B")
        cache.clear()
        assert cache.size() == 0
        assert cache.get("a", "de") is None

    def test_instances_do_not_share_state(self) -> None:
        first, second = SegmentCache(), SegmentCache()
        first.put("Hello", "de", "Hallo")
        assert second.size() == 0

    def test_concurrent_puts(self) -> None:
        cache = SegmentCache()

        def worker(offset: int) -> None:
            for i in range(100):
                cache.put(f"text-{offset}-{i}", "de", "x")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert cache.size() == 400
