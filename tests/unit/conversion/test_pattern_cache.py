"""Tests for the compiled pattern LRU cache."""
import re

import pytest

from m2e.conversion import pattern_cache
from m2e.conversion.pattern_cache import cached_pattern, clear_cache, configure_cache, get_cache_stats


@pytest.fixture
def fresh_cache():
    clear_cache()
    yield
    configure_cache(256)
    clear_cache()


@cached_pattern
def build_test_word_pattern(word):
    return re.compile(rf"\b{re.escape(word)}\b")


class TestCachedPattern:
    """Builders compile once per argument set."""

    def test_same_arguments_share_a_pattern(self, fresh_cache):
        first = build_test_word_pattern("color")
        second = build_test_word_pattern("color")
        assert first is second
        stats = get_cache_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["size"] == 1

    def test_different_arguments(self, fresh_cache):
        assert build_test_word_pattern("color") is not build_test_word_pattern("gray")
        assert get_cache_stats()["misses"] == 2

    def test_ratios(self, fresh_cache):
        assert get_cache_stats()["hit_ratio"] == 0.0
        build_test_word_pattern("color")
        build_test_word_pattern("color")
        build_test_word_pattern("color")
        build_test_word_pattern("gray")
        stats = get_cache_stats()
        assert stats["hit_ratio"] == pytest.approx(0.5)
        assert stats["miss_ratio"] == pytest.approx(0.5)

    def test_long_keys_are_hashed(self):
        key = pattern_cache._generate_cache_key("build", ("x" * 200,), {})
        assert key.startswith("build_")
        assert len(key) < 40

    def test_wrapped_name(self):
        assert build_test_word_pattern.__name__ == "build_test_word_pattern"


class TestEviction:
    """Least recently used patterns are dropped first."""

    def test_lru_eviction(self, fresh_cache):
        configure_cache(2)
        a = build_test_word_pattern("a")
        build_test_word_pattern("b")
        build_test_word_pattern("a")
        build_test_word_pattern("c")
        stats = get_cache_stats()
        assert stats["evictions"] == 1
        assert build_test_word_pattern("a") is a
        assert build_test_word_pattern("b") is not None
        assert get_cache_stats()["evictions"] == 2

    def test_shrinking_evicts(self, fresh_cache):
        for word in ("a", "b", "c"):
            build_test_word_pattern(word)
        configure_cache(1)
        stats = get_cache_stats()
        assert stats["size"] == 1
        assert stats["evictions"] == 2

    def test_clear_resets_stats(self, fresh_cache):
        build_test_word_pattern("a")
        clear_cache()
        assert get_cache_stats()["size"] == 0
        assert get_cache_stats()["misses"] == 0
