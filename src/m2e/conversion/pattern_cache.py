#!/usr/bin/env python3
"""
Thread-safe LRU cache for compiled regex patterns.

Pattern builders in ``pattern_modules`` are decorated with ``@cached_pattern`` so a
pattern is compiled once per distinct argument set and then shared by every
conversion call.

Usage:
    from .pattern_cache import cached_pattern

    @cached_pattern
    def build_word_pattern(word: str) -> re.Pattern[str]:
        return re.compile(rf"\\b{re.escape(word)}\\b", re.IGNORECASE)
"""
from __future__ import annotations

import functools
import hashlib
import threading
from collections import OrderedDict
from typing import Callable, Pattern, TypeVar

F = TypeVar('F', bound=Callable[..., Pattern[str]])

_CACHE_SIZE = 256
_pattern_cache: OrderedDict[str, Pattern[str]] = OrderedDict()
_cache_lock = threading.Lock()
_cache_stats = {
    'hits': 0,
    'misses': 0,
    'evictions': 0,
    'size': 0,
}


def _generate_cache_key(func_name: str, args: tuple, kwargs: dict) -> str:
    """Build a deterministic key from the builder name and its arguments."""
    key_parts = [func_name]
    key_parts.extend(str(arg) for arg in args)
    key_parts.extend(f"{k}={v}" for k, v in sorted(kwargs.items()))

    key_string = "|".join(key_parts)
    if len(key_string) > 100:
        key_hash = hashlib.md5(key_string.encode()).hexdigest()[:16]
        return f"{func_name}_{key_hash}"

    return key_string


def _evict_lru_if_needed() -> None:
    """Drop least recently used patterns. Caller holds the lock."""
    while len(_pattern_cache) >= _CACHE_SIZE and _pattern_cache:
        _pattern_cache.popitem(last=False)
        _cache_stats['evictions'] += 1


def cached_pattern(func: F) -> F:
    """
    Decorator caching the compiled pattern a builder returns.

    Compilation happens outside the lock; if two threads race on the same key
    the first stored pattern wins and both callers get it.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Pattern[str]:
        cache_key = _generate_cache_key(func.__name__, args, kwargs)

        with _cache_lock:
            if cache_key in _pattern_cache:
                _cache_stats['hits'] += 1
                _pattern_cache.move_to_end(cache_key)
                return _pattern_cache[cache_key]

        pattern = func(*args, **kwargs)

        with _cache_lock:
            if cache_key in _pattern_cache:
                _cache_stats['hits'] += 1
                _pattern_cache.move_to_end(cache_key)
                return _pattern_cache[cache_key]

            _evict_lru_if_needed()
            _pattern_cache[cache_key] = pattern
            _cache_stats['misses'] += 1
            _cache_stats['size'] = len(_pattern_cache)

        return pattern

    return wrapper  # type: ignore


def get_cache_stats() -> dict[str, float]:
    """
    Get current cache statistics.

    Returns:
        Hits, misses, evictions, current size and hit/miss ratios
    """
    with _cache_lock:
        stats: dict[str, float] = dict(_cache_stats)
        total_requests = stats['hits'] + stats['misses']
        if total_requests > 0:
            stats['hit_ratio'] = stats['hits'] / total_requests
            stats['miss_ratio'] = stats['misses'] / total_requests
        else:
            stats['hit_ratio'] = 0.0
            stats['miss_ratio'] = 0.0
        return stats


def clear_cache() -> None:
    """Clear all cached patterns and reset statistics."""
    with _cache_lock:
        _pattern_cache.clear()
        _cache_stats.update({
            'hits': 0,
            'misses': 0,
            'evictions': 0,
            'size': 0,
        })


def configure_cache(cache_size: int = 256) -> None:
    """
    Configure cache settings.

    Args:
        cache_size: Maximum number of patterns to cache
    """
    global _CACHE_SIZE

    with _cache_lock:
        _CACHE_SIZE = max(1, cache_size)
        while len(_pattern_cache) > _CACHE_SIZE:
            _pattern_cache.popitem(last=False)
            _cache_stats['evictions'] += 1
        _cache_stats['size'] = len(_pattern_cache)
