"""Caching layer - Cache implementations for reducing API calls."""

from trackspot.application.cache.base_cache import BaseCache, CacheEntry, InMemoryCache
from trackspot.application.cache.response_cache import ResponseCache

__all__ = [
    "BaseCache",
    "CacheEntry",
    "InMemoryCache",
    "ResponseCache",
]
