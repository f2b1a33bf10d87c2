"""In-memory response and image caches."""

from .service import (
    CacheCategory,
    CacheEntry,
    ImageCache,
    ImageCacheEntry,
    ImageCacheStats,
    ResponseCache,
)

__all__ = [
    "CacheCategory",
    "CacheEntry",
    "ImageCache",
    "ImageCacheEntry",
    "ImageCacheStats",
    "ResponseCache",
]
