"""Cache service implementation.

Two process-local caches sit in front of the AI providers:

- ``ResponseCache``: expiring request/response memo for recipe and meal-plan
  generations, keyed by category and normalized prompt, with a per-entry TTL.
- ``ImageCache``: dish image URLs keyed by title and leading ingredients,
  fixed 24h TTL and a hard population limit.

Both are plain objects constructed once at startup and injected where needed.
Expiry is lazy (checked on read, swept on write); there are no timers.

Key derivation for the response cache is an approximation, not a hash: the
key is a fixed-length prefix of the base64 of the normalized prompt, so two
prompts that share that prefix share a cache slot. Structured inputs such as
meal-plan constraints are fingerprinted into a separate, untruncated key part.
"""

import base64
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from recipe_ai.utils.cache import Clock, ExpiringStore

logger = logging.getLogger(__name__)


class CacheCategory(str, Enum):
    """Request type discriminator; categories never share entries."""

    RECIPE = "recipe"
    MEALPLAN = "mealplan"


@dataclass(frozen=True)
class CacheEntry:
    data: Any
    created_at: float
    ttl: float


@dataclass(frozen=True)
class ImageCacheEntry:
    url: str
    created_at: float
    subject_label: str


@dataclass(frozen=True)
class ImageCacheStats:
    size: int
    max_size: int


def normalize_text(text: str) -> str:
    return text.strip().lower()


class ResponseCache:
    """Expiring cache for generation responses.

    Attributes:
        DEFAULT_TTL_SECONDS: TTL applied when ``set`` is called without one.
        DEFAULT_KEY_LENGTH: Length of the encoded prompt prefix used in keys.
    """

    DEFAULT_TTL_SECONDS = 5 * 60
    DEFAULT_KEY_LENGTH = 20

    def __init__(self, key_length: int = DEFAULT_KEY_LENGTH, clock: Clock = time.time) -> None:
        """Initialize the response cache.

        Args:
            key_length: Number of base64 characters of the normalized prompt
                kept in the key. Changing it changes which prompts collide.
            clock: Time source in seconds. Tests pass a fake clock.
        """
        if key_length < 1:
            raise ValueError("key_length must be positive")
        self._key_length = key_length
        self._store: ExpiringStore[CacheEntry] = ExpiringStore(
            lambda entry, now: now - entry.created_at > entry.ttl, clock
        )

    def make_key(
        self,
        request_text: str,
        category: CacheCategory,
        variant: str | None = None,
    ) -> str:
        """Build the cache key for a request.

        ``variant`` fingerprints structured inputs that travel with the
        prompt (meal-plan constraints). It is kept whole, ahead of the
        truncated prompt, so requests that differ only in it never share a slot.

        Example:
            >>> ResponseCache().make_key("  Chicken Soup ", CacheCategory.RECIPE)
            'recipe:Y2hpY2tlbiBzb3Vw'
            >>> ResponseCache().make_key("Chicken Soup", CacheCategory.MEALPLAN, "3f2a")
            'mealplan:3f2a:Y2hpY2tlbiBzb3Vw'
        """
        encoded = base64.b64encode(normalize_text(request_text).encode("utf-8")).decode("ascii")
        prefix = CacheCategory(category).value
        if variant:
            prefix = f"{prefix}:{variant}"
        return f"{prefix}:{encoded[: self._key_length]}"

    def set(
        self,
        request_text: str,
        value: Any,
        category: CacheCategory,
        ttl_seconds: float | None = None,
        variant: str | None = None,
    ) -> None:
        """Store a response and sweep expired entries.

        Args:
            request_text: The raw prompt; normalized before keying.
            value: The response to cache. Stored by reference.
            category: Request type discriminator.
            ttl_seconds: Time-to-live. Uses ``DEFAULT_TTL_SECONDS`` if not given.
            variant: Optional fingerprint of structured request inputs.
        """
        key = self.make_key(request_text, category, variant)
        ttl = ttl_seconds if ttl_seconds is not None else self.DEFAULT_TTL_SECONDS
        with self._store.lock:
            self._store.put(key, CacheEntry(data=value, created_at=self._store.now(), ttl=ttl))
            swept = self._store.sweep()
        if swept:
            logger.debug(f"[CACHE] Swept {swept} expired entries")

    def get(
        self,
        request_text: str,
        category: CacheCategory,
        variant: str | None = None,
    ) -> Any | None:
        """Return the cached response, or None if absent or expired.

        The stored object is returned as-is; callers must not mutate it.
        """
        key = self.make_key(request_text, category, variant)
        with self._store.lock:
            entry = self._store.get(key)
        if entry is None:
            return None
        logger.info(f"[CACHE] Hit for {CacheCategory(category).value}: {request_text[:50]}")
        return entry.data

    def clear(self) -> None:
        with self._store.lock:
            self._store.clear()

    def size(self) -> int:
        with self._store.lock:
            return len(self._store)


class ImageCache:
    """Bounded cache of resolved dish image URLs.

    Population never exceeds ``max_entries`` once ``cache_image`` returns.
    When full, expired entries go first, then the oldest live entries, with
    ``EVICTION_HEADROOM`` extra slots freed so a cache at steady-state
    capacity does not evict on every insert.
    """

    CACHE_DURATION_SECONDS = 24 * 60 * 60
    MAX_ENTRIES = 100
    EVICTION_HEADROOM = 10
    KEY_TERMS = 3

    def __init__(
        self,
        max_entries: int = MAX_ENTRIES,
        ttl_seconds: float = CACHE_DURATION_SECONDS,
        clock: Clock = time.time,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._ttl = ttl_seconds
        self._store: ExpiringStore[ImageCacheEntry] = ExpiringStore(
            lambda entry, now: now - entry.created_at > self._ttl, clock
        )

    @classmethod
    def build_key(cls, subject_label: str, supporting_terms: Sequence[str]) -> str:
        """Key from the title plus the first few ingredients.

        Example:
            >>> ImageCache.build_key(" Pad Thai ", ["Rice Noodles", "Egg", "Tofu", "Lime"])
            'pad thai-rice noodles,egg,tofu'
        """
        terms = ",".join(supporting_terms[: cls.KEY_TERMS])
        return f"{normalize_text(subject_label)}-{normalize_text(terms)}"

    def get_cached_image(self, subject_label: str, supporting_terms: Sequence[str]) -> str | None:
        key = self.build_key(subject_label, supporting_terms)
        with self._store.lock:
            entry = self._store.get(key)
        if entry is None:
            return None
        logger.info(f"[IMAGE-CACHE] Using cached image for: {subject_label}")
        return entry.url

    def cache_image(self, subject_label: str, supporting_terms: Sequence[str], url: str) -> None:
        key = self.build_key(subject_label, supporting_terms)
        with self._store.lock:
            if key not in self._store and len(self._store) >= self._max_entries:
                self._evict()
            self._store.put(
                key,
                ImageCacheEntry(url=url, created_at=self._store.now(), subject_label=subject_label),
            )
        logger.info(f"[IMAGE-CACHE] Cached image for: {subject_label}")

    def _evict(self) -> None:
        """Free space when full. Caller holds the store lock."""
        expired = self._store.sweep()
        evicted = 0
        if len(self._store) >= self._max_entries:
            excess = len(self._store) - self._max_entries + self.EVICTION_HEADROOM
            for key in self._store.oldest(excess):
                self._store.delete(key)
                evicted += 1
        logger.info(f"[IMAGE-CACHE] Eviction: {expired} expired, {evicted} oldest removed")

    def clear_cache(self) -> None:
        with self._store.lock:
            self._store.clear()
        logger.info("[IMAGE-CACHE] Cleared")

    def get_cache_stats(self) -> ImageCacheStats:
        with self._store.lock:
            return ImageCacheStats(size=len(self._store), max_size=self._max_entries)
