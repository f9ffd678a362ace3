"""
Response Cache - In-memory LRU caching of generated answers with TTL support.

Only low-temperature (near-deterministic) requests are cached: caching
higher-temperature output would hide intended randomness from the user.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from .models import CacheEntry, ChatCompletion, ChatMessage

if TYPE_CHECKING:
    from .contracts import AnswerCache, ChatProvider

logger = logging.getLogger(__name__)

__all__ = ["ResponseCache", "CachingChatProvider", "DEFAULT_TEMPERATURE"]

DEFAULT_TEMPERATURE = 0.7


class ResponseCache:
    """
    In-memory answer cache with TTL.

    Features:
    - Oldest-inserted eviction at capacity
    - Hits move the entry to the newest position (LRU)
    - Lazy expiry: stale entries are removed when read
    - Safe for concurrent use from many in-flight requests
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl_seconds: float = 3600.0,
        max_cacheable_temperature: float = 0.2,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize cache.

        Args:
            max_size: Maximum number of cached entries
            ttl_seconds: Entry time-to-live in seconds
            max_cacheable_temperature: Highest temperature eligible for caching
            clock: Time source in seconds
        """
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._max_temperature = max_cacheable_temperature
        self._clock = clock
        self._hits = 0
        self._misses = 0

    def is_cacheable(self, temperature: float) -> bool:
        """Whether requests at this temperature may be cached."""
        return temperature <= self._max_temperature

    async def get(
        self,
        messages: Sequence[ChatMessage],
        model: str,
        temperature: float,
    ) -> str | None:
        """Get cached answer if present and not expired."""
        if not self.is_cacheable(temperature):
            return None

        key = self.generate_key(messages, model, temperature)
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            age = self._clock() - entry.created_at
            if age > self._ttl:
                del self._cache[key]
                self._misses += 1
                logger.debug("Cache entry expired: %s", key[:16])
                return None

            self._cache.move_to_end(key)
            self._hits += 1

        logger.debug("Cache hit: %s (age: %ds)", key[:16], age)
        return entry.response

    async def set(
        self,
        messages: Sequence[ChatMessage],
        model: str,
        temperature: float,
        response: str,
    ) -> None:
        """Cache an answer. Ineligible temperatures are ignored."""
        if not self.is_cacheable(temperature):
            return

        key = self.generate_key(messages, model, temperature)
        async with self._lock:
            if key in self._cache:
                del self._cache[key]
            elif len(self._cache) >= self._max_size:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug("Evicted oldest cache entry: %s", evicted[:16])

            self._cache[key] = CacheEntry(response=response, created_at=self._clock())
            size = len(self._cache)

        logger.debug("Cached response: %s (size: %d)", key[:16], size)

    async def clear(self) -> None:
        """Clear all cache entries."""
        async with self._lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info("Cleared %d cache entries", count)

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        return {
            "size": len(self._cache),
            "max_size": self._max_size,
            "ttl_seconds": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
        }

    def __len__(self) -> int:
        return len(self._cache)

    @staticmethod
    def generate_key(
        messages: Sequence[ChatMessage],
        model: str,
        temperature: float,
    ) -> str:
        """Generate cache key from conversation window, model and temperature."""
        payload = {
            "messages": [m.model_dump() for m in messages],
            "model": model,
            "temperature": temperature,
        }
        key_string = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(key_string.encode()).hexdigest()


class CachingChatProvider:
    """
    Chat provider wrapper that serves eligible requests from the cache.

    Example:
        >>> provider = CachingChatProvider(llm, ResponseCache())
        >>> completion = await provider.chat(messages, "chat-model", temperature=0.0)
    """

    def __init__(self, provider: ChatProvider, cache: AnswerCache) -> None:
        self._provider = provider
        self._cache = cache

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        model: str,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> ChatCompletion:
        """Generate an answer, consulting the cache for low-temperature requests."""
        should_cache = self._cache.is_cacheable(temperature)

        if should_cache:
            cached = await self._cache.get(messages, model, temperature)
            if cached is not None:
                return ChatCompletion(
                    content=cached,
                    model=model,
                    finish_reason="cache_hit",
                    cached=True,
                )

        content = await self._provider.chat(messages, model, temperature)

        if should_cache:
            await self._cache.set(messages, model, temperature, content)

        return ChatCompletion(content=content, model=model)
