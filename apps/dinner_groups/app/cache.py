"""In-memory LRU cache with TTL expiration.

Process-level cache for provider responses. Survives across requests in the
same uvicorn worker, so every worker fetches its own copy.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

from .config import settings

logger = logging.getLogger(__name__)


class TTLCache:
    """TTL-aware LRU cache, safe to share between threadpool workers."""

    def __init__(self, max_size: int = 100, ttl_seconds: float = 86400) -> None:
        self._cache: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if time.monotonic() >= expires_at:
                self._cache.pop(key, None)
                return None
            self._cache.move_to_end(key)
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = time.monotonic() + (self._ttl if ttl is None else ttl)
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            self._cache[key] = (expires_at, value)
            if len(self._cache) > self._max_size:
                self._cache.popitem(last=False)

    def delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


def cached(
    cache: TTLCache,
    key: str,
    get_fresh_value: Callable[[], Any],
    ttl: Optional[float] = None,
) -> Any:
    """Return the cached value for ``key`` or compute, store and return a fresh one.

    ``None`` is never stored, and exceptions from ``get_fresh_value`` propagate
    without touching the cache.
    """
    value = cache.get(key)
    if value is not None:
        return value

    logger.debug("Cache miss for %s", key)
    value = get_fresh_value()
    if value is not None:
        cache.set(key, value, ttl=ttl)
    return value


restaurant_cache = TTLCache(
    max_size=settings.restaurant_cache_size,
    ttl_seconds=settings.restaurant_cache_ttl,
)
