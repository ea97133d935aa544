"""Key/value cache backends used by the read-side of HazardFusion.

Two implementations share one interface: an in-process expiring map for single
node deployments and tests, and a Redis backend for shared caches. Values are
JSON-compatible Python objects.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

from config.settings import FusionConfig

logger = logging.getLogger(__name__)


class CacheBackend(ABC):
    """Minimal cache interface: get, set with TTL, delete, delete by prefix."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None when absent or expired."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a value that expires after ``ttl_seconds``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""

    @abstractmethod
    def delete_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``; returns the count removed."""


class MemoryCache(CacheBackend):
    """Thread-safe in-process cache with per-key expiry.

    Expired entries are dropped lazily on access.

    Args:
        clock: Monotonic time source in seconds; injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for _, expires_at in self._entries.values() if expires_at > now)


class RedisCache(CacheBackend):
    """Redis-backed cache storing JSON-encoded values.

    Args:
        url: Redis connection URL; used only when ``client`` is not given.
        client: Pre-built redis-py client (or a compatible test double).
    """

    def __init__(self, url: str = "", client: Any = None) -> None:
        if client is None:
            import redis  # type: ignore[import]

            client = redis.Redis.from_url(url, decode_responses=True)
            logger.info("Redis cache connected to %s", url)
        self._client = client

    def get(self, key: str) -> Optional[Any]:
        raw = self._client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Dropping undecodable cache entry %s", key)
            self._client.delete(key)
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._client.setex(key, int(ttl_seconds), json.dumps(value, default=str))

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def delete_prefix(self, prefix: str) -> int:
        keys = list(self._client.scan_iter(match=f"{prefix}*"))
        if not keys:
            return 0
        return int(self._client.delete(*keys))


def create_cache_backend(config: Optional[FusionConfig] = None) -> CacheBackend:
    """Build the cache backend named by ``config.cache_backend``."""
    config = config or FusionConfig()
    if config.cache_backend == "redis":
        return RedisCache(url=config.redis_url)
    return MemoryCache()
