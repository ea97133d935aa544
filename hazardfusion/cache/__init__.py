"""HazardFusion cache package."""

from hazardfusion.cache.backends import (
    CacheBackend,
    MemoryCache,
    RedisCache,
    create_cache_backend,
)
from hazardfusion.cache.invalidator import CacheInvalidator, CacheKeys

__all__ = [
    "CacheBackend",
    "MemoryCache",
    "RedisCache",
    "create_cache_backend",
    "CacheInvalidator",
    "CacheKeys",
]
