"""
Factory for creating cache instances.
"""

import logging
from enum import Enum

from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache

logger = logging.getLogger(__name__)


class CacheBackend(Enum):
    """Available cache backends"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class CacheFactory:
    """
    Simple factory for creating cache instances.

    The application owns the instance it gets back (kept on app.state),
    so no instance is cached here.
    """

    @classmethod
    def create(cls, backend: CacheBackend, redis_url: str = "redis://localhost:6379/0") -> CacheStrategy:
        """
        Create a cache instance.

        Args:
            backend: Type of cache backend (from enum)
            redis_url: Connection URL, used by the Redis backend only

        Returns:
            CacheStrategy instance
        """
        if backend == CacheBackend.REDIS:
            import redis.asyncio as redis

            # Connection is lazy; an unreachable server shows up as cache misses
            redis_client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            logger.info("Redis cache initialized (%s)", redis_url)
            return RedisCache(redis_client)

        if backend == CacheBackend.MEMORY:
            logger.info("In-memory cache initialized")
            return InMemoryCache()

        if backend == CacheBackend.NULL:
            logger.info("Null cache initialized")
            return NullCache()

        raise ValueError(f"Unknown cache backend: {backend}")
