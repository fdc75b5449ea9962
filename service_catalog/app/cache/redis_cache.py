"""
Redis cache store for the Catalog service.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.logging import get_logger
from shared.errors import DependencyError


class RedisCache:
    """Thin async wrapper over a pooled Redis client.

    Every Redis or socket failure is raised as ``DependencyError("redis")``;
    deciding whether such a failure is fatal belongs to the caller.
    """

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.logger = get_logger("catalog.cache.redis")
        self.redis: Optional[redis.Redis] = client

    async def start(self):
        """Start the Redis cache."""
        try:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )

            await self.redis.ping()

            self.logger.info("Redis cache started")

        except (RedisError, OSError) as e:
            self.logger.error("Failed to start Redis cache", error=str(e))
            raise DependencyError("redis", str(e)) from e

    async def stop(self):
        """Stop the Redis cache."""
        if self.redis:
            await self.redis.aclose()
            self.logger.info("Redis cache stopped")

    async def get(self, key: str) -> Optional[str]:
        """Return the cached value, or None when the key is absent."""
        try:
            value = await self._client().get(key)
        except (RedisError, OSError) as e:
            raise DependencyError("redis", str(e), details={"key": key}) from e
        except UnicodeDecodeError as e:
            self.logger.warning("Undecodable cache entry", key=key, error=str(e))
            raise DependencyError("redis", "undecodable value", details={"key": key}) from e

        if value is None:
            self.logger.debug("Cache miss for key", key=key)
        else:
            self.logger.debug("Cache hit for key", key=key)
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""
        try:
            await self._client().setex(key, ttl_seconds, value)
        except (RedisError, OSError) as e:
            raise DependencyError("redis", str(e), details={"key": key}) from e

        self.logger.debug("Cache set", key=key, ttl=ttl_seconds)

    async def delete(self, key: str) -> None:
        """Remove ``key``; deleting an absent key is not an error."""
        try:
            await self._client().delete(key)
        except (RedisError, OSError) as e:
            raise DependencyError("redis", str(e), details={"key": key}) from e

        self.logger.debug("Cache delete", key=key)

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await self._client().ping()
            return True
        except (RedisError, OSError, DependencyError):
            return False

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise DependencyError("redis", "cache not started")
        return self.redis
