"""
Unit tests for the Redis cache store.
"""

from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from service_catalog.app.cache.redis_cache import RedisCache
from shared.errors import DependencyError


@pytest.fixture
def redis_client():
    """Mock async Redis client."""
    return AsyncMock()


@pytest.fixture
def cache(redis_client):
    """RedisCache over the mock client."""
    return RedisCache("redis://localhost:6379/0", client=redis_client)


class TestRedisCache:
    """Test cases for RedisCache."""

    @pytest.mark.asyncio
    async def test_get_returns_value(self, cache, redis_client):
        """Test a stored value is returned as-is."""
        redis_client.get.return_value = '{"id": 1}'

        assert await cache.get("product:1") == '{"id": 1}'
        redis_client.get.assert_awaited_once_with("product:1")

    @pytest.mark.asyncio
    async def test_get_absent_returns_none(self, cache, redis_client):
        """Test an absent key is None."""
        redis_client.get.return_value = None

        assert await cache.get("product:2") is None

    @pytest.mark.asyncio
    async def test_set_uses_setex(self, cache, redis_client):
        """Test values are written with an expiry."""
        await cache.set("product:1", "{}", 600)

        redis_client.setex.assert_awaited_once_with("product:1", 600, "{}")

    @pytest.mark.asyncio
    async def test_delete(self, cache, redis_client):
        """Test delete removes the key."""
        await cache.delete("product:1")

        redis_client.delete.assert_awaited_once_with("product:1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation,args", [
        ("get", ("product:1",)),
        ("setex", None),
        ("delete", ("product:1",)),
    ])
    async def test_redis_errors_become_dependency_errors(self, cache, redis_client, operation, args):
        """Test client failures are wrapped."""
        getattr(redis_client, operation).side_effect = RedisConnectionError("Connection refused")

        with pytest.raises(DependencyError) as exc_info:
            if operation == "setex":
                await cache.set("product:1", "{}", 600)
            else:
                await getattr(cache, operation)(*args)

        assert exc_info.value.dependency == "redis"
        assert exc_info.value.details == {"key": "product:1"}

    @pytest.mark.asyncio
    async def test_invalid_utf8_value_becomes_dependency_error(self, cache, redis_client):
        """Test bytes that fail to decode are reported as a cache failure."""
        redis_client.get.side_effect = UnicodeDecodeError("utf-8", b"\xff\xfe garbage", 0, 1, "invalid start byte")

        with pytest.raises(DependencyError) as exc_info:
            await cache.get("product:5")

        assert exc_info.value.dependency == "redis"
        assert exc_info.value.details == {"key": "product:5"}

    @pytest.mark.asyncio
    async def test_not_started(self):
        """Test use before start fails as a dependency error."""
        cache = RedisCache("redis://localhost:6379/0")

        with pytest.raises(DependencyError):
            await cache.get("product:1")

    @pytest.mark.asyncio
    async def test_health_check(self, cache, redis_client):
        """Test health check reflects ping."""
        assert await cache.health_check() is True

        redis_client.ping.side_effect = RedisConnectionError("down")
        assert await cache.health_check() is False

    @pytest.mark.asyncio
    async def test_health_check_not_started(self):
        """Test an unstarted cache is unhealthy."""
        assert await RedisCache("redis://localhost:6379/0").health_check() is False

    @pytest.mark.asyncio
    async def test_start_failure(self):
        """Test an unreachable server fails start."""
        client = AsyncMock()
        client.ping.side_effect = RedisConnectionError("Connection refused")

        with patch("service_catalog.app.cache.redis_cache.redis.from_url", return_value=client):
            cache = RedisCache("redis://localhost:6379/0")
            with pytest.raises(DependencyError):
                await cache.start()

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        """Test the client is created, pinged and closed."""
        client = AsyncMock()

        with patch("service_catalog.app.cache.redis_cache.redis.from_url", return_value=client) as from_url:
            cache = RedisCache("redis://cache:6379/1")
            await cache.start()
            await cache.stop()

        assert from_url.call_args.args == ("redis://cache:6379/1",)
        assert from_url.call_args.kwargs["decode_responses"] is True
        client.ping.assert_awaited_once()
        client.aclose.assert_awaited_once()
