"""
Cache-aside accessor.

Reads prefer the cache and fall back to a loader against the backing store;
the loaded value is written back only after the store read succeeded. Writes
invalidate by deleting the key. The cache is best-effort: any cache failure
is logged and treated as a miss (on read) or ignored (on populate and
invalidate), so a cache outage never fails a request.
"""

from typing import Any, Awaitable, Callable, Optional, TypeVar, TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from shared.logging import get_logger
from shared.errors import DependencyError

from ..ports import CacheStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


T = TypeVar("T")

DEFAULT_TTL_SECONDS = 600

# Failures a cache store may surface; all of them degrade to a miss.
CACHE_FAILURES = (DependencyError, OSError)


class CacheAsideAccessor:
    """Coordinates a cache store with loaders against the backing store."""

    def __init__(
        self,
        cache: CacheStore,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.metrics = metrics
        self.logger = get_logger("catalog.cache.accessor")

    async def read_through(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        adapter: TypeAdapter,
    ) -> T:
        """Return the cached value for ``key`` or load, populate and return it.

        Exceptions raised by ``loader`` (``NotFoundError`` included) propagate
        unchanged and leave the cache untouched.
        """
        cached = await self._lookup(key, adapter)
        if cached is not None:
            return cached

        value = await loader()
        await self.populate(key, value, adapter)
        return value

    async def populate(self, key: str, value: Any, adapter: TypeAdapter) -> bool:
        """Serialize ``value`` and store it under ``key`` with the fixed TTL."""
        payload = adapter.dump_json(value).decode("utf-8")
        try:
            await self.cache.set(key, payload, self.ttl_seconds)
        except CACHE_FAILURES as e:
            self.logger.error("Error populating cache", key=key, error=str(e))
            return False

        self.logger.info("Cache set successfully", key=key, ttl=self.ttl_seconds)
        return True

    async def invalidate(self, key: str) -> bool:
        """Delete ``key`` so the next read goes to the backing store."""
        try:
            await self.cache.delete(key)
        except CACHE_FAILURES as e:
            self.logger.error("Error invalidating cache", key=key, error=str(e))
            return False

        self.logger.info("Cache invalidated", key=key)
        return True

    async def _lookup(self, key: str, adapter: TypeAdapter) -> Optional[Any]:
        try:
            raw = await self.cache.get(key)
        except CACHE_FAILURES as e:
            self.logger.warning("Cache unavailable, treating as miss", key=key, error=str(e))
            self._record("error")
            return None

        # An empty string is a tombstone left by older invalidations.
        if not raw:
            self.logger.info("Cache miss for key", key=key)
            self._record("miss")
            return None

        try:
            value = adapter.validate_json(raw)
        except PydanticValidationError as e:
            self.logger.warning("Discarding undecodable cache entry", key=key, error=str(e))
            self._record("error")
            return None

        self.logger.info("Cache hit for key", key=key)
        self._record("hit")
        return value

    def _record(self, result: str) -> None:
        if self.metrics:
            self.metrics.record_cache_result(result)
