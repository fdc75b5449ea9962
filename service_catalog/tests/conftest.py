"""
Shared fixtures for Catalog service tests.
"""

from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

import pytest

from shared.errors import DependencyError


class FakeCache:
    """In-memory cache store recording every call."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.calls: List[Tuple[str, str]] = []
        self.fail_get: Optional[Exception] = None
        self.fail_set: Optional[Exception] = None
        self.fail_delete: Optional[Exception] = None

    async def get(self, key: str) -> Optional[str]:
        self.calls.append(("get", key))
        if self.fail_get:
            raise self.fail_get
        return self.data.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.calls.append(("set", key))
        if self.fail_set:
            raise self.fail_set
        self.data[key] = value
        self.ttls[key] = ttl_seconds

    async def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        if self.fail_delete:
            raise self.fail_delete
        self.data.pop(key, None)
        self.ttls.pop(key, None)

    async def health_check(self) -> bool:
        return self.fail_get is None

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)


class FakePublisher:
    """Image-task publisher that records payloads or fails on demand."""

    def __init__(self):
        self.published: List[Tuple[Dict[str, Any], Optional[str]]] = []
        self.fail: bool = False

    async def publish(self, payload: Dict[str, Any], key: Optional[str] = None) -> None:
        if self.fail:
            raise DependencyError("kafka", "broker unavailable")
        self.published.append((payload, key))


@pytest.fixture
def fake_cache():
    """In-memory cache store."""
    return FakeCache()


@pytest.fixture
def fake_publisher():
    """Recording image-task publisher."""
    return FakePublisher()


@pytest.fixture
def mock_store():
    """Product store whose query methods are AsyncMocks."""
    store = AsyncMock()
    store.query_row.return_value = None
    store.query.return_value = []
    store.execute.return_value = 0
    return store
