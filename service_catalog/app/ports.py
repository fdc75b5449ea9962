"""
Collaborator contracts consumed by the Catalog service.

The concrete adapters live in ``persistence``, ``cache`` and ``kafka``; tests
substitute in-memory fakes that satisfy the same protocols.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol


class ProductStore(Protocol):
    """Relational store with ``$n`` positional parameters."""

    async def query_row(self, sql: str, *args: Any) -> Optional[Mapping[str, Any]]:
        ...

    async def query(self, sql: str, *args: Any) -> List[Mapping[str, Any]]:
        ...

    async def execute(self, sql: str, *args: Any) -> int:
        """Run a statement and return the number of affected rows."""
        ...


class CacheStore(Protocol):
    """Key/value cache with per-key TTL. ``get`` returns None on a miss."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class ImageTaskPublisher(Protocol):
    """At-least-once channel for image-processing tasks."""

    async def publish(self, payload: Dict[str, Any], key: Optional[str] = None) -> None:
        ...
