"""
PostgreSQL persistence layer for the Catalog service.
"""

from typing import Any, List, Mapping, Optional

import asyncpg

from shared.logging import get_logger
from shared.errors import DependencyError, ValidationError


# Errors that mean the store itself failed.
STORE_FAILURES = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

# Raised for arguments the column type cannot hold, client or server side.
INPUT_FAILURES = (asyncpg.DataError,)


class PostgreSQLPersistence:
    """Pooled asyncpg access with ``$n`` positional parameters."""

    def __init__(
        self,
        dsn: str,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 30,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.logger = get_logger("catalog.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout
            )

            self.logger.info("PostgreSQL persistence started")

        except STORE_FAILURES as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise DependencyError("postgres", str(e)) from e

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.logger.info("PostgreSQL persistence stopped")

    async def query_row(self, sql: str, *args: Any) -> Optional[Mapping[str, Any]]:
        """Fetch at most one row."""
        try:
            async with self._pool().acquire() as conn:
                return await conn.fetchrow(sql, *args)
        except INPUT_FAILURES as e:
            self.logger.warning("Rejected query argument", error=str(e))
            raise _invalid_input(e) from e
        except STORE_FAILURES as e:
            self.logger.error("Error fetching row", error=str(e))
            raise DependencyError("postgres", str(e)) from e

    async def query(self, sql: str, *args: Any) -> List[Mapping[str, Any]]:
        """Fetch all matching rows."""
        try:
            async with self._pool().acquire() as conn:
                return await conn.fetch(sql, *args)
        except INPUT_FAILURES as e:
            self.logger.warning("Rejected query argument", error=str(e))
            raise _invalid_input(e) from e
        except STORE_FAILURES as e:
            self.logger.error("Error fetching rows", error=str(e))
            raise DependencyError("postgres", str(e)) from e

    async def execute(self, sql: str, *args: Any) -> int:
        """Run a statement and return the affected row count."""
        try:
            async with self._pool().acquire() as conn:
                status = await conn.execute(sql, *args)
        except INPUT_FAILURES as e:
            self.logger.warning("Rejected query argument", error=str(e))
            raise _invalid_input(e) from e
        except STORE_FAILURES as e:
            self.logger.error("Error executing statement", error=str(e))
            raise DependencyError("postgres", str(e)) from e

        return parse_row_count(status)

    async def health_check(self) -> bool:
        """Check database health."""
        try:
            async with self._pool().acquire() as conn:
                await conn.fetchval("SELECT 1")
                return True
        except (DependencyError, *STORE_FAILURES):
            return False

    def _pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise DependencyError("postgres", "persistence not started")
        return self.pool


def _invalid_input(error: Exception) -> ValidationError:
    return ValidationError("Invalid query argument", details={"error": str(error)})


def parse_row_count(status: str) -> int:
    """Extract the row count from a command tag such as ``UPDATE 3``.

    ``INSERT`` tags carry an OID before the count (``INSERT 0 1``), so the
    count is always the last token. Tags without a count yield 0.
    """
    last = status.rsplit(" ", 1)[-1] if status else ""
    return int(last) if last.isdigit() else 0
