"""
Unit tests for the PostgreSQL persistence layer.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import asyncpg
import pytest

from service_catalog.app.persistence.postgres import PostgreSQLPersistence, parse_row_count
from shared.errors import DependencyError, ValidationError


class _Acquire:
    """Async context manager standing in for ``pool.acquire()``."""

    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def conn():
    """Mock asyncpg connection."""
    return AsyncMock()


@pytest.fixture
def persistence(conn):
    """Persistence layer over a mock pool."""
    store = PostgreSQLPersistence("postgresql://catalog@localhost/catalog")
    pool = MagicMock()
    pool.acquire.side_effect = lambda: _Acquire(conn)
    store.pool = pool
    return store


@pytest.mark.parametrize("status,expected", [
    ("UPDATE 1", 1),
    ("UPDATE 0", 0),
    ("INSERT 0 3", 3),
    ("DELETE 12", 12),
    ("CREATE TABLE", 0),
    ("", 0),
])
def test_parse_row_count(status, expected):
    """Test command tags are reduced to row counts."""
    assert parse_row_count(status) == expected


class TestPostgreSQLPersistence:
    """Test cases for PostgreSQLPersistence."""

    @pytest.mark.asyncio
    async def test_query_row_passes_args(self, persistence, conn):
        """Test positional arguments reach fetchrow unchanged."""
        conn.fetchrow.return_value = {"id": 1}

        row = await persistence.query_row("SELECT * FROM products WHERE id = $1", 1)

        assert row == {"id": 1}
        conn.fetchrow.assert_awaited_once_with("SELECT * FROM products WHERE id = $1", 1)

    @pytest.mark.asyncio
    async def test_query_returns_rows(self, persistence, conn):
        """Test fetch results are returned."""
        conn.fetch.return_value = [{"id": 1}, {"id": 2}]

        rows = await persistence.query("SELECT * FROM products WHERE user_id = $1", 7)

        assert len(rows) == 2

    @pytest.mark.asyncio
    async def test_execute_returns_row_count(self, persistence, conn):
        """Test execute reports affected rows."""
        conn.execute.return_value = "UPDATE 0"

        assert await persistence.execute("UPDATE products SET product_name = $1 WHERE id = $2", "x", 9999) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["query_row", "query", "execute"])
    async def test_connection_errors_wrapped(self, persistence, conn, method):
        """Test socket failures become dependency errors."""
        failing = {"query_row": conn.fetchrow, "query": conn.fetch, "execute": conn.execute}[method]
        failing.side_effect = OSError("Connection refused")

        with pytest.raises(DependencyError) as exc_info:
            await getattr(persistence, method)("SELECT 1")

        assert exc_info.value.dependency == "postgres"

    @pytest.mark.asyncio
    async def test_interface_error_wrapped(self, persistence, conn):
        """Test driver errors become dependency errors."""
        conn.fetch.side_effect = asyncpg.InterfaceError("pool is closing")

        with pytest.raises(DependencyError):
            await persistence.query("SELECT * FROM missing")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["query_row", "query", "execute"])
    async def test_unencodable_argument_is_validation_error(self, persistence, conn, method):
        """Test an argument outside the column range is a caller error, not an outage."""
        failing = {"query_row": conn.fetchrow, "query": conn.fetch, "execute": conn.execute}[method]
        failing.side_effect = asyncpg.DataError(
            "invalid input for query argument $1: 100000000000000000000 (value out of int64 range)"
        )

        with pytest.raises(ValidationError) as exc_info:
            await getattr(persistence, method)("SELECT * FROM products WHERE id = $1", 10 ** 20)

        assert exc_info.value.code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_not_started(self):
        """Test use before start fails as a dependency error."""
        with pytest.raises(DependencyError):
            await PostgreSQLPersistence("postgresql://localhost/catalog").query("SELECT 1")

    @pytest.mark.asyncio
    async def test_health_check(self, persistence, conn):
        """Test health check runs a trivial query."""
        conn.fetchval.return_value = 1
        assert await persistence.health_check() is True

        conn.fetchval.side_effect = OSError("reset")
        assert await persistence.health_check() is False

    @pytest.mark.asyncio
    async def test_start_creates_pool(self):
        """Test start builds a pool with configured sizes."""
        pool = MagicMock()
        pool.close = AsyncMock()
        create_pool = AsyncMock(return_value=pool)

        with patch("service_catalog.app.persistence.postgres.asyncpg.create_pool", create_pool):
            store = PostgreSQLPersistence("postgresql://localhost/catalog", min_size=1, max_size=4)
            await store.start()
            await store.stop()

        assert create_pool.await_args.kwargs["min_size"] == 1
        assert create_pool.await_args.kwargs["max_size"] == 4
        pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_start_failure(self):
        """Test an unreachable database fails start."""
        create_pool = AsyncMock(side_effect=OSError("Connection refused"))

        with patch("service_catalog.app.persistence.postgres.asyncpg.create_pool", create_pool):
            with pytest.raises(DependencyError):
                await PostgreSQLPersistence("postgresql://localhost/catalog").start()
