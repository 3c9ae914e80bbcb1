"""Tests for database connection management."""

from __future__ import annotations

import asyncio

import pytest

from askcatalog.core.connection import DatabaseConnection, normalize_async_url
from askcatalog.exceptions import DatabaseConnectionError, ExecutionError


class TestNormalizeAsyncUrl:
    """Plain URLs are switched to async drivers."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("sqlite:///./catalog.db", "sqlite+aiosqlite:///./catalog.db"),
            ("postgresql://u:p@localhost/catalog", "postgresql+psycopg://u:p@localhost/catalog"),
            ("mssql://u:p@host/catalog", "mssql+aioodbc://u:p@host/catalog"),
            ("mysql://u:p@host/catalog", "mysql+aiomysql://u:p@host/catalog"),
        ],
    )
    def test_plain_scheme(self, url: str, expected: str) -> None:
        assert normalize_async_url(url) == expected

    @pytest.mark.parametrize(
        "url",
        [
            "postgresql+asyncpg://localhost/catalog",
            "sqlite+aiosqlite:///:memory:",
            "oracle://localhost/catalog",
            "not a url",
        ],
    )
    def test_left_unchanged(self, url: str) -> None:
        assert normalize_async_url(url) == url


class TestDatabaseConnection:
    """Engine creation and connection checks."""

    def test_url_is_normalized(self) -> None:
        conn = DatabaseConnection("sqlite:///./catalog.db")

        assert conn.url == "sqlite+aiosqlite:///./catalog.db"

    def test_invalid_url(self) -> None:
        conn = DatabaseConnection("not a url")

        with pytest.raises(DatabaseConnectionError, match="Failed to create database engine"):
            _ = conn.engine

    def test_connection_error_is_execution_error(self) -> None:
        assert issubclass(DatabaseConnectionError, ExecutionError)

    def test_sqlite_connection(self, catalog_url: str) -> None:
        conn = DatabaseConnection(catalog_url)

        async def run() -> tuple[bool, str]:
            try:
                return await conn.test_connection(), conn.dialect
            finally:
                await conn.close()

        assert asyncio.run(run()) == (True, "sqlite")

    def test_async_context_manager(self, catalog_url: str) -> None:
        async def run() -> str:
            async with DatabaseConnection(catalog_url) as conn:
                return conn.dialect

        assert asyncio.run(run()) == "sqlite"

    def test_close_without_engine_is_noop(self) -> None:
        asyncio.run(DatabaseConnection("sqlite:///./never-created.db").close())
