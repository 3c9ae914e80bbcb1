"""Shared test fixtures for askcatalog."""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine, text

from askcatalog.core.config import GatewaySettings
from askcatalog.llm.provider import LanguageModelClient, SamplingConfig
from askcatalog.query.executor import ExecutionOutcome, QueryExecutor

CATALOG_SIZE = 500

CATEGORIES = ["Electronics", "Books", "Home", None]

PRODUCTS_DDL = """
CREATE TABLE Products (
    Id INTEGER PRIMARY KEY,
    Name TEXT NOT NULL,
    Description TEXT NULL,
    Price NUMERIC NOT NULL,
    StockQuantity INTEGER NOT NULL,
    Category TEXT NULL,
    ImageUrl TEXT NULL,
    IsActive INTEGER NOT NULL,
    CreatedAt TEXT NOT NULL,
    UpdatedAt TEXT NULL
)
"""


class FakeModelClient(LanguageModelClient):
    """Language model stand-in returning canned text (or raising)."""

    def __init__(self, response: str | Exception = "", delay: float = 0.0) -> None:
        self.response = response
        self.delay = delay
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def generate(
        self,
        system_instruction: str,
        user_content: str,
        sampling: SamplingConfig,
    ) -> str:
        self.calls.append(
            {
                "system_instruction": system_instruction,
                "user_content": user_content,
                "sampling": sampling,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def aclose(self) -> None:
        self.closed = True


class RecordingExecutor(QueryExecutor):
    """Executor stand-in that records calls and returns a fixed outcome."""

    def __init__(
        self,
        outcome: ExecutionOutcome | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.outcome = outcome or ExecutionOutcome()
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, Any]] = []
        self.cancelled = False

    async def execute(self, sql: str, row_cap: int, timeout: float) -> ExecutionOutcome:
        self.calls.append({"sql": sql, "row_cap": row_cap, "timeout": timeout})
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        rows = self.outcome.rows[:row_cap]
        return ExecutionOutcome(columns=list(self.outcome.columns), rows=rows)


def _product_row(i: int) -> dict[str, Any]:
    return {
        "Id": i,
        "Name": f"Product {i:03d}",
        "Description": None if i % 3 == 0 else f"Description of product {i}",
        "Price": round(i * 1.5, 2),
        "StockQuantity": 0 if i % 10 == 0 else i % 50 + 1,
        "Category": CATEGORIES[i % len(CATEGORIES)],
        "ImageUrl": None,
        "IsActive": 1 if i % 7 else 0,
        "CreatedAt": "2024-01-01T00:00:00",
        "UpdatedAt": None,
    }


@pytest.fixture
def catalog_url(tmp_path: Path) -> Generator[str, None, None]:
    """SQLite file seeded with a Products table of CATALOG_SIZE rows.

    Returns a plain sqlite URL; DatabaseConnection switches it to aiosqlite.
    """
    db_path = tmp_path / "catalog.db"
    url = f"sqlite:///{db_path}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text(PRODUCTS_DDL))
        conn.execute(
            text(
                "INSERT INTO Products (Id, Name, Description, Price, StockQuantity, Category, "
                "ImageUrl, IsActive, CreatedAt, UpdatedAt) VALUES (:Id, :Name, :Description, "
                ":Price, :StockQuantity, :Category, :ImageUrl, :IsActive, :CreatedAt, :UpdatedAt)"
            ),
            [_product_row(i) for i in range(1, CATALOG_SIZE + 1)],
        )
    engine.dispose()
    yield url


@pytest.fixture
def settings() -> GatewaySettings:
    """Default settings for a SQL Server catalog."""
    return GatewaySettings(database_url="mssql+aioodbc://catalog", model="fake-model")


@pytest.fixture
def sqlite_settings(catalog_url: str) -> GatewaySettings:
    """Settings pointing at the seeded SQLite catalog."""
    return GatewaySettings(database_url=catalog_url, model="fake-model")


@pytest.fixture
def out_of_stock_outcome() -> ExecutionOutcome:
    """Executor outcome for the out-of-stock scenario."""
    columns = ["Id", "Name", "Price", "StockQuantity"]
    rows = [
        {"Id": 10, "Name": "Product 010", "Price": 15.0, "StockQuantity": 0},
        {"Id": 20, "Name": "Product 020", "Price": 30.0, "StockQuantity": 0},
    ]
    return ExecutionOutcome(columns=columns, rows=rows)


@pytest.fixture
def fake_model() -> type[FakeModelClient]:
    """The fake language model class; tests build it with the response they need."""
    return FakeModelClient


@pytest.fixture
def fake_executor() -> type[RecordingExecutor]:
    """The recording executor class."""
    return RecordingExecutor
