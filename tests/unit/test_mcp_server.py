"""Unit tests for the askcatalog MCP server integration.

Note: FastMCP tools take typed Python objects directly (not JSON strings).
The MCP framework handles JSON serialization at the transport layer.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Generator

import pytest

# Skip entire module if mcp is not installed (optional dependency)
pytest.importorskip("mcp", reason="mcp not installed (install with: pip install askcatalog[mcp])")

from askcatalog.core.gateway import QueryGateway  # noqa: E402
from askcatalog.integrations.mcp import server as mcp_server  # noqa: E402

OUT_OF_STOCK_SQL = "SELECT TOP 100 * FROM Products WHERE StockQuantity = 0"


@pytest.fixture
def gateway(settings, fake_model, fake_executor, out_of_stock_outcome) -> QueryGateway:
    executor = fake_executor(out_of_stock_outcome)
    return QueryGateway(fake_model(OUT_OF_STOCK_SQL), executor, settings)


@pytest.fixture(autouse=True)
def set_mcp_gateway(gateway: QueryGateway) -> Generator[None, None, None]:
    """Inject the gateway into the MCP server global before each test."""
    mcp_server._gateway = gateway
    yield
    mcp_server._gateway = None


class TestAskTool:
    def test_ask_returns_result(self) -> None:
        raw = asyncio.run(mcp_server.askcatalog_ask("Which products are out of stock?"))
        data = json.loads(raw)

        assert data["generatedSql"] == OUT_OF_STOCK_SQL
        assert data["rowCount"] == 2
        assert data["columns"] == ["Id", "Name", "Price", "StockQuantity"]

    def test_ask_error_is_returned_as_json(self) -> None:
        data = json.loads(asyncio.run(mcp_server.askcatalog_ask("")))

        assert data["error"] == "InputError"
        assert data["message"] == "The field 'question' is required."

    def test_ask_rejected_sql(self, settings, fake_model, fake_executor) -> None:
        executor = fake_executor()
        mcp_server._gateway = QueryGateway(fake_model("DROP TABLE Products"), executor, settings)

        data = json.loads(asyncio.run(mcp_server.askcatalog_ask("Drop the products table")))

        assert data["error"] == "ValidationError"
        assert data["context"]["sql"] == "DROP TABLE Products"
        assert executor.calls == []


class TestValidateTool:
    def test_valid_statement(self) -> None:
        data = json.loads(mcp_server.askcatalog_validate_sql("SELECT TOP 5 Name FROM Products"))

        assert data["valid"] is True
        assert data["sql"] == "SELECT TOP 5 Name FROM Products"
        assert data["warnings"] == []

    def test_invalid_statement(self) -> None:
        data = json.loads(mcp_server.askcatalog_validate_sql("SELECT 1; DELETE FROM Products"))

        assert data == {
            "valid": False,
            "reason": "statement contains forbidden token 'DELETE'",
            "token": "DELETE",
        }


class TestSchemaTool:
    def test_schema(self) -> None:
        data = json.loads(mcp_server.askcatalog_schema())

        assert data["table"] == "Products"
        assert data["row_cap"] == 100
        assert "StockQuantity" in data["instruction"]


class TestServerSetup:
    def test_uninitialized_gateway(self) -> None:
        mcp_server._gateway = None

        with pytest.raises(RuntimeError, match="not initialized"):
            mcp_server.get_gateway()

    def test_create_server_with_gateway(self, gateway: QueryGateway) -> None:
        server = mcp_server.create_server(gateway=gateway)

        assert server is mcp_server.mcp
        assert mcp_server.get_gateway() is gateway


class TestMcpDependency:
    """The server is built on the 1.x FastMCP API."""

    def test_installed_mcp_is_1x(self) -> None:
        from importlib.metadata import version

        assert version("mcp").split(".")[0] == "1"
