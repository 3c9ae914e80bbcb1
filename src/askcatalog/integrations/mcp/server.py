"""MCP server for askcatalog.

Exposes the NL2SQL gateway as MCP tools for AI agents.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from mcp.server.fastmcp import FastMCP  # type: ignore[import-not-found]

from askcatalog.core.config import GatewaySettings
from askcatalog.core.gateway import QueryGateway
from askcatalog.exceptions import AskCatalogError
from askcatalog.query.validator import Accepted

# Configure logging to stderr (important for stdio transport)
logging.basicConfig(level=logging.INFO, stream=sys.stderr)
logger = logging.getLogger(__name__)

# Create MCP server
mcp = FastMCP("askcatalog")

# Global gateway instance (set during server startup)
_gateway: QueryGateway | None = None


def get_gateway() -> QueryGateway:
    """Get the gateway instance."""
    if _gateway is None:
        raise RuntimeError("Gateway not initialized. Call create_server() first.")
    return _gateway


@mcp.tool()
async def askcatalog_ask(question: str) -> str:
    """Answer a natural-language question about the product catalog.

    The question is turned into a single read-only SELECT, checked for
    safety, run with a row cap and returned as a table.

    Args:
        question: Question in plain language, e.g. "Which products are out of stock?"

    Returns:
        JSON with question, generatedSql, columns, rows, rowCount and
        executionTimeMs, or an error object.
    """
    try:
        result = await get_gateway().process_question(question)
        return result.model_dump_json(by_alias=True)
    except AskCatalogError as e:
        return json.dumps(e.to_dict(), default=str)


@mcp.tool()
def askcatalog_validate_sql(sql: str) -> str:
    """Check a SQL statement against the gateway's safety rules without running it.

    Args:
        sql: Statement to check

    Returns:
        JSON with "valid" and either "sql" and "warnings", or "reason" and "token".
    """
    verdict = get_gateway().validate(sql)
    if isinstance(verdict, Accepted):
        return json.dumps({"valid": True, "sql": verdict.sql, "warnings": verdict.warnings})
    return json.dumps({"valid": False, "reason": verdict.reason, "token": verdict.token})


@mcp.tool()
def askcatalog_schema() -> str:
    """Get the table description and rules given to the SQL generator.

    Use this to see which columns can be asked about.
    """
    gateway = get_gateway()
    return json.dumps(
        {
            "table": gateway.settings.table_name,
            "row_cap": gateway.settings.row_cap,
            "instruction": gateway.prompt_builder.system_instruction,
        }
    )


def create_server(
    database_url: str | None = None,
    gateway: QueryGateway | None = None,
) -> FastMCP:
    """Create and configure the MCP server with a gateway.

    Args:
        database_url: Database URL; overrides ASKCATALOG_DATABASE_URL
        gateway: Prebuilt gateway (skips building one from settings)

    Returns:
        Configured FastMCP server instance
    """
    global _gateway
    if gateway is None:
        settings = GatewaySettings.from_env(database_url=database_url)
        gateway = QueryGateway.from_settings(settings)
    _gateway = gateway
    logger.info(f"askcatalog gateway initialized for table {gateway.settings.table_name}")
    return mcp


def main() -> None:
    """Entry point for running the MCP server."""
    parser = argparse.ArgumentParser(description="askcatalog MCP Server")
    parser.add_argument(
        "--database",
        "-d",
        default=None,
        help="Database URL (default: ASKCATALOG_DATABASE_URL or sqlite:///./catalog.db)",
    )
    args = parser.parse_args()

    create_server(args.database)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
