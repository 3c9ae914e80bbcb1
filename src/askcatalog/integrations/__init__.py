"""Transports for the gateway.

Available integrations:
- askcatalog.integrations.http - FastAPI endpoint for the catalog front-end
- askcatalog.integrations.mcp - MCP (Model Context Protocol) server
"""
