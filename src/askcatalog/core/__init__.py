"""Core components for askcatalog."""

from askcatalog.core.config import GatewaySettings
from askcatalog.core.connection import DatabaseConnection
from askcatalog.core.gateway import QueryGateway
from askcatalog.core.types import GeneratedStatement, QueryRequest, QueryResult

__all__ = [
    "DatabaseConnection",
    "GatewaySettings",
    "GeneratedStatement",
    "QueryGateway",
    "QueryRequest",
    "QueryResult",
]
