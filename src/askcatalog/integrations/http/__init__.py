"""HTTP integration for askcatalog."""

from askcatalog.integrations.http.app import create_app

__all__ = ["create_app"]
