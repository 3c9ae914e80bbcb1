"""Custom exceptions for askcatalog.

Every failure of the gateway resolves to one of these, scoped to a single
request:
- Messages say what went wrong and, where possible, what to change
- ``context`` carries machine-readable details for JSON consumers
"""

from __future__ import annotations

from typing import Any


class AskCatalogError(Exception):
    """Base exception for all askcatalog errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigError(AskCatalogError):
    """Settings could not be loaded or are invalid."""

    pass


class InputError(AskCatalogError):
    """The question is empty or too long. The pipeline never started."""

    def __init__(self, message: str, max_length: int | None = None) -> None:
        context: dict[str, Any] = {}
        if max_length is not None:
            context["max_length"] = max_length
        super().__init__(message, context)
        self.max_length = max_length


class GenerationError(AskCatalogError):
    """The language model failed or returned no usable text."""

    pass


class ValidationError(AskCatalogError):
    """The generated statement was rejected by the safety validator.

    The offending SQL is carried for transparency; it is never executed.
    """

    def __init__(self, reason: str, sql: str, token: str | None = None) -> None:
        message = f"Generated SQL was rejected: {reason}. Try rephrasing your question."
        super().__init__(message, {"reason": reason, "token": token, "sql": sql})
        self.reason = reason
        self.sql = sql
        self.token = token


class ExecutionError(AskCatalogError):
    """The data store failed while running an accepted statement."""

    pass


class DatabaseConnectionError(ExecutionError):
    """Failed to connect to the database."""

    pass
