"""Gateway settings.

All tunables of the gateway live on :class:`GatewaySettings`. Values come from
keyword arguments, or from ``ASKCATALOG_*`` environment variables via
:meth:`GatewaySettings.from_env`.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from askcatalog.exceptions import ConfigError
from askcatalog.query.validator import DEFAULT_FORBIDDEN_TOKENS

DEFAULT_DATABASE_URL = "sqlite:///./catalog.db"

DEFAULT_TABLE_NAME = "Products"

DEFAULT_SCHEMA_DESCRIPTION = """\
The database has a single table called "Products" with these columns:
- Id (uniqueidentifier, PK)
- Name (nvarchar(200), NOT NULL)
- Description (nvarchar(1000), NULL)
- Price (decimal(18,2), NOT NULL)
- StockQuantity (int, NOT NULL)
- Category (nvarchar(100), NULL)
- ImageUrl (nvarchar(500), NULL)
- IsActive (bit, NOT NULL, 1 = active, 0 = inactive)
- CreatedAt (datetime2, NOT NULL)
- UpdatedAt (datetime2, NULL)"""

# Environment variable -> settings field
ENV_VARS = {
    "ASKCATALOG_DATABASE_URL": "database_url",
    "ASKCATALOG_DIALECT": "dialect",
    "ASKCATALOG_TABLE_NAME": "table_name",
    "ASKCATALOG_SCHEMA_DESCRIPTION": "schema_description",
    "ASKCATALOG_ROW_CAP": "row_cap",
    "ASKCATALOG_EXECUTION_TIMEOUT": "execution_timeout",
    "ASKCATALOG_REQUEST_TIMEOUT": "request_timeout",
    "ASKCATALOG_QUESTION_MAX_LENGTH": "question_max_length",
    "ASKCATALOG_FORBIDDEN_TOKENS": "forbidden_tokens",
    "ASKCATALOG_ALLOWED_TABLES": "allowed_tables",
    "ASKCATALOG_MODEL_PROVIDER": "model_provider",
    "ASKCATALOG_MODEL": "model",
    "ASKCATALOG_MODEL_BASE_URL": "model_base_url",
    "ASKCATALOG_TEMPERATURE": "temperature",
    "ASKCATALOG_MAX_OUTPUT_TOKENS": "max_output_tokens",
    "ASKCATALOG_CORS_ORIGINS": "cors_origins",
}

_LIST_FIELDS = {"forbidden_tokens", "allowed_tables", "cors_origins"}


class GatewaySettings(BaseModel):
    """Configuration for the NL2SQL gateway and its collaborators."""

    model_config = ConfigDict(frozen=True)

    # Data store
    database_url: str = DEFAULT_DATABASE_URL
    dialect: str | None = None  # derived from database_url when unset
    table_name: str = DEFAULT_TABLE_NAME
    schema_description: str = DEFAULT_SCHEMA_DESCRIPTION

    # Bounds
    row_cap: int = Field(default=100, gt=0)
    execution_timeout: float = Field(default=10.0, gt=0)  # seconds
    request_timeout: float = Field(default=30.0, gt=0)  # seconds, whole pipeline
    question_max_length: int = Field(default=500, gt=0)

    # Safety
    forbidden_tokens: list[str] = Field(default_factory=lambda: list(DEFAULT_FORBIDDEN_TOKENS))
    allowed_tables: list[str] = Field(default_factory=list)  # empty = no table check

    # Language model
    model_provider: str = "openai"
    model: str = "gpt-4o-mini"
    model_base_url: str | None = None
    api_key: str | None = Field(default=None, repr=False)
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=500, gt=0)

    # HTTP
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    @field_validator("forbidden_tokens")
    @classmethod
    def _forbidden_tokens_not_empty(cls, value: list[str]) -> list[str]:
        tokens = [t.strip() for t in value if t.strip()]
        if not tokens:
            raise ValueError("forbidden_tokens must contain at least one token")
        return tokens

    @property
    def resolved_dialect(self) -> str:
        """Dialect name used for prompt wording, e.g. ``mssql`` or ``sqlite``."""
        if self.dialect:
            return self.dialect.lower()
        scheme = self.database_url.split(":", 1)[0]
        return scheme.split("+", 1)[0].lower()

    @classmethod
    def from_env(
        cls, environ: dict[str, str] | None = None, **overrides: Any
    ) -> GatewaySettings:
        """Build settings from ``ASKCATALOG_*`` environment variables.

        List values (forbidden tokens, allowed tables, CORS origins) are
        comma-separated. Keyword overrides win over the environment; ``None``
        overrides are ignored.

        Raises:
            ConfigError: If a value cannot be parsed or fails validation
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for var, name in ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            if name in _LIST_FIELDS:
                values[name] = [part.strip() for part in raw.split(",") if part.strip()]
            else:
                values[name] = raw
        if api_key := env.get("OPENAI_API_KEY"):
            values["api_key"] = api_key
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls.model_validate(values)
        except Exception as e:
            raise ConfigError(f"Invalid gateway settings: {e}") from e
