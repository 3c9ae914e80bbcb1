"""CLI context management for settings, the gateway and shared state."""

from dataclasses import dataclass, field

from askcatalog.core.config import GatewaySettings
from askcatalog.core.connection import DatabaseConnection
from askcatalog.core.gateway import QueryGateway


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Resolves settings from the environment plus global CLI options and
    manages the gateway lifecycle.
    """

    database_url: str | None
    model: str | None
    echo: bool
    json_output: bool
    _settings: GatewaySettings | None = field(default=None, init=False, repr=False)
    _gateway: QueryGateway | None = field(default=None, init=False, repr=False)

    @property
    def settings(self) -> GatewaySettings:
        """Settings from ASKCATALOG_* variables, overridden by CLI options.

        Raises:
            ConfigError: If the resulting settings are invalid
        """
        if self._settings is None:
            self._settings = GatewaySettings.from_env(
                database_url=self.database_url,
                model=self.model,
            )
        return self._settings

    def get_gateway(self) -> QueryGateway:
        """Get or create the gateway (lazy initialization).

        Returns:
            QueryGateway wired from settings
        """
        if self._gateway is None:
            settings = self.settings
            self._gateway = QueryGateway.from_settings(
                settings,
                connection=DatabaseConnection(settings.database_url, echo=self.echo),
            )
        return self._gateway

    async def aclose(self) -> None:
        """Close the gateway if open."""
        if self._gateway is not None:
            await self._gateway.aclose()
            self._gateway = None
