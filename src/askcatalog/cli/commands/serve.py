"""HTTP server command."""

import logging
from typing import Annotated

import typer

from askcatalog.cli.context import CLIContext
from askcatalog.cli.output import OutputFormatter


def serve_command(
    ctx: typer.Context,
    host: Annotated[
        str,
        typer.Option("--host", help="Interface to bind"),
    ] = "127.0.0.1",
    port: Annotated[
        int,
        typer.Option("--port", "-p", help="Port to listen on"),
    ] = 8000,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Logging level"),
    ] = "info",
) -> None:
    """Serve the question endpoint over HTTP (POST /api/ai-query).

    Examples:

        askcatalog serve
        askcatalog -d postgresql://localhost/catalog serve --port 8080
    """
    import uvicorn

    from askcatalog.integrations.http.app import create_app

    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        app = create_app(settings=cli_ctx.settings)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())
