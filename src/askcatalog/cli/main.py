"""askcatalog CLI - Main entry point."""

from typing import Annotated

import typer

import askcatalog
from askcatalog.cli.context import CLIContext

# Root command group
app = typer.Typer(
    name="askcatalog",
    help="askcatalog CLI - Ask the product catalog questions in plain language",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            envvar="ASKCATALOG_DATABASE_URL",
            help="Database URL (PostgreSQL, SQLite, SQL Server or MySQL)",
        ),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option(
            "--model",
            "-m",
            envvar="ASKCATALOG_MODEL",
            help="Language model used to generate SQL",
        ),
    ] = None,
    echo: Annotated[
        bool,
        typer.Option(
            "--echo",
            "-e",
            help="Echo SQL statements to console",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    cli_ctx = CLIContext(
        database_url=database,
        model=model,
        echo=echo,
        json_output=json_output,
    )

    # Commands read it from ctx.obj
    ctx.obj = cli_ctx


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"askcatalog v{askcatalog.__version__}")


# Register commands
from askcatalog.cli.commands import query, serve  # noqa: E402

app.command(name="ask")(query.ask_command)
app.command(name="validate")(query.validate_command)
app.command(name="prompt")(query.prompt_command)
app.command(name="serve")(serve.serve_command)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
