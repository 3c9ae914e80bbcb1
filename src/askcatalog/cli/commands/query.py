"""Question, validation and prompt commands."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from askcatalog.cli.context import CLIContext
from askcatalog.cli.output import OutputFormatter
from askcatalog.core.types import QueryResult
from askcatalog.query.prompt import PromptBuilder
from askcatalog.query.validator import SqlSafetyValidator


def ask_command(
    ctx: typer.Context,
    question: Annotated[
        str,
        typer.Argument(help="Question about the catalog, in plain language"),
    ],
    show_sql: Annotated[
        bool,
        typer.Option("--sql/--no-sql", help="Show the generated SQL"),
    ] = True,
) -> None:
    """Answer a natural-language question with rows from the catalog.

    Examples:

        askcatalog ask "Which products are out of stock?"
        askcatalog --json ask "Top 5 most expensive products in Electronics"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    async def _ask() -> QueryResult:
        try:
            return await cli_ctx.get_gateway().process_question(question)
        finally:
            await cli_ctx.aclose()

    try:
        result = asyncio.run(_ask())
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)

    formatter.print_result(result, show_sql=show_sql)


def validate_command(
    ctx: typer.Context,
    sql: Annotated[
        str | None,
        typer.Argument(help="SQL statement to check"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--file", "-f", help="Load SQL from file"),
    ] = None,
) -> None:
    """Check a SQL statement against the safety rules without executing it.

    Examples:

        askcatalog validate "SELECT TOP 10 Name FROM Products"
        askcatalog validate --file query.sql
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        # Get SQL from argument or file
        if from_file:
            sql_content = Path(from_file).read_text()
        elif sql:
            sql_content = sql
        else:
            raise typer.BadParameter("Either provide SQL or use --file")

        settings = cli_ctx.settings
        validator = SqlSafetyValidator(
            forbidden_tokens=settings.forbidden_tokens,
            allowed_tables=settings.allowed_tables or None,
        )
        verdict = validator.validate(sql_content)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)

    formatter.print_verdict(verdict)
    if not verdict.valid:
        raise typer.Exit(code=1)


def prompt_command(
    ctx: typer.Context,
    question: Annotated[
        str,
        typer.Argument(help="Question to build the prompt for"),
    ],
) -> None:
    """Show the prompt that would be sent to the language model.

    Examples:

        askcatalog prompt "Which products cost less than 50?"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        settings = cli_ctx.settings
        builder = PromptBuilder(
            schema_description=settings.schema_description,
            table_name=settings.table_name,
            row_cap=settings.row_cap,
            dialect=settings.resolved_dialect,
        )
        prompt = builder.build(question)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)

    formatter.print_prompt(prompt)
