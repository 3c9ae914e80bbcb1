"""Terminal and JSON rendering for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from askcatalog.core.types import QueryResult
from askcatalog.exceptions import AskCatalogError
from askcatalog.query.prompt import PromptRequest
from askcatalog.query.validator import Accepted, ValidationVerdict

console = Console()

NULL_MARKER = "NULL"


class OutputFormatter:
    """Renders gateway output as Rich tables and panels, or as JSON.

    JSON output uses the same shapes as the HTTP API and the MCP tools, so
    scripts can switch between them.
    """

    def __init__(self, json_mode: bool = False) -> None:
        self.json_mode = json_mode

    def print_result(self, result: QueryResult, show_sql: bool = True) -> None:
        """Print a query result as a Rich table or JSON.

        Args:
            result: Result to display
            show_sql: Print the generated SQL above the table
        """
        if self.json_mode:
            print(result.model_dump_json(by_alias=True, indent=2))
            return

        if show_sql:
            self.print_sql(result.generated_sql)

        if not result.rows:
            console.print("Query returned no rows")
        else:
            grid = Table(show_header=True, header_style="bold magenta")
            for column in result.columns:
                grid.add_column(column)
            for row in result.rows:
                grid.add_row(*[self._cell(row.get(column)) for column in result.columns])
            console.print(grid)

        console.print(f"{result.row_count} row(s) in {result.execution_time_ms} ms", style="dim")

    def print_sql(self, sql: str) -> None:
        """Print a SQL statement with highlighting."""
        if self.json_mode:
            self._emit({"sql": sql})
        else:
            console.print(Syntax(sql, "sql", word_wrap=True))

    def print_verdict(self, verdict: ValidationVerdict) -> None:
        """Show whether a statement passed the safety checks."""
        if isinstance(verdict, Accepted):
            if self.json_mode:
                self._emit({"valid": True, "sql": verdict.sql, "warnings": verdict.warnings})
                return
            console.print("✓ Statement is safe to run", style="green")
            for warning in verdict.warnings:
                console.print(f"  ! {warning}", style="yellow")
            return

        if self.json_mode:
            self._emit({"valid": False, "reason": verdict.reason, "token": verdict.token})
        else:
            console.print(
                Panel(
                    f"Statement rejected: {verdict.reason}",
                    title="[red]Rejected[/red]",
                    border_style="red",
                )
            )

    def print_prompt(self, prompt: PromptRequest) -> None:
        """Show the instruction and task content sent to the model."""
        if self.json_mode:
            self._emit(
                {
                    "system_instruction": prompt.system_instruction,
                    "user_content": prompt.user_content,
                }
            )
            return
        console.print(Panel(prompt.system_instruction, title="System instruction"))
        console.print(f"[bold]Question:[/bold] {prompt.user_content}")

    def print_error(self, error: Exception) -> None:
        """Print an error, with its context for gateway errors."""
        if self.json_mode:
            if isinstance(error, AskCatalogError):
                self._emit(error.to_dict())
            else:
                self._emit({"error": error.__class__.__name__, "message": str(error)})
            return

        body = error.message if isinstance(error, AskCatalogError) else str(error)
        if isinstance(error, AskCatalogError) and error.context:
            details = "\n".join(f"{k}: {v}" for k, v in error.context.items() if v is not None)
            body = f"{body}\n\n{details}"
        console.print(
            Panel(body, title=f"[red]{error.__class__.__name__}[/red]", border_style="red")
        )

    @staticmethod
    def _emit(data: dict[str, Any]) -> None:
        print(json.dumps(data, default=str, indent=2))

    @staticmethod
    def _cell(value: Any) -> str:
        if value is None:
            return NULL_MARKER
        return str(value)
