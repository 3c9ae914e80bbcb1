"""Prompt construction for SQL generation.

The system instruction describes the one table the model may query and the
rules it must follow. The user's question travels separately as the task
content so it never mixes with the instructions.
"""

from __future__ import annotations

from dataclasses import dataclass

# Dialects whose row cap is written as SELECT TOP n
TOP_DIALECTS = {"mssql", "sqlserver", "tsql"}

DIALECT_LABELS = {
    "mssql": "T-SQL for Microsoft SQL Server",
    "postgresql": "PostgreSQL SQL",
    "sqlite": "SQLite SQL",
    "mysql": "MySQL SQL",
}


@dataclass(frozen=True)
class PromptRequest:
    """A model request: fixed instruction plus the question as task content."""

    system_instruction: str
    user_content: str


class PromptBuilder:
    """Builds deterministic SQL-generation prompts for a single table."""

    def __init__(
        self,
        schema_description: str,
        table_name: str,
        row_cap: int = 100,
        dialect: str = "mssql",
    ) -> None:
        self._schema_description = schema_description.strip()
        self._table_name = table_name
        self._row_cap = row_cap
        self._dialect = dialect.lower()
        self._system_instruction = self._render_instruction()

    @property
    def system_instruction(self) -> str:
        return self._system_instruction

    def cap_clause(self) -> str:
        """Row-limiting clause the model is told to use."""
        if self._dialect in TOP_DIALECTS:
            return f"TOP {self._row_cap}"
        return f"LIMIT {self._row_cap}"

    def build(self, question: str) -> PromptRequest:
        """Assemble the request for one question."""
        return PromptRequest(
            system_instruction=self._system_instruction,
            user_content=question.strip(),
        )

    def _render_instruction(self) -> str:
        label = DIALECT_LABELS.get(self._dialect, f"{self._dialect} SQL")
        cap = self.cap_clause()
        rules = [
            "Only generate SELECT statements: never INSERT, UPDATE, DELETE, MERGE, DROP, "
            "ALTER, CREATE, TRUNCATE, EXEC, or any other data-modifying or "
            "schema-modifying statement.",
            f'Only query the "{self._table_name}" table.',
            f"Always limit results with {cap}.",
            "Return ONLY the raw SQL query: no markdown fences, no explanations, "
            "no comments.",
            "For text searches, use LIKE with % wildcards for partial matches, "
            "never equality.",
        ]
        if self._dialect in TOP_DIALECTS:
            rules.append("Use proper T-SQL syntax (e.g., TOP instead of LIMIT).")

        numbered = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))
        return (
            f"You are a SQL expert. Given a natural language question about "
            f"{self._table_name.lower()}, generate a valid {label} SELECT query.\n\n"
            f"{self._schema_description}\n\n"
            f"Rules:\n{numbered}"
        )
