"""Packaging of executed queries into results."""

from __future__ import annotations

from askcatalog.core.types import QueryResult
from askcatalog.query.executor import ExecutionOutcome


def assemble_result(
    question: str,
    sql: str,
    outcome: ExecutionOutcome,
    elapsed_ms: float,
) -> QueryResult:
    """Build the result for an executed statement.

    No checks happen here; ``sql`` has already been accepted and run.
    """
    return QueryResult(
        question=question,
        generated_sql=sql,
        columns=list(outcome.columns),
        rows=list(outcome.rows),
        row_count=len(outcome.rows),
        execution_time_ms=int(elapsed_ms),
    )
