"""Natural-language query pipeline stages.

Architecture:
    1. Prompt Builder - Fixed schema/rules instruction plus the user's question
    2. SQL Extractor - Recovers the statement from model output
    3. Safety Validator - Rejects anything but a single read-only SELECT
    4. Bounded Executor - Runs accepted SQL with a row cap and timeout
    5. Assembler - Packages the result

Example:
    verdict = SqlSafetyValidator().validate("SELECT TOP 100 * FROM Products")
    if verdict.valid:
        outcome = await executor.execute(verdict.sql, row_cap=100, timeout=10)
"""

from askcatalog.query.assembler import assemble_result
from askcatalog.query.executor import BoundedQueryExecutor, ExecutionOutcome, QueryExecutor
from askcatalog.query.extractor import extract_sql
from askcatalog.query.prompt import PromptBuilder, PromptRequest
from askcatalog.query.validator import (
    DEFAULT_FORBIDDEN_TOKENS,
    Accepted,
    Rejected,
    SqlSafetyValidator,
    ValidationVerdict,
    validate_sql,
)

__all__ = [
    "PromptBuilder",
    "PromptRequest",
    "extract_sql",
    "DEFAULT_FORBIDDEN_TOKENS",
    "SqlSafetyValidator",
    "Accepted",
    "Rejected",
    "ValidationVerdict",
    "validate_sql",
    "QueryExecutor",
    "BoundedQueryExecutor",
    "ExecutionOutcome",
    "assemble_result",
]
