"""SQL safety validator for model-generated statements.

A static, keyword-level gate applied before any statement reaches the
database. It is not a SQL parser and errs on the side of rejecting:
- The statement must be a single SELECT
- No token from the deny-list may appear (whole words, or literal symbols)
- Optionally, FROM/JOIN targets must be in an allow-list of tables

Passing this gate does not prove a statement is harmless. The executor runs
accepted statements on a read-only, time-limited session as a second line of
defense.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

# Checked in order; the first match names the rejection.
DEFAULT_FORBIDDEN_TOKENS: tuple[str, ...] = (
    # Data mutation
    "INSERT",
    "UPDATE",
    "DELETE",
    "MERGE",
    # Schema mutation
    "CREATE",
    "ALTER",
    "DROP",
    "TRUNCATE",
    # Privileges
    "GRANT",
    "REVOKE",
    "DENY",
    # Execution
    "EXEC",
    "EXECUTE",
    # Bulk load and external data access
    "BULK",
    "OPENROWSET",
    "OPENDATASOURCE",
    "OPENQUERY",
    # Extended and system stored procedure prefixes
    "XP_",
    "SP_",
    # Statement separators and comments
    ";",
    "--",
    "/*",
)

READ_ONLY_REASON = "only read statements are allowed"

_SELECT_PREFIX = re.compile(r"\s*SELECT\b")
_ROW_LIMIT = re.compile(r"\bTOP\b|\bLIMIT\s+\d+|\bFETCH\s+(?:FIRST|NEXT)\b")
_SELECT_STAR = re.compile(r"\bSELECT\s+(?:TOP\s*\(?\s*\d+\s*\)?\s+)?\*")
_TABLE_REFERENCE = re.compile(r"\b(?:FROM|JOIN)\s+([\w\[\]\"`.]+)")


@dataclass(frozen=True)
class Accepted:
    """The statement passed every check. ``sql`` is the original text."""

    sql: str
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """The statement failed a check. ``token`` names the matched deny-list entry."""

    reason: str
    token: str | None = None

    @property
    def valid(self) -> bool:
        return False


ValidationVerdict = Accepted | Rejected


def _compile_token(token: str) -> re.Pattern[str]:
    """Build the matcher for one deny-list token.

    Words match as whole words. A word ending in ``_`` is a name prefix and
    matches the start of any identifier. Anything else is matched literally.
    """
    upper = token.upper()
    escaped = re.escape(upper)
    if re.fullmatch(r"\w+_", upper):
        return re.compile(rf"\b{escaped}")
    if re.fullmatch(r"\w+", upper):
        return re.compile(rf"\b{escaped}\b")
    return re.compile(escaped)


def _normalize_table_name(reference: str) -> str:
    name = reference.split(".")[-1]
    return name.strip('[]"`').lower()


class SqlSafetyValidator:
    """Validates model-generated SQL before execution.

    Checks, in order:
    1. Statement shape (must start with SELECT)
    2. Deny-list tokens
    3. Table allow-list (only when ``allowed_tables`` is given)
    """

    def __init__(
        self,
        forbidden_tokens: Iterable[str] = DEFAULT_FORBIDDEN_TOKENS,
        allowed_tables: Iterable[str] | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            forbidden_tokens: Deny-list, checked in order
            allowed_tables: Table names FROM/JOIN may reference (None disables the check)
        """
        self._patterns = [(token, _compile_token(token)) for token in forbidden_tokens]
        self._allowed_tables = {t.lower() for t in allowed_tables} if allowed_tables else None

    @property
    def forbidden_tokens(self) -> list[str]:
        return [token for token, _ in self._patterns]

    def validate(self, sql: str) -> ValidationVerdict:
        """Validate a candidate statement.

        Args:
            sql: Statement text as extracted from the model output

        Returns:
            Accepted carrying the unmodified text, or Rejected with a reason
        """
        if not sql or not sql.strip():
            return Rejected(reason="empty statement")

        upper = sql.upper()

        if not _SELECT_PREFIX.match(upper):
            return Rejected(reason=READ_ONLY_REASON)

        token = self._find_forbidden_token(upper)
        if token is not None:
            return Rejected(reason=f"statement contains forbidden token '{token}'", token=token)

        allowed = self._allowed_tables
        if allowed is not None:
            denied = self._unauthorized_tables(upper, allowed)
            if denied:
                return Rejected(
                    reason=f"statement references tables outside the allow-list: "
                    f"{', '.join(sorted(denied))}"
                )

        return Accepted(sql=sql, warnings=self._check_warnings(upper))

    def _find_forbidden_token(self, upper_sql: str) -> str | None:
        for token, pattern in self._patterns:
            if pattern.search(upper_sql):
                return token
        return None

    def _unauthorized_tables(self, upper_sql: str, allowed: set[str]) -> set[str]:
        referenced = {
            _normalize_table_name(match.group(1))
            for match in _TABLE_REFERENCE.finditer(upper_sql)
        }
        return referenced - allowed

    def _check_warnings(self, upper_sql: str) -> list[str]:
        warnings = []
        if not _ROW_LIMIT.search(upper_sql):
            warnings.append(
                "No TOP or LIMIT clause found. Results are still capped at execution time."
            )
        if _SELECT_STAR.search(upper_sql):
            warnings.append("SELECT * returns every column. Naming columns keeps results small.")
        return warnings


def validate_sql(sql: str) -> ValidationVerdict:
    """Validate a statement with the default deny-list."""
    return SqlSafetyValidator().validate(sql)
