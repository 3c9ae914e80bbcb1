"""Recover the SQL statement from raw language model output."""

from __future__ import annotations

import re

# First complete fenced region. A known SQL language tag may share the line
# with the statement; any other word only counts as a tag when the opening
# fence line ends right after it.
_SQL_TAGS = "sql|tsql|t-sql|mysql|postgresql|postgres|pgsql|plpgsql|plsql|sqlite"
_FENCED_BLOCK = re.compile(
    rf"```(?:[ \t]*(?i:{_SQL_TAGS})(?=\s)|[ \t]*[A-Za-z0-9_+-]*[ \t]*\r?\n)?(.*?)```",
    re.DOTALL,
)


def extract_sql(raw_text: str) -> str:
    """Strip markdown code fences from model output.

    If the text contains a fenced block (with or without a language tag), the
    interior of the first complete block is returned, trimmed. Otherwise the
    trimmed text is returned unchanged. Never raises.

    Example:
        >>> extract_sql("```sql\\nSELECT TOP 100 * FROM Products\\n```")
        'SELECT TOP 100 * FROM Products'
    """
    if not raw_text:
        return ""
    text = raw_text.strip()
    match = _FENCED_BLOCK.search(text)
    if match is None:
        return text
    return match.group(1).strip()
