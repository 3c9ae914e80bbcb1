"""Request and result types for the NL2SQL gateway."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from askcatalog.exceptions import InputError


class QueryRequest(BaseModel):
    """An inbound natural-language question, kept exactly as the caller sent it."""

    model_config = ConfigDict(frozen=True)

    question: str

    @property
    def stripped(self) -> str:
        """The question without surrounding whitespace, as sent to the model."""
        return self.question.strip()

    @classmethod
    def parse(cls, question: str | None, max_length: int = 500) -> QueryRequest:
        """Check a raw question and wrap it.

        Both checks look at the trimmed question; the original text is kept
        so results echo it back unchanged.

        Raises:
            InputError: If the question is empty, whitespace-only or too long
        """
        cleaned = (question or "").strip()
        if not cleaned:
            raise InputError("The field 'question' is required.")
        if len(cleaned) > max_length:
            raise InputError(
                f"The field 'question' cannot exceed {max_length} characters.",
                max_length=max_length,
            )
        return cls(question=question)


class GeneratedStatement(BaseModel):
    """Verbatim model output and the SQL recovered from it."""

    model_config = ConfigDict(frozen=True)

    raw_text: str
    extracted_sql: str


class QueryResult(BaseModel):
    """Tabular answer to a question.

    Serialized with camelCase keys (``generatedSql``, ``rowCount``,
    ``executionTimeMs``) for the catalog front-end.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    question: str
    generated_sql: str
    columns: list[str] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int
    execution_time_ms: int
