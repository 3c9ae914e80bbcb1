"""NL2SQL gateway: question in, validated and bounded query result out.

Pipeline for one question:
    prompt -> model call -> extract -> validate -> execute -> assemble

The gateway holds no per-request state, so one instance serves any number of
concurrent questions. Model calls and query execution are awaited, so
cancelling the calling task (client disconnect, overall deadline) aborts
whichever is in flight. A database connection is only checked out inside the
execute step, never while waiting on the model.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from askcatalog.core.config import GatewaySettings
from askcatalog.core.types import GeneratedStatement, QueryRequest, QueryResult
from askcatalog.exceptions import (
    AskCatalogError,
    ExecutionError,
    GenerationError,
    ValidationError,
)
from askcatalog.llm.provider import LanguageModelClient, SamplingConfig
from askcatalog.query.assembler import assemble_result
from askcatalog.query.executor import BoundedQueryExecutor, ExecutionOutcome, QueryExecutor
from askcatalog.query.extractor import extract_sql
from askcatalog.query.prompt import PromptBuilder
from askcatalog.query.validator import Accepted, SqlSafetyValidator, ValidationVerdict

if TYPE_CHECKING:
    from askcatalog.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)


class QueryGateway:
    """Turns natural-language questions into safe, bounded query results.

    Built from three collaborators: a language model client, a query
    executor and settings.

    Example:
        >>> gateway = QueryGateway(OpenAIClient(), executor, GatewaySettings())
        >>> result = await gateway.process_question("Which products are out of stock?")
        >>> print(result.generated_sql, result.row_count)
    """

    def __init__(
        self,
        model_client: LanguageModelClient,
        executor: QueryExecutor,
        settings: GatewaySettings | None = None,
    ) -> None:
        self._model_client = model_client
        self._executor = executor
        self._settings = settings or GatewaySettings()
        self._prompt_builder = PromptBuilder(
            schema_description=self._settings.schema_description,
            table_name=self._settings.table_name,
            row_cap=self._settings.row_cap,
            dialect=self._settings.resolved_dialect,
        )
        self._validator = SqlSafetyValidator(
            forbidden_tokens=self._settings.forbidden_tokens,
            allowed_tables=self._settings.allowed_tables or None,
        )
        self._sampling = SamplingConfig(
            temperature=self._settings.temperature,
            max_output_tokens=self._settings.max_output_tokens,
        )

    @classmethod
    def from_settings(
        cls,
        settings: GatewaySettings,
        model_client: LanguageModelClient | None = None,
        connection: DatabaseConnection | None = None,
    ) -> QueryGateway:
        """Wire a gateway with the default client and executor for ``settings``.

        Args:
            settings: Gateway settings
            model_client: Client to use instead of the configured provider
            connection: Connection to use instead of one built from database_url
        """
        from askcatalog.core.connection import DatabaseConnection
        from askcatalog.llm import get_client

        if model_client is None:
            model_client = get_client(
                settings.model_provider,
                model=settings.model,
                api_key=settings.api_key,
                base_url=settings.model_base_url,
            )
        if connection is None:
            connection = DatabaseConnection(settings.database_url)
        return cls(model_client, BoundedQueryExecutor(connection), settings)

    @property
    def settings(self) -> GatewaySettings:
        return self._settings

    @property
    def prompt_builder(self) -> PromptBuilder:
        return self._prompt_builder

    @property
    def validator(self) -> SqlSafetyValidator:
        return self._validator

    async def process_question(self, question: str) -> QueryResult:
        """Answer a question with rows from the catalog.

        Args:
            question: Free-text question from the caller

        Returns:
            QueryResult with the generated SQL, columns, rows and timing

        Raises:
            InputError: Empty or oversized question
            GenerationError: Model failed, timed out or returned nothing usable
            ValidationError: Generated SQL was rejected (never executed)
            ExecutionError: Data store failed or timed out
        """
        request = QueryRequest.parse(question, max_length=self._settings.question_max_length)
        deadline = self._settings.request_timeout
        start_time = time.perf_counter()
        statement: GeneratedStatement | None = None
        try:
            async with asyncio.timeout(deadline):
                statement = await self.generate(request.stripped)
                sql = self._accept(statement)
                outcome = await self._execute(sql)
        except TimeoutError as e:
            message = f"Request exceeded the {deadline:g} second deadline."
            context = {"timeout_seconds": deadline}
            if statement is None:
                raise GenerationError(message, context) from e
            raise ExecutionError(message, context) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        return assemble_result(request.question, sql, outcome, elapsed_ms)

    async def generate(self, question: str) -> GeneratedStatement:
        """Ask the model for SQL and recover the statement from its output.

        Raises:
            GenerationError: If the model fails or returns no usable text
        """
        prompt = self._prompt_builder.build(question)
        try:
            raw_text = await self._model_client.generate(
                prompt.system_instruction, prompt.user_content, self._sampling
            )
        except AskCatalogError:
            raise
        except Exception as e:
            raise GenerationError(f"Language model request failed: {e}") from e

        if raw_text is None or not raw_text.strip():
            raise GenerationError("Language model returned an empty response.")

        extracted = extract_sql(raw_text)
        if not extracted:
            raise GenerationError("Language model response did not contain a statement.")

        logger.info("NL2SQL question: %s | SQL: %s", question, extracted)
        return GeneratedStatement(raw_text=raw_text, extracted_sql=extracted)

    def validate(self, sql: str) -> ValidationVerdict:
        """Run the safety validator on a statement."""
        return self._validator.validate(sql)

    def _accept(self, statement: GeneratedStatement) -> str:
        verdict = self._validator.validate(statement.extracted_sql)
        if not isinstance(verdict, Accepted):
            logger.warning(
                "Rejected generated SQL (%s): %s", verdict.reason, statement.extracted_sql
            )
            raise ValidationError(verdict.reason, statement.extracted_sql, verdict.token)
        for warning in verdict.warnings:
            logger.debug("Validation warning: %s", warning)
        return verdict.sql

    async def _execute(self, sql: str) -> ExecutionOutcome:
        try:
            return await self._executor.execute(
                sql,
                row_cap=self._settings.row_cap,
                timeout=self._settings.execution_timeout,
            )
        except ExecutionError as e:
            logger.error("Execution failed for SQL %s: %s", sql, e)
            raise

    async def aclose(self) -> None:
        """Close the model client and the executor."""
        await self._model_client.aclose()
        await self._executor.aclose()
