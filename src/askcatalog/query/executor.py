"""Bounded, read-only execution of validated statements.

Only statements accepted by the safety validator reach this module. Each
execution:
- Checks out a pooled connection and returns it on every exit path
- Puts the session in read-only mode where the dialect allows it
- Applies a server-side statement timeout (an interrupt handler on SQLite), plus a
  client-side deadline
- Streams rows and stops after ``row_cap`` rows, whatever the statement's own
  TOP/LIMIT says
"""

from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

from askcatalog.exceptions import ExecutionError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncConnection

    from askcatalog.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionOutcome:
    """Columns in projection order and rows in the order the store returned them.

    NULL cells are ``None``.
    """

    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)


class QueryExecutor(ABC):
    """Interface for running an accepted statement against the data store."""

    @abstractmethod
    async def execute(self, sql: str, row_cap: int, timeout: float) -> ExecutionOutcome:
        """Run ``sql`` and return at most ``row_cap`` rows.

        Args:
            sql: Statement accepted by the safety validator
            row_cap: Maximum number of rows to read
            timeout: Execution deadline in seconds

        Raises:
            ExecutionError: On connection, timeout or execution failures
        """
        ...

    async def aclose(self) -> None:
        """Release resources held by the executor."""
        return None


class BoundedQueryExecutor(QueryExecutor):
    """Executes statements through a :class:`DatabaseConnection` pool."""

    def __init__(self, connection: DatabaseConnection, read_only_session: bool = True) -> None:
        """Initialize the executor.

        Args:
            connection: Connection owning the engine and pool
            read_only_session: Put each session in read-only mode where supported
        """
        self._connection = connection
        self._read_only_session = read_only_session

    async def execute(self, sql: str, row_cap: int, timeout: float) -> ExecutionOutcome:
        if row_cap <= 0:
            raise ValueError("row_cap must be positive")
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        deadline = time.monotonic() + timeout
        try:
            async with asyncio.timeout(timeout):
                return await self._run(sql, row_cap, timeout, deadline)
        except TimeoutError as e:
            raise _timed_out(timeout) from e
        except ExecutionError:
            raise
        except Exception as e:
            # Server-side timeouts and interrupts surface as driver errors
            if time.monotonic() >= deadline:
                raise _timed_out(timeout) from e
            raise ExecutionError(f"Query execution failed: {e}") from e

    async def _run(
        self, sql: str, row_cap: int, timeout: float, deadline: float
    ) -> ExecutionOutcome:
        engine = self._connection.engine
        async with engine.connect() as conn:
            interrupt = await self._apply_session_guards(conn, timeout, deadline)
            # Cancellation must reach this frame before it reaches the driver
            read = asyncio.ensure_future(self._read(conn, sql, row_cap))
            try:
                outcome = await asyncio.shield(read)
            except asyncio.CancelledError:
                if interrupt is not None:
                    interrupt.cancelled.set()
                else:
                    read.cancel()
                await asyncio.gather(read, return_exceptions=True)
                raise
            finally:
                if interrupt is not None:
                    await interrupt.remove(conn)
            # Nothing may persist from a read; end the transaction explicitly
            await conn.rollback()
        return outcome

    async def _read(self, conn: AsyncConnection, sql: str, row_cap: int) -> ExecutionOutcome:
        result = await conn.stream(text(sql))
        try:
            columns = list(result.keys())
            rows: list[dict[str, Any]] = []
            async for row in result:
                rows.append(dict(zip(columns, row, strict=True)))
                if len(rows) >= row_cap:
                    logger.debug("Row cap of %d reached, stopping read", row_cap)
                    break
        finally:
            await result.close()
        return ExecutionOutcome(columns=columns, rows=rows)

    async def _apply_session_guards(
        self, conn: AsyncConnection, timeout: float, deadline: float
    ) -> _SqliteInterrupt | None:
        dialect = conn.dialect.name
        timeout_ms = max(1, int(timeout * 1000))

        if dialect == "postgresql":
            if self._read_only_session:
                await conn.execute(text("SET TRANSACTION READ ONLY"))
            await conn.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))
        elif dialect == "mysql":
            if self._read_only_session:
                await conn.execute(text("SET TRANSACTION READ ONLY"))
            await conn.execute(text(f"SET SESSION MAX_EXECUTION_TIME = {timeout_ms}"))
        elif dialect == "mssql":
            await conn.execute(text(f"SET LOCK_TIMEOUT {timeout_ms}"))
            # pyodbc applies this as SQL_ATTR_QUERY_TIMEOUT on every statement
            raw = await conn.get_raw_connection()
            raw.driver_connection._conn.timeout = math.ceil(timeout)
        elif dialect == "sqlite":
            if self._read_only_session:
                await conn.execute(text("PRAGMA query_only = ON"))
            interrupt = _SqliteInterrupt(deadline)
            await interrupt.install(conn)
            return interrupt
        return None

    async def aclose(self) -> None:
        """Dispose of the connection pool."""
        await self._connection.close()


class _SqliteInterrupt:
    """Progress handler that aborts a running SQLite statement.

    SQLite has no statement timeout and aiosqlite runs statements in a worker
    thread that task cancellation cannot reach. The handler is polled by SQLite
    every thousand VM steps and stops the statement once the deadline has
    passed or the caller has gone away.
    """

    STEPS = 1000

    def __init__(self, deadline: float) -> None:
        self.deadline = deadline
        self.cancelled = threading.Event()

    def __call__(self) -> int:
        if self.cancelled.is_set() or time.monotonic() >= self.deadline:
            return 1
        return 0

    async def install(self, conn: AsyncConnection) -> None:
        raw = await conn.get_raw_connection()
        await raw.driver_connection.set_progress_handler(self, self.STEPS)

    async def remove(self, conn: AsyncConnection) -> None:
        raw = await conn.get_raw_connection()
        await raw.driver_connection.set_progress_handler(None, 0)


def _timed_out(timeout: float) -> ExecutionError:
    return ExecutionError(
        f"Query timed out after {timeout:g} seconds.",
        {"timeout_seconds": timeout},
    )
