"""
DuckDB Sandbox Service for SQL Solution Checking
===============================================
Runs a single query against a throwaway in-memory DuckDB instance that is
seeded from an exercise's schema and fixture data, then destroyed.
"""

import asyncio
import enum
import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, TimeoutError, wait
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import duckdb

from .config import Config
from .exceptions import ExecutionError, InfrastructureError

logger = logging.getLogger(__name__)


class CellKind(enum.Enum):
    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


@dataclass(frozen=True)
class Cell:
    """A single result value in canonical form"""
    kind: CellKind
    value: Any = None

    @classmethod
    def from_value(cls, value: Any) -> "Cell":
        """Canonicalize a native DuckDB value"""
        if value is None:
            return cls(CellKind.NULL)
        if isinstance(value, (bool, int)):
            return cls(CellKind.INTEGER, int(value))
        if isinstance(value, (float, Decimal)):
            return cls(CellKind.REAL, float(value))
        if isinstance(value, str):
            return cls(CellKind.TEXT, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(CellKind.BLOB, bytes(value))
        # Dates, times, intervals, UUIDs and nested types compare by their text form
        return cls(CellKind.TEXT, str(value))

    @property
    def is_null(self) -> bool:
        return self.kind is CellKind.NULL


@dataclass
class TabularResult:
    """Column names plus ordered rows of canonical cells"""
    columns: List[str] = field(default_factory=list)
    rows: List[Tuple[Cell, ...]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @classmethod
    def from_rows(cls, columns: List[str], raw_rows: List[tuple]) -> "TabularResult":
        return cls(
            columns=list(columns),
            rows=[tuple(Cell.from_value(value) for value in row) for row in raw_rows]
        )

    def to_records(self) -> List[Dict[str, Any]]:
        """Plain dict rows for display and logging"""
        return [
            {column: cell.value for column, cell in zip(self.columns, row)}
            for row in self.rows
        ]


def _is_blank(sql: Optional[str]) -> bool:
    return not sql or not sql.strip()


class DuckDBSandbox:
    """
    Isolated DuckDB instance for one query execution.

    Every instance owns its own in-memory database. Nothing is shared
    between instances, and the connection is closed by cleanup().
    """

    def __init__(self, timeout_seconds: float = Config.SANDBOX_QUERY_TIMEOUT_SECONDS,
                 memory_limit_mb: int = Config.SANDBOX_MEMORY_LIMIT_MB,
                 threads: int = Config.SANDBOX_THREADS,
                 max_result_rows: int = Config.SANDBOX_MAX_RESULT_ROWS,
                 sandbox_id: str = None):
        """
        Initialize DuckDB sandbox with memory and time limits

        Args:
            timeout_seconds: Maximum query execution time
            memory_limit_mb: Memory limit for the DuckDB instance
            threads: Worker threads DuckDB may use
            max_result_rows: Larger result sets are rejected
            sandbox_id: Unique identifier for this sandbox instance
        """
        self.id = sandbox_id or str(uuid.uuid4())
        self.timeout_seconds = timeout_seconds
        self.memory_limit_mb = int(memory_limit_mb)
        self.threads = int(threads)
        self.max_result_rows = max_result_rows
        self.conn = None

        self._initialize_connection()

    def _initialize_connection(self):
        """Open the in-memory instance and lock down its configuration"""
        try:
            # No file, network, extension or Python object access from learner SQL
            self.conn = duckdb.connect(":memory:", config={
                "memory_limit": f"{self.memory_limit_mb}MB",
                "threads": str(self.threads),
                "enable_external_access": "false"
            })
            self.conn.execute("SET lock_configuration = true")
        except (duckdb.Error, RuntimeError, MemoryError) as e:
            logger.error(f"Failed to initialize DuckDB sandbox {self.id}: {e}")
            self.cleanup()
            raise InfrastructureError(f"Failed to initialize sandbox environment: {e}") from e

        logger.debug(f"DuckDB sandbox {self.id} initialized with {self.memory_limit_mb}MB memory limit")

    def apply_schema(self, schema: Optional[str]):
        """Apply the exercise DDL as one batch"""
        if _is_blank(schema):
            return
        self._run_with_timeout(schema, stage="schema", error_prefix="Schema definition failed")

    def apply_fixture(self, fixture_insert: Optional[str]):
        """Seed fixture rows before the query under test runs"""
        if _is_blank(fixture_insert):
            return
        self._run_with_timeout(fixture_insert, stage="fixture", error_prefix="Fixture data failed")

    def execute_query(self, query: str) -> TabularResult:
        """Execute a query and collect at most max_result_rows rows"""
        if _is_blank(query):
            raise ExecutionError("Query is empty", stage="query", query=query)

        start_time = time.time()
        columns, rows = self._run_with_timeout(query, stage="query", fetch=True)

        if len(rows) > self.max_result_rows:
            raise ExecutionError(
                f"Result exceeds {self.max_result_rows} rows",
                stage="query",
                query=query
            )

        execution_time = (time.time() - start_time) * 1000
        logger.debug(f"Sandbox {self.id} returned {len(rows)} rows in {execution_time:.2f}ms")

        return TabularResult.from_rows(columns, rows)

    def _run_with_timeout(self, sql: str, stage: str, fetch: bool = False,
                          error_prefix: Optional[str] = None) -> Tuple[List[str], List[tuple]]:
        """
        Run SQL on a dedicated worker thread with an enforced wall-clock timeout

        When the timeout elapses the connection is interrupted, the worker is
        allowed to unwind, and ExecutionError(stage="timeout") is raised.
        DuckDB errors are raised as ExecutionError with the given stage.
        """
        def _execute():
            cursor = self.conn.execute(sql)
            if not fetch or cursor.description is None:
                return [], []
            columns = [desc[0] for desc in cursor.description]
            return columns, cursor.fetchmany(self.max_result_rows + 1)

        try:
            executor = ThreadPoolExecutor(max_workers=1)
        except RuntimeError as e:
            raise InfrastructureError(f"Failed to start query worker: {e}") from e

        try:
            future = executor.submit(_execute)
            try:
                return future.result(timeout=self.timeout_seconds)
            except TimeoutError:
                logger.warning(f"{stage.capitalize()} timeout after {self.timeout_seconds} seconds "
                               f"in sandbox {self.id}")
                self.conn.interrupt()
                # The connection must not be closed while the worker is still inside DuckDB
                wait([future])
                raise ExecutionError(
                    f"Query timeout after {self.timeout_seconds} seconds",
                    stage="timeout",
                    query=sql
                )
            except duckdb.Error as e:
                message = f"{error_prefix}: {e}" if error_prefix else str(e)
                raise ExecutionError(message, stage=stage, query=sql) from e
        finally:
            executor.shutdown(wait=False)

    def cleanup(self):
        """Close the DuckDB connection and release its memory"""
        if self.conn is None:
            return
        try:
            self.conn.close()
        except duckdb.Error as e:
            logger.error(f"Error during sandbox cleanup: {e}")
        finally:
            self.conn = None

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure cleanup"""
        self.cleanup()


class SandboxRunner:
    """
    Creates a fresh sandbox per call: create, seed, run, destroy.

    Sandboxes are never pooled, so concurrent calls cannot see each other's
    data.
    """

    def __init__(self, timeout_seconds: float = Config.SANDBOX_QUERY_TIMEOUT_SECONDS,
                 memory_limit_mb: int = Config.SANDBOX_MEMORY_LIMIT_MB,
                 threads: int = Config.SANDBOX_THREADS,
                 max_result_rows: int = Config.SANDBOX_MAX_RESULT_ROWS):
        self.timeout_seconds = timeout_seconds
        self.memory_limit_mb = memory_limit_mb
        self.threads = threads
        self.max_result_rows = max_result_rows

    def create_sandbox(self) -> DuckDBSandbox:
        return DuckDBSandbox(
            timeout_seconds=self.timeout_seconds,
            memory_limit_mb=self.memory_limit_mb,
            threads=self.threads,
            max_result_rows=self.max_result_rows
        )

    def execute(self, query: str, schema: Optional[str] = None,
                fixture_insert: Optional[str] = None) -> TabularResult:
        """Run one query in a brand new sandbox seeded with schema and fixture"""
        with self.create_sandbox() as sandbox:
            sandbox.apply_schema(schema)
            sandbox.apply_fixture(fixture_insert)
            return sandbox.execute_query(query)

    async def execute_async(self, query: str, schema: Optional[str] = None,
                            fixture_insert: Optional[str] = None) -> TabularResult:
        """Same as execute() without blocking the event loop"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.execute, query, schema, fixture_insert)


# Global runner instance
sandbox_runner = SandboxRunner()
