"""Database connection and query execution."""

from __future__ import annotations

from contextlib import contextmanager
import logging
import math
from typing import Any, Generator, Optional, Protocol, Sequence

import pyodbc

from .config import DatabaseConnection
from .exceptions import ConnectError, DeadlineExceededError, QueryExecutionError, RowScanError
from .retry import Deadline, effective_timeout

logger = logging.getLogger(__name__)


class Database(Protocol):
    """The capability the pipeline needs: run a query, get columns and rows."""

    def query(self, sql: str, deadline: Optional[Deadline] = None) -> tuple[list[str], list[Sequence[Any]]]:
        ...

    def close(self) -> None:
        ...


class OdbcDatabase:
    """``Database`` backed by a pyodbc connection."""

    def __init__(self, conn: pyodbc.Connection) -> None:
        self._conn = conn

    def query(self, sql: str, deadline: Optional[Deadline] = None) -> tuple[list[str], list[Sequence[Any]]]:
        """Execute a SQL query and fetch every row.

        With a deadline, the remaining budget becomes the connection's query
        timeout (whole seconds, at least one).

        Raises:
            QueryExecutionError: If the server rejects or fails the statement
            RowScanError: If the rows cannot be fetched
            DeadlineExceededError: If the budget is spent before or during the query
        """
        if deadline is not None:
            self._conn.timeout = max(1, math.ceil(deadline.check("query execution")))

        logger.debug(f"Executing SQL: {sql[:200]}...")
        cursor = self._conn.cursor()
        try:
            try:
                cursor.execute(sql)
            except pyodbc.OperationalError as e:
                if deadline is not None and deadline.expired:
                    logger.error(f"Query timed out: {e}")
                    raise DeadlineExceededError(f"deadline exceeded during query execution: {e}") from e
                logger.error(f"Database operational error: {e}")
                raise QueryExecutionError(f"Database operation failed: {e}") from e
            except pyodbc.ProgrammingError as e:
                logger.error(f"SQL programming error: {e}")
                raise QueryExecutionError(f"Invalid SQL query: {e}") from e
            except pyodbc.Error as e:
                logger.error(f"Database error: {e}")
                raise QueryExecutionError(f"Database error: {e}") from e

            columns = [col[0] for col in cursor.description] if cursor.description else []
            try:
                rows = cursor.fetchall() if cursor.description else []
            except pyodbc.Error as e:
                logger.error(f"Failed to fetch rows: {e}")
                raise RowScanError(f"Failed to scan row: {e}") from e

            logger.debug(f"Query returned {len(rows)} rows, {len(columns)} columns")
            return columns, [tuple(row) for row in rows]
        finally:
            cursor.close()

    def close(self) -> None:
        self._conn.close()


def connect(connection: DatabaseConnection, deadline: Optional[Deadline] = None) -> OdbcDatabase:
    """Open a database connection.

    Raises:
        ConnectError: If connection fails
    """
    timeout = effective_timeout(connection.timeout, deadline, "database connect")
    try:
        conn = pyodbc.connect(connection.connection_string, timeout=max(1, math.ceil(timeout)))
    except pyodbc.Error as e:
        logger.error(f"Failed to connect to database {connection.database}@{connection.host}: {e}")
        raise ConnectError(f"Failed to connect to database: {e}") from e
    return OdbcDatabase(conn)


@contextmanager
def get_db_connection(
    connection: DatabaseConnection,
    deadline: Optional[Deadline] = None,
) -> Generator[OdbcDatabase, None, None]:
    """Context manager for database connections.

    Example:
        with get_db_connection(settings.connection) as db:
            columns, rows = db.query("SELECT 1")
    """
    db = connect(connection, deadline)
    try:
        yield db
    finally:
        db.close()
