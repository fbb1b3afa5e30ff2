"""Database manager for pooled SQLite connections and parameterized queries."""

import re
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool

from config import Config, get_migrations_dir
from exceptions import StoreError
from logger import get_logger

logger = get_logger()

# Named placeholder, e.g. ":name" in "WHERE name = :name"
PLACEHOLDER_PATTERN = re.compile(r":(\w+)")


@dataclass
class QueryResult:
    """Outcome of a single statement.

    Attributes:
        rows: Rows returned by the statement (empty for writes).
        affected_rows: Rows changed by the statement as reported by SQLite.
        last_row_id: Rowid of the last inserted row, if any.
    """

    rows: List[sqlite3.Row] = field(default_factory=list)
    affected_rows: int = 0
    last_row_id: Optional[int] = None


def escape(cursor, value: Any) -> str:
    """Render a value as an SQL literal using SQLite's own quoting rules."""
    cursor.execute("SELECT quote(?)", (value,))
    return cursor.fetchone()[0]


def format_query(cursor, template: str, values: Optional[Mapping[str, Any]]) -> str:
    """Substitute ``:key`` placeholders in a query template.

    Keys present in ``values`` are replaced by their escaped literal. Keys
    that are missing stay in the statement untouched.

    Args:
        cursor: Cursor used to escape values.
        template: SQL text with ``:key`` placeholders.
        values: Mapping of placeholder name to value.

    Returns:
        The executable SQL statement.
    """
    if not values:
        return template

    def replace(match):
        key = match.group(1)
        if key in values:
            return escape(cursor, values[key])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, template)


def run_statement(
    cursor, template: str, values: Optional[Mapping[str, Any]]
) -> QueryResult:
    """Format and execute one statement on a cursor, without committing."""
    logger.debug(f"Query: {template}")
    cursor.execute(format_query(cursor, template, values))
    return QueryResult(
        rows=cursor.fetchall(),
        affected_rows=max(cursor.rowcount, 0),
        last_row_id=cursor.lastrowid,
    )


class Transaction:
    """Statements sharing one borrowed connection and one open transaction."""

    def __init__(self, cursor):
        self.cursor = cursor

    def query(
        self, template: str, values: Optional[Mapping[str, Any]] = None
    ) -> QueryResult:
        return run_statement(self.cursor, template, values)


class DatabaseManager:
    """Manages the connection pool, database paths and query execution.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        """Initialize the database manager.

        Args:
            config: Config object containing database configuration.
        """
        self.config = config
        self.pool = QueuePool(
            self._create_connection,
            pool_size=config.pool_size,
            max_overflow=0,
            timeout=config.pool_timeout,
        )

    def _create_connection(self) -> sqlite3.Connection:
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            db_path, timeout=self.config.busy_timeout, check_same_thread=False
        )
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def connect(self):
        """Borrow a pooled connection, returning it to the pool on exit.

        Blocks while the pool is exhausted, up to ``config.pool_timeout``.

        Yields:
            Pooled connection proxying a sqlite3.Connection.
        """
        conn = self.pool.connect()
        try:
            yield conn
        finally:
            conn.close()

    def query(
        self, template: str, values: Optional[Mapping[str, Any]] = None
    ) -> QueryResult:
        """Run one parameterized statement on a pooled connection.

        Args:
            template: SQL text with ``:key`` placeholders.
            values: Mapping of placeholder name to value.

        Returns:
            QueryResult with rows, affected row count and last inserted rowid.

        Raises:
            StoreError: If the pool or the database fails. The connection is
                back in the pool by the time this is raised.
        """
        try:
            with self.connect() as conn:
                cursor = conn.cursor()
                try:
                    result = run_statement(cursor, template, values)
                    conn.commit()
                    return result
                finally:
                    cursor.close()
        except (sqlite3.Error, SQLAlchemyError) as e:
            logger.error(f"Query failed: {e}")
            raise StoreError(str(e)) from e

    @contextmanager
    def transaction(self):
        """Run several statements on one pooled connection as a unit.

        The transaction starts with ``BEGIN IMMEDIATE``, so no other writer
        can get in between the statements. It commits when the block exits
        normally and rolls back when it raises.

        Yields:
            Transaction: Object whose ``query`` runs statements in the transaction.

        Raises:
            StoreError: If the pool or the database fails. Other exceptions
                raised in the block propagate unchanged after the rollback.
        """
        try:
            with self.connect() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute("BEGIN IMMEDIATE")
                    try:
                        yield Transaction(cursor)
                    except BaseException:
                        conn.rollback()
                        raise
                    conn.commit()
                finally:
                    cursor.close()
        except (sqlite3.Error, SQLAlchemyError) as e:
            logger.error(f"Transaction failed: {e}")
            raise StoreError(str(e)) from e

    def dispose(self):
        """Close every pooled connection."""
        self.pool.dispose()

    def get_db_path(self):
        """Get the current database path.

        Returns:
            Path: Path to the database file.
        """
        return self.config.db_path

    def get_migrations_dir(self):
        """Get the migrations directory path.

        Returns:
            Path: Path to the migrations directory.
        """
        return get_migrations_dir()
