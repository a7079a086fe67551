"""Base repository protocol and utilities.

This module defines the interface that all repositories must implement.
"""
from contextlib import contextmanager
from typing import Iterator, Protocol
import sqlite3

from ...exceptions import ValidationError


class ConnectionProtocol(Protocol):
    """Protocol for database connection."""

    def execute(self, sql: str, parameters: tuple = ...) -> sqlite3.Cursor: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class Repository:
    """Base repository class.

    All repositories should inherit from this class.

    Example:
        class UserRepository(Repository):
            def get_by_id(self, user_id: int) -> dict | None:
                return self._fetchone("SELECT * FROM users WHERE id = ?", (user_id,))

    Methods that only take part in a larger unit of work (cascading deletes)
    do not commit; the calling service wraps them in ``database.transaction``.
    """

    def __init__(self, connection: ConnectionProtocol):
        """Initialize repository with database connection.

        Args:
            connection: Database connection (sqlite3.Connection or compatible)
        """
        self._conn = connection

    def _execute(self, sql: str, parameters: tuple = ()) -> sqlite3.Cursor:
        """Execute SQL query with parameters.

        Args:
            sql: SQL query string
            parameters: Query parameters (prevents SQL injection)

        Returns:
            sqlite3.Cursor with results
        """
        return self._conn.execute(sql, parameters)

    def _execute_many(self, sql: str, parameters_list: list[tuple]) -> sqlite3.Cursor:
        """Execute SQL query multiple times."""
        return self._conn.executemany(sql, parameters_list)

    def _commit(self) -> None:
        """Commit current transaction."""
        self._conn.commit()

    def _row_to_dict(self, row: sqlite3.Row | None) -> dict | None:
        """Convert sqlite3.Row to dictionary."""
        return dict(row) if row else None

    def _fetchone(self, sql: str, parameters: tuple = ()) -> dict | None:
        """Fetch single row and return as dict."""
        return self._row_to_dict(self._execute(sql, parameters).fetchone())

    def _fetchall(self, sql: str, parameters: tuple = ()) -> list[dict]:
        """Fetch all rows and return as list of dicts."""
        return [dict(row) for row in self._execute(sql, parameters).fetchall()]

    @contextmanager
    def _unique(self, message: str) -> Iterator[None]:
        """Translate a unique constraint violation into ValidationError.

        The store is the only arbiter of uniqueness, so a concurrent second
        writer surfaces here rather than being checked in memory.

        Args:
            message: User-facing message for the duplicate
        """
        try:
            yield
        except sqlite3.IntegrityError as e:
            if "UNIQUE" not in str(e).upper():
                raise
            self._conn.rollback()
            raise ValidationError(message) from e

    @staticmethod
    def _placeholders(values: list) -> str:
        return ",".join("?" for _ in values)
