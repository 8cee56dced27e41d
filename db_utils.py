# db_utils.py — Postgres helpers for the progress plot job.
# Read-only: the job only ever lists searches, it never writes.

from __future__ import annotations
import logging
import uuid as _uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Tuple

import psycopg2

logger = logging.getLogger("db_utils")


class DatabaseConnectionError(ConnectionError):
    """The database could not be reached."""


class QueryError(Exception):
    """A statement failed to execute."""

    def __init__(self, message: str, query: str = ""):
        super().__init__(message)
        self.query = query


def _sanitize_query_for_log(query: str, max_length: int = 200) -> str:
    """Collapse whitespace and truncate long statements for log output"""
    flat = " ".join(query.split())
    if len(flat) > max_length:
        return flat[:max_length] + "..."
    return flat


def _conn(dsn: Optional[str] = None, connect_timeout: Optional[int] = None):
    """Open a new connection, resolving the DSN from the environment when not given."""
    if dsn is None:
        from env_utils import get_database_url
        dsn = get_database_url()
    kwargs = {}
    if connect_timeout:
        kwargs["connect_timeout"] = connect_timeout
    try:
        return psycopg2.connect(dsn, **kwargs)
    except psycopg2.Error as e:
        logger.error("Failed to connect to database: %s", e)
        raise DatabaseConnectionError(f"Could not connect to database: {e}") from e


@contextmanager
def _get_db_connection(dsn: Optional[str] = None, connect_timeout: Optional[int] = None):
    """Context manager that guarantees the connection is closed and the transaction ended"""
    conn = _conn(dsn, connect_timeout)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def iter_rows(query: str, params: tuple = (), dsn: Optional[str] = None,
              fetch_size: int = 500, connect_timeout: Optional[int] = None) -> Iterator[Tuple[Any, ...]]:
    """Stream rows through a server-side cursor.

    Nothing touches the database until the generator is first advanced.
    The connection is closed when the generator is exhausted or closed.
    """
    with _get_db_connection(dsn, connect_timeout) as conn:
        # Named cursors are server-side; the name only has to be unique per connection
        cursor_name = f"iter_rows_{_uuid.uuid4().hex[:12]}"
        with conn.cursor(name=cursor_name) as cur:
            cur.itersize = fetch_size
            try:
                cur.execute(query, params)
                for row in cur:
                    yield row
            except psycopg2.Error as e:
                logger.error("Query failed: %s (%s)", _sanitize_query_for_log(query), e)
                raise QueryError(f"Query failed: {e}", query=query) from e
