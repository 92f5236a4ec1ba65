# =============================================================================
# database/connection.py
# =============================================================================
# PURPOSE:
#   Handles database connections. This is the ONLY file that knows how to
#   connect to the database. All other code borrows connections from here.
#
# CONNECTION POOL:
#   The server opens ONE pool when it starts and closes it when it stops.
#   The pool holds at most `size` SQLite connections. A request borrows a
#   connection, uses it, and gives it back. If every connection is busy the
#   request WAITS (up to `timeout` seconds) instead of failing straight away,
#   then gets PoolTimeoutError (SQLAlchemy's pool TimeoutError).
#
# SQLITE BASICS:
#   - SQLite is a file-based database (no server needed)
#   - SQLite handles multiple readers but only one writer at a time
#   - Foreign keys are OFF by default, so every connection turns them ON
# =============================================================================

import sqlite3
from contextlib import contextmanager

from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.pool import QueuePool


class PoolClosedError(RuntimeError):
    """Raised when borrowing from a pool that has been closed."""


def open_connection(db_path):
    """
    Create one configured connection to the SQLite database.

    NOTES:
        - isolation_level=None puts sqlite3 in autocommit mode; callers that
          need several statements to be atomic issue BEGIN/COMMIT themselves
        - check_same_thread=False because the web server hands connections
          to worker threads
        - Rows come back as sqlite3.Row so they can be turned into dicts
    """
    conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


class ConnectionPool:
    """
    A bounded pool of SQLite connections.

    USAGE:
        pool = ConnectionPool("cartera.db", size=5, timeout=10)
        with pool.connection() as conn:
            conn.execute("SELECT * FROM customers")
        pool.close()

    The pooling itself is SQLAlchemy's QueuePool (no overflow, so `size` is
    a hard limit). Connections are created lazily, so a pool that is never
    used never touches the database file. What comes out of connection()
    is the plain sqlite3 connection; all SQL stays raw sqlite3.
    """

    def __init__(self, db_path, size=5, timeout=10.0):
        if size < 1:
            raise ValueError("Pool size must be at least 1")
        self.db_path = db_path
        self.size = size
        self.timeout = timeout
        self._pool = QueuePool(
            lambda: open_connection(db_path),
            pool_size=size,
            max_overflow=0,
            timeout=timeout,
        )
        self._closed = False

    @contextmanager
    def connection(self):
        """
        Borrow a connection and always give it back.

        RAISES:
            PoolClosedError: the pool has been closed
            PoolTimeoutError: every connection stayed busy for `timeout` seconds
        """
        if self._closed:
            raise PoolClosedError("Connection pool is closed")

        proxy = self._pool.connect()
        try:
            yield proxy.dbapi_connection
        finally:
            # Back to the pool; QueuePool rolls back anything left open
            proxy.close()

    def close(self):
        """Close every idle connection and refuse new borrowers."""
        self._closed = True
        self._pool.dispose()
        print(f"[INFO] Connection pool for {self.db_path} closed")

    @property
    def closed(self):
        return self._closed


@contextmanager
def transaction(conn):
    """
    Run a block of statements as ONE database transaction.

    BEGIN IMMEDIATE takes the write lock up front, so a SELECT followed by
    an INSERT inside the block cannot be interleaved with another writer.
    Commits on success, rolls back and re-raises on any exception.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    conn.commit()
