"""Shared PostgreSQL connection pool."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg2
from psycopg2.pool import PoolError, ThreadedConnectionPool

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Lazily created, thread-safe pool of read-only connections."""

    def __init__(
        self,
        db_host: Optional[str],
        db_port: int,
        db_name: Optional[str],
        db_user: Optional[str],
        db_password: Optional[str],
        min_connections: int = 1,
        max_connections: int = 10,
        query_timeout: int = 30,
        acquire_timeout: float = 10.0
    ):
        """Initialize the pool configuration. No connection is opened here.

        Args:
            db_host: Database host
            db_port: Database port
            db_name: Database name
            db_user: Database user
            db_password: Database password
            min_connections: Connections kept open by the pool
            max_connections: Upper bound on concurrent checkouts
            query_timeout: Statement timeout in seconds
            acquire_timeout: Seconds to wait for a free connection
        """
        self.db_config = {
            'host': db_host,
            'port': db_port,
            'database': db_name,
            'user': db_user,
            'password': db_password
        }
        self.min_connections = min_connections
        self.max_connections = max_connections
        self.query_timeout = query_timeout
        self.acquire_timeout = acquire_timeout
        self._pool: Optional[ThreadedConnectionPool] = None
        self._lock = threading.Lock()
        # ThreadedConnectionPool raises at once when exhausted; callers wait here instead
        self._slots = threading.BoundedSemaphore(max_connections)

    def _get_pool(self) -> ThreadedConnectionPool:
        if self._pool is None:
            with self._lock:
                if self._pool is None:
                    self._pool = ThreadedConnectionPool(
                        self.min_connections,
                        self.max_connections,
                        **self.db_config
                    )
                    logger.info(
                        f"Connection pool opened ({self.min_connections}-{self.max_connections} "
                        f"connections to {self.db_config['host']}:{self.db_config['port']})"
                    )
        return self._pool

    def acquire(self):
        """Check out a connection set to read-only autocommit with a statement timeout.

        Blocks up to ``acquire_timeout`` seconds while every connection is in use.

        Raises:
            PoolError: If no connection freed up in time
        """
        if not self._slots.acquire(timeout=self.acquire_timeout):
            raise PoolError(
                f"connection pool exhausted: no connection free after {self.acquire_timeout}s"
            )

        try:
            conn = self._get_pool().getconn()
        except Exception:
            self._slots.release()
            raise

        cursor = None
        try:
            conn.set_session(readonly=True, autocommit=True)
            cursor = conn.cursor()
            cursor.execute(f"SET statement_timeout = {self.query_timeout * 1000}")
        except psycopg2.Error:
            self.release(conn, discard=True)
            raise
        finally:
            if cursor:
                cursor.close()
        return conn

    def release(self, conn, discard: bool = False):
        """Return a connection to the pool, closing it when ``discard`` is set."""
        if discard:
            logger.warning("Discarding pooled connection")
        try:
            self._get_pool().putconn(conn, close=discard)
        finally:
            self._slots.release()

    @contextmanager
    def connection(self) -> Iterator:
        """Borrow a connection for a short read; broken connections are discarded."""
        conn = self.acquire()
        discard = False
        try:
            yield conn
        except (psycopg2.InterfaceError, psycopg2.OperationalError):
            discard = True
            raise
        finally:
            self.release(conn, discard=discard)

    def close(self):
        """Close every pooled connection."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("Connection pool closed")
