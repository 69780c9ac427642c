"""Executor Agent for row-level-security scoped SQL execution."""

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2 import extras

from .pool import ConnectionPool

logger = logging.getLogger(__name__)

_ROLE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class RLSContextError(Exception):
    """Base error for scoped execution."""


class ContextBindingError(RLSContextError):
    """Identity binding or privilege de-escalation failed; nothing was executed."""


class QueryExecutionError(RLSContextError):
    """The database rejected the query while running under the restricted role."""


class ContextState(str, Enum):
    """Lifecycle of one scoped execution."""

    IDLE = "idle"
    IDENTITY_BOUND = "identity_bound"
    RESTRICTED = "restricted"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    RESTORED = "restored"


class RLSContext:
    """One caller's security context on one pooled connection.

    Entering binds the caller identity and switches to the restricted role.
    Exiting resets the role, clears the identity and returns the connection,
    on every exit path. If the reset cannot be confirmed the connection is
    discarded instead of going back to the pool.

    Usage:
        with RLSContext(pool, caller_id) as ctx:
            rows = ctx.execute("SELECT id FROM orders")
    """

    def __init__(
        self,
        pool: ConnectionPool,
        caller_id: str,
        role: str = "app_user",
        identity_setting: str = "app.current_user_id"
    ):
        self.pool = pool
        self.caller_id = caller_id
        self.role = role
        self.identity_setting = identity_setting
        self.state = ContextState.IDLE
        self.active = False
        self.restored = False
        self._connection = None
        self._cursor = None

    def __enter__(self) -> "RLSContext":
        if not self.caller_id:
            raise ContextBindingError("Caller ID is required to bind RLS context")

        try:
            self._connection = self.pool.acquire()
        except psycopg2.Error as e:
            raise ContextBindingError(f"Could not acquire connection: {e}") from e

        try:
            self._cursor = self._connection.cursor(cursor_factory=extras.RealDictCursor)
            self._cursor.execute(
                "SELECT set_config(%s, %s, false)",
                (self.identity_setting, self.caller_id)
            )
            self.state = ContextState.IDENTITY_BOUND

            self._cursor.execute(f"SET ROLE {self.role}")
            self.state = ContextState.RESTRICTED
            self.active = True
        except psycopg2.Error as e:
            logger.error(f"RLS context binding failed in state {self.state.value}: {e}")
            self._teardown()
            raise ContextBindingError(f"Failed to bind RLS context: {e}") from e

        return self

    def execute(self, sql_query: str) -> List[Dict[str, Any]]:
        """Run a query under the restricted role and return its rows."""
        if self.state != ContextState.RESTRICTED:
            raise RLSContextError(
                f"Query can only run in a restricted context (state={self.state.value})"
            )

        self.state = ContextState.EXECUTING
        try:
            self._cursor.execute(sql_query)
            rows = self._cursor.fetchall() if self._cursor.description else []
        except psycopg2.Error as e:
            self.state = ContextState.FAILED
            raise QueryExecutionError(f"Database error: {e}") from e

        self.state = ContextState.COMPLETED
        return [dict(row) for row in rows]

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._teardown()
        return False

    def _teardown(self):
        if self._connection is None:
            return

        # Without a cursor the session state is unknown
        discard = self._cursor is None
        try:
            if self._cursor is not None:
                self._cursor.execute("RESET ROLE")
                self._cursor.execute(
                    "SELECT set_config(%s, '', false)",
                    (self.identity_setting,)
                )
                self.state = ContextState.RESTORED
                self.restored = True
        except psycopg2.Error as e:
            logger.error(f"Could not restore session privilege, discarding connection: {e}")
            discard = True
        finally:
            self.active = False
            if self._cursor is not None:
                try:
                    self._cursor.close()
                except psycopg2.Error:
                    discard = True
            self.pool.release(self._connection, discard=discard)
            self._connection = None
            self._cursor = None
            if self.state == ContextState.RESTORED:
                self.state = ContextState.IDLE


class RLSExecutor:
    """Execute validated SQL inside a caller-scoped RLS context."""

    def __init__(
        self,
        pool: ConnectionPool,
        role: str = "app_user",
        identity_setting: str = "app.current_user_id"
    ):
        """Initialize RLS Executor.

        Args:
            pool: Shared connection pool
            role: Restricted role that RLS policies apply to
            identity_setting: Session setting the policies read the caller from
        """
        if not _ROLE_PATTERN.match(role):
            raise ValueError(f"Invalid role name: {role!r}")

        self.pool = pool
        self.role = role
        self.identity_setting = identity_setting
        logger.info(f"RLSExecutor initialized (role={role}, setting={identity_setting})")

    def session(self, caller_id: str) -> RLSContext:
        """Create a scoped context for one execution."""
        return RLSContext(
            self.pool,
            caller_id,
            role=self.role,
            identity_setting=self.identity_setting
        )

    def execute_scoped(self, caller_id: str, sql_query: str) -> List[Dict[str, Any]]:
        """Execute SQL as ``caller_id`` and return the visible rows.

        Raises:
            ContextBindingError: If identity binding or de-escalation failed
            QueryExecutionError: If the query itself failed
        """
        logger.info(f"Executing SQL for caller {caller_id}: {sql_query[:100]}...")
        start_time = datetime.now()

        with self.session(caller_id) as ctx:
            rows = ctx.execute(sql_query)

        execution_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Query executed successfully: {len(rows)} rows, {execution_time:.2f}s")
        return rows
