"""Executor Agent - RLS scoped SQL execution over a shared pool."""

from .executor import (
    RLSExecutor,
    RLSContext,
    ContextState,
    RLSContextError,
    ContextBindingError,
    QueryExecutionError,
)
from .pool import ConnectionPool

__all__ = [
    "RLSExecutor",
    "RLSContext",
    "ContextState",
    "RLSContextError",
    "ContextBindingError",
    "QueryExecutionError",
    "ConnectionPool",
]
