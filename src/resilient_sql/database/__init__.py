"""Database connection and query execution module."""

from .connection import ConnectionManager
from .errors import (
    DatabaseConnectionError,
    DatabaseError,
    QueryError,
    TransientConnectionError,
    WriteNotAllowedError,
)
from .executor import QueryExecutor, RetryState
from .models import NOT_FOUND, ConnectionConfig, ErrorKind, Query, QueryKind, QueryResult
from .sql import build_delete, build_insert, build_projection, build_update

__all__ = [
    "ConnectionManager",
    "QueryExecutor",
    "RetryState",
    "ConnectionConfig",
    "Query",
    "QueryKind",
    "QueryResult",
    "ErrorKind",
    "NOT_FOUND",
    "DatabaseError",
    "DatabaseConnectionError",
    "TransientConnectionError",
    "QueryError",
    "WriteNotAllowedError",
    "build_projection",
    "build_insert",
    "build_update",
    "build_delete",
]
