"""Query execution with a single reconnect-and-retry on dropped sessions."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from mysql.connector import Error as MySQLError

from .connection import ConnectionManager
from .errors import DatabaseError, TransientConnectionError, WriteNotAllowedError
from .faults import translate
from .models import NOT_FOUND, ConnectionConfig, Params, Query, QueryKind, QueryResult
from .sql import Fields, build_delete, build_insert, build_projection, build_update

logger = logging.getLogger(__name__)

MAX_RETRIES = 1

Row = Dict[str, Any]


@dataclass
class RetryState:
    """Per-call record of whether the one allowed retry has been used."""

    attempts: int = 0
    reconnected: bool = False

    @property
    def can_retry(self) -> bool:
        return self.attempts <= MAX_RETRIES and not self.reconnected


def _fetch_scalar(cursor) -> Any:
    if not cursor.description:
        return NOT_FOUND
    row = cursor.fetchone()
    return NOT_FOUND if row is None else row[0]


def _fetch_rows(cursor) -> List[Row]:
    # statements without a result set (DDL, KILL) have no description
    if not cursor.description:
        return []
    return list(cursor.fetchall())


def _fetch_one(cursor) -> Any:
    if not cursor.description:
        return NOT_FOUND
    row = cursor.fetchone()
    return NOT_FOUND if row is None else row


def _last_row_id(cursor) -> Any:
    return cursor.lastrowid


def _row_count(cursor) -> Union[int, bool]:
    # the driver reports -1 when it has no count for the statement
    if cursor.rowcount is None or cursor.rowcount < 0:
        return False
    return cursor.rowcount


def _executed(cursor) -> bool:
    return True


# (uses dictionary cursor, result reader) per operation shape
_HANDLERS: Dict[QueryKind, tuple] = {
    QueryKind.SCALAR: (False, _fetch_scalar),
    QueryKind.ROWS: (True, _fetch_rows),
    QueryKind.PROJECTION: (True, _fetch_rows),
    QueryKind.FIND_ONE: (True, _fetch_one),
    QueryKind.INSERT: (False, _last_row_id),
    QueryKind.UPDATE: (False, _row_count),
    QueryKind.DELETE: (False, _executed),
}


class QueryExecutor:
    """Runs queries against a ``ConnectionManager``.

    Every operation is attempted once. If the session turns out to have been
    dropped, the manager reconnects and the identical query is attempted one
    more time; whatever that second attempt produces is final. All other
    failures are raised immediately without reconnecting.
    """

    def __init__(
        self,
        manager: ConnectionManager,
        allowed_write_hosts: Iterable[str] = (),
    ):
        self.manager = manager
        self.allowed_write_hosts = frozenset(allowed_write_hosts)

    @classmethod
    def from_settings(cls, settings=None, connect_factory: Optional[Callable[..., Any]] = None) -> "QueryExecutor":
        """Build a fresh manager and executor from application settings."""
        if settings is None:
            from ..config.settings import get_settings
            settings = get_settings()
        manager = ConnectionManager(settings.connection_config(), connect_factory=connect_factory)
        return cls(manager, allowed_write_hosts=settings.write_hosts)

    @classmethod
    def from_config(cls, config: ConnectionConfig, **kwargs) -> "QueryExecutor":
        return cls(ConnectionManager(config), **kwargs)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def scalar(self, sql: str, params: Params = None) -> Any:
        """First column of the first row, or ``NOT_FOUND`` when there is no row."""
        return self.run(Query(QueryKind.SCALAR, sql, params))

    def rows(self, sql: str, params: Params = None) -> List[Row]:
        """All result rows as column-name mappings."""
        return self.run(Query(QueryKind.ROWS, sql, params))

    def projection(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        where: Optional[str] = None,
        params: Params = None,
    ) -> List[Row]:
        """SELECT the given columns (all by default) from ``table``."""
        return self.run(build_projection(table, columns, where, params))

    def find_one(self, sql: str, params: Params = None) -> Any:
        """First result row, or ``NOT_FOUND``."""
        return self.run(Query(QueryKind.FIND_ONE, sql, params))

    def insert(self, table: str, data: Fields) -> Any:
        """Insert one row and return the id the server assigned to it."""
        return self.run(build_insert(table, data))

    def update(
        self,
        table: str,
        data: Fields,
        where: Union[Fields, str, None] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Union[int, bool]:
        """Update rows; returns the changed-row count, or False without one."""
        return self.run(build_update(table, data, where, params))

    def delete(self, table: str, where: str, params: Params = None) -> bool:
        return self.run(build_delete(table, where, params))

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, query: Query) -> QueryResult:
        """Run a prebuilt query and report the outcome instead of raising."""
        start_time = time.time()
        reconnects = self.manager.reconnect_count
        result = QueryResult(query=query, timestamp=datetime.now())
        try:
            result.value = self.run(query)
        except DatabaseError as e:
            result.error = e
        result.execution_time = time.time() - start_time
        result.reconnected = self.manager.reconnect_count > reconnects
        return result

    def run(self, query: Query) -> Any:
        """Run a query under the retry policy, raising ``DatabaseError`` on failure."""
        self._check_write_allowed(query)
        state = RetryState()
        while True:
            state.attempts += 1
            try:
                return self._attempt(query)
            except MySQLError as e:
                error = translate(e, query=query, retried=state.reconnected)
                if isinstance(error, TransientConnectionError) and state.can_retry:
                    logger.warning(f"Connection lost ({error}); reconnecting and retrying once")
                    state.reconnected = True
                    self.manager.reconnect()
                    continue
                logger.error(f"Query failed: {error}")
                raise error from e

    def _attempt(self, query: Query) -> Any:
        dictionary, reader = _HANDLERS[query.kind]
        handle = self.manager.current_handle()
        cursor = handle.cursor(buffered=True, dictionary=dictionary)
        try:
            logger.debug(f"Executing {query.kind.value}: {query.sql}")
            cursor.execute(query.sql, query.bound_params())
            return reader(cursor)
        finally:
            try:
                cursor.close()
            except MySQLError as e:
                logger.debug(f"Ignoring error while closing cursor: {e}")

    def _check_write_allowed(self, query: Query) -> None:
        if not query.kind.is_write or not self.allowed_write_hosts:
            return
        host = self.manager.config.host
        if host not in self.allowed_write_hosts:
            raise WriteNotAllowedError(
                f"Writes are only allowed to {', '.join(sorted(self.allowed_write_hosts))}; "
                f"refusing {query.kind.value} on {host}",
                query=query,
            )

    def close(self) -> None:
        self.manager.close()

    def __enter__(self) -> "QueryExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
