"""MySQL fault signatures.

Only errors that mean the session itself was dropped (idle timeout, server
restart, network cut) count as transient. These codes are specific to MySQL
and would have to be re-derived for any other backend.
"""

from typing import Optional

from mysql.connector import Error as MySQLError
from mysql.connector import errorcode

from .errors import DatabaseConnectionError, DatabaseError, QueryError, TransientConnectionError
from .models import ErrorKind, Query

# Server-side idle disconnect, MySQL 8.0.24+
ER_CLIENT_INTERACTION_TIMEOUT = 4031

TRANSIENT_ERRNOS = frozenset({
    errorcode.CR_SERVER_GONE_ERROR,
    errorcode.CR_SERVER_LOST,
    errorcode.CR_SERVER_LOST_EXTENDED,
    ER_CLIENT_INTERACTION_TIMEOUT,
})

TRANSIENT_MESSAGES = (
    "server has gone away",
    "lost connection to mysql server",
    "connection not available",
)


def is_transient(exc: MySQLError) -> bool:
    """Check if a driver error reports a dropped session."""
    if exc.errno in TRANSIENT_ERRNOS:
        return True
    # server errors may quote user data; only match text when there is no code
    if exc.errno not in (None, -1):
        return False
    message = (exc.msg or str(exc)).lower()
    return any(signature in message for signature in TRANSIENT_MESSAGES)


def classify(exc: MySQLError) -> ErrorKind:
    """Classify an error raised while executing a statement."""
    if is_transient(exc):
        return ErrorKind.TRANSIENT_CONNECTION
    return ErrorKind.QUERY


_ERROR_TYPES = {
    ErrorKind.CONNECTION: DatabaseConnectionError,
    ErrorKind.TRANSIENT_CONNECTION: TransientConnectionError,
    ErrorKind.QUERY: QueryError,
}


def translate(exc: MySQLError, query: Optional[Query] = None, retried: bool = False) -> DatabaseError:
    """Turn an execution-time driver error into the matching ``DatabaseError``."""
    return _ERROR_TYPES[classify(exc)].from_mysql(exc, query=query, retried=retried)
