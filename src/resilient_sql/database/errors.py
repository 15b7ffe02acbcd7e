"""Error taxonomy raised by the access layer."""

from typing import Optional

from mysql.connector import Error as MySQLError

from .models import ErrorKind, Query


class DatabaseError(RuntimeError):
    """Base class for classified database failures."""

    kind = ErrorKind.QUERY

    def __init__(
        self,
        msg: str,
        errno: Optional[int] = None,
        sqlstate: Optional[str] = None,
        query: Optional[Query] = None,
        retried: bool = False,
    ):
        super().__init__(msg)
        self.msg = msg
        self.errno = errno
        self.sqlstate = sqlstate
        self.query = query
        self.retried = retried

    @classmethod
    def from_mysql(
        cls, exc: MySQLError, query: Optional[Query] = None, retried: bool = False
    ) -> "DatabaseError":
        """Wrap a driver error, keeping its code and state."""
        errno = exc.errno if exc.errno not in (None, -1) else None
        return cls(
            exc.msg or str(exc),
            errno=errno,
            sqlstate=exc.sqlstate,
            query=query,
            retried=retried,
        )

    def __str__(self) -> str:
        if self.errno is None:
            return self.msg
        if self.sqlstate:
            return f"{self.errno} ({self.sqlstate}): {self.msg}"
        return f"{self.errno}: {self.msg}"


class DatabaseConnectionError(DatabaseError):
    """A connection could not be established. Never retried."""

    kind = ErrorKind.CONNECTION


class TransientConnectionError(DatabaseError):
    """The session was dropped while an operation was in flight."""

    kind = ErrorKind.TRANSIENT_CONNECTION


class QueryError(DatabaseError):
    """The statement itself failed (syntax, constraint, permission)."""

    kind = ErrorKind.QUERY


class WriteNotAllowedError(QueryError):
    """A write was attempted against a host outside the write allowlist."""
