"""Database models and data structures."""

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


Params = Union[Mapping[str, Any], Sequence[Any], None]


class _NotFound:
    """Sentinel returned when a lookup matches no row."""

    _instance: Optional["_NotFound"] = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __reduce__(self):
        return (_NotFound, ())


NOT_FOUND = _NotFound()


class QueryKind(str, Enum):
    """Shape of a single operation."""

    SCALAR = "scalar"
    ROWS = "rows"
    FIND_ONE = "find_one"
    PROJECTION = "projection"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def is_write(self) -> bool:
        return self in (QueryKind.INSERT, QueryKind.UPDATE, QueryKind.DELETE)


class ErrorKind(str, Enum):
    """Classification of a failed operation."""

    CONNECTION = "connection"
    TRANSIENT_CONNECTION = "transient_connection"
    QUERY = "query"


@dataclass(frozen=True)
class ConnectionConfig:
    """Parameters used to open a physical MySQL connection."""

    host: str
    database: str
    user: str
    password: str = field(default="", repr=False)
    port: int = 3306
    charset: str = "utf8mb4"
    collation: Optional[str] = None
    connect_timeout: Optional[int] = None

    @property
    def dsn(self) -> str:
        """Connection descriptor without credentials."""
        return f"mysql://{self.user}@{self.host}:{self.port}/{self.database}?charset={self.charset}"

    def connect_args(self) -> Dict[str, Any]:
        """Keyword arguments for ``mysql.connector.connect``."""
        args: Dict[str, Any] = {
            'host': self.host,
            'port': self.port,
            'database': self.database,
            'user': self.user,
            'password': self.password,
            'charset': self.charset,
            'autocommit': True,
        }
        if self.collation:
            args['collation'] = self.collation
        if self.connect_timeout is not None:
            args['connection_timeout'] = self.connect_timeout
        return args


@dataclass(frozen=True)
class Query:
    """One operation: its kind, SQL text and bound parameters."""

    kind: QueryKind
    sql: str
    params: Params = None

    def bound_params(self) -> Union[Dict[str, Any], Tuple[Any, ...], None]:
        """Parameters in the form the driver expects."""
        if self.params is None:
            return None
        if isinstance(self.params, Mapping):
            return dict(self.params)
        return tuple(self.params)


@dataclass
class QueryResult:
    """Outcome of an operation run through ``QueryExecutor.execute``."""

    query: Query
    value: Any = None
    error: Optional[Exception] = None
    reconnected: bool = False
    execution_time: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_success(self) -> bool:
        """Check if the operation completed without error."""
        return self.error is None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        if self.error is None:
            return None
        return getattr(self.error, 'kind', ErrorKind.QUERY)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a dictionary."""
        value = None if self.value is NOT_FOUND else self.value
        return {
            "kind": self.query.kind.value,
            "query": self.query.sql,
            "value": value,
            "found": self.value is not NOT_FOUND,
            "error": str(self.error) if self.error is not None else None,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "reconnected": self.reconnected,
            "execution_time": self.execution_time,
            "timestamp": self.timestamp.isoformat(),
            "success": self.is_success,
        }
