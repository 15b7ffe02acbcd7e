"""Database connection management."""

import logging
from typing import Any, Callable, Optional

import mysql.connector
from mysql.connector import Error as MySQLError

from .errors import DatabaseConnectionError
from .models import ConnectionConfig

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns exactly one MySQL connection and replaces it on demand.

    The manager is not thread-safe. Use one instance per logical session, or
    serialize access externally.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        connect_factory: Optional[Callable[..., Any]] = None,
    ):
        """Initialize the connection manager. No connection is opened here."""
        self.config = config
        self._connect_factory = connect_factory or mysql.connector.connect
        self._handle: Optional[Any] = None
        self.connect_count = 0
        self.reconnect_count = 0

    @property
    def is_connected(self) -> bool:
        """Whether a handle is currently held."""
        return self._handle is not None

    def connect(self) -> Any:
        """Open a new physical connection, discarding the current one."""
        self._discard()
        try:
            handle = self._connect_factory(**self.config.connect_args())
        except MySQLError as e:
            logger.error(f"Failed to connect to {self.config.dsn}: {e}")
            raise DatabaseConnectionError.from_mysql(e) from e

        self._handle = handle
        self.connect_count += 1
        logger.info(f"Connected to {self.config.dsn}")
        return handle

    def current_handle(self) -> Any:
        """Return the live connection, connecting lazily on first use."""
        if self._handle is None:
            return self.connect()
        return self._handle

    def reconnect(self) -> Any:
        """Drop the current connection and open a fresh one."""
        logger.warning(f"Reconnecting to {self.config.dsn}")
        self.reconnect_count += 1
        return self.connect()

    def ping(self) -> bool:
        """Test the database connection."""
        try:
            cursor = self.current_handle().cursor()
            cursor.execute("SELECT 1")
            cursor.fetchone()
            cursor.close()
            return True
        except (MySQLError, DatabaseConnectionError) as e:
            logger.error(f"Connection test failed: {e}")
            return False

    def close(self) -> None:
        """Close the connection, if one is open."""
        if self._handle is not None:
            logger.info(f"Closing connection to {self.config.dsn}")
        self._discard()

    def _discard(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.close()
        except Exception as e:
            # the old session is usually already dead
            logger.debug(f"Ignoring error while closing stale connection: {e}")

    def __enter__(self) -> "ConnectionManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
