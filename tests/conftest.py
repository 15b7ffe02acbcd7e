"""Pytest configuration and shared fixtures."""

import os

import pytest
from unittest.mock import Mock
from mysql.connector import errors as mysql_errors

from resilient_sql.config.settings import Settings
from resilient_sql.database.connection import ConnectionManager
from resilient_sql.database.executor import QueryExecutor
from resilient_sql.database.models import ConnectionConfig


def make_handle(cursor=None):
    """Create a mock MySQL connection returning ``cursor`` for every call."""
    cursor = cursor or make_cursor()
    handle = Mock()
    handle.cursor.return_value = cursor
    handle.is_connected.return_value = True
    return handle


def make_cursor(fetchone=None, fetchall=None, rowcount=0, lastrowid=None, error=None):
    """Create a mock cursor; ``error`` is raised from ``execute``."""
    cursor = Mock()
    cursor.fetchone.return_value = fetchone
    cursor.fetchall.return_value = fetchall if fetchall is not None else []
    cursor.rowcount = rowcount
    cursor.lastrowid = lastrowid
    if error is not None:
        cursor.execute.side_effect = error
    return cursor


def gone_away():
    """Error the driver raises when the server closed an idle session."""
    return mysql_errors.OperationalError(msg="MySQL server has gone away", errno=2006, sqlstate="HY000")


def lost_connection():
    return mysql_errors.OperationalError(
        msg="Lost connection to MySQL server during query", errno=2013, sqlstate="HY000"
    )


def syntax_error():
    return mysql_errors.ProgrammingError(
        msg="You have an error in your SQL syntax", errno=1064, sqlstate="42000"
    )


def duplicate_key():
    return mysql_errors.IntegrityError(
        msg="Duplicate entry 'ann' for key 'users.name'", errno=1062, sqlstate="23000"
    )


def access_denied():
    return mysql_errors.ProgrammingError(
        msg="Access denied for user 'test_user'@'localhost'", errno=1045, sqlstate="28000"
    )


@pytest.fixture
def connection_config():
    """Connection parameters for a test database."""
    return ConnectionConfig(
        host="localhost",
        database="test_db",
        user="test_user",
        password="test_password",
    )


@pytest.fixture
def connect_factory():
    """Stand-in for ``mysql.connector.connect``; set ``side_effect`` to a list of handles."""
    return Mock()


@pytest.fixture
def manager(connection_config, connect_factory):
    return ConnectionManager(connection_config, connect_factory=connect_factory)


@pytest.fixture
def executor(manager):
    return QueryExecutor(manager)


@pytest.fixture
def mock_settings():
    """Create mock settings for testing."""
    settings = Mock(spec=Settings)
    settings.db_host = "localhost"
    settings.db_port = 3306
    settings.db_name = "test_db"
    settings.db_user = "test_user"
    settings.db_password = "test_password"
    settings.db_charset = "utf8mb4"
    settings.db_collation = None
    settings.db_connect_timeout = 10
    settings.db_allowed_write_hosts = ""
    settings.write_hosts = frozenset()
    settings.debug = False
    settings.log_level = "INFO"
    settings.default_output_format = "table"
    settings.connection_config.return_value = ConnectionConfig(
        host="localhost",
        database="test_db",
        user="test_user",
        password="test_password",
        connect_timeout=10,
    )
    return settings


@pytest.fixture(autouse=True)
def reset_global_instances():
    """Reset the settings singleton before and after each test."""
    import resilient_sql.config.settings
    resilient_sql.config.settings._settings = None

    yield

    resilient_sql.config.settings._settings = None


@pytest.fixture
def mysql_executor():
    """Executor against a real MySQL server named by TEST_DB_* variables."""
    host = os.environ.get("TEST_DB_HOST")
    if not host:
        pytest.skip("TEST_DB_HOST not set")
    config = ConnectionConfig(
        host=host,
        port=int(os.environ.get("TEST_DB_PORT", "3306")),
        database=os.environ.get("TEST_DB_NAME", "resilient_sql_test"),
        user=os.environ.get("TEST_DB_USER", "root"),
        password=os.environ.get("TEST_DB_PASSWORD", ""),
    )
    executor = QueryExecutor.from_config(config)
    yield executor
    executor.close()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires database)"
    )
