"""Tests for database models."""

import copy
import pickle
from datetime import datetime

from resilient_sql.database.errors import QueryError
from resilient_sql.database.models import NOT_FOUND, ErrorKind, Query, QueryKind, QueryResult, _NotFound


class TestNotFound:
    """Test cases for the not-found sentinel."""

    def test_singleton(self):
        assert _NotFound() is NOT_FOUND
        assert copy.deepcopy(NOT_FOUND) is NOT_FOUND
        assert pickle.loads(pickle.dumps(NOT_FOUND)) is NOT_FOUND

    def test_falsy(self):
        assert not NOT_FOUND
        assert NOT_FOUND is not None
        assert repr(NOT_FOUND) == "NOT_FOUND"


class TestQuery:
    """Test cases for Query."""

    def test_write_kinds(self):
        assert QueryKind.INSERT.is_write
        assert QueryKind.UPDATE.is_write
        assert QueryKind.DELETE.is_write
        assert not QueryKind.ROWS.is_write

    def test_bound_params(self):
        assert Query(QueryKind.ROWS, "SELECT 1").bound_params() is None
        assert Query(QueryKind.ROWS, "SELECT %s", [1]).bound_params() == (1,)
        assert Query(QueryKind.ROWS, "SELECT %(a)s", {"a": 1}).bound_params() == {"a": 1}

    def test_bound_params_copy(self):
        params = {"a": 1}
        query = Query(QueryKind.ROWS, "SELECT %(a)s", params)

        query.bound_params()["a"] = 2

        assert params == {"a": 1}


class TestQueryResult:
    """Test cases for QueryResult."""

    def test_success_to_dict(self):
        timestamp = datetime.now()
        result = QueryResult(
            query=Query(QueryKind.ROWS, "SELECT * FROM test"),
            value=[{'id': 1}],
            execution_time=0.5,
            timestamp=timestamp,
        )

        result_dict = result.to_dict()

        assert result_dict['kind'] == "rows"
        assert result_dict['query'] == "SELECT * FROM test"
        assert result_dict['value'] == [{'id': 1}]
        assert result_dict['found'] is True
        assert result_dict['timestamp'] == timestamp.isoformat()
        assert result_dict['success'] is True
        assert result_dict['error'] is None
        assert result_dict['error_kind'] is None

    def test_failure(self):
        result = QueryResult(
            query=Query(QueryKind.INSERT, "INSERT INTO t (a) VALUES (%(a)s)"),
            error=QueryError("Duplicate entry", errno=1062),
        )

        assert not result.is_success
        assert result.error_kind == ErrorKind.QUERY
        assert result.to_dict()['error'] == "1062: Duplicate entry"
