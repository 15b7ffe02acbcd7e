"""SQL builders for the supported operation shapes.

Values always travel as bound parameters. Table and column names are
interpolated as text, so they are checked against a plain-identifier pattern;
projection column lists and raw WHERE text are trusted caller input and are
used verbatim.
"""

import re
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from .models import Params, Query, QueryKind

Pair = Tuple[str, Any]
Fields = Union[Mapping[str, Any], Iterable[Pair]]

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*)?$")

SET_PREFIX = "set_"
WHERE_PREFIX = "where_"


def check_identifier(name: str) -> str:
    """Return ``name`` if it is a plain (optionally qualified) identifier."""
    if not isinstance(name, str) or not IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def as_pairs(fields: Fields) -> Tuple[Pair, ...]:
    """Normalize a mapping or iterable of (column, value) pairs.

    Order is preserved and columns are validated; a column may appear once.
    """
    items = fields.items() if isinstance(fields, Mapping) else fields
    pairs = []
    seen = set()
    for column, value in items:
        check_identifier(column)
        if column in seen:
            raise ValueError(f"Duplicate column: {column}")
        seen.add(column)
        pairs.append((column, value))
    return tuple(pairs)


def placeholder_name(prefix: str, column: str) -> str:
    return prefix + column.replace(".", "_")


def bind(params: Dict[str, Any], prefix: str, column: str, value: Any) -> str:
    """Add ``value`` to ``params`` under the column's placeholder and return the name.

    Qualified names lose their dot, so ``x.a`` and ``x_a`` share a
    placeholder; a second column mapping to a bound name is rejected.
    """
    name = placeholder_name(prefix, column)
    if name in params:
        raise ValueError(f"Column {column!r} maps to placeholder {name!r}, which is already bound")
    params[name] = value
    return name


def build_projection(
    table: str,
    columns: Optional[Sequence[str]] = None,
    where: Optional[str] = None,
    params: Params = None,
) -> Query:
    """SELECT <columns> FROM <table> [WHERE <where>]."""
    cols = ", ".join(columns) if columns else "*"
    sql = f"SELECT {cols} FROM {check_identifier(table)}"
    if where:
        sql += f" WHERE {where}"
    return Query(QueryKind.PROJECTION, sql, params)


def build_insert(table: str, data: Fields) -> Query:
    pairs = as_pairs(data)
    if not pairs:
        raise ValueError("Insert requires at least one column")

    columns = ", ".join(column for column, _ in pairs)
    params: Dict[str, Any] = {}
    placeholders = ", ".join(f"%({bind(params, '', column, value)})s" for column, value in pairs)
    sql = f"INSERT INTO {check_identifier(table)} ({columns}) VALUES ({placeholders})"
    return Query(QueryKind.INSERT, sql, params)


def build_update(
    table: str,
    data: Fields,
    where: Union[Fields, str, None] = None,
    params: Optional[Mapping[str, Any]] = None,
) -> Query:
    """UPDATE <table> SET <assignments> [WHERE <conditions>].

    SET placeholders are namespaced ``set_<column>`` and mapping WHERE
    placeholders ``where_<column>``, so one column may appear on both sides.
    A string ``where`` is used verbatim with ``params`` bound alongside.
    """
    pairs = as_pairs(data)
    if not pairs:
        raise ValueError("Update requires at least one column")

    bound: Dict[str, Any] = {}
    assignments = []
    for column, value in pairs:
        name = bind(bound, SET_PREFIX, column, value)
        assignments.append(f"{column} = %({name})s")

    conditions = []
    if isinstance(where, str):
        if where.strip():
            conditions.append(where)
        for name, value in (params or {}).items():
            if name in bound:
                raise ValueError(f"Parameter {name!r} collides with a SET placeholder")
            bound[name] = value
    elif where is not None:
        for column, value in as_pairs(where):
            name = bind(bound, WHERE_PREFIX, column, value)
            conditions.append(f"{column} = %({name})s")

    sql = f"UPDATE {check_identifier(table)} SET {', '.join(assignments)}"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    return Query(QueryKind.UPDATE, sql, bound)


def build_delete(table: str, where: str, params: Params = None) -> Query:
    if not where or not where.strip():
        raise ValueError("Delete requires a WHERE clause")
    sql = f"DELETE FROM {check_identifier(table)} WHERE {where}"
    return Query(QueryKind.DELETE, sql, params)
