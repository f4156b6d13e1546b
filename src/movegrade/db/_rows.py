"""Turn DuckDB results into column-keyed dictionaries."""

from __future__ import annotations

import duckdb

QueryResult = duckdb.DuckDBPyConnection | duckdb.DuckDBPyRelation


def _columns(result: QueryResult) -> list[str]:
    return [desc[0] for desc in result.description]


def rows_to_dicts(result: QueryResult) -> list[dict[str, object]]:
    columns = _columns(result)
    return [dict(zip(columns, row, strict=True)) for row in result.fetchall()]


def first_row(result: QueryResult) -> dict[str, object] | None:
    """Return the first row of ``result`` or None when it is empty."""
    row = result.fetchone()
    if row is None:
        return None
    return dict(zip(_columns(result), row, strict=True))
