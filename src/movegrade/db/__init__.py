"""DuckDB persistence for games, analysis logs, review positions and openings."""

from movegrade.db.duckdb_store import (  # noqa: F401
    DuckDbStore,
    get_connection,
    init_schema,
    open_store,
)
