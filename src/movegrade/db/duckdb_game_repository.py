"""DuckDB repository for game metadata and analysis markers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields
from datetime import datetime

import duckdb

from movegrade.db._rows import first_row, rows_to_dicts
from movegrade.db._timestamps import from_db_row, to_db_timestamp
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.domain.game_record import GameRecord
from movegrade.utils.now import Now

GAME_COLUMNS = tuple(item.name for item in fields(GameRecord))
TIMESTAMP_COLUMNS = ("played_at", "started_at", "heartbeat_at", "analyzed_at", "created_at")


def _db_value(column: str, value: object) -> object:
    if column in TIMESTAMP_COLUMNS and isinstance(value, datetime):
        return to_db_timestamp(value)
    if column == "status" and value is not None:
        return str(value)
    return value


def _to_record(row: Mapping[str, object]) -> GameRecord:
    return GameRecord.from_row(from_db_row(row, TIMESTAMP_COLUMNS))


class DuckDbGameRepository:
    """Persist games and their analysis state in DuckDB."""

    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    def get(self, game_id: str) -> GameRecord | None:
        row = first_row(self._conn.execute("SELECT * FROM games WHERE game_id = ?", [game_id]))
        return _to_record(row) if row is not None else None

    def upsert(self, record: GameRecord) -> None:
        """Insert or replace a game row; ``created_at`` defaults to now."""
        if record.created_at is None:
            record.created_at = Now.as_datetime()
        row = record.to_row()
        placeholders = ", ".join("?" for _ in GAME_COLUMNS)
        self._conn.execute(
            f"INSERT OR REPLACE INTO games ({', '.join(GAME_COLUMNS)}) VALUES ({placeholders})",
            [_db_value(column, row[column]) for column in GAME_COLUMNS],
        )

    def update(self, game_id: str, changes: Mapping[str, object]) -> None:
        """Set the given columns on one game.

        Raises:
            ValueError: a column name is not a game field.
        """
        if not changes:
            return
        unknown = sorted(set(changes) - set(GAME_COLUMNS) - {"game_id"})
        if unknown or "game_id" in changes:
            raise ValueError(f"Unknown game columns: {unknown or ['game_id']}")
        columns = list(changes)
        assignments = ", ".join(f"{column} = ?" for column in columns)
        self._conn.execute(
            f"UPDATE games SET {assignments} WHERE game_id = ?",
            [*(_db_value(column, changes[column]) for column in columns), game_id],
        )

    def list_by_status(
        self,
        status: AnalysisStatus,
        limit: int | None = None,
    ) -> list[GameRecord]:
        """Games in ``status``, oldest first."""
        query = "SELECT * FROM games WHERE status = ? ORDER BY created_at, game_id"
        params: list[object] = [str(status)]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        return [_to_record(row) for row in rows_to_dicts(self._conn.execute(query, params))]

    def count_by_status(self, status: AnalysisStatus) -> int:
        row = self._conn.execute(
            "SELECT COUNT(*) FROM games WHERE status = ?", [str(status)]
        ).fetchone()
        return int(row[0]) if row else 0

    def next_pending(self) -> GameRecord | None:
        pending = self.list_by_status(AnalysisStatus.PENDING, limit=1)
        return pending[0] if pending else None


__all__ = ["DuckDbGameRepository"]
