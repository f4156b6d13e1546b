"""DuckDB repository for opening book lines."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping

import duckdb

from movegrade.board_state import position_key as normalize_position_key


class DuckDbOpeningBookRepository:
    """Known book moves keyed by ECO code and by position."""

    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    def upsert_opening(
        self,
        eco: str,
        name: str | None = None,
        book_moves: Iterable[str] = (),
        moves_by_position: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        """Store an opening; ``moves_by_position`` keys may be full FENs."""
        self._conn.execute(
            "INSERT OR REPLACE INTO openings (eco, name, book_moves) VALUES (?, ?, ?)",
            [eco, name, json.dumps(list(book_moves))],
        )
        rows = [
            (normalize_position_key(fen), move, eco)
            for fen, moves in (moves_by_position or {}).items()
            for move in moves
        ]
        if rows:
            self._conn.executemany(
                "INSERT OR REPLACE INTO opening_positions (position_key, move, eco) "
                "VALUES (?, ?, ?)",
                rows,
            )

    def book_moves(self, eco: str | None, position_key: str) -> list[str]:
        """Book moves for the position, falling back to the ECO line."""
        rows = self._conn.execute(
            "SELECT move FROM opening_positions WHERE position_key = ? ORDER BY move",
            [position_key],
        ).fetchall()
        if rows:
            return [str(row[0]) for row in rows]
        if not eco:
            return []
        row = self._conn.execute("SELECT book_moves FROM openings WHERE eco = ?", [eco]).fetchone()
        if not row or not row[0]:
            return []
        return [str(move) for move in json.loads(str(row[0]))]


__all__ = ["DuckDbOpeningBookRepository"]
