"""DuckDB repository for per-ply analysis logs."""

from __future__ import annotations

from collections.abc import Iterable

import duckdb

from movegrade.db._rows import rows_to_dicts
from movegrade.domain.analysis_log_entry import AnalysisLogEntry

_LOG_COLUMNS = (
    "game_id",
    "ply",
    "fen",
    "move",
    "san",
    "side",
    "best_move",
    "classification",
    "phase",
    "score",
    "mate",
    "score_after",
    "eval_diff",
    "accuracy",
    "pv_lines",
    "motifs",
    "missed_win",
    "missed_defense",
    "book_move",
    "plan_hint",
    "explanation",
)


class DuckDbAnalysisLogRepository:
    """Append-only per-ply analysis trace keyed by ``(game_id, ply)``."""

    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    def fetch(self, game_id: str) -> list[AnalysisLogEntry]:
        result = self._conn.execute(
            "SELECT * FROM analysis_log WHERE game_id = ? ORDER BY ply", [game_id]
        )
        return [AnalysisLogEntry.from_row(row) for row in rows_to_dicts(result)]

    def append(self, game_id: str, entry: AnalysisLogEntry) -> None:
        row = entry.to_row(game_id)
        placeholders = ", ".join("?" for _ in _LOG_COLUMNS)
        self._conn.execute(
            f"INSERT OR REPLACE INTO analysis_log ({', '.join(_LOG_COLUMNS)}) "
            f"VALUES ({placeholders})",
            [row[column] for column in _LOG_COLUMNS],
        )

    def delete(self, game_id: str) -> None:
        self._conn.execute("DELETE FROM analysis_log WHERE game_id = ?", [game_id])

    def classification_counts(self, game_ids: Iterable[str] | None = None) -> dict[str, int]:
        """Count classifications, optionally limited to some games."""
        query = "SELECT classification, COUNT(*) AS total FROM analysis_log"
        params: list[object] = []
        if game_ids is not None:
            ids = list(game_ids)
            if not ids:
                return {}
            query += f" WHERE game_id IN ({', '.join('?' for _ in ids)})"
            params.extend(ids)
        query += " GROUP BY classification ORDER BY classification"
        return {
            str(row["classification"]): int(row["total"])  # type: ignore[call-overload]
            for row in rows_to_dicts(self._conn.execute(query, params))
        }


__all__ = ["DuckDbAnalysisLogRepository"]
