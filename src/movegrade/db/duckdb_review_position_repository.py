"""DuckDB repository for review positions."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import duckdb

from movegrade.db._rows import first_row, rows_to_dicts
from movegrade.db._timestamps import from_db_row, to_db_timestamp
from movegrade.domain.review_position import ReviewPosition
from movegrade.utils.logger import get_logger

logger = get_logger(__name__)

_REVIEW_COLUMNS = (
    "review_id",
    "game_id",
    "ply",
    "fen",
    "move",
    "best_move",
    "classification",
    "question_type",
    "side",
    "phase",
    "priority",
    "score",
    "loss",
    "tags",
    "motifs",
    "missed_win",
    "missed_defense",
    "plan_hint",
    "explanation",
    "created_at",
    "next_review_at",
    "last_seen_at",
    "review_flag",
)
_TIMESTAMP_COLUMNS = ("created_at", "next_review_at", "last_seen_at")
_FLAG_PRIORITY_BONUS = 2


def _to_position(row: dict[str, object]) -> ReviewPosition:
    return ReviewPosition.from_row(from_db_row(row, _TIMESTAMP_COLUMNS))


class DuckDbReviewPositionRepository:
    """Persist review positions and keep the table under its size limit."""

    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    def bulk_insert(self, positions: Iterable[ReviewPosition]) -> int:
        rows = [position.to_row() for position in positions]
        if not rows:
            return 0
        placeholders = ", ".join("?" for _ in _REVIEW_COLUMNS)
        self._conn.executemany(
            f"INSERT OR REPLACE INTO review_positions ({', '.join(_REVIEW_COLUMNS)}) "
            f"VALUES ({placeholders})",
            [
                [
                    to_db_timestamp(row[column])  # type: ignore[arg-type]
                    if column in _TIMESTAMP_COLUMNS
                    else row[column]
                    for column in _REVIEW_COLUMNS
                ]
                for row in rows
            ],
        )
        return len(rows)

    def delete_for_game(self, game_id: str) -> None:
        self._conn.execute("DELETE FROM review_positions WHERE game_id = ?", [game_id])

    def for_game(self, game_id: str) -> list[ReviewPosition]:
        result = self._conn.execute(
            "SELECT * FROM review_positions WHERE game_id = ? ORDER BY ply", [game_id]
        )
        return [_to_position(row) for row in rows_to_dicts(result)]

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM review_positions").fetchone()
        return int(row[0]) if row else 0

    def evict_to_limit(self, limit: int) -> int:
        """Delete the lowest-priority, least recently seen rows above ``limit``."""
        excess = self.count() - max(0, limit)
        if excess <= 0:
            return 0
        self._conn.execute(
            """
            DELETE FROM review_positions
            WHERE review_id IN (
                SELECT review_id
                FROM review_positions
                ORDER BY priority ASC, COALESCE(last_seen_at, created_at) ASC, review_id ASC
                LIMIT ?
            )
            """,
            [excess],
        )
        logger.info("Evicted %s review positions over limit %s", excess, limit)
        return excess

    def due(self, now: datetime, limit: int = 20) -> list[ReviewPosition]:
        """Positions whose next review time has passed, highest priority first."""
        result = self._conn.execute(
            """
            SELECT *
            FROM review_positions
            WHERE next_review_at <= ?
            ORDER BY priority DESC, next_review_at ASC, review_id ASC
            LIMIT ?
            """,
            [to_db_timestamp(now), limit],
        )
        return [_to_position(row) for row in rows_to_dicts(result)]

    def flag(self, review_id: str) -> ReviewPosition | None:
        """Mark a position for extra review; flagged positions outlive eviction longer.

        Flagging twice keeps the first bonus. Returns None for an unknown id.
        """
        self._conn.execute(
            """
            UPDATE review_positions
            SET review_flag = TRUE, priority = priority + ?
            WHERE review_id = ? AND NOT COALESCE(review_flag, FALSE)
            """,
            [_FLAG_PRIORITY_BONUS, review_id],
        )
        result = self._conn.execute(
            "SELECT * FROM review_positions WHERE review_id = ?",
            [review_id],
        )
        row = first_row(result)
        return _to_position(row) if row is not None else None


__all__ = ["DuckDbReviewPositionRepository"]
