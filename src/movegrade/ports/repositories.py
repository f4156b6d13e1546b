"""Repository port interfaces for database access boundaries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Protocol

from movegrade.domain.analysis_log_entry import AnalysisLogEntry
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.domain.game_record import GameRecord
from movegrade.domain.review_position import ReviewPosition


class GameRepository(Protocol):
    """Repository interface for games and their analysis markers."""

    def get(self, game_id: str) -> GameRecord | None:
        """Return the game or None."""

    def upsert(self, record: GameRecord) -> None:
        """Insert or replace a game."""

    def update(self, game_id: str, changes: Mapping[str, object]) -> None:
        """Set the given columns on one game."""

    def list_by_status(
        self,
        status: AnalysisStatus,
        limit: int | None = None,
    ) -> list[GameRecord]:
        """Return games in ``status``, oldest first."""

    def count_by_status(self, status: AnalysisStatus) -> int:
        """Return how many games are in ``status``."""

    def next_pending(self) -> GameRecord | None:
        """Return the oldest pending game."""


class AnalysisLogRepository(Protocol):
    """Repository interface for per-ply analysis logs."""

    def fetch(self, game_id: str) -> list[AnalysisLogEntry]:
        """Return a game's log in ply order."""

    def append(self, game_id: str, entry: AnalysisLogEntry) -> None:
        """Persist one entry."""

    def delete(self, game_id: str) -> None:
        """Drop a game's log."""


class ReviewPositionRepository(Protocol):
    """Repository interface for review positions."""

    def bulk_insert(self, positions: Iterable[ReviewPosition]) -> int:
        """Insert positions and return the inserted count."""

    def delete_for_game(self, game_id: str) -> None:
        """Drop every position derived from a game."""

    def count(self) -> int:
        """Return the number of stored positions."""

    def evict_to_limit(self, limit: int) -> int:
        """Trim the table to ``limit`` rows and return the deleted count."""

    def due(self, now: datetime, limit: int = 20) -> list[ReviewPosition]:
        """Return positions due for review."""

    def flag(self, review_id: str) -> ReviewPosition | None:
        """Flag a position for extra review and return it, or None when unknown."""


class OpeningBookRepository(Protocol):
    """Repository interface for opening book lookups."""

    def upsert_opening(
        self,
        eco: str,
        name: str | None = None,
        book_moves: Iterable[str] = (),
        moves_by_position: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        """Store or update the book lines of one ECO code."""

    def book_moves(self, eco: str | None, position_key: str) -> list[str]:
        """Return known book moves for a position or ECO code."""
